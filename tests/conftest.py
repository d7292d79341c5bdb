"""
PLT Wallet Test Fixtures
"""

import base64
import secrets
from typing import Optional

import pytest

from models.chain import BroadcastResult, Coin
from networks import NETWORKS, DEFAULT_NETWORK
from wallet.crypto import EncryptedWalletRecord
from wallet.material import SourceKind
from wallet.signer import signer_from_private_key
from wallet.store import EncryptedWalletStore, MemoryKeyValueStore


# BIP-39 test vectors
ABANDON_12 = " ".join(["abandon"] * 11 + ["about"])
ABANDON_24 = " ".join(["abandon"] * 23 + ["art"])
BAD_CHECKSUM_12 = " ".join(["abandon"] * 12)


class FakeChainClient:
    """In-memory stand-in for the RPC client."""

    def __init__(self, chain_id: str = "plt-test0", height: int = 1234,
                 balance: int = 0, result: Optional[BroadcastResult] = None,
                 error: Optional[Exception] = None, signer=None):
        self.chain_id = chain_id
        self.height = height
        self.balance = balance
        self.result = result or BroadcastResult(code=0, transaction_hash="ABC123", raw_log="")
        self.error = error
        self.signer = signer
        self.sent = []
        self.disconnected = False

    def get_chain_id(self) -> str:
        return self.chain_id

    def get_height(self) -> int:
        return self.height

    def get_balance(self, address: str, denom: str) -> Coin:
        return Coin(denom=denom, amount=self.balance)

    def send_tokens(self, sender, destination, amount, fee, memo=None):
        self.sent.append({
            "sender": sender,
            "destination": destination,
            "amount": amount,
            "fee": fee,
            "memo": memo,
        })
        if self.error is not None:
            raise self.error
        return self.result

    def disconnect(self) -> None:
        self.disconnected = True


class FakeConnector:
    """Connector that hands out FakeChainClients and remembers them."""

    def __init__(self, chain_id: str = "plt-test0", balance: int = 0):
        self.chain_id = chain_id
        self.balance = balance
        self.clients: list[FakeChainClient] = []

    def __call__(self, rpc_url, signer=None) -> FakeChainClient:
        client = FakeChainClient(chain_id=self.chain_id, balance=self.balance, signer=signer)
        self.clients.append(client)
        return client


def make_record(address: str, label: Optional[str] = None,
                iv_size: int = 12, salt_size: int = 16) -> EncryptedWalletRecord:
    """A structurally valid record with random bytes (never decrypted)."""
    return EncryptedWalletRecord(
        address=address,
        source_kind=SourceKind.MNEMONIC,
        ciphertext=base64.b64encode(secrets.token_bytes(48)).decode(),
        iv=base64.b64encode(secrets.token_bytes(iv_size)).decode(),
        salt=base64.b64encode(secrets.token_bytes(salt_size)).decode(),
        label=label,
    )


@pytest.fixture
def network():
    """Default PLT test network."""
    return NETWORKS[DEFAULT_NETWORK]


@pytest.fixture
def backend() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture
def store(backend) -> EncryptedWalletStore:
    return EncryptedWalletStore(backend)


@pytest.fixture
def destination() -> str:
    """A valid plt address that is not the sender."""
    return signer_from_private_key("11" * 32).address


@pytest.fixture
def sender() -> str:
    return signer_from_private_key("22" * 32).address


@pytest.fixture
def fake_client() -> FakeChainClient:
    return FakeChainClient()


@pytest.fixture
def connector() -> FakeConnector:
    return FakeConnector(balance=10_000_000)
