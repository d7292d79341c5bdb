"""
Wallet Session - Import, persist, unlock and forget the active wallet.

Flow:
1. connect() checks the RPC node serves the expected chain
2. import_wallet() or unlock() makes a wallet active (state: unlocked)
3. new_transfer() hands out a TransferBuilder for the active wallet
4. lock() drops the secret and the signing client (state: locked)

One operation at a time: the caller sequences calls, the session does
not queue them.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from models.transfer import TransferBuilder
from networks import NetworkConfig
from wallet.crypto import decrypt_secret, encrypt_secret
from wallet.errors import (
    InvalidMnemonicError,
    InvalidPrivateKeyError,
    MalformedSecretError,
    WalletError,
    WalletNotFoundError,
)
from wallet.material import KeyMaterial, SourceKind
from wallet.signer import (
    shorten_address,
    signer_from_mnemonic,
    signer_from_private_key,
    signer_from_secret,
)
from wallet.store import EncryptedWalletStore
from .client import ChainClient, ClientConnector, connect_client

logger = logging.getLogger(__name__)


STATE_LOCKED = "locked"
STATE_UNLOCKED = "unlocked"


@dataclass(frozen=True)
class ImportResult:
    """Outcome of importing a wallet."""
    key_material: KeyMaterial
    persisted: bool
    message: str


class WalletSession:
    """
    Holds at most one active wallet and its signing client.

    Usage:
        session = WalletSession(network, store, connector)
        session.connect()
        session.import_wallet(SourceKind.MNEMONIC, phrase, password="pw", persist=True)
        builder = session.new_transfer()

        # Later, after restart
        session.unlock(address, "pw")
    """

    def __init__(self, network: NetworkConfig, store: EncryptedWalletStore,
                 connector: ClientConnector):
        self.network = network
        self.store = store
        self._connector = connector
        self._query_client: Optional[ChainClient] = None
        self._signing_client: Optional[ChainClient] = None
        self._active: Optional[KeyMaterial] = None
        self.chain_id: Optional[str] = None
        self.height: int = 0
        self.balance: int = 0

    @property
    def state(self) -> str:
        return STATE_UNLOCKED if self._active is not None else STATE_LOCKED

    @property
    def active_wallet(self) -> Optional[KeyMaterial]:
        return self._active

    @property
    def is_connected(self) -> bool:
        return self._query_client is not None

    # ============================================
    # Connection
    # ============================================

    def connect(self) -> int:
        """
        Connect a read-only client and return the current height.

        Raises ChainIdMismatchError if the node serves another chain.
        """
        client = connect_client(self._connector, self.network.rpc_url, self.network.chain_id)
        height = client.get_height()

        if self._query_client is not None:
            self._query_client.disconnect()

        self._query_client = client
        self.chain_id = self.network.chain_id
        self.height = height
        return height

    def disconnect(self) -> None:
        """Drop both clients and lock the active wallet."""
        if self._query_client is not None:
            self._query_client.disconnect()
            self._query_client = None
        self.lock()
        self.chain_id = None
        self.height = 0

    def _activate(self, material: KeyMaterial) -> None:
        """Open a signing client for material and make it the active wallet."""
        client = None
        try:
            client = connect_client(
                self._connector, self.network.rpc_url, self.network.chain_id, material
            )
            balance = client.get_balance(material.address, self.network.base_denom)
        except Exception:
            if client is not None:
                client.disconnect()
            material.lock()
            raise

        self._close_signing_client()
        if self._active is not None and self._active is not material:
            self._active.lock()

        self._signing_client = client
        self._active = material
        self.balance = balance.amount

    def _close_signing_client(self) -> None:
        if self._signing_client is not None:
            self._signing_client.disconnect()
            self._signing_client = None

    # ============================================
    # Wallet Lifecycle
    # ============================================

    def import_wallet(self, source_kind: SourceKind, raw: str, password: Optional[str] = None,
                      persist: bool = False, label: Optional[str] = None) -> ImportResult:
        """
        Import a wallet from a mnemonic or hex private key.

        With persist and a password the secret is encrypted and stored.
        Otherwise any stored copy for the same address is removed.
        """
        if not self.is_connected:
            raise WalletError("Connect to a network before importing a wallet")

        if source_kind is SourceKind.MNEMONIC:
            material = signer_from_mnemonic(raw, self.network.address_prefix)
        else:
            material = signer_from_private_key(raw, self.network.address_prefix)

        self._activate(material)

        message = f"Wallet imported. Address {shorten_address(material.address)}."
        persisted = False

        if persist and password:
            record = encrypt_secret(
                material.secret, password, material.source_kind, material.address,
                label=(label or "").strip() or None,
            )
            self.store.save(record)
            persisted = True
            message = f"{message} Encrypted copy saved."
        else:
            self.store.remove(material.address)
            if persist:
                message = f"{message} Not saved: a password is required to encrypt it."

        logger.info(f"Imported {material.source_kind.value} wallet {material.address} (persisted={persisted})")
        return ImportResult(key_material=material, persisted=persisted, message=message)

    def unlock(self, address: str, password: str) -> KeyMaterial:
        """
        Restore a stored wallet with its password.

        Raises:
            WalletNotFoundError: Nothing stored for address
            DecryptionError: Wrong password or corrupted record
            MalformedSecretError: Stored secret does not yield the stored address
        """
        record = self.store.load(address)
        if record is None:
            raise WalletNotFoundError(f"Unknown wallet: {address}")

        secret = decrypt_secret(record, password)
        try:
            material = signer_from_secret(secret, self.network.address_prefix)
        except (InvalidMnemonicError, InvalidPrivateKeyError) as e:
            raise MalformedSecretError("Stored wallet secret is not a valid key") from e
        if material.address != record.address:
            material.lock()
            raise MalformedSecretError("Stored wallet does not match its address")

        self._activate(material)
        logger.info(f"Unlocked wallet {material.address}")
        return material

    def forget(self, address: str) -> bool:
        """Delete a stored wallet. The active session is left alone."""
        return self.store.remove(address)

    def lock(self) -> None:
        """Clear the active wallet from memory and close its signing client."""
        self._close_signing_client()
        if self._active is not None:
            self._active.lock()
            self._active = None
        self.balance = 0

    # ============================================
    # Queries & Transfers
    # ============================================

    def refresh_balance(self) -> int:
        """Fetch the active wallet's balance in base units."""
        if self._active is None or self._signing_client is None:
            raise WalletError("No wallet is unlocked")
        coin = self._signing_client.get_balance(self._active.address, self.network.base_denom)
        self.balance = coin.amount
        return self.balance

    def new_transfer(self) -> TransferBuilder:
        """A fresh transfer builder for the active wallet."""
        if self._active is None or self._signing_client is None:
            raise WalletError("Unlock a wallet before sending tokens")
        return TransferBuilder(
            self._signing_client, self.network, self._active.address, self.balance
        )
