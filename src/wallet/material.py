"""
Key Material - In-memory signing identity.

A secret is either a mnemonic phrase or raw private key bytes, never both.
KeyMaterial pairs the secret with the key it yields and the address
derived from that key. None of these types serialize the secret in
their repr.
"""

import hashlib
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Optional, Union

from eth_keys import keys
from eth_keys.constants import SECPK1_N


class SourceKind(str, Enum):
    """How a wallet was imported. Values match the persisted "type" field."""
    MNEMONIC = "mnemonic"
    PRIVATE_KEY = "privateKey"


@dataclass(frozen=True, repr=False)
class MnemonicSecret:
    """A normalized BIP-39 phrase."""
    phrase: str

    kind: ClassVar[SourceKind] = SourceKind.MNEMONIC

    def to_payload(self) -> dict:
        return {"mnemonic": self.phrase}

    def __repr__(self) -> str:
        return "MnemonicSecret(<redacted>)"


@dataclass(frozen=True, repr=False)
class PrivateKeySecret:
    """A raw 32-byte secp256k1 private key."""
    key: bytes

    kind: ClassVar[SourceKind] = SourceKind.PRIVATE_KEY

    def __post_init__(self):
        if len(self.key) != 32:
            raise ValueError("Private key must be 32 bytes")

    @property
    def hex(self) -> str:
        return self.key.hex()

    def to_payload(self) -> dict:
        return {"privateKeyHex": self.hex}

    def __repr__(self) -> str:
        return "PrivateKeySecret(<redacted>)"


Secret = Union[MnemonicSecret, PrivateKeySecret]


class KeyMaterial:
    """
    An imported signing identity.

    Held only in memory for the session. Call lock() on logout to drop
    the secret and the signing key.
    """

    def __init__(self, address: str, secret: Secret, private_key: bytes,
                 derivation_path: Optional[str] = None):
        self._address = address
        self._secret = secret
        self._source_kind = secret.kind
        self._private_key = private_key
        self._public_key = keys.PrivateKey(private_key).public_key.to_compressed_bytes()
        self._derivation_path = derivation_path

    @property
    def address(self) -> str:
        return self._address

    @property
    def secret(self) -> Secret:
        """The imported secret (sensitive - only for encryption/backup)."""
        if self._secret is None:
            raise RuntimeError("Key material is locked")
        return self._secret

    @property
    def source_kind(self) -> SourceKind:
        return self._source_kind

    @property
    def public_key(self) -> bytes:
        """33-byte compressed secp256k1 public key."""
        return self._public_key

    @property
    def derivation_path(self) -> Optional[str]:
        """HD path the key came from, None for imported private keys."""
        return self._derivation_path

    @property
    def is_locked(self) -> bool:
        return self._private_key is None

    def sign(self, message: bytes) -> bytes:
        """
        Sign SHA-256(message) and return the 64-byte r||s signature.

        S is normalized to the lower half of the curve order, as Cosmos
        nodes reject high-S signatures.
        """
        if self._private_key is None:
            raise RuntimeError("Key material is locked")

        digest = hashlib.sha256(message).digest()
        signature = keys.PrivateKey(self._private_key).sign_msg_hash(digest)

        s = signature.s
        if s > SECPK1_N // 2:
            s = SECPK1_N - s

        return signature.r.to_bytes(32, "big") + s.to_bytes(32, "big")

    def lock(self) -> None:
        """Clear the secret and signing key from memory."""
        self._secret = None
        self._private_key = None

    def __repr__(self) -> str:
        return f"KeyMaterial(address={self._address!r}, source_kind={self.source_kind.value!r})"

    def __del__(self):
        """Attempt to clear sensitive data on destruction."""
        self.lock()
