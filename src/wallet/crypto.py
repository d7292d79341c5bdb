"""
Wallet Crypto - Password-based secret encryption.

- PBKDF2-HMAC-SHA256 key derivation (250,000 iterations)
- AES-256-GCM authenticated encryption
- Fresh 96-bit nonce and 128-bit salt on every encryption

Secrets never exist unencrypted in a stored record. A record plus the
password is all that is needed to decrypt it.
"""

import base64
import binascii
import json
import logging
import os
import secrets
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional

# Cryptography
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from .errors import CorruptedRecordError, DecryptionError, MalformedSecretError
from .material import MnemonicSecret, PrivateKeySecret, Secret, SourceKind

logger = logging.getLogger(__name__)


# ============================================
# Security Constants
# ============================================

PBKDF2_ITERATIONS = 250_000
PBKDF2_KEY_LEN = 32  # 256 bits for AES-256

# AES-GCM constants
AES_IV_SIZE = 12    # 96 bits (recommended for GCM)
AES_TAG_SIZE = 16
SALT_SIZE = 16      # 128 bits

# Secure file permissions (Unix only)
SECURE_FILE_MODE = 0o600  # Owner read/write only


def set_secure_permissions(filepath: Path) -> None:
    """
    Set restrictive file permissions on Unix systems.

    Sets file to mode 0600 (owner read/write only) to protect wallet data.
    No-op on Windows (NTFS uses ACLs, not Unix permissions).
    """
    if os.name == 'posix':
        try:
            os.chmod(filepath, SECURE_FILE_MODE)
        except OSError as e:
            # Best effort - don't fail save operation if chmod fails
            logger.warning(f"Could not restrict permissions on {filepath}: {e}")


# ============================================
# Stored Record
# ============================================

def _b64encode(data: bytes) -> str:
    return base64.b64encode(data).decode('ascii')


def _b64decode(value, field_name: str) -> bytes:
    if not isinstance(value, str):
        raise CorruptedRecordError(f"Field '{field_name}' must be base64 text")
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as e:
        raise CorruptedRecordError(f"Field '{field_name}' is not valid base64") from e


@dataclass(frozen=True)
class EncryptedWalletRecord:
    """
    An encrypted wallet as persisted in the store.

    Binary fields are kept as base64 text, exactly as stored.
    """
    address: str
    source_kind: SourceKind
    ciphertext: str     # base64(ciphertext || tag)
    iv: str             # base64, 12 bytes
    salt: str           # base64, 16 bytes
    label: Optional[str] = None

    def with_label(self, label: Optional[str]) -> "EncryptedWalletRecord":
        """Copy with a new display name; crypto fields untouched."""
        return replace(self, label=label)

    def to_dict(self) -> dict:
        data = {
            "address": self.address,
            "type": self.source_kind.value,
            "ciphertext": self.ciphertext,
            "iv": self.iv,
            "salt": self.salt,
        }
        if self.label is not None:
            data["name"] = self.label
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "EncryptedWalletRecord":
        """
        Create from stored JSON with validation.

        Raises CorruptedRecordError for missing fields, an unknown type,
        bad base64 or wrong nonce/salt lengths.
        """
        if not isinstance(data, dict):
            raise CorruptedRecordError("Wallet record must be an object")

        address = data.get("address")
        if not isinstance(address, str) or not address:
            raise CorruptedRecordError("Wallet record has no address")

        try:
            source_kind = SourceKind(data.get("type"))
        except ValueError as e:
            raise CorruptedRecordError(f"Unknown wallet type: {data.get('type')!r}") from e

        ciphertext = _b64decode(data.get("ciphertext"), "ciphertext")
        if len(ciphertext) < AES_TAG_SIZE:
            raise CorruptedRecordError("Ciphertext is shorter than the authentication tag")
        if len(_b64decode(data.get("iv"), "iv")) != AES_IV_SIZE:
            raise CorruptedRecordError(f"iv must decode to {AES_IV_SIZE} bytes")
        if len(_b64decode(data.get("salt"), "salt")) != SALT_SIZE:
            raise CorruptedRecordError(f"salt must decode to {SALT_SIZE} bytes")

        label = data.get("name")
        if label is not None and not isinstance(label, str):
            raise CorruptedRecordError("Wallet name must be text")

        return cls(
            address=address,
            source_kind=source_kind,
            ciphertext=data["ciphertext"],
            iv=data["iv"],
            salt=data["salt"],
            label=label,
        )


# ============================================
# Key Derivation
# ============================================

def derive_key(password: str, salt: bytes) -> bytes:
    """
    Derive an AES-256 key from a password using PBKDF2-HMAC-SHA256.

    Deterministic: the same password and salt always give the same key.
    """
    if len(salt) != SALT_SIZE:
        raise ValueError(f"salt must be {SALT_SIZE} bytes")

    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=PBKDF2_KEY_LEN,
        salt=salt,
        iterations=PBKDF2_ITERATIONS,
    )
    return kdf.derive(password.encode('utf-8'))


# ============================================
# Secret Payload
# ============================================

def serialize_secret(secret: Secret) -> bytes:
    """Canonical JSON bytes for a secret: {"mnemonic": ...} or {"privateKeyHex": ...}."""
    return json.dumps(secret.to_payload(), separators=(',', ':'), sort_keys=True).encode('utf-8')


def parse_secret(plaintext: bytes, source_kind: SourceKind) -> Secret:
    """
    Parse decrypted bytes back into a secret of the expected kind.

    Raises MalformedSecretError if the payload is not exactly one secret
    or does not match source_kind.
    """
    try:
        payload = json.loads(plaintext.decode('utf-8'))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise MalformedSecretError("Decrypted wallet data is not valid JSON") from e

    if not isinstance(payload, dict):
        raise MalformedSecretError("Decrypted wallet data is not an object")

    mnemonic = payload.get("mnemonic")
    pkey_hex = payload.get("privateKeyHex")
    if (mnemonic is None) == (pkey_hex is None):
        raise MalformedSecretError("Decrypted wallet data must hold exactly one secret")

    if source_kind is SourceKind.MNEMONIC:
        if not isinstance(mnemonic, str) or not mnemonic:
            raise MalformedSecretError("Stored wallet is a mnemonic wallet but has no mnemonic")
        return MnemonicSecret(mnemonic)

    if not isinstance(pkey_hex, str):
        raise MalformedSecretError("Stored wallet is a private key wallet but has no key")
    try:
        return PrivateKeySecret(bytes.fromhex(pkey_hex.strip()))
    except ValueError as e:
        raise MalformedSecretError("Stored private key is not 32 bytes of hex") from e


# ============================================
# Encryption
# ============================================

def encrypt_secret(secret: Secret, password: str, source_kind: SourceKind,
                   address: str, label: Optional[str] = None) -> EncryptedWalletRecord:
    """
    Encrypt a secret with a password.

    A new nonce and salt are drawn for every call, so encrypting the same
    secret twice never produces the same record.
    """
    if secret.kind is not source_kind:
        raise ValueError(f"Secret is {secret.kind.value} but source kind is {source_kind.value}")

    iv = secrets.token_bytes(AES_IV_SIZE)
    salt = secrets.token_bytes(SALT_SIZE)
    key = derive_key(password, salt)

    aesgcm = AESGCM(key)
    ciphertext_and_tag = aesgcm.encrypt(iv, serialize_secret(secret), None)

    return EncryptedWalletRecord(
        address=address,
        source_kind=source_kind,
        ciphertext=_b64encode(ciphertext_and_tag),
        iv=_b64encode(iv),
        salt=_b64encode(salt),
        label=label,
    )


def decrypt_secret(record: EncryptedWalletRecord, password: str) -> Secret:
    """
    Decrypt a stored record with a password.

    Raises:
        DecryptionError: Wrong password or tampered record (not distinguished)
        MalformedSecretError: Authenticated plaintext is not a valid secret
    """
    try:
        salt = _b64decode(record.salt, "salt")
        iv = _b64decode(record.iv, "iv")
        ciphertext_and_tag = _b64decode(record.ciphertext, "ciphertext")
    except CorruptedRecordError as e:
        logger.warning(f"Cannot decrypt wallet {record.address}: {e}")
        raise DecryptionError() from e

    if len(salt) != SALT_SIZE or len(iv) != AES_IV_SIZE:
        logger.warning(f"Cannot decrypt wallet {record.address}: bad nonce or salt length")
        raise DecryptionError()

    key = derive_key(password, salt)

    try:
        plaintext = AESGCM(key).decrypt(iv, ciphertext_and_tag, None)
    except InvalidTag as e:
        logger.warning(f"Authentication failed while decrypting wallet {record.address}")
        raise DecryptionError() from e

    return parse_secret(plaintext, record.source_kind)
