"""
Wallet package - Local credential custody for the PLT wallet.

Contains:
- KeyMaterial, MnemonicSecret, PrivateKeySecret: In-memory signing identity
- Signer factory: mnemonic / private key -> key material and address
- Crypto: PBKDF2 key derivation and AES-256-GCM secret encryption
- EncryptedWalletStore: Persistence of encrypted records
- Errors: Typed failures
"""

from .material import (
    KeyMaterial,
    MnemonicSecret,
    PrivateKeySecret,
    Secret,
    SourceKind,
)
from .signer import (
    COSMOS_DERIVATION_PATH,
    generate_mnemonic,
    is_valid_address,
    normalize_mnemonic,
    pubkey_to_address,
    shorten_address,
    signer_from_mnemonic,
    signer_from_private_key,
    signer_from_secret,
    validate_private_key_hex,
)
from .crypto import (
    EncryptedWalletRecord,
    derive_key,
    encrypt_secret,
    decrypt_secret,
)
from .store import (
    STORAGE_KEY,
    KeyValueStore,
    MemoryKeyValueStore,
    JsonFileKeyValueStore,
    EncryptedWalletStore,
)
from .errors import (
    WalletError,
    InvalidMnemonicError,
    InvalidPrivateKeyError,
    InvalidAddressError,
    InvalidAmountError,
    AddressDerivationError,
    DecryptionError,
    MalformedSecretError,
    CorruptedRecordError,
    WalletNotFoundError,
    InsufficientFundsError,
    InvalidTransitionError,
    ChainIdMismatchError,
)

__all__ = [
    # Key material
    "KeyMaterial",
    "MnemonicSecret",
    "PrivateKeySecret",
    "Secret",
    "SourceKind",
    # Signer factory
    "COSMOS_DERIVATION_PATH",
    "generate_mnemonic",
    "is_valid_address",
    "normalize_mnemonic",
    "pubkey_to_address",
    "shorten_address",
    "signer_from_mnemonic",
    "signer_from_private_key",
    "signer_from_secret",
    "validate_private_key_hex",
    # Crypto
    "EncryptedWalletRecord",
    "derive_key",
    "encrypt_secret",
    "decrypt_secret",
    # Store
    "STORAGE_KEY",
    "KeyValueStore",
    "MemoryKeyValueStore",
    "JsonFileKeyValueStore",
    "EncryptedWalletStore",
    # Errors
    "WalletError",
    "InvalidMnemonicError",
    "InvalidPrivateKeyError",
    "InvalidAddressError",
    "InvalidAmountError",
    "AddressDerivationError",
    "DecryptionError",
    "MalformedSecretError",
    "CorruptedRecordError",
    "WalletNotFoundError",
    "InsufficientFundsError",
    "InvalidTransitionError",
    "ChainIdMismatchError",
]
