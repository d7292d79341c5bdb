"""
Signer Factory - Turn user input into a signing identity.

- BIP-39 mnemonic validation
- BIP-32/44 HD derivation on the Cosmos coin type (118)
- bech32 account addresses: RIPEMD160(SHA256(compressed pubkey))

Pure functions, no I/O.
"""

import hashlib
import logging
import re

from bech32 import bech32_decode, bech32_encode, convertbits
from Crypto.Hash import RIPEMD160
from eth_account.hdaccount import generate_mnemonic as _generate_mnemonic
from eth_account.hdaccount import key_from_seed, seed_from_mnemonic
from eth_keys import keys
from eth_keys.constants import SECPK1_N
from mnemonic import Mnemonic

from networks import NETWORKS, DEFAULT_NETWORK
from .errors import (
    AddressDerivationError,
    InvalidMnemonicError,
    InvalidPrivateKeyError,
)
from .material import KeyMaterial, MnemonicSecret, PrivateKeySecret, Secret

logger = logging.getLogger(__name__)


# BIP-44 path for Cosmos SDK accounts (coin type 118)
COSMOS_DERIVATION_PATH = "m/44'/118'/0'/0/0"

DEFAULT_ADDRESS_PREFIX = NETWORKS[DEFAULT_NETWORK].address_prefix

PRIVATE_KEY_PATTERN = re.compile(r"^[0-9a-fA-F]{64}$")

_WHITESPACE = re.compile(r"\s+")

_mnemo = Mnemonic("english")


# ============================================
# Validation Helpers
# ============================================

def normalize_mnemonic(text: str) -> str:
    """Trim, lowercase and collapse internal whitespace to single spaces."""
    return _WHITESPACE.sub(" ", text.strip().lower())


def validate_private_key_hex(value: str) -> bool:
    """True if the trimmed value is exactly 64 hex characters."""
    return bool(PRIVATE_KEY_PATTERN.match(value.strip()))


def is_valid_address(address: str, prefix: str = DEFAULT_ADDRESS_PREFIX) -> bool:
    """
    Check an account address for this network.

    Requires the expected prefix, a lowercase bech32 body of plausible
    length and a valid bech32 checksum.
    """
    address = address.strip()
    pattern = re.compile(rf"^{re.escape(prefix)}1[0-9a-z]{{38,58}}$")
    if not pattern.match(address):
        return False

    hrp, data = bech32_decode(address)
    if hrp != prefix or data is None:
        return False

    decoded = convertbits(data, 5, 8, False)
    return decoded is not None and len(decoded) in (20, 32)


def pubkey_to_address(public_key: bytes, prefix: str = DEFAULT_ADDRESS_PREFIX) -> str:
    """Derive the bech32 account address from a compressed public key."""
    sha = hashlib.sha256(public_key).digest()
    account_id = RIPEMD160.new(sha).digest()
    words = convertbits(account_id, 8, 5)
    if words is None:
        return ""
    return bech32_encode(prefix, words) or ""


def shorten_address(address: str) -> str:
    """plt1qxy...abc1234 style display form."""
    if len(address) <= 20:
        return address
    return f"{address[:10]}…{address[-7:]}"


# ============================================
# Factories
# ============================================

def _build(secret: Secret, private_key: bytes, prefix: str,
           derivation_path: str = None) -> KeyMaterial:
    public_key = keys.PrivateKey(private_key).public_key.to_compressed_bytes()
    address = pubkey_to_address(public_key, prefix)
    if not address:
        raise AddressDerivationError("Could not derive a wallet address from the key")
    return KeyMaterial(address, secret, private_key, derivation_path)


def signer_from_mnemonic(raw: str, prefix: str = DEFAULT_ADDRESS_PREFIX) -> KeyMaterial:
    """
    Build key material from a BIP-39 phrase.

    Args:
        raw: Mnemonic as typed by the user (any case/spacing)
        prefix: bech32 address prefix of the network

    Raises:
        InvalidMnemonicError: Unknown word or bad checksum
    """
    normalized = normalize_mnemonic(raw)
    if not normalized or not _mnemo.check(normalized):
        raise InvalidMnemonicError("Invalid mnemonic - check the words and spacing")

    seed = seed_from_mnemonic(normalized, passphrase="")
    private_key = key_from_seed(seed, COSMOS_DERIVATION_PATH)

    material = _build(MnemonicSecret(normalized), private_key, prefix, COSMOS_DERIVATION_PATH)
    logger.debug(f"Derived mnemonic wallet {material.address}")
    return material


def signer_from_private_key(raw: str, prefix: str = DEFAULT_ADDRESS_PREFIX) -> KeyMaterial:
    """
    Build key material from a hex private key.

    Args:
        raw: 64 hex characters, case-insensitive, surrounding whitespace ignored
        prefix: bech32 address prefix of the network

    Raises:
        InvalidPrivateKeyError: Wrong length, non-hex, or out of curve range
    """
    cleaned = raw.strip()
    if not validate_private_key_hex(cleaned):
        raise InvalidPrivateKeyError("Invalid private key - expected 64 hex characters")

    key_bytes = bytes.fromhex(cleaned)
    if not 0 < int.from_bytes(key_bytes, "big") < SECPK1_N:
        raise InvalidPrivateKeyError("Invalid private key - outside the secp256k1 range")

    material = _build(PrivateKeySecret(key_bytes), key_bytes, prefix)
    logger.debug(f"Derived private key wallet {material.address}")
    return material


def signer_from_secret(secret: Secret, prefix: str = DEFAULT_ADDRESS_PREFIX) -> KeyMaterial:
    """Rebuild key material from a decrypted secret."""
    if isinstance(secret, MnemonicSecret):
        return signer_from_mnemonic(secret.phrase, prefix)
    if isinstance(secret, PrivateKeySecret):
        return signer_from_private_key(secret.hex, prefix)
    raise TypeError(f"Unsupported secret type: {type(secret).__name__}")


def generate_mnemonic(word_count: int = 24) -> str:
    """
    Create a fresh BIP-39 phrase.

    Args:
        word_count: 12 (128-bit) or 24 (256-bit)
    """
    if word_count not in (12, 24):
        raise ValueError("word_count must be 12 or 24")
    return _generate_mnemonic(num_words=word_count, lang="english")
