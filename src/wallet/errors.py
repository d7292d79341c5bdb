"""
Wallet Errors - Typed failures for key custody and transfers.

Input errors also subclass ValueError so callers that already catch
ValueError (as the rest of the app did) keep working.
"""


class WalletError(Exception):
    """Base class for every wallet-core failure."""


# ============================================
# Input Validation
# ============================================

class InvalidMnemonicError(WalletError, ValueError):
    """Mnemonic failed BIP-39 word list or checksum validation."""


class InvalidPrivateKeyError(WalletError, ValueError):
    """Private key is not 64 hex characters or not a valid secp256k1 scalar."""


class InvalidAddressError(WalletError, ValueError):
    """Address does not match the network's bech32 format."""


class InvalidAmountError(WalletError, ValueError):
    """Amount is not a finite positive number."""


# ============================================
# Key Derivation
# ============================================

class AddressDerivationError(WalletError):
    """No address could be derived from otherwise valid key material."""


# ============================================
# Cryptography
# ============================================

DECRYPTION_FAILED_MESSAGE = "Wrong password or corrupted wallet data"


class DecryptionError(WalletError):
    """
    Authenticated decryption failed.

    Wrong password and tampered data look identical from the outside.
    """

    def __init__(self, message: str = DECRYPTION_FAILED_MESSAGE):
        super().__init__(message)


class MalformedSecretError(WalletError):
    """Decrypted payload could not be turned back into a secret."""


# ============================================
# Storage
# ============================================

class CorruptedRecordError(WalletError, ValueError):
    """A stored wallet record is missing fields or fails length checks."""


class WalletNotFoundError(WalletError, KeyError):
    """No stored wallet for the requested address."""

    def __str__(self) -> str:
        # KeyError quotes its argument
        return str(self.args[0]) if self.args else ""


# ============================================
# Transfers & Network
# ============================================

class InsufficientFundsError(WalletError):
    """Amount plus fee exceeds the available balance."""

    def __init__(self, required: int, available: int):
        self.required = required
        self.available = available
        super().__init__(
            f"Insufficient funds: need {required}, have {available} (base units)"
        )


class InvalidTransitionError(WalletError):
    """Transfer operation is not allowed from the current state."""


class ChainIdMismatchError(WalletError):
    """RPC endpoint reports a different chain than expected."""

    def __init__(self, expected: str, actual: str):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Expected chain-id {expected} but the node reported {actual}")
