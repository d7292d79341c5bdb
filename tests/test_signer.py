"""
Signer factory tests: mnemonic / private key import and address derivation.
"""

import hashlib

import pytest
from eth_keys import keys
from eth_keys.constants import SECPK1_N

from wallet.errors import InvalidMnemonicError, InvalidPrivateKeyError
from wallet.material import MnemonicSecret, PrivateKeySecret, SourceKind
from wallet.signer import (
    COSMOS_DERIVATION_PATH,
    generate_mnemonic,
    is_valid_address,
    normalize_mnemonic,
    shorten_address,
    signer_from_mnemonic,
    signer_from_private_key,
    signer_from_secret,
)

from conftest import ABANDON_12, ABANDON_24, BAD_CHECKSUM_12


class TestMnemonicImport:
    """Tests for signer_from_mnemonic."""

    def test_accepts_12_word_phrase(self):
        """A valid 12-word phrase yields a plt address."""
        material = signer_from_mnemonic(ABANDON_12)
        assert material.address.startswith("plt1")
        assert material.source_kind is SourceKind.MNEMONIC
        assert material.derivation_path == COSMOS_DERIVATION_PATH

    def test_accepts_24_word_phrase(self):
        """A valid 24-word phrase is accepted."""
        material = signer_from_mnemonic(ABANDON_24)
        assert material.address.startswith("plt1")
        assert material.secret == MnemonicSecret(ABANDON_24)

    def test_known_cosmos_vector(self):
        """Matches the reference address for a well-known phrase."""
        phrase = "enlist hip relief stomach skate base shallow young switch frequent cry park"
        material = signer_from_mnemonic(phrase, prefix="cosmos")
        assert material.address == "cosmos14qemq0vw6y3gc3u3e0aty2e764u4gs5le3hada"

    def test_rejects_bad_checksum(self):
        """Twelve 'abandon' words fail the checksum."""
        with pytest.raises(InvalidMnemonicError):
            signer_from_mnemonic(BAD_CHECKSUM_12)

    def test_rejects_unknown_word(self):
        """A word outside the list is rejected."""
        phrase = " ".join(["abandon"] * 11 + ["notaword"])
        with pytest.raises(InvalidMnemonicError):
            signer_from_mnemonic(phrase)

    def test_rejects_empty(self):
        with pytest.raises(InvalidMnemonicError):
            signer_from_mnemonic("   ")

    def test_invalid_mnemonic_is_value_error(self):
        """Callers catching ValueError still see input errors."""
        with pytest.raises(ValueError):
            signer_from_mnemonic(BAD_CHECKSUM_12)

    def test_deterministic(self):
        """Same phrase, same address."""
        assert signer_from_mnemonic(ABANDON_12).address == signer_from_mnemonic(ABANDON_12).address

    def test_normalization(self):
        """Case and spacing differences produce identical results."""
        messy = "  " + ABANDON_12.upper().replace(" ", "   \n\t") + "  "
        clean = signer_from_mnemonic(ABANDON_12)
        other = signer_from_mnemonic(messy)
        assert other.address == clean.address
        assert other.secret == clean.secret
        assert other.public_key == clean.public_key

    def test_normalize_is_idempotent(self):
        once = normalize_mnemonic("  Foo \t BAR\nbaz ")
        assert once == "foo bar baz"
        assert normalize_mnemonic(once) == once

    def test_prefix_changes_address_not_key(self):
        plt = signer_from_mnemonic(ABANDON_12, prefix="plt")
        cosmos = signer_from_mnemonic(ABANDON_12, prefix="cosmos")
        assert plt.public_key == cosmos.public_key
        assert cosmos.address.startswith("cosmos1")


class TestPrivateKeyImport:
    """Tests for signer_from_private_key."""

    def test_accepts_64_hex(self):
        material = signer_from_private_key("ab" * 32)
        assert material.source_kind is SourceKind.PRIVATE_KEY
        assert material.secret == PrivateKeySecret(bytes.fromhex("ab" * 32))
        assert material.derivation_path is None

    def test_case_insensitive(self):
        lower = signer_from_private_key("ab" * 32)
        upper = signer_from_private_key("AB" * 32)
        assert lower.address == upper.address

    def test_surrounding_whitespace_ignored(self):
        assert signer_from_private_key(f"  {'ab' * 32}\n").address == signer_from_private_key("ab" * 32).address

    @pytest.mark.parametrize("value", [
        "a" * 63,
        "a" * 65,
        "g" * 64,
        "0x" + "ab" * 31,
        "",
    ])
    def test_rejects_bad_format(self, value):
        with pytest.raises(InvalidPrivateKeyError):
            signer_from_private_key(value)

    def test_rejects_zero_key(self):
        with pytest.raises(InvalidPrivateKeyError):
            signer_from_private_key("00" * 32)

    def test_rejects_key_above_curve_order(self):
        with pytest.raises(InvalidPrivateKeyError):
            signer_from_private_key("ff" * 32)

    def test_same_key_as_hd_wallet_gives_same_address(self):
        """Importing the HD-derived key directly lands on the same account."""
        hd = signer_from_mnemonic(ABANDON_12)
        direct = signer_from_private_key(hd._private_key.hex())
        assert direct.address == hd.address


class TestKeyMaterial:
    """Tests for the in-memory signing identity."""

    def test_repr_hides_secret(self):
        material = signer_from_mnemonic(ABANDON_12)
        text = repr(material) + repr(material.secret)
        assert "abandon" not in text
        assert material.address in repr(material)

    def test_private_key_repr_hides_secret(self):
        material = signer_from_private_key("ab" * 32)
        assert "ab" * 32 not in repr(material.secret)

    def test_public_key_is_compressed(self):
        material = signer_from_private_key("ab" * 32)
        assert len(material.public_key) == 33
        assert material.public_key[0] in (2, 3)

    def test_sign_low_s_and_recoverable(self):
        """Signatures are 64-byte r||s, low-S, and verify against the public key."""
        material = signer_from_private_key("ab" * 32)
        message = b"transfer 1 plt"
        signature = material.sign(message)

        assert len(signature) == 64
        r = int.from_bytes(signature[:32], "big")
        s = int.from_bytes(signature[32:], "big")
        assert s <= SECPK1_N // 2

        digest = hashlib.sha256(message).digest()
        recovered = {
            keys.Signature(vrs=(v, r, s)).recover_public_key_from_msg_hash(digest).to_compressed_bytes()
            for v in (0, 1)
        }
        assert material.public_key in recovered

    def test_sign_is_deterministic(self):
        material = signer_from_private_key("ab" * 32)
        assert material.sign(b"x") == material.sign(b"x")

    def test_lock_clears_secret(self):
        material = signer_from_mnemonic(ABANDON_12)
        address = material.address
        material.lock()

        assert material.is_locked
        assert material.address == address
        assert material.source_kind is SourceKind.MNEMONIC
        with pytest.raises(RuntimeError):
            material.secret
        with pytest.raises(RuntimeError):
            material.sign(b"x")


class TestSecretDispatch:
    """Tests for signer_from_secret."""

    def test_mnemonic_secret(self):
        original = signer_from_mnemonic(ABANDON_12)
        restored = signer_from_secret(MnemonicSecret(ABANDON_12))
        assert restored.address == original.address

    def test_private_key_secret(self):
        original = signer_from_private_key("ab" * 32)
        restored = signer_from_secret(PrivateKeySecret(bytes.fromhex("ab" * 32)))
        assert restored.address == original.address

    def test_rejects_other_types(self):
        with pytest.raises(TypeError):
            signer_from_secret("abandon")


class TestAddressValidation:
    """Tests for is_valid_address."""

    def test_derived_address_is_valid(self, destination):
        assert is_valid_address(destination)

    def test_surrounding_whitespace_ok(self, destination):
        assert is_valid_address(f"  {destination} ")

    def test_wrong_prefix(self, destination):
        cosmos = signer_from_private_key("11" * 32, prefix="cosmos").address
        assert is_valid_address(cosmos, prefix="cosmos")
        assert not is_valid_address(cosmos, prefix="plt")

    def test_bad_checksum(self, destination):
        last = destination[-1]
        tampered = destination[:-1] + ("q" if last != "q" else "p")
        assert not is_valid_address(tampered)

    def test_uppercase_rejected(self, destination):
        assert not is_valid_address(destination.upper())

    def test_too_short(self):
        assert not is_valid_address("plt1qqqq")

    def test_shorten(self, destination):
        short = shorten_address(destination)
        assert short.startswith(destination[:10])
        assert short.endswith(destination[-7:])


class TestGenerateMnemonic:
    """Tests for generate_mnemonic."""

    @pytest.mark.parametrize("count", [12, 24])
    def test_generates_importable_phrase(self, count):
        phrase = generate_mnemonic(count)
        assert len(phrase.split()) == count
        assert signer_from_mnemonic(phrase).address.startswith("plt1")

    def test_rejects_other_lengths(self):
        with pytest.raises(ValueError):
            generate_mnemonic(15)

    def test_fresh_each_time(self):
        assert generate_mnemonic(12) != generate_mnemonic(12)
