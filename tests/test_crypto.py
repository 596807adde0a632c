"""
Tests for the field encryption engine.

Tests cover:
- Encrypt/decrypt of assorted plaintexts
- Fresh IV per call
- Tamper detection on cipher text, auth tag and IV
- Wrong key and malformed payloads
- Log hygiene on failures
"""
import logging
from dataclasses import replace

import pytest

from navigator_vault.exceptions import DecryptionError, MalformedInputError
from navigator_vault.vault.crypto import IV_SIZE, TAG_SIZE, EncryptedField


def flip(hex_value: str, index: int) -> str:
    """Flip every bit of one byte of a hex string."""
    data = bytearray(bytes.fromhex(hex_value))
    data[index] ^= 0xFF
    return data.hex()


class TestEncrypt:
    """Tests for EncryptionEngine.encrypt()."""

    @pytest.mark.parametrize("plaintext", [
        "hunter2",
        "4111111111111111",
        "contraseña ñandú ☃",
        "x" * 4096,
        "",
    ])
    def test_decrypts_back(self, engine, plaintext):
        """Test decrypting an encrypted value returns the original text."""
        assert engine.decrypt(engine.encrypt(plaintext)) == plaintext

    def test_component_sizes(self, engine):
        """Test IV and tag lengths, hex encoded."""
        field = engine.encrypt("secret")
        assert len(bytes.fromhex(field.iv)) == IV_SIZE
        assert len(bytes.fromhex(field.auth_tag)) == TAG_SIZE
        assert len(bytes.fromhex(field.cipher_text)) == len("secret")

    def test_not_deterministic(self, engine):
        """Test identical plaintexts produce different IVs and cipher texts."""
        first = engine.encrypt("same value")
        second = engine.encrypt("same value")
        assert first.iv != second.iv
        assert first.cipher_text != second.cipher_text

    def test_ciphertext_hides_plaintext(self, engine):
        """Test the plaintext does not appear in stored components."""
        field = engine.encrypt("visible-password")
        assert "visible-password" not in field.cipher_text
        assert "visible-password".encode().hex() not in field.cipher_text

    def test_rejects_non_string(self, engine):
        """Test only strings are accepted."""
        with pytest.raises(TypeError):
            engine.encrypt(1234)


class TestDecrypt:
    """Tests for EncryptionEngine.decrypt()."""

    def test_tampered_cipher_text(self, engine):
        """Test every altered cipher text byte is detected."""
        field = engine.encrypt("top secret")
        size = len(bytes.fromhex(field.cipher_text))
        for index in range(size):
            tampered = replace(field, cipher_text=flip(field.cipher_text, index))
            with pytest.raises(DecryptionError):
                engine.decrypt(tampered)

    def test_tampered_auth_tag(self, engine):
        """Test every altered auth tag byte is detected."""
        field = engine.encrypt("top secret")
        for index in range(TAG_SIZE):
            tampered = replace(field, auth_tag=flip(field.auth_tag, index))
            with pytest.raises(DecryptionError):
                engine.decrypt(tampered)

    def test_tampered_iv(self, engine):
        """Test an altered IV is detected."""
        field = engine.encrypt("top secret")
        with pytest.raises(DecryptionError):
            engine.decrypt(replace(field, iv=flip(field.iv, 0)))

    def test_wrong_key(self, engine, other_engine):
        """Test a value sealed under another key is rejected."""
        field = other_engine.encrypt("top secret")
        with pytest.raises(DecryptionError):
            engine.decrypt(field)

    def test_invalid_hex(self, engine):
        """Test non-hex components fail as DecryptionError."""
        field = engine.encrypt("top secret")
        with pytest.raises(DecryptionError):
            engine.decrypt(replace(field, cipher_text="zz" + field.cipher_text))

    @pytest.mark.parametrize("missing", ["iv", "cipher_text", "auth_tag"])
    def test_missing_component(self, engine, missing):
        """Test a triplet missing a component is malformed."""
        field = replace(engine.encrypt("top secret"), **{missing: None})
        with pytest.raises(MalformedInputError):
            engine.decrypt(field)

    def test_empty_iv(self, engine):
        """Test empty IV and tag are treated as missing."""
        field = engine.encrypt("top secret")
        with pytest.raises(MalformedInputError):
            engine.decrypt(replace(field, iv=""))
        with pytest.raises(MalformedInputError):
            engine.decrypt(replace(field, auth_tag=""))

    def test_none_payload(self, engine):
        """Test decrypting nothing is malformed."""
        with pytest.raises(MalformedInputError):
            engine.decrypt(None)

    def test_failure_log_has_no_material(self, engine, caplog):
        """Test failure logs name the field but no plaintext or cipher data."""
        field = engine.encrypt("my-card-number")
        tampered = replace(field, auth_tag=flip(field.auth_tag, 3))
        with caplog.at_level(logging.ERROR, logger="navigator.vault"):
            with pytest.raises(DecryptionError) as exc:
                engine.decrypt(tampered, field_name="cardNumber")
        text = caplog.text + str(exc.value)
        assert "cardNumber" in caplog.text
        assert "my-card-number" not in text
        assert field.cipher_text not in text
        assert tampered.auth_tag not in text
        assert field.iv not in text


class TestEncryptedField:
    """Tests for the EncryptedField value object."""

    def test_complete(self):
        assert EncryptedField("aa", "bb", "cc").is_complete is True
        assert EncryptedField("aa", None, "cc").is_complete is False

    def test_empty(self):
        assert EncryptedField(None, None, None).is_empty is True
        assert EncryptedField("aa", None, None).is_empty is False
