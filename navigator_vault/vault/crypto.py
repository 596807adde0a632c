"""
Vault Crypto Core — AES-256-GCM encryption of individual record fields.

Every field is sealed on its own with a fresh random IV and stored as three
hex strings: iv, cipher text and authentication tag.

Security Note:
    Never log plaintext, ciphertext or key values.
    IVs are random 128-bit; a new IV is drawn for every encryption.
"""
import os
import logging
from dataclasses import dataclass
from typing import Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ..conf import VAULT_LOGGER
from ..exceptions import DecryptionError, MalformedInputError
from .config import KeyProvider, default_key_provider

logger = logging.getLogger(VAULT_LOGGER)

IV_SIZE = 16  # 128-bit IV
TAG_SIZE = 16  # GCM tag


@dataclass(frozen=True)
class EncryptedField:
    """Stored form of one sensitive field, each component hex-encoded."""

    iv: Optional[str]
    cipher_text: Optional[str]
    auth_tag: Optional[str]

    @property
    def is_complete(self) -> bool:
        # GCM over an empty plaintext yields an empty cipher text.
        return bool(self.iv) and self.cipher_text is not None and bool(self.auth_tag)

    @property
    def is_empty(self) -> bool:
        return self.iv is None and self.cipher_text is None and self.auth_tag is None


class EncryptionEngine:
    """Stateless encrypt/decrypt of single plaintext fields.

    The key is fetched from the KeyProvider on every call, so constructing
    an engine never touches configuration.
    """

    def __init__(self, key_provider: Optional[KeyProvider] = None):
        self._keys = key_provider or default_key_provider()

    @property
    def key_provider(self) -> KeyProvider:
        return self._keys

    def encrypt(self, plaintext: str) -> EncryptedField:
        """Encrypt a string field.

        Args:
            plaintext: Value to protect.

        Returns:
            EncryptedField with hex iv, cipher text and 16-byte auth tag.
        """
        if not isinstance(plaintext, str):
            raise TypeError(
                f"plaintext must be str, got {type(plaintext).__name__}"
            )
        cipher = AESGCM(self._keys.get_key())
        iv = os.urandom(IV_SIZE)
        sealed = cipher.encrypt(iv, plaintext.encode("utf-8"), None)
        return EncryptedField(
            iv=iv.hex(),
            cipher_text=sealed[:-TAG_SIZE].hex(),
            auth_tag=sealed[-TAG_SIZE:].hex(),
        )

    def decrypt(self, field: EncryptedField, field_name: Optional[str] = None) -> str:
        """Decrypt and authenticate a stored field.

        Args:
            field: Stored triplet.
            field_name: Logical field name, used for logging only.

        Returns:
            The original plaintext.

        Raises:
            MalformedInputError: If iv, cipher text or auth tag is missing.
            DecryptionError: If authentication fails or the components
                cannot be decoded.
        """
        if field is None or not field.is_complete:
            logger.error(
                "Decryption failed for field=%s: incomplete payload", field_name
            )
            raise MalformedInputError(
                "Decryption failed due to invalid payload."
            )
        key = self._keys.get_key()
        try:
            iv = bytes.fromhex(field.iv)
            sealed = bytes.fromhex(field.cipher_text) + bytes.fromhex(field.auth_tag)
            plaintext = AESGCM(key).decrypt(iv, sealed, None)
            return plaintext.decode("utf-8")
        except (InvalidTag, ValueError, TypeError):
            logger.error("Decryption failed for field=%s", field_name)
            raise DecryptionError(
                "Decryption failed. Data may be corrupt or key may be incorrect."
            ) from None
