"""
Vault Configuration — Encryption key loading and validated settings.

Reads the field encryption key from the environment:
    PASSWORD_ENCRYPTION_KEY = <base64-encoded 32-byte key>

The key is validated once and cached for the lifetime of the process.

Security Note:
    Never log key material. Only log the variable name and decoded length.
"""
import os
import base64
import binascii
import secrets
import logging
import threading
from typing import Callable, Optional

from pydantic import BaseModel, field_validator

from ..conf import ENCRYPTION_KEY_VAR, VAULT_LOGGER
from ..exceptions import ConfigurationError

logger = logging.getLogger(VAULT_LOGGER)

KEY_LENGTH = 32  # AES-256


def load_encryption_key(value: Optional[str], name: str = ENCRYPTION_KEY_VAR) -> bytes:
    """Decode and validate a base64 encryption key.

    Args:
        value: base64 string as read from configuration; surrounding
            whitespace (trailing newline of a secret file) is ignored.
        name: configuration name, used in error messages only.

    Returns:
        Raw 32-byte key.

    Raises:
        ConfigurationError: If the value is absent, not base64, or does not
            decode to exactly 32 bytes.
    """
    value = value.strip() if value else value
    if not value:
        logger.error("%s environment variable is not set", name)
        raise ConfigurationError(
            "Encryption key is not configured. "
            "Cannot perform encryption/decryption."
        )
    try:
        key_bytes = base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError):
        logger.error("%s is not a valid base64 string", name)
        raise ConfigurationError(
            "Encryption key is not valid base64."
        ) from None
    if len(key_bytes) != KEY_LENGTH:
        logger.error(
            "%s must decode to exactly %d bytes, got %d",
            name, KEY_LENGTH, len(key_bytes),
        )
        raise ConfigurationError(
            f"Invalid encryption key length: expected {KEY_LENGTH} bytes, "
            f"got {len(key_bytes)}"
        )
    return key_bytes


def generate_key() -> str:
    """Generate a random 32-byte key and return it as base64 string.

    This is a utility for operators provisioning PASSWORD_ENCRYPTION_KEY.
    """
    return base64.b64encode(secrets.token_bytes(KEY_LENGTH)).decode("ascii")


class KeyProvider:
    """Lazy, thread-safe holder of the process encryption key.

    The configuration source is read and validated on the first
    ``get_key()`` call only; concurrent first callers wait on a lock so a
    single validation pass happens and nobody observes a partial key.
    A failed load caches nothing.
    """

    def __init__(
        self,
        source: Optional[Callable[[], Optional[str]]] = None,
        name: str = ENCRYPTION_KEY_VAR,
    ):
        self._name = name
        self._source = source or (lambda: os.environ.get(name))
        self._key: Optional[bytes] = None
        self._lock = threading.Lock()

    def get_key(self) -> bytes:
        key = self._key
        if key is not None:
            return key
        with self._lock:
            if self._key is None:
                self._key = load_encryption_key(self._source(), self._name)
                logger.info("Encryption key loaded from %s", self._name)
            return self._key

    def is_configured(self) -> bool:
        """True when a valid key is (or can be) loaded."""
        try:
            self.get_key()
        except ConfigurationError:
            return False
        return True

    @property
    def loaded(self) -> bool:
        return self._key is not None


_default_provider: Optional[KeyProvider] = None
_default_lock = threading.Lock()


def default_key_provider() -> KeyProvider:
    """Return the process-wide KeyProvider, creating it on first use."""
    global _default_provider
    if _default_provider is None:
        with _default_lock:
            if _default_provider is None:
                _default_provider = KeyProvider()
    return _default_provider


class VaultConfig(BaseModel):
    """Validated vault configuration."""

    encryption_key: bytes

    model_config = {"arbitrary_types_allowed": True, "frozen": True}

    @field_validator("encryption_key")
    @classmethod
    def validate_key_length(cls, v: bytes) -> bytes:
        """Ensure the key is suitable for AES-256."""
        if len(v) != KEY_LENGTH:
            raise ValueError(
                f"encryption_key must be {KEY_LENGTH} bytes, got {len(v)}"
            )
        return v

    def key_provider(self) -> KeyProvider:
        """Build a KeyProvider serving this configuration's key."""
        encoded = base64.b64encode(self.encryption_key).decode("ascii")
        return KeyProvider(source=lambda: encoded, name="VaultConfig.encryption_key")

    @classmethod
    def from_env(cls) -> "VaultConfig":
        """Create VaultConfig by loading the key from environment.

        Raises:
            ConfigurationError: If the key is missing or invalid.
        """
        key = load_encryption_key(os.environ.get(ENCRYPTION_KEY_VAR))
        return cls(encryption_key=key)
