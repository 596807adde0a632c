"""
Vault Exceptions.

Every error carries a ``status_code`` so an API layer can map it to a
response without inspecting the message. Messages never include plaintext,
ciphertext or key material.
"""
from typing import Optional


class VaultError(Exception):
    """Base class for all vault errors."""

    status_code: int = 500

    def __init__(self, message: str, *, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def __repr__(self) -> str:
        return f"<{type(self).__name__} [{self.status_code}]: {self.message}>"


class ConfigurationError(VaultError):
    """Encryption key is missing or invalid."""


class ValidationError(VaultError):
    """Request input rejected before any cryptographic work."""

    status_code = 400

    def __init__(self, message: str, errors: Optional[list[dict]] = None):
        super().__init__(message)
        self.errors = errors or []


class NotFound(VaultError):
    """Record is absent or belongs to another owner."""

    status_code = 404


class MalformedInputError(VaultError):
    """A stored triplet is missing its iv, cipher text or auth tag."""

    status_code = 400


class DecryptionError(VaultError):
    """Cipher verification failed (wrong key, tampered data)."""


class DecryptionFailure(DecryptionError):
    """Every sensitive field of a record failed to decrypt."""

    def __init__(self, message: str, field_errors: frozenset = frozenset()):
        super().__init__(message)
        self.field_errors = field_errors
