"""Vault — field-level authenticated encryption.

Security Note (Threat Model):
    Plaintext exists in process memory only while a field is being encrypted
    or decrypted. The key is loaded once and kept for the process lifetime.
    Transport security and key delivery are assumed to be handled outside
    this package.
"""

from .config import (
    KeyProvider,
    VaultConfig,
    default_key_provider,
    generate_key,
    load_encryption_key,
)
from .crypto import EncryptedField, EncryptionEngine
from .codec import DecodedRecord, EncryptedRecordCodec, FieldDescriptor

__all__ = [
    "KeyProvider",
    "VaultConfig",
    "default_key_provider",
    "generate_key",
    "load_encryption_key",
    "EncryptedField",
    "EncryptionEngine",
    "DecodedRecord",
    "EncryptedRecordCodec",
    "FieldDescriptor",
]
