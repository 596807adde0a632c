"""Navigator Vault.

Field-level authenticated encryption for credential and payment card records.
"""
from .version import (
    __title__, __description__, __version__, __author__, __author_email__
)
from .exceptions import (
    VaultError,
    ConfigurationError,
    ValidationError,
    NotFound,
    MalformedInputError,
    DecryptionError,
    DecryptionFailure,
)
from .vault import (
    KeyProvider,
    VaultConfig,
    EncryptedField,
    EncryptionEngine,
    EncryptedRecordCodec,
    FieldDescriptor,
)
from .records import (
    MemoryRecordStore,
    RecordService,
    CredentialService,
    WalletCardService,
)

__all__ = (
    "VaultError",
    "ConfigurationError",
    "ValidationError",
    "NotFound",
    "MalformedInputError",
    "DecryptionError",
    "DecryptionFailure",
    "KeyProvider",
    "VaultConfig",
    "EncryptedField",
    "EncryptionEngine",
    "EncryptedRecordCodec",
    "FieldDescriptor",
    "MemoryRecordStore",
    "RecordService",
    "CredentialService",
    "WalletCardService",
)
