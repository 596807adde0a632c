"""Owner-scoped sensitive records (credentials and payment cards)."""

from .store import MemoryRecordStore, RecordStore
from .service import CredentialService, RecordService, WalletCardService

__all__ = [
    "MemoryRecordStore",
    "RecordStore",
    "RecordService",
    "CredentialService",
    "WalletCardService",
]
