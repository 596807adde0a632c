"""Shared fixtures for vault tests."""
import base64
import os

import pytest

from navigator_vault.vault.config import KeyProvider
from navigator_vault.vault.crypto import EncryptionEngine
from navigator_vault.records.store import MemoryRecordStore
from navigator_vault.records.service import CredentialService, WalletCardService


def make_provider(key: bytes) -> KeyProvider:
    encoded = base64.b64encode(key).decode("ascii")
    return KeyProvider(source=lambda: encoded)


@pytest.fixture
def raw_key() -> bytes:
    return os.urandom(32)


@pytest.fixture
def key_provider(raw_key):
    return make_provider(raw_key)


@pytest.fixture
def engine(key_provider):
    return EncryptionEngine(key_provider)


@pytest.fixture
def other_engine():
    """Engine holding an unrelated key."""
    return EncryptionEngine(make_provider(os.urandom(32)))


@pytest.fixture
def store():
    return MemoryRecordStore()


@pytest.fixture
def credentials(store, engine):
    return CredentialService(store, engine)


@pytest.fixture
def cards(store, engine):
    return WalletCardService(store, engine)
