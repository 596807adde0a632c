"""
Encrypted Record Codec — declarative mapping of logical fields to triplets.

Each sensitive entity declares its fields once as FieldDescriptor entries;
the codec encrypts patches on write and decrypts records on read.

Decoding isolates failures per field: one corrupted or mis-keyed field is
reported in ``field_errors`` and returned as ``None`` while the remaining
fields still decode.
"""
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any, Optional

from ..conf import VAULT_LOGGER
from ..exceptions import DecryptionError, MalformedInputError
from .crypto import EncryptedField, EncryptionEngine

logger = logging.getLogger(VAULT_LOGGER)


@dataclass(frozen=True)
class FieldDescriptor:
    """Storage attribute names of one sensitive logical field."""

    name: str
    iv_key: str
    cipher_key: str
    tag_key: str

    @classmethod
    def suffixed(cls, name: str) -> "FieldDescriptor":
        """Build the ``iv<Name>/encrypted<Name>/authTag<Name>`` convention."""
        suffix = name[:1].upper() + name[1:]
        return cls(
            name=name,
            iv_key=f"iv{suffix}",
            cipher_key=f"encrypted{suffix}",
            tag_key=f"authTag{suffix}",
        )

    @property
    def storage_keys(self) -> tuple[str, str, str]:
        return (self.iv_key, self.cipher_key, self.tag_key)

    def read(self, record: Mapping[str, Any]) -> EncryptedField:
        return EncryptedField(
            iv=record.get(self.iv_key),
            cipher_text=record.get(self.cipher_key),
            auth_tag=record.get(self.tag_key),
        )

    def write(self, encrypted: EncryptedField) -> dict[str, str]:
        return {
            self.iv_key: encrypted.iv,
            self.cipher_key: encrypted.cipher_text,
            self.tag_key: encrypted.auth_tag,
        }


@dataclass(frozen=True)
class DecodedRecord:
    """Result of decoding the sensitive fields of one stored record."""

    fields: dict[str, Optional[str]]
    field_errors: frozenset = field(default_factory=frozenset)
    attempted: frozenset = field(default_factory=frozenset)

    @property
    def has_error(self) -> bool:
        return bool(self.field_errors)

    @property
    def all_failed(self) -> bool:
        """True when every field that was stored failed to decrypt."""
        return bool(self.attempted) and self.field_errors >= self.attempted


class EncryptedRecordCodec:
    """Encode and decode the sensitive fields declared for an entity."""

    def __init__(
        self,
        descriptors: Iterable[FieldDescriptor],
        engine: Optional[EncryptionEngine] = None,
    ):
        self.descriptors = tuple(descriptors)
        names = [d.name for d in self.descriptors]
        if len(set(names)) != len(names):
            raise ValueError(f"Duplicated field descriptors: {names}")
        self.engine = engine or EncryptionEngine()
        self._storage_keys = frozenset(
            key for d in self.descriptors for key in d.storage_keys
        )

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(d.name for d in self.descriptors)

    @property
    def storage_keys(self) -> frozenset:
        return self._storage_keys

    def encode_patch(self, plain_fields: Mapping[str, str]) -> dict[str, str]:
        """Encrypt the logical fields present in ``plain_fields``.

        Fields not present are left out of the patch entirely, so a partial
        update never touches the stored triplets of other fields.
        """
        patch: dict[str, str] = {}
        for descriptor in self.descriptors:
            if descriptor.name in plain_fields:
                encrypted = self.engine.encrypt(plain_fields[descriptor.name])
                patch.update(descriptor.write(encrypted))
        return patch

    def decode_record(self, record: Mapping[str, Any]) -> DecodedRecord:
        """Decrypt every declared field of a stored record independently."""
        record_id = record.get("id")
        fields: dict[str, Optional[str]] = {}
        errors = set()
        attempted = set()
        for descriptor in self.descriptors:
            encrypted = descriptor.read(record)
            if encrypted.is_empty:
                # never set
                fields[descriptor.name] = None
                continue
            attempted.add(descriptor.name)
            try:
                fields[descriptor.name] = self.engine.decrypt(
                    encrypted, field_name=descriptor.name
                )
            except (DecryptionError, MalformedInputError):
                logger.error(
                    "Failed to decrypt %s for record id=%s",
                    descriptor.name, record_id,
                )
                fields[descriptor.name] = None
                errors.add(descriptor.name)
        return DecodedRecord(
            fields=fields,
            field_errors=frozenset(errors),
            attempted=frozenset(attempted),
        )

    def public(self, record: Mapping[str, Any]) -> dict[str, Any]:
        """Copy of ``record`` without any stored cipher material."""
        return {
            key: value for key, value in record.items()
            if key not in self._storage_keys
        }
