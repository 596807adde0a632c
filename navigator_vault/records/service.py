"""
Record Services — lifecycle of owner-scoped encrypted records.

``RecordService`` implements create/get/list/update/delete once; each
sensitive entity only declares its field descriptors, input models and
derived metadata:

- ``CredentialService`` — site credentials, one sensitive field (password).
- ``WalletCardService`` — payment cards, four sensitive fields.

Ownership mismatches are reported exactly like missing records (NotFound).
Validation and ownership checks run before any cipher call.

Security Note:
    Never log plaintext or ciphertext values. Only log record ids, owner
    ids and field names.
"""
from __future__ import annotations

import uuid
import asyncio
import logging
from datetime import datetime, timezone
from collections.abc import Mapping
from typing import Any, Optional

from pydantic import BaseModel
from pydantic import ValidationError as ModelValidationError

from ..conf import OWNER_KEY, VAULT_LOGGER
from ..exceptions import (
    ConfigurationError,
    DecryptionFailure,
    NotFound,
    ValidationError,
)
from ..vault.codec import DecodedRecord, EncryptedRecordCodec, FieldDescriptor
from ..vault.crypto import EncryptionEngine
from .models import (
    CredentialCreate,
    CredentialUpdate,
    WalletCardCreate,
    WalletCardUpdate,
)
from .store import RecordStore

logger = logging.getLogger(VAULT_LOGGER)


def utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


class RecordService:
    """Generic service over records holding encrypted fields.

    Subclasses set:
        entity: human name used in messages.
        fields: FieldDescriptor list of sensitive fields.
        create_model / update_model: pydantic input models.
        searchable: metadata attributes matched by ``search()``.
    """

    entity: str = "Record"
    fields: tuple[FieldDescriptor, ...] = ()
    create_model: type[BaseModel]
    update_model: type[BaseModel]
    searchable: tuple[str, ...] = ()

    def __init__(
        self,
        store: RecordStore,
        engine: Optional[EncryptionEngine] = None,
    ):
        self.store = store
        self.codec = EncryptedRecordCodec(self.fields, engine)

    # ------------------------------------------------------------------
    # Hooks
    # ------------------------------------------------------------------

    def derive_metadata(self, sensitive: Mapping[str, str]) -> dict[str, Any]:
        """Non-sensitive attributes computed from plaintext before encryption."""
        return {}

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def check_ready(self) -> None:
        """Raise ConfigurationError if the encryption key is unusable."""
        provider = self.codec.engine.key_provider
        if not provider.is_configured():
            raise ConfigurationError(
                "Encryption service is not properly configured."
            )

    def _validate(self, model: type[BaseModel], data: Mapping[str, Any], partial: bool) -> dict:
        try:
            parsed = model.model_validate(dict(data))
        except ModelValidationError as exc:
            errors = [
                {
                    "field": ".".join(str(part) for part in err["loc"]),
                    "message": err["msg"],
                }
                for err in exc.errors()
            ]
            raise ValidationError(
                f"Invalid {self.entity.lower()} data", errors=errors
            ) from None
        return parsed.model_dump(by_alias=True, exclude_unset=partial)

    def _split(self, data: dict) -> tuple[dict, dict]:
        names = self.codec.names
        sensitive = {k: v for k, v in data.items() if k in names}
        metadata = {k: v for k, v in data.items() if k not in names}
        return sensitive, metadata

    @staticmethod
    def _owner(owner_id: Any) -> str:
        # owners are stored as strings
        if owner_id is None:
            raise ValidationError("Record owner is required")
        return str(owner_id)

    async def _fetch(self, owner_id: str, record_id: str) -> dict:
        record = await self.store.get(record_id)
        if record is None or record.get(OWNER_KEY) != owner_id:
            raise NotFound(f"{self.entity} not found")
        return record

    def _view(self, record: Mapping[str, Any], decoded: DecodedRecord) -> dict:
        view = self.codec.public(record)
        view.update(decoded.fields)
        view["fieldErrors"] = sorted(decoded.field_errors)
        view["hasError"] = decoded.has_error
        return view

    def _decode_one(self, record: Mapping[str, Any]) -> dict:
        decoded = self.codec.decode_record(record)
        if decoded.all_failed:
            logger.error(
                "All sensitive fields failed to decrypt for %s id=%s",
                self.entity, record.get("id"),
            )
            raise DecryptionFailure(
                f"Failed to decrypt {self.entity.lower()} data.",
                field_errors=decoded.field_errors,
            )
        return self._view(record, decoded)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def create(self, owner_id: Any, data: Mapping[str, Any]) -> dict:
        """Validate, encrypt and persist a new record.

        Returns:
            Public projection of the stored record, without any sensitive
            field values.

        Raises:
            ValidationError: If the input is rejected.
        """
        owner_id = self._owner(owner_id)
        values = self._validate(self.create_model, data, partial=False)
        sensitive, metadata = self._split(values)
        metadata.update(self.derive_metadata(sensitive))
        timestamp = utcnow()
        record = {
            "id": str(uuid.uuid4()),
            OWNER_KEY: owner_id,
            **metadata,
            **self.codec.encode_patch(sensitive),
            "createdAt": timestamp,
            "updatedAt": timestamp,
        }
        await self.store.put(record)
        logger.debug(
            "%s created: id=%s owner=%s", self.entity, record["id"], owner_id
        )
        return self.codec.public(record)

    async def get(self, owner_id: Any, record_id: str) -> dict:
        """Return the decrypted view of one record.

        Raises:
            NotFound: If the record is absent or owned by someone else.
            DecryptionFailure: If no sensitive field could be decrypted.
        """
        owner_id = self._owner(owner_id)
        record = await self._fetch(owner_id, record_id)
        return self._decode_one(record)

    async def list(self, owner_id: Any, category: Optional[str] = None) -> list[dict]:
        """Decrypted views of every record of an owner.

        A record whose fields fail to decrypt is returned with nulls and
        its ``fieldErrors``; it never fails the whole list.
        """
        owner_id = self._owner(owner_id)
        records = await self.store.query(owner_id)
        if category is not None:
            records = [r for r in records if r.get("category") == category]
        return await self._decode_many(records)

    async def search(self, owner_id: Any, q: str) -> list[dict]:
        """Records whose searchable attributes contain ``q``."""
        if not q:
            raise ValidationError("Search query (q) is required")
        owner_id = self._owner(owner_id)
        records = await self.store.query(owner_id)
        matches = [
            r for r in records
            if any(q in (r.get(attr) or "") for attr in self.searchable)
        ]
        return await self._decode_many(matches)

    async def _decode_many(self, records: list[dict]) -> list[dict]:
        items = []
        for record in records:
            decoded = self.codec.decode_record(record)
            items.append(self._view(record, decoded))
            # let other requests run between records
            await asyncio.sleep(0)
        return items

    async def update(self, owner_id: Any, record_id: str, patch: Mapping[str, Any]) -> dict:
        """Apply a partial update and return the decrypted result.

        Only sensitive fields present in ``patch`` are re-encrypted, each with
        a fresh IV; the stored triplets of every other field are left as is.

        Raises:
            NotFound: If the record is absent or owned by someone else.
            ValidationError: If the patch is rejected.
            DecryptionFailure: If no sensitive field of the result decrypts.
                A metadata-only patch is checked against the stored record
                first and is not written when that record is unreadable.
        """
        owner_id = self._owner(owner_id)
        current = await self._fetch(owner_id, record_id)
        values = self._validate(self.update_model, patch, partial=True)
        if not values:
            return self._decode_one(current)
        sensitive, metadata = self._split(values)
        if not sensitive:
            # nothing re-encrypted, the stored fields must already decrypt
            self._decode_one(current)
        metadata.update(self.derive_metadata(sensitive))
        changes = {
            **metadata,
            **self.codec.encode_patch(sensitive),
            "updatedAt": utcnow(),
        }
        try:
            updated = await self.store.update(record_id, changes)
        except KeyError:
            raise NotFound(f"{self.entity} not found") from None
        logger.debug(
            "%s updated: id=%s fields=%s",
            self.entity, record_id, sorted(values.keys()),
        )
        return self._decode_one(updated)

    async def delete(self, owner_id: Any, record_id: str) -> None:
        """Irreversibly remove a record.

        Raises:
            NotFound: If the record is absent or owned by someone else.
        """
        owner_id = self._owner(owner_id)
        await self._fetch(owner_id, record_id)
        await self.store.delete(record_id)
        logger.debug("%s deleted: id=%s owner=%s", self.entity, record_id, owner_id)


class CredentialService(RecordService):
    """Site credentials; the password is the only encrypted field."""

    entity = "Password entry"
    fields = (
        FieldDescriptor(
            name="password",
            iv_key="iv",
            cipher_key="encryptedPassword",
            tag_key="authTag",
        ),
    )
    create_model = CredentialCreate
    update_model = CredentialUpdate
    searchable = ("siteName", "username", "url")


class WalletCardService(RecordService):
    """Payment cards; holder name, number, expiry and CVV are encrypted."""

    entity = "Wallet card"
    fields = (
        FieldDescriptor.suffixed("cardholderName"),
        FieldDescriptor.suffixed("cardNumber"),
        FieldDescriptor.suffixed("expiryDate"),
        FieldDescriptor.suffixed("cvv"),
    )
    create_model = WalletCardCreate
    update_model = WalletCardUpdate

    def derive_metadata(self, sensitive: Mapping[str, str]) -> dict[str, Any]:
        if "cardNumber" in sensitive:
            return {"last4Digits": sensitive["cardNumber"][-4:]}
        return {}
