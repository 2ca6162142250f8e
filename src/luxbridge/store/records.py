# Stored record envelope.
# Created: 2026-10-12
#
# Records are written as {"kind": <tag>, "v": <schema version>, "data": {...}}.
# Decoding checks the tag and version before validating the payload, so a key
# holding the wrong kind of record (or an older layout) is rejected rather
# than half-parsed.

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, ClassVar, Self, TypeVar

from pydantic import BaseModel, ValidationError

from luxbridge.errors import MalformedRecordError

if TYPE_CHECKING:
    from luxbridge.store.base import CredentialStore

logger = logging.getLogger(__name__)


class StoredRecord(BaseModel):
    """Base class for everything persisted in the credential store."""

    KIND: ClassVar[str] = ""
    SCHEMA_VERSION: ClassVar[int] = 1

    def encode(self) -> str:
        envelope = {
            "kind": self.KIND,
            "v": self.SCHEMA_VERSION,
            "data": self.model_dump(mode="json"),
        }
        return json.dumps(envelope, separators=(",", ":"))

    @classmethod
    def decode(cls, raw: str | bytes) -> Self:
        try:
            envelope = json.loads(raw)
        except (TypeError, ValueError) as exc:
            raise MalformedRecordError(f"{cls.KIND}: not valid JSON") from exc

        if not isinstance(envelope, dict):
            raise MalformedRecordError(f"{cls.KIND}: expected an object envelope")
        if envelope.get("kind") != cls.KIND:
            raise MalformedRecordError(
                f"{cls.KIND}: unexpected record kind {envelope.get('kind')!r}"
            )
        if envelope.get("v") != cls.SCHEMA_VERSION:
            raise MalformedRecordError(
                f"{cls.KIND}: unsupported schema version {envelope.get('v')!r}"
            )

        try:
            return cls.model_validate(envelope.get("data"))
        except ValidationError as exc:
            raise MalformedRecordError(
                f"{cls.KIND}: invalid payload ({exc.error_count()} errors)"
            ) from exc


R = TypeVar("R", bound=StoredRecord)


async def read_record(store: CredentialStore, key: str, record_cls: type[R]) -> R | None:
    """Load and decode *key*, treating a missing or malformed record as absent."""
    raw = await store.get(key)
    if raw is None:
        return None
    try:
        return record_cls.decode(raw)
    except MalformedRecordError as exc:
        logger.warning("Ignoring malformed record at %s: %s", key, exc.message)
        return None
