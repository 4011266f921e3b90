"""Cache entry model: payload plus creation and expiration timestamps."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from storehouse_core.constants import CREATED_AT_FIELD, EXPIRES_AT_FIELD, RESERVED_FIELDS


class CacheEntry(BaseModel):
    """A cached payload and its timestamps.

    Timestamps are Unix seconds. They are never part of ``payload``; the
    connection stores them in secondary indexes next to the body.
    """

    model_config = ConfigDict(frozen=True)

    key: str = Field(description="Logical cache key, before escaping")
    payload: dict[str, Any] = Field(
        default_factory=dict, description="Cached content without timestamp fields"
    )
    created_at: int = Field(default=0, description="When the entry was first written")
    expires_at: int = Field(default=0, description="When the entry becomes stale")

    @field_validator("created_at", "expires_at", mode="before")
    @classmethod
    def coerce_timestamp(cls, value: Any) -> int:  # noqa: ANN401
        """Coerce absent values to 0 and datetimes/floats/strings to int seconds."""
        if value is None:
            return 0
        if isinstance(value, datetime):
            return int(value.timestamp())
        if isinstance(value, float):
            try:
                return int(value)
            except OverflowError as exc:
                msg = f"timestamp out of range: {value}"
                raise ValueError(msg) from exc
        if isinstance(value, str):
            return int(value.strip())
        return value  # type: ignore[no-any-return]

    @field_validator("payload")
    @classmethod
    def reject_reserved_fields(cls, value: dict[str, Any]) -> dict[str, Any]:
        """Timestamp fields belong on the entry, not inside the payload."""
        reserved = [name for name in RESERVED_FIELDS if name in value]
        if reserved:
            msg = f"payload must not contain reserved fields: {', '.join(reserved)}"
            raise ValueError(msg)
        return value

    @classmethod
    def from_mapping(cls, key: str, data: Mapping[str, Any]) -> CacheEntry:
        """Build an entry from a flat mapping without touching the mapping."""
        payload = dict(data)
        created_at = payload.pop(CREATED_AT_FIELD, None)
        expires_at = payload.pop(EXPIRES_AT_FIELD, None)
        return cls(key=key, payload=payload, created_at=created_at, expires_at=expires_at)

    def to_mapping(self) -> dict[str, Any]:
        """Return the payload merged with both timestamp fields."""
        return {
            **self.payload,
            CREATED_AT_FIELD: self.created_at,
            EXPIRES_AT_FIELD: self.expires_at,
        }

    def with_expiry(self, expires_at: int) -> CacheEntry:
        """Return a copy with only the expiration time replaced."""
        return self.model_copy(update={"expires_at": int(expires_at)})

    def is_expired(self, now: int) -> bool:
        """Whether the entry is stale at ``now``."""
        return self.expires_at <= now
