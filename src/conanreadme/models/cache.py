from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class CacheEntry(BaseModel):
    """A single value held by ``TtlCache``.

    Timestamps are in the owning cache's clock, in milliseconds.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    key: str
    value: Any
    created_at: float  # Diagnostics only
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now > self.expires_at
