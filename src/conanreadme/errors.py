"""Error types shared by the clients, tool handlers, and server."""

from __future__ import annotations

import json
from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    INVALID_INPUT = "INVALID_INPUT"
    PACKAGE_NOT_FOUND = "PACKAGE_NOT_FOUND"
    VERSION_NOT_FOUND = "VERSION_NOT_FOUND"
    UPSTREAM_FETCH_FAILED = "UPSTREAM_FETCH_FAILED"
    RATE_LIMITED = "RATE_LIMITED"


class ConanReadmeError(Exception):
    """Domain error carrying a machine-readable code.

    ``recoverable`` tells the caller whether retrying the same request later
    can succeed (network trouble, rate limits) or not (bad input, unknown
    package).
    """

    def __init__(self, code: ErrorCode, message: str, *, recoverable: bool = False) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.recoverable = recoverable

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code.value,
            "message": self.message,
            "recoverable": self.recoverable,
        }

    def to_json(self) -> str:
        """Serialize as the ``{"error": {...}}`` envelope returned to MCP clients."""
        return json.dumps({"error": self.to_dict()})
