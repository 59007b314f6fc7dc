"""MCP tool handlers. Each module exposes ``handle(arguments, state)``."""

from __future__ import annotations

from typing import TYPE_CHECKING, TypeVar

from pydantic import BaseModel, ValidationError

from conanreadme.errors import ConanReadmeError, ErrorCode

if TYPE_CHECKING:
    from typing import Any

ModelT = TypeVar("ModelT", bound=BaseModel)


def parse_input(model: type[ModelT], arguments: dict[str, Any] | None) -> ModelT:
    """Validate tool arguments, reporting the first problem as INVALID_INPUT."""
    try:
        return model.model_validate(arguments or {})
    except ValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(p) for p in first["loc"])
        message = first["msg"].removeprefix("Value error, ")
        if field:
            message = f"{field}: {message}"
        raise ConanReadmeError(ErrorCode.INVALID_INPUT, message) from exc


def minutes_to_ms(minutes: int) -> int:
    return minutes * 60 * 1000
