"""
Translate client errors into user-facing tool errors.

Classification is best-effort: the API reports most failures as free-text
messages, so categories are picked from the HTTP status when there is one
and from message substrings otherwise. A message that happens to contain
"401" or "invalid" will be classified accordingly.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from evateam_mcp.core.errors import EvaClientError, EvaHTTPError, QueryBuildError


class ToolError(Exception):
    """Base error surfaced to tool callers."""

    def __init__(self, operation: str, message: str):
        super().__init__(message)
        self.operation = operation


class NotFoundError(ToolError):
    pass


class UnauthorizedError(ToolError):
    pass


class ForbiddenError(ToolError):
    pass


class InvalidInputError(ToolError):
    pass


def invalid_input(operation: str, detail: str) -> InvalidInputError:
    return InvalidInputError(operation, f"Invalid input: {operation}: {detail}")


def wrap_error(operation: str, exc: Exception) -> ToolError:
    """Map a client failure onto a ToolError category."""
    if isinstance(exc, ToolError):
        return exc

    msg = str(exc)
    lowered = msg.lower()
    status = exc.status_code if isinstance(exc, EvaHTTPError) else None

    if status == 404 or "not found" in lowered:
        return NotFoundError(
            operation, "Resource not found. Please check the ID or code and try again."
        )
    if status == 401 or "401" in msg or "unauthorized" in lowered:
        return UnauthorizedError(
            operation, "Authentication failed. Please check EVA_API_TOKEN."
        )
    if status == 403 or "403" in msg or "forbidden" in lowered:
        return ForbiddenError(
            operation, "Access denied. You don't have permission for this operation."
        )
    if (
        isinstance(exc, QueryBuildError)
        or "validation" in lowered
        or "invalid" in lowered
    ):
        return invalid_input(operation, msg)
    return ToolError(operation, f"Operation failed: {operation}: {msg}")


@contextmanager
def translate_errors(operation: str) -> Iterator[None]:
    """Re-raise client errors from the wrapped block as ToolErrors."""
    try:
        yield
    except EvaClientError as exc:
        raise wrap_error(operation, exc) from exc


__all__ = [
    "ToolError",
    "NotFoundError",
    "UnauthorizedError",
    "ForbiddenError",
    "InvalidInputError",
    "invalid_input",
    "wrap_error",
    "translate_errors",
]
