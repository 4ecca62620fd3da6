from __future__ import annotations

from typing import Optional


class EvaClientError(Exception):
    """Base error for client failures."""


class EvaConfigError(EvaClientError, ValueError):
    """Missing or malformed client option (base URL, API token)."""


class QueryBuildError(EvaClientError, ValueError):
    """Query built without the parts needed to address an entity."""


class EvaTransportError(EvaClientError):
    """Network/connection failure before any HTTP response was received."""


class EvaTimeoutError(EvaTransportError):
    pass


class EvaHTTPError(EvaClientError):
    def __init__(self, *, status_code: int, method: str, body: str):
        super().__init__(f"API error {status_code} ({method}): {body}")
        self.status_code = status_code
        self.method = method
        self.body = body


class EvaRPCError(EvaClientError):
    """
    Domain error carried inside an HTTP 200 body:
    {"error": {"code": <int>, "message": <str>}}
    """

    def __init__(self, *, code: Optional[int], message: str, method: str = ""):
        super().__init__(message)
        self.code = code
        self.message = message
        self.method = method

    def __repr__(self) -> str:
        return f"EvaRPCError(code={self.code!r}, message={self.message!r})"


class EvaParseError(EvaClientError):
    pass


class EvaModelValidationError(EvaParseError):
    pass


__all__ = [
    "EvaClientError",
    "EvaConfigError",
    "QueryBuildError",
    "EvaTransportError",
    "EvaTimeoutError",
    "EvaHTTPError",
    "EvaRPCError",
    "EvaParseError",
    "EvaModelValidationError",
]
