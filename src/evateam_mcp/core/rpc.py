"""JSON-RPC envelope: request encoding and response classification."""

from __future__ import annotations

import json
from typing import Any, Dict, Mapping, Optional, Type

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from uuid6 import uuid7

from .errors import (
    EvaClientError,
    EvaModelValidationError,
    EvaParseError,
    EvaRPCError,
)
from .models import RPCResponse

JSONRPC_VERSION = "2.2"


def new_call_id() -> str:
    """Fresh time-ordered (UUIDv7) per-request identifier."""
    return str(uuid7())


class RPCRequest(BaseModel):
    jsonrpc: str = JSONRPC_VERSION
    method: str
    callid: str = Field(default_factory=new_call_id)
    args: Optional[Any] = None
    kwargs: Optional[Dict[str, Any]] = None

    model_config = ConfigDict(extra="forbid")


def build_request(
    method: str,
    kwargs: Optional[Mapping[str, Any]] = None,
    *,
    args: Optional[Any] = None,
) -> RPCRequest:
    if not method:
        raise EvaClientError("RPCRequest.method is required")
    return RPCRequest(
        method=method,
        kwargs=dict(kwargs) if kwargs is not None else None,
        args=args,
    )


def encode_request(request: RPCRequest) -> bytes:
    # None is dropped from the envelope only; kwargs values are sent as given
    payload = {k: v for k, v in request.model_dump().items() if v is not None}
    try:
        return json.dumps(payload, separators=(",", ":")).encode("utf-8")
    except (TypeError, ValueError) as exc:
        raise EvaClientError(f"marshal request body: {exc}") from exc


def _load_object(body: bytes) -> Dict[str, Any]:
    # Empty 200 bodies carry no result
    if not body:
        return {}

    try:
        data = json.loads(body)
    except ValueError as exc:
        snippet = body[:500].decode("utf-8", errors="replace")
        raise EvaParseError(
            f"unmarshal response body: expected JSON, got {snippet!r}"
        ) from exc

    if not isinstance(data, dict):
        raise EvaParseError(
            "unmarshal response body: expected a JSON object, "
            f"got {type(data).__name__}"
        )
    return data


def _rpc_error(error: Any, method: str) -> EvaRPCError:
    if isinstance(error, dict):
        code = error.get("code")
        message = error.get("message")
        return EvaRPCError(
            code=code if isinstance(code, int) else None,
            message=str(message) if message is not None else str(error),
            method=method,
        )
    return EvaRPCError(code=None, message=str(error), method=method)


def decode_response(
    body: bytes, result_type: Any = Any, *, method: str = ""
) -> RPCResponse:
    """
    Classify an HTTP 200 body.

    - error member present -> EvaRPCError (result is never interpreted)
    - otherwise -> RPCResponse[result_type]
    - malformed JSON / shape -> EvaParseError
    """
    data = _load_object(body)

    if data.get("error") is not None:
        raise _rpc_error(data["error"], method)

    model: Type[RPCResponse] = RPCResponse[result_type]
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise EvaModelValidationError(
            f"unmarshal response body: result of {method or 'call'} "
            f"did not match {getattr(result_type, '__name__', result_type)}: {exc}"
        ) from exc


__all__ = [
    "JSONRPC_VERSION",
    "RPCRequest",
    "new_call_id",
    "build_request",
    "encode_request",
    "decode_response",
]
