from __future__ import annotations

import logging
import os
import time
from typing import Any, Dict, Mapping, Optional

import httpx
from dotenv import load_dotenv

from .errors import (
    EvaClientError,
    EvaConfigError,
    EvaHTTPError,
    EvaTimeoutError,
    EvaTransportError,
)
from .metrics import RequestMetrics
from .models import RPCResponse
from .resources import (
    CommentResource,
    DocumentResource,
    EpicResource,
    ListResource,
    PersonResource,
    ProjectResource,
    StatusHistoryResource,
    TaskLinkResource,
    TaskResource,
    TimeLogResource,
)
from .rpc import build_request, decode_response, encode_request

API_PATH = "/api/"
DEFAULT_TIMEOUT_SECONDS = 30.0

# Side-channel failures are reported here, never to the caller
_fallback_log = logging.getLogger("evateam_mcp.core.client")


def env_bool(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def env_timeout(name: str = "EVA_TIMEOUT") -> float:
    """Timeout in whole seconds; unset, non-numeric or non-positive -> default."""
    raw = (os.getenv(name) or "").strip()
    try:
        seconds = int(raw)
    except ValueError:
        return DEFAULT_TIMEOUT_SECONDS
    return float(seconds) if seconds > 0 else DEFAULT_TIMEOUT_SECONDS


def _validate_base_url(base_url: str) -> httpx.URL:
    try:
        url = httpx.URL(base_url)
    except httpx.InvalidURL as exc:
        raise EvaConfigError(f"baseURL: malformed URL {base_url!r}: {exc}") from exc
    if url.scheme not in ("http", "https") or not url.host:
        raise EvaConfigError(
            f"baseURL: expected an absolute http(s) URL, got {base_url!r}"
        )
    return url


class EvaClient:
    """
    Shared HTTP client for the EVA Team JSON-RPC API.
    - Handles bearer auth, base URL and timeout
    - One POST per call: no retries, no batching, no caching
    - Detects RPC errors embedded in HTTP 200 bodies
    - Returns RPCResponse envelopes with result validated against a target type
    - No business logic; resources and tools own domain decisions
    """

    def __init__(
        self,
        *,
        base_url: str,
        api_token: str,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        debug: bool = False,
        logger: Optional[logging.Logger] = None,
        metrics: Optional[RequestMetrics] = None,
        http: Optional[httpx.AsyncClient] = None,
    ):
        base_url = (base_url or "").strip().rstrip("/")
        api_token = (api_token or "").strip()

        if not base_url:
            raise EvaConfigError("baseURL: option is required")
        url = _validate_base_url(base_url)
        if not api_token:
            raise EvaConfigError("APIToken: option is required")
        if not timeout_seconds or timeout_seconds <= 0:
            timeout_seconds = DEFAULT_TIMEOUT_SECONDS

        self.base_url = base_url
        self.host = url.host
        self.endpoint = base_url + API_PATH
        self.timeout_seconds = timeout_seconds
        self.debug = debug
        self.log = logger
        self.metrics = metrics

        # Sent on every request so an injected httpx client gets them too
        self._headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "Authorization": f"Bearer {api_token}",
        }
        self._owns_http = http is None
        self.http = http or httpx.AsyncClient(
            headers=self._headers, timeout=timeout_seconds
        )

        self.projects = ProjectResource(self)
        self.tasks = TaskResource(self)
        self.epics = EpicResource(self)
        self.documents = DocumentResource(self)
        self.lists = ListResource(self)
        self.persons = PersonResource(self)
        self.time_logs = TimeLogResource(self)
        self.comments = CommentResource(self)
        self.task_links = TaskLinkResource(self)
        self.status_history = StatusHistoryResource(self)

    @classmethod
    def from_env(cls, **kwargs: Any) -> "EvaClient":
        load_dotenv()
        kwargs.setdefault("timeout_seconds", env_timeout())
        kwargs.setdefault("debug", env_bool("EVA_DEBUG"))
        return cls(
            base_url=os.getenv("EVA_API_URL", "").strip(),
            api_token=os.getenv("EVA_API_TOKEN", "").strip(),
            **kwargs,
        )

    async def aclose(self) -> None:
        if self._owns_http:
            await self.http.aclose()

    async def __aenter__(self) -> "EvaClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def call(
        self,
        method: str,
        kwargs: Optional[Mapping[str, Any]] = None,
        *,
        result_type: Any = Any,
        args: Optional[Any] = None,
        call_site: Optional[str] = None,
    ) -> RPCResponse:
        """
        Core request method: one envelope, one POST.
        - Raises EvaTransportError (EvaTimeoutError on timeout) on network failure
        - Raises EvaHTTPError on non-2xx HTTP responses
        - Raises EvaRPCError when a 200 body carries an error object
        - Raises EvaParseError if the body isn't the expected JSON envelope
        - Returns RPCResponse[result_type] on success
        """
        request = build_request(method, kwargs, args=args)
        start = time.perf_counter()
        status = 0
        request_body = b""
        response_body = b""
        error: Optional[BaseException] = None

        try:
            request_body = encode_request(request)
            try:
                resp = await self.http.post(
                    self.endpoint,
                    content=request_body,
                    headers=self._headers,
                    timeout=self.timeout_seconds,
                )
            except httpx.TimeoutException as exc:
                raise EvaTimeoutError(
                    f"http request failed: timeout calling {method}: {exc}"
                ) from exc
            except httpx.HTTPError as exc:
                raise EvaTransportError(
                    f"http request failed: {method}: {exc}"
                ) from exc

            status = resp.status_code
            response_body = resp.content

            if status < 200 or status >= 300:
                raise EvaHTTPError(
                    status_code=status,
                    method=method,
                    body=resp.text,
                )

            return decode_response(response_body, result_type, method=method)
        except EvaClientError as exc:
            error = exc
            raise
        finally:
            self._observe(
                method=method,
                callid=request.callid,
                call_site=call_site or "unknown",
                status=status,
                seconds=time.perf_counter() - start,
                request_body=request_body,
                response_body=response_body,
                error=error,
            )

    def _observe(
        self,
        *,
        method: str,
        callid: str,
        call_site: str,
        status: int,
        seconds: float,
        request_body: bytes,
        response_body: bytes,
        error: Optional[BaseException],
    ) -> None:
        if self.metrics is not None:
            try:
                self.metrics.record_request_duration(
                    status, method, self.host, call_site, seconds
                )
            except Exception as exc:
                _fallback_log.warning("metrics sink failed: %s", exc)

        if self.log is not None and self.debug:
            extra: Dict[str, Any] = {
                "method": method,
                "url": self.endpoint,
                "call_site": call_site,
                "callid": callid,
                "request_body": request_body.decode("utf-8", errors="replace"),
                "response_body": response_body.decode("utf-8", errors="replace"),
                "status": status,
                "duration_ms": int(seconds * 1000),
                "error": str(error) if error is not None else None,
            }
            try:
                self.log.debug("eva.request", extra=extra)
            except Exception as exc:
                _fallback_log.warning("logger sink failed: %s", exc)


__all__ = [
    "EvaClient",
    "API_PATH",
    "DEFAULT_TIMEOUT_SECONDS",
    "env_bool",
    "env_timeout",
]
