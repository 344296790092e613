"""
Pure ASGI middleware logging every HTTP request and its outcome.

Request and response bodies are redacted and truncated before they reach
the log. When a request targets a session (``sessionId`` in the JSON body,
or ``/admin/sessions/{id}`` in the path) the id is added to the record.
"""

import json
import logging
import re
import time
from typing import Any, Dict, List, Optional

from starlette.types import ASGIApp, Message, Receive, Scope, Send

from ..core.logging_config import filter_sensitive_data, truncate_large_data

logger = logging.getLogger(__name__)

_SESSION_PATH_RE = re.compile(r"^/admin/sessions/([^/]+)$")
_MAX_BODY_LOG = 5000


def _parse_json(raw: bytes) -> Optional[Any]:
    try:
        return json.loads(raw.decode("utf-8", errors="ignore"))
    except json.JSONDecodeError:
        return None


def _body_for_log(raw: bytes) -> Optional[str]:
    """Redacted JSON or plain text, truncated; None for an empty body."""
    if not raw:
        return None
    payload = _parse_json(raw)
    if payload is None:
        text = raw.decode("utf-8", errors="ignore")
    else:
        text = json.dumps(filter_sensitive_data(payload), ensure_ascii=False)
    return truncate_large_data(text, max_length=_MAX_BODY_LOG)


def _error_reason(raw: bytes) -> Optional[str]:
    """The 'detail'/'error'/'message' value of an error response, if any."""
    payload = _parse_json(raw)
    if isinstance(payload, dict):
        for key in ("detail", "error", "message"):
            if payload.get(key):
                return truncate_large_data(str(payload[key]), max_length=500)
    if raw:
        return truncate_large_data(raw.decode("utf-8", errors="ignore"), max_length=500)
    return None


def _session_id_for(path: str, request_body: bytes) -> Optional[str]:
    match = _SESSION_PATH_RE.match(path)
    if match:
        return match.group(1)
    payload = _parse_json(request_body) if request_body else None
    if isinstance(payload, dict) and isinstance(payload.get("sessionId"), str):
        return payload["sessionId"]
    return None


class RequestLoggingMiddleware:
    """Log request start, completion (level by status) and unhandled failures."""

    def __init__(self, app: ASGIApp, exclude_paths: Optional[List[str]] = None):
        """
        Args:
            app: The ASGI application
            exclude_paths: Paths that are passed through without logging
        """
        self.app = app
        self.exclude_paths = exclude_paths or ["/health", "/"]

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope.get("path", "") in self.exclude_paths:
            await self.app(scope, receive, send)
            return

        start_time = time.time()
        method = scope.get("method", "UNKNOWN")
        path = scope.get("path", "")
        client = scope.get("client")
        request_chunks: List[bytes] = []
        response_chunks: List[bytes] = []
        status_code = 0

        async def logging_receive() -> Message:
            message = await receive()
            if message["type"] == "http.request":
                request_chunks.append(message.get("body", b""))
            return message

        async def logging_send(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message.get("status", 0)
            elif message["type"] == "http.response.body":
                response_chunks.append(message.get("body", b""))
            await send(message)

        logger.info(
            f"Request started: {method} {path}",
            extra={"extra_fields": {
                "method": method,
                "path": path,
                "client": client[0] if client else None,
            }}
        )

        try:
            await self.app(scope, logging_receive, logging_send)
        except Exception as e:
            logger.error(
                f"Request failed: {method} {path} - {str(e)}",
                exc_info=True,
                extra={"extra_fields": {
                    "method": method,
                    "path": path,
                    "duration_ms": round((time.time() - start_time) * 1000, 2),
                    "error": str(e),
                }}
            )
            raise

        duration_ms = (time.time() - start_time) * 1000
        request_body = b"".join(request_chunks)
        response_body = b"".join(response_chunks)

        fields: Dict[str, Any] = {
            "method": method,
            "path": path,
            "status_code": status_code,
            "duration_ms": round(duration_ms, 2),
            "session_id": _session_id_for(path, request_body),
        }
        if logger.isEnabledFor(logging.DEBUG):
            fields["request_body"] = _body_for_log(request_body)
            fields["response_body"] = _body_for_log(response_body)

        if status_code < 400:
            level = logging.INFO
        elif status_code < 500:
            level = logging.WARNING
        else:
            level = logging.ERROR

        completion = f"Request completed: {method} {path} - {status_code} ({duration_ms:.2f}ms)"
        if status_code >= 400:
            fields["error_reason"] = _error_reason(response_body)
            completion += f" | error_reason={fields['error_reason']}"

        logger.log(level, completion, extra={"extra_fields": fields})
