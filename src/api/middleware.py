"""ASGI middleware: security headers, CORS and body parsing/sanitization.

They are plain ASGI middleware so they can short-circuit a request before
routing and rewrite response headers without buffering responses.
"""
from __future__ import annotations

from typing import Any, Awaitable, Callable, Dict, Optional, Sequence

from starlette.datastructures import Headers, MutableHeaders
from starlette.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from core.config import MAX_BODY_BYTES
from core.exceptions import PayloadTooLargeError, SalonApiError, ValidationError
from core.form_parsing import parse_json_body, parse_urlencoded_body
from core.logging_config import get_logger
from core.sanitize import sanitize_value

LOGGER = get_logger(__name__)

# Hardening headers added to every response that does not set them itself
DEFAULT_SECURITY_HEADERS: Dict[str, str] = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "X-DNS-Prefetch-Control": "off",
    "X-Download-Options": "noopen",
    "X-Permitted-Cross-Domain-Policies": "none",
    "X-XSS-Protection": "0",
    "Referrer-Policy": "no-referrer",
    "Strict-Transport-Security": "max-age=15552000; includeSubDomains",
    "Cross-Origin-Opener-Policy": "same-origin",
    # Uploaded images are embedded by the storefront on another origin
    "Cross-Origin-Resource-Policy": "cross-origin",
    "Origin-Agent-Cluster": "?1",
}

JSON_MEDIA_TYPE = "application/json"
FORM_MEDIA_TYPE = "application/x-www-form-urlencoded"


class SecurityHeadersMiddleware:
    """Add security headers to every HTTP response."""

    def __init__(self, app: ASGIApp, headers: Optional[Dict[str, str]] = None) -> None:
        self.app = app
        self.headers = dict(DEFAULT_SECURITY_HEADERS if headers is None else headers)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        async def send_with_headers(message: Message) -> None:
            if message["type"] == "http.response.start":
                message.setdefault("headers", [])
                headers = MutableHeaders(scope=message)
                for name, value in self.headers.items():
                    if name not in headers:
                        headers[name] = value
            await send(message)

        await self.app(scope, receive, send_with_headers)


class PathExemptCORSMiddleware(CORSMiddleware):
    """
    CORSMiddleware that leaves responses under ``exempt_prefixes`` alone.

    Routes mounted there set their own cross-origin headers. Preflight
    requests are still answered here.
    """

    def __init__(self, app: ASGIApp, exempt_prefixes: Sequence[str] = (), **options: Any) -> None:
        super().__init__(app, **options)
        self.exempt_prefixes = tuple(p.rstrip("/") for p in exempt_prefixes)

    def _is_exempt(self, path: str) -> bool:
        return any(path == p or path.startswith(p + "/") for p in self.exempt_prefixes)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http" and self._is_exempt(scope["path"]):
            headers = Headers(scope=scope)
            is_preflight = scope["method"] == "OPTIONS" and "access-control-request-method" in headers
            if not is_preflight:
                await self.app(scope, receive, send)
                return
        await super().__call__(scope, receive, send)


def _media_type(headers: Headers) -> str:
    return headers.get("content-type", "").split(";", 1)[0].strip().lower()


def _parser_for(media_type: str) -> Optional[Callable[[bytes], Any]]:
    if media_type == JSON_MEDIA_TYPE or media_type.endswith("+json"):
        return parse_json_body
    if media_type == FORM_MEDIA_TYPE:
        return parse_urlencoded_body
    return None


class BodyParserMiddleware:
    """
    Parse JSON and URL-encoded bodies, enforce the size ceiling, sanitize.

    The sanitized body is stored in ``request.state.body`` and the parsed,
    unsanitized one in ``request.state.raw_body`` (both ``{}`` when the
    request carries none). The raw bytes are replayed to the application
    unchanged. Bodies of other media types are not parsed, but a declared
    Content-Length above the ceiling is still rejected.
    """

    def __init__(self, app: ASGIApp, max_body_bytes: int = MAX_BODY_BYTES) -> None:
        self.app = app
        self.max_body_bytes = max_body_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        state = scope.setdefault("state", {})
        state["body"] = {}
        state["raw_body"] = {}
        headers = Headers(scope=scope)

        try:
            self._check_declared_length(headers)
            parser = _parser_for(_media_type(headers))
            if parser is None:
                await self.app(scope, receive, send)
                return

            raw = await self._read_body(receive)
            parsed = parser(raw)
            state["raw_body"] = parsed
            state["body"] = sanitize_value(parsed)
        except SalonApiError as exc:
            LOGGER.warning(
                f"Rejected request body: {exc.mensaje}",
                extra={"extra_data": {"path": scope.get("path"), "status": exc.status_code}},
            )
            response = JSONResponse(
                status_code=exc.status_code,
                content={"success": False, "mensaje": exc.mensaje},
            )
            await response(scope, receive, send)
            return

        await self.app(scope, _replay(raw, receive), send)

    def _check_declared_length(self, headers: Headers) -> None:
        declared = headers.get("content-length")
        if declared is None:
            return
        try:
            length = int(declared)
        except ValueError:
            raise ValidationError("Content-Length inválido") from None
        if length > self.max_body_bytes:
            raise PayloadTooLargeError()

    async def _read_body(self, receive: Receive) -> bytes:
        chunks = []
        total = 0
        while True:
            message = await receive()
            if message["type"] == "http.disconnect":
                break
            chunk = message.get("body", b"")
            total += len(chunk)
            if total > self.max_body_bytes:
                raise PayloadTooLargeError()
            chunks.append(chunk)
            if not message.get("more_body", False):
                break
        return b"".join(chunks)


def _replay(raw: bytes, receive: Receive) -> Callable[[], Awaitable[Message]]:
    sent = False

    async def replay_receive() -> Message:
        nonlocal sent
        if not sent:
            sent = True
            return {"type": "http.request", "body": raw, "more_body": False}
        return await receive()

    return replay_receive


__all__ = [
    "DEFAULT_SECURITY_HEADERS",
    "SecurityHeadersMiddleware",
    "PathExemptCORSMiddleware",
    "BodyParserMiddleware",
]
