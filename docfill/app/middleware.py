"""
HTTP 미들웨어: 모든 요청에 적용되는 정책.

- SecurityHeadersMiddleware: 보안 헤더 (helmet 기본값과 동일한 세트)
- RateLimitMiddleware: 클라이언트 IP당 고정 윈도우 제한 (기본 60회/분)
- BodySizeLimitMiddleware: 요청 바디 상한 (JSON 1 MiB, multipart는 업로드 상한 기준)
- AccessLogMiddleware: 요청 로그

등록 순서는 main.create_app() 참조 (마지막에 등록한 것이 가장 바깥).
"""

import logging
import math
import time

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.datastructures import Headers
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from docfill.domain.constants import MULTIPART_OVERHEAD_BYTES
from docfill.domain.errors import ErrorCodes

from .ratelimit import RateLimitStore

logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "Content-Security-Policy": (
        "default-src 'self';base-uri 'self';font-src 'self' https: data:;"
        "form-action 'self';frame-ancestors 'self';img-src 'self' data:;"
        "object-src 'none';script-src 'self';script-src-attr 'none';"
        "style-src 'self' https: 'unsafe-inline';upgrade-insecure-requests"
    ),
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
    "Origin-Agent-Cluster": "?1",
    "Referrer-Policy": "no-referrer",
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
    "X-Content-Type-Options": "nosniff",
    "X-DNS-Prefetch-Control": "off",
    "X-Download-Options": "noopen",
    "X-Frame-Options": "SAMEORIGIN",
    "X-Permitted-Cross-Domain-Policies": "none",
    "X-XSS-Protection": "0",
}

RATE_LIMIT_MESSAGE = "Too many requests, please try again later."
PAYLOAD_TOO_LARGE_MESSAGE = "Request entity too large"


def client_key(request: Request) -> str:
    """rate limit 키 (클라이언트 IP)."""
    if request.client is None:
        return "unknown"
    return request.client.host


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """모든 응답에 보안 헤더 추가 (이미 설정된 헤더는 유지)."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    고정 윈도우 rate limit.

    한도 초과 요청은 핸들러에 도달하지 않고 429로 거절된다.
    """

    def __init__(
        self,
        app: ASGIApp,
        store: RateLimitStore,
        max_requests: int,
        window_seconds: float,
    ) -> None:
        super().__init__(app)
        self.store = store
        self.max_requests = max_requests
        self.window_seconds = window_seconds

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        key = client_key(request)
        state = self.store.hit(key, self.window_seconds)
        reset_in = max(0, math.ceil(state.reset_at - self.store.now()))
        headers = {
            "RateLimit-Limit": str(self.max_requests),
            "RateLimit-Remaining": str(max(0, self.max_requests - state.count)),
            "RateLimit-Reset": str(reset_in),
        }

        if state.count > self.max_requests:
            logger.warning(f"Rate limit exceeded for {key} ({state.count} requests)")
            return JSONResponse(
                status_code=429,
                content={"error": RATE_LIMIT_MESSAGE, "code": ErrorCodes.RATE_LIMITED},
                headers={**headers, "Retry-After": str(reset_in)},
            )

        response = await call_next(request)
        response.headers.update(headers)
        return response


class _BodyTooLarge(Exception):
    """receive 래퍼 → BodySizeLimitMiddleware 신호."""


class BodySizeLimitMiddleware:
    """
    요청 바디 상한 (순수 ASGI).

    - multipart: 업로드 상한 + data 필드(JSON 상한) + 경계 여유분
    - 그 외 (JSON 등): JSON 상한

    Content-Length가 있으면 먼저 검사하고, 실제로 들어오는 바이트도
    receive를 감싸 센다 (chunked 요청은 Content-Length가 없음).
    상한을 넘는 순간 읽기를 멈추고 413을 보낸다.
    """

    def __init__(
        self,
        app: ASGIApp,
        max_json_bytes: int,
        max_upload_bytes: int,
        multipart_overhead: int = MULTIPART_OVERHEAD_BYTES,
    ) -> None:
        self.app = app
        self.max_json_bytes = max_json_bytes
        self.max_upload_bytes = max_upload_bytes
        self.multipart_overhead = multipart_overhead

    def limit_for(self, content_type: str) -> int:
        if content_type.lower().startswith("multipart/"):
            return self.max_upload_bytes + self.max_json_bytes + self.multipart_overhead
        return self.max_json_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        headers = Headers(scope=scope)
        limit = self.limit_for(headers.get("content-type", ""))
        content_length = headers.get("content-length", "")

        if content_length.isdigit() and int(content_length) > limit:
            await self._reject(scope, receive, send, int(content_length))
            return

        received = 0
        exceeded = False
        response_started = False

        async def limited_receive() -> Message:
            nonlocal received, exceeded
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > limit:
                    exceeded = True
                    raise _BodyTooLarge()
            return message

        async def guarded_send(message: Message) -> None:
            nonlocal response_started
            if exceeded and not response_started:
                # 바디 파싱 실패로 만들어진 응답은 버리고 413으로 대체
                return
            if message["type"] == "http.response.start":
                response_started = True
            await send(message)

        try:
            await self.app(scope, limited_receive, guarded_send)
        except Exception:
            # 바디 읽기 중단으로 생긴 예외만 413으로 바꾼다
            if not exceeded:
                raise

        if exceeded and not response_started:
            await self._reject(scope, receive, send, received)

    async def _reject(self, scope: Scope, receive: Receive, send: Send, size: int) -> None:
        logger.warning(f"Request body too large: {scope.get('path')} ({size}+ bytes)")
        response = JSONResponse(
            status_code=413,
            content={
                "error": PAYLOAD_TOO_LARGE_MESSAGE,
                "code": ErrorCodes.PAYLOAD_TOO_LARGE,
            },
        )
        await response(scope, receive, send)


class AccessLogMiddleware(BaseHTTPMiddleware):
    """요청 로그: method, path, status, 처리 시간."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code} "
            f"({elapsed_ms:.1f} ms)"
        )
        return response
