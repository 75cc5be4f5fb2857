"""
FastAPI 애플리케이션 진입점.

실행:
- 개발: uvicorn docfill.app.main:app --reload
- 프로덕션: docfill  (PORT 환경 변수, 기본 3000)
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from docfill.app.middleware import (
    AccessLogMiddleware,
    BodySizeLimitMiddleware,
    RateLimitMiddleware,
    SecurityHeadersMiddleware,
)
from docfill.app.ratelimit import InMemoryRateLimitStore, RateLimitStore
from docfill.app.routes import generate, inspect
from docfill.core.config import Settings, load_settings
from docfill.core.logging import configure_logging
from docfill.domain.errors import ErrorCodes

logger = logging.getLogger(__name__)


# =============================================================================
# Error Handlers
# =============================================================================


def _format_validation_error(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(p) for p in error.get("loc", ()) if p != "body")
        message = error.get("msg", "invalid value")
        parts.append(f"{location}: {message}" if location else message)
    return "Invalid request: " + "; ".join(parts)


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """스키마 검증 실패 → 400 (422 대신)."""
    return JSONResponse(
        status_code=400,
        content={
            "error": _format_validation_error(exc),
            "code": ErrorCodes.INVALID_REQUEST,
        },
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    """
    프레임워크 HTTPException (multipart 파싱 실패, 404 등) → {"error": ...}.

    상태 코드는 유지한다.
    """
    code = (
        ErrorCodes.INVALID_REQUEST
        if exc.status_code == 400
        else ErrorCodes.HTTP_ERROR
    )
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail), "code": code},
        headers=getattr(exc, "headers", None),
    )


# =============================================================================
# App Factory
# =============================================================================


def create_app(
    settings: Settings | None = None,
    rate_limit_store: RateLimitStore | None = None,
) -> FastAPI:
    """
    애플리케이션 생성.

    Args:
        settings: 서비스 설정 (없으면 default.yaml + 환경 변수)
        rate_limit_store: rate limit 카운터 저장소 (없으면 프로세스 내 메모리)

    Returns:
        FastAPI 인스턴스
    """
    if settings is None:
        settings = load_settings()
    if rate_limit_store is None:
        rate_limit_store = InMemoryRateLimitStore()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        # Startup
        if not settings.default_template_path.exists():
            logger.warning(
                f"Default template missing: {settings.default_template_path} "
                "(/api/generate will fail until it exists)"
            )
        logger.info(f"docfill ready (port={settings.port})")

        yield

    app = FastAPI(
        title="docfill",
        description="Word(.docx) 템플릿 placeholder 채우기 서비스",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.rate_limit_store = rate_limit_store

    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)

    # 마지막에 등록한 미들웨어가 가장 바깥:
    # SecurityHeaders → CORS → RateLimit → BodySizeLimit → AccessLog → routes
    app.add_middleware(AccessLogMiddleware)
    app.add_middleware(
        BodySizeLimitMiddleware,
        max_json_bytes=settings.max_json_bytes,
        max_upload_bytes=settings.max_upload_bytes,
    )
    app.add_middleware(
        RateLimitMiddleware,
        store=rate_limit_store,
        max_requests=settings.rate_limit_max_requests,
        window_seconds=settings.rate_limit_window_seconds,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
        allow_credentials=False,
    )
    app.add_middleware(SecurityHeadersMiddleware)

    # API 라우트
    app.include_router(generate.api_router, prefix="/api", tags=["Generate API"])
    app.include_router(inspect.api_router, prefix="/api", tags=["Inspect API"])

    @app.get("/health")
    async def health() -> dict[str, str]:
        """헬스 체크."""
        return {"status": "ok"}

    # 데모 페이지 (/) - 라우트 등록 후 마지막에 mount
    if settings.static_dir is not None and settings.static_dir.exists():
        app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="static")

    return app


def _build_default_app() -> FastAPI:
    settings = load_settings()
    configure_logging(settings.log_level)
    return create_app(settings)


app = _build_default_app()


# =============================================================================
# CLI Entry Point
# =============================================================================


def run() -> None:
    """`docfill` 콘솔 스크립트."""
    import uvicorn

    settings: Settings = app.state.settings
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
