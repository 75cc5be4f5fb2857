"""
Inspect Routes: 템플릿 placeholder 조회.

- POST /api/inspect-template → {"placeholders": [...]}
"""

import logging
from typing import Any

from fastapi import APIRouter, File, Request, UploadFile
from starlette.concurrency import run_in_threadpool

from docfill.app.responses import (
    error_response,
    log_rejection,
    unexpected_error_response,
)
from docfill.app.uploads import accept_upload
from docfill.domain.errors import DocfillError
from docfill.domain.schemas import ErrorResponse, InspectResponse
from docfill.render.inspect import inspect_template

logger = logging.getLogger(__name__)

api_router = APIRouter()


@api_router.post(
    "/inspect-template",
    response_model=InspectResponse,
    responses={400: {"model": ErrorResponse}},
)
async def inspect_uploaded_template(
    request: Request,
    template: UploadFile | None = File(None),
) -> Any:
    """업로드한 템플릿의 placeholder 이름 목록 (중복 제거, 첫 등장 순)."""
    try:
        package = await accept_upload(template, request.app.state.settings.max_upload_bytes)
        placeholders = await run_in_threadpool(inspect_template, package.content)
    except DocfillError as e:
        log_rejection("/api/inspect-template", e)
        return error_response(e)
    except Exception as e:
        logger.exception("Unexpected error in /api/inspect-template")
        return unexpected_error_response(e)

    return InspectResponse(placeholders=placeholders)
