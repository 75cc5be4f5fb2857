"""
Generate Routes: 문서 생성.

- POST /api/generate → 기본 템플릿 (templates/default-letter.docx)
- POST /api/upload-and-generate → 업로드한 템플릿

요청 하나 = Received → Validated → Processed → Responded.
요청 사이에 남는 상태 없음. 렌더링은 스레드풀에서 실행.
"""

import json
import logging
from pathlib import Path
from typing import Any

from fastapi import APIRouter, Body, File, Form, Request, Response, UploadFile
from starlette.concurrency import run_in_threadpool

from docfill.app.responses import (
    docx_response,
    error_response,
    log_rejection,
    unexpected_error_response,
)
from docfill.app.uploads import accept_upload
from docfill.domain.constants import (
    DEFAULT_OUTPUT_FILENAME,
    UPLOAD_OUTPUT_FILENAME,
)
from docfill.domain.errors import (
    DocfillError,
    ErrorCodes,
    RenderError,
    TagIssue,
    ValidationError,
)
from docfill.domain.schemas import ErrorResponse, LetterRequest, TemplatePackage
from docfill.render.word import DocxRenderer

logger = logging.getLogger(__name__)

api_router = APIRouter()

DOCX_RESPONSES: dict[int | str, dict[str, Any]] = {
    200: {
        "content": {
            "application/vnd.openxmlformats-officedocument.wordprocessingml.document": {}
        },
        "description": "Generated .docx document",
    },
    400: {"model": ErrorResponse},
}


def load_default_template(path: Path) -> TemplatePackage:
    """
    기본 템플릿 읽기 (요청마다, 캐시 없음).

    Raises:
        RenderError: TEMPLATE_NOT_FOUND
    """
    try:
        content = path.read_bytes()
    except OSError as e:
        raise RenderError(
            ErrorCodes.TEMPLATE_NOT_FOUND,
            [TagIssue("", f"Default template could not be read: {path.name}")],
            path=str(path),
        ) from e
    return TemplatePackage(filename=path.name, content=content)


def parse_render_data(raw: str | None) -> dict[str, Any]:
    """
    업로드 모드의 data 필드 (JSON 문자열) → dict.

    비어 있으면 {}.

    Raises:
        ValidationError: INVALID_DATA (JSON 파싱 실패 또는 객체가 아님)
    """
    if not raw:
        return {}

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValidationError(
            ErrorCodes.INVALID_DATA,
            f"Invalid JSON in 'data' field: {e.msg} (line {e.lineno} column {e.colno})",
        ) from e

    if not isinstance(data, dict):
        raise ValidationError(
            ErrorCodes.INVALID_DATA,
            "The 'data' field must be a JSON object",
        )
    return data


async def _render(package: TemplatePackage, data: dict[str, Any]) -> bytes:
    renderer = DocxRenderer(package.content, name=package.filename)
    return await run_in_threadpool(renderer.render, data)


@api_router.post("/generate", responses=DOCX_RESPONSES)
async def generate_from_default(
    request: Request,
    body: Any = Body(None),
) -> Response:
    """
    기본 편지 템플릿으로 문서 생성.

    모든 필드는 선택 (기본값 ""). 검증 실패 없음:
    객체가 아닌 바디는 {}, 객체/배열 값은 JSON 텍스트로 채운다.
    """
    letter = LetterRequest.from_body(body)

    try:
        package = await run_in_threadpool(
            load_default_template,
            request.app.state.settings.default_template_path,
        )
        document = await _render(package, letter.to_render_data())
    except DocfillError as e:
        log_rejection("/api/generate", e)
        return error_response(e)
    except Exception as e:
        logger.exception("Unexpected error in /api/generate")
        return unexpected_error_response(e)

    return docx_response(document, DEFAULT_OUTPUT_FILENAME)


@api_router.post("/upload-and-generate", responses=DOCX_RESPONSES)
async def generate_from_upload(
    request: Request,
    template: UploadFile | None = File(None),
    data: str | None = Form(None),
) -> Response:
    """
    업로드한 .docx 템플릿으로 문서 생성.

    Form:
        template: .docx 파일 (5 MiB 이하)
        data: 템플릿에 채울 JSON 객체 문자열
    """
    try:
        package = await accept_upload(template, request.app.state.settings.max_upload_bytes)
        render_data = parse_render_data(data)
        document = await _render(package, render_data)
    except DocfillError as e:
        log_rejection("/api/upload-and-generate", e)
        return error_response(e)
    except Exception as e:
        logger.exception("Unexpected error in /api/upload-and-generate")
        return unexpected_error_response(e)

    return docx_response(document, UPLOAD_OUTPUT_FILENAME)
