"""
응답 헬퍼: .docx 첨부 응답, 에러 JSON 응답.

모든 라우트 에러는 400 + {"error": ..., "code": ..., "details": [...]}.
"""

import logging

from fastapi import Response
from fastapi.responses import JSONResponse

from docfill.domain.constants import DOCX_MIME_TYPE, content_disposition
from docfill.domain.errors import DocfillError, ErrorCodes

logger = logging.getLogger(__name__)

ERROR_STATUS_CODE = 400


def docx_response(content: bytes, filename: str) -> Response:
    """생성된 문서를 첨부 파일로 반환."""
    return Response(
        content=content,
        status_code=200,
        media_type=DOCX_MIME_TYPE,
        headers={"Content-Disposition": content_disposition(filename)},
    )


def error_response(error: DocfillError) -> JSONResponse:
    """DocfillError → 400 JSON."""
    return JSONResponse(status_code=ERROR_STATUS_CODE, content=error.to_dict())


def unexpected_error_response(error: Exception) -> JSONResponse:
    """예상치 못한 예외도 500이 아니라 400 JSON으로 변환."""
    message = str(error) or type(error).__name__
    return JSONResponse(
        status_code=ERROR_STATUS_CODE,
        content={"error": message, "code": ErrorCodes.INTERNAL_ERROR},
    )


def log_rejection(route: str, error: DocfillError) -> None:
    """거절된 요청 로그: 에러 종류, 코드, 첫 줄 메시지, 컨텍스트."""
    summary = error.message.splitlines()[0] if error.message else ""
    context = ", ".join(f"{key}={value!r}" for key, value in error.context.items())
    logger.info(
        f"{route} rejected ({error.kind}): [{error.code}] {summary}"
        + (f" [{context}]" if context else "")
    )
