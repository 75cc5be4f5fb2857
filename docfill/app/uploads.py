"""
Upload Gate: 업로드된 템플릿 검증.

검증 순서:
1. 파일 파트 존재 여부
2. content-type == Word MIME **그리고** 확장자 .docx (대소문자 무시)
3. 크기 상한 (기본 5 MiB)

통과한 파일은 메모리에만 존재하며 디스크에 쓰지 않는다.
"""

import logging

from fastapi import UploadFile

from docfill.domain.constants import DOCX_EXTENSION, DOCX_MIME_TYPE, MAX_UPLOAD_BYTES
from docfill.domain.errors import ErrorCodes, ValidationError
from docfill.domain.schemas import TemplatePackage

logger = logging.getLogger(__name__)

NO_TEMPLATE_MESSAGE = "No .docx template uploaded"
INVALID_TYPE_MESSAGE = "Only .docx files are allowed"
TOO_LARGE_MESSAGE = "File too large"


def check_upload(filename: str, content_type: str | None) -> None:
    """
    파일명/content-type 검사.

    Raises:
        ValidationError: INVALID_FILE_TYPE (둘 중 하나라도 실패)
    """
    type_ok = (content_type or "").split(";")[0].strip().lower() == DOCX_MIME_TYPE
    ext_ok = filename.lower().endswith(DOCX_EXTENSION)

    if not (type_ok and ext_ok):
        raise ValidationError(
            ErrorCodes.INVALID_FILE_TYPE,
            INVALID_TYPE_MESSAGE,
            filename=filename,
            content_type=content_type,
        )


def check_size(size: int, max_bytes: int = MAX_UPLOAD_BYTES) -> None:
    """
    Raises:
        ValidationError: FILE_TOO_LARGE
    """
    if size > max_bytes:
        raise ValidationError(
            ErrorCodes.FILE_TOO_LARGE,
            TOO_LARGE_MESSAGE,
            max_bytes=max_bytes,
        )


async def accept_upload(
    upload: UploadFile | None,
    max_bytes: int = MAX_UPLOAD_BYTES,
) -> TemplatePackage:
    """
    업로드 파일 검증 후 TemplatePackage 반환.

    상한 + 1 바이트까지만 읽어서 초과 여부를 판단한다.

    Args:
        upload: multipart 파일 파트 (없으면 None)
        max_bytes: 크기 상한

    Returns:
        TemplatePackage

    Raises:
        ValidationError: NO_TEMPLATE, INVALID_FILE_TYPE, FILE_TOO_LARGE
    """
    if upload is None or not upload.filename:
        raise ValidationError(ErrorCodes.NO_TEMPLATE, NO_TEMPLATE_MESSAGE)

    check_upload(upload.filename, upload.content_type)

    content = await upload.read(max_bytes + 1)
    check_size(len(content), max_bytes)

    logger.debug(f"Accepted upload {upload.filename} ({len(content)} bytes)")
    return TemplatePackage(filename=upload.filename, content=content)
