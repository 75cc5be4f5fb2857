"""
test_uploads.py - Upload Gate 테스트

테스트 대상:
- check_upload: MIME + 확장자 (둘 다 맞아야 통과)
- check_size: 크기 상한
- accept_upload: 파일 파트 → TemplatePackage
"""

from io import BytesIO

import pytest
from fastapi import UploadFile
from starlette.datastructures import Headers

from docfill.app.uploads import (
    INVALID_TYPE_MESSAGE,
    NO_TEMPLATE_MESSAGE,
    TOO_LARGE_MESSAGE,
    accept_upload,
    check_size,
    check_upload,
)
from docfill.domain.constants import DOCX_MIME_TYPE
from docfill.domain.errors import ErrorCodes, ValidationError


def _upload(content: bytes, filename: str = "letter.docx", mime: str = DOCX_MIME_TYPE) -> UploadFile:
    return UploadFile(
        file=BytesIO(content),
        filename=filename,
        headers=Headers({"content-type": mime}),
    )


# =============================================================================
# check_upload 테스트
# =============================================================================


class TestCheckUpload:
    """파일명/content-type 검사."""

    def test_valid(self):
        check_upload("letter.docx", DOCX_MIME_TYPE)

    def test_extension_case_insensitive(self):
        check_upload("LETTER.DOCX", DOCX_MIME_TYPE)

    def test_content_type_with_parameters(self):
        check_upload("letter.docx", f"{DOCX_MIME_TYPE}; charset=binary")

    def test_wrong_mime(self):
        """확장자만 맞으면 거절."""
        with pytest.raises(ValidationError) as exc_info:
            check_upload("letter.docx", "application/pdf")

        assert exc_info.value.code == ErrorCodes.INVALID_FILE_TYPE
        assert exc_info.value.message == INVALID_TYPE_MESSAGE

    def test_wrong_extension(self):
        """MIME만 맞으면 거절."""
        with pytest.raises(ValidationError) as exc_info:
            check_upload("letter.doc", DOCX_MIME_TYPE)

        assert exc_info.value.code == ErrorCodes.INVALID_FILE_TYPE

    def test_missing_content_type(self):
        with pytest.raises(ValidationError):
            check_upload("letter.docx", None)


# =============================================================================
# check_size 테스트
# =============================================================================


class TestCheckSize:
    """크기 상한."""

    def test_at_limit_passes(self):
        check_size(100, max_bytes=100)

    def test_over_limit(self):
        with pytest.raises(ValidationError) as exc_info:
            check_size(101, max_bytes=100)

        assert exc_info.value.code == ErrorCodes.FILE_TOO_LARGE
        assert exc_info.value.message == TOO_LARGE_MESSAGE


# =============================================================================
# accept_upload 테스트
# =============================================================================


class TestAcceptUpload:
    """업로드 파트 → TemplatePackage."""

    @pytest.mark.asyncio
    async def test_returns_package(self):
        package = await accept_upload(_upload(b"docx-bytes"), max_bytes=100)

        assert package.filename == "letter.docx"
        assert package.content == b"docx-bytes"
        assert package.size == 10

    @pytest.mark.asyncio
    async def test_missing_file(self):
        with pytest.raises(ValidationError) as exc_info:
            await accept_upload(None)

        assert exc_info.value.code == ErrorCodes.NO_TEMPLATE
        assert exc_info.value.message == NO_TEMPLATE_MESSAGE

    @pytest.mark.asyncio
    async def test_empty_filename_is_missing(self):
        with pytest.raises(ValidationError) as exc_info:
            await accept_upload(_upload(b"x", filename=""))

        assert exc_info.value.code == ErrorCodes.NO_TEMPLATE

    @pytest.mark.asyncio
    async def test_type_checked_before_size(self):
        """타입 검사가 먼저 (큰 PDF → INVALID_FILE_TYPE)."""
        upload = _upload(b"x" * 200, filename="big.pdf", mime="application/pdf")

        with pytest.raises(ValidationError) as exc_info:
            await accept_upload(upload, max_bytes=100)

        assert exc_info.value.code == ErrorCodes.INVALID_FILE_TYPE

    @pytest.mark.asyncio
    async def test_too_large(self):
        with pytest.raises(ValidationError) as exc_info:
            await accept_upload(_upload(b"x" * 101), max_bytes=100)

        assert exc_info.value.code == ErrorCodes.FILE_TOO_LARGE

    @pytest.mark.asyncio
    async def test_exact_limit_accepted(self):
        package = await accept_upload(_upload(b"x" * 100), max_bytes=100)

        assert package.size == 100
