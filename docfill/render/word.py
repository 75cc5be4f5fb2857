"""
Word (DOCX) 렌더러: docxtpl 기반.

- 입력/출력 모두 메모리 버퍼 (디스크 저장 없음)
- placeholder: {{refNo}}, {{ subject }} 등 Jinja2 문법
- 값의 줄바꿈(\\n)은 Word 줄바꿈으로 변환 (docxtpl Listing)
- 렌더링 실패 시 문제 있는 태그를 전부 모아 RenderError로 보고
"""

import logging
from collections.abc import Mapping
from io import BytesIO
from typing import Any

from docxtpl import DocxTemplate, Listing
from jinja2 import Environment, TemplateError

from docfill.domain.errors import ErrorCodes, ExtractionError, RenderError, TagIssue

from .inspect import extract_text
from .tags import diagnose

logger = logging.getLogger(__name__)


def _prepare_value(value: Any) -> Any:
    """여러 줄 문자열 → Listing (중첩 list/dict도 처리)."""
    if isinstance(value, str):
        return Listing(value) if "\n" in value else value
    if isinstance(value, Mapping):
        return {key: _prepare_value(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_prepare_value(item) for item in value]
    return value


class DocxRenderer:
    """
    Word 문서 렌더러.

    Usage:
        renderer = DocxRenderer(template_bytes)
        document_bytes = renderer.render({"refNo": "123"})
    """

    def __init__(self, template: bytes, name: str = "template.docx"):
        """
        Args:
            template: .docx 템플릿 바이트
            name: 로그/에러 컨텍스트용 파일명
        """
        self.template = template
        self.name = name

    def _open(self) -> DocxTemplate:
        """패키지 열기. 렌더링마다 새로 연다 (DocxTemplate은 1회용)."""
        doc = DocxTemplate(BytesIO(self.template))
        try:
            doc.init_docx()
        except Exception as e:
            raise RenderError(
                ErrorCodes.TEMPLATE_INVALID,
                [TagIssue("", f"Could not open .docx template: {e}")],
                template=self.name,
            ) from e
        return doc

    def _collect_issues(self, error: Exception) -> list[TagIssue]:
        """
        엔진 에러 → 태그 단위 문제 목록.

        Jinja2는 첫 에러에서 멈추므로 템플릿 텍스트를 다시 스캔한다.
        스캔으로 찾은 문제가 없으면 엔진 메시지 하나를 그대로 쓴다.
        """
        issues: list[TagIssue] = []
        if isinstance(error, TemplateError):
            try:
                issues = diagnose(extract_text(self.template, include_headers=True))
            except ExtractionError:
                logger.debug("Tag diagnostics skipped: template text unreadable")

        if not issues:
            message = getattr(error, "message", None) or str(error) or type(error).__name__
            issues = [TagIssue("", message)]
        return issues

    def render(self, data: Mapping[str, Any]) -> bytes:
        """
        템플릿에 데이터를 채워 .docx 바이트 생성.

        Args:
            data: placeholder 이름 → 값. 누락된 키는 빈 문자열로 렌더링.

        Returns:
            생성된 .docx 바이트

        Raises:
            RenderError: TEMPLATE_INVALID (패키지 열기 실패),
                RENDER_FAILED (태그 치환 실패, 모든 태그 문제 포함)
        """
        doc = self._open()
        context = _prepare_value(dict(data))

        try:
            # autoescape: 값의 &, <, > 가 XML을 깨지 않도록
            doc.render(context, jinja_env=Environment(autoescape=True), autoescape=True)
            buffer = BytesIO()
            doc.save(buffer)
        except Exception as e:
            issues = self._collect_issues(e)
            logger.warning(
                f"Render failed for {self.name}: {len(issues)} issue(s), "
                f"first: {issues[0].explanation}"
            )
            raise RenderError(
                ErrorCodes.RENDER_FAILED,
                issues,
                template=self.name,
            ) from e

        return buffer.getvalue()


def render_docx(template: bytes, data: Mapping[str, Any]) -> bytes:
    """
    Word 문서 생성 (간편 함수).

    Args:
        template: .docx 템플릿 바이트
        data: 템플릿에 채울 데이터

    Returns:
        생성된 .docx 바이트
    """
    return DocxRenderer(template).render(data)
