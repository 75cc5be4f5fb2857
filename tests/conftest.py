"""
Pytest fixtures for docfill tests.

- 템플릿은 python-docx로 테스트마다 생성 (바이트)
- API 테스트는 create_app(settings)로 테스트마다 새 앱 생성
  (rate limit 카운터가 테스트 간에 공유되지 않도록)
"""

from collections.abc import Callable, Generator
from io import BytesIO
from pathlib import Path

import pytest
from docx import Document
from fastapi.testclient import TestClient

from docfill.app.main import create_app
from docfill.core.config import STATIC_DIR, Settings
from docfill.domain.constants import DOCX_MIME_TYPE

# =============================================================================
# Path Fixtures
# =============================================================================


@pytest.fixture
def project_root() -> Path:
    """프로젝트 루트 경로."""
    return Path(__file__).parent.parent


@pytest.fixture
def default_template_path(project_root: Path) -> Path:
    """번들된 기본 편지 템플릿 경로."""
    return project_root / "templates" / "default-letter.docx"


# =============================================================================
# Template Fixtures
# =============================================================================


def build_docx(
    *paragraphs: str,
    table: list[list[str]] | None = None,
    header: str | None = None,
) -> bytes:
    """문단(+표, 머리글)으로 .docx 바이트 생성."""
    doc = Document()
    for text in paragraphs:
        doc.add_paragraph(text)

    if table:
        docx_table = doc.add_table(rows=len(table), cols=len(table[0]))
        for i, row in enumerate(table):
            for j, value in enumerate(row):
                docx_table.cell(i, j).text = value

    if header is not None:
        section_header = doc.sections[0].header
        section_header.is_linked_to_previous = False
        section_header.paragraphs[0].text = header

    buffer = BytesIO()
    doc.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def make_docx() -> Callable[..., bytes]:
    """.docx 바이트 생성 팩토리."""
    return build_docx


@pytest.fixture
def letter_template(make_docx: Callable[..., bytes]) -> bytes:
    """
    간단한 편지 템플릿.

    placeholder: {{refNo}}, {{ date }}, {{subject}}
    """
    return make_docx(
        "Ref: {{refNo}}",
        "Date: {{ date }}",
        "Subject: {{subject}}",
    )


def _read_text(content: bytes) -> str:
    doc = Document(BytesIO(content))
    return "\n".join(p.text for p in doc.paragraphs)


def _template_part(
    content: bytes,
    filename: str = "template.docx",
    mime: str = DOCX_MIME_TYPE,
) -> dict[str, tuple[str, bytes, str]]:
    return {"template": (filename, content, mime)}


@pytest.fixture
def read_text() -> Callable[[bytes], str]:
    """생성된 .docx의 본문 텍스트를 읽는 함수."""
    return _read_text


@pytest.fixture
def template_part() -> Callable[..., dict[str, tuple[str, bytes, str]]]:
    """TestClient files= 인자 생성 함수."""
    return _template_part


# =============================================================================
# App Fixtures
# =============================================================================


@pytest.fixture
def settings(default_template_path: Path) -> Settings:
    """테스트용 설정 (기본값 + 번들 템플릿)."""
    return Settings(
        default_template_path=default_template_path,
        static_dir=STATIC_DIR,
    )


@pytest.fixture
def client(settings: Settings) -> Generator[TestClient, None, None]:
    """FastAPI TestClient (테스트마다 새 앱)."""
    with TestClient(create_app(settings)) as client:
        yield client
