"""
Template Inspector: .docx → placeholder 이름 목록.

python-docx로 본문(문단 + 표, 중첩 표 포함)을 문서 순서대로 읽어
서식 없는 텍스트를 만들고, {{ name }} 패턴을 찾는다.
"""

import logging
from collections.abc import Iterator
from io import BytesIO

from docx import Document
from docx.table import Table
from docx.text.paragraph import Paragraph

from docfill.domain.errors import ErrorCodes, ExtractionError

from .tags import find_placeholders

logger = logging.getLogger(__name__)

PARAGRAPH_SEPARATOR = "\n\n"


def _iter_block_texts(container, seen_cells: set) -> Iterator[str]:
    """문단/표 블록을 문서 순서대로 순회하며 텍스트 반환."""
    for block in container.iter_inner_content():
        if isinstance(block, Paragraph):
            yield block.text
        elif isinstance(block, Table):
            for row in block.rows:
                for cell in row.cells:
                    # 가로 병합 셀은 같은 셀이 반복됨
                    if cell._tc in seen_cells:
                        continue
                    seen_cells.add(cell._tc)
                    yield from _iter_block_texts(cell, seen_cells)


def _iter_header_footer_texts(doc, seen_cells: set) -> Iterator[str]:
    for section in doc.sections:
        for part in (
            section.header,
            section.footer,
            section.first_page_header,
            section.first_page_footer,
            section.even_page_header,
            section.even_page_footer,
        ):
            if part.is_linked_to_previous:
                continue
            yield from _iter_block_texts(part, seen_cells)


def extract_text(content: bytes, include_headers: bool = False) -> str:
    """
    .docx 바이트 → 서식 없는 텍스트.

    Args:
        content: .docx 파일 바이트
        include_headers: 머리글/바닥글 텍스트도 포함할지 여부

    Returns:
        문단 텍스트를 빈 줄로 이어붙인 문자열

    Raises:
        ExtractionError: EXTRACTION_FAILED (패키지를 열 수 없거나 읽기 실패)
    """
    try:
        doc = Document(BytesIO(content))
        seen_cells: set = set()
        texts = list(_iter_block_texts(doc, seen_cells))
        if include_headers:
            texts.extend(_iter_header_footer_texts(doc, seen_cells))
    except Exception as e:
        raise ExtractionError(
            ErrorCodes.EXTRACTION_FAILED,
            f"Could not read .docx template: {e}",
        ) from e

    return PARAGRAPH_SEPARATOR.join(texts)


def inspect_template(content: bytes) -> list[str]:
    """
    템플릿에서 사용된 placeholder 이름 추출.

    Args:
        content: .docx 파일 바이트

    Returns:
        중복 없는 이름 목록 (첫 등장 순서)

    Raises:
        ExtractionError: 텍스트 추출 실패 (부분 결과 없음)
    """
    text = extract_text(content)
    placeholders = find_placeholders(text)
    logger.debug(f"Found {len(placeholders)} placeholders")
    return placeholders
