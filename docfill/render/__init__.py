"""
Render layer: DOCX 생성 및 템플릿 검사.

역할:
- 템플릿 + 데이터 → .docx 바이트 (docxtpl)
- 템플릿 → placeholder 목록 (python-docx)
- 렌더링 실패 시 태그 진단
"""

from .inspect import extract_text, inspect_template
from .tags import PLACEHOLDER_PATTERN, diagnose, find_placeholders
from .word import DocxRenderer, render_docx

__all__ = [
    "render_docx",
    "DocxRenderer",
    "extract_text",
    "inspect_template",
    "PLACEHOLDER_PATTERN",
    "diagnose",
    "find_placeholders",
]
