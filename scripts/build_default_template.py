#!/usr/bin/env python3
"""
기본 편지 템플릿 (templates/default-letter.docx) 재생성 스크립트.

사용법:
    python scripts/build_default_template.py
    python scripts/build_default_template.py --output /tmp/letter.docx

placeholder는 docfill.domain.constants.LETTER_FIELDS와 일치해야 한다.
"""

import argparse
import sys
from pathlib import Path

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.shared import Pt

PROJECT_ROOT = Path(__file__).parent.parent
DEFAULT_OUTPUT = PROJECT_ROOT / "templates" / "default-letter.docx"


def build_letter_template(output_path: Path) -> Path:
    """공문 템플릿 생성."""
    doc = Document()

    header = doc.add_paragraph()
    header.alignment = WD_ALIGN_PARAGRAPH.CENTER
    run = header.add_run("{{organization}}")
    run.bold = True
    run.font.size = Pt(16)

    doc.add_paragraph("Ref: {{refNo}}")
    date = doc.add_paragraph("Date: {{date}}")
    date.alignment = WD_ALIGN_PARAGRAPH.RIGHT

    doc.add_paragraph("To: {{recipientName}}")
    doc.add_paragraph("{{recipientAddress}}")
    doc.add_paragraph("Subject: {{subject}}")
    doc.add_paragraph("Dear {{recipientName}},")
    doc.add_paragraph("{{content}}")

    doc.add_paragraph("Sincerely,")
    doc.add_paragraph("{{senderName}}")
    doc.add_paragraph("{{senderPosition}}")
    doc.add_paragraph("{{organization}}")

    output_path.parent.mkdir(parents=True, exist_ok=True)
    doc.save(output_path)
    return output_path


def main() -> int:
    parser = argparse.ArgumentParser(description="Build the default letter template")
    parser.add_argument(
        "--output",
        type=Path,
        default=DEFAULT_OUTPUT,
        help=f"output path (default: {DEFAULT_OUTPUT})",
    )
    args = parser.parse_args()

    path = build_letter_template(args.output)
    print(f"✅ Template written: {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
