"""
Domain Constants: 서비스 전역 상수.

출력 파일명, 업로드 제한, 기본 편지 필드 등.
설정으로 바꿀 수 있는 값은 default.yaml 기본값과 동일하게 유지한다.
"""

# =============================================================================
# MIME Types
# =============================================================================

DOCX_MIME_TYPE = (
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
)
DOCX_EXTENSION = ".docx"

# =============================================================================
# Output Filenames (출력 파일명 정책)
# =============================================================================
# - 기본 템플릿 생성: Official_Letter.docx
# - 업로드 템플릿 생성: Generated_From_Template.docx

DEFAULT_OUTPUT_FILENAME = "Official_Letter.docx"
UPLOAD_OUTPUT_FILENAME = "Generated_From_Template.docx"

# =============================================================================
# Limits (기본값, default.yaml에서 오버라이드)
# =============================================================================

MAX_UPLOAD_BYTES = 5 * 1024 * 1024  # 5 MiB
MAX_JSON_BYTES = 1 * 1024 * 1024  # 1 MiB
MULTIPART_OVERHEAD_BYTES = 64 * 1024  # multipart 경계/헤더 여유분
RATE_LIMIT_MAX_REQUESTS = 60
RATE_LIMIT_WINDOW_SECONDS = 60

# =============================================================================
# Default Letter Template
# =============================================================================

DEFAULT_TEMPLATE_FILENAME = "default-letter.docx"

# 기본 템플릿이 사용하는 placeholder (모두 선택, 기본값 "")
LETTER_FIELDS = (
    "refNo",
    "date",
    "recipientName",
    "recipientAddress",
    "subject",
    "content",
    "senderName",
    "senderPosition",
    "organization",
)

# =============================================================================
# Upload Form Fields
# =============================================================================

TEMPLATE_FIELD = "template"
DATA_FIELD = "data"


def content_disposition(filename: str) -> str:
    """첨부 다운로드용 Content-Disposition 헤더 값."""
    return f'attachment; filename="{filename}"'
