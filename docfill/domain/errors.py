"""
Error definitions for docfill.

규칙:
- 조용한 실패 금지 → DocfillError 하위 타입으로 명시적 실패
- 모든 에러는 라우트 경계에서 400 JSON으로 변환됨
- 태그 단위 문제는 TagIssue 목록으로 구조화 (중첩 dict 탐색 금지)
"""

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class TagIssue:
    """템플릿 태그 하나에 대한 문제 설명."""

    tag: str
    explanation: str

    def to_dict(self) -> dict[str, str]:
        return {"tag": self.tag, "explanation": self.explanation}


class DocfillError(Exception):
    """
    docfill 에러 베이스.

    kind로 에러 종류를 구분하고, issues에 태그 단위 상세를 담는다.

    Usage:
        raise ValidationError(ErrorCodes.NO_TEMPLATE, "No .docx template uploaded")
    """

    kind = "error"

    def __init__(
        self,
        code: str,
        message: str,
        issues: Iterable[TagIssue] = (),
        **context: Any,
    ) -> None:
        self.code = code
        self.message = message
        self.issues = list(issues)
        self.context = context
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """응답/로그 JSON 직렬화용."""
        payload: dict[str, Any] = {"error": self.message, "code": self.code}
        if self.issues:
            payload["details"] = [issue.to_dict() for issue in self.issues]
        return payload


class ValidationError(DocfillError):
    """업로드/요청 검증 실패 (파일 타입, 크기, data 필드 JSON 등)."""

    kind = "validation"


class RenderError(DocfillError):
    """
    템플릿 렌더링 실패.

    issues의 explanation을 전부 이어붙여 메시지를 만든다.
    첫 번째 문제만 보여주면 사용자가 템플릿을 여러 번 고쳐야 하므로
    항상 전체 목록을 노출한다.
    """

    kind = "render"
    PREFIX = "Template render error:"
    SEPARATOR = "\n"

    def __init__(
        self,
        code: str,
        issues: Iterable[TagIssue],
        **context: Any,
    ) -> None:
        issues = list(issues)
        explanations = self.SEPARATOR.join(issue.explanation for issue in issues)
        super().__init__(
            code,
            f"{self.PREFIX}\n{explanations}",
            issues=issues,
            **context,
        )


class ExtractionError(DocfillError):
    """템플릿 텍스트 추출 실패 (inspect)."""

    kind = "extraction"


# =============================================================================
# Error Codes
# =============================================================================

class ErrorCodes:
    """에러 코드 상수. 응답 JSON의 code 필드로 노출됨."""

    # === Upload Gate ===
    NO_TEMPLATE = "NO_TEMPLATE"
    INVALID_FILE_TYPE = "INVALID_FILE_TYPE"
    FILE_TOO_LARGE = "FILE_TOO_LARGE"

    # === Request ===
    INVALID_DATA = "INVALID_DATA"  # data 필드 JSON 파싱 실패
    INVALID_REQUEST = "INVALID_REQUEST"  # 요청 스키마/multipart 파싱 실패
    PAYLOAD_TOO_LARGE = "PAYLOAD_TOO_LARGE"
    RATE_LIMITED = "RATE_LIMITED"
    HTTP_ERROR = "HTTP_ERROR"  # 그 밖의 프레임워크 HTTP 에러 (404, 405 ...)

    # === Render ===
    TEMPLATE_NOT_FOUND = "TEMPLATE_NOT_FOUND"
    TEMPLATE_INVALID = "TEMPLATE_INVALID"
    RENDER_FAILED = "RENDER_FAILED"

    # === Inspect ===
    EXTRACTION_FAILED = "EXTRACTION_FAILED"

    # === Fallback ===
    INTERNAL_ERROR = "INTERNAL_ERROR"
