"""
Data schemas for docfill.

규칙:
- 요청/응답 바디는 라우트별 스키마 타입으로 경계에서 검증
- 기본 편지 필드는 전부 선택 (기본값 ""), 형식 검사 없음
- 템플릿/생성 문서는 메모리에서만 다루고 저장하지 않음
"""

import json
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator

# =============================================================================
# Template Package
# =============================================================================


@dataclass(frozen=True)
class TemplatePackage:
    """
    요청 하나에서 소비되는 .docx 템플릿 바이트.

    디스크(기본 템플릿) 또는 업로드에서 생성되며 요청 종료 시 버려진다.
    """

    filename: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)


# =============================================================================
# Request Schemas
# =============================================================================


class LetterRequest(BaseModel):
    """
    POST /api/generate 요청 바디.

    필수 필드 없음. 누락 필드는 빈 문자열, 그 밖의 값은 문자열로 변환
    (숫자/불리언은 str, 객체/배열은 JSON 텍스트).
    알 수 없는 키는 무시한다.
    """

    model_config = ConfigDict(extra="ignore")

    refNo: str = ""
    date: str = ""
    recipientName: str = ""
    recipientAddress: str = ""
    subject: str = ""
    content: str = ""
    senderName: str = ""
    senderPosition: str = ""
    organization: str = ""

    @field_validator("*", mode="before")
    @classmethod
    def _coerce_to_text(cls, value: Any) -> str:
        if value is None:
            return ""
        if isinstance(value, str):
            return value
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, dict | list):
            return json.dumps(value, ensure_ascii=False)
        return str(value)

    @classmethod
    def from_body(cls, body: Any) -> "LetterRequest":
        """
        JSON 바디 → LetterRequest. 검증 실패 없음.

        객체가 아닌 바디 (없음, 배열, 문자열 등)는 빈 객체로 취급한다.
        """
        if not isinstance(body, dict):
            body = {}
        return cls.model_validate(body)

    def to_render_data(self) -> dict[str, str]:
        """렌더러에 넘길 flat dict."""
        return self.model_dump()


# =============================================================================
# Response Schemas
# =============================================================================


class InspectResponse(BaseModel):
    """POST /api/inspect-template 응답."""

    placeholders: list[str]


class TagIssueOut(BaseModel):
    tag: str
    explanation: str


class ErrorResponse(BaseModel):
    """모든 에러 응답 (400/413/429)."""

    error: str
    code: str | None = None
    details: list[TagIssueOut] | None = None
