"""
App layer: HTTP 서버 (FastAPI).

역할:
- 라우트: 기본 템플릿 생성, 업로드 템플릿 생성, 템플릿 검사
- 업로드 검증 (Upload Gate)
- 공통 정책: 보안 헤더, CORS, rate limit, 바디 상한, 데모 페이지

주의: 폴더 구분
- docfill/app/static/ → 데모 페이지 (HTML/JS)
- templates/ (루트) → 기본 편지 템플릿 (.docx)
"""
