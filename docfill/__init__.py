"""
docfill: Word(.docx) 템플릿의 {{placeholder}}를 채워 문서를 생성하는 HTTP 서비스.

레이어:
- domain/ → 에러, 스키마, 상수
- core/ → 설정, 로깅
- render/ → docxtpl 렌더링, 템플릿 검사
- app/ → FastAPI 라우트, 미들웨어
"""

__version__ = "0.1.0"
