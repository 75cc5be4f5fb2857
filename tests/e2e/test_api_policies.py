"""
test_api_policies.py - 요청 정책 E2E 테스트

- 보안 헤더 (모든 응답)
- CORS (모든 origin 허용)
- rate limit (IP당 60회/분, 모든 경로 합산)
- 요청 바디 상한 (JSON, multipart, chunked)
- 프레임워크 에러도 {"error": ...} 형태
- 데모 페이지 (/), 헬스 체크
"""

import json

from fastapi.testclient import TestClient

from docfill.app.main import create_app
from docfill.app.ratelimit import InMemoryRateLimitStore

# =============================================================================
# Security Headers / CORS
# =============================================================================


class TestSecurityHeaders:
    """보안 헤더 테스트."""

    def test_headers_on_success(self, client: TestClient):
        response = client.get("/health")

        assert response.headers["x-content-type-options"] == "nosniff"
        assert response.headers["x-frame-options"] == "SAMEORIGIN"
        assert response.headers["referrer-policy"] == "no-referrer"
        assert "default-src 'self'" in response.headers["content-security-policy"]

    def test_headers_on_error(self, client: TestClient):
        response = client.post("/api/upload-and-generate")

        assert response.status_code == 400
        assert response.headers["x-content-type-options"] == "nosniff"


class TestCors:
    """CORS 테스트."""

    def test_any_origin_allowed(self, client: TestClient):
        response = client.post(
            "/api/generate", json={}, headers={"Origin": "https://elsewhere.example"}
        )

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"

    def test_preflight(self, client: TestClient):
        response = client.options(
            "/api/upload-and-generate",
            headers={
                "Origin": "https://elsewhere.example",
                "Access-Control-Request-Method": "POST",
            },
        )

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"


# =============================================================================
# Rate Limit
# =============================================================================


class TestRateLimit:
    """rate limit 테스트."""

    def test_61st_request_rejected(self, client: TestClient):
        """60회까지 허용, 61번째 → 429 (경로 무관 합산)."""
        for i in range(60):
            path = "/health" if i % 2 else "/api/inspect-template"
            response = client.get(path) if i % 2 else client.post(path)
            assert response.status_code != 429

        response = client.post("/api/generate", json={})

        assert response.status_code == 429
        assert response.json()["code"] == "RATE_LIMITED"
        assert "Retry-After" in response.headers
        assert response.headers["RateLimit-Remaining"] == "0"

    def test_remaining_header(self, client: TestClient):
        response = client.get("/health")

        assert response.headers["RateLimit-Limit"] == "60"
        assert response.headers["RateLimit-Remaining"] == "59"

    def test_window_reset(self, settings):
        now = [0.0]
        store = InMemoryRateLimitStore(clock=lambda: now[0])
        settings.rate_limit_max_requests = 2

        with TestClient(create_app(settings, rate_limit_store=store)) as client:
            assert client.get("/health").status_code == 200
            assert client.get("/health").status_code == 200
            assert client.get("/health").status_code == 429

            now[0] += settings.rate_limit_window_seconds
            assert client.get("/health").status_code == 200


# =============================================================================
# Body Size Limit
# =============================================================================


class TestBodySizeLimit:
    """요청 바디 상한 테스트."""

    def test_oversized_json_rejected(self, settings):
        settings.max_json_bytes = 64

        with TestClient(create_app(settings)) as client:
            response = client.post("/api/generate", json={"content": "x" * 200})

        assert response.status_code == 413
        assert response.json()["code"] == "PAYLOAD_TOO_LARGE"

    def test_within_limit(self, settings):
        settings.max_json_bytes = 1024

        with TestClient(create_app(settings)) as client:
            response = client.post("/api/generate", json={"content": "short"})

        assert response.status_code == 200

    def test_chunked_json_counted(self, settings):
        """Content-Length 없는 chunked 바디도 실제 바이트로 제한."""
        settings.max_json_bytes = 64
        payload = json.dumps({"content": "x" * 5000}).encode()

        def chunks():
            for start in range(0, len(payload), 512):
                yield payload[start:start + 512]

        with TestClient(create_app(settings)) as client:
            response = client.post(
                "/api/generate",
                content=chunks(),
                headers={"content-type": "application/json"},
            )

        assert response.status_code == 413
        assert response.json()["code"] == "PAYLOAD_TOO_LARGE"

    def test_chunked_json_within_limit(self, settings, read_text):
        payload = json.dumps({"refNo": "CH-1"}).encode()

        with TestClient(create_app(settings)) as client:
            response = client.post(
                "/api/generate",
                content=iter([payload[:5], payload[5:]]),
                headers={"content-type": "application/json"},
            )

        assert response.status_code == 200
        assert "Ref: CH-1" in read_text(response.content)

    def test_oversized_multipart_rejected(self, settings, template_part):
        """업로드 상한 + 여유분을 넘는 multipart → 413 (Upload Gate 전에)."""
        settings.max_upload_bytes = 1024
        settings.max_json_bytes = 64

        with TestClient(create_app(settings)) as client:
            response = client.post(
                "/api/upload-and-generate",
                files=template_part(b"x" * (200 * 1024)),
            )

        assert response.status_code == 413

    def test_chunked_multipart_counted(self, settings):
        settings.max_upload_bytes = 1024
        settings.max_json_bytes = 64

        def chunks():
            yield b"--boundary\r\n"
            yield b'Content-Disposition: form-data; name="template"; filename="a.docx"\r\n\r\n'
            for _ in range(200):
                yield b"x" * 1024

        with TestClient(create_app(settings)) as client:
            response = client.post(
                "/api/upload-and-generate",
                content=chunks(),
                headers={"content-type": "multipart/form-data; boundary=boundary"},
            )

        assert response.status_code == 413


# =============================================================================
# Framework Errors
# =============================================================================


class TestFrameworkErrors:
    """프레임워크 에러도 {"error": ...} 형태."""

    def test_oversized_form_field(self, client: TestClient, letter_template: bytes, template_part):
        """1 MiB를 넘는 data 필드 → multipart 파서 에러 → 400 {"error"}."""
        response = client.post(
            "/api/upload-and-generate",
            files=template_part(letter_template),
            data={"data": "x" * (1024 * 1024 + 1)},
        )

        assert response.status_code == 400
        body = response.json()
        assert "detail" not in body
        assert body["code"] == "INVALID_REQUEST"
        assert body["error"]

    def test_unknown_path(self, client: TestClient):
        response = client.get("/no-such-file.txt")

        assert response.status_code == 404
        assert response.json() == {"error": "Not Found", "code": "HTTP_ERROR"}


# =============================================================================
# Demo Page / Health
# =============================================================================


class TestDemoPage:
    """정적 데모 페이지 테스트."""

    def test_index(self, client: TestClient):
        response = client.get("/")

        assert response.status_code == 200
        assert "text/html" in response.headers["content-type"]
        assert "docfill" in response.text

    def test_script_served(self, client: TestClient):
        response = client.get("/app.js")

        assert response.status_code == 200

    def test_health(self, client: TestClient):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}
