"""
test_api_inspect.py - Inspect API E2E 테스트

엔드포인트:
- POST /api/inspect-template
"""

from fastapi.testclient import TestClient


class TestInspectTemplate:
    """placeholder 조회 테스트."""

    def test_lists_placeholders(self, client: TestClient, make_docx, template_part):
        """{{refNo}}, {{ date }}, {{refNo}} → ["refNo", "date"]."""
        template = make_docx("Ref: {{refNo}}", "Date: {{ date }}", "Again {{refNo}}")

        response = client.post("/api/inspect-template", files=template_part(template))

        assert response.status_code == 200
        assert response.json() == {"placeholders": ["refNo", "date"]}

    def test_no_placeholders(self, client: TestClient, make_docx, template_part):
        response = client.post(
            "/api/inspect-template", files=template_part(make_docx("Plain letter"))
        )

        assert response.status_code == 200
        assert response.json() == {"placeholders": []}

    def test_ignores_data_field(self, client: TestClient, make_docx, template_part):
        response = client.post(
            "/api/inspect-template",
            files=template_part(make_docx("{{ a }}")),
            data={"data": "not json at all"},
        )

        assert response.status_code == 200
        assert response.json() == {"placeholders": ["a"]}

    def test_no_template(self, client: TestClient):
        response = client.post("/api/inspect-template")

        assert response.status_code == 400
        assert response.json()["error"] == "No .docx template uploaded"

    def test_invalid_file_type(self, client: TestClient, make_docx, template_part):
        response = client.post(
            "/api/inspect-template",
            files=template_part(make_docx("{{ a }}"), filename="a.doc"),
        )

        assert response.status_code == 400
        assert response.json()["error"] == "Only .docx files are allowed"

    def test_unreadable_package(self, client: TestClient, template_part):
        response = client.post(
            "/api/inspect-template",
            files=template_part(b"PK\x03\x04fake docx content"),
        )

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "EXTRACTION_FAILED"
        assert body["error"].startswith("Could not read .docx template")

    def test_bundled_template_fields(self, client: TestClient, default_template_path, template_part):
        response = client.post(
            "/api/inspect-template",
            files=template_part(default_template_path.read_bytes()),
        )

        assert response.status_code == 200
        assert "refNo" in response.json()["placeholders"]
        assert "senderPosition" in response.json()["placeholders"]
