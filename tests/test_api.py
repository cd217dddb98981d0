import copy
import json

from fastapi.testclient import TestClient

from app.api.v1.endpoints.analyze import get_analysis_handler
from app.main import create_app
from app.services.prompts import PROMPT_VERSION

from tests.conftest import ENGLISH_ANALYSIS, IMAGE_B64, SPANISH_ANALYSIS, make_handler, make_settings


def test_analyze_success(client):
    res = client.post("/api/analyze", json={"imageData": IMAGE_B64, "language": "es"})
    assert res.status_code == 200
    body = res.json()
    assert body["success"] is True
    assert body["analysis"] == SPANISH_ANALYSIS
    assert body["language"] == "es"
    assert body["model"] == "gemini-2.0-flash-exp"
    assert body["timestamp"]


def test_analyze_is_also_served_without_prefix(client, fake_gemini):
    fake_gemini.reply_text(json.dumps(ENGLISH_ANALYSIS))
    res = client.post("/analyze", json={"imageData": IMAGE_B64, "language": "en"})
    assert res.status_code == 200
    assert res.json()["language"] == "en"


def test_empty_image_is_400(client, fake_gemini):
    res = client.post("/api/analyze", json={"imageData": ""})
    assert res.status_code == 400
    body = res.json()
    assert body["success"] is False
    assert body["error"] == "Invalid data"
    assert fake_gemini.calls == []


def test_missing_body_is_400(client):
    res = client.post("/api/analyze")
    assert res.status_code == 400
    assert res.json()["error"] == "Invalid data"


def test_missing_credential_is_500(fake_gemini):
    settings = make_settings(gemini_api_key=None)
    app = create_app(settings)
    app.dependency_overrides[get_analysis_handler] = lambda: make_handler(settings, fake_gemini)
    with TestClient(app) as c:
        res = c.post("/api/analyze", json={"imageData": IMAGE_B64})
    assert res.status_code == 500
    body = res.json()
    assert body["error"] == "API key not configured"
    assert "instructions" in body
    assert fake_gemini.calls == []


def test_upstream_error_is_500_with_upstream_status(client, fake_gemini):
    fake_gemini.status = 403
    fake_gemini.body = {"error": {"code": 403, "message": "API key not valid"}}
    res = client.post("/api/analyze", json={"imageData": IMAGE_B64})
    assert res.status_code == 500
    body = res.json()
    assert body["error"] == "Gemini API Error"
    assert body["status"] == 403
    assert body["message"] == "API key not valid"


def test_parse_error_body(client, fake_gemini):
    fake_gemini.reply_text("```json\n{not json}\n```")
    res = client.post("/api/analyze", json={"imageData": IMAGE_B64})
    assert res.status_code == 500
    body = res.json()
    assert body["error"] == "Parse error"
    assert body["rawResponse"] == "{not json}"
    assert body["parseError"]


def test_incomplete_analysis_body(client, fake_gemini):
    data = copy.deepcopy(SPANISH_ANALYSIS)
    del data["recomendaciones"]
    fake_gemini.reply_text(json.dumps(data))
    res = client.post("/api/analyze", json={"imageData": IMAGE_B64, "language": "es"})
    assert res.status_code == 500
    body = res.json()
    assert body["error"] == "Incomplete analysis"
    assert body["missingKeys"] == ["recomendaciones"]
    assert body["receivedData"] == data


def test_invalid_values_body(client, fake_gemini):
    data = copy.deepcopy(ENGLISH_ANALYSIS)
    data["ergonomic_score"] = 140
    fake_gemini.reply_text(json.dumps(data))
    res = client.post("/api/analyze", json={"imageData": IMAGE_B64, "language": "en"})
    assert res.status_code == 500
    body = res.json()
    assert body["error"] == "Invalid analysis"
    assert body["validationErrors"][0]["field"] == "ergonomic_score"


def test_unexpected_exception_is_internal_error(settings):
    class Exploding:
        async def handle(self, request):
            raise RuntimeError("boom")

    app = create_app(settings)
    app.dependency_overrides[get_analysis_handler] = lambda: Exploding()
    with TestClient(app, raise_server_exceptions=False) as c:
        res = c.post("/api/analyze", json={"imageData": IMAGE_B64})
    assert res.status_code == 500
    body = res.json()
    assert body["error"] == "Internal server error"
    assert body["message"] == "boom"
    assert "RuntimeError" in body["stack"]


def test_production_hides_stack():
    settings = make_settings(environment="production")

    class Exploding:
        async def handle(self, request):
            raise RuntimeError("boom")

    app = create_app(settings)
    app.dependency_overrides[get_analysis_handler] = lambda: Exploding()
    with TestClient(app, raise_server_exceptions=False) as c:
        res = c.post("/api/analyze", json={"imageData": IMAGE_B64})
    assert res.status_code == 500
    assert "stack" not in res.json()


def test_health_reports_configuration(client):
    res = client.get("/api/health")
    assert res.status_code == 200
    body = res.json()
    assert body["status"] == "OK"
    assert body["apiKeyConfigured"] is True
    assert body["model"] == "gemini-2.0-flash-exp"
    assert body["port"] == 3000
    assert body["promptVersion"] == PROMPT_VERSION
    assert client.get("/health").status_code == 200


def test_health_without_key():
    with TestClient(create_app(make_settings(gemini_api_key=None))) as c:
        assert c.get("/api/health").json()["apiKeyConfigured"] is False


def test_language_strings(client):
    body = client.get("/api/languages/en").json()
    assert body["language"] == "en"
    assert body["strings"]["results"]["score"] == "Ergonomic Score"
    assert set(body["available"]) == {"es", "en"}
    assert client.get("/api/languages/xx").json()["language"] == "es"


def test_unknown_route_is_json_404(client):
    res = client.get("/api/nope")
    assert res.status_code == 404
    assert res.json()["error"] == "Ruta no encontrada"
    assert res.json()["path"] == "/api/nope"


def test_security_headers(client):
    res = client.get("/api/health")
    assert res.headers["X-Content-Type-Options"] == "nosniff"
    assert res.headers["X-Frame-Options"] == "DENY"


def test_nan_score_is_parse_error(client, fake_gemini):
    text = json.dumps(SPANISH_ANALYSIS).replace('"puntuacion_ergonomica": 62', '"puntuacion_ergonomica": NaN')
    fake_gemini.reply_text(text)
    res = client.post("/api/analyze", json={"imageData": IMAGE_B64})
    assert res.status_code == 500
    body = res.json()
    assert body["error"] == "Parse error"
    assert body["rawResponse"] == text
    assert "NaN" in body["parseError"]


def test_bad_language_type_names_the_field(client, fake_gemini):
    res = client.post("/api/analyze", json={"imageData": IMAGE_B64, "language": 5})
    assert res.status_code == 400
    body = res.json()
    assert body["error"] == "Invalid data"
    assert "language" in body["message"]
    assert "imageData" not in body["message"]
    assert fake_gemini.calls == []


def test_bad_image_type_keeps_image_message(client):
    res = client.post("/api/analyze", json={"imageData": 123})
    assert res.status_code == 400
    assert res.json()["message"] == "imageData is required in base64 format"
