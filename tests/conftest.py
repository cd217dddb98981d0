import base64
import json

import httpx
import pytest
from fastapi.testclient import TestClient

from app.api.v1.endpoints.analyze import get_analysis_handler
from app.core.config import Settings
from app.main import create_app
from app.services.analysis_handler import AnalysisRequestHandler
from app.services.gemini_client import GeminiClient

IMAGE_B64 = base64.b64encode(b"\xff\xd8\xff\xe0 not really a jpeg").decode()

SPANISH_ANALYSIS = {
    "postura_general": "Flexión cervical sostenida frente al monitor",
    "riesgos": [
        {"zona": "Cuello", "nivel": "alto", "descripcion": "Flexión de unos 30 grados"},
        {"zona": "Muñecas", "nivel": "medio", "descripcion": "Extensión sobre el teclado"},
    ],
    "recomendaciones": [
        "Elevar el monitor a la altura de los ojos",
        "Usar reposamuñecas",
    ],
    "puntuacion_ergonomica": 62,
}

ENGLISH_ANALYSIS = {
    "posture_general": "Sustained neck flexion towards the monitor",
    "risks": [
        {"zone": "Neck", "level": "high", "description": "About 30 degrees of flexion"},
    ],
    "recommendations": ["Raise the monitor to eye level"],
    "ergonomic_score": 70,
}


def gemini_reply(text):
    return {"candidates": [{"content": {"role": "model", "parts": [{"text": text}]}}]}


class FakeGemini:
    """Upstream falso: registra cada request y responde con lo configurado."""

    def __init__(self):
        self.calls = []
        self.status = 200
        self.body = gemini_reply(json.dumps(SPANISH_ANALYSIS))

    def reply_text(self, text):
        self.status = 200
        self.body = gemini_reply(text)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        return httpx.Response(self.status, json=self.body)


def make_settings(**overrides):
    values = {"gemini_api_key": "test-key", "environment": "test", "cors_origins": ["*"]}
    values.update(overrides)
    return Settings(_env_file=None, **values)


def make_handler(settings, fake):
    return AnalysisRequestHandler(settings, GeminiClient(settings, transport=httpx.MockTransport(fake)))


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def fake_gemini():
    return FakeGemini()


@pytest.fixture
def handler(settings, fake_gemini):
    return make_handler(settings, fake_gemini)


@pytest.fixture
def client(settings, handler):
    app = create_app(settings)
    app.dependency_overrides[get_analysis_handler] = lambda: handler
    with TestClient(app) as c:
        yield c
