# app/services/analysis_handler.py
"""Traducción imagen -> prompt -> Gemini -> JSON validado.

El handler no guarda estado entre llamadas: la configuración y el cliente se
inyectan al construirlo, de modo que puede instanciarse por request o
compartirse sin coordinación.
"""

import base64
import binascii
import json
import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

from pydantic import ValidationError

from app.core.config import Settings
from app.core.errors import (
    ConfigurationError,
    IncompleteAnalysis,
    InvalidAnalysis,
    InvalidInput,
    MalformedAnalysis,
)
from app.core.i18n import Language
from app.schemas.analysis import (
    AnalysisOutcome,
    AnalysisRequest,
    decode_assessment,
    localize_location,
    required_keys,
)
from app.services.gemini_client import GeminiClient, extract_text
from app.services.prompts import get_prompt

logger = logging.getLogger(__name__)

_DATA_URL_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?:;[^,]*)?;base64,", re.IGNORECASE)
_LEADING_FENCE_RE = re.compile(r"^```[ \t]*(?:json)?[ \t]*\r?\n?", re.IGNORECASE)
_TRAILING_FENCE_RE = re.compile(r"\r?\n?[ \t]*```[ \t]*$")


def strip_code_fences(text: str) -> str:
    """Quita los delimitadores ``` (opcionalmente ```json) del inicio y del final."""
    cleaned = (text or "").strip()
    cleaned = _LEADING_FENCE_RE.sub("", cleaned, count=1)
    cleaned = _TRAILING_FENCE_RE.sub("", cleaned.rstrip(), count=1)
    return cleaned.strip()


def split_image_payload(image_data: Optional[str], default_mime_type: str) -> Tuple[str, str]:
    """Separa un data URL en (base64, mime). Sin prefijo, usa el mime por defecto.

    Raises:
        InvalidInput: payload vacío o base64 inválido.
    """
    raw = (image_data or "").strip()
    mime_type = default_mime_type

    match = _DATA_URL_RE.match(raw)
    if match:
        if match.group("mime"):
            mime_type = match.group("mime").lower()
        raw = raw[match.end():]

    # Algunos clientes parten el base64 en líneas
    raw = re.sub(r"\s+", "", raw)
    if not raw:
        raise InvalidInput()

    try:
        base64.b64decode(raw, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidInput(message="imageData is not valid base64", details=str(e)) from e

    return raw, mime_type


def _reject_constant(name: str) -> Any:
    # NaN/Infinity no son JSON y la respuesta no podría serializarse
    raise ValueError(f"Invalid JSON constant: {name}")


def parse_analysis(text: str) -> Dict[str, Any]:
    """Parsea el texto ya saneado como objeto JSON.

    Raises:
        MalformedAnalysis: JSON inválido (incluye NaN/Infinity) o valor que no es un objeto.
    """
    try:
        parsed = json.loads(text, parse_constant=_reject_constant)
    except ValueError as e:
        logger.error(f"Error al parsear JSON: {e}")
        logger.debug(f"Texto recibido: {text}")
        raise MalformedAnalysis(raw_response=text, parse_error=str(e)) from e

    if not isinstance(parsed, dict):
        raise MalformedAnalysis(
            raw_response=text,
            parse_error=f"Expected a JSON object, got {type(parsed).__name__}",
        )
    return parsed


def validate_analysis(analysis: Dict[str, Any], language: Language, strict: bool = True) -> None:
    """Comprueba claves requeridas del idioma y, en modo estricto, sus valores.

    Raises:
        IncompleteAnalysis: falta alguna clave.
        InvalidAnalysis: valores fuera de esquema (solo en modo estricto).
    """
    expected = required_keys(language)
    missing = [key for key in expected if key not in analysis]
    if missing:
        logger.error(f"Estructura de análisis inválida, faltan {missing}")
        raise IncompleteAnalysis(received=analysis, expected_keys=expected, missing_keys=missing)

    if not strict:
        return

    try:
        decode_assessment(analysis, language)
    except ValidationError as e:
        errors = [
            {"field": localize_location(err["loc"], language), "message": err["msg"]}
            for err in e.errors()
        ]
        logger.error(f"Valores de análisis inválidos: {errors}")
        raise InvalidAnalysis(received=analysis, validation_errors=errors) from e


class AnalysisRequestHandler:
    """Orquesta una solicitud de análisis ergonómico de principio a fin."""

    def __init__(self, settings: Settings, client: Optional[GeminiClient] = None):
        self.settings = settings
        self.client = client or GeminiClient(settings)

    async def handle(self, request: AnalysisRequest) -> AnalysisOutcome:
        if not self.settings.api_key_configured:
            raise ConfigurationError()

        image_b64, mime_type = split_image_payload(request.image_data, self.settings.default_image_mime_type)
        language = Language.resolve(request.language)

        logger.info(f"Imagen recibida para análisis (idioma={language.value}, mime={mime_type})")

        prompt = get_prompt(language)

        logger.info(f"Enviando a Gemini API ({self.settings.gemini_model})...")
        data = await self.client.generate_content(prompt, image_b64, mime_type)
        logger.info("Respuesta recibida de Gemini")

        text = extract_text(data)
        logger.debug(f"Texto recibido: {text[:100]}...")

        analysis = parse_analysis(strip_code_fences(text))
        validate_analysis(analysis, language, strict=self.settings.strict_validation)

        logger.info("Análisis completado exitosamente")
        return AnalysisOutcome(
            analysis=analysis,
            language=language,
            model=self.settings.gemini_model,
            timestamp=datetime.now(timezone.utc).isoformat(),
        )
