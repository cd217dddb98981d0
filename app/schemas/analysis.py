from enum import Enum
from typing import Any, Dict, List, Mapping, Optional
from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr

from app.core.i18n import Language


class AnalysisRequest(BaseModel):
    """Request body para análisis ergonómico - imagen en base64 y etiqueta de idioma"""
    model_config = ConfigDict(populate_by_name=True)

    image_data: Optional[str] = Field(
        default=None,
        alias="imageData",
        description="Imagen en base64 (admite también data URL 'data:image/png;base64,...')",
    )
    language: Optional[str] = Field(default="es", description="Idioma de la respuesta: 'es' o 'en'")


# ------------------------------------------------------------------------------------
# Esquema canónico + codec por idioma
# ------------------------------------------------------------------------------------

class RiskLevel(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class RiskItem(BaseModel):
    zone: StrictStr
    level: RiskLevel = Field(strict=True)
    description: StrictStr


class ErgonomicAssessment(BaseModel):
    """Evaluación ergonómica independiente del idioma."""
    posture: StrictStr
    risks: List[RiskItem]
    recommendations: List[StrictStr]
    score: StrictInt = Field(ge=0, le=100)


# Nombre canónico -> clave que usa el modelo en cada idioma
FIELD_NAMES: Mapping[Language, Mapping[str, str]] = {
    Language.SPANISH: {
        "posture": "postura_general",
        "risks": "riesgos",
        "zone": "zona",
        "level": "nivel",
        "description": "descripcion",
        "recommendations": "recomendaciones",
        "score": "puntuacion_ergonomica",
    },
    Language.ENGLISH: {
        "posture": "posture_general",
        "risks": "risks",
        "zone": "zone",
        "level": "level",
        "description": "description",
        "recommendations": "recommendations",
        "score": "ergonomic_score",
    },
}

RISK_LEVEL_LABELS: Mapping[Language, Mapping[RiskLevel, str]] = {
    Language.SPANISH: {RiskLevel.HIGH: "alto", RiskLevel.MEDIUM: "medio", RiskLevel.LOW: "bajo"},
    Language.ENGLISH: {RiskLevel.HIGH: "high", RiskLevel.MEDIUM: "medium", RiskLevel.LOW: "low"},
}

TOP_LEVEL_FIELDS = ("posture", "risks", "recommendations", "score")


def required_keys(language: Language) -> List[str]:
    names = FIELD_NAMES[language]
    return [names[field] for field in TOP_LEVEL_FIELDS]


def _decode_level(value: Any, language: Language) -> Any:
    if not isinstance(value, str):
        return value
    label = value.strip().lower()
    for level, text in RISK_LEVEL_LABELS[language].items():
        if text == label:
            return level
    # Se deja el valor original para que la validación lo reporte
    return value


def _decode_risk(item: Any, language: Language) -> Any:
    if not isinstance(item, dict):
        return item
    names = FIELD_NAMES[language]
    return {
        "zone": item.get(names["zone"]),
        "level": _decode_level(item.get(names["level"]), language),
        "description": item.get(names["description"]),
    }


def decode_assessment(data: Dict[str, Any], language: Language) -> ErgonomicAssessment:
    """Convierte el JSON del modelo (claves en `language`) al esquema canónico.

    Raises:
        pydantic.ValidationError: si algún valor no cumple el esquema.
    """
    names = FIELD_NAMES[language]
    risks = data.get(names["risks"])
    canonical = {
        "posture": data.get(names["posture"]),
        "risks": [_decode_risk(r, language) for r in risks] if isinstance(risks, list) else risks,
        "recommendations": data.get(names["recommendations"]),
        "score": data.get(names["score"]),
    }
    return ErgonomicAssessment.model_validate(canonical)


def localize_location(loc: tuple, language: Language) -> str:
    """Traduce la ruta de un error de validación a las claves del idioma."""
    names = FIELD_NAMES[language]
    return ".".join(names.get(part, part) if isinstance(part, str) else str(part) for part in loc)


# ------------------------------------------------------------------------------------
# Respuestas
# ------------------------------------------------------------------------------------

class AnalysisOutcome(BaseModel):
    """Resultado validado del handler"""
    analysis: Dict[str, Any]
    language: Language
    model: str
    timestamp: str


class AnalysisResponse(AnalysisOutcome):
    """Response del análisis ergonómico"""
    success: bool = True


class ErrorResponse(BaseModel):
    """Cuerpo de error: título, mensaje y campos de diagnóstico"""
    model_config = ConfigDict(extra="allow")

    success: bool = False
    error: str
    message: str


class HealthResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    status: str
    timestamp: str
    service: str
    model: str
    api_key_configured: bool = Field(alias="apiKeyConfigured")
    version: str
    prompt_version: str = Field(alias="promptVersion")
    port: int
    environment: str


class LanguageStringsResponse(BaseModel):
    language: Language
    available: List[Language]
    strings: Dict[str, Any]
