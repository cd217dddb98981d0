"""Idiomas soportados y tabla de textos de interfaz.

La tabla de UI solo la consumen las superficies de presentación; el flujo de
análisis comparte únicamente la convención de etiquetas de idioma.
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional


class Language(str, Enum):
    """Supported natural-language choices for prompts and output keys."""

    SPANISH = "es"
    ENGLISH = "en"

    @classmethod
    def default(cls) -> "Language":
        return cls.SPANISH

    @classmethod
    def resolve(cls, value: Optional[str]) -> "Language":
        """Map a client-supplied tag to a supported language, falling back to Spanish."""

        if isinstance(value, cls):
            return value
        tag = (value or "").strip().lower()
        for lang in cls:
            if lang.value == tag:
                return lang
        return cls.default()


def _freeze(value: Any) -> Any:
    if isinstance(value, dict):
        return MappingProxyType({k: _freeze(v) for k, v in value.items()})
    return value


def as_dict(value: Any) -> Any:
    """Plain-dict copy of a frozen section, ready for JSON serialization."""

    if isinstance(value, Mapping):
        return {k: as_dict(v) for k, v in value.items()}
    return value


UI_STRINGS: Mapping[Language, Mapping[str, Any]] = _freeze({
    Language.ENGLISH: {
        "header": {
            "title": "Biomechanical Analysis",
            "subtitle": "AI-Powered Ergonomic Assessment",
            "poweredBy": "Gemini AI",
        },
        "status": {
            "title": "System Status:",
            "checking": "Checking connection...",
            "connected": "Connected",
            "disconnected": "Server disconnected",
            "refresh": "Refresh",
        },
        "capture": {
            "title": "Image Capture",
            "placeholder": "Capture your work posture",
            "placeholderSub": "Use camera or upload a photo",
            "startCamera": "Start Camera",
            "captureAnalyze": "Capture & Analyze",
            "uploadImage": "Upload Image",
            "stopCamera": "Stop Camera",
            "analyzing": "Analyzing with Gemini AI...",
            "analyzingTime": "This may take 5-10 seconds",
        },
        "results": {
            "title": "Analysis Results",
            "noAnalysis": "No analysis yet",
            "noAnalysisSub": "Capture an image to begin",
            "score": "Ergonomic Score",
            "analyzedBy": "Analyzed with",
            "postureObserved": "Observed Posture",
            "risksIdentified": "Identified Risks",
            "recommendations": "Recommendations",
            "poweredBy": "Analysis by Adapty Global • Powered by Google Gemini AI",
        },
        "risks": {
            "high": "HIGH",
            "medium": "MEDIUM",
            "low": "LOW",
        },
        "errors": {
            "title": "Analysis Error",
            "cameraAccess": "Error accessing camera: ",
            "serverDown": "Check server status",
            "apiKeyMissing": "API Key not configured. Check .env file",
            "invalidFormat": "Unsupported format. Use images (JPG, PNG) or videos.",
            "general": "An error occurred during analysis",
        },
        "footer": {
            "copyright": "Biomechanical Analysis System • Adapty Global • Powered by Google Gemini AI",
        },
    },
    Language.SPANISH: {
        "header": {
            "title": "Análisis Biomecánico",
            "subtitle": "Evaluación Ergonómica con IA",
            "poweredBy": "Gemini AI",
        },
        "status": {
            "title": "Estado del Sistema:",
            "checking": "Verificando conexión...",
            "connected": "Conectado",
            "disconnected": "Servidor desconectado",
            "refresh": "Actualizar",
        },
        "capture": {
            "title": "Captura de Imagen",
            "placeholder": "Captura tu postura de trabajo",
            "placeholderSub": "Usa la cámara o sube una foto",
            "startCamera": "Activar Cámara",
            "captureAnalyze": "Capturar y Analizar",
            "uploadImage": "Subir Imagen",
            "stopCamera": "Detener Cámara",
            "analyzing": "Analizando con Gemini AI...",
            "analyzingTime": "Esto puede tomar 5-10 segundos",
        },
        "results": {
            "title": "Resultados del Análisis",
            "noAnalysis": "Sin análisis aún",
            "noAnalysisSub": "Captura una imagen para comenzar",
            "score": "Puntuación Ergonómica",
            "analyzedBy": "Analizado con",
            "postureObserved": "Postura Observada",
            "risksIdentified": "Riesgos Identificados",
            "recommendations": "Recomendaciones",
            "poweredBy": "Análisis por Adapty Global • Powered by Google Gemini AI",
        },
        "risks": {
            "high": "ALTO",
            "medium": "MEDIO",
            "low": "BAJO",
        },
        "errors": {
            "title": "Error en el Análisis",
            "cameraAccess": "Error al acceder a la cámara: ",
            "serverDown": "Verificar estado del servidor",
            "apiKeyMissing": "API Key no configurada. Revisa el archivo .env",
            "invalidFormat": "Formato no soportado. Usa imágenes (JPG, PNG) o videos.",
            "general": "Ocurrió un error durante el análisis",
        },
        "footer": {
            "copyright": "Sistema de Análisis Biomecánico • Adapty Global • Powered by Google Gemini AI",
        },
    },
})


def get_ui_strings(language: Optional[str]) -> Mapping[str, Any]:
    """Return the UI string table for a tag (Spanish when unsupported)."""

    return UI_STRINGS[Language.resolve(language)]
