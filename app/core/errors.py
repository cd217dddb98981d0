"""Errores tipados del flujo de análisis.

Cada error sabe con qué código HTTP responder y qué campos de diagnóstico
devolver al cliente, para que la respuesta permita reproducir la falla.
"""

from typing import Any, Dict, List, Optional


class AnalysisError(Exception):
    """Base de todos los errores del análisis ergonómico."""

    status_code: int = 500
    error: str = "Analysis error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def diagnostics(self) -> Dict[str, Any]:
        return {}

    def to_payload(self) -> Dict[str, Any]:
        return {
            "success": False,
            "error": self.error,
            "message": self.message,
            **self.diagnostics(),
        }


class ConfigurationError(AnalysisError):
    error = "API key not configured"

    def __init__(
        self,
        message: str = "Please configure GEMINI_API_KEY in environment variables",
        instructions: str = "Visit https://aistudio.google.com/app/apikey to get your API key",
    ):
        super().__init__(message)
        self.instructions = instructions

    def diagnostics(self) -> Dict[str, Any]:
        return {"instructions": self.instructions}


class InvalidInput(AnalysisError):
    status_code = 400
    error = "Invalid data"

    def __init__(self, message: str = "imageData is required in base64 format", details: Any = None):
        super().__init__(message)
        self.details = details

    def diagnostics(self) -> Dict[str, Any]:
        return {"details": self.details} if self.details is not None else {}


class UpstreamError(AnalysisError):
    error = "Gemini API Error"

    def __init__(self, message: str, status: Optional[int] = None, details: Any = None):
        super().__init__(message)
        self.status = status
        self.details = details

    def diagnostics(self) -> Dict[str, Any]:
        return {"status": self.status, "details": self.details}


class InvalidUpstreamResponse(AnalysisError):
    error = "Invalid Gemini response"

    def __init__(self, raw_data: Any, message: str = "No se pudo procesar la respuesta de IA"):
        super().__init__(message)
        self.raw_data = raw_data

    def diagnostics(self) -> Dict[str, Any]:
        return {"rawData": self.raw_data}


class MalformedAnalysis(AnalysisError):
    error = "Parse error"

    def __init__(self, raw_response: str, parse_error: str, message: str = "La IA no devolvió un JSON válido"):
        super().__init__(message)
        self.raw_response = raw_response
        self.parse_error = parse_error

    def diagnostics(self) -> Dict[str, Any]:
        return {"rawResponse": self.raw_response, "parseError": self.parse_error}


class IncompleteAnalysis(AnalysisError):
    error = "Incomplete analysis"

    def __init__(
        self,
        received: Dict[str, Any],
        expected_keys: List[str],
        missing_keys: List[str],
        message: str = "El análisis no tiene la estructura esperada",
    ):
        super().__init__(message)
        self.received = received
        self.expected_keys = expected_keys
        self.missing_keys = missing_keys

    def diagnostics(self) -> Dict[str, Any]:
        return {
            "receivedData": self.received,
            "expectedKeys": self.expected_keys,
            "missingKeys": self.missing_keys,
        }


class InvalidAnalysis(AnalysisError):
    error = "Invalid analysis"

    def __init__(
        self,
        received: Dict[str, Any],
        validation_errors: List[Dict[str, Any]],
        message: str = "El análisis contiene valores fuera del formato esperado",
    ):
        super().__init__(message)
        self.received = received
        self.validation_errors = validation_errors

    def diagnostics(self) -> Dict[str, Any]:
        return {"receivedData": self.received, "validationErrors": self.validation_errors}
