from typing import Any, Optional
from fastapi.responses import JSONResponse
from app.core.errors import AnalysisError
from app.schemas.analysis import AnalysisOutcome, AnalysisResponse, ErrorResponse


def success_response(outcome: AnalysisOutcome, *, code: int = 200) -> JSONResponse:
    """
    Genera la respuesta de éxito del análisis: {success, analysis, language, model, timestamp}.
    """
    response = AnalysisResponse(**outcome.model_dump())
    return JSONResponse(status_code=code, content=response.model_dump(mode="json"))


def error_response(code: int, error: str, message: str, **diagnostics: Any) -> JSONResponse:
    """
    Genera una respuesta de error estandarizada: {success: false, error, message, ...diagnóstico}.
    Los campos de diagnóstico con valor None se omiten.
    """
    payload = ErrorResponse(
        error=error,
        message=message,
        **{k: v for k, v in diagnostics.items() if v is not None},
    )
    return JSONResponse(status_code=code, content=payload.model_dump(mode="json"))


def analysis_error_response(exc: AnalysisError, status: Optional[int] = None) -> JSONResponse:
    """Convierte un AnalysisError en JSONResponse con su código HTTP."""
    payload = exc.to_payload()
    return JSONResponse(status_code=status or exc.status_code, content=payload)
