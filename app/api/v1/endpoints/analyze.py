# app/api/v1/endpoints/analyze.py

import logging
from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from app.core.config import Settings, get_settings
from app.schemas.analysis import AnalysisRequest, AnalysisResponse, ErrorResponse
from app.services.analysis_handler import AnalysisRequestHandler
from app.utils.response import success_response

logger = logging.getLogger(__name__)
router = APIRouter()


def get_analysis_handler(settings: Settings = Depends(get_settings)) -> AnalysisRequestHandler:
    """
    Dependencia que provee el handler con la configuración explícita.
    """
    return AnalysisRequestHandler(settings)


@router.post(
    "/analyze",
    response_model=AnalysisResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    summary="Análisis ergonómico de una imagen",
)
async def analyze_posture(
    payload: AnalysisRequest = Body(...),
    handler: AnalysisRequestHandler = Depends(get_analysis_handler),
) -> JSONResponse:
    """
    Recibe una imagen en base64, la envía a Gemini con el prompt del idioma
    y devuelve la evaluación ergonómica validada.

    Los errores (AnalysisError) los convierte en JSON el handler global de la app.
    """
    outcome = await handler.handle(payload)
    return success_response(outcome)
