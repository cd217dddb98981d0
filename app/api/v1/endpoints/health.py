# app/api/v1/endpoints/health.py

from datetime import datetime, timezone
from fastapi import APIRouter, Depends

from app.core.config import Settings, get_settings
from app.schemas.analysis import HealthResponse
from app.services.prompts import PROMPT_VERSION

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check(settings: Settings = Depends(get_settings)):
    """
    Endpoint de comprobación de estado para verificar que la API está funcionando.

    Returns:
        dict: Estado, timestamp, modelo, versión y si la API key de Gemini está configurada
    """
    return HealthResponse(
        status="OK",
        timestamp=datetime.now(timezone.utc).isoformat(),
        service=settings.app_name,
        model=settings.gemini_model,
        api_key_configured=settings.api_key_configured,
        version=settings.version,
        prompt_version=PROMPT_VERSION,
        port=settings.port,
        environment=settings.environment,
    )
