# app/api/v1/endpoints/languages.py

from fastapi import APIRouter

from app.core.i18n import Language, as_dict, get_ui_strings
from app.schemas.analysis import LanguageStringsResponse

router = APIRouter()


@router.get("/languages/{language}", response_model=LanguageStringsResponse)
async def ui_strings(language: str):
    """Textos de interfaz del idioma pedido (español si no está soportado)."""
    resolved = Language.resolve(language)
    return LanguageStringsResponse(
        language=resolved,
        available=list(Language),
        strings=as_dict(get_ui_strings(resolved)),
    )
