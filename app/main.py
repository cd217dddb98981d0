import logging
import traceback
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import Settings, get_settings, settings as default_settings
from app.core.errors import AnalysisError
from app.core.logging_config import LoggingConfig
from app.core.middleware import setup_middlewares
from app.api.v1.endpoints.analyze import router as analyze_router
from app.api.v1.endpoints.health import router as health_router
from app.api.v1.endpoints.languages import router as languages_router
from app.utils.response import analysis_error_response, error_response

logger = logging.getLogger(__name__)

# Define API metadata
tags_metadata = [
    {
        "name": "Health",
        "description": "API health check endpoints.",
    },
    {
        "name": "Analysis",
        "description": "Análisis ergonómico de imágenes con Gemini.",
    },
    {
        "name": "UI",
        "description": "Textos de interfaz por idioma.",
    },
]


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.api_key_configured:
            logger.info(f"Gemini API key configurada, modelo {settings.gemini_model}")
        else:
            logger.warning("GEMINI_API_KEY no configurada: /analyze responderá 500 hasta configurarla")
        yield

    app = FastAPI(
        title=settings.app_name,
        description="Evaluación ergonómica con IA (Gemini) 🚀",
        version=settings.version,
        openapi_tags=tags_metadata,
        docs_url="/docs",
        debug=settings.debug,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    setup_middlewares(app, prod=settings.is_production)

    @app.exception_handler(AnalysisError)
    async def analysis_exception_handler(request: Request, exc: AnalysisError):
        logger.warning(f"{exc.__class__.__name__} en {request.url.path}: {exc.message}")
        return analysis_error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        details = [
            {"loc": [str(p) for p in err.get("loc", ())], "msg": err.get("msg"), "type": err.get("type")}
            for err in exc.errors()
        ]
        # loc viene como ["body", "<campo>"]; sin campo significa cuerpo ausente
        fields = sorted({".".join(d["loc"][1:]) for d in details if d["loc"][:1] == ["body"] and len(d["loc"]) > 1})
        if fields and fields != ["imageData"]:
            message = f"Invalid value for: {', '.join(fields)}"
        else:
            message = "imageData is required in base64 format"
        return error_response(400, "Invalid data", message, details=details)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return error_response(404, "Ruta no encontrada", f"No existe la ruta {request.url.path}", path=request.url.path)
        message = exc.detail if isinstance(exc.detail, str) else "Error"
        return error_response(exc.status_code, "HTTP error", message)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.error(f"Error no manejado: {exc}", exc_info=exc)
        stack = None
        if not settings.is_production:
            stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        return error_response(500, "Internal server error", str(exc), stack=stack)

    # Los endpoints leen la configuración vía get_settings
    app.dependency_overrides[get_settings] = lambda: settings

    # Include routers (bajo el prefijo y también en la raíz)
    for router, tag in ((analyze_router, "Analysis"), (health_router, "Health"), (languages_router, "UI")):
        app.include_router(router, prefix=settings.api_prefix, tags=[tag])
        if settings.api_prefix:
            app.include_router(router, tags=[tag], include_in_schema=False)

    @app.get("/", tags=["Health"])
    async def root():
        return {"status": "OK"}

    return app


LoggingConfig.setup_logging(default_settings)
app = create_app()


def run() -> None:
    """Arranca el servidor con uvicorn."""
    uvicorn.run("app.main:app", host=default_settings.host, port=default_settings.port, reload=default_settings.debug)


if __name__ == "__main__":
    run()
