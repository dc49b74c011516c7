# api/app.py
"""
FastAPI application factory
"""
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.v1.router import api_router
from core.config import Settings, get_settings
from core.exceptions import ConfigurationError, ValidationError

logger = logging.getLogger(__name__)

async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"detail": {"message": str(exc), "errors": exc.errors}}
    )

async def configuration_error_handler(request: Request, exc: ConfigurationError) -> JSONResponse:
    logger.error(f"{request.url.path} unavailable: {exc}")
    return JSONResponse(status_code=500, content={"detail": str(exc)})

def create_app(lifespan=None, settings: Optional[Settings] = None) -> FastAPI:
    """Create FastAPI application with CORS, error mapping and the /api routes"""
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        debug=settings.debug,
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    # Bad farm data is the caller's fault, a missing API key is ours
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(ConfigurationError, configuration_error_handler)

    app.include_router(api_router, prefix="/api")

    @app.get("/")
    async def root():
        return {
            "service": settings.api_title,
            "version": settings.api_version,
            "environment": settings.environment.value,
            "model": settings.gemini_model,
            "docs": "/docs"
        }

    return app
