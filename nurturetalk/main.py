"""NurtureTalk API - FastAPI application."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import Settings, get_settings
from .errors import ChatNotFoundError, ConfigurationError, NothingToReportError
from .core.prompts import missing_config_message
from .logging_setup import configure_logging
from .services import Services, build_services
from .api.routes import chat_router, memory_router, chats_router, reports_router

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


def create_app(settings: Optional[Settings] = None, services: Optional[Services] = None) -> FastAPI:
    """
    Build the application.

    Services are resolved once: either passed in, or built from settings
    when the app starts.
    """
    if services is not None:
        settings = services.settings
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "services", None) is None:
            app.state.services = build_services(settings)
        yield

    app = FastAPI(
        title=settings.app_name,
        description="NGO assistant with long-term conversational memory",
        version=VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )
    app.state.services = services

    # CORS - allow frontend origins
    # Set ALLOWED_ORIGINS env var for production (comma-separated)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_allowed_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ChatNotFoundError)
    async def chat_not_found(request: Request, exc: ChatNotFoundError):
        return JSONResponse(status_code=404, content={"detail": "Chat not found"})

    @app.exception_handler(ConfigurationError)
    async def not_configured(request: Request, exc: ConfigurationError):
        return JSONResponse(status_code=503, content={"detail": missing_config_message(exc.missing)})

    @app.exception_handler(NothingToReportError)
    async def nothing_to_report(request: Request, exc: NothingToReportError):
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    # Routes
    app.include_router(chat_router)
    app.include_router(memory_router)
    app.include_router(chats_router)
    app.include_router(reports_router)

    @app.get("/")
    async def root():
        """Health check."""
        return {
            "status": "ok",
            "service": settings.app_name,
            "version": VERSION
        }

    @app.get("/health")
    async def health(request: Request):
        """Health check endpoint with configuration status."""
        current: Services = request.app.state.services
        return {
            "status": "healthy" if not current.missing else "unconfigured",
            "vector_store": current.memory.backend if current.memory else None,
            "missing_credentials": current.missing,
            "dropped_memory_writes": current.memory.failed_writes if current.memory else 0,
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("nurturetalk.main:app", host="0.0.0.0", port=8000, reload=True)
