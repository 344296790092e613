"""
SereneMind - Main FastAPI Application
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import settings
from .api import chat_router, admin_router
from .core.logging_config import setup_logging
from .llm import create_llm_provider
from .middleware import RequestLoggingMiddleware
from .services import TherapistClient
from .storage import LocalStorage, SessionStore

# Logger will be initialized after setup_logging() is called
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events."""
    # Startup
    setup_logging(settings)

    storage = LocalStorage(settings.local_storage_path)
    app.state.session_store = SessionStore(storage, settings.sessions_dir)

    provider = create_llm_provider(
        provider=settings.llm_provider,
        api_key=settings.resolved_llm_api_key,
        model=settings.llm_model,
        base_url=settings.llm_base_url,
        timeout=settings.llm_timeout,
    )
    if provider is None:
        logger.warning("No LLM API key configured; chat replies will fail until LLM_API_KEY is set")
    app.state.therapist = TherapistClient(provider, temperature=settings.llm_temperature)

    logger.info(f"Starting {settings.app_name} v{settings.app_version}")
    logger.info(f"Storage path: {storage.base_dir / settings.sessions_dir}")
    logger.info(f"LLM provider: {settings.llm_provider} (model: {provider.model if provider else '-'})")
    logger.info(f"Evaluation interval: every {settings.evaluation_interval} messages")
    yield
    # Shutdown
    logger.info(f"Shutting down {settings.app_name}")


# Create FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="AI therapist chat with session storage and wellness evaluations",
    lifespan=lifespan
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add request logging middleware (after CORS)
if settings.log_api_requests:
    app.add_middleware(RequestLoggingMiddleware)

# Include routers
app.include_router(chat_router)
app.include_router(admin_router)


def jsonable_errors(exc: RequestValidationError) -> list:
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
        for err in exc.errors()
    ]


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies are client errors: 400, not FastAPI's default 422."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Invalid request body", "errors": jsonable_errors(exc)},
    )


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "app": settings.app_name,
        "version": settings.app_version,
        "status": "running",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "llm_provider": settings.llm_provider,
        "version": settings.app_version
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "serenemind.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug
    )
