"""
Main application entry point.

This module initializes and configures the FastAPI application.
It handles startup/shutdown events and wires everything together.
"""

import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from config.settings import settings
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src.presentation.dependencies import get_back_renderer, get_quota_guard
from src.presentation.routes import router

# Configure logging
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", settings.log_level),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
# httpx logs full request URLs at INFO, and the API key may travel in the query string
logging.getLogger("httpx").setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Application lifespan manager.

    Handles startup and shutdown events:
    - Startup: Create the process-wide quota guard and the back renderer
    - Shutdown: Report the final send count (it is not persisted)
    """
    # Startup
    logger.info("Starting Postcard Mailer API...")

    quota = get_quota_guard()
    get_back_renderer()

    if not settings.provider_api_key:
        logger.warning("PROVIDER_API_KEY is not set; submissions will fail until it is")
    if settings.provider_test_mode:
        logger.info("Provider test mode is ON: postcards will not be printed")

    logger.info("Application startup complete")

    yield

    # Shutdown
    snapshot = quota.snapshot()
    logger.info(
        f"Shutting down Postcard Mailer API ({snapshot.sent}/{snapshot.maximum} sent, "
        "quota state is not persisted)"
    )


# Create FastAPI application
app = FastAPI(
    title="Postcard Mailer API",
    description="""
    Turn a photo and a short note into a printed and mailed postcard.

    ## Features
    - Photo front, message rendered on the back (HTML, PDF or PNG)
    - Pre-rendered back sides accepted as is
    - Process-wide send limit and optional single-use access codes
    - Print-and-mail provider with configurable host, body format and auth

    ## Technical Stack
    - FastAPI for REST API
    - httpx for the provider call
    - Jinja2, reportlab and Pillow for back side rendering
    """,
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Add CORS middleware
# Decision: The front end is served from another origin (static hosting).
# In production, restrict to specific domains.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Custom exception handler for malformed request bodies
# Decision: Return 400 with the same envelope as every other failure,
# instead of FastAPI's default 422 with its own format
@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Handle unparseable or missing JSON bodies."""
    errors = exc.errors()
    error_messages = [f"{err['loc'][-1]}: {err['msg']}" for err in errors]

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "success": False,
            "error": "Missing or invalid postcard data",
            "details": error_messages,
        },
    )


# Include routes
app.include_router(router)


# Root endpoint
@app.get("/", tags=["root"])
async def root() -> dict[str, str]:
    """Root endpoint with API information."""
    return {
        "service": "Postcard Mailer API",
        "version": settings.app_version,
        "status": "running",
        "docs": "/docs",
        "health": "/api/health",
        "submit": "/api/send-postcard",
    }


if __name__ == "__main__":
    import uvicorn

    # Run with uvicorn for both dev & production
    # This way we reflect the production env on dev
    # machines avoiding the good old classic : "I don't get
    # this bug, it works on my machine". You know what I mean.
    uvicorn.run(
        "src.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_reload,
        log_level=settings.log_level.lower(),
    )
