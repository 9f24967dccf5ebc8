"""
Print Extraction - Main FastAPI Application
"""

import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Add parent directory to path
sys.path.append(str(Path(__file__).parent))

from api.exceptions import register_exception_handlers  # noqa: E402
from api.routers import extraction  # noqa: E402
from common.constants import SystemConstants  # noqa: E402
from config import Settings, get_settings  # noqa: E402
from services.detector import GeminiPrintDetector  # noqa: E402
from services.extraction_service import ExtractionService  # noqa: E402

# Get configuration
settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.system.log_level),
    format=SystemConstants.LOG_FORMAT,
)
logger = logging.getLogger(__name__)


def build_extraction_service(settings: Settings) -> ExtractionService:
    """
    Create the extraction service with its collaborators.

    The Gemini detector is only wired in when an API key is configured;
    without one, /api/extract reports a non-retryable detector error while
    /api/process and /api/export keep working.

    Args:
        settings: Application settings

    Returns:
        ExtractionService instance
    """
    detector = None
    if settings.detector.api_key:
        detector = GeminiPrintDetector(
            api_key=settings.detector.api_key,
            model_name=settings.detector.model_name,
            timeout_ms=settings.detector.timeout_ms,
            max_retries=settings.detector.max_retries,
        )
    else:
        logger.warning("PX_DETECTOR_API_KEY not set, print detection is disabled")

    return ExtractionService(detector=detector, settings=settings)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle"""
    # Startup
    logger.info("Starting Print Extraction server...")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Debug mode: {settings.system.debug}")

    # Store collaborators in app state for access by routers
    app.state.settings = settings
    app.state.extraction_service = build_extraction_service(settings)
    app.state.debug = settings.system.debug

    logger.info("Extraction service initialized successfully")

    yield

    # Shutdown
    logger.info("Server shutdown complete")


# Create FastAPI app
app = FastAPI(
    title="Print Extraction",
    description="Extracts printed graphics from garment photos",
    version="1.0.0",
    lifespan=lifespan,
)

# Configure CORS for browser clients
if settings.api.cors_enabled:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

# Register exception handlers
register_exception_handlers(app)

# Include routers
app.include_router(extraction.router, prefix="/api", tags=["Extraction"])


# Root endpoint
@app.get("/")
async def root():
    return {
        "name": "Print Extraction",
        "status": "running",
        "version": "1.0.0",
        "endpoints": {
            "extract": "/api/extract",
            "process": "/api/process",
            "export": "/api/export",
            "config": "/api/config",
            "docs": "/docs",
        },
    }


# Health check endpoint
@app.get("/health")
async def health_check():
    service = getattr(app.state, "extraction_service", None)
    return {
        "status": "healthy",
        "services": {
            "extraction_service": service is not None,
            "detector": service is not None and service.detector is not None,
            "segmenter": service is not None and service.segmenter is not None,
        },
    }


if __name__ == "__main__":
    server_config = uvicorn.Config(
        "main:app",
        host=settings.api.host,
        port=settings.api.port,
        reload=settings.system.debug,
        log_level=settings.system.log_level.lower(),
        loop="asyncio",
    )

    server = uvicorn.Server(server_config)

    try:
        server.run()
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt, shutting down...")
    finally:
        logger.info("Server exiting...")
