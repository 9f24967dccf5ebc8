"""
Shared FastAPI dependencies for the print extraction API.
"""

import logging
from typing import Any, Dict

from fastapi import Depends, HTTPException, Request

from config import Settings
from services.extraction_service import ExtractionService

logger = logging.getLogger(__name__)


def get_settings_from_state(request: Request) -> Settings:
    """
    Get application settings from app state.

    Args:
        request: FastAPI request object

    Returns:
        Settings the application was started with

    Raises:
        HTTPException: If settings not initialized
    """
    try:
        return request.app.state.settings
    except AttributeError as e:
        logger.error(f"Settings not initialized in app state: {e}")
        raise HTTPException(status_code=500, detail="Internal server error: Settings not initialized")


def get_extraction_service(request: Request) -> ExtractionService:
    """
    Get the extraction service from app state.

    Args:
        request: FastAPI request object

    Returns:
        ExtractionService shared by all requests

    Raises:
        HTTPException: If the service was not initialized
    """
    try:
        return request.app.state.extraction_service
    except AttributeError as e:
        logger.error(f"Extraction service not initialized in app state: {e}")
        raise HTTPException(
            status_code=500, detail="Internal server error: Extraction service not initialized"
        )


def get_config(settings: Settings = Depends(get_settings_from_state)) -> Dict[str, Any]:
    """Get application configuration with secrets masked."""
    return settings.to_dict()
