"""
Pytest configuration for API integration tests
"""

import pytest
from fastapi.testclient import TestClient

from services.extraction_service import ExtractionService


@pytest.fixture(scope="function")
def install_service(settings):
    """
    Put an ExtractionService with the given collaborators into app state.

    Returns a function so individual tests can swap in failing fakes.
    """
    from main import app

    def _install(detector=None, segmenter=None):
        service = ExtractionService(detector=detector, segmenter=segmenter, settings=settings)
        app.state.settings = settings
        app.state.extraction_service = service
        app.state.debug = False
        return service

    return _install


@pytest.fixture(scope="function")
def client(install_service, fake_detector, fake_segmenter):
    """
    Create a test client with properly initialized app state.
    Each test gets a fresh service to avoid state contamination.
    """
    from main import app

    install_service(detector=fake_detector, segmenter=fake_segmenter)

    # Create test client (no context manager so the lifespan does not replace state)
    return TestClient(app, raise_server_exceptions=False)
