"""Fixtures for backend tests."""

from __future__ import annotations

import pytest

from schemagov.backend.app import create_app
from schemagov.backend.config import TestConfig
from schemagov.backend.services.tool_service import ToolService


@pytest.fixture()
def app(toolkit):
    """Create a test Flask application around the in-memory toolkit."""
    application = create_app(TestConfig, service=ToolService(toolkit))
    yield application


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()
