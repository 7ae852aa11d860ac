"""Application configuration loaded from environment variables."""

from __future__ import annotations

import os

from schemagov.sparql_helper import DEFAULT_ENDPOINT
from schemagov.usage_log import DEFAULT_LOG_FILE


def _optional_float(value: str) -> float | None:
    # "0" or empty means wait indefinitely
    return float(value) if value and float(value) > 0 else None


class Config:
    """Default configuration for the backend, CLI and MCP server."""

    SECRET_KEY = os.getenv("SECRET_KEY", "dev-key-change-in-prod")
    DEBUG = os.getenv("FLASK_DEBUG", "0") == "1"

    # SPARQL endpoint every operation queries
    SPARQL_ENDPOINT = os.getenv("SPARQL_ENDPOINT", DEFAULT_ENDPOINT)

    # Request timeout for SPARQL queries in seconds (0 = none)
    SPARQL_TIMEOUT = _optional_float(os.getenv("SPARQL_TIMEOUT", "0"))

    # Deadline for distribution previews in seconds
    PREVIEW_TIMEOUT = float(os.getenv("PREVIEW_TIMEOUT", "10"))

    # Usage log path, relative to the working directory (":memory:" = not persisted)
    USAGE_LOG_PATH = os.getenv("USAGE_LOG_PATH", DEFAULT_LOG_FILE)


class TestConfig(Config):
    """Configuration overrides for testing."""

    TESTING = True
    SPARQL_ENDPOINT = "http://example.org/sparql"
    USAGE_LOG_PATH = ":memory:"
