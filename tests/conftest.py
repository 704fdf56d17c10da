# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up environment variables before any imports
# - Provides an Application around a fresh FastAPI app
# - Points at the fixture directories (controllers, models, views, public)
# =============================================================================

import os
import sys
from pathlib import Path

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("API_HOST", "127.0.0.1")
os.environ.pop("SERVE_HTTPS", None)

import pytest
from fastapi import FastAPI

from app.application import Application
from app.config import Settings
from app.middleware.hooks import HookMiddlewareFactory


FIXTURES_DIR = Path(__file__).parent / "fixtures"


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES_DIR


@pytest.fixture
def test_settings() -> Settings:
    """Settings for a local, HTTP-only application."""
    return Settings(API_HOST="127.0.0.1", SERVE_HTTPS=False)


@pytest.fixture
def application(test_settings) -> Application:
    """Application wrapping a bare FastAPI app."""
    return Application(FastAPI(), settings=test_settings)


@pytest.fixture(autouse=True)
def _reset_hooks():
    """Hooks live in a process-wide registry; isolate each test."""
    HookMiddlewareFactory.clear()
    yield
    HookMiddlewareFactory.clear()


@pytest.fixture(autouse=True)
def _forget_loaded_fixture_modules():
    """Drop controller/model modules imported from fixture directories."""
    yield
    for name in list(sys.modules):
        if name.split(".")[0] in ("controllers", "bad_controllers", "models"):
            del sys.modules[name]
