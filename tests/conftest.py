"""Shared test fixtures for the ESG Sunshine backend."""

from __future__ import annotations

import os
import tempfile
from unittest.mock import patch

import pytest

# logging_config reads this at import time
os.environ.setdefault("LOG_FILE_PATH", os.path.join(tempfile.gettempdir(), "esg_sunshine_test.log"))


@pytest.fixture(autouse=True)
def clear_gemini_env(monkeypatch):
    """Start every test with no Gemini credential configured."""
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("API_KEY", raising=False)
    monkeypatch.setenv("GEMINI_MODEL", "gemini-2.5-flash")


@pytest.fixture
def api_key(monkeypatch):
    monkeypatch.setenv("GEMINI_API_KEY", "test-fake-key")
    return "test-fake-key"


@pytest.fixture
def fake_model(api_key):
    """Patch the Gemini invoker; tests set return_value / side_effect to a ModelEnvelope."""
    with patch("gemini_service.generate_content") as mock_generate:
        yield mock_generate


@pytest.fixture
def client():
    from main import app

    app.config["TESTING"] = True
    with app.test_client() as test_client:
        yield test_client
