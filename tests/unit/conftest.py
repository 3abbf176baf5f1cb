"""
Global fixtures for all unit tests.

This conftest provides autouse fixtures that prevent real external service calls:
- MongoDB connection attempts (would cause 5-30s timeout per test)
- Environment/config isolation (prevents credential leakage and real API calls)

These fixtures apply automatically to ALL tests in tests/unit/.
"""

import os
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

# Set test environment BEFORE any imports so Config never picks up a real store
os.environ["MONGODB_URI"] = ""
os.environ["BACKEND_URL"] = ""

from leadgen.common.config import Config
from leadgen.common.repositories import reset_repository
from leadgen.common.types import ContactRecord


@pytest.fixture(autouse=True)
def mock_mongodb():
    """
    Prevent MongoDB connection attempts in all unit tests.

    MongoClient("") defaults to localhost:27017, causing 5-30s timeout per test.
    """
    with patch("pymongo.MongoClient") as mock_client:
        mock_instance = MagicMock()
        mock_db = MagicMock()
        mock_collection = MagicMock()

        # Setup chain: client["db"]["collection"]
        mock_instance.__getitem__ = MagicMock(return_value=mock_db)
        mock_db.__getitem__ = MagicMock(return_value=mock_collection)
        mock_collection.find_one = MagicMock(return_value=None)
        mock_collection.find = MagicMock(return_value=[])

        mock_client.return_value = mock_instance
        yield mock_client


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch):
    """
    Isolate tests from real credentials and configuration.

    Config reads the environment once at import, so the class attributes are
    patched directly alongside the environment variables.
    """
    mock_settings = {
        "OPENAI_API_KEY": "sk-test-mock-key",
        "CONTACTOUT_API_KEY": "co-test-mock-key",
        "FIRECRAWL_API_KEY": "fc-test-mock-key",
        "RESEND_API_KEY": "re-test-mock-key",
        "MONGODB_URI": "",
        "BACKEND_URL": "",
        "MEETING_LINK": "",
    }
    for name, value in mock_settings.items():
        monkeypatch.setenv(name, value)
        monkeypatch.setattr(Config, name, value)

    # Retries must never really sleep in unit tests
    monkeypatch.setattr(Config, "RETRY_INITIAL_DELAY_MS", 0)

    reset_repository()
    yield
    reset_repository()


@pytest.fixture
def make_contact():
    """Factory for ContactRecords with sensible defaults."""

    def _make(index: int = 1, **overrides) -> ContactRecord:
        fields = dict(
            id=f"p{index}",
            full_name=f"Prospect {index}",
            role="Head of Operations",
            company=f"Company {index}",
            work_email=f"prospect{index}@company{index}.com",
        )
        fields.update(overrides)
        return ContactRecord(**fields)

    return _make


@pytest.fixture
def mock_llm_client():
    """LLMJsonClient stand-in; set complete_json.return_value / side_effect per test."""
    client = MagicMock()
    client.complete_json = AsyncMock(return_value={})
    return client


@pytest.fixture
def mock_email_sender():
    sender = MagicMock()
    sender.send = AsyncMock(return_value=True)
    return sender
