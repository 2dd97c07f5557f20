"""Shared test fixtures and configuration for backend tests."""
import pytest
from fastapi.testclient import TestClient

from chat_relay.config import AppSettings
from chat_relay.main import create_app


@pytest.fixture
def settings():
    """Default settings with a fixed session secret."""
    return AppSettings(secrets={"session": {"secret_key": "test-secret"}})


@pytest.fixture
def app(settings):
    """A fresh application with empty chat state."""
    return create_app(settings)


@pytest.fixture
def make_client(app):
    """Factory for TestClients sharing one app; each keeps its own cookies."""
    def _make() -> TestClient:
        return TestClient(app)
    return _make


@pytest.fixture
def api_client(make_client):
    """Provide a TestClient for the app under test."""
    return make_client()
