"""Shared test fixtures."""

import pytest
from fastapi.testclient import TestClient

from recon_bot.app import app
from recon_bot.config import get_settings
from recon_bot.pipedrive.client import reset_client as reset_pipedrive_client
from recon_bot.recon.dedupe import reset_dedupe_store
from recon_bot.slack.client import reset_client as reset_slack_client
from recon_bot.slack.lookups import invalidate_name_cache


@pytest.fixture(scope="session")
def client() -> TestClient:
    """Create a TestClient for the FastAPI app."""
    return TestClient(app)


@pytest.fixture(autouse=True)
def _reset_process_state():
    """Clear cached settings, clients, name cache, and dedupe store around every test."""
    get_settings.cache_clear()
    reset_dedupe_store()
    invalidate_name_cache()
    reset_slack_client()
    reset_pipedrive_client()
    yield
    get_settings.cache_clear()
    reset_dedupe_store()
    invalidate_name_cache()
    reset_slack_client()
    reset_pipedrive_client()
