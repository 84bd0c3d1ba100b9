"""Tests for the FastAPI app wiring."""

from fastapi.testclient import TestClient

from recon_bot.app import app


def test_slack_routes_registered():
    paths = {route.path for route in app.routes}
    assert "/slack/events" in paths
    assert "/slack/commands" in paths


def test_no_health_route(client: TestClient):
    """Only Slack routes are served."""
    assert client.get("/health").status_code == 404


def test_lifespan_stores_settings():
    with TestClient(app) as client:
        assert client.app.state.settings is not None
