"""Async Pipedrive client singleton and response handling.

Creates a cached httpx.AsyncClient bound to the Pipedrive v1 base URL with
the API token attached as a query parameter on every request. Follows the
lazy-init pattern used by slack/client.py.
"""

import httpx

from recon_bot.config import get_settings

_client: httpx.AsyncClient | None = None


class PipedriveError(Exception):
    """Pipedrive answered, but not with ``success: true``.

    ``payload`` holds the decoded JSON body (or raw text) for diagnostics.
    """

    def __init__(self, message: str, payload: object = None, status_code: int | None = None):
        super().__init__(message)
        self.payload = payload
        self.status_code = status_code


def get_pipedrive_client() -> httpx.AsyncClient:
    """Return a cached Pipedrive HTTP client.

    Creates the client on first call using pipedrive_api_token and
    http_timeout_seconds from settings. Subsequent calls return the cached instance.
    """
    global _client
    if _client is None:
        settings = get_settings()
        _client = httpx.AsyncClient(
            base_url=settings.pipedrive_base_url,
            params={"api_token": settings.pipedrive_api_token},
            timeout=httpx.Timeout(settings.http_timeout_seconds),
        )
    return _client


def reset_client() -> None:
    """Reset the cached client instance. Used for testing."""
    global _client
    _client = None


def parse_response(response: httpx.Response, action: str) -> dict:
    """Decode a Pipedrive response and return its ``data`` object.

    Pipedrive reports failures in the body (``{"success": false, "error": ...}``),
    often with a 4xx status. Any body that is not JSON with ``success: true``
    raises PipedriveError carrying the payload.
    """
    try:
        body = response.json()
    except ValueError:
        raise PipedriveError(
            f"{action} failed: HTTP {response.status_code}",
            payload=response.text,
            status_code=response.status_code,
        ) from None

    if not isinstance(body, dict) or not body.get("success"):
        raise PipedriveError(
            f"{action} failed: HTTP {response.status_code}",
            payload=body,
            status_code=response.status_code,
        )
    return body.get("data") or {}
