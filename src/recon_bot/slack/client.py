"""Async Slack client singleton.

Creates a cached AsyncWebClient instance configured with the bot token and
HTTP timeout from application settings. Follows the same lazy-init pattern
as pipedrive/client.py.
"""

from slack_sdk.web.async_client import AsyncWebClient

from recon_bot.config import get_settings

_client: AsyncWebClient | None = None
_bot_user_id: str | None = None


async def get_slack_client() -> AsyncWebClient:
    """Return a cached async Slack client instance.

    Creates the client on first call using slack_bot_token from settings.
    Subsequent calls return the cached instance.
    """
    global _client
    if _client is None:
        settings = get_settings()
        _client = AsyncWebClient(
            token=settings.slack_bot_token,
            timeout=int(settings.http_timeout_seconds),
        )
    return _client


async def get_bot_user_id() -> str:
    """Discover and cache the bot's own Slack user id via auth.test."""
    global _bot_user_id
    if _bot_user_id is None:
        client = await get_slack_client()
        response = await client.auth_test()
        _bot_user_id = response["user_id"]
    return _bot_user_id


def reset_client() -> None:
    """Reset the cached client and bot user id. Used for testing."""
    global _client, _bot_user_id
    _client = None
    _bot_user_id = None
