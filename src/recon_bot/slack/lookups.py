"""Read-only Slack lookups used by the recon pipelines.

Channel and message lookups raise SlackApiError so the caller can report
permission problems. Name and permalink lookups are best-effort and never raise.
"""

import logging

from cachetools import TTLCache
from slack_sdk.errors import SlackApiError

from recon_bot.models.slack import SourceMessage
from recon_bot.slack.client import get_slack_client

logger = logging.getLogger(__name__)

_name_cache: TTLCache = TTLCache(maxsize=1000, ttl=600)  # 10-minute TTL


def slack_error_code(exc: SlackApiError) -> str:
    """Return Slack's error code (e.g., 'missing_scope') or the exception text."""
    response = exc.response
    code = response.get("error", "") if response is not None else ""
    return code or str(exc)


def display_name_from_user(user: dict, user_id: str) -> str:
    """Pick a display name using the profile fallback order. Pure function.

    real_name_normalized -> real_name -> display_name -> handle -> "User <id>".
    """
    profile = user.get("profile") or {}
    for candidate in (
        profile.get("real_name_normalized"),
        user.get("real_name") or profile.get("real_name"),
        profile.get("display_name"),
        user.get("name"),
    ):
        if candidate and candidate.strip():
            return candidate.strip()
    return f"User {user_id}"


async def get_channel_name(channel_id: str) -> str:
    """Return the channel's name. Raises SlackApiError if Slack rejects the lookup."""
    client = await get_slack_client()
    response = await client.conversations_info(channel=channel_id)
    return (response.get("channel") or {}).get("name") or ""


async def fetch_message(channel_id: str, ts: str) -> SourceMessage | None:
    """Fetch exactly the message at ``ts`` via an inclusive point lookup.

    Channel history only holds top-level messages, so a miss there is
    retried against conversations.replies to find a thread reply.
    Returns None when the message no longer exists. Raises SlackApiError
    if Slack rejects the lookup.
    """
    client = await get_slack_client()
    response = await client.conversations_history(
        channel=channel_id,
        latest=ts,
        inclusive=True,
        limit=1,
    )
    messages = response.get("messages") or []
    if messages and messages[0].get("ts") == ts:
        return SourceMessage.from_slack(messages[0])
    return await _fetch_thread_reply(channel_id, ts)


async def _fetch_thread_reply(channel_id: str, ts: str) -> SourceMessage | None:
    """Look ``ts`` up as a thread reply. None if it is in no thread (deleted)."""
    client = await get_slack_client()
    try:
        response = await client.conversations_replies(
            channel=channel_id,
            ts=ts,
            oldest=ts,
            latest=ts,
            inclusive=True,
        )
    except SlackApiError as exc:
        if slack_error_code(exc) == "thread_not_found":
            return None
        raise

    for message in response.get("messages") or []:
        if message.get("ts") == ts:
            return SourceMessage.from_slack(message)
    return None


async def get_user_display_name(user_id: str | None) -> str:
    """Resolve a user id to a display name, cached for 10 minutes.

    Never raises: falls back to "User <id>" on any Slack error.
    """
    if not user_id:
        return "Unknown user"

    cached = _name_cache.get(user_id)
    if cached is not None:
        return cached

    try:
        client = await get_slack_client()
        response = await client.users_info(user=user_id)
    except SlackApiError as exc:
        logger.warning("users.info failed for %s: %s", user_id, slack_error_code(exc))
        return f"User {user_id}"

    name = display_name_from_user(response.get("user") or {}, user_id)
    _name_cache[user_id] = name
    return name


async def get_permalink(channel_id: str, ts: str) -> str | None:
    """Return a shareable permalink for the message, or None on failure."""
    try:
        client = await get_slack_client()
        response = await client.chat_getPermalink(channel=channel_id, message_ts=ts)
    except SlackApiError as exc:
        logger.warning("chat.getPermalink failed for %s/%s: %s", channel_id, ts, slack_error_code(exc))
        return None
    return response.get("permalink")


def invalidate_name_cache() -> None:
    """Clear the display-name cache. Used for testing."""
    _name_cache.clear()
