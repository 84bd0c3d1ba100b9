"""Slack notification functions for pipeline outcomes.

All functions are fire-and-forget: they catch and log errors but never raise,
ensuring notification failures cannot crash the pipeline.
"""

import logging

from slack_sdk.errors import SlackApiError

from recon_bot.recon.channels import DEAL_NAME_GUIDANCE
from recon_bot.recon.outcome import OutcomeKind, PipelineOutcome
from recon_bot.slack.client import get_slack_client
from recon_bot.slack.lookups import slack_error_code

logger = logging.getLogger(__name__)

MAX_DIAGNOSTIC_CHARS = 500

_PERMISSION_HINTS = {
    "channel": (
        "I couldn't read this channel's info",
        "`channels:read` / `groups:read`",
    ),
    "message": (
        "I couldn't read the reacted message",
        "`channels:history` / `groups:history`",
    ),
}


def truncate(text: str, limit: int = MAX_DIAGNOSTIC_CHARS) -> str:
    """Cut text to ``limit`` characters, marking the cut with an ellipsis."""
    if len(text) <= limit:
        return text
    return text[: limit - 1] + "…"


def outcome_message(outcome: PipelineOutcome) -> str | None:
    """Return the thread reply for an outcome, or None when nothing is posted.

    IGNORED runs stay silent; INTERNAL_ERROR is logged by the caller only.
    """
    kind = outcome.kind
    if kind in (OutcomeKind.IGNORED, OutcomeKind.INTERNAL_ERROR):
        return None

    if kind == OutcomeKind.NOTED:
        text = f"✅ Sent to Pipedrive as a note on deal {outcome.deal_id}."
        if outcome.attachments_total:
            text += (
                f" Attachments uploaded: {outcome.attachments_uploaded or 0}"
                f"/{outcome.attachments_total}."
            )
        return text

    if kind == OutcomeKind.USER_ERROR:
        return f"⚠️ {DEAL_NAME_GUIDANCE}"

    if kind == OutcomeKind.PERMISSION_ERROR:
        lead, scopes = _PERMISSION_HINTS.get(outcome.stage or "", _PERMISSION_HINTS["channel"])
        return (
            f"⚠️ {lead} (`{outcome.detail}`). "
            f"Make sure I'm in this channel and the app has the {scopes} scopes."
        )

    if kind == OutcomeKind.TRANSIENT_ERROR:
        return (
            f"❌ Failed to send note to Pipedrive deal {outcome.deal_id}: "
            f"{truncate(outcome.detail or 'unknown error')}\n"
            "Remove and re-add the reaction to try again."
        )

    raise ValueError(f"Unhandled outcome kind: {kind}")


async def reply_in_thread(channel_id: str, thread_ts: str, text: str) -> None:
    """Post a reply under the given thread parent."""
    try:
        client = await get_slack_client()
        await client.chat_postMessage(channel=channel_id, thread_ts=thread_ts, text=text)
    except SlackApiError as exc:
        logger.warning(
            "Failed to reply in %s/%s: %s", channel_id, thread_ts, slack_error_code(exc)
        )


async def notify_outcome(channel_id: str, outcome: PipelineOutcome) -> None:
    """Report a pipeline outcome into its thread, if the outcome warrants a reply."""
    text = outcome_message(outcome)
    if text is None or not outcome.thread_ts:
        return
    await reply_in_thread(channel_id, outcome.thread_ts, text)


async def post_message(channel_id: str, text: str) -> str | None:
    """Post a top-level channel message. Returns its ts, or None on failure."""
    try:
        client = await get_slack_client()
        response = await client.chat_postMessage(channel=channel_id, text=text)
    except SlackApiError as exc:
        logger.warning("Failed to post to %s: %s", channel_id, slack_error_code(exc))
        return None
    return response.get("ts")


async def post_ephemeral(channel_id: str, user_id: str, text: str) -> None:
    """Post a message only the given user can see."""
    try:
        client = await get_slack_client()
        await client.chat_postEphemeral(channel=channel_id, user=user_id, text=text)
    except SlackApiError as exc:
        logger.warning("Failed to post ephemeral in %s: %s", channel_id, slack_error_code(exc))


async def add_reaction(channel_id: str, timestamp: str, emoji: str) -> None:
    """Add an emoji reaction to the original message.

    Handles common non-error conditions gracefully:
    - missing_scope: bot lacks reactions:write permission
    - already_reacted: reaction already exists on the message
    - no_item_specified: message not found (deleted or invalid timestamp)

    Args:
        channel_id: Slack channel ID.
        timestamp: Original message timestamp.
        emoji: Emoji name without colons (e.g., "memo").
    """
    try:
        client = await get_slack_client()
        await client.reactions_add(
            channel=channel_id,
            name=emoji,
            timestamp=timestamp,
        )
    except SlackApiError as exc:
        error_code = exc.response.get("error", "") if exc.response else ""
        if error_code in ("missing_scope", "already_reacted", "no_item_specified"):
            logger.warning(
                "Reaction '%s' not added (%s): %s", emoji, error_code, timestamp
            )
        else:
            logger.error(
                "Failed to add reaction '%s' to %s: %s",
                emoji,
                timestamp,
                error_code,
                exc_info=True,
            )
