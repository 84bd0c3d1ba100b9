"""Recon channel start-up: invite the baseline team and the deal's PM.

Runs when the bot joins a recon channel, or on demand via /recon-start.
Every step after the deal id check is best-effort: failures are logged and
the remaining steps still run.
"""

import asyncio
import logging

import httpx
from slack_sdk.errors import SlackApiError

from recon_bot.config import get_settings
from recon_bot.models.slack import MemberJoinedEvent
from recon_bot.pipedrive import PipedriveError, get_deal, update_deal
from recon_bot.recon.channels import DEAL_NAME_GUIDANCE, extract_deal_id, is_recon_channel
from recon_bot.slack.client import get_bot_user_id, get_slack_client
from recon_bot.slack.lookups import get_channel_name, get_permalink, slack_error_code
from recon_bot.slack.notifier import post_ephemeral, post_message

logger = logging.getLogger(__name__)

# Invite errors that only mean "nothing to do"
BENIGN_INVITE_ERRORS = (
    "already_in_channel",
    "cant_invite_self",
    "not_in_channel",
    "not_supported",
    "failed_for_some_users",
)

_JOIN_SETTLE_SECONDS = 0.25


def pm_enum_id(value: object) -> int | None:
    """Read a Pipedrive enum field value given as int, numeric string, or {"value": ...}."""
    if isinstance(value, dict):
        value = value.get("value")
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


async def ensure_bot_in_channel(channel_id: str) -> None:
    """Join the channel. Ignored for private channels and when already a member."""
    try:
        client = await get_slack_client()
        await client.conversations_join(channel=channel_id)
    except SlackApiError as exc:
        logger.info("conversations.join skipped for %s: %s", channel_id, slack_error_code(exc))


async def invite_users(channel_id: str, user_ids: list[str]) -> None:
    """Invite users to the channel, de-duplicated. Never raises."""
    users = list(dict.fromkeys(u for u in user_ids if u))
    if not channel_id or not users:
        return

    try:
        client = await get_slack_client()
        await client.conversations_invite(channel=channel_id, users=",".join(users))
    except SlackApiError as exc:
        code = slack_error_code(exc)
        if any(benign in code for benign in BENIGN_INVITE_ERRORS):
            logger.info("Invite to %s non-fatal: %s", channel_id, code)
        else:
            logger.warning("Invite to %s failed: %s", channel_id, code)


async def invite_project_manager(channel_id: str, deal_id: str) -> str | None:
    """Invite the Slack user mapped from the deal's Project Manager field.

    Returns the invited Slack user id, or None if unset, unmapped, or the
    deal could not be fetched.
    """
    settings = get_settings()
    try:
        deal = await get_deal(deal_id)
    except (PipedriveError, httpx.HTTPError) as exc:
        logger.warning("Deal %s fetch failed, skipping PM invite: %s", deal_id, exc)
        return None

    enum_id = pm_enum_id(deal.get(settings.pd_project_manager_field_key))
    pm_slack_id = settings.recon_pm_slack_map.get(enum_id) if enum_id is not None else None
    if pm_slack_id:
        await invite_users(channel_id, [pm_slack_id])
    return pm_slack_id


async def write_back_channel_link(channel_id: str, deal_id: str) -> None:
    """Post the init message and store its permalink on the deal's Slack URL field."""
    settings = get_settings()
    ts = await post_message(channel_id, f"✅ Recon channel initialized for deal *{deal_id}*.")
    if not ts:
        return

    permalink = await get_permalink(channel_id, ts)
    if not permalink:
        return

    try:
        await update_deal(deal_id, {settings.pd_slack_url_field_key: permalink})
    except (PipedriveError, httpx.HTTPError) as exc:
        logger.warning("Slack URL writeback to deal %s failed: %s", deal_id, exc)


def build_summary(deal_id: str, baseline: list[str], pm_slack_id: str | None) -> str:
    """Render the "Recon started" channel message."""
    mentions = " ".join(f"<@{user_id}>" for user_id in baseline) or "(none configured)"
    pm_line = f"PM invited: <@{pm_slack_id}>" if pm_slack_id else "PM invite: (not set / not mapped yet)"
    return (
        "🧱 *Recon started*\n"
        f"• Deal: *{deal_id}*\n"
        f"• Baseline: {mentions}\n"
        f"• {pm_line}\n"
        f"• Channel format: `rcn-<name>-deal{deal_id}`"
    )


async def start_recon_channel(
    channel_id: str, channel_name: str, *, announce_missing_deal: bool = False
) -> bool:
    """Initialize a recon channel. Returns False if the name has no deal id.

    A missing deal id is silent when the bot merely joined, but explicit
    invocations (announce_missing_deal=True) post naming guidance.
    """
    deal_id = extract_deal_id(channel_name)
    if deal_id is None:
        logger.info("Recon channel #%s has no deal id", channel_name)
        if announce_missing_deal:
            await post_message(channel_id, f"⚠️ {DEAL_NAME_GUIDANCE}")
        return False

    settings = get_settings()
    baseline = settings.always_invite_user_ids

    await ensure_bot_in_channel(channel_id)
    await asyncio.sleep(_JOIN_SETTLE_SECONDS)
    await invite_users(channel_id, baseline)

    pm_slack_id = await invite_project_manager(channel_id, deal_id)
    await write_back_channel_link(channel_id, deal_id)
    await post_message(channel_id, build_summary(deal_id, baseline, pm_slack_id))

    logger.info("Recon started for #%s (deal %s)", channel_name, deal_id)
    return True


async def handle_member_joined(event: MemberJoinedEvent) -> None:
    """Background-task entry point for member_joined_channel. Never raises.

    Only the bot's own join into a recon channel starts the workflow.
    """
    try:
        if event.user_id != await get_bot_user_id():
            return

        channel_name = await get_channel_name(event.channel_id)
        if not is_recon_channel(channel_name):
            return

        logger.info("Bot joined recon channel #%s (%s)", channel_name, event.channel_id)
        await start_recon_channel(event.channel_id, channel_name)
    except Exception as exc:
        logger.error(
            "Recon auto-start failed for %s: %s", event.channel_id, exc, exc_info=True
        )


async def handle_recon_command(channel_id: str, user_id: str) -> None:
    """Background-task entry point for /recon-start. Never raises."""
    try:
        channel_name = await get_channel_name(channel_id)
        if not is_recon_channel(channel_name):
            await post_ephemeral(
                channel_id, user_id, "⚠️ This command only works in `rcn-...` channels."
            )
            return

        await start_recon_channel(channel_id, channel_name, announce_missing_deal=True)
    except Exception as exc:
        logger.error("/recon-start failed for %s: %s", channel_id, exc, exc_info=True)
