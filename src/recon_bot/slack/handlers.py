"""Slack event dispatch and event filtering logic."""

import logging

from fastapi import BackgroundTasks
from fastapi.responses import JSONResponse

from recon_bot.config import get_settings
from recon_bot.models.slack import MemberJoinedEvent, ReactionEvent
from recon_bot.recon.pipeline import handle_reaction
from recon_bot.recon.start import handle_member_joined, handle_recon_command

logger = logging.getLogger(__name__)

RECON_START_COMMAND = "/recon-start"


def handle_slack_event(payload: dict, background_tasks: BackgroundTasks) -> JSONResponse:
    """Dispatch a Slack event based on its type.

    - url_verification: return the challenge token
    - event_callback: route the contained event by its type
    - anything else: acknowledge with 200
    """
    if payload.get("type") == "url_verification":
        return JSONResponse({"challenge": payload["challenge"]})

    if payload.get("type") == "event_callback":
        event = payload.get("event", {})
        event_type = event.get("type")
        if event_type == "reaction_added":
            handle_reaction_added_event(event, background_tasks)
        elif event_type == "member_joined_channel":
            handle_member_joined_event(event, background_tasks)
        return JSONResponse({"ok": True})

    return JSONResponse({"ok": True})


def parse_reaction_event(event: dict) -> ReactionEvent | None:
    """Apply reaction filters and return the accepted event, or None.

    Filters are applied in order:
    1. Reaction-to-note feature disabled -> skip
    2. Reacted item is not a message (files, file comments) -> skip
    3. Missing channel or message ts -> skip
    4. Reaction not in the accepted set -> skip
    """
    settings = get_settings()

    # Filter 1: Feature toggle
    if not settings.reaction_notes_enabled:
        return None

    item = event.get("item") or {}

    # Filter 2: Only reactions on messages
    if item.get("type", "message") != "message":
        return None

    # Filter 3: Needs channel + ts
    channel_id = item.get("channel")
    message_ts = item.get("ts")
    if not channel_id or not message_ts:
        return None

    # Filter 4: Accepted reactions only (skin-tone variants count as the base emoji)
    reaction = (event.get("reaction") or "").split("::")[0]
    if reaction not in settings.note_reaction_names:
        return None

    return ReactionEvent(
        channel_id=channel_id,
        message_ts=message_ts,
        user_id=event.get("user") or "",
        reaction=reaction,
    )


def handle_reaction_added_event(event: dict, background_tasks: BackgroundTasks) -> None:
    """Filter a reaction_added event and dispatch the note pipeline to background."""
    reaction_event = parse_reaction_event(event)
    if reaction_event is None:
        return

    logger.info(
        "Dispatching note for %s/%s (:%s: by %s)",
        reaction_event.channel_id,
        reaction_event.message_ts,
        reaction_event.reaction,
        reaction_event.user_id,
    )
    background_tasks.add_task(handle_reaction, reaction_event)


def handle_member_joined_event(event: dict, background_tasks: BackgroundTasks) -> None:
    """Dispatch member_joined_channel to background; the bot-join check happens there."""
    channel_id = event.get("channel")
    user_id = event.get("user")
    if not channel_id or not user_id:
        return

    background_tasks.add_task(
        handle_member_joined, MemberJoinedEvent(channel_id=channel_id, user_id=user_id)
    )


def handle_slash_command(form: dict, background_tasks: BackgroundTasks) -> JSONResponse:
    """Acknowledge a slash command immediately and run it in the background."""
    command = form.get("command")
    channel_id = form.get("channel_id")
    user_id = form.get("user_id")

    if command != RECON_START_COMMAND or not channel_id:
        return JSONResponse(
            {"response_type": "ephemeral", "text": f"Unknown command: {command}"}
        )

    background_tasks.add_task(handle_recon_command, channel_id, user_id or "")
    return JSONResponse({"response_type": "ephemeral", "text": "Starting recon setup…"})
