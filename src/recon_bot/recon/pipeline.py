"""Reaction-to-note pipeline: Slack approval reaction -> Pipedrive deal note.

Each stage returns either its value or a PipelineOutcome that ends the run.
The orchestrator reports the final outcome into the message's thread.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from typing import TypeVar

import httpx
from slack_sdk.errors import SlackApiError

from recon_bot.config import get_settings
from recon_bot.models.note import NoteRecord
from recon_bot.models.slack import ChannelContext, ReactionEvent, SourceMessage
from recon_bot.pipedrive import NoteResult, PipedriveError, create_note
from recon_bot.recon.attachments import relay_to_crm, relay_to_slack
from recon_bot.recon.channels import extract_deal_id
from recon_bot.recon.dedupe import get_dedupe_store
from recon_bot.recon.formatter import describe_attachment, format_note
from recon_bot.recon.outcome import OutcomeKind, PipelineOutcome
from recon_bot.slack.lookups import (
    fetch_message,
    get_channel_name,
    get_permalink,
    get_user_display_name,
    slack_error_code,
)
from recon_bot.slack.notifier import add_reaction, notify_outcome

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


async def _best_effort(awaitable: Awaitable[T], fallback: T, what: str) -> T:
    """Await a lookup, returning ``fallback`` instead of raising."""
    try:
        return await awaitable
    except Exception as exc:
        logger.warning("Best-effort %s lookup failed: %s", what, exc)
        return fallback


async def resolve_channel(event: ReactionEvent) -> ChannelContext | PipelineOutcome:
    """Look up the channel name and pull the deal id out of it."""
    try:
        channel_name = await get_channel_name(event.channel_id)
    except SlackApiError as exc:
        code = slack_error_code(exc)
        logger.warning("conversations.info failed for %s: %s", event.channel_id, code)
        return PipelineOutcome(
            kind=OutcomeKind.PERMISSION_ERROR,
            stage="channel",
            detail=code,
            thread_ts=event.message_ts,
        )

    deal_id = extract_deal_id(channel_name)
    if deal_id is None:
        logger.info("Channel #%s has no deal id, asking for a rename", channel_name)
        return PipelineOutcome(
            kind=OutcomeKind.USER_ERROR,
            detail=channel_name,
            thread_ts=event.message_ts,
        )

    return ChannelContext(
        channel_id=event.channel_id, channel_name=channel_name, deal_id=deal_id
    )


async def load_message(event: ReactionEvent) -> SourceMessage | PipelineOutcome:
    """Fetch the reacted message. Silent if it has been deleted."""
    try:
        message = await fetch_message(event.channel_id, event.message_ts)
    except SlackApiError as exc:
        code = slack_error_code(exc)
        logger.warning("conversations.history failed for %s: %s", event.channel_id, code)
        return PipelineOutcome(
            kind=OutcomeKind.PERMISSION_ERROR,
            stage="message",
            detail=code,
            thread_ts=event.message_ts,
        )

    if message is None:
        return PipelineOutcome.ignored("message not found")
    return message


async def submit_note(note: NoteRecord) -> NoteResult | PipelineOutcome:
    """Create the Pipedrive note. Failures are reported, never retried."""
    try:
        return await create_note(note)
    except PipedriveError as exc:
        logger.warning("Pipedrive rejected note for deal %s: %s", note.deal_id, exc.payload)
        detail = f"{exc} {exc.payload}"
    except httpx.HTTPError as exc:
        logger.warning("Pipedrive request failed for deal %s: %r", note.deal_id, exc)
        detail = f"{type(exc).__name__}: {exc}"
    return PipelineOutcome(
        kind=OutcomeKind.TRANSIENT_ERROR, deal_id=note.deal_id, detail=detail
    )


async def process_reaction(
    event: ReactionEvent,
    clock: Callable[[], datetime] = _utcnow,
) -> PipelineOutcome:
    """Run the pipeline for an accepted reaction and report the outcome in-thread.

    The dedupe key is claimed before the first await, so concurrent
    reactions on the same message cannot both submit a note. The key is
    marked as noted the moment Pipedrive confirms the note, before any
    follow-up step can fail.
    """
    store = get_dedupe_store()
    key = event.dedupe_key
    if not store.claim(key):
        logger.info("Message %s in %s already noted, skipping", event.message_ts, event.channel_id)
        return PipelineOutcome.ignored("duplicate")

    try:
        outcome = await _run_stages(event, clock, lambda: store.mark_noted(key))
    finally:
        store.release(key)

    await _best_effort(notify_outcome(event.channel_id, outcome), None, "outcome reply")
    return outcome


async def _run_stages(
    event: ReactionEvent,
    clock: Callable[[], datetime],
    mark_noted: Callable[[], None],
) -> PipelineOutcome:
    settings = get_settings()

    channel = await resolve_channel(event)
    if isinstance(channel, PipelineOutcome):
        return channel

    message = await load_message(event)
    if isinstance(message, PipelineOutcome):
        return message

    thread_ts = message.thread_ts or message.ts

    author_name, reactor_name, permalink = await asyncio.gather(
        _best_effort(
            get_user_display_name(message.user_id), f"User {message.user_id}", "author name"
        ),
        _best_effort(get_user_display_name(event.user_id), f"User {event.user_id}", "reactor name"),
        _best_effort(get_permalink(event.channel_id, message.ts), None, "permalink"),
    )

    content = format_note(
        channel_name=channel.channel_name,
        author_name=author_name,
        reactor_name=reactor_name,
        permalink=permalink,
        raw_text=message.text,
        attachment_descriptions=[describe_attachment(a) for a in message.files],
        noted_at=clock(),
        message_ts=message.ts,
    )

    result = await submit_note(NoteRecord(deal_id=channel.deal_id, content=content))
    if isinstance(result, PipelineOutcome):
        return result.model_copy(update={"thread_ts": thread_ts})

    mark_noted()
    logger.info(
        "Noted message %s from #%s on deal %s (note %s)",
        message.ts,
        channel.channel_name,
        channel.deal_id,
        result.note_id,
    )

    # Everything below runs only once per noted message and never fails the run
    uploaded: int | None = None
    if message.files and settings.upload_attachments_to_crm:
        uploaded = await _best_effort(
            relay_to_crm(channel.deal_id, message.files), 0, "attachment upload"
        )
    if message.files and settings.reupload_attachments_to_slack:
        target_ts = thread_ts if settings.reupload_in_thread else None
        await _best_effort(
            relay_to_slack(event.channel_id, target_ts, message.files), 0, "attachment re-upload"
        )

    if settings.note_confirm_reaction:
        await _best_effort(
            add_reaction(event.channel_id, message.ts, settings.note_confirm_reaction),
            None,
            "confirm reaction",
        )

    return PipelineOutcome(
        kind=OutcomeKind.NOTED,
        deal_id=channel.deal_id,
        thread_ts=thread_ts,
        attachments_uploaded=uploaded,
        attachments_total=len(message.files) if uploaded is not None else None,
    )


async def handle_reaction(event: ReactionEvent) -> PipelineOutcome:
    """Background-task entry point. Never raises."""
    try:
        return await process_reaction(event)
    except Exception as exc:
        logger.error(
            "Reaction pipeline failed for %s/%s: %s",
            event.channel_id,
            event.message_ts,
            exc,
            exc_info=True,
        )
        return PipelineOutcome(kind=OutcomeKind.INTERNAL_ERROR, detail=str(exc))
