"""Relay Slack-hosted attachments to Pipedrive and back into Slack.

Each file is downloaded from its private URL (bot token auth) into a uniquely
named temp file that is always removed afterwards. Both relays are partial-
failure tolerant: one bad file is logged and skipped, never aborting the rest.
"""

import asyncio
import logging
import os
import tempfile
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager, suppress
from pathlib import Path

import httpx
from slack_sdk.errors import SlackApiError

from recon_bot.config import get_settings
from recon_bot.models.slack import Attachment
from recon_bot.pipedrive import PipedriveError, upload_deal_file
from recon_bot.slack.client import get_slack_client
from recon_bot.slack.lookups import slack_error_code

logger = logging.getLogger(__name__)

# Per-file failures that are logged and skipped
_RELAY_ERRORS = (httpx.HTTPError, PipedriveError, SlackApiError, OSError)


async def download_attachment(attachment: Attachment, dest: Path) -> None:
    """Stream the attachment's private download URL into ``dest``."""
    if not attachment.url_private_download:
        raise ValueError(f"Attachment {attachment.name!r} has no download URL")

    settings = get_settings()
    async with httpx.AsyncClient(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=True,
        headers={"Authorization": f"Bearer {settings.slack_bot_token}"},
    ) as client:
        async with client.stream("GET", attachment.url_private_download) as response:
            response.raise_for_status()
            with dest.open("wb") as fh:
                async for chunk in response.aiter_bytes():
                    fh.write(chunk)


@asynccontextmanager
async def downloaded_file(attachment: Attachment) -> AsyncIterator[Path]:
    """Download to a unique temp file, yield its path, then remove it.

    Removal is best-effort; an OSError during cleanup is swallowed.
    """
    suffix = Path(attachment.name).suffix
    fd, name = tempfile.mkstemp(prefix="recon-", suffix=suffix)
    os.close(fd)
    path = Path(name)
    try:
        await download_attachment(attachment, path)
        yield path
    finally:
        with suppress(OSError):
            await asyncio.to_thread(path.unlink, missing_ok=True)


async def relay_to_crm(deal_id: str, attachments: list[Attachment]) -> int:
    """Upload each attachment to the deal in Pipedrive. Returns how many succeeded."""
    uploaded = 0
    for attachment in attachments:
        try:
            async with downloaded_file(attachment) as path:
                await upload_deal_file(deal_id, path, attachment.name, attachment.mimetype)
            uploaded += 1
        except (*_RELAY_ERRORS, ValueError) as exc:
            logger.warning(
                "Attachment %s not uploaded to deal %s: %s", attachment.name, deal_id, exc
            )
    return uploaded


async def relay_to_slack(
    channel_id: str, thread_ts: str | None, attachments: list[Attachment]
) -> int:
    """Re-upload each attachment as a file in the channel (or thread). Returns successes."""
    client = await get_slack_client()
    uploaded = 0
    for attachment in attachments:
        try:
            async with downloaded_file(attachment) as path:
                kwargs: dict = {
                    "channel": channel_id,
                    "file": str(path),
                    "filename": attachment.name,
                    "title": attachment.name,
                }
                if thread_ts:
                    kwargs["thread_ts"] = thread_ts
                await client.files_upload_v2(**kwargs)
            uploaded += 1
        except SlackApiError as exc:
            logger.warning(
                "Attachment %s not re-uploaded to %s: %s",
                attachment.name,
                channel_id,
                slack_error_code(exc),
            )
        except (*_RELAY_ERRORS, ValueError) as exc:
            logger.warning("Attachment %s not re-uploaded to %s: %s", attachment.name, channel_id, exc)
    return uploaded
