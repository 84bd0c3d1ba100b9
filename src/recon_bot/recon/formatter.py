"""Render the canonical Pipedrive note text for an approved Slack message.

Pure functions only: the caller passes the note time explicitly so the same
inputs always produce the same output.
"""

import re
from datetime import datetime, timezone

from recon_bot.models.slack import Attachment

NO_TEXT_PLACEHOLDER = "(no text)"

_TRAILING_SPACE_RE = re.compile(r"[^\S\n]+\n")
_BLANK_RUN_RE = re.compile(r"\n{3,}")
_TIME_FORMAT = "%Y-%m-%d %H:%M UTC"


def clean_text(raw: str | None) -> str:
    """Normalize Slack message text for the note body.

    Decodes &amp; &lt; &gt;, strips trailing whitespace before newlines,
    collapses 3+ newlines to a single blank line, and trims the ends.
    Returns the "(no text)" placeholder when nothing remains.
    """
    if not raw:
        return NO_TEXT_PLACEHOLDER
    # &amp; last so "&amp;lt;" decodes to "&lt;" rather than "<"
    text = raw.replace("&lt;", "<").replace("&gt;", ">").replace("&amp;", "&")
    text = _TRAILING_SPACE_RE.sub("\n", text)
    text = _BLANK_RUN_RE.sub("\n\n", text)
    text = text.strip()
    return text or NO_TEXT_PLACEHOLDER


def describe_attachment(attachment: Attachment) -> str:
    """Render an attachment as "<name> (<type>)"."""
    return f"{attachment.name} ({attachment.filetype or 'file'})"


def ts_to_datetime(ts: str | None) -> datetime | None:
    """Convert a Slack ts ("1700000000.123456") to an aware UTC datetime."""
    if not ts:
        return None
    try:
        return datetime.fromtimestamp(float(ts), tz=timezone.utc)
    except (TypeError, ValueError, OverflowError):
        return None


def format_note(
    *,
    channel_name: str,
    author_name: str,
    reactor_name: str,
    permalink: str | None,
    raw_text: str | None,
    attachment_descriptions: list[str],
    noted_at: datetime,
    message_ts: str | None = None,
) -> str:
    """Build the note body.

    Layout:
        header lines (channel, author, approver, times)
        blank line
        cleaned message text
        Attachments block (only when there are attachments)
        Slack link line (only when a permalink is known)
    """
    lines = [
        "✅ Approval captured in Slack",
        f"Channel: #{channel_name}",
        f"Message from: {author_name}",
        f"Approved by: {reactor_name}",
    ]

    message_time = ts_to_datetime(message_ts)
    if message_time is not None:
        lines.append(f"Message time: {message_time.strftime(_TIME_FORMAT)}")
    lines.append(f"Noted at: {noted_at.astimezone(timezone.utc).strftime(_TIME_FORMAT)}")

    lines.append("")
    lines.append(clean_text(raw_text))

    if attachment_descriptions:
        lines.append("")
        lines.append("Attachments:")
        lines.extend(f"• {description}" for description in attachment_descriptions)

    if permalink:
        lines.append("")
        lines.append(f"Slack link: {permalink}")

    return "\n".join(lines)
