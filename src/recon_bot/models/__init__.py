"""Data models for the Recon Bot pipelines."""

from recon_bot.models.note import NoteRecord
from recon_bot.models.slack import (
    Attachment,
    ChannelContext,
    MemberJoinedEvent,
    ReactionEvent,
    SourceMessage,
)

__all__ = [
    "Attachment",
    "ChannelContext",
    "MemberJoinedEvent",
    "NoteRecord",
    "ReactionEvent",
    "SourceMessage",
]
