"""Slack event and message models with extracted fields."""

from pydantic import BaseModel


class ReactionEvent(BaseModel):
    """A reaction_added event reduced to the fields the note pipeline needs."""

    channel_id: str
    message_ts: str  # ts of the reacted-to message, e.g., "1234567890.123456"
    user_id: str  # who added the reaction
    reaction: str  # emoji name without colons

    @property
    def dedupe_key(self) -> tuple[str, str]:
        return (self.channel_id, self.message_ts)


class MemberJoinedEvent(BaseModel):
    """A member_joined_channel event."""

    channel_id: str
    user_id: str


class ChannelContext(BaseModel):
    """Channel name plus the deal id embedded in it (if any). Resolved per event."""

    channel_id: str
    channel_name: str
    deal_id: str | None = None


class Attachment(BaseModel):
    """A file shared on a Slack message."""

    id: str | None = None
    name: str
    filetype: str | None = None
    mimetype: str | None = None
    url_private_download: str | None = None

    @classmethod
    def from_slack(cls, file: dict) -> "Attachment":
        """Build from a Slack file object, tolerating missing fields."""
        return cls(
            id=file.get("id"),
            name=file.get("name") or file.get("title") or "file",
            filetype=file.get("filetype") or file.get("pretty_type"),
            mimetype=file.get("mimetype"),
            url_private_download=file.get("url_private_download") or file.get("url_private"),
        )


class SourceMessage(BaseModel):
    """The message a reaction was added to. Immutable once read."""

    user_id: str | None = None
    text: str = ""
    ts: str
    thread_ts: str | None = None
    files: list[Attachment] = []

    @classmethod
    def from_slack(cls, message: dict) -> "SourceMessage":
        return cls(
            user_id=message.get("user"),
            text=message.get("text") or "",
            ts=message["ts"],
            thread_ts=message.get("thread_ts"),
            files=[Attachment.from_slack(f) for f in message.get("files") or []],
        )
