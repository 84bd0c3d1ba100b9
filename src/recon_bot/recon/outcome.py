"""Explicit outcome type threaded through the reaction pipeline stages."""

from enum import Enum

from pydantic import BaseModel


class OutcomeKind(str, Enum):
    """How a pipeline run ended."""

    NOTED = "noted"
    IGNORED = "ignored"  # filtered, deduped, or message gone; no reply
    USER_ERROR = "user_error"  # channel name has no deal###
    PERMISSION_ERROR = "permission_error"  # Slack rejected a lookup
    TRANSIENT_ERROR = "transient_error"  # Pipedrive network error or success: false
    INTERNAL_ERROR = "internal_error"  # unexpected exception; logged only


class PipelineOutcome(BaseModel):
    """Terminal result of one pipeline run."""

    kind: OutcomeKind
    detail: str | None = None
    deal_id: str | None = None
    stage: str | None = None  # "channel" or "message" for PERMISSION_ERROR
    thread_ts: str | None = None  # where to reply, when a reply is due
    attachments_uploaded: int | None = None
    attachments_total: int | None = None

    @classmethod
    def ignored(cls, detail: str) -> "PipelineOutcome":
        return cls(kind=OutcomeKind.IGNORED, detail=detail)
