"""CRM note model."""

from pydantic import BaseModel


class NoteRecord(BaseModel):
    """A note destined for a Pipedrive deal. Built once, submitted once."""

    deal_id: str
    content: str
