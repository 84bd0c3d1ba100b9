"""Result types for Pipedrive operations."""

from pydantic import BaseModel


class NoteResult(BaseModel):
    """Returned after a note is created on a deal."""

    note_id: int | None = None
    deal_id: str


class FileResult(BaseModel):
    """Returned after a file is attached to a deal."""

    file_id: int | None = None
    name: str
