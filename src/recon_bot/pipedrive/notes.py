"""Deal note creation."""

import logging

from recon_bot.models.note import NoteRecord
from recon_bot.pipedrive.client import get_pipedrive_client, parse_response
from recon_bot.pipedrive.models import NoteResult

logger = logging.getLogger(__name__)


async def create_note(note: NoteRecord) -> NoteResult:
    """Create a note on the deal.

    Raises PipedriveError when Pipedrive reports failure and lets
    httpx.HTTPError propagate on network errors. No retries.
    """
    client = get_pipedrive_client()
    response = await client.post(
        "/notes",
        json={"deal_id": int(note.deal_id), "content": note.content},
    )
    data = parse_response(response, "Note creation")
    logger.info("Created Pipedrive note %s on deal %s", data.get("id"), note.deal_id)
    return NoteResult(note_id=data.get("id"), deal_id=note.deal_id)
