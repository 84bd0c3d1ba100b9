"""File uploads attached to deals."""

import asyncio
from pathlib import Path

from recon_bot.pipedrive.client import get_pipedrive_client, parse_response
from recon_bot.pipedrive.models import FileResult


async def upload_deal_file(
    deal_id: str, path: Path, filename: str, mimetype: str | None = None
) -> FileResult:
    """Upload a local file to Pipedrive and associate it with the deal."""
    content = await asyncio.to_thread(path.read_bytes)
    client = get_pipedrive_client()
    response = await client.post(
        "/files",
        data={"deal_id": deal_id},
        files={"file": (filename, content, mimetype or "application/octet-stream")},
    )
    data = parse_response(response, "File upload")
    return FileResult(file_id=data.get("id"), name=filename)
