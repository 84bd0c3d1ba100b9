"""Pipedrive output: deal notes, files, and custom-field writeback."""

from recon_bot.pipedrive.client import (
    PipedriveError,
    get_pipedrive_client,
    parse_response,
    reset_client,
)
from recon_bot.pipedrive.deals import get_deal, update_deal
from recon_bot.pipedrive.files import upload_deal_file
from recon_bot.pipedrive.models import FileResult, NoteResult
from recon_bot.pipedrive.notes import create_note

__all__ = [
    "create_note",
    "FileResult",
    "get_deal",
    "get_pipedrive_client",
    "NoteResult",
    "parse_response",
    "PipedriveError",
    "reset_client",
    "update_deal",
    "upload_deal_file",
]
