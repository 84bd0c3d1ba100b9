"""Tests for deal file uploads."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from recon_bot.pipedrive.client import PipedriveError
from recon_bot.pipedrive.files import upload_deal_file


@patch("recon_bot.pipedrive.files.get_pipedrive_client")
async def test_upload_sends_multipart_with_deal_id(mock_get_client, tmp_path):
    path = tmp_path / "recon-abc.pdf"
    path.write_bytes(b"%PDF-1.4 test")
    client = MagicMock()
    client.post = AsyncMock(
        return_value=httpx.Response(201, json={"success": True, "data": {"id": 77}})
    )
    mock_get_client.return_value = client

    result = await upload_deal_file("603", path, "scope.pdf", "application/pdf")

    client.post.assert_awaited_once_with(
        "/files",
        data={"deal_id": "603"},
        files={"file": ("scope.pdf", b"%PDF-1.4 test", "application/pdf")},
    )
    assert result.file_id == 77
    assert result.name == "scope.pdf"


@patch("recon_bot.pipedrive.files.get_pipedrive_client")
async def test_upload_defaults_mimetype(mock_get_client, tmp_path):
    path = tmp_path / "blob"
    path.write_bytes(b"data")
    client = MagicMock()
    client.post = AsyncMock(
        return_value=httpx.Response(201, json={"success": True, "data": {"id": 1}})
    )
    mock_get_client.return_value = client

    await upload_deal_file("603", path, "blob")

    sent = client.post.call_args.kwargs["files"]["file"]
    assert sent[2] == "application/octet-stream"


@patch("recon_bot.pipedrive.files.get_pipedrive_client")
async def test_upload_failure_raises(mock_get_client, tmp_path):
    path = tmp_path / "x.txt"
    path.write_bytes(b"x")
    client = MagicMock()
    client.post = AsyncMock(
        return_value=httpx.Response(413, json={"success": False, "error": "too large"})
    )
    mock_get_client.return_value = client

    with pytest.raises(PipedriveError):
        await upload_deal_file("603", path, "x.txt")
