"""Slack request signature verification as FastAPI dependencies."""

from urllib.parse import parse_qsl

from fastapi import HTTPException, Request
from slack_sdk.signature import SignatureVerifier

from recon_bot.config import get_settings


async def _verified_body(request: Request) -> str:
    """Read the raw body and check its Slack signature.

    Reads the raw body FIRST (before any parsing) to ensure the
    signature verification uses the exact bytes Slack signed.

    Raises HTTPException(403) if the signature is invalid.
    """
    settings = get_settings()
    body = (await request.body()).decode("utf-8")

    timestamp = request.headers.get("X-Slack-Request-Timestamp", "")
    signature = request.headers.get("X-Slack-Signature", "")

    verifier = SignatureVerifier(signing_secret=settings.slack_signing_secret)

    if not timestamp or not signature or not verifier.is_valid(body=body, timestamp=timestamp, signature=signature):
        raise HTTPException(status_code=403, detail="Invalid Slack signature")

    return body


async def verify_slack_request(request: Request) -> dict:
    """Verify an Events API request and return its parsed JSON payload."""
    await _verified_body(request)
    return await request.json()


async def verify_slack_command(request: Request) -> dict:
    """Verify a slash command request and return its form fields."""
    body = await _verified_body(request)
    return dict(parse_qsl(body, keep_blank_values=True))
