"""Slack webhook router with signature verification."""

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from fastapi.responses import JSONResponse

from recon_bot.slack.handlers import handle_slack_event, handle_slash_command
from recon_bot.slack.verification import verify_slack_command, verify_slack_request

router = APIRouter(prefix="", tags=["slack"])


@router.post("/slack/events")
async def slack_events(
    request: Request,
    background_tasks: BackgroundTasks,
    payload: dict = Depends(verify_slack_request),
) -> JSONResponse:
    """Receive Slack webhook events.

    Slack retries (X-Slack-Retry-Num header) are acknowledged immediately
    to prevent duplicate processing.
    """
    # Dedup: if Slack is retrying, acknowledge immediately
    if request.headers.get("X-Slack-Retry-Num"):
        return JSONResponse({"ok": True})

    return handle_slack_event(payload, background_tasks)


@router.post("/slack/commands")
async def slack_commands(
    background_tasks: BackgroundTasks,
    form: dict = Depends(verify_slack_command),
) -> JSONResponse:
    """Receive slash commands (form-encoded)."""
    return handle_slash_command(form, background_tasks)
