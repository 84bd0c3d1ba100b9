"""FastAPI application with lifespan and Slack routes."""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from recon_bot.config import get_settings
from recon_bot.logging_config import configure_logging
from recon_bot.slack.router import router as slack_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: configure logging and load config on startup."""
    settings = get_settings()
    configure_logging(settings.log_level)
    app.state.settings = settings
    yield


app = FastAPI(
    title="Recon Bot",
    lifespan=lifespan,
)
app.include_router(slack_router)
