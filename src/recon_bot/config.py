"""Application configuration via pydantic-settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Slack
    slack_bot_token: str = ""
    slack_signing_secret: str = ""

    # Pipedrive
    pipedrive_api_token: str = ""
    pipedrive_base_url: str = "https://api.pipedrive.com/v1"
    pd_project_manager_field_key: str = "98c305112b26675e9b22748fae8cb7a274e4d8e7"
    pd_slack_url_field_key: str = "0cc683d3e270d0676aa9d00e38f6a96179de7fc2"

    # Outbound HTTP (Slack + Pipedrive + file downloads)
    http_timeout_seconds: float = 20.0

    # Reaction -> note
    reaction_notes_enabled: bool = True
    note_reactions: str = "white_check_mark,heavy_check_mark,ballot_box_with_check"
    note_confirm_reaction: str = "memo"
    note_dedupe_window_seconds: int = 300
    note_dedupe_max_entries: int = 10_000

    # Attachments
    upload_attachments_to_crm: bool = False
    reupload_attachments_to_slack: bool = False
    reupload_target: str = "thread"  # "thread" or "channel"

    # Recon channels
    recon_channel_pattern: str = "rcn"
    recon_always_invite: str = ""  # comma-separated Slack user IDs
    recon_pm_slack_map: dict[int, str] = {}  # PM enum option id -> Slack user ID

    # App
    environment: str = "development"
    log_level: str = "INFO"
    port: int = 8080

    @property
    def note_reaction_names(self) -> set[str]:
        """Accepted reaction names, without colons."""
        return {name.strip(":") for name in _split_csv(self.note_reactions)}

    @property
    def always_invite_user_ids(self) -> list[str]:
        return _split_csv(self.recon_always_invite)

    @property
    def reupload_in_thread(self) -> bool:
        return self.reupload_target.strip().lower() != "channel"


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings. Lazy initialization to avoid import-time errors."""
    return Settings()
