"""Tests for settings parsing from the environment."""

from recon_bot.config import Settings


def test_defaults(monkeypatch):
    """Defaults: feature on, three checkmark reactions, 5-minute window."""
    monkeypatch.delenv("NOTE_REACTIONS", raising=False)
    settings = Settings(_env_file=None)
    assert settings.reaction_notes_enabled is True
    assert settings.note_reaction_names == {
        "white_check_mark",
        "heavy_check_mark",
        "ballot_box_with_check",
    }
    assert settings.note_dedupe_window_seconds == 300
    assert settings.recon_channel_pattern == "rcn"
    assert settings.upload_attachments_to_crm is False
    assert settings.reupload_attachments_to_slack is False


def test_env_overrides(monkeypatch):
    """Every toggle is overridable through environment variables."""
    monkeypatch.setenv("REACTION_NOTES_ENABLED", "false")
    monkeypatch.setenv("NOTE_REACTIONS", ":thumbsup:, ok_hand")
    monkeypatch.setenv("NOTE_DEDUPE_WINDOW_SECONDS", "60")
    monkeypatch.setenv("UPLOAD_ATTACHMENTS_TO_CRM", "true")
    monkeypatch.setenv("REUPLOAD_ATTACHMENTS_TO_SLACK", "1")
    monkeypatch.setenv("REUPLOAD_TARGET", "channel")
    monkeypatch.setenv("RECON_CHANNEL_PATTERN", "^recon-")
    settings = Settings(_env_file=None)
    assert settings.reaction_notes_enabled is False
    assert settings.note_reaction_names == {"thumbsup", "ok_hand"}
    assert settings.note_dedupe_window_seconds == 60
    assert settings.upload_attachments_to_crm is True
    assert settings.reupload_attachments_to_slack is True
    assert settings.reupload_in_thread is False
    assert settings.recon_channel_pattern == "^recon-"


def test_invite_list_and_pm_map(monkeypatch):
    """Comma-separated invite list and JSON PM map are parsed."""
    monkeypatch.setenv("RECON_ALWAYS_INVITE", "U1, U2,,U3")
    monkeypatch.setenv("RECON_PM_SLACK_MAP", '{"62": "U_RYAN", "63": "U_MIKE"}')
    settings = Settings(_env_file=None)
    assert settings.always_invite_user_ids == ["U1", "U2", "U3"]
    assert settings.recon_pm_slack_map == {62: "U_RYAN", 63: "U_MIKE"}
