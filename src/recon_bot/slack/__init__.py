"""Slack ingress and egress: webhook handling, signature verification, lookups, and notifications.

The router lives in ``recon_bot.slack.router`` and is imported by the app directly.
"""

from recon_bot.slack.client import get_bot_user_id, get_slack_client, reset_client
from recon_bot.slack.notifier import (
    add_reaction,
    notify_outcome,
    post_ephemeral,
    post_message,
    reply_in_thread,
)

__all__ = [
    "add_reaction",
    "get_bot_user_id",
    "get_slack_client",
    "notify_outcome",
    "post_ephemeral",
    "post_message",
    "reply_in_thread",
    "reset_client",
]
