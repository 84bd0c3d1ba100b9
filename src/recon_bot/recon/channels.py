"""Recon channel classification and deal id extraction from channel names."""

import re

from recon_bot.config import get_settings

# First "deal" followed by digits, e.g., rcn-smith-deal603 -> "603"
DEAL_ID_PATTERN = re.compile(r"deal(\d+)", re.IGNORECASE)

DEAL_NAME_GUIDANCE = (
    "Recon channel name must include `deal###` (example: `rcn-smith-deal603`)."
)


def is_recon_channel(name: str | None, pattern: str | None = None) -> bool:
    """Return True if the channel name matches the recon pattern (case-insensitive).

    The pattern defaults to the recon_channel_pattern setting and is treated
    as a regular expression searched anywhere in the name.
    """
    if not name:
        return False
    if pattern is None:
        pattern = get_settings().recon_channel_pattern
    return re.search(pattern, name, re.IGNORECASE) is not None


def extract_deal_id(name: str | None) -> str | None:
    """Return the digit run after the first "deal" in the name, or None. Pure function."""
    if not name:
        return None
    match = DEAL_ID_PATTERN.search(name)
    return match.group(1) if match else None
