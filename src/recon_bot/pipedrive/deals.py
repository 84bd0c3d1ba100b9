"""Deal lookups and custom-field writeback."""

from recon_bot.pipedrive.client import get_pipedrive_client, parse_response


async def get_deal(deal_id: str) -> dict:
    """Fetch a deal with custom fields keyed by their field key."""
    client = get_pipedrive_client()
    response = await client.get(f"/deals/{deal_id}", params={"return_field_key": 1})
    return parse_response(response, "Deal fetch")


async def update_deal(deal_id: str, fields: dict) -> dict:
    """Update deal fields (e.g., a custom field key -> value mapping)."""
    client = get_pipedrive_client()
    response = await client.put(f"/deals/{deal_id}", json=fields)
    return parse_response(response, "Deal update")
