"""Recon Bot: Slack deal-approval reactions captured as Pipedrive notes."""
