"""Recon workflows: channel classification, note formatting, dedupe, and the event pipelines."""
