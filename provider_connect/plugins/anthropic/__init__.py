"""Anthropic provider plugin."""
