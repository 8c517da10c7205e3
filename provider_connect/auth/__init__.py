"""Credential models, storage and OAuth round-trip state."""
