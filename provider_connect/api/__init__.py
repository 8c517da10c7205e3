"""HTTP surface: OAuth callback, RPC dispatch and health routes."""

from .app import create_app


__all__ = ["create_app"]
