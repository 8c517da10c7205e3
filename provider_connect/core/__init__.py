"""Core building blocks shared across provider-connect."""

from provider_connect import __version__


__all__ = ["__version__"]
