"""Core: config and application bootstrap."""

from coursestore.core.config import Settings, get_settings

__all__ = ["Settings", "get_settings"]
