"""Shared utilities: datetime helpers."""

from coursestore.shared.utils.datetime import utc_now, utc_timestamp_iso

__all__ = ["utc_now", "utc_timestamp_iso"]
