"""Course asset storage with CDN integration."""

__version__ = "1.0.0"
