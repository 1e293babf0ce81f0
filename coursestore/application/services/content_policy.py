"""Content-type and cache-control policy for course assets."""

from __future__ import annotations

import posixpath

DEFAULT_CONTENT_TYPE = "application/octet-stream"
PACKAGE_CONTENT_TYPE = "application/zip"

IMMUTABLE_CACHE_CONTROL = "public, max-age=31536000, immutable"
HTML_CACHE_CONTROL = "public, max-age=3600"

CONTENT_TYPES: dict[str, str] = {
    ".html": "text/html",
    ".htm": "text/html",
    ".css": "text/css",
    ".js": "application/javascript",
    ".json": "application/json",
    ".xml": "application/xml",
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".gif": "image/gif",
    ".svg": "image/svg+xml",
    ".webp": "image/webp",
    ".mp4": "video/mp4",
    ".webm": "video/webm",
    ".mp3": "audio/mpeg",
    ".wav": "audio/wav",
    ".ogg": "audio/ogg",
    ".pdf": "application/pdf",
    ".zip": "application/zip",
    ".txt": "text/plain",
}

_HTML_TYPES = frozenset({"text/html"})


def content_type_of(file_name: str) -> str:
    """Return the MIME type for file_name's extension (case-insensitive)."""
    _, ext = posixpath.splitext(file_name)
    return CONTENT_TYPES.get(ext.lower(), DEFAULT_CONTENT_TYPE)


def cache_control_for(content_type: str) -> str:
    """HTML is cached for one hour; everything else is immutable for a year."""
    if content_type in _HTML_TYPES:
        return HTML_CACHE_CONTROL
    return IMMUTABLE_CACHE_CONTROL
