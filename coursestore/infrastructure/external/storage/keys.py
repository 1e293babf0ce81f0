"""Storage key helpers."""


def sanitize_key(key: str) -> str:
    """Return key with every ".." removed and leading slashes stripped.

    Applied before any filesystem call. Idempotent: removing ".." cannot
    create a new ".." pair, and the result never starts with "/".
    """
    cleaned = key
    while ".." in cleaned:
        cleaned = cleaned.replace("..", "")
    return cleaned.lstrip("/")


def join_key(*parts: str) -> str:
    """Join key segments with single slashes, ignoring empty segments."""
    return "/".join(p.strip("/") for p in parts if p and p.strip("/"))
