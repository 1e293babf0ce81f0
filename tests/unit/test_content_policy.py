"""Unit tests for content-type and cache-control selection."""

import pytest

from coursestore.application.services.content_policy import (
    DEFAULT_CONTENT_TYPE,
    HTML_CACHE_CONTROL,
    IMMUTABLE_CACHE_CONTROL,
    cache_control_for,
    content_type_of,
)


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("index.html", "text/html"),
        ("INDEX.HTML", "text/html"),
        ("shared/style.css", "text/css"),
        ("scripts/app.js", "application/javascript"),
        ("imsmanifest.xml", "application/xml"),
        ("media/intro.MP4", "video/mp4"),
        ("photo.jpeg", "image/jpeg"),
    ],
)
def test_known_extensions(name: str, expected: str) -> None:
    assert content_type_of(name) == expected


def test_unknown_or_missing_extension_is_octet_stream() -> None:
    assert content_type_of("a.b.unknownext") == DEFAULT_CONTENT_TYPE
    assert content_type_of("README") == DEFAULT_CONTENT_TYPE
    assert content_type_of("dir.v2/LICENSE") == DEFAULT_CONTENT_TYPE


def test_html_gets_short_cache() -> None:
    assert cache_control_for("text/html") == HTML_CACHE_CONTROL


def test_everything_else_is_immutable() -> None:
    assert cache_control_for("image/png") == IMMUTABLE_CACHE_CONTROL
    assert cache_control_for(DEFAULT_CONTENT_TYPE) == IMMUTABLE_CACHE_CONTROL
