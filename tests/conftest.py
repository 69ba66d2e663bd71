"""Shared test fixtures for feedcache.

Provides builders for RSS documents and cache files, an isolated XDG
environment, and output-state resets. These fixtures are discovered by
pytest and available to all test modules without explicit imports.
"""

from __future__ import annotations

import json
import logging
from email.utils import formatdate
from pathlib import Path
from typing import Callable, Sequence
from xml.sax.saxutils import escape

import pytest

from feedcache.models import Post
from feedcache.output import OutputFormat, OutputManager, reset_output, set_output


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time. When CliRunner redirects those streams and the test
    finishes, the cached references become stale. The CLI also sets the
    level and handlers of the ``feedcache`` logger, which are restored here.
    """
    yield
    reset_output()
    logger = logging.getLogger("feedcache")
    logger.setLevel(logging.NOTSET)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)


# ---------------------------------------------------------------------------
# Post fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def sample_posts() -> list[Post]:
    """Five posts in reverse-chronological order, as a feed delivers them."""
    return [
        Post(
            content=f"post number {n}",
            timestamp=1_700_000_000 - n * 3600,
            permalink=f"https://twitter.com/alice/status/{1000 - n}",
        )
        for n in range(5)
    ]


# ---------------------------------------------------------------------------
# RSS documents
# ---------------------------------------------------------------------------


@pytest.fixture
def rss_document() -> Callable[[Sequence[tuple[str, int, str]]], bytes]:
    """Return a builder producing an RSS 2.0 document.

    The builder takes ``(title, timestamp, guid)`` tuples and returns the
    encoded document with one ``<item>`` per tuple, in the given order.
    """

    def _build(items: Sequence[tuple[str, int, str]]) -> bytes:
        parts = []
        for title, timestamp, guid in items:
            parts.append(
                "<item>"
                f"<title>{escape(title)}</title>"
                f"<description>{escape(title)}</description>"
                f"<pubDate>{formatdate(timestamp, usegmt=True)}</pubDate>"
                f"<guid>{escape(guid)}</guid>"
                f"<link>{escape(guid)}</link>"
                "</item>"
            )
        return (
            '<?xml version="1.0" encoding="UTF-8"?>'
            '<rss version="2.0"><channel>'
            "<title>Twitter / alice</title>"
            "<link>https://twitter.com/alice</link>"
            "<description>Twitter updates from alice</description>"
            + "".join(parts)
            + "</channel></rss>"
        ).encode("utf-8")

    return _build


# ---------------------------------------------------------------------------
# Cache files
# ---------------------------------------------------------------------------


@pytest.fixture
def write_cache_file() -> Callable[[Path, Sequence[Post]], Path]:
    """Return a helper writing *posts* to *path* in the cache format."""

    def _write(path: Path, posts: Sequence[Post]) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        document = {
            "format": "feedcache/1",
            "account": "alice",
            "saved_at": 1_700_000_000,
            "posts": [p.model_dump() for p in posts],
        }
        path.write_text(json.dumps(document), encoding="utf-8")
        return path

    return _write


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate XDG directories to a temporary directory.

    Sets XDG_CACHE_HOME and XDG_DATA_HOME to subdirectories of tmp_path so
    that tests never touch the real user cache, and changes the working
    directory to tmp_path.
    """
    monkeypatch.setattr("feedcache.config._is_xdg_platform", lambda: True)
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.chdir(tmp_path)
    return tmp_path


# ---------------------------------------------------------------------------
# Output fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def quiet_output() -> OutputManager:
    """Install a quiet PLAIN output manager for the duration of a test."""
    output = OutputManager(format=OutputFormat.PLAIN, quiet=True)
    set_output(output)
    yield output
    reset_output()


@pytest.fixture
def cli_runner():
    """Typer CLI test runner."""
    from typer.testing import CliRunner

    return CliRunner()
