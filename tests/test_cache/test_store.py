"""Tests for the CacheStore module."""

from __future__ import annotations

import json
import os
import stat
import sys
import time
from pathlib import Path

import pytest

from feedcache.cache import CacheStore, decode_posts, encode_posts
from feedcache.exceptions import CacheCorruptError, CacheUnavailableError, CacheWriteError
from feedcache.models import Post


@pytest.fixture()
def store(tmp_path: Path) -> CacheStore:
    """A CacheStore pointing at a not-yet-existing file in tmp_path."""
    return CacheStore(tmp_path / "alice.json")


# ------------------------------------------------------------------ #
# Round trip
# ------------------------------------------------------------------ #


class TestRoundTrip:
    def test_write_then_read_preserves_posts(self, store: CacheStore, sample_posts) -> None:
        """Posts come back field-for-field and in order."""
        store.write(sample_posts, account="alice")
        assert store.read() == sample_posts

    def test_write_overwrites_previous_contents(self, store: CacheStore, sample_posts) -> None:
        store.write(sample_posts)
        store.write(sample_posts[:2])
        assert store.read() == sample_posts[:2]

    def test_write_creates_parent_directories(self, tmp_path: Path, sample_posts) -> None:
        nested = CacheStore(tmp_path / "a" / "b" / "alice.json")
        nested.write(sample_posts)
        assert nested.exists()

    def test_no_temp_files_left_behind(self, store: CacheStore, sample_posts) -> None:
        store.write(sample_posts)
        leftovers = [p for p in store.path.parent.iterdir() if p.name.endswith(".tmp")]
        assert leftovers == []

    def test_unicode_content_survives(self, store: CacheStore) -> None:
        posts = [Post(content="café ☃ \U0001F600", timestamp=1, permalink="https://x/1")]
        store.write(posts)
        assert store.read() == posts

    def test_document_layout(self, store: CacheStore, sample_posts) -> None:
        """The on-disk document carries the format marker and account."""
        store.write(sample_posts, account="alice")
        document = json.loads(store.path.read_text(encoding="utf-8"))
        assert document["format"] == "feedcache/1"
        assert document["account"] == "alice"
        assert document["posts"][0] == {
            "content": "post number 0",
            "timestamp": 1_700_000_000,
            "permalink": "https://twitter.com/alice/status/1000",
        }


# ------------------------------------------------------------------ #
# Decoding failures
# ------------------------------------------------------------------ #


class TestDecode:
    def test_encode_decode_are_inverse(self, sample_posts) -> None:
        assert decode_posts(encode_posts(sample_posts)) == sample_posts

    @pytest.mark.parametrize(
        "text",
        [
            "not json at all",
            "a:2:{i:0;s:3:\"php\";}",
            "[]",
            '{"posts": []}',
            '{"format": "other/9", "posts": []}',
            '{"format": "feedcache/1"}',
            '{"format": "feedcache/1", "posts": {"a": 1}}',
            '{"format": "feedcache/1", "posts": [{"content": "x"}]}',
            '{"format": "feedcache/1", "posts": [{"content": "x", "timestamp": "soon", "permalink": "p"}]}',
        ],
    )
    def test_corrupt_documents_raise(self, text: str) -> None:
        with pytest.raises(CacheCorruptError):
            decode_posts(text)

    def test_read_corrupt_file(self, store: CacheStore) -> None:
        store.path.write_text("{truncated", encoding="utf-8")
        with pytest.raises(CacheCorruptError):
            store.read()

    def test_read_non_utf8_file(self, store: CacheStore) -> None:
        store.path.write_bytes(b"\xff\xfe\x00garbage")
        with pytest.raises(CacheCorruptError):
            store.read()

    def test_read_tolerates_surrounding_whitespace(self, store: CacheStore, sample_posts) -> None:
        store.path.write_text("\n\n" + encode_posts(sample_posts) + "\n  ", encoding="utf-8")
        assert store.read() == sample_posts


# ------------------------------------------------------------------ #
# Availability
# ------------------------------------------------------------------ #


class TestAvailability:
    def test_missing_file_does_not_exist(self, store: CacheStore) -> None:
        assert store.exists() is False

    def test_read_missing_file_raises_unavailable(self, store: CacheStore) -> None:
        with pytest.raises(CacheUnavailableError):
            store.read()

    def test_empty_post_list_is_unavailable(self, store: CacheStore) -> None:
        store.path.write_text('{"format": "feedcache/1", "posts": []}', encoding="utf-8")
        with pytest.raises(CacheUnavailableError):
            store.read()

    def test_directory_is_not_a_cache(self, tmp_path: Path) -> None:
        (tmp_path / "dir.json").mkdir()
        assert CacheStore(tmp_path / "dir.json").exists() is False

    def test_modified_time_of_missing_file_raises(self, store: CacheStore) -> None:
        with pytest.raises(CacheUnavailableError):
            store.modified_time()

    @pytest.mark.skipif(sys.platform == "win32", reason="POSIX permissions")
    @pytest.mark.skipif(hasattr(os, "geteuid") and os.geteuid() == 0, reason="root ignores modes")
    def test_unreadable_file_does_not_exist(self, store: CacheStore, sample_posts) -> None:
        store.write(sample_posts)
        store.path.chmod(0)
        try:
            assert store.exists() is False
        finally:
            store.path.chmod(stat.S_IRUSR | stat.S_IWUSR)


# ------------------------------------------------------------------ #
# Age
# ------------------------------------------------------------------ #


class TestAge:
    def test_age_hours_from_mtime(self, store: CacheStore, sample_posts) -> None:
        store.write(sample_posts)
        now = time.time()
        os.utime(store.path, (now - 7200, now - 7200))
        assert store.age_hours(now=now) == pytest.approx(2.0)

    def test_fresh_file_is_young(self, store: CacheStore, sample_posts) -> None:
        store.write(sample_posts)
        assert store.age_hours() < 0.1


# ------------------------------------------------------------------ #
# Write failures
# ------------------------------------------------------------------ #


class TestWriteFailures:
    def test_parent_is_a_file(self, tmp_path: Path, sample_posts) -> None:
        """Writing below a regular file surfaces as CacheWriteError."""
        blocker = tmp_path / "blocker"
        blocker.write_text("x")
        with pytest.raises(CacheWriteError):
            CacheStore(blocker / "alice.json").write(sample_posts)

    def test_oserror_is_wrapped(self, store: CacheStore, sample_posts, monkeypatch) -> None:
        def _boom(*args, **kwargs):
            raise OSError(28, "No space left on device")

        monkeypatch.setattr("feedcache.cache.store._atomic_write", _boom)
        with pytest.raises(CacheWriteError, match="No space left"):
            store.write(sample_posts)


# ------------------------------------------------------------------ #
# Clear and stats
# ------------------------------------------------------------------ #


class TestClearAndStats:
    def test_clear_removes_file(self, store: CacheStore, sample_posts) -> None:
        store.write(sample_posts)
        assert store.clear() is True
        assert store.exists() is False

    def test_clear_missing_file(self, store: CacheStore) -> None:
        assert store.clear() is False

    def test_stats_missing(self, store: CacheStore) -> None:
        assert store.stats() == {"path": str(store.path), "exists": False}

    def test_stats_present(self, store: CacheStore, sample_posts) -> None:
        store.write(sample_posts)
        s = store.stats()
        assert s["exists"] is True
        assert s["size"] > 0
        assert s["age_hours"] >= 0
