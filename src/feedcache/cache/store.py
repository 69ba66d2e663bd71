"""File-backed cache store for fetched posts.

A cache is a single UTF-8 JSON document::

    {
      "format": "feedcache/1",
      "account": "alice",
      "saved_at": 1700000000,
      "posts": [
        {"content": "...", "timestamp": 1700000000, "permalink": "https://..."}
      ]
    }

The file's modification time is what freshness is judged on; ``saved_at`` is
informational only. Writes go through a temp file in the same directory
followed by :func:`os.replace`, so a reader never sees a half-written cache.

See Also:
    :class:`~feedcache.feed.FeedCache` -- decides when the store is read,
    written, or considered stale.
"""

from __future__ import annotations

import json
import os
import tempfile
import time
from pathlib import Path
from typing import Any, Optional, Sequence

from pydantic import ValidationError

from feedcache.exceptions import CacheCorruptError, CacheUnavailableError, CacheWriteError
from feedcache.models import Post

CACHE_FORMAT = "feedcache/1"


def encode_posts(posts: Sequence[Post], account: Optional[str] = None) -> str:
    """Serialise *posts* into the cache document format."""
    document = {
        "format": CACHE_FORMAT,
        "account": account,
        "saved_at": int(time.time()),
        "posts": [post.model_dump() for post in posts],
    }
    return json.dumps(document, ensure_ascii=False, indent=2)


def decode_posts(text: str) -> list[Post]:
    """Parse a cache document back into posts, preserving order.

    Raises:
        CacheCorruptError: If the text is not JSON, carries a different
            ``format`` marker, or any post fails validation.
    """
    try:
        document = json.loads(text)
    except json.JSONDecodeError as exc:
        raise CacheCorruptError(f"Cache is not valid JSON: {exc}") from exc

    if not isinstance(document, dict) or document.get("format") != CACHE_FORMAT:
        raise CacheCorruptError(f"Cache does not declare format {CACHE_FORMAT!r}")

    raw_posts = document.get("posts")
    if not isinstance(raw_posts, list):
        raise CacheCorruptError("Cache has no 'posts' list")

    try:
        return [Post.model_validate(item) for item in raw_posts]
    except ValidationError as exc:
        raise CacheCorruptError(f"Cache holds an invalid post: {exc}") from exc


class CacheStore:
    """A cache file on disk holding the last fetched post sequence.

    Args:
        path: Location of the cache file. Parent directories are created on
            the first write.

    Example::

        store = CacheStore("/tmp/alice.json")
        store.write(posts, account="alice")
        if store.age_hours() < 24:
            posts = store.read()
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        """The cache file location."""
        return self._path

    def exists(self) -> bool:
        """Return True if the cache file exists and is readable."""
        return self._path.is_file() and os.access(self._path, os.R_OK)

    def modified_time(self) -> float:
        """Return the cache file's modification time (seconds since the epoch).

        Raises:
            CacheUnavailableError: If the file cannot be stat'ed.
        """
        try:
            return self._path.stat().st_mtime
        except OSError as exc:
            raise CacheUnavailableError(f"Cannot stat cache {self._path}: {exc}") from exc

    def age_hours(self, now: Optional[float] = None) -> float:
        """Return how many hours ago the cache file was last written."""
        if now is None:
            now = time.time()
        return (now - self.modified_time()) / 3600

    def read(self) -> list[Post]:
        """Read and decode the cached posts.

        Returns:
            The stored posts in their stored order.

        Raises:
            CacheUnavailableError: If the file is missing, unreadable, or
                holds an empty post list.
            CacheCorruptError: If the contents cannot be decoded.
        """
        try:
            text = self._path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise CacheCorruptError(f"Cache {self._path} is not UTF-8 text") from exc
        except OSError as exc:
            raise CacheUnavailableError(f"Cannot read cache {self._path}: {exc}") from exc

        posts = decode_posts(text.strip())
        if not posts:
            raise CacheUnavailableError(f"Cache {self._path} holds no posts")
        return posts

    def write(self, posts: Sequence[Post], account: Optional[str] = None) -> None:
        """Replace the cache contents with *posts*.

        Raises:
            CacheWriteError: If the directory or file cannot be written.
        """
        try:
            _atomic_write(self._path, encode_posts(posts, account))
        except OSError as exc:
            raise CacheWriteError(f"Cannot write cache {self._path}: {exc}") from exc

    def clear(self) -> bool:
        """Delete the cache file. Returns True if a file was removed."""
        try:
            self._path.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            raise CacheWriteError(f"Cannot remove cache {self._path}: {exc}") from exc
        return True

    def stats(self) -> dict[str, Any]:
        """Return a summary of the cache file for display."""
        if not self.exists():
            return {"path": str(self._path), "exists": False}
        return {
            "path": str(self._path),
            "exists": True,
            "size": self._path.stat().st_size,
            "age_hours": round(self.age_hours(), 2),
        }


def _atomic_write(path: Path, data: str) -> None:
    """Write data to file atomically using temp file + rename.

    The temporary file is created in the same directory as *path* so that
    ``os.replace`` is an atomic rename on POSIX systems. On any failure the
    temp file is cleaned up.
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd = None
    tmp_path: Optional[str] = None
    try:
        fd = tempfile.NamedTemporaryFile(
            mode="w",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
            encoding="utf-8",
        )
        tmp_path = fd.name
        fd.write(data)
        fd.flush()
        os.fsync(fd.fileno())
        fd.close()
        fd = None
        os.replace(tmp_path, path)
    except BaseException:
        if fd is not None:
            fd.close()
        if tmp_path is not None:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
        raise
