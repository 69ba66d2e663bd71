"""Cache-first access to an account's recent posts.

:class:`FeedCache` is the orchestration layer of the package. On
construction it tries the cache file first and falls back to a live fetch
of the account timeline, which in turn rewrites the cache. Whatever was
loaded is then queried with :meth:`FeedCache.get` and
:meth:`FeedCache.get_all`.

The public methods never raise for expected failures. They return
``False``/``None`` and record the typed exception from
:mod:`feedcache.exceptions` in :attr:`FeedCache.last_error`, so callers can
branch on the outcome and still tell a stale cache from a dead endpoint.

Freshness boundary: a cache is stale only when its age is *strictly greater*
than ``max_cache_age_hours``; a cache exactly at the limit is still served.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Mapping, Optional, Union

from feedcache.cache import CacheStore
from feedcache.client import FeedClient
from feedcache.exceptions import (
    CacheCorruptError,
    CacheUnavailableError,
    CacheWriteError,
    ConfigMissingError,
    FeedCacheError,
    FetchFailedError,
    InvalidArgumentError,
    NoDataError,
)
from feedcache.models import FeedConfig, LoadOutcome, Post, SortOrder
from feedcache.parser import parse_feed

logger = logging.getLogger(__name__)

# Failures worth surfacing; the rest are routine cache misses.
_NOTABLE_ERRORS = (CacheCorruptError, CacheWriteError, FetchFailedError)


class FeedCache:
    """Posts for one account, served from a cache file or the live feed.

    Args:
        config: A :class:`~feedcache.models.FeedConfig`, or a plain mapping
            of options (unknown keys are ignored).
        client: Optional :class:`~feedcache.client.FeedClient`; one is built
            from *config* when omitted.
        autoload: When ``True`` (the default) :meth:`initialize` runs
            immediately. Pass ``False`` to drive the steps by hand.

    Raises:
        ConfigError: If an option in a plain mapping has the wrong type.
        Construction is the only step that raises; every operation after it
        reports failures through its return value and :attr:`last_error`.

    Example::

        feed = FeedCache({"account_identifier": "alice",
                          "cache_location": "/tmp/alice.json"})
        if feed.outcome is not LoadOutcome.EMPTY:
            for post in feed.get(5, "desc"):
                print(post.content)
    """

    def __init__(
        self,
        config: Union[FeedConfig, Mapping[str, Any], None] = None,
        client: Optional[FeedClient] = None,
        autoload: bool = True,
    ) -> None:
        if not isinstance(config, FeedConfig):
            config = FeedConfig.from_options(config)
        self._config = config
        self._client = client or FeedClient(config)
        self._store: Optional[CacheStore] = (
            CacheStore(config.cache_location) if config.cache_location else None
        )
        self._posts: list[Post] = []
        self.last_error: Optional[FeedCacheError] = None
        self.outcome = LoadOutcome.EMPTY

        if autoload:
            self.initialize()

    # ------------------------------------------------------------------ #
    # Properties
    # ------------------------------------------------------------------ #

    @property
    def config(self) -> FeedConfig:
        """The effective configuration."""
        return self._config

    @property
    def store(self) -> Optional[CacheStore]:
        """The cache store, or ``None`` when caching is disabled."""
        return self._store

    @property
    def posts(self) -> tuple[Post, ...]:
        """Read-only view of the loaded posts."""
        return tuple(self._posts)

    @property
    def is_loaded(self) -> bool:
        """Whether any posts are held in memory."""
        return bool(self._posts)

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    def initialize(self) -> LoadOutcome:
        """Load posts from the cache, falling back to a live fetch.

        Returns:
            :attr:`LoadOutcome.CACHE` or :attr:`LoadOutcome.NETWORK` on
            success, :attr:`LoadOutcome.EMPTY` when both steps failed. The
            value is also stored on :attr:`outcome`.
        """
        if self.load_from_cache():
            self.outcome = LoadOutcome.CACHE
        elif self.fetch_live():
            self.outcome = LoadOutcome.NETWORK
        else:
            self.outcome = LoadOutcome.EMPTY
        logger.debug("Feed for %r initialised from %s", self._config.account_identifier, self.outcome.value)
        return self.outcome

    def load_from_cache(self) -> bool:
        """Replace the in-memory posts with the cached ones if the cache is usable.

        Fails, leaving the posts untouched, when caching is disabled, the
        cache file is missing, unreadable, stale, empty, or corrupt.
        """
        self.last_error = None
        try:
            posts = self._read_cache()
        except FeedCacheError as exc:
            self._record(exc)
            return False

        self._posts = posts
        logger.info("Loaded %d posts from cache %s", len(posts), self._store.path)
        return True

    def fetch_live(self) -> bool:
        """Fetch the account timeline and replace the in-memory posts.

        On success the posts are also written to the cache when one is
        configured. A failed cache write is recorded in :attr:`last_error`
        but does not fail the fetch.
        A failed fetch leaves the posts untouched.
        """
        self.last_error = None
        try:
            posts = self._fetch()
        except FeedCacheError as exc:
            self._record(exc)
            return False

        self._posts = posts
        logger.info(
            "Fetched %d posts for %r", len(posts), self._config.account_identifier
        )
        if self._store is not None:
            self._write_cache()
        return True

    def save_to_cache(self) -> bool:
        """Write the in-memory posts to the cache file, replacing its contents.

        Fails when no posts are loaded, caching is disabled, or the write
        itself fails.
        """
        self.last_error = None
        return self._write_cache()

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    def get(self, count: Any = 3, order: Any = SortOrder.ASC) -> Optional[list[Post]]:
        """Return up to *count* posts.

        Args:
            count: Maximum number of posts; a non-negative integer or a
                numeric string. Values above the number loaded return
                everything.
            order: ``"asc"`` keeps the stored order, ``"desc"`` reverses it.
                Anything else is treated as ``"asc"``.

        Returns:
            The selected posts, or ``None`` if nothing is loaded or *count*
            is invalid.
        """
        self.last_error = None
        if not self._posts:
            self._record(NoDataError("No posts loaded"))
            return None
        try:
            limit = _coerce_count(count)
        except InvalidArgumentError as exc:
            self._record(exc)
            return None

        posts = list(self._posts)
        if SortOrder.parse(order) is SortOrder.DESC:
            posts.reverse()
        return posts[:limit]

    def get_all(self) -> Optional[list[Post]]:
        """Return every loaded post in stored order, or ``None`` if none are loaded."""
        self.last_error = None
        if not self._posts:
            self._record(NoDataError("No posts loaded"))
            return None
        return list(self._posts)

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _read_cache(self) -> list[Post]:
        if self._store is None:
            raise ConfigMissingError("No cache location configured")
        if not self._store.exists():
            raise CacheUnavailableError(f"Cache {self._store.path} does not exist or is unreadable")

        max_age = self._config.max_cache_age_hours
        if max_age > 0:
            age = self._store.age_hours()
            if age > max_age:
                raise CacheUnavailableError(
                    f"Cache {self._store.path} is stale ({age:.1f}h old, limit {max_age}h)"
                )
        return self._store.read()

    def _fetch(self) -> list[Post]:
        account = self._config.account_identifier
        if not account:
            raise ConfigMissingError("No account identifier configured")
        with self._client as client:
            body = client.fetch_timeline(account)
        return parse_feed(body)

    def _write_cache(self) -> bool:
        try:
            if not self._posts:
                raise NoDataError("No posts to cache")
            if self._store is None:
                raise ConfigMissingError("No cache location configured")
            self._store.write(self._posts, account=self._config.account_identifier)
        except FeedCacheError as exc:
            self._record(exc)
            return False

        logger.debug("Wrote %d posts to cache %s", len(self._posts), self._store.path)
        return True

    def _record(self, exc: FeedCacheError) -> None:
        level = logging.WARNING if isinstance(exc, _NOTABLE_ERRORS) else logging.DEBUG
        logger.log(level, "%s: %s", type(exc).__name__, exc)
        self.last_error = exc


def _coerce_count(value: Any) -> int:
    """Validate a post count, accepting integers, finite floats and numeric strings."""
    if isinstance(value, bool):
        raise InvalidArgumentError(f"Count must be a number, got {value!r}")
    if isinstance(value, str):
        try:
            value = float(value.strip())
        except ValueError:
            raise InvalidArgumentError(f"Count must be a number, got {value!r}") from None
    if not isinstance(value, (int, float)):
        raise InvalidArgumentError(f"Count must be a number, got {value!r}")
    if isinstance(value, float) and not math.isfinite(value):
        raise InvalidArgumentError(f"Count must be finite, got {value!r}")
    if value < 0:
        raise InvalidArgumentError(f"Count must not be negative, got {value!r}")
    return int(value)
