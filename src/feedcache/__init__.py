"""feedcache -- fetch an account's recent feed posts and cache them on disk.

A :class:`FeedCache` serves posts from a JSON cache file while it is fresh
and falls back to a live fetch of the account's RSS timeline otherwise,
rewriting the cache with whatever it fetched::

    from feedcache import FeedCache

    feed = FeedCache({"account_identifier": "alice",
                      "cache_location": "/tmp/alice.json",
                      "max_cache_age_hours": 6})
    latest = feed.get(3)

Modules:
    feed: The :class:`FeedCache` orchestrator.
    models: Pydantic models (:class:`Post`, :class:`FeedConfig`).
    cache: The on-disk :class:`~feedcache.cache.CacheStore`.
    client: The httpx-based :class:`~feedcache.client.FeedClient`.
    parser: RSS parsing via feedparser.
    config: Config files and XDG directories.
    exceptions: Failure taxonomy with exit-code mapping.
    app: Typer CLI entry point.
"""

__version__ = "0.1.0"

from feedcache.feed import FeedCache  # noqa: E402
from feedcache.models import FeedConfig, LoadOutcome, Post, SortOrder  # noqa: E402

__all__ = ["FeedCache", "FeedConfig", "LoadOutcome", "Post", "SortOrder", "__version__"]
