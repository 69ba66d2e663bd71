"""On-disk cache for fetched posts.

This package provides :class:`CacheStore`, a single JSON file holding the
last successfully fetched post sequence. Freshness is judged on the file's
modification time by :class:`~feedcache.feed.FeedCache`.
"""

from feedcache.cache.store import CacheStore, decode_posts, encode_posts

__all__ = ["CacheStore", "decode_posts", "encode_posts"]
