"""HTTP client module for feedcache.

Provides :class:`FeedClient`, a blocking :mod:`httpx` client that fetches an
account's timeline feed with an explicit timeout.

Example::

    from feedcache.client import FeedClient

    with FeedClient(config) as client:
        body = client.fetch_timeline("alice")
"""

from feedcache.client.sync_client import FeedClient

__all__ = ["FeedClient"]
