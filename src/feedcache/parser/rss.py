"""RSS document parsing.

Turns the raw body returned by :class:`~feedcache.client.FeedClient` into an
ordered list of :class:`~feedcache.models.Post`. Parsing is delegated to
:mod:`feedparser`, which copes with the encodings and date formats found in
real timeline feeds.

Field mapping per ``<item>``:

* ``title``   -> ``Post.content`` with line breaks removed
* ``pubDate`` -> ``Post.timestamp`` (UTC seconds since the epoch, ``0`` when
  the date is missing or unparseable)
* ``guid``    -> ``Post.permalink`` (falls back to ``link`` when absent)
"""

from __future__ import annotations

import calendar
import io
import logging
from typing import Any
from xml.sax import SAXException

import feedparser

from feedcache.exceptions import FetchFailedError
from feedcache.models import Post

logger = logging.getLogger(__name__)


def parse_feed(content: bytes | str) -> list[Post]:
    """Parse an RSS document into posts, keeping the document's item order.

    Args:
        content: The raw feed body.

    Returns:
        One :class:`Post` per item, in the order the feed delivered them.

    Raises:
        FetchFailedError: If the document is not well-formed XML, is not a
            feed, or has no items.
    """
    if isinstance(content, str):
        content = content.encode("utf-8")
    # A stream keeps feedparser from treating the body as a URL or file name.
    parsed = feedparser.parse(io.BytesIO(content))
    entries = parsed.get("entries") or []

    reason = parsed.get("bozo_exception") if parsed.get("bozo") else None
    # Malformed XML (e.g. a body cut off mid-transfer) still yields partial
    # entries from the lenient parser; those are never trusted.
    if isinstance(reason, SAXException) or (reason is not None and not entries):
        raise FetchFailedError(f"Feed document could not be parsed: {reason}")
    if not entries:
        raise FetchFailedError("Feed document contains no items")
    if reason is not None:
        logger.debug("Feed parsed with a recoverable problem: %s", reason)

    return [entry_to_post(entry) for entry in entries]


def entry_to_post(entry: Any) -> Post:
    """Map one feedparser entry onto a :class:`Post`."""
    title = entry.get("title", "") or ""
    content = title.replace("\r", "").replace("\n", "")

    published = entry.get("published_parsed") or entry.get("updated_parsed")
    timestamp = calendar.timegm(published) if published else 0

    permalink = entry.get("id") or entry.get("link") or ""
    return Post(content=content, timestamp=timestamp, permalink=permalink)
