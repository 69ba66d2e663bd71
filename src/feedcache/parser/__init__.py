"""Feed document parsing for feedcache."""

from feedcache.parser.rss import entry_to_post, parse_feed

__all__ = ["entry_to_post", "parse_feed"]
