"""Numeric process exit codes for the ``feedcache`` command.

Each constant maps to one failure category of the feed cache and is
referenced by the corresponding :class:`~feedcache.exceptions.FeedCacheError`
subclass. Shell wrappers and cron jobs can inspect the exit code to tell a
stale cache from an unreachable feed without parsing stderr.

Example::

    $ feedcache show alice --no-cache
    $ echo $?
    6   # EXIT_FETCH_FAILED -- the feed endpoint could not be read
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""Missing configuration or an invalid argument."""

EXIT_CACHE_UNAVAILABLE = 3
"""The cache file is missing, unreadable, stale, or empty."""

EXIT_CACHE_CORRUPT = 4
"""The cache file exists but its contents could not be decoded."""

EXIT_CACHE_WRITE_FAILED = 5
"""The cache file could not be written."""

EXIT_FETCH_FAILED = 6
"""The feed endpoint could not be fetched or its document had no items."""

EXIT_NO_DATA = 7
"""No posts were loaded from either the cache or the feed."""
