"""Exception hierarchy for feedcache.

All exceptions inherit from :class:`FeedCacheError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`feedcache.exit_codes`.

The collaborators (:class:`~feedcache.cache.CacheStore`,
:class:`~feedcache.client.FeedClient`, :func:`~feedcache.parser.parse_feed`)
raise these exceptions. :class:`~feedcache.feed.FeedCache` catches them at
its public boundary, records the instance in ``last_error`` and reports a
``False``/``None`` outcome instead. The CLI in :mod:`feedcache.app` turns the
recorded error into a message and exit code.

Subclass hierarchy::

    FeedCacheError (exit 1)
    +-- ConfigError            (exit 1)
    +-- ConfigMissingError     (exit 2)
    +-- InvalidArgumentError   (exit 2)
    +-- CacheUnavailableError  (exit 3)
    +-- CacheCorruptError      (exit 4)
    +-- CacheWriteError        (exit 5)
    +-- FetchFailedError       (exit 6)
    +-- NoDataError            (exit 7)
"""

from feedcache.exit_codes import (
    EXIT_CACHE_CORRUPT,
    EXIT_CACHE_UNAVAILABLE,
    EXIT_CACHE_WRITE_FAILED,
    EXIT_FETCH_FAILED,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NO_DATA,
)


class FeedCacheError(Exception):
    """Base exception for all feedcache errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`feedcache.exit_codes`.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ConfigError(FeedCacheError):
    """Raised when a configuration file cannot be read or is not valid JSON."""

    exit_code = EXIT_GENERIC_FAILURE


class ConfigMissingError(FeedCacheError):
    """Raised when an operation needs an option that was not configured."""

    exit_code = EXIT_INVALID_USAGE


class InvalidArgumentError(FeedCacheError):
    """Raised for a post count that is not a non-negative integer."""

    exit_code = EXIT_INVALID_USAGE


class CacheUnavailableError(FeedCacheError):
    """Raised when the cache file is missing, unreadable, stale, or holds no posts."""

    exit_code = EXIT_CACHE_UNAVAILABLE


class CacheCorruptError(FeedCacheError):
    """Raised when the cache file exists but cannot be decoded."""

    exit_code = EXIT_CACHE_CORRUPT


class CacheWriteError(FeedCacheError):
    """Raised when writing the cache file fails (permissions, disk full)."""

    exit_code = EXIT_CACHE_WRITE_FAILED


class FetchFailedError(FeedCacheError):
    """Raised on network errors, HTTP error statuses, unparseable or empty feeds."""

    exit_code = EXIT_FETCH_FAILED


class NoDataError(FeedCacheError):
    """Raised when posts are queried but none are loaded."""

    exit_code = EXIT_NO_DATA
