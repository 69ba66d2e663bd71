"""Pydantic models shared across feedcache modules.

**Data models**:
    :class:`Post` -- one retrieved feed item, immutable once created.

**Configuration models**:
    :class:`FeedConfig` -- the options recognised by
    :class:`~feedcache.feed.FeedCache`. Unknown keys are dropped by
    :meth:`FeedConfig.from_options` before validation.

**Enumerations**:
    :class:`LoadOutcome` -- where the in-memory posts came from.
    :class:`SortOrder` -- presentation order accepted by
    :meth:`~feedcache.feed.FeedCache.get`.
"""

from __future__ import annotations

import enum
import logging
from pathlib import Path
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from feedcache.exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.twitter.com"
DEFAULT_TIMELINE_PATH = "/1/statuses/user_timeline.rss"


# --- Data ---


class Post(BaseModel):
    """A single feed item.

    ``content`` is the item title with newlines removed, ``timestamp`` is the
    publish date in seconds since the epoch, and ``permalink`` is the item's
    guid.
    """

    model_config = ConfigDict(frozen=True)

    content: str
    timestamp: int
    permalink: str


# --- Configuration ---


class FeedConfig(BaseModel):
    """Options for a :class:`~feedcache.feed.FeedCache`.

    ``cache_location`` set to ``None`` disables caching entirely, and a
    ``max_cache_age_hours`` of zero or less disables expiry. Empty strings
    for the account or cache location are treated as unset.

    Example::

        FeedConfig(
            account_identifier="alice",
            cache_location="/var/cache/feeds/alice.json",
            max_cache_age_hours=6,
        )
    """

    # Numeric screen names arrive as ints from JSON configs.
    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    account_identifier: Optional[str] = Field(
        default=None, description="Account whose timeline is fetched"
    )
    cache_location: Optional[Path] = Field(
        default=None, description="Cache file path; unset disables caching"
    )
    max_cache_age_hours: int = Field(
        default=24, description="Hours before the cache is stale; <= 0 never expires"
    )
    base_url: str = Field(
        default=DEFAULT_BASE_URL, description="Scheme and host of the feed endpoint"
    )
    timeline_path: str = Field(
        default=DEFAULT_TIMELINE_PATH, description="Path of the account timeline feed"
    )
    timeout: float = Field(default=30.0, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")

    @field_validator("account_identifier", "cache_location", mode="before")
    @classmethod
    def blank_is_unset(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @classmethod
    def from_options(cls, options: Optional[Mapping[str, Any]] = None) -> FeedConfig:
        """Build a config from a loose option mapping.

        Recognised keys override the defaults; every other key is dropped
        and reported at debug level.

        Args:
            options: Mapping of option names to values. ``None`` or an empty
                mapping yields the defaults.

        Returns:
            The validated :class:`FeedConfig`.

        Raises:
            ConfigError: If a recognised option has a value of the wrong type.
        """
        options = dict(options or {})
        known = {k: v for k, v in options.items() if k in cls.model_fields}
        ignored = sorted(set(options) - set(known))
        if ignored:
            logger.debug("Ignoring unrecognised feed options: %s", ", ".join(ignored))
        try:
            return cls(**known)
        except ValidationError as exc:
            raise ConfigError(f"Invalid configuration: {exc}") from exc


# --- Enumerations ---


class LoadOutcome(str, enum.Enum):
    """Result of :meth:`~feedcache.feed.FeedCache.initialize`."""

    CACHE = "cache"
    NETWORK = "network"
    EMPTY = "empty"


class SortOrder(str, enum.Enum):
    """Presentation order for :meth:`~feedcache.feed.FeedCache.get`.

    ``ASC`` keeps the stored order, ``DESC`` reverses it.
    """

    ASC = "asc"
    DESC = "desc"

    @classmethod
    def parse(cls, value: Any) -> SortOrder:
        """Resolve *value* to an order, treating anything unrecognised as ``ASC``."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str) and value.strip().lower() == cls.DESC.value:
            return cls.DESC
        return cls.ASC
