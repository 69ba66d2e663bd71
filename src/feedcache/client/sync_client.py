"""Synchronous HTTP client for the account timeline feed.

This module provides :class:`FeedClient`, a thin wrapper around
:class:`httpx.Client` that knows how to address an account's timeline feed
and maps every transport or HTTP failure onto
:class:`~feedcache.exceptions.FetchFailedError`.

Requests are never retried; a failed fetch is reported once and the caller
decides whether to try again.
"""

from __future__ import annotations

from typing import Optional

import httpx

from feedcache.exceptions import FetchFailedError
from feedcache.models import FeedConfig
from feedcache.output import get_output

_ACCEPT = "application/rss+xml, application/xml;q=0.9, text/xml;q=0.8, */*;q=0.1"


class FeedClient:
    """Blocking client for the feed endpoint.

    Must be used as a context manager so that the underlying transport is
    opened and closed around each fetch.

    Args:
        config: Supplies ``base_url``, ``timeline_path``, ``timeout`` and
            ``verify_ssl``.
        transport: Optional httpx transport, e.g. :class:`httpx.MockTransport`
            in tests. ``None`` uses the default network transport.

    Example::

        with FeedClient(config) as client:
            body = client.fetch_timeline("alice")
    """

    def __init__(
        self,
        config: FeedConfig,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._config = config
        self._transport = transport
        self._client: Optional[httpx.Client] = None

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> FeedClient:
        self._client = httpx.Client(
            base_url=self._config.base_url,
            timeout=self._config.timeout,
            verify=self._config.verify_ssl,
            follow_redirects=True,
            transport=self._transport,
        )
        return self

    def __exit__(self, *args: object) -> None:
        if self._client:
            self._client.close()
            self._client = None

    # ------------------------------------------------------------------ #
    # Public request methods
    # ------------------------------------------------------------------ #

    def timeline_url(self, account: str) -> str:
        """Return the absolute feed URL for *account* (for display and logs)."""
        url = httpx.URL(self._config.base_url).join(self._config.timeline_path)
        return str(url.copy_merge_params({"screen_name": account}))

    def fetch_timeline(self, account: str) -> bytes:
        """GET the timeline feed for *account* and return the raw body.

        Args:
            account: The account's screen name.

        Returns:
            The response body as bytes, left undecoded so the feed parser
            can honour the document's declared encoding.

        Raises:
            FetchFailedError: On timeouts, network errors, or any HTTP
                status of 400 or above.
        """
        assert self._client is not None, "Client not initialised -- use as context manager"

        output = get_output()
        output.debug(f"GET {self.timeline_url(account)}")

        try:
            response = self._client.get(
                self._config.timeline_path,
                params={"screen_name": account},
                headers={"Accept": _ACCEPT},
            )
        except httpx.TimeoutException as exc:
            raise FetchFailedError(
                f"Timed out after {self._config.timeout}s fetching feed for {account!r}"
            ) from exc
        except httpx.HTTPError as exc:
            raise FetchFailedError(f"Could not fetch feed for {account!r}: {exc}") from exc

        output.debug(f"HTTP {response.status_code} ({len(response.content)} bytes)")
        if response.status_code >= 400:
            raise FetchFailedError(
                f"HTTP {response.status_code} fetching feed for {account!r}"
            )
        return response.content
