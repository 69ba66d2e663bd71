"""Terminal output for the feedcache CLI.

Posts and cache status are data and go to stdout, rendered as a rich table,
tab-separated text, or JSON. Notes, warnings, errors and the ``--verbose``
request trace are diagnostics and go to stderr, so
``feedcache --json show alice | jq`` only ever sees the posts.

Colour is dropped when ``NO_COLOR`` is set, when ``TERM=dumb``, or when
``--no-color`` is passed. The CLI installs one :class:`OutputManager` per
invocation with :func:`set_output`; library code reaches it through
:func:`get_output`.
"""

from __future__ import annotations

import json
import os
import sys
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Iterable, Mapping, Optional, Sequence

from rich.console import Console
from rich.table import Table
from rich.text import Text

from feedcache.models import Post

POST_COLUMNS = ("published", "content", "permalink")

# level -> (prefix, rich style)
_LEVELS = {
    "info": ("", None),
    "success": ("", "green"),
    "warning": ("Warning: ", "yellow"),
    "error": ("Error: ", "bold red"),
    "debug": ("[debug] ", "dim"),
}


class OutputFormat(str, Enum):
    """How data written to stdout is rendered.

    ``AUTO`` becomes ``RICH`` on an interactive terminal with colour enabled
    and ``PLAIN`` everywhere else.
    """

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class OutputManager:
    """Renders posts and cache status, and routes diagnostics to stderr.

    Args:
        format: Rendering for stdout data.
        no_color: Disable colour on both streams.
        quiet: Drop info and success notes. Warnings and errors still show.
        verbose: Show debug notes.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _color_disabled_by_env()
        self._quiet = quiet
        self._verbose = verbose
        if format == OutputFormat.AUTO:
            interactive = _stdout_is_tty() and not self._no_color
            format = OutputFormat.RICH if interactive else OutputFormat.PLAIN
        self._format = format

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=format == OutputFormat.RICH,
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    @property
    def is_verbose(self) -> bool:
        return self._verbose

    @property
    def stderr_console(self) -> Console:
        """Console bound to stderr, shared with the ``--verbose`` log handler."""
        return self._stderr

    # ------------------------------------------------------------------ #
    # Data (stdout)
    # ------------------------------------------------------------------ #

    def print_posts(self, posts: Sequence[Post], title: Optional[str] = None) -> None:
        """Render *posts* in the order given.

        JSON output is the list of post objects as stored in the cache.
        Table and plain output show the publish time in UTC.
        """
        if self._format == OutputFormat.JSON:
            self.print_json([post.model_dump() for post in posts])
            return
        rows = [(_published(post.timestamp), post.content, post.permalink) for post in posts]
        self._print_rows(POST_COLUMNS, rows, title)

    def print_status(self, stats: Mapping[str, Any], title: Optional[str] = None) -> None:
        """Render a cache status mapping as one key/value row per entry."""
        if self._format == OutputFormat.JSON:
            self.print_json(dict(stats))
            return
        self._print_rows(("key", "value"), [(k, str(v)) for k, v in stats.items()], title)

    def print_json(self, data: Any) -> None:
        self._emit(json.dumps(data, indent=2, ensure_ascii=False, default=str))

    def _print_rows(
        self,
        headers: Sequence[str],
        rows: Iterable[Sequence[str]],
        title: Optional[str],
    ) -> None:
        if self._format == OutputFormat.PLAIN:
            self._emit("\t".join(headers))
            for row in rows:
                self._emit("\t".join(row))
            return

        table = Table(title=title, header_style="bold cyan")
        for header in headers:
            table.add_column(header)
        for row in rows:
            table.add_row(*row)
        self._stdout.print(table)

    def _emit(self, text: str) -> None:
        print(text, file=sys.stdout, flush=True)

    # ------------------------------------------------------------------ #
    # Diagnostics (stderr)
    # ------------------------------------------------------------------ #

    def info(self, message: str) -> None:
        if not self._quiet:
            self._note("info", message)

    def success(self, message: str) -> None:
        if not self._quiet:
            self._note("success", message)

    def warning(self, message: str) -> None:
        self._note("warning", message)

    def error(self, message: str) -> None:
        self._note("error", message)

    def debug(self, message: str) -> None:
        if self._verbose:
            self._note("debug", message)

    def _note(self, level: str, message: str) -> None:
        prefix, style = _LEVELS[level]
        line = f"{prefix}{message}"
        if self._no_color or style is None:
            print(line, file=sys.stderr, flush=True)
        else:
            # Text, not markup: paths and feed titles may contain brackets.
            self._stderr.print(Text(line, style=style))


def _published(timestamp: int) -> str:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).strftime("%Y-%m-%d %H:%M")


def _stdout_is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _color_disabled_by_env() -> bool:
    """True when ``NO_COLOR`` is set to anything, or ``TERM`` is ``dumb``."""
    return "NO_COLOR" in os.environ or os.environ.get("TERM") == "dumb"


# ------------------------------------------------------------------ #
# Per-invocation instance
# ------------------------------------------------------------------ #

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed :class:`OutputManager`, creating a default one lazily.

    Outside the CLI nothing is installed; the default is not verbose, so
    :class:`~feedcache.client.FeedClient` request tracing stays silent.
    """
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    global _output
    _output = None
