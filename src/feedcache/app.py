"""Typer application and CLI entry point for feedcache.

Commands:

* ``show ACCOUNT``    -- print posts, served from the cache when fresh.
* ``refresh ACCOUNT`` -- force a live fetch and rewrite the cache.
* ``status ACCOUNT``  -- describe the cache file for an account.
* ``clear ACCOUNT``   -- delete the cache file for an account.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. Expected failures exit with the code carried by the
:class:`~feedcache.exceptions.FeedCacheError` subclass; anything else writes
a crash log under the data directory.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from datetime import datetime
from pathlib import Path
from typing import Any, NoReturn, Optional

import typer
from rich.logging import RichHandler

from feedcache import __version__
from feedcache.exit_codes import EXIT_GENERIC_FAILURE

app = typer.Typer(
    name="feedcache",
    help="Fetch and cache an account's recent feed posts.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

_CONFIG_OPTION = typer.Option(None, "--config", "-c", help="JSON config file.")
_CACHE_OPTION = typer.Option(None, "--cache", help="Cache file path (default: XDG cache dir).")
_NO_CACHE_OPTION = typer.Option(False, "--no-cache", help="Disable the cache file.")
_MAX_AGE_OPTION = typer.Option(
    None, "--max-age", help="Hours before the cache is stale (<= 0 never expires)."
)
_BASE_URL_OPTION = typer.Option(None, "--base-url", help="Override the feed host.")
_TIMEOUT_OPTION = typer.Option(None, "--timeout", help="Request timeout in seconds.")


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"feedcache {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Suppress non-essential output."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug output."),
) -> None:
    """Install the global output manager from the formatting flags."""
    from feedcache.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    output = OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose)
    set_output(output)
    _configure_logging(output)


def _configure_logging(output: Any) -> None:
    """Route ``feedcache`` library logs to stderr when ``--verbose`` is set."""
    logger = logging.getLogger("feedcache")
    for handler in list(logger.handlers):
        if isinstance(handler, RichHandler):
            logger.removeHandler(handler)
    if output.is_verbose:
        logger.addHandler(RichHandler(console=output.stderr_console, show_path=False))
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.WARNING)


# ------------------------------------------------------------------ #
# Helpers
# ------------------------------------------------------------------ #


def _build_config(
    account: str,
    config_file: Optional[Path],
    cache: Optional[Path],
    no_cache: bool,
    max_age: Optional[int],
    base_url: Optional[str] = None,
    timeout: Optional[float] = None,
):
    """Resolve the effective config for *account* from flags and the config file."""
    from feedcache.config import default_cache_path, resolve_config

    config = resolve_config(
        config_file,
        {
            "account_identifier": account,
            "cache_location": cache,
            "max_cache_age_hours": max_age,
            "base_url": base_url,
            "timeout": timeout,
        },
    )
    if no_cache:
        return config.model_copy(update={"cache_location": None})
    if config.cache_location is None:
        return config.model_copy(update={"cache_location": default_cache_path(account)})
    return config


def _fail(exc: Exception) -> NoReturn:
    """Print *exc* to stderr and exit with its exit code."""
    from feedcache.output import get_output

    get_output().error(str(exc))
    raise typer.Exit(code=getattr(exc, "exit_code", EXIT_GENERIC_FAILURE))


# ------------------------------------------------------------------ #
# Commands
# ------------------------------------------------------------------ #


@app.command("show")
def show_command(
    account: str = typer.Argument(..., help="Account screen name."),
    count: int = typer.Option(3, "--count", "-n", min=0, help="Number of posts to show."),
    order: str = typer.Option("asc", "--order", help="asc (as delivered) or desc (reversed)."),
    show_all: bool = typer.Option(False, "--all", "-a", help="Show every loaded post."),
    config_file: Optional[Path] = _CONFIG_OPTION,
    cache: Optional[Path] = _CACHE_OPTION,
    no_cache: bool = _NO_CACHE_OPTION,
    max_age: Optional[int] = _MAX_AGE_OPTION,
    base_url: Optional[str] = _BASE_URL_OPTION,
    timeout: Optional[float] = _TIMEOUT_OPTION,
) -> None:
    """Show recent posts, from the cache when it is fresh."""
    from feedcache.exceptions import CacheWriteError, FeedCacheError, NoDataError
    from feedcache.feed import FeedCache
    from feedcache.models import LoadOutcome
    from feedcache.output import get_output

    try:
        config = _build_config(account, config_file, cache, no_cache, max_age, base_url, timeout)
    except FeedCacheError as exc:
        _fail(exc)

    output = get_output()
    feed = FeedCache(config)
    output.debug(f"Posts loaded from: {feed.outcome.value}")
    if feed.outcome is LoadOutcome.EMPTY:
        _fail(feed.last_error or NoDataError(f"No posts available for {account!r}"))
    if isinstance(feed.last_error, CacheWriteError):
        output.warning(str(feed.last_error))

    posts = feed.get_all() if show_all else feed.get(count, order)
    if posts is None:
        _fail(feed.last_error)
    output.print_posts(posts, title=f"@{account}")


@app.command("refresh")
def refresh_command(
    account: str = typer.Argument(..., help="Account screen name."),
    config_file: Optional[Path] = _CONFIG_OPTION,
    cache: Optional[Path] = _CACHE_OPTION,
    base_url: Optional[str] = _BASE_URL_OPTION,
    timeout: Optional[float] = _TIMEOUT_OPTION,
) -> None:
    """Fetch the feed now and rewrite the cache, ignoring its age."""
    from feedcache.exceptions import FeedCacheError
    from feedcache.feed import FeedCache
    from feedcache.output import get_output

    try:
        config = _build_config(account, config_file, cache, False, None, base_url, timeout)
    except FeedCacheError as exc:
        _fail(exc)

    output = get_output()
    feed = FeedCache(config, autoload=False)
    if not feed.fetch_live():
        _fail(feed.last_error)
    if feed.last_error is not None:
        output.warning(str(feed.last_error))
        output.success(f"Fetched {len(feed.posts)} posts for {account}")
        return
    output.success(f"Fetched {len(feed.posts)} posts for {account}, cached at {config.cache_location}")


@app.command("status")
def status_command(
    account: str = typer.Argument(..., help="Account screen name."),
    config_file: Optional[Path] = _CONFIG_OPTION,
    cache: Optional[Path] = _CACHE_OPTION,
    max_age: Optional[int] = _MAX_AGE_OPTION,
) -> None:
    """Describe the cache file for an account."""
    from feedcache.cache import CacheStore
    from feedcache.exceptions import FeedCacheError
    from feedcache.output import get_output

    try:
        config = _build_config(account, config_file, cache, False, max_age)
    except FeedCacheError as exc:
        _fail(exc)

    stats = CacheStore(config.cache_location).stats()
    limit = config.max_cache_age_hours
    if stats["exists"]:
        stats["stale"] = limit > 0 and stats["age_hours"] > limit
    stats["max_age_hours"] = limit

    get_output().print_status(stats, title=f"@{account} cache")


@app.command("clear")
def clear_command(
    account: str = typer.Argument(..., help="Account screen name."),
    config_file: Optional[Path] = _CONFIG_OPTION,
    cache: Optional[Path] = _CACHE_OPTION,
) -> None:
    """Delete the cache file for an account."""
    from feedcache.cache import CacheStore
    from feedcache.exceptions import FeedCacheError
    from feedcache.output import get_output

    try:
        config = _build_config(account, config_file, cache, False, None)
        removed = CacheStore(config.cache_location).clear()
    except FeedCacheError as exc:
        _fail(exc)

    if removed:
        get_output().success(f"Removed {config.cache_location}")
    else:
        get_output().info(f"No cache at {config.cache_location}")


# ------------------------------------------------------------------ #
# Entry point
# ------------------------------------------------------------------ #


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from feedcache.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``feedcache`` console script.

    :class:`~feedcache.exceptions.FeedCacheError` instances cause a clean
    exit with the error's ``exit_code``. All other exceptions produce a
    crash log and a generic failure exit.
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from feedcache.exceptions import FeedCacheError
        from feedcache.output import get_output

        error = get_output().error
        if isinstance(exc, FeedCacheError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
