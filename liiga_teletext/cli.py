# liiga_teletext/cli.py
"""
Command line entry point.
"""

from __future__ import annotations

import argparse
from datetime import datetime
import logging
import sys
from typing import List, Optional

from . import __version__
from .cache import TTLCache
from .config import Config, config_path, update_settings
from .exceptions import ConfigError, FatalError
from .handlers import InteractiveController, PageBuilder, run_once
from .liiga_client import LiigaClient
from .logging_setup import configure_logging, resolve_log_path
from .models import RunArgs
from .services import GamesService, SeasonCountdownService
from .services.seasons import parse_date
from .terminal import KeyReader, TerminalGuard
from .version import check_latest_version, log_version_status, print_version_info

logger = logging.getLogger(__name__)


def _date_arg(raw: str) -> str:
    try:
        parse_date(raw)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid date {raw!r}, expected YYYY-MM-DD") from e
    return raw


def _positive_int(raw: str) -> int:
    try:
        value = int(raw)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"not an integer: {raw!r}") from e
    if value <= 0:
        raise argparse.ArgumentTypeError("must be a positive number of seconds")
    return value


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="liiga-teletext",
        description="Liiga results as teletext page 221",
    )
    ap.add_argument("-d", "--date", type=_date_arg, help="Show games for YYYY-MM-DD")
    ap.add_argument("-o", "--once", action="store_true", help="Print one frame to stdout and exit")

    mode = ap.add_mutually_exclusive_group()
    mode.add_argument("-c", "--compact", action="store_true", help="Compact display mode")
    mode.add_argument("-w", "--wide", action="store_true", help="Two-column display (needs 128 columns)")

    ap.add_argument("--disable-links", action="store_true", help="Do not emit hyperlinks on video icons")
    ap.add_argument("--debug", action="store_true", help="Debug logging to stderr, no alternate screen")
    ap.add_argument(
        "--min-refresh-interval",
        type=_positive_int,
        metavar="SECONDS",
        help="Minimum seconds between automatic refreshes",
    )
    ap.add_argument("--log-file", metavar="PATH", help="Log file for this run")
    ap.add_argument("--set-log-file", metavar="PATH", help="Save a default log file path")
    ap.add_argument("--clear-log-file", action="store_true", help="Remove the saved log file path")
    ap.add_argument("--config", dest="new_api_domain", metavar="NEW_API_DOMAIN", help="Save a new API domain")
    ap.add_argument("--list-config", action="store_true", help="Print the configuration and exit")
    ap.add_argument("--version", action="store_true", help="Print version information and exit")
    return ap


def parse_args(argv: Optional[List[str]] = None) -> RunArgs:
    """Parse argv into RunArgs; argparse exits with status 2 on bad input."""
    ns = build_parser().parse_args(argv)
    return RunArgs(
        date=ns.date,
        disable_links=ns.disable_links,
        compact=ns.compact,
        wide=ns.wide,
        once=ns.once,
        debug=ns.debug,
        min_refresh_interval=ns.min_refresh_interval,
        log_file=ns.log_file,
        set_log_file=ns.set_log_file,
        clear_log_file=ns.clear_log_file,
        new_api_domain=ns.new_api_domain,
        list_config=ns.list_config,
        version=ns.version,
    )


def _update_config(args: RunArgs) -> int:
    changes = {}
    if args.new_api_domain:
        changes["api_domain"] = args.new_api_domain
    if args.set_log_file:
        changes["log_file_path"] = args.set_log_file
    if args.clear_log_file:
        changes["log_file_path"] = None
    path = update_settings(config_path(), **changes)
    print(f"Asetukset tallennettu: {path}")
    return 0


def run(args: RunArgs) -> int:
    if args.version:
        print_version_info(check_latest_version())
        return 0
    if args.mutates_config:
        return _update_config(args)

    config = Config.load(prompt=None if (args.list_config or not sys.stdin.isatty()) else input)
    if args.list_config:
        print(config.describe())
        return 0

    log_path = configure_logging(
        resolve_log_path(args.log_file, config.log_file_path),
        debug=args.debug,
        stderr=args.once,
    )
    logger.info("liiga-teletext %s starting (log: %s)", __version__, log_path)

    if config.has_placeholder_domain:
        raise ConfigError("API domain is not configured (set LIIGA_API_DOMAIN or use --config)")

    client = LiigaClient(config.api_domain, timeout=config.http_timeout_seconds)
    cache = TTLCache()
    fetcher = GamesService(client=client, cache=cache, config=config)
    countdown = SeasonCountdownService(client=client, cache=cache)
    builder = PageBuilder(
        args=args,
        now_fn=lambda: datetime.now(config.local_tz),
        season_start_lookup=countdown.regular_season_start,
    )

    if args.once:
        return run_once(fetcher, builder, args, sys.stdout)

    log_version_status()
    with TerminalGuard(alternate_screen=not args.debug):
        reader = KeyReader()
        controller = InteractiveController(
            fetcher=fetcher,
            builder=builder,
            args=args,
            read_key=reader.read_key,
            has_input=reader.has_input,
            out=sys.stdout,
        )
        return controller.run()


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    try:
        return run(args)
    except (ConfigError, FatalError) as e:
        logger.error("Aborting: %s", e)
        print(f"Virhe: {e.message}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 0


if __name__ == "__main__":
    sys.exit(main())
