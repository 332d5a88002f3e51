# liiga_teletext/handlers/once.py
"""
--once: fetch, print one frame, exit.
"""

from __future__ import annotations

import logging
from typing import TextIO

from ..exceptions import ErrorKind, LiigaError, classify
from ..models import Fetcher, RunArgs
from ..services.seasons import is_historical_date
from .page_builder import PageBuilder

logger = logging.getLogger(__name__)


def run_once(fetcher: Fetcher, builder: PageBuilder, args: RunArgs, out: TextIO) -> int:
    """
    Print the games of args.date (or today) without pagination or footer.

    Fetch failures are rendered as an error page; the exit code stays 0. Configuration
    errors propagate to the CLI.
    """
    try:
        games, fetched_date = fetcher.fetch(args.date)
    except LiigaError as e:
        if classify(e) in (ErrorKind.CONFIG, ErrorKind.FATAL):
            raise
        logger.error("Fetch failed: %s", e)
        page = builder.error_page(e.message, args.date)
    else:
        page = builder.build(games, fetched_date, args.date)
        if is_historical_date(fetched_date, builder.now_fn().date()):
            page.set_auto_refresh_disabled(True)

    page.render_buffered(out)
    out.write("\n")
    out.flush()
    return 0
