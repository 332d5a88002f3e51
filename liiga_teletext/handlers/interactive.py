# liiga_teletext/handlers/interactive.py
"""
Interactive main loop.

Single-threaded: every tick polls the keyboard (with an adaptive timeout), reacts to
keys and resizes, runs the refresh scheduler and redraws the page when it is dirty.
Fetches are synchronous, so at most one is in flight.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
import logging
import time
from typing import Callable, List, Optional, TextIO, Tuple

from ..exceptions import ErrorKind, LiigaError, RetryableError, classify
from ..models import Fetcher, Game, RunArgs
from ..services.seasons import format_date_for_display, is_historical_date, parse_date
from ..teletext.page import TeletextPage
from ..terminal import Key, terminal_size
from .change_detector import ChangeDetector
from .page_builder import PageBuilder
from .refresh_scheduler import (
    SchedulerState,
    can_manual_refresh,
    record_retryable_error,
    record_success,
    should_auto_refresh,
)

logger = logging.getLogger(__name__)

ACTIVE_POLL = 0.05
IDLE_POLL = 0.2
SLEEP_POLL = 0.5
ACTIVE_WINDOW = 5.0
IDLE_WINDOW = 30.0

PAGE_CHANGE_DEBOUNCE = 0.2
RESIZE_DEBOUNCE = 0.3
CACHE_MONITOR_INTERVAL = 60.0

NAVIGATION_BACK_DAYS = 30
NAVIGATION_FORWARD_DAYS = 60
NAVIGATION_FETCH_TIMEOUT = 15.0


def poll_timeout(idle_seconds: float) -> float:
    """Input poll timeout for the time since the last key press."""
    if idle_seconds < ACTIVE_WINDOW:
        return ACTIVE_POLL
    if idle_seconds < IDLE_WINDOW:
        return IDLE_POLL
    return SLEEP_POLL


@dataclass
class InteractiveController:
    """
    Owns the page and drives fetching, navigation and rendering.

    Collaborators are injected so the loop can be driven from tests with scripted keys,
    a fake clock and an in-memory output.
    """

    fetcher: Fetcher
    builder: PageBuilder
    args: RunArgs
    read_key: Callable[[float], Optional[Key]]
    has_input: Callable[[], bool]
    out: TextIO
    clock: Callable[[], float] = time.monotonic
    utc_now: Callable[[], datetime] = lambda: datetime.now(timezone.utc)
    size_fn: Callable[[], Tuple[int, int]] = terminal_size

    page: Optional[TeletextPage] = None
    games: List[Game] = field(default_factory=list)
    viewed_date: Optional[str] = None
    scheduler: SchedulerState = field(default_factory=SchedulerState)
    detector: ChangeDetector = field(default_factory=ChangeDetector)
    dirty: bool = True
    running: bool = True
    last_activity: float = 0.0
    last_page_change: Optional[float] = None
    last_cache_tick: float = 0.0
    resize_pending_since: Optional[float] = None
    last_size: Optional[Tuple[int, int]] = None

    def __post_init__(self):
        self.viewed_date = self.args.date
        self.last_size = self.size_fn()

    # ---- lifecycle -----------------------------------------------------

    def start(self) -> None:
        """Show the loading page and perform the first fetch."""
        now = self.clock()
        self.last_activity = now
        self.last_cache_tick = now
        self.page = self.builder.loading_page(self.viewed_date)
        self.render()
        self.refresh()
        self.scheduler.last_auto_refresh = self.clock()
        if self.dirty:
            self.render()

    def run(self, max_ticks: Optional[int] = None) -> int:
        """
        Run until 'q' (or max_ticks ticks, for tests).

        Returns:
            Process exit code.
        """
        self.start()
        ticks = 0
        while self.running:
            self.tick()
            ticks += 1
            if max_ticks is not None and ticks >= max_ticks:
                break
        logger.info("Interactive loop finished after %d ticks", ticks)
        return 0

    def tick(self) -> None:
        now = self.clock()
        key = self.read_key(poll_timeout(now - self.last_activity))
        now = self.clock()

        if key is not None:
            self.last_activity = now
            self.handle_key(key, now)
            if not self.running:
                return

        self.check_resize(now)
        self.maybe_auto_refresh(now)

        if now - self.last_cache_tick >= CACHE_MONITOR_INTERVAL:
            self.fetcher.cache_tick()
            self.last_cache_tick = now

        if self.page is not None and self.page.loading_indicator is not None:
            self.page.update_loading_animation()
            self.dirty = True

        if self.dirty:
            self.render()

    def render(self) -> None:
        if self.page is None:
            return
        self.page.render_buffered(self.out)
        self.dirty = False

    # ---- input ---------------------------------------------------------

    def handle_key(self, key: Key, now: float) -> None:
        if key == Key.QUIT:
            logger.info("Quit requested")
            self.running = False
        elif key == Key.REFRESH:
            self.manual_refresh(now)
        elif key in (Key.LEFT, Key.RIGHT):
            self.change_page(-1 if key == Key.LEFT else 1, now)
        elif key in (Key.SHIFT_LEFT, Key.SHIFT_RIGHT):
            self.navigate_date(-1 if key == Key.SHIFT_LEFT else 1)

    def change_page(self, step: int, now: float) -> None:
        if self.page is None or self.page.total_pages() <= 1:
            return
        if self.last_page_change is not None and now - self.last_page_change < PAGE_CHANGE_DEBOUNCE:
            return
        self.last_page_change = now
        if step < 0:
            self.page.previous_page()
        else:
            self.page.next_page()
        self.dirty = True

    def check_resize(self, now: float) -> None:
        size = self.size_fn()
        if size != self.last_size:
            self.last_size = size
            self.resize_pending_since = now
            return
        if self.resize_pending_since is not None and now - self.resize_pending_since >= RESIZE_DEBOUNCE:
            self.resize_pending_since = None
            if self.page is not None:
                self.page.handle_resize()
                self.dirty = True

    # ---- refreshing ----------------------------------------------------

    def _today(self) -> date:
        return self.builder.now_fn().date()

    def maybe_auto_refresh(self, now: float) -> None:
        if self.page is None:
            return
        if not should_auto_refresh(
            self.scheduler,
            self.games,
            now,
            self.utc_now(),
            date_str=self.page.fetched_date,
            today=self._today(),
            min_interval_override=self.args.min_refresh_interval,
            auto_refresh_disabled=self.page.auto_refresh_disabled,
        ):
            return

        logger.debug("Auto refresh")
        self.page.show_auto_refresh_indicator()
        self.render()
        self.refresh()
        self.scheduler.last_auto_refresh = self.clock()
        if self.page is not None:
            self.page.hide_auto_refresh_indicator()
            self.dirty = True

    def manual_refresh(self, now: float) -> None:
        if self.page is None:
            return
        if not can_manual_refresh(
            self.scheduler,
            now,
            date_str=self.page.fetched_date,
            today=self._today(),
            auto_refresh_disabled=self.page.auto_refresh_disabled,
        ):
            logger.debug("Manual refresh suppressed")
            return
        self.scheduler.last_manual_refresh = now
        logger.info("Manual refresh")
        self.refresh()
        self.scheduler.last_auto_refresh = self.clock()

    def refresh(self) -> None:
        """
        Fetch the viewed date and swap the page when the data changed.

        Retryable errors keep the current page and raise the footer warning; not-found
        and data-shape errors replace the page with an error page. Config and fatal
        errors propagate.
        """
        try:
            games, fetched_date = self.fetcher.fetch(self.viewed_date)
        except LiigaError as e:
            self._handle_fetch_error(e)
            return

        record_success(self.scheduler)
        changed = self.detector.has_changed(games)
        self.detector.all_scheduled_signal(games)
        stale = self.page is None or self.page.has_error_messages() or self.page.fetched_date != fetched_date
        if changed or stale:
            self.apply(games, fetched_date)
        elif self.page is not None and self.page.error_warning_active:
            self.page.set_error_warning(False)
            self.dirty = True

    def apply(self, games: List[Game], fetched_date: str, keep_page: bool = True) -> None:
        """Swap in a page built from games."""
        index = self.page.current_page if (keep_page and self.page is not None) else 0
        self.games = list(games)
        self.page = self.builder.build(self.games, fetched_date, self.viewed_date)
        self.page.set_current_page(index)
        self.dirty = True
        logger.info("Page updated for %s (%d games)", fetched_date, len(games))

    def _handle_fetch_error(self, e: LiigaError) -> None:
        kind = classify(e)
        if kind == ErrorKind.RETRYABLE:
            retry_after = e.retry_after if isinstance(e, RetryableError) else None
            record_retryable_error(self.scheduler, self.clock(), retry_after)
            if self.page is not None:
                self.page.set_error_warning(True)
            self.dirty = True
            return
        if kind in (ErrorKind.NOT_FOUND, ErrorKind.DATA_SHAPE):
            logger.error("Fetch failed: %s", e)
            self.games = []
            self.detector.has_changed([])
            fetched = self.page.fetched_date if self.page is not None else self.viewed_date
            self.page = self.builder.error_page(e.message, self.viewed_date or fetched)
            self.dirty = True
            return
        raise e

    # ---- date navigation ------------------------------------------------

    def navigate_date(self, direction: int) -> None:
        if self.page is None:
            return
        current = self.page.fetched_date or self._today().strftime("%Y-%m-%d")
        found = self.find_date_with_games(current, direction)
        if self.page is not None:
            self.page.hide_loading()
            self.dirty = True
        if found is None:
            return

        new_date, games = found
        self.viewed_date = new_date
        self.detector.has_changed(games)
        self.detector.all_scheduled_signal(games)
        self.apply(games, new_date, keep_page=False)
        self.scheduler.last_auto_refresh = self.clock()

    def find_date_with_games(self, start_date: str, direction: int) -> Optional[Tuple[str, List[Game]]]:
        """
        Walk day by day from start_date until a date with games is found.

        Args:
            start_date: YYYY-MM-DD to start from (not fetched itself).
            direction: -1 for earlier dates, +1 for later dates.

        Returns:
            (date, games), or None when the search ran out, crossed into a previous
            season or was cancelled by a key press.
        """
        start = parse_date(start_date)
        limit = NAVIGATION_BACK_DAYS if direction < 0 else NAVIGATION_FORWARD_DAYS
        today = self._today()

        for step in range(1, limit + 1):
            candidate = (start + timedelta(days=direction * step)).strftime("%Y-%m-%d")
            if direction < 0 and is_historical_date(candidate, today):
                logger.info("Date navigation stopped at previous season boundary (%s)", candidate)
                return None
            if step > 1 and self.has_input():
                logger.info("Date navigation cancelled by key press")
                return None

            if self.page is not None:
                message = f"Haetaan {format_date_for_display(candidate)}"
                if self.page.loading_indicator is None:
                    self.page.show_loading(message)
                else:
                    self.page.loading_indicator.message = message
                    self.page.update_loading_animation()
                self.render()

            try:
                games, fetched = self.fetcher.fetch(candidate, timeout=NAVIGATION_FETCH_TIMEOUT)
            except LiigaError as e:
                if classify(e) in (ErrorKind.CONFIG, ErrorKind.FATAL):
                    raise
                logger.warning("Lookup %s failed: %s", candidate, e)
                continue

            if fetched != candidate:
                logger.debug("Lookup %s answered with %s, skipping", candidate, fetched)
                continue
            if games:
                logger.info("Date navigation found %d games on %s", len(games), candidate)
                return candidate, games

        logger.info("No games within %d days of %s", limit, start_date)
        return None
