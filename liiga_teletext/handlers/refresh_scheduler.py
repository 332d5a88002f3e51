# liiga_teletext/handlers/refresh_scheduler.py
"""
When to fetch again.

Everything here is a function of (state, games, clock values) so it can be tested
without sleeping. `now` values are monotonic seconds; `now_utc` is wall time used to
compare against game start times.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
import logging
import random
from typing import Optional, Sequence

from ..models import Game, ScoreType
from ..services.games_service import parse_api_datetime
from ..services.seasons import is_historical_date
from .change_detector import all_scheduled

logger = logging.getLogger(__name__)

LIVE_INTERVAL = 15
STARTING_SOON_INTERVAL = 30
IDLE_INTERVAL = 60

STARTING_WINDOW_BEFORE = timedelta(minutes=5)
STARTING_WINDOW_AFTER = timedelta(minutes=10)

MANUAL_REFRESH_COOLDOWN = 15

INITIAL_BACKOFF = 2.0
MAX_BACKOFF = 10.0
BACKOFF_JITTER = 0.2


@dataclass
class SchedulerState:
    """Timestamps (monotonic seconds) and backoff carried between ticks."""
    last_auto_refresh: Optional[float] = None
    last_manual_refresh: Optional[float] = None
    last_rate_limit_hit: Optional[float] = None
    backoff_base: float = 0.0
    backoff: float = 0.0


def is_near_start(game: Game, now_utc: datetime) -> bool:
    """Scheduled game starting within 5 minutes or past its start by up to 10 minutes (status lag)."""
    if game.score_type != ScoreType.SCHEDULED:
        return False
    start = parse_api_datetime(game.start)
    if start is None:
        return False
    delta = start - now_utc
    return -STARTING_WINDOW_AFTER <= delta <= STARTING_WINDOW_BEFORE


def target_interval(games: Sequence[Game], now_utc: datetime) -> int:
    """Desired seconds between refreshes: 15 live, 30 near a start, 60 otherwise."""
    if any(g.score_type == ScoreType.ONGOING for g in games):
        return LIVE_INTERVAL
    if any(is_near_start(g, now_utc) for g in games):
        return STARTING_SOON_INTERVAL
    return IDLE_INTERVAL


def min_interval(game_count: int, override: Optional[int] = None) -> int:
    """Lower bound between refreshes; busier days poll less often."""
    if override is not None:
        return override
    if game_count >= 6:
        return 30
    if game_count >= 4:
        return 20
    return 10


def _elapsed(since: Optional[float], now: float) -> float:
    """Seconds since a timestamp; infinite when it never happened."""
    return float("inf") if since is None else now - since


def _elapsed_ok(state: SchedulerState, now: float) -> bool:
    """True once the rate-limit backoff has passed."""
    return _elapsed(state.last_rate_limit_hit, now) >= state.backoff


def should_auto_refresh(
    state: SchedulerState,
    games: Sequence[Game],
    now: float,
    now_utc: datetime,
    date_str: Optional[str] = None,
    today: Optional[date] = None,
    min_interval_override: Optional[int] = None,
    auto_refresh_disabled: bool = False,
) -> bool:
    """
    Decide whether the loop should fetch on this tick.

    Args:
        state: scheduler timestamps and backoff.
        games: games currently shown.
        now: monotonic seconds.
        now_utc: aware wall clock for start-time comparisons.
        date_str: date being viewed, None when following "today".
        today: local date used for the historical check.
        min_interval_override: --min-refresh-interval.
        auto_refresh_disabled: set by pages that never change (future/historical).

    Returns:
        True when every guard passes.
    """
    if auto_refresh_disabled:
        return False
    if date_str and is_historical_date(date_str, today):
        return False
    if not _elapsed_ok(state, now):
        return False

    elapsed = _elapsed(state.last_auto_refresh, now)
    if elapsed < min_interval(len(games), min_interval_override):
        return False

    if not games:
        # Recovery: an empty page always gets another try
        return True

    if all_scheduled(games) and not any(is_near_start(g, now_utc) for g in games):
        return False

    return elapsed >= target_interval(games, now_utc)


def can_manual_refresh(
    state: SchedulerState,
    now: float,
    date_str: Optional[str] = None,
    today: Optional[date] = None,
    auto_refresh_disabled: bool = False,
) -> bool:
    """True when 'r' may fetch now: the page is refreshable and the 15 s cooldown is over."""
    if auto_refresh_disabled:
        return False
    if date_str and is_historical_date(date_str, today):
        return False
    return _elapsed(state.last_manual_refresh, now) >= MANUAL_REFRESH_COOLDOWN


def record_retryable_error(
    state: SchedulerState,
    now: float,
    retry_after: Optional[float] = None,
    rng: Optional[random.Random] = None,
) -> float:
    """
    Grow the backoff after a retryable failure.

    The base doubles from INITIAL_BACKOFF up to MAX_BACKOFF and the applied value gets
    +-20% jitter. The server's retry hint is only logged.

    Returns:
        The jittered backoff in seconds.
    """
    rng = rng or random
    state.backoff_base = INITIAL_BACKOFF if state.backoff_base <= 0 else min(state.backoff_base * 2, MAX_BACKOFF)
    state.backoff = state.backoff_base * rng.uniform(1 - BACKOFF_JITTER, 1 + BACKOFF_JITTER)
    state.last_rate_limit_hit = now
    logger.warning(
        "Fetch failed, backing off %.1fs (server hint: %s)",
        state.backoff,
        f"{retry_after:.0f}s" if retry_after is not None else "none",
    )
    return state.backoff


def record_success(state: SchedulerState) -> None:
    """Clear the backoff after a successful fetch."""
    if state.backoff:
        logger.info("Fetch recovered, backoff reset")
    state.backoff_base = 0.0
    state.backoff = 0.0
    state.last_rate_limit_hit = None
