from datetime import date, datetime, timedelta, timezone
import random

import pytest

from liiga_teletext.handlers.refresh_scheduler import (
    MANUAL_REFRESH_COOLDOWN,
    SchedulerState,
    can_manual_refresh,
    min_interval,
    record_retryable_error,
    record_success,
    should_auto_refresh,
    target_interval,
)
from liiga_teletext.models import ScoreType

from builders import make_game

NOW_UTC = datetime(2024, 1, 15, 15, 0, tzinfo=timezone.utc)
TODAY = date(2024, 1, 15)


def iso(dt):
    return dt.strftime("%Y-%m-%dT%H:%M:%SZ")


def scheduled_at(delta):
    return make_game(status=ScoreType.SCHEDULED, start=iso(NOW_UTC + delta))


def live():
    return make_game(status=ScoreType.ONGOING, result="1-0", played_time=600)


def decide(state, games, now, **kwargs):
    kwargs.setdefault("date_str", "2024-01-15")
    kwargs.setdefault("today", TODAY)
    return should_auto_refresh(state, games, now, NOW_UTC, **kwargs)


def test_target_interval():
    assert target_interval([live()], NOW_UTC) == 15
    assert target_interval([scheduled_at(timedelta(minutes=4))], NOW_UTC) == 30
    assert target_interval([scheduled_at(timedelta(minutes=8))], NOW_UTC) == 60
    assert target_interval([scheduled_at(timedelta(minutes=-8))], NOW_UTC) == 30
    assert target_interval([scheduled_at(timedelta(minutes=-12))], NOW_UTC) == 60
    assert target_interval([scheduled_at(timedelta(hours=3))], NOW_UTC) == 60
    assert target_interval([make_game(result="2-1")], NOW_UTC) == 60


@pytest.mark.parametrize("count, expected", [(0, 10), (1, 10), (3, 10), (4, 20), (5, 20), (6, 30), (9, 30)])
def test_min_interval_by_game_count(count, expected):
    assert min_interval(count) == expected


def test_min_interval_override():
    assert min_interval(8, override=5) == 5


def test_live_games_refresh_every_15_seconds():
    state = SchedulerState(last_auto_refresh=100.0)
    assert not decide(state, [live()], 110.0)
    assert decide(state, [live()], 115.0)


def test_min_interval_beats_target_interval():
    state = SchedulerState(last_auto_refresh=100.0)
    games = [live() for _ in range(6)]
    assert not decide(state, games, 120.0)
    assert decide(state, games, 130.0)


def test_s5_rate_limit_backoff():
    state = SchedulerState(last_auto_refresh=0.0)
    backoff = record_retryable_error(state, now=100.0, retry_after=60, rng=random.Random(7))
    assert 1.6 <= backoff <= 2.4

    assert not decide(state, [live()], 100.0 + 1.5)
    assert decide(state, [live()], 100.0 + 2.5)

    record_success(state)
    assert state.backoff == 0
    assert state.backoff_base == 0


def test_backoff_doubles_and_caps():
    state = SchedulerState()
    rng = random.Random(3)
    bases = []
    for i in range(6):
        record_retryable_error(state, now=float(i), rng=rng)
        bases.append(state.backoff_base)
        assert 0.8 * state.backoff_base <= state.backoff <= 1.2 * state.backoff_base
    assert bases == [2.0, 4.0, 8.0, 10.0, 10.0, 10.0]


def test_s6_all_scheduled_suppression_and_recovery():
    state = SchedulerState(last_auto_refresh=0.0)
    far = [scheduled_at(timedelta(hours=4)), scheduled_at(timedelta(hours=5))]
    assert not decide(state, far, 10_000.0)

    # empty list after navigation: recovery fetch
    assert decide(state, [], 10_000.0)
    # still bounded by the minimum interval
    state.last_auto_refresh = 9_995.0
    assert not decide(state, [], 10_000.0)


def test_starting_soon_lifts_suppression():
    state = SchedulerState(last_auto_refresh=0.0)
    games = [scheduled_at(timedelta(hours=4)), scheduled_at(timedelta(minutes=5))]
    assert decide(state, games, 1_000.0)


def test_historical_date_never_refreshes():
    state = SchedulerState()
    assert not decide(state, [], 1_000.0, date_str="2023-07-01", today=date(2023, 10, 1))
    assert not can_manual_refresh(state, 1_000.0, date_str="2023-07-01", today=date(2023, 10, 1))


def test_disabled_page_blocks_auto_and_manual():
    state = SchedulerState()
    assert not decide(state, [live()], 1_000.0, auto_refresh_disabled=True)
    assert not can_manual_refresh(state, 1_000.0, auto_refresh_disabled=True)


def test_manual_refresh_cooldown():
    state = SchedulerState(last_manual_refresh=100.0)
    assert not can_manual_refresh(state, 100.0 + MANUAL_REFRESH_COOLDOWN - 1)
    assert can_manual_refresh(state, 100.0 + MANUAL_REFRESH_COOLDOWN)


def test_game_past_start_but_still_scheduled_keeps_refreshing():
    state = SchedulerState(last_auto_refresh=0.0)
    lagging = [scheduled_at(timedelta(minutes=-8)), scheduled_at(timedelta(hours=3))]
    assert decide(state, lagging, 1_000.0)

    gone_quiet = [scheduled_at(timedelta(minutes=-12))]
    assert not decide(state, gone_quiet, 1_000.0)
