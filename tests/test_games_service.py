from datetime import datetime, timezone

import pytest

from liiga_teletext.cache import TTLCache
from liiga_teletext.config import Config
from liiga_teletext.exceptions import ConfigError, NotFoundError
from liiga_teletext.models import ScoreType
from liiga_teletext.services.games_service import PLACEHOLDER_SCORER, GamesService

from fakes import FakeClock

NOW = datetime(2024, 1, 15, 15, 0, tzinfo=timezone.utc)


class FakeClient:
    def __init__(self, days=None, schedules=None, details=None):
        self.days = days or {}
        self.schedules = schedules or {}
        self.details = details or {}
        self.calls = []

    def games_for_date(self, tournament, date, timeout=None):
        self.calls.append((tournament, date, timeout))
        value = self.days.get((tournament, date), {"games": []})
        if isinstance(value, Exception):
            raise value
        return value

    def schedule(self, tournament, season, timeout=None):
        self.calls.append(("schedule", tournament, season))
        value = self.schedules.get((tournament, season), [])
        if isinstance(value, Exception):
            raise value
        return value

    def game_details(self, season, game_id, timeout=None):
        self.calls.append(("details", season, game_id))
        value = self.details.get(game_id, NotFoundError("Not found"))
        if isinstance(value, Exception):
            raise value
        return value


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("LIIGA_API_DOMAIN", "LIIGA_LOG_FILE", "LIIGA_HTTP_TIMEOUT", "TZ"):
        monkeypatch.delenv(name, raising=False)


def service(days=None, domain="https://api.example.com", schedules=None, details=None, now=NOW):
    client = FakeClient(days, schedules, details)
    svc = GamesService(
        client=client,
        cache=TTLCache(clock=FakeClock()),
        config=Config(api_domain=domain, tz_name="UTC"),
        now_fn=lambda: now,
    )
    return svc, client


def event(pid, first, last, seconds, home_score, away_score, types=("EV",), **extra):
    e = {
        "scorerPlayerId": pid,
        "scorerPlayer": {"firstName": first, "lastName": last},
        "gameTime": seconds,
        "homeTeamScore": home_score,
        "awayTeamScore": away_score,
        "goalTypes": list(types),
    }
    e.update(extra)
    return e


def api_game(home_events=(), away_events=(), home_goals=None, away_goals=None, **extra):
    g = {
        "id": 1,
        "start": "2024-01-15T16:30:00Z",
        "started": True,
        "ended": True,
        "gameTime": 3600,
        "homeTeam": {
            "teamName": "Tappara",
            "goals": len(home_events) if home_goals is None else home_goals,
            "goalEvents": list(home_events),
        },
        "awayTeam": {
            "teamName": "HIFK",
            "goals": len(away_events) if away_goals is None else away_goals,
            "goalEvents": list(away_events),
        },
    }
    g.update(extra)
    return g


def test_placeholder_domain_refuses_to_fetch():
    svc, client = service(domain="placeholder")
    with pytest.raises(ConfigError):
        svc.fetch()
    assert client.calls == []


def test_final_game_is_normalized():
    game = api_game(
        home_events=[
            event(1, "Mikko", "Koivu", 125, 1, 0),
            event(2, "Saku", "Koivu", 3100, 2, 1, types=("YV",), winningGoal=True, videoClipUrl="https://v/1"),
        ],
        away_events=[event(9, "Teemu", "Selänne", 2000, 1, 1)],
        finishedType="ENDED_DURING_REGULAR_GAME_TIME",
    )
    svc, client = service({("runkosarja", "2024-01-15"): {"games": [game]}})

    games, fetched = svc.fetch()

    assert fetched == "2024-01-15"
    assert client.calls == [("runkosarja", "2024-01-15", None)]
    g = games[0]
    assert (g.home_team, g.away_team, g.result, g.score_type) == ("Tappara", "HIFK", "2-1", ScoreType.FINAL)
    assert g.played_time == 3600
    assert [goal.scorer_name for goal in g.goals] == ["Koivu M.", "Selänne", "Koivu S."]
    assert [goal.minute for goal in g.goals] == [2, 33, 51]
    assert g.goals[2].is_winning_goal
    assert g.goals[2].video_clip_url == "https://v/1"
    assert not g.goals[1].is_home_team


def test_shootout_attempts_and_cancelled_goals_are_dropped():
    game = api_game(
        home_events=[event(1, "A", "Aho", 600, 1, 0), event(2, "B", "Berg", 3900, 2, 1, types=("RL0",))],
        away_events=[event(3, "C", "Cox", 900, 1, 1), event(4, "D", "Dahl", 1000, 1, 2, types=("VT0",))],
        finishedType="ENDED_DURING_WINNING_SHOT_COMPETITION",
    )
    svc, _ = service({("runkosarja", "2024-01-15"): {"games": [game]}})

    g = svc.fetch()[0][0]

    assert [goal.scorer_name for goal in g.goals] == ["Aho", "Cox"]
    assert g.is_shootout and not g.is_overtime


def test_scheduled_game_has_local_start_time_and_no_goals():
    game = api_game(started=False, ended=False, gameTime=0)
    svc, _ = service({("runkosarja", "2024-01-15"): {"games": [game]}})

    g = svc.fetch()[0][0]

    assert g.score_type == ScoreType.SCHEDULED
    assert g.time == "16:30"
    assert g.result == ""
    assert g.goals == ()


def test_recent_goal_marks_game_ongoing():
    recent = event(1, "A", "Aho", 60, 1, 0, logTime="2024-01-15T14:58:00Z")
    game = api_game(home_events=[recent], started=False, ended=False, gameTime=60)
    svc, _ = service({("runkosarja", "2024-01-15"): {"games": [game]}})

    g = svc.fetch()[0][0]

    assert g.score_type == ScoreType.ONGOING
    assert g.result == "1-0"


def test_missing_goal_events_produce_placeholders():
    game = api_game(home_goals=2, away_goals=1)
    svc, _ = service({("runkosarja", "2024-01-15"): {"games": [game]}})

    goals = svc.fetch()[0][0].goals

    assert [g.scorer_name for g in goals] == [PLACEHOLDER_SCORER] * 3
    assert [(g.home_score, g.away_score, g.is_home_team) for g in goals] == [
        (1, 0, True), (2, 0, True), (2, 1, False),
    ]


def test_empty_day_falls_back_to_next_game_date():
    days = {
        ("runkosarja", "2024-01-15"): {"games": [], "nextGameDate": "2024-01-17"},
        ("runkosarja", "2024-01-17"): {"games": [api_game()]},
    }
    svc, _ = service(days)

    games, fetched = svc.fetch()

    assert fetched == "2024-01-17"
    assert len(games) == 1


def test_empty_day_searches_forward():
    svc, client = service({("runkosarja", "2024-01-18"): {"games": [api_game()]}})

    games, fetched = svc.fetch()

    assert fetched == "2024-01-18"
    assert [c[1] for c in client.calls] == ["2024-01-15", "2024-01-16", "2024-01-17", "2024-01-18"]


def test_nothing_found_returns_requested_date():
    games, fetched = service()[0].fetch("2024-01-15")
    assert games == []
    assert fetched == "2024-01-15"


def test_all_tournaments_missing_raises_not_found():
    svc, _ = service({("runkosarja", "2024-01-15"): NotFoundError("Not found")})
    with pytest.raises(NotFoundError):
        svc.fetch("2024-01-15")


def test_finished_days_are_served_from_cache():
    svc, client = service({("runkosarja", "2024-01-15"): {"games": [api_game()]}})
    svc.fetch()
    svc.fetch()
    assert len(client.calls) == 1


def test_invalid_date_is_a_config_error():
    with pytest.raises(ConfigError):
        service()[0].fetch("15.01.2024")


def schedule_entry(game_id, start, home="Tappara", away="HIFK"):
    return {
        "id": game_id,
        "season": 2022,
        "start": start,
        "homeTeamName": home,
        "awayTeamName": away,
        "serie": 1,
        "started": True,
        "ended": True,
        "gameTime": 3600,
    }


def test_past_season_day_is_read_from_schedule_and_game_details():
    schedules = {
        ("runkosarja", 2022): [
            schedule_entry(7, "2022-02-10T17:30:00Z"),
            schedule_entry(8, "2022-02-11T17:30:00Z", home="Ilves"),
        ]
    }
    details = {
        7: {
            "game": {
                "started": True,
                "ended": True,
                "gameTime": 3900,
                "finishedType": "ENDED_DURING_EXTENDED_GAME_TIME",
                "homeTeam": {
                    "teamName": "Tappara",
                    "goals": 2,
                    "goalEvents": [
                        event(1, "Mikko", "Koivu", 600, 1, 0),
                        {"scorerPlayerId": 3, "gameTime": 3700, "homeTeamScore": 2, "awayTeamScore": 1, "goalTypes": ["EV"]},
                    ],
                },
                "awayTeam": {"teamName": "HIFK", "goals": 1, "goalEvents": [event(9, "Teemu", "Selänne", 2000, 1, 1)]},
            },
            "homeTeamPlayers": [{"id": 3, "firstName": "Jere", "lastName": "Lehtinen"}],
            "awayTeamPlayers": [],
        }
    }
    svc, client = service(schedules=schedules, details=details)

    games, fetched = svc.fetch("2022-02-10")

    assert fetched == "2022-02-10"
    assert client.calls == [("schedule", "runkosarja", 2022), ("details", 2022, 7)]
    g = games[0]
    assert len(games) == 1
    assert (g.home_team, g.away_team, g.result, g.score_type) == ("Tappara", "HIFK", "2-1", ScoreType.FINAL)
    assert g.is_overtime
    assert g.serie == "runkosarja"
    assert [goal.scorer_name for goal in g.goals] == ["Koivu", "Selänne", "Lehtinen"]


def test_off_season_playoff_day_uses_schedule():
    july = datetime(2024, 7, 1, 12, 0, tzinfo=timezone.utc)
    schedules = {("playoffs", 2024): {"games": [schedule_entry(30, "2024-04-10T15:30:00Z", away="Ilves")]}}
    svc, client = service(schedules=schedules, now=july)

    games, fetched = svc.fetch("2024-04-10")

    assert fetched == "2024-04-10"
    assert all(c[0] in ("schedule", "details") for c in client.calls)
    assert ("schedule", "playoffs", 2024) in client.calls
    g = games[0]
    assert (g.home_team, g.away_team, g.serie) == ("Tappara", "Ilves", "playoffs")
    assert g.result == "0-0"


def test_missing_schedules_raise_not_found():
    schedules = {("runkosarja", 2022): NotFoundError("Not found")}
    svc, _ = service(schedules=schedules)
    with pytest.raises(NotFoundError):
        svc.fetch("2022-02-10")


def test_archived_schedules_are_cached():
    svc, client = service(schedules={("runkosarja", 2022): [schedule_entry(7, "2022-02-10T17:30:00Z")]})
    svc.fetch("2022-02-10")
    svc.fetch("2022-02-11")
    assert [c for c in client.calls if c[0] == "schedule"] == [("schedule", "runkosarja", 2022)]
