from datetime import date

from liiga_teletext.cache import TTLCache
from liiga_teletext.exceptions import RetryableError
from liiga_teletext.liiga_client import LiigaClient
from liiga_teletext.services.season_countdown import SeasonCountdownService, days_until

from fakes import FakeClock


class ScheduleClient(LiigaClient):
    def __init__(self, seasons, base_url="https://api.example.com"):
        super().__init__(base_url)
        self.seasons = seasons
        self.calls = []

    def schedule(self, tournament, season, timeout=None):
        self.calls.append((tournament, season))
        value = self.seasons.get(season, [])
        if isinstance(value, Exception):
            raise value
        return value


def countdown(seasons, base_url="https://api.example.com"):
    client = ScheduleClient(seasons, base_url)
    return SeasonCountdownService(client=client, cache=TTLCache(clock=FakeClock())), client


def test_days_until():
    assert days_until(date(2024, 9, 10), date(2024, 8, 20)) == 21
    assert days_until(date(2024, 9, 10), date(2024, 9, 10)) is None
    assert days_until(None, date(2024, 9, 10)) is None


def test_first_game_of_current_year():
    svc, _ = countdown({2024: [{"start": "2024-09-12T16:30:00Z"}, {"start": "2024-09-10T15:00:00Z"}]})
    assert svc.regular_season_start(date(2024, 8, 20)) == date(2024, 9, 10)


def test_falls_back_to_next_year_and_caches():
    svc, client = countdown({
        2024: RetryableError("timeout"),
        2025: {"games": [{"start": "2025-09-11T16:30:00Z"}, {"start": None}]},
    })
    today = date(2024, 11, 1)
    assert svc.regular_season_start(today) == date(2025, 9, 11)
    svc.regular_season_start(today)
    assert client.calls.count(("runkosarja", 2025)) == 1


def test_started_season_has_no_countdown():
    svc, _ = countdown({2024: [{"start": "2024-09-10T15:00:00Z"}]})
    assert svc.regular_season_start(date(2024, 10, 1)) is None


def test_placeholder_domain_skips_lookup():
    svc, client = countdown({}, base_url="placeholder")
    assert svc.regular_season_start(date(2024, 8, 1)) is None
    assert client.calls == []
