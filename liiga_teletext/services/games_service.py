# liiga_teletext/services/games_service.py
"""
Liiga game fetching.

Responsibilities:
  - pick the date and the tournaments to query
  - fetch tournament day payloads (cached, lifetime depends on game state)
  - fall back to the next game date when a day is empty
  - normalize API games into Game / Goal models
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..cache import TTLCache
from ..config import Config
from ..exceptions import ConfigError, DataShapeError, LiigaError, NotFoundError
from ..liiga_client import LiigaClient
from ..models import Game, Goal, ScoreType
from .player_names import disambiguate, fallback_name
from .seasons import (
    determine_fetch_date,
    is_historical_date,
    parse_date,
    pick_next_game_date,
    season_for_date,
    should_use_schedule_for_playoffs,
    tournaments_for_month,
    uses_archive_cache,
)

logger = logging.getLogger(__name__)

LIVE_GAMES_TTL = 8
COMPLETED_GAMES_TTL = 3600
STARTING_GAMES_TTL = 30

FORWARD_SEARCH_DAYS = 7
RECENT_GOAL_WINDOW = timedelta(minutes=5)

FINISHED_OVERTIME = "ENDED_DURING_EXTENDED_GAME_TIME"
FINISHED_SHOOTOUT = "ENDED_DURING_WINNING_SHOT_COMPETITION"

PLACEHOLDER_SCORER = "Tuntematon pelaaja"


def parse_api_datetime(raw: Any) -> Optional[datetime]:
    """Parse an API timestamp; naive values are taken as UTC."""
    if not raw:
        return None
    try:
        dt = datetime.fromisoformat(str(raw).replace("Z", "+00:00"))
    except ValueError:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


@dataclass
class GamesService:
    """Fetcher implementation backed by the Liiga API."""

    client: LiigaClient
    cache: TTLCache
    config: Config
    now_fn: Optional[Callable[[], datetime]] = None

    def _now_local(self) -> datetime:
        """Return the current time in the configured timezone."""
        if self.now_fn is not None:
            return self.now_fn()
        return datetime.now(tz=self.config.local_tz)

    def cache_tick(self) -> None:
        self.cache.evict_expired()

    def fetch(self, date: Optional[str] = None, timeout: Optional[float] = None) -> Tuple[List[Game], str]:
        """
        Fetch the games to show for a date.

        Args:
            date: YYYY-MM-DD, or None to choose today/yesterday by the noon cutoff.
            timeout: optional per-request timeout cap in seconds.

        Returns:
            (games, canonical_date) where canonical_date is the date that yielded the games.

        Raises:
            ConfigError when the API domain is a placeholder; RetryableError on transient
            failures; NotFoundError/DataShapeError when no tournament could be read.
        """
        if self.config.has_placeholder_domain:
            raise ConfigError("LIIGA_API_DOMAIN is not configured; refusing to call the API")

        now = self._now_local()
        target, pre_noon = determine_fetch_date(date, now)
        try:
            target_date = parse_date(target)
        except ValueError as e:
            raise ConfigError(f"Invalid date {target!r}, expected YYYY-MM-DD") from e

        today = now.date()
        if is_historical_date(target, today) or should_use_schedule_for_playoffs(target, today):
            games = self.fetch_historical_games(target, now, timeout)
            logger.info("Fetched %d archived games for %s from the season schedule", len(games), target)
            return games, target

        responses = self._fetch_day(target, timeout)
        games = self._games_from_responses(responses, now)
        if games:
            logger.info("Fetched %d games for %s", len(games), target)
            return games, target

        if pre_noon:
            logger.info("No games for %s (pre-noon cutoff date), looking ahead", target)

        candidates = [(t, str(p.get("nextGameDate") or "")) for t, p in responses.items()]
        next_date = pick_next_game_date(candidates, now.date())
        if next_date and next_date != target:
            games = self._games_from_responses(self._fetch_day(next_date, timeout), now)
            if games:
                logger.info("Using next game date %s (%d games)", next_date, len(games))
                return games, next_date

        for offset in range(1, FORWARD_SEARCH_DAYS + 1):
            later_date = (target_date + timedelta(days=offset)).strftime("%Y-%m-%d")
            if later_date == next_date:
                continue
            games = self._games_from_responses(self._fetch_day(later_date, timeout), now)
            if games:
                logger.info("Found %d games on %s after forward search", len(games), later_date)
                return games, later_date

        logger.info("No games found around %s", target)
        return [], target

    def _fetch_day(self, date: str, timeout: Optional[float]) -> Dict[str, Dict[str, Any]]:
        """
        Fetch every relevant tournament for a date.

        Tournaments that are missing or malformed are skipped; if all of them fail the last
        error is raised so the caller can show it.
        """
        tournaments = tournaments_for_month(parse_date(date).month)
        responses: Dict[str, Dict[str, Any]] = {}
        last_error: Optional[LiigaError] = None

        for t in tournaments:
            try:
                payload = self.cache.get_or_set(
                    key=f"{t}-{date}",
                    ttl_seconds=lambda p, d=date: self._ttl_for(p, d),
                    loader=lambda t=t: self._load_day(t, date, timeout),
                )
            except (NotFoundError, DataShapeError) as e:
                logger.warning("Skipping tournament %s on %s: %s", t, date, e)
                last_error = e
                continue
            responses[t] = payload

        if not responses and last_error is not None:
            raise last_error
        return responses

    def _load_day(self, tournament: str, date: str, timeout: Optional[float]) -> Dict[str, Any]:
        """Fetch one tournament day and check its outer shape."""
        payload = self.client.games_for_date(tournament, date, timeout=timeout)
        if isinstance(payload, list):
            payload = {"games": payload}
        if not isinstance(payload, dict) or not isinstance(payload.get("games", []), list):
            raise DataShapeError("Unexpected games payload", context={"tournament": tournament, "date": date})
        payload.setdefault("games", [])
        return payload

    def fetch_historical_games(self, date: str, now: datetime, timeout: Optional[float] = None) -> List[Game]:
        """
        Games of a past season's day, read from the season schedules.

        Every tournament that can play in the date's month is loaded, filtered to games
        starting on the date, and each match is completed from its detailed game record
        (scores and goal events).

        Raises:
            RetryableError on transient failures; NotFoundError/DataShapeError when no
            schedule could be read.
        """
        d = parse_date(date)
        season = season_for_date(d)
        games: List[Game] = []
        loaded = 0
        last_error: Optional[LiigaError] = None

        for t in tournaments_for_month(d.month):
            try:
                schedule = self.cache.get_or_set(
                    key=f"schedule-{t}-{season}",
                    ttl_seconds=COMPLETED_GAMES_TTL,
                    loader=lambda t=t: self.client.schedule(t, season, timeout=timeout),
                )
            except (NotFoundError, DataShapeError) as e:
                logger.warning("Skipping %s schedule for season %s: %s", t, season, e)
                last_error = e
                continue
            loaded += 1

            entries = schedule.get("games") if isinstance(schedule, dict) else schedule
            for entry in entries or []:
                if isinstance(entry, dict) and str(entry.get("start") or "")[:10] == date:
                    games.append(self._archived_game(entry, season, t, now, timeout))

        if not loaded and last_error is not None:
            raise last_error
        return games

    def _archived_game(
        self, entry: Dict[str, Any], season: int, tournament: str, now: datetime, timeout: Optional[float]
    ) -> Game:
        """Merge a schedule entry with its detailed record into a games-endpoint shaped dict."""
        raw: Dict[str, Any] = {
            "id": entry.get("id"),
            "start": entry.get("start"),
            "started": entry.get("started"),
            "ended": entry.get("ended"),
            "finishedType": entry.get("finishedType"),
            "gameTime": entry.get("gameTime"),
            "homeTeam": {"teamName": entry.get("homeTeamName"), "goals": 0},
            "awayTeam": {"teamName": entry.get("awayTeamName"), "goals": 0},
        }
        try:
            details = self.cache.get_or_set(
                key=f"game-{season}-{entry.get('id')}",
                ttl_seconds=COMPLETED_GAMES_TTL,
                loader=lambda: self.client.game_details(season, _int(entry.get("id")), timeout=timeout),
            )
        except (NotFoundError, DataShapeError) as e:
            logger.warning("No details for archived game %s: %s", entry.get("id"), e)
            details = {}

        game = details.get("game") if isinstance(details, dict) else None
        if isinstance(game, dict):
            for key in ("started", "ended", "finishedType", "gameTime"):
                if game.get(key) is not None:
                    raw[key] = game[key]
            for side, players_key in (("homeTeam", "homeTeamPlayers"), ("awayTeam", "awayTeamPlayers")):
                team = game.get(side) or {}
                raw[side] = {
                    "teamName": team.get("teamName") or raw[side]["teamName"],
                    "goals": team.get("goals", 0),
                    "goalEvents": _with_scorers(team.get("goalEvents") or [], details.get(players_key) or []),
                }
        return self.game_from_api(raw, now, default_serie=tournament)

    def _ttl_for(self, payload: Dict[str, Any], date: str) -> int:
        """Live days expire fast, finished days slowly."""
        if uses_archive_cache(date, self._now_local().date()):
            return COMPLETED_GAMES_TTL
        games = payload.get("games") or []
        if any(g.get("started") and not g.get("ended") for g in games):
            return LIVE_GAMES_TTL
        if games and all(g.get("ended") for g in games):
            return COMPLETED_GAMES_TTL
        return STARTING_GAMES_TTL

    def _games_from_responses(self, responses: Dict[str, Dict[str, Any]], now: datetime) -> List[Game]:
        out: List[Game] = []
        for tournament, payload in responses.items():
            for raw in payload.get("games") or []:
                out.append(self.game_from_api(raw, now, default_serie=tournament))
        return out

    def game_from_api(self, g: Dict[str, Any], now: datetime, default_serie: str = "runkosarja") -> Game:
        """
        Normalize one API game.

        Raises:
            DataShapeError if required fields are missing.
        """
        try:
            home = g["homeTeam"]
            away = g["awayTeam"]
            start = str(g["start"])
        except (KeyError, TypeError) as e:
            raise DataShapeError(f"Game is missing required field: {e}", context={"id": g.get("id") if isinstance(g, dict) else None}) from e

        score_type, is_overtime, is_shootout = self.game_status(g, now)
        scheduled = score_type == ScoreType.SCHEDULED

        return Game(
            home_team=self._team_name(home),
            away_team=self._team_name(away),
            time=self._format_start(start) if scheduled else "",
            result="" if scheduled else f"{_int(home.get('goals'))}-{_int(away.get('goals'))}",
            score_type=score_type,
            is_overtime=is_overtime,
            is_shootout=is_shootout,
            serie=str(g.get("serie") or default_serie).lower(),
            played_time=0 if scheduled else max(0, _int(g.get("gameTime"))),
            start=start,
            goals=() if scheduled else tuple(self.goals_for_game(g)),
        )

    def game_status(self, g: Dict[str, Any], now: datetime) -> Tuple[ScoreType, bool, bool]:
        """
        Return (status, overtime, shootout).

        A game counts as live once the API marks it started, or when a goal was logged
        within the last few minutes (the started flag can lag behind).
        """
        finished = g.get("finishedType") or ""
        is_overtime = finished == FINISHED_OVERTIME
        is_shootout = finished == FINISHED_SHOOTOUT

        if g.get("ended"):
            return ScoreType.FINAL, is_overtime, is_shootout
        if g.get("started") or self._has_recent_goal(g, now):
            return ScoreType.ONGOING, is_overtime, is_shootout
        return ScoreType.SCHEDULED, False, False

    def _has_recent_goal(self, g: Dict[str, Any], now: datetime) -> bool:
        for side in ("homeTeam", "awayTeam"):
            for e in (g.get(side) or {}).get("goalEvents") or []:
                logged = parse_api_datetime(e.get("logTime"))
                if logged and timedelta(0) <= now - logged <= RECENT_GOAL_WINDOW:
                    return True
        return False

    def goals_for_game(self, g: Dict[str, Any]) -> List[Goal]:
        """
        Build the goal list for both teams, sorted by running total score.

        Shootout attempts (RL0) and cancelled goals (VT0) are dropped. When the API gives
        a score but no events, placeholder goals keep the scorer rows consistent.
        """
        home = g.get("homeTeam") or {}
        away = g.get("awayTeam") or {}
        home_events = home.get("goalEvents") or []
        away_events = away.get("goalEvents") or []

        if not home_events and not away_events:
            return self._placeholder_goals(_int(home.get("goals")), _int(away.get("goals")), g.get("id"))

        goals: List[Goal] = []
        for is_home, events in ((True, home_events), (False, away_events)):
            names = self._scorer_names(events)
            for e in events:
                types = tuple(e.get("goalTypes") or ())
                if "RL0" in types or "VT0" in types:
                    continue
                pid = _int(e.get("scorerPlayerId"))
                goals.append(Goal(
                    scorer_player_id=pid,
                    scorer_name=names.get(pid) or fallback_name(pid),
                    minute=max(0, _int(e.get("gameTime")) // 60),
                    home_score=_int(e.get("homeTeamScore")),
                    away_score=_int(e.get("awayTeamScore")),
                    is_winning_goal=bool(e.get("winningGoal")),
                    goal_types=types,
                    is_home_team=is_home,
                    video_clip_url=e.get("videoClipUrl") or None,
                ))

        goals.sort(key=lambda x: x.total_score)
        return goals

    @staticmethod
    def _scorer_names(events: List[Dict[str, Any]]) -> Dict[int, str]:
        """Disambiguated display names for one team's scorers."""
        players: Dict[int, Tuple[str, str]] = {}
        for e in events:
            p = e.get("scorerPlayer") or {}
            first = (p.get("firstName") or "").strip()
            last = (p.get("lastName") or "").strip()
            if last:
                players[_int(e.get("scorerPlayerId"))] = (first, last)
            elif first:
                players[_int(e.get("scorerPlayerId"))] = ("", first)
        return disambiguate((pid, first, last) for pid, (first, last) in players.items())

    @staticmethod
    def _placeholder_goals(home_goals: int, away_goals: int, game_id: Any) -> List[Goal]:
        if home_goals + away_goals == 0:
            return []
        logger.warning(
            "Game %s: no goal events for score %d-%d, using placeholders", game_id, home_goals, away_goals
        )
        goals = [
            Goal(0, PLACEHOLDER_SCORER, 0, home_score=i + 1, away_score=0, is_home_team=True)
            for i in range(home_goals)
        ]
        goals += [
            Goal(0, PLACEHOLDER_SCORER, 0, home_score=home_goals, away_score=i + 1, is_home_team=False)
            for i in range(away_goals)
        ]
        return goals

    @staticmethod
    def _team_name(team: Dict[str, Any]) -> str:
        return team.get("teamName") or team.get("teamPlaceholder") or "Unknown"

    def _format_start(self, start: str) -> str:
        """Local 'HH:MM' for a UTC start timestamp."""
        dt = parse_api_datetime(start)
        if dt is None:
            return ""
        return dt.astimezone(self.config.local_tz).strftime("%H:%M")


def _int(v, default: int = 0) -> int:
    """Convert a value to int safely; return default on failures."""
    try:
        return int(v)
    except (TypeError, ValueError):
        return default


def _with_scorers(events: List[Dict[str, Any]], players: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Attach scorerPlayer names from a detailed game's player list where the event lacks them."""
    by_id = {_int(p.get("id")): p for p in players if isinstance(p, dict)}
    out = []
    for e in events:
        if not e.get("scorerPlayer"):
            p = by_id.get(_int(e.get("scorerPlayerId")))
            if p is not None:
                e = dict(e, scorerPlayer={"firstName": p.get("firstName"), "lastName": p.get("lastName")})
        out.append(e)
    return out
