# liiga_teletext/models.py
"""
Domain models shared by the fetcher, the teletext page and the controller.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Protocol, Sequence, Tuple, Union


class ScoreType(str, Enum):
    """Lifecycle state of a game."""
    SCHEDULED = "scheduled"
    ONGOING = "ongoing"
    FINAL = "final"


TOURNAMENTS: Tuple[str, ...] = (
    "runkosarja",
    "playoffs",
    "playout",
    "qualifications",
    "valmistavat_ottelut",
)

# Display order for goal type codes; EV is only shown when it is the only code.
GOAL_TYPE_ORDER: Tuple[str, ...] = ("YV", "YV2", "IM", "VT", "AV", "TM", "VL", "MV", "RV")


@dataclass(frozen=True)
class Goal:
    """A single scoring event with the scorer name already resolved for display."""
    scorer_player_id: int
    scorer_name: str
    minute: int
    home_score: int
    away_score: int
    is_winning_goal: bool = False
    goal_types: Tuple[str, ...] = ()
    is_home_team: bool = True
    video_clip_url: Optional[str] = None

    @property
    def total_score(self) -> int:
        return self.home_score + self.away_score

    def goal_type_display(self) -> str:
        """
        Build the goal type tag string, e.g. "YV IM".

        Known codes are emitted in a fixed order. "EV" (even strength) is noise next
        to other codes, so it only shows when it is the sole code.
        """
        codes = [c for c in GOAL_TYPE_ORDER if c in self.goal_types]
        if not codes and tuple(self.goal_types) == ("EV",):
            return "EV"
        return " ".join(codes)


@dataclass(frozen=True)
class Game:
    """Immutable snapshot of one match."""
    home_team: str
    away_team: str
    time: str           # local start "HH:MM", only for scheduled games
    result: str         # "3-2", empty when scheduled
    score_type: ScoreType
    is_overtime: bool
    is_shootout: bool
    serie: str
    played_time: int    # seconds
    start: str          # ISO 8601 UTC
    goals: Tuple[Goal, ...] = ()

    def __post_init__(self):
        if self.is_overtime and self.is_shootout:
            raise ValueError("a game cannot end both in overtime and in a shootout")
        if self.played_time < 0:
            raise ValueError("played_time must be >= 0")
        if self.score_type == ScoreType.SCHEDULED and (self.result or self.goals):
            raise ValueError("scheduled games carry no result and no goals")

    @property
    def home_goals(self) -> List[Goal]:
        return [g for g in self.goals if g.is_home_team]

    @property
    def away_goals(self) -> List[Goal]:
        return [g for g in self.goals if not g.is_home_team]

    @property
    def scorer_rows(self) -> int:
        """Number of scorer lines the game occupies under its team line."""
        if self.score_type == ScoreType.SCHEDULED or not self.goals:
            return 0
        return max(len(self.home_goals), len(self.away_goals))

    def result_text(self) -> str:
        """Result with the overtime ("ja") or shootout ("rl") suffix."""
        if self.is_shootout:
            return f"{self.result} rl"
        if self.is_overtime:
            return f"{self.result} ja"
        return self.result


@dataclass(frozen=True)
class GameRow:
    game: Game


@dataclass(frozen=True)
class ErrorLine:
    text: str


@dataclass(frozen=True)
class FutureGamesHeader:
    text: str


ContentRow = Union[GameRow, ErrorLine, FutureGamesHeader]


@dataclass(frozen=True)
class RunArgs:
    """Resolved command line options for one run."""
    date: Optional[str] = None
    disable_links: bool = False
    compact: bool = False
    wide: bool = False
    once: bool = False
    debug: bool = False
    min_refresh_interval: Optional[int] = None
    log_file: Optional[str] = None
    set_log_file: Optional[str] = None
    clear_log_file: bool = False
    new_api_domain: Optional[str] = None
    list_config: bool = False
    version: bool = False

    @property
    def mutates_config(self) -> bool:
        return bool(self.new_api_domain or self.set_log_file or self.clear_log_file)


def games_from_rows(rows: Sequence[ContentRow]) -> List[Game]:
    """Pick the games out of a mixed content row sequence."""
    return [r.game for r in rows if isinstance(r, GameRow)]


class Fetcher(Protocol):
    """What the controller needs from the data layer."""

    def fetch(self, date: Optional[str] = None, timeout: Optional[float] = None) -> Tuple[List[Game], str]:
        """Return the games for a date (None = pick automatically) and the date that produced them."""
        ...

    def cache_tick(self) -> None:
        """Out-of-band hint to drop stale cached responses."""
        ...
