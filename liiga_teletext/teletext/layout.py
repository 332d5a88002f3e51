# liiga_teletext/teletext/layout.py
"""
Column layout for the three display modes.

All columns are 1-based screen columns. Scorer cells are laid out relative to the
start of their team column, so one Layout serves both the home and the away side:

    MM Name········ ▶ TYPES
    0  3            N+4 N+6
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Sequence

from ..models import Game

CONTENT_MARGIN = 2
SEPARATOR = " - "

PREFERRED_TEAM_WIDTH = 20
MIN_TEAM_WIDTH = 15
TIME_GAP = 2
# "MM:SS 3-2 ja"
RIGHT_BLOCK_WIDTH = 12
SCORE_OFFSET = 6

MINUTE_WIDTH = 3         # "15 "
MIN_GOAL_TYPES_WIDTH = 3
MAX_GOAL_TYPES_WIDTH = 8
MIN_NAME_WIDTH_FOR_TYPES = 11

WIDE_COLUMN_WIDTH = 60
WIDE_GAP = 8
WIDE_LEFT_COLUMN = 2
WIDE_RIGHT_COLUMN = WIDE_LEFT_COLUMN + WIDE_COLUMN_WIDTH + WIDE_GAP
WIDE_MIN_WIDTH = 128


@dataclass(frozen=True)
class Layout:
    home_team_width: int
    away_team_width: int
    home_column: int
    away_column: int
    time_column: int
    score_column: int
    play_icon_column: int     # offset inside a scorer cell
    max_player_name_width: int
    max_goal_types_width: int
    separator_width: int = len(SEPARATOR)

    @property
    def scorer_cell_width(self) -> int:
        return self.home_team_width + self.separator_width

    @property
    def goal_types_column(self) -> int:
        """Offset of the goal type tags inside a scorer cell."""
        return self.max_player_name_width + 6

    def at_column(self, column: int) -> "Layout":
        """The same layout shifted so that the home team starts at column."""
        shift = column - self.home_column
        return replace(
            self,
            home_column=self.home_column + shift,
            away_column=self.away_column + shift,
            time_column=self.time_column + shift,
            score_column=self.score_column + shift,
        )


def _row_width(home_w: int, away_w: int) -> int:
    return home_w + len(SEPARATOR) + away_w + TIME_GAP + RIGHT_BLOCK_WIDTH


def calculate_layout(width: int, games: Sequence[Game], margin: int = CONTENT_MARGIN) -> Layout:
    """
    Fit team columns to the longest names that fit in the terminal.

    Widths start at the preferred width, grow to the longest observed name and are
    shrunk (wider side first) towards MIN_TEAM_WIDTH until the row fits.

    Args:
        width: terminal width in characters.
        games: games that will be shown with this layout.
        margin: blank columns kept on both sides.

    Returns:
        Layout with absolute columns for the home/away/time/score positions.
    """
    home_w = max([PREFERRED_TEAM_WIDTH] + [len(g.home_team) for g in games])
    away_w = max([PREFERRED_TEAM_WIDTH] + [len(g.away_team) for g in games])
    available = width - 2 * margin

    while _row_width(home_w, away_w) > available and max(home_w, away_w) > MIN_TEAM_WIDTH:
        if home_w >= away_w:
            home_w -= 1
        else:
            away_w -= 1

    cell_width = home_w + len(SEPARATOR)
    types_w = max(MIN_GOAL_TYPES_WIDTH, min(MAX_GOAL_TYPES_WIDTH, cell_width - 7 - MIN_NAME_WIDTH_FOR_TYPES))
    name_w = max(1, cell_width - 7 - types_w)

    home_column = margin + 1
    away_column = home_column + home_w + len(SEPARATOR)
    time_column = away_column + away_w + TIME_GAP

    return Layout(
        home_team_width=home_w,
        away_team_width=away_w,
        home_column=home_column,
        away_column=away_column,
        time_column=time_column,
        score_column=time_column + SCORE_OFFSET,
        play_icon_column=name_w + 4,
        max_player_name_width=name_w,
        max_goal_types_width=types_w,
    )


def calculate_wide_layout(games: Sequence[Game]) -> Layout:
    """Layout for one wide-mode column block, anchored at the left block."""
    return calculate_layout(WIDE_COLUMN_WIDTH, games, margin=0).at_column(WIDE_LEFT_COLUMN)


def truncate_team_name(name: str, width: int) -> str:
    """
    Shorten a team name to width characters.

    Prefers cutting at the last space or hyphen in the second half of the allowed
    width; otherwise cuts hard. No ellipsis.
    """
    if len(name) <= width:
        return name
    cut = max(name.rfind(" ", 0, width + 1), name.rfind("-", 0, width + 1))
    if cut > width // 2:
        return name[:cut].rstrip(" -")
    return name[:width]


@dataclass(frozen=True)
class CompactConfig:
    team_name_width: int = 8
    score_width: int = 6
    game_separator: str = "  "
    max_games_per_line: int = 3

    @property
    def game_width(self) -> int:
        return self.team_name_width + self.score_width

    @property
    def min_terminal_width(self) -> int:
        return self.game_width + 2 * CONTENT_MARGIN

    def games_per_line(self, width: int) -> int:
        """Largest k that fits, 0 when not even one game fits."""
        available = width - 2 * CONTENT_MARGIN
        sep = len(self.game_separator)
        for k in range(self.max_games_per_line, 0, -1):
            if k * self.game_width + (k - 1) * sep <= available:
                return k
        return 0


COMPACT = CompactConfig()
