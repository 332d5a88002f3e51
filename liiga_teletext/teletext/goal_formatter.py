# liiga_teletext/teletext/goal_formatter.py
"""
Scorer cells under the team line.
"""

from __future__ import annotations

from typing import Optional

from ..models import Game, Goal
from .colors import (
    AWAY_SCORER_FG,
    GOAL_TYPE_FG,
    HOME_SCORER_FG,
    PLAY_ICON,
    RESET,
    WINNING_GOAL_FG,
    fg,
    hyperlink,
    move,
)
from .layout import Layout

PENALTY_SHOT = "VL"


def goal_color(goal: Goal, game: Game) -> int:
    """Winning goals of overtime/shootout games and penalty shots stand out."""
    decisive = goal.is_winning_goal and (game.is_overtime or game.is_shootout)
    if decisive or PENALTY_SHOT in goal.goal_types:
        return WINNING_GOAL_FG
    return HOME_SCORER_FG if goal.is_home_team else AWAY_SCORER_FG


def goal_cell_text(goal: Goal, layout: Layout) -> str:
    """Plain 'MM Name' part of a cell, padded to the name width."""
    width = layout.max_player_name_width
    return f"{goal.minute:>2} {goal.scorer_name[:width]:<{width}}"


def format_goal_cell(
    goal: Goal,
    game: Game,
    layout: Layout,
    line: int,
    column: int,
    links_enabled: bool = True,
) -> str:
    """
    Render one scorer cell at (line, column).

    Args:
        goal: goal to show.
        game: the game the goal belongs to (overtime/shootout affect the color).
        layout: layout providing the name width and the icon/type offsets.
        line: 1-based screen line.
        column: 1-based column where the cell starts.
        links_enabled: when False the play icon is left out.

    Returns:
        Escape-positioned string for the cell.
    """
    color = fg(goal_color(goal, game))
    parts = [move(line, column), color, goal_cell_text(goal, layout), RESET]

    if links_enabled and goal.video_clip_url:
        parts += [
            move(line, column + layout.play_icon_column),
            color,
            hyperlink(goal.video_clip_url, PLAY_ICON),
            RESET,
        ]

    types = goal.goal_type_display()[: layout.max_goal_types_width]
    if types:
        parts += [move(line, column + layout.goal_types_column), fg(GOAL_TYPE_FG), types, RESET]

    return "".join(parts)


def blank_cell(layout: Layout, line: int, column: int) -> str:
    """Whitespace holding a missing side's cell in place."""
    return move(line, column) + " " * layout.scorer_cell_width


def scorer_line(
    home: Optional[Goal],
    away: Optional[Goal],
    game: Game,
    layout: Layout,
    line: int,
    links_enabled: bool = True,
) -> str:
    """One scorer row: home cell under the home team, away cell under the away team."""
    parts = []
    for goal, column in ((home, layout.home_column), (away, layout.away_column)):
        if goal is None:
            parts.append(blank_cell(layout, line, column))
        else:
            parts.append(format_goal_cell(goal, game, layout, line, column, links_enabled))
    return "".join(parts)
