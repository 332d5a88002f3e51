# liiga_teletext/teletext/normal_mode.py
"""
Normal mode: one team line per game followed by its scorer lines.
"""

from __future__ import annotations

from itertools import zip_longest
from typing import Tuple

from ..models import Game, ScoreType
from .colors import RESET, RESULT_FG, TEXT_FG, fg, move
from .goal_formatter import scorer_line
from .layout import SEPARATOR, Layout, truncate_team_name


def game_height(game: Game, interactive: bool) -> int:
    """Lines used by a game, spacer included."""
    return 1 + game.scorer_rows + (1 if interactive else 0)


def format_clock(played_time: int) -> str:
    minutes, seconds = divmod(max(0, played_time), 60)
    return f"{minutes:02d}:{seconds:02d}"


def team_line(game: Game, layout: Layout, line: int) -> str:
    home = truncate_team_name(game.home_team, layout.home_team_width)
    away = truncate_team_name(game.away_team, layout.away_team_width)
    parts = [
        move(line, layout.home_column),
        fg(TEXT_FG),
        f"{home:<{layout.home_team_width}}{SEPARATOR}{away:<{layout.away_team_width}}",
        RESET,
    ]

    if game.score_type == ScoreType.SCHEDULED:
        parts += [move(line, layout.time_column), fg(TEXT_FG), game.time, RESET]
    elif game.score_type == ScoreType.ONGOING:
        parts += [
            move(line, layout.time_column), fg(TEXT_FG), format_clock(game.played_time), RESET,
            move(line, layout.score_column), fg(RESULT_FG), game.result_text(), RESET,
        ]
    else:
        parts += [move(line, layout.time_column), fg(RESULT_FG), game.result_text(), RESET]

    return "".join(parts)


def render_game(
    game: Game,
    layout: Layout,
    line: int,
    links_enabled: bool = True,
    interactive: bool = True,
) -> Tuple[str, int]:
    """
    Render a game starting at line.

    Returns:
        (escape-positioned text, next free line)
    """
    parts = [team_line(game, layout, line)]
    line += 1

    if game.score_type != ScoreType.SCHEDULED:
        for home, away in zip_longest(game.home_goals, game.away_goals):
            parts.append(scorer_line(home, away, game, layout, line, links_enabled))
            line += 1

    if interactive:
        line += 1
    return "".join(parts), line
