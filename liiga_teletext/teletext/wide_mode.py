# liiga_teletext/teletext/wide_mode.py
"""
Wide mode: two columns of normal-mode game blocks side by side.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

from ..models import Game
from . import normal_mode
from .layout import WIDE_LEFT_COLUMN, WIDE_MIN_WIDTH, WIDE_RIGHT_COLUMN, calculate_wide_layout

# Blank lines between two games in the same column
GAME_GAP = 1


def can_fit_two_columns(width: int) -> bool:
    return width >= WIDE_MIN_WIDTH


def too_narrow_lines(width: int) -> List[str]:
    return [
        f"Terminal too narrow for wide mode ({width} chars, need {WIDE_MIN_WIDTH} chars, "
        f"short {WIDE_MIN_WIDTH - width} chars)",
        f"Resize terminal to at least {WIDE_MIN_WIDTH} characters wide for wide mode",
    ]


def split_columns(games: Sequence[Game]) -> Tuple[List[Game], List[Game]]:
    """Left column takes the extra game when the count is odd."""
    half = (len(games) + 1) // 2
    return list(games[:half]), list(games[half:])


def column_height(games: Sequence[Game]) -> int:
    if not games:
        return 0
    return sum(normal_mode.game_height(g, interactive=False) for g in games) + GAME_GAP * (len(games) - 1)


def games_height(games: Sequence[Game]) -> int:
    left, right = split_columns(games)
    return max(column_height(left), column_height(right))


def render_games(games: Sequence[Game], line: int, links_enabled: bool = True) -> Tuple[str, int]:
    """
    Render both columns starting at line, each with its own line cursor.

    Returns:
        (escape-positioned text, first line below the taller column)
    """
    layout = calculate_wide_layout(games)
    parts = []
    bottom = line
    for column_games, column in zip(split_columns(games), (WIDE_LEFT_COLUMN, WIDE_RIGHT_COLUMN)):
        column_layout = layout.at_column(column)
        cursor = line
        for i, game in enumerate(column_games):
            if i:
                cursor += GAME_GAP
            text, cursor = normal_mode.render_game(
                game, column_layout, cursor, links_enabled=links_enabled, interactive=False
            )
            parts.append(text)
        bottom = max(bottom, cursor)
    return "".join(parts), bottom
