# liiga_teletext/teletext/compact_mode.py
"""
Compact mode: several "TAP-IFK  3-2" cells per line.
"""

from __future__ import annotations

from typing import List, Sequence, Tuple

from ..models import Game, ScoreType
from .abbreviations import get_team_abbreviation
from .colors import RESET, RESULT_FG, TEXT_FG, fg, move
from .layout import COMPACT, CONTENT_MARGIN, CompactConfig

HEADER_PREFIX = "Seuraavat ottelut "
SHORT_HEADER_PREFIX = "Seur. ottelut "
MAX_HEADER_LENGTH = 30


def compact_header(text: str) -> str:
    """Shorten a header so it fits the compact column."""
    if text.startswith(HEADER_PREFIX):
        text = SHORT_HEADER_PREFIX + text[len(HEADER_PREFIX):]
    if len(text) > MAX_HEADER_LENGTH:
        text = text[: MAX_HEADER_LENGTH - 3] + "..."
    return text


def too_narrow_lines(width: int, config: CompactConfig = COMPACT) -> List[str]:
    need = config.min_terminal_width
    return [
        f"Terminal too narrow for compact mode ({width} chars, need {need} chars)",
        f"Resize terminal to at least {need} characters wide",
    ]


def chunk_lines(count: int, games_per_line: int) -> int:
    """Screen lines used by count games, spacer lines included."""
    if count == 0 or games_per_line <= 0:
        return 0
    groups = -(-count // games_per_line)
    return groups * 2


def game_cell(game: Game, config: CompactConfig = COMPACT) -> str:
    """Colored 'HOM-AWA SCORE' cell of exactly config.game_width visible characters."""
    teams = f"{get_team_abbreviation(game.home_team)}-{get_team_abbreviation(game.away_team)}"
    if game.score_type == ScoreType.SCHEDULED:
        score, color = game.time, TEXT_FG
    elif game.score_type == ScoreType.ONGOING:
        score, color = game.result_text(), TEXT_FG
    else:
        score, color = game.result_text(), RESULT_FG
    cell = f"{teams:<{config.team_name_width}}{score.rjust(4):<{config.score_width}}"
    return f"{fg(color)}{cell}{RESET}"


def render_games(
    games: Sequence[Game],
    width: int,
    line: int,
    config: CompactConfig = COMPACT,
) -> Tuple[str, int]:
    """
    Pack games onto lines, each group followed by a spacer line.

    Returns:
        (escape-positioned text, next free line)
    """
    per_line = config.games_per_line(width)
    if per_line == 0:
        parts = []
        for text in too_narrow_lines(width, config):
            parts.append(f"{move(line, CONTENT_MARGIN + 1)}{fg(TEXT_FG)}{text}{RESET}")
            line += 1
        return "".join(parts), line

    parts = []
    for i in range(0, len(games), per_line):
        group = games[i:i + per_line]
        cells = config.game_separator.join(game_cell(g, config) for g in group)
        parts.append(f"{move(line, CONTENT_MARGIN + 1)}{cells}")
        line += 2
    return "".join(parts), line
