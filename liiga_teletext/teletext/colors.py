# liiga_teletext/teletext/colors.py
"""
Teletext palette (256-color ANSI indexes) and escape helpers.
"""

from __future__ import annotations

HEADER_BG = 21       # blue
TITLE_BG = 46        # green
TEXT_FG = 231        # white
RESULT_FG = 46       # green
SUBHEADER_FG = 46
HOME_SCORER_FG = 51  # cyan
AWAY_SCORER_FG = 51
WINNING_GOAL_FG = 201  # magenta
GOAL_TYPE_FG = 226     # yellow
COUNTDOWN_FG = 226

RESET = "\x1b[0m"
HIDE_CURSOR = "\x1b[?25l"
SHOW_CURSOR = "\x1b[?25h"
CLEAR_FROM_HOME = "\x1b[H\x1b[0J"

PLAY_ICON = "▶"


def fg(code: int) -> str:
    """Foreground color escape for a 256-color index."""
    return f"\x1b[38;5;{code}m"


def bg(code: int) -> str:
    """Background color escape for a 256-color index."""
    return f"\x1b[48;5;{code}m"


def move(line: int, column: int) -> str:
    """1-based cursor position."""
    return f"\x1b[{line};{column}H"


def hyperlink(url: str, text: str) -> str:
    """OSC-8 hyperlink around text."""
    return f"\x1b]8;;{url}\x07{text}\x1b]8;;\x07"
