# liiga_teletext/terminal.py
"""
Terminal session handling: cbreak input, alternate screen, key decoding, size.
"""

from __future__ import annotations

from enum import Enum
import logging
import os
import select
import shutil
import sys
from typing import Optional, TextIO, Tuple

try:
    import termios
    import tty
except ImportError:  # pragma: no cover - non-POSIX
    termios = None
    tty = None

from .exceptions import FatalError

logger = logging.getLogger(__name__)

ENTER_ALT_SCREEN = "\x1b[?1049h"
LEAVE_ALT_SCREEN = "\x1b[?1049l"
HIDE_CURSOR = "\x1b[?25l"
SHOW_CURSOR = "\x1b[?25h"
WINDOW_TITLE = "SM-LIIGA 221"

DEFAULT_SIZE = (80, 24)


def set_title(title: str) -> str:
    return f"\x1b]0;{title}\x07"


def terminal_size() -> Tuple[int, int]:
    """(columns, lines) with an 80x24 fallback."""
    size = shutil.get_terminal_size(fallback=DEFAULT_SIZE)
    return size.columns, size.lines


class Key(str, Enum):
    QUIT = "quit"
    REFRESH = "refresh"
    LEFT = "left"
    RIGHT = "right"
    SHIFT_LEFT = "shift_left"
    SHIFT_RIGHT = "shift_right"
    OTHER = "other"


_SEQUENCES = {
    "\x1b[D": Key.LEFT,
    "\x1b[C": Key.RIGHT,
    "\x1b[1;2D": Key.SHIFT_LEFT,
    "\x1b[1;2C": Key.SHIFT_RIGHT,
    "\x1b[d": Key.SHIFT_LEFT,     # rxvt
    "\x1b[c": Key.SHIFT_RIGHT,
}


def decode_key(raw: str) -> Key:
    """Map one read chunk to a Key."""
    if raw in ("q", "Q"):
        return Key.QUIT
    if raw in ("r", "R"):
        return Key.REFRESH
    return _SEQUENCES.get(raw, Key.OTHER)


class KeyReader:
    """Non-blocking key reader on a cbreak-mode file descriptor."""

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream or sys.stdin
        self.fd = self.stream.fileno()
        self._pending = ""

    def _read_available(self, timeout: float) -> str:
        r, _, _ = select.select([self.fd], [], [], timeout)
        if not r:
            return ""
        return os.read(self.fd, 32).decode("utf-8", errors="replace")

    def _sequence_end(self) -> Optional[int]:
        """Index just past the first key in the buffer, None while a sequence is incomplete."""
        if not self._pending.startswith("\x1b"):
            return 1
        if len(self._pending) == 1:
            return None
        if self._pending[1] != "[":
            return 1
        for i in range(2, len(self._pending)):
            if "@" <= self._pending[i] <= "~":
                return i + 1
        return None

    def read_key(self, timeout: float) -> Optional[Key]:
        """
        Wait up to timeout seconds for a key.

        Keys that arrive together (auto-repeat, pastes) are buffered and returned
        one per call.

        Returns:
            Key, or None when nothing was pressed.
        """
        if not self._pending:
            self._pending = self._read_available(timeout)
            if not self._pending:
                return None

        end = self._sequence_end()
        if end is None:
            # Escape sequences can arrive split across reads
            self._pending += self._read_available(0.01)
            end = self._sequence_end() or len(self._pending)

        raw, self._pending = self._pending[:end], self._pending[end:]
        return decode_key(raw)

    def has_input(self) -> bool:
        if self._pending:
            return True
        r, _, _ = select.select([self.fd], [], [], 0)
        return bool(r)


class TerminalGuard:
    """
    Context manager owning the interactive terminal state.

    Leaving the block (normally, by exception or by Ctrl-C) always restores the
    cursor, the main screen, the title and the saved tty attributes.
    """

    def __init__(self, out: Optional[TextIO] = None, stdin: Optional[TextIO] = None, alternate_screen: bool = True):
        self.out = out or sys.stdout
        self.stdin = stdin or sys.stdin
        self.alternate_screen = alternate_screen
        self._saved = None
        self._fd: Optional[int] = None

    def __enter__(self) -> "TerminalGuard":
        if termios is None or tty is None:
            raise FatalError("Interactive mode needs a POSIX terminal")
        try:
            self._fd = self.stdin.fileno()
            self._saved = termios.tcgetattr(self._fd)
            tty.setcbreak(self._fd)
        except (OSError, ValueError, termios.error) as e:
            raise FatalError(f"Could not enable raw mode: {e}") from e

        prefix = ENTER_ALT_SCREEN if self.alternate_screen else ""
        self.out.write(prefix + HIDE_CURSOR + set_title(WINDOW_TITLE))
        self.out.flush()
        logger.debug("Terminal acquired (alternate screen: %s)", self.alternate_screen)
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        try:
            suffix = LEAVE_ALT_SCREEN if self.alternate_screen else ""
            self.out.write(SHOW_CURSOR + suffix + set_title(""))
            self.out.flush()
        except OSError as e:
            logger.error("Failed to reset terminal output: %s", e)
        finally:
            if self._saved is not None and self._fd is not None:
                termios.tcsetattr(self._fd, termios.TCSADRAIN, self._saved)
                self._saved = None
            logger.debug("Terminal restored")
        return False
