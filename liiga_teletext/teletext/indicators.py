# liiga_teletext/teletext/indicators.py
"""
Footer spinners for loading and auto refresh.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

FRAMES: Tuple[str, ...] = ("|", "/", "-", "\\")


@dataclass
class LoadingIndicator:
    """Spinner state with an optional message shown beside it."""

    message: str = ""
    frame_index: int = 0

    @property
    def frame(self) -> str:
        """Current spinner character."""
        return FRAMES[self.frame_index % len(FRAMES)]

    def next_frame(self) -> str:
        """Advance one frame and return it."""
        self.frame_index = (self.frame_index + 1) % len(FRAMES)
        return self.frame
