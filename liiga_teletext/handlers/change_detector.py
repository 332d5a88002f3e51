# liiga_teletext/handlers/change_detector.py
"""
Detects whether a fetch produced anything worth redrawing.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import hashlib
import logging
from typing import Dict, Optional, Sequence, Tuple

from ..models import Game, ScoreType

logger = logging.getLogger(__name__)


def games_digest(games: Sequence[Game]) -> int:
    """
    64-bit digest over the fields that change what the page shows.

    Scorer names, winning-goal flags, home/away flags, goal types and video URLs are
    left out: they follow from the other fields or churn without visible effect.
    """
    h = hashlib.blake2b(digest_size=8)
    for g in games:
        fields = (
            g.home_team, g.away_team, g.result, g.time, g.score_type.value,
            g.is_overtime, g.is_shootout, g.serie, g.played_time, g.start,
        )
        h.update(repr(fields).encode("utf-8"))
        for goal in g.goals:
            h.update(repr((goal.scorer_player_id, goal.minute, goal.home_score, goal.away_score)).encode("utf-8"))
        h.update(b"\x00")
    return int.from_bytes(h.digest(), "big")


def all_scheduled(games: Sequence[Game]) -> bool:
    return bool(games) and all(g.score_type == ScoreType.SCHEDULED for g in games)


@dataclass
class ChangeDetector:
    """Remembers the last digest and the clocks of live games."""

    last_digest: Optional[int] = None
    clocks: Dict[Tuple[str, str, str], int] = field(default_factory=dict)
    all_scheduled_signalled: bool = False

    def has_changed(self, games: Sequence[Game]) -> bool:
        """Record games and report whether they differ from the previous call."""
        digest = games_digest(games)
        changed = digest != self.last_digest
        self.last_digest = digest
        self._log_clock_updates(games)
        if changed:
            logger.debug("Game data changed (%d games)", len(games))
        return changed

    def _log_clock_updates(self, games: Sequence[Game]) -> None:
        clocks: Dict[Tuple[str, str, str], int] = {}
        for g in games:
            if g.score_type != ScoreType.ONGOING:
                continue
            key = (g.home_team, g.away_team, g.start)
            previous = self.clocks.get(key)
            if previous is not None and g.played_time > previous:
                logger.info("Clock update %s - %s: %ds -> %ds", g.home_team, g.away_team, previous, g.played_time)
            clocks[key] = g.played_time
        self.clocks = clocks

    def all_scheduled_signal(self, games: Sequence[Game]) -> bool:
        """
        Log the switch to an all-scheduled list once; True on that call only.

        The controller calls this for the log line alone. The auto-refresh decision
        re-checks `all_scheduled` itself, so the return value is not needed there.
        The signal re-arms as soon as any game is no longer scheduled (or the list
        is empty).
        """
        if not all_scheduled(games):
            self.all_scheduled_signalled = False
            return False
        if self.all_scheduled_signalled:
            return False
        self.all_scheduled_signalled = True
        logger.info("All %d games are scheduled, auto refresh pauses until start time", len(games))
        return True
