# liiga_teletext/services/season_countdown.py
"""
Regular season start lookup for the "Runkosarjan alkuun N päivää" countdown.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
import logging
from typing import Any, Optional

from ..cache import TTLCache
from ..config import is_placeholder_domain
from ..exceptions import LiigaError
from ..liiga_client import LiigaClient
from .games_service import parse_api_datetime

logger = logging.getLogger(__name__)

SEASON_START_TTL = 86400


@dataclass
class SeasonCountdownService:
    """Finds the first regular-season game date from the season schedule."""

    client: LiigaClient
    cache: TTLCache

    def regular_season_start(self, today: Optional[date] = None) -> Optional[date]:
        """
        Return the first regular-season game date after today (UTC), or None.

        The schedule for the current year is checked first, then the next year's.
        Fetch errors are logged and treated as "unknown".
        """
        if is_placeholder_domain(self.client.base_url):
            return None

        today = today or datetime.now(timezone.utc).date()
        for season in (today.year, today.year + 1):
            try:
                start = self.cache.get_or_set(
                    key=f"season-start-{season}",
                    ttl_seconds=SEASON_START_TTL,
                    loader=lambda s=season: self._first_game_date(s) or "",
                )
            except LiigaError as e:
                logger.warning("Season %s schedule unavailable: %s", season, e)
                continue
            if start:
                d = date.fromisoformat(start)
                if d > today:
                    return d
        return None

    def _first_game_date(self, season: int) -> Optional[str]:
        payload: Any = self.client.schedule("runkosarja", season)
        games = payload.get("games") if isinstance(payload, dict) else payload
        starts = []
        for g in games or []:
            if not isinstance(g, dict):
                continue
            dt = parse_api_datetime(g.get("start"))
            if dt is not None:
                starts.append(dt.astimezone(timezone.utc).date())
        if not starts:
            return None
        return min(starts).isoformat()


def days_until(start: Optional[date], today: date) -> Optional[int]:
    """Whole days from today to start; None unless strictly positive."""
    if start is None:
        return None
    days = (start - today).days
    return days if days > 0 else None
