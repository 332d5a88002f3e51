# liiga_teletext/services/seasons.py
"""
Calendar rules: seasons, tournaments per month, fetch date and historical dates.

All functions take "today"/"now" explicitly (with a default) so they are testable
without freezing the clock.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import List, Optional, Tuple

PLAYOFFS_START_MONTH = 3
PLAYOFFS_END_MONTH = 6
PRESEASON_START_MONTH = 5
PRESEASON_END_MONTH = 9

# Local hour from which "today" replaces "yesterday" as the default date
TODAY_CUTOFF_HOUR = 12

SUBHEADERS = {
    "playoffs": "PLAYOFFS",
    "playout": "PLAYOUT-OTTELUT",
    "qualifications": "LIIGAKARSINTA",
    "valmistavat_ottelut": "HARJOITUSOTTELUT",
    "practice": "HARJOITUSOTTELUT",
}
# Lower number wins when a page mixes tournaments
_SUBHEADER_PRIORITY = ("playoffs", "playout", "qualifications", "valmistavat_ottelut", "practice")


def parse_date(date_str: str) -> date:
    return datetime.strptime(date_str, "%Y-%m-%d").date()


def format_date_for_display(date_str: str) -> str:
    """'2024-01-15' -> '15.01.'; unparsable input is returned as-is."""
    try:
        return parse_date(date_str).strftime("%d.%m.")
    except ValueError:
        return date_str


def season_for_date(d: date) -> int:
    """Liiga seasons are named after the spring they end in."""
    return d.year + 1 if d.month >= 9 else d.year


def tournaments_for_month(month: int) -> List[str]:
    """Which tournament buckets can have games in a given month."""
    if PLAYOFFS_START_MONTH <= month <= PLAYOFFS_END_MONTH:
        return ["runkosarja", "playoffs", "playout", "qualifications"]
    if PRESEASON_START_MONTH <= month <= PRESEASON_END_MONTH:
        return ["runkosarja", "valmistavat_ottelut"]
    return ["runkosarja"]


def determine_fetch_date(custom_date: Optional[str], now_local: datetime) -> Tuple[str, bool]:
    """
    Pick the date to fetch.

    Returns:
        (YYYY-MM-DD, chosen_because_of_pre_noon_cutoff)
    """
    if custom_date:
        return custom_date, False
    if now_local.hour >= TODAY_CUTOFF_HOUR:
        return now_local.strftime("%Y-%m-%d"), False
    yesterday = now_local.date() - timedelta(days=1)
    return yesterday.strftime("%Y-%m-%d"), True


def is_historical_date(date_str: str, today: Optional[date] = None) -> bool:
    """
    True when the date belongs to a previous season's bucket.

    Rules (calendar based, the API is not consulted):
      - two or more years back: historical
      - same year, now Sep-Dec, date Jun-Aug: historical
      - previous year, now Sep or later, date Jun-Aug: historical
    """
    try:
        d = parse_date(date_str)
    except ValueError:
        return False

    today = today or date.today()
    if d.year < today.year - 1:
        return True
    if d.year == today.year:
        return 9 <= today.month <= 12 and 6 <= d.month <= 8
    if d.year == today.year - 1:
        return today.month >= 9 and 6 <= d.month <= 8
    return False


def uses_archive_cache(date_str: str, today: Optional[date] = None) -> bool:
    """
    True when responses for the date can no longer change (long cache lifetime).

    Future dates never qualify. Earlier years always do. Within the same year, off-season
    dates (May-Jul) qualify in August, and season dates qualify during May-Jul.
    """
    try:
        d = parse_date(date_str)
    except ValueError:
        return False

    today = today or date.today()
    if d > today:
        return False
    if d.year < today.year:
        return True
    if today.month == 8 and 5 <= d.month <= 7:
        return True
    if 5 <= today.month <= 7 and (d.month >= 9 or d.month <= 4):
        return True
    return False


def should_use_schedule_for_playoffs(date_str: str, today: Optional[date] = None) -> bool:
    """
    True for spring playoff dates (Mar-May) viewed during the same year's off-season (Jun-Aug).

    Those days are no longer served by the date endpoint, only by the season schedule.
    Future dates never qualify.
    """
    try:
        d = parse_date(date_str)
    except ValueError:
        return False

    today = today or date.today()
    if d > today:
        return False
    return d.year == today.year and 6 <= today.month <= 8 and 3 <= d.month <= 5


def subheader_for_series(series: List[str]) -> str:
    """Subheader text for the highest-priority tournament present."""
    if not series:
        return "SM-LIIGA"
    lowered = {s.lower() for s in series}
    for tag in _SUBHEADER_PRIORITY:
        if tag in lowered:
            return SUBHEADERS[tag]
    return "RUNKOSARJA"


def pick_next_game_date(candidates: List[Tuple[str, str]], today: date) -> Optional[str]:
    """
    Choose the best "next game date" among (tournament, YYYY-MM-DD) candidates.

    Dates in the past are ignored. A regular-season date within a week wins; otherwise
    the earliest remaining date is used.
    """
    usable: List[Tuple[str, date]] = []
    for tournament, raw in candidates:
        try:
            d = parse_date(raw[:10])
        except (TypeError, ValueError):
            continue
        if d >= today:
            usable.append((tournament, d))

    if not usable:
        return None

    soon = [d for t, d in usable if t == "runkosarja" and (d - today).days <= 7]
    best = min(soon) if soon else min(d for _, d in usable)
    return best.strftime("%Y-%m-%d")
