# liiga_teletext/handlers/page_builder.py
"""
Assembles TeletextPage instances from fetch results.

Keeps the controller and the once printer free of page wording and flags.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
import logging
from typing import Callable, Optional, Sequence, Tuple

from ..models import Game, RunArgs
from ..services.games_service import parse_api_datetime
from ..services.seasons import format_date_for_display, is_historical_date, subheader_for_series
from ..teletext.page import ONCE_WIDE_WIDTH, ONCE_WIDTH, SeasonStartLookup, TeletextPage
from ..terminal import terminal_size

logger = logging.getLogger(__name__)

TITLE = "JÄÄKIEKKO"
NAVIGATION_HINT = "Käytä Shift + nuolia siirtyäksesi toiselle päivälle"


@dataclass
class PageBuilder:
    """Creates pages configured for the current run (mode, links, footer)."""

    args: RunArgs
    now_fn: Callable[[], datetime]
    season_start_lookup: Optional[SeasonStartLookup] = None
    size_fn: Callable[[], Tuple[int, int]] = terminal_size

    def _today(self) -> date:
        return self.now_fn().date()

    def _today_utc(self) -> date:
        return self.now_fn().astimezone(timezone.utc).date()

    def _size(self) -> Tuple[int, int]:
        if self.args.once:
            return (ONCE_WIDE_WIDTH if self.args.wide else ONCE_WIDTH), 24
        return self.size_fn()

    def new_page(self, subheader: str) -> TeletextPage:
        return TeletextPage(
            title=TITLE,
            subheader=subheader,
            disable_video_links=self.args.disable_links,
            show_footer=not self.args.once,
            ignore_height_limit=self.args.once,
            compact_mode=self.args.compact,
            wide_mode=self.args.wide,
            season_start_lookup=None if self.args.once else self.season_start_lookup,
            size_fn=self._size,
        )

    def _local_start(self, game: Game) -> Optional[datetime]:
        start = parse_api_datetime(game.start)
        return start.astimezone(self.now_fn().tzinfo) if start else None

    def is_future_page(self, games: Sequence[Game]) -> bool:
        """First game has a start time and starts on a later local date than today."""
        if not games or not games[0].time:
            return False
        start = self._local_start(games[0])
        return start is not None and start.date() > self._today()

    def build(self, games: Sequence[Game], fetched_date: str, viewed_date: Optional[str] = None) -> TeletextPage:
        """
        Page for a successful fetch.

        Args:
            games: fetched games, possibly empty.
            fetched_date: date that produced the games.
            viewed_date: explicit date the user asked for (-d or date navigation).

        Returns:
            Page ready for rendering.
        """
        if not games:
            return self.empty_page(fetched_date)

        page = self.new_page(subheader_for_series([g.serie for g in games]))
        page.set_fetched_date(fetched_date)

        if self.is_future_page(games):
            if viewed_date is None:
                shown = self._local_start(games[0]).strftime("%d.%m.")
                page.add_future_games_header(f"Seuraavat ottelut {shown}")
            page.set_auto_refresh_disabled(True)
        elif is_historical_date(fetched_date, self._today()):
            page.set_auto_refresh_disabled(True)

        for game in games:
            page.add_game_result(game)
        page.set_show_season_countdown(games, today=self._today_utc())
        return page

    def loading_page(self, date_str: Optional[str]) -> TeletextPage:
        page = self.new_page("SM-LIIGA")
        if date_str is None:
            page.add_error_message("Haetaan päivän otteluita...")
            return page

        page.set_fetched_date(date_str)
        shown = format_date_for_display(date_str)
        if is_historical_date(date_str, self._today()):
            page.add_error_message(f"Haetaan historiallista dataa päivälle {shown}...")
            page.add_error_message("Tämä voi kestää hetken, odotathan...")
        else:
            page.add_error_message(f"Haetaan otteluita päivälle {shown}...")
        return page

    def empty_page(self, date_str: str) -> TeletextPage:
        page = self.new_page("SM-LIIGA")
        page.set_fetched_date(date_str)
        page.add_error_message(f"Ei otteluita päivälle {format_date_for_display(date_str)}")
        page.add_error_message("")
        page.add_error_message(NAVIGATION_HINT)
        if is_historical_date(date_str, self._today()):
            page.add_error_message("tai käynnistä sovellus uudelleen (-d parametrilla)")
            page.add_error_message("nähdäksesi päivän ottelut.")
            page.set_auto_refresh_disabled(True)
        else:
            page.add_error_message("tai paina 'r' päivittääksesi tiedot.")
        page.set_show_season_countdown([], today=self._today_utc())
        return page

    def error_page(self, message: str, date_str: Optional[str] = None) -> TeletextPage:
        page = self.new_page("SM-LIIGA")
        if date_str:
            page.set_fetched_date(date_str)
        page.add_error_message(f"Virhe haettaessa otteluita: {message}")
        page.add_error_message("")
        page.add_error_message(NAVIGATION_HINT)
        return page
