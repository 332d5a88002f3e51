# liiga_teletext/teletext/page.py
"""
TeletextPage: content rows, pagination and frame composition for page 221.

The page owns no I/O besides the final write in render_buffered(); everything else
is string building so frames can be compared in tests.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
import logging
import sys
from typing import Callable, List, Optional, Sequence, TextIO, Tuple

from ..models import ContentRow, ErrorLine, FutureGamesHeader, Game, GameRow, games_from_rows
from ..services.season_countdown import days_until
from ..terminal import terminal_size
from . import compact_mode, normal_mode, wide_mode
from .colors import (
    CLEAR_FROM_HOME,
    COUNTDOWN_FG,
    HEADER_BG,
    HIDE_CURSOR,
    RESET,
    SHOW_CURSOR,
    SUBHEADER_FG,
    TEXT_FG,
    TITLE_BG,
    bg,
    fg,
    move,
)
from .indicators import LoadingIndicator
from .layout import COMPACT, CONTENT_MARGIN, Layout, calculate_layout

logger = logging.getLogger(__name__)

PAGE_NUMBER = 221
DEFAULT_TITLE = "JÄÄKIEKKO"
TITLE_WIDTH = 20
CONTENT_START_LINE = 4

# Header (2) + blank + blank above footer + footer
RESERVED_LINES = 5

ONCE_WIDTH = 80
ONCE_WIDE_WIDTH = 136

SeasonStartLookup = Callable[[date], Optional[date]]


class TeletextPage:
    """
    One teletext page worth of content, possibly spanning several screens.

    Args:
        page_number: number shown in the header ("SM-LIIGA 221").
        title: left header segment.
        subheader: second header line.
        disable_video_links: drop the play icons.
        show_footer: interactive page with footer, spacer lines and page info.
        ignore_height_limit: never paginate (--once).
        compact_mode / wide_mode: display mode, mutually exclusive.
        season_start_lookup: returns the regular season start for "today", used by
            set_show_season_countdown(); None disables the countdown.
        size_fn: returns (columns, lines) of the terminal.
    """

    def __init__(
        self,
        page_number: int = PAGE_NUMBER,
        title: str = DEFAULT_TITLE,
        subheader: str = "RUNKOSARJA",
        disable_video_links: bool = False,
        show_footer: bool = True,
        ignore_height_limit: bool = False,
        compact_mode: bool = False,
        wide_mode: bool = False,
        season_start_lookup: Optional[SeasonStartLookup] = None,
        size_fn: Callable[[], Tuple[int, int]] = terminal_size,
    ):
        if compact_mode and wide_mode:
            raise ValueError("compact and wide mode cannot be combined")

        self.page_number = page_number
        self.title = title
        self.subheader = subheader
        self.disable_video_links = disable_video_links
        self.show_footer = show_footer
        self.ignore_height_limit = ignore_height_limit
        self.compact_mode = compact_mode
        self.wide_mode = wide_mode
        self.season_start_lookup = season_start_lookup
        self.size_fn = size_fn

        self.rows: List[ContentRow] = []
        self.current_page = 0
        self.fetched_date: Optional[str] = None
        self.auto_refresh_disabled = False
        self.season_countdown: Optional[str] = None
        self.error_warning_active = False
        self.loading_indicator: Optional[LoadingIndicator] = None
        self.auto_refresh_indicator: Optional[LoadingIndicator] = None

        self.width, self.height = size_fn()

    # ---- content -------------------------------------------------------

    def add_game_result(self, game: Game) -> None:
        """Append a game row."""
        self.rows.append(GameRow(game))

    def add_error_message(self, text: str) -> None:
        """Append a plain message line."""
        self.rows.append(ErrorLine(text))

    def add_future_games_header(self, text: str) -> None:
        """Append a header line for upcoming games."""
        self.rows.append(FutureGamesHeader(text))

    @property
    def games(self) -> List[Game]:
        """Games on the page, in row order."""
        return games_from_rows(self.rows)

    def has_error_messages(self) -> bool:
        """True when any message line was added."""
        return any(isinstance(r, ErrorLine) for r in self.rows)

    def set_fetched_date(self, date_str: str) -> None:
        """Remember which date the content belongs to."""
        self.fetched_date = date_str

    def set_auto_refresh_disabled(self, disabled: bool) -> None:
        """Mark the page as one that never needs refreshing."""
        self.auto_refresh_disabled = disabled

    def set_show_season_countdown(self, games: Sequence[Game], today: Optional[date] = None) -> None:
        """
        Show "Runkosarjan alkuun N päivää" when no regular season game is on the page.

        The lookup is only consulted when one was given to the page.
        """
        self.season_countdown = None
        if self.season_start_lookup is None:
            return
        if any(g.serie == "runkosarja" for g in games):
            return

        today = today or datetime.now(timezone.utc).date()
        days = days_until(self.season_start_lookup(today), today)
        if days is not None:
            self.season_countdown = f"Runkosarjan alkuun {days} päivää"

    # ---- indicators ----------------------------------------------------

    def show_loading(self, message: str) -> None:
        """Start the footer loading spinner with a message."""
        self.loading_indicator = LoadingIndicator(message)

    def hide_loading(self) -> None:
        """Remove the loading spinner."""
        self.loading_indicator = None

    def update_loading_animation(self) -> None:
        """Advance the loading spinner, if shown."""
        if self.loading_indicator is not None:
            self.loading_indicator.next_frame()

    def show_auto_refresh_indicator(self) -> None:
        """Start the auto-refresh spinner unless it is already running."""
        if self.auto_refresh_indicator is None:
            self.auto_refresh_indicator = LoadingIndicator()

    def hide_auto_refresh_indicator(self) -> None:
        """Remove the auto-refresh spinner."""
        self.auto_refresh_indicator = None

    def update_auto_refresh_animation(self) -> None:
        """Advance the auto-refresh spinner, if shown."""
        if self.auto_refresh_indicator is not None:
            self.auto_refresh_indicator.next_frame()

    def is_auto_refresh_indicator_active(self) -> bool:
        """True while the auto-refresh spinner is shown."""
        return self.auto_refresh_indicator is not None

    def set_error_warning(self, active: bool) -> None:
        """Toggle the footer warning about failed refreshes."""
        self.error_warning_active = active

    # ---- size and pagination -------------------------------------------

    def set_screen_size(self, width: int, height: int) -> None:
        """Set the size explicitly and keep the current page index valid."""
        self.width, self.height = width, height
        self._clamp_current_page()

    def handle_resize(self) -> None:
        """Re-read the terminal size and keep the current page index valid."""
        width, height = self.size_fn()
        if (width, height) != (self.width, self.height):
            logger.debug("Resize %dx%d -> %dx%d", self.width, self.height, width, height)
        self.set_screen_size(width, height)

    @property
    def interactive(self) -> bool:
        return self.show_footer

    @property
    def wide_active(self) -> bool:
        return self.wide_mode and wide_mode.can_fit_two_columns(self.width)

    @property
    def wide_fallback(self) -> bool:
        return self.wide_mode and not wide_mode.can_fit_two_columns(self.width)

    def layout(self) -> Layout:
        return calculate_layout(self.width, self.games)

    def available_lines(self) -> Optional[int]:
        """Content lines per screen, or None when height is not limited."""
        if self.ignore_height_limit:
            return None
        lines = self.height - RESERVED_LINES
        if self.season_countdown:
            lines -= 1
        if self.wide_fallback:
            lines -= 2
        return max(1, lines)

    def rows_height(self, rows: Sequence[ContentRow]) -> int:
        """Screen lines the rows need in the current mode."""
        others = sum(1 for r in rows if not isinstance(r, GameRow))
        games = games_from_rows(rows)

        if self.compact_mode:
            per_line = COMPACT.games_per_line(self.width)
            if per_line == 0:
                return others + 2 * len(_game_runs(rows))
            return others + sum(compact_mode.chunk_lines(len(run), per_line) for run in _game_runs(rows))
        if self.wide_active:
            return others + wide_mode.games_height(games)
        return others + sum(normal_mode.game_height(g, self.interactive) for g in games)

    def pages(self) -> List[List[ContentRow]]:
        """Greedy split of the rows into screens."""
        limit = self.available_lines()
        if limit is None:
            return [list(self.rows)]

        pages: List[List[ContentRow]] = []
        current: List[ContentRow] = []
        for row in self.rows:
            if current and self.rows_height(current + [row]) > limit:
                pages.append(current)
                current = []
            current.append(row)
        pages.append(current)
        return pages

    def total_pages(self) -> int:
        return len(self.pages())

    def _clamp_current_page(self) -> None:
        self.current_page = min(max(0, self.current_page), self.total_pages() - 1)

    def set_current_page(self, index: int) -> None:
        self.current_page = index
        self._clamp_current_page()

    def next_page(self) -> None:
        total = self.total_pages()
        if total > 1:
            self.current_page = (self.current_page + 1) % total

    def previous_page(self) -> None:
        total = self.total_pages()
        if total > 1:
            self.current_page = (self.current_page - 1) % total

    # ---- rendering -----------------------------------------------------

    def header_date(self) -> str:
        if self.fetched_date:
            try:
                return datetime.strptime(self.fetched_date, "%Y-%m-%d").strftime("%d.%m.%Y")
            except ValueError:
                logger.debug("Unparsable fetched date %r", self.fetched_date)
        return datetime.now().strftime("%d.%m.%Y")

    def footer_text(self) -> str:
        text = "q=Lopeta"
        if self.total_pages() > 1:
            text += " ←→=Sivut"
        if self.auto_refresh_disabled:
            text += " (Ei päivity)"
        if self.loading_indicator is not None:
            text += f" {self.loading_indicator.frame} {self.loading_indicator.message}"
        elif self.auto_refresh_indicator is not None:
            text += f" {self.auto_refresh_indicator.frame}"
        if self.error_warning_active:
            text += "  ⚠"
        return text

    def _header(self, total: int) -> str:
        right = f"SM-LIIGA {self.page_number} {self.header_date()}"
        right_width = max(0, self.width - TITLE_WIDTH)
        page_info = f"{self.current_page + 1}/{total}" if self.interactive and total > 1 else ""
        return (
            f"{move(1, 1)}{bg(TITLE_BG)}{fg(HEADER_BG)}{self.title:<{TITLE_WIDTH}}"
            f"{bg(HEADER_BG)}{fg(TEXT_FG)}{right:>{right_width}}{RESET}"
            f"{move(2, 1)}{fg(SUBHEADER_FG)}{self.subheader:<{TITLE_WIDTH}}{page_info:>{right_width}}{RESET}"
        )

    def _text_row(self, row: ContentRow, line: int) -> str:
        if isinstance(row, FutureGamesHeader):
            text = compact_mode.compact_header(row.text) if self.compact_mode else row.text
            color = SUBHEADER_FG
        else:
            text, color = row.text, TEXT_FG
        if not text:
            return ""
        return f"{move(line, CONTENT_MARGIN + 1)}{fg(color)}{text}{RESET}"

    def _warning_lines(self, lines: List[str], line: int) -> Tuple[str, int]:
        parts = []
        for text in lines:
            parts.append(f"{move(line, CONTENT_MARGIN + 1)}{fg(TEXT_FG)}{text}{RESET}")
            line += 1
        return "".join(parts), line

    def render_content(self, rows: Sequence[ContentRow], line: int = CONTENT_START_LINE) -> Tuple[str, int]:
        """
        Render content rows from line downwards in the active mode.

        Returns:
            (escape-positioned text, next free line)
        """
        parts: List[str] = []
        links = not self.disable_video_links

        if self.wide_active:
            for row in rows:
                if not isinstance(row, GameRow):
                    parts.append(self._text_row(row, line))
                    line += 1
            text, line = wide_mode.render_games(games_from_rows(rows), line, links_enabled=links)
            parts.append(text)
            return "".join(parts), line

        if self.wide_fallback:
            text, line = self._warning_lines(wide_mode.too_narrow_lines(self.width), line)
            parts.append(text)

        if self.compact_mode:
            run: List[Game] = []
            for row in list(rows) + [None]:
                if isinstance(row, GameRow):
                    run.append(row.game)
                    continue
                if run:
                    text, line = compact_mode.render_games(run, self.width, line)
                    parts.append(text)
                    run = []
                if row is not None:
                    parts.append(self._text_row(row, line))
                    line += 1
            return "".join(parts), line

        layout = self.layout()
        for row in rows:
            if isinstance(row, GameRow):
                text, line = normal_mode.render_game(
                    row.game, layout, line, links_enabled=links, interactive=self.interactive
                )
                parts.append(text)
            else:
                parts.append(self._text_row(row, line))
                line += 1
        return "".join(parts), line

    def compose(self) -> str:
        """Build the whole frame for the current screen."""
        pages = self.pages()
        self.current_page = min(self.current_page, len(pages) - 1)

        parts: List[str] = []
        if self.interactive:
            parts.append(HIDE_CURSOR + CLEAR_FROM_HOME)
        parts.append(self._header(len(pages)))

        content, line = self.render_content(pages[self.current_page])
        parts.append(content)

        if self.interactive:
            if self.season_countdown:
                parts.append(f"{move(self.height - 1, 1)}{fg(COUNTDOWN_FG)}{self.season_countdown:^{self.width}}{RESET}")
            side = bg(HEADER_BG) + fg(HEADER_BG) + "   "
            parts.append(
                f"{move(self.height, 1)}{side}{fg(TEXT_FG)}{self.footer_text():^{max(0, self.width - 6)}}"
                f"{fg(HEADER_BG)}   {RESET}"
            )
            parts.append(SHOW_CURSOR)
        else:
            if self.season_countdown:
                line += 1
                parts.append(f"{move(line, 1)}{fg(COUNTDOWN_FG)}{self.season_countdown:^{self.width}}{RESET}")
                line += 1
            parts.append(move(line, 1))

        return "".join(parts)

    def render_buffered(self, out: Optional[TextIO] = None) -> None:
        """Write the frame with a single write and flush."""
        out = out or sys.stdout
        out.write(self.compose())
        out.flush()


def _game_runs(rows: Sequence[ContentRow]) -> List[List[Game]]:
    """Consecutive game rows grouped together."""
    runs: List[List[Game]] = []
    current: List[Game] = []
    for row in rows:
        if isinstance(row, GameRow):
            current.append(row.game)
        elif current:
            runs.append(current)
            current = []
    if current:
        runs.append(current)
    return runs
