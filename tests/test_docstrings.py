import inspect

import pytest

from liiga_teletext.handlers import refresh_scheduler
from liiga_teletext.teletext import colors, indicators
from liiga_teletext.teletext.page import TeletextPage


def module_functions(module):
    return [
        f for name, f in inspect.getmembers(module, inspect.isfunction)
        if f.__module__ == module.__name__
    ]


@pytest.mark.parametrize("module", [colors, indicators, refresh_scheduler])
def test_module_helpers_are_documented(module):
    missing = [f.__name__ for f in module_functions(module) if not inspect.getdoc(f)]
    assert missing == []


PAGE_METHODS = [
    "add_game_result", "add_error_message", "add_future_games_header", "games", "has_error_messages",
    "set_fetched_date", "set_auto_refresh_disabled", "set_show_season_countdown", "show_loading",
    "hide_loading", "update_loading_animation", "show_auto_refresh_indicator", "hide_auto_refresh_indicator",
    "update_auto_refresh_animation", "is_auto_refresh_indicator_active", "set_error_warning", "set_screen_size",
]


@pytest.mark.parametrize("name", PAGE_METHODS)
def test_page_content_and_indicator_methods_are_documented(name):
    assert inspect.getdoc(vars(TeletextPage)[name])


def test_indicator_methods_are_documented():
    cls = indicators.LoadingIndicator
    assert inspect.getdoc(cls.next_frame)
    assert inspect.getdoc(cls.frame)
