import pytest

from liiga_teletext.teletext.layout import (
    COMPACT,
    MIN_TEAM_WIDTH,
    WIDE_LEFT_COLUMN,
    WIDE_RIGHT_COLUMN,
    calculate_layout,
    calculate_wide_layout,
    truncate_team_name,
)

from builders import make_game


def test_default_layout_at_80_columns():
    layout = calculate_layout(80, [make_game()])
    assert layout.home_team_width == 20
    assert layout.away_team_width == 20
    assert layout.separator_width == 3
    assert layout.home_column == 3
    assert layout.away_column == 26
    assert layout.time_column == 48
    assert layout.score_column == 54
    assert layout.max_player_name_width == 11
    assert layout.max_goal_types_width == 5
    assert layout.play_icon_column == 15


def test_widths_grow_to_longest_name():
    game = make_game(home="Lappeenrannan SaiPa Extra", away="Hämeenlinnan Pallokerho")
    layout = calculate_layout(200, [game])
    assert layout.home_team_width == len("Lappeenrannan SaiPa Extra")
    assert layout.away_team_width == len("Hämeenlinnan Pallokerho")


def test_wider_side_shrinks_first():
    layout = calculate_layout(60, [make_game()])
    assert (layout.home_team_width, layout.away_team_width) == (19, 20)


def test_narrow_terminal_clamps_to_minimum():
    layout = calculate_layout(40, [make_game()])
    assert layout.home_team_width == MIN_TEAM_WIDTH
    assert layout.away_team_width == MIN_TEAM_WIDTH
    # tight cell: goal types limited to three characters
    assert layout.max_goal_types_width == 3
    assert layout.max_player_name_width == 8


def test_scorer_cell_fits_before_away_column():
    for width in (40, 60, 80, 120):
        layout = calculate_layout(width, [make_game()])
        used = layout.goal_types_column + layout.max_goal_types_width
        assert used <= layout.scorer_cell_width
        assert layout.home_column + layout.scorer_cell_width == layout.away_column


def test_wide_layout_columns():
    layout = calculate_wide_layout([make_game()])
    assert layout.home_column == WIDE_LEFT_COLUMN
    right = layout.at_column(WIDE_RIGHT_COLUMN)
    assert right.home_column == 70
    assert right.away_column - right.home_column == layout.away_column - layout.home_column
    assert right.play_icon_column == layout.play_icon_column


@pytest.mark.parametrize(
    "name, width, expected",
    [
        ("Tappara", 15, "Tappara"),
        ("Lappeenrannan SaiPa", 15, "Lappeenrannan"),
        ("Abcdefghijklmnopqrst", 10, "Abcdefghij"),
        ("Ab Cdefghijklmnop", 10, "Ab Cdefghi"),
    ],
)
def test_truncate_team_name(name, width, expected):
    assert truncate_team_name(name, width) == expected


@pytest.mark.parametrize("width, expected", [(80, 3), (40, 2), (18, 1), (17, 0)])
def test_compact_games_per_line(width, expected):
    assert COMPACT.games_per_line(width) == expected
