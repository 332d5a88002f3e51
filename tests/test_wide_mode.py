import pytest

from liiga_teletext.teletext.page import TeletextPage
from liiga_teletext.teletext.wide_mode import split_columns

from builders import make_game, make_goal, screen


def wide_page(width, height, games):
    page = TeletextPage(wide_mode=True, size_fn=lambda: (width, height))
    page.set_fetched_date("2024-01-15")
    for game in games:
        page.add_game_result(game)
    return page


def four_games():
    return [
        make_game("Tappara", "HIFK", result="3-2"),
        make_game("Kärpät", "Lukko", result="1-0", goals=[make_goal(10, 1, 0, name="Aho")]),
        make_game("JYP", "Ilves", result="2-2"),
        make_game("Pelicans", "SaiPa", result="0-4"),
    ]


def test_s3_two_games_per_column():
    lines = screen(wide_page(136, 40, four_games()).compose())

    assert lines[4][1:].startswith("Tappara")
    assert lines[4][69:].startswith("JYP")
    # left column: Tappara (1 line) + gap, then Kärpät
    assert lines[6][1:].startswith("Kärpät")
    assert lines[6][69:].startswith("Pelicans")
    assert lines[7][1:].lstrip().startswith("10 Aho")


@pytest.mark.parametrize("count, left, right", [(0, 0, 0), (1, 1, 0), (4, 2, 2), (5, 3, 2)])
def test_split_is_left_heavy(count, left, right):
    games = [make_game() for _ in range(count)]
    lhs, rhs = split_columns(games)
    assert (len(lhs), len(rhs)) == (left, right)
    assert len(lhs) - len(rhs) in (0, 1)


def test_narrow_terminal_falls_back_to_normal_mode():
    page = wide_page(100, 40, four_games())
    lines = screen(page.compose())

    assert lines[4].strip() == "Terminal too narrow for wide mode (100 chars, need 128 chars, short 28 chars)"
    assert lines[5].strip() == "Resize terminal to at least 128 characters wide for wide mode"
    assert lines[6][2:].startswith("Tappara")

    page.size_fn = lambda: (136, 40)
    page.handle_resize()
    lines = screen(page.compose())
    assert lines[4][1:].startswith("Tappara")
    assert lines[4][69:].startswith("JYP")
