import logging

import pytest

from liiga_teletext import cli
from liiga_teletext.config import read_settings


@pytest.fixture(autouse=True)
def isolated(monkeypatch, tmp_path):
    for name in ("LIIGA_API_DOMAIN", "LIIGA_LOG_FILE", "LIIGA_HTTP_TIMEOUT", "TZ"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    yield
    root = logging.getLogger()
    for h in list(root.handlers):
        if type(h) in (logging.FileHandler, logging.StreamHandler):
            root.removeHandler(h)
            h.close()


def test_defaults():
    args = cli.parse_args([])
    assert args.date is None
    assert not (args.once or args.compact or args.wide or args.disable_links)
    assert args.min_refresh_interval is None
    assert not args.mutates_config


def test_flags():
    args = cli.parse_args(["-d", "2024-01-15", "-o", "-w", "--disable-links", "--min-refresh-interval", "20"])
    assert args.date == "2024-01-15"
    assert args.once and args.wide and args.disable_links
    assert args.min_refresh_interval == 20


@pytest.mark.parametrize(
    "argv",
    [["-c", "-w"], ["--compact", "--wide"], ["-d", "15.01.2024"], ["--min-refresh-interval", "0"]],
)
def test_invalid_arguments_exit_with_usage_error(argv):
    with pytest.raises(SystemExit) as info:
        cli.parse_args(argv)
    assert info.value.code == 2


def test_config_flag_saves_domain(tmp_path, capsys):
    assert cli.main(["--config", "api.example.com"]) == 0

    settings = read_settings(tmp_path / "liiga_teletext" / "config.toml")
    assert settings == {"api_domain": "https://api.example.com"}
    assert "Asetukset tallennettu" in capsys.readouterr().out


def test_set_and_clear_log_file(tmp_path):
    path = tmp_path / "liiga_teletext" / "config.toml"
    cli.main(["--set-log-file", "/var/log/liiga.log"])
    assert read_settings(path)["log_file_path"] == "/var/log/liiga.log"
    cli.main(["--clear-log-file"])
    assert "log_file_path" not in read_settings(path)


def test_list_config(capsys):
    assert cli.main(["--list-config"]) == 0
    out = capsys.readouterr().out
    assert "api_domain = <not set>" in out


def test_placeholder_domain_aborts_before_fetching(monkeypatch, tmp_path, capsys):
    monkeypatch.setenv("LIIGA_API_DOMAIN", "placeholder")

    code = cli.main(["--once", "--log-file", str(tmp_path / "run.log")])

    assert code == 1
    assert "Virhe: API domain is not configured" in capsys.readouterr().err


def test_version_flag(monkeypatch, capsys):
    monkeypatch.setattr(cli, "check_latest_version", lambda: None)
    assert cli.main(["--version"]) == 0
    assert "Liiga Teletext Status" in capsys.readouterr().out
