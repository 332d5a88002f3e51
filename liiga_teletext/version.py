# liiga_teletext/version.py
"""
Version banner and the PyPI latest-release check.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional, TextIO, Tuple

import requests

from . import __version__
from .exceptions import ConfigError
from .teletext.colors import RESET, TEXT_FG, fg

logger = logging.getLogger(__name__)

PYPI_URL = "https://pypi.org/pypi/liiga-teletext/json"
CHECK_TIMEOUT = 10
BOX_WIDTH = 50


def parse_version(raw: str) -> Tuple[int, int, int]:
    """'1.2.3' (optionally 'v1.2.3') -> (1, 2, 3)."""
    parts = raw.strip().lstrip("v").split(".")
    if len(parts) != 3:
        raise ConfigError(f"Invalid version string {raw!r}")
    try:
        major, minor, patch = (int(p) for p in parts)
    except ValueError as e:
        raise ConfigError(f"Invalid version string {raw!r}") from e
    return major, minor, patch


def check_latest_version(timeout: float = CHECK_TIMEOUT) -> Optional[str]:
    """Latest published version, or None when PyPI cannot be reached."""
    try:
        r = requests.get(PYPI_URL, timeout=timeout)
        r.raise_for_status()
        return str(r.json()["info"]["version"])
    except (requests.RequestException, ValueError, KeyError, TypeError) as e:
        logger.info("Version check failed: %s", e)
        return None


def is_newer(latest: str, current: str = __version__) -> bool:
    return parse_version(latest) > parse_version(current)


def _box_line(text: str) -> str:
    return f"{fg(TEXT_FG)}│ {text:<{BOX_WIDTH - 4}} │{RESET}"


def print_version_info(latest: Optional[str], out: Optional[TextIO] = None) -> None:
    out = out or sys.stdout
    lines = [
        f"{fg(TEXT_FG)}┌{'─' * (BOX_WIDTH - 2)}┐{RESET}",
        _box_line("Liiga Teletext Status"),
        _box_line(f"Versio: {__version__}"),
    ]
    if latest is None:
        lines.append(_box_line("Uusinta versiota ei voitu tarkistaa"))
    elif is_newer(latest):
        lines.append(_box_line(f"Uusi versio saatavilla: {latest}"))
        lines.append(_box_line("pip install --upgrade liiga-teletext"))
    else:
        lines.append(_box_line("Käytössä on uusin versio"))
    lines.append(f"{fg(TEXT_FG)}└{'─' * (BOX_WIDTH - 2)}┘{RESET}")
    out.write("\n".join(lines) + "\n")


def log_version_status() -> None:
    """Startup check; the result is only logged."""
    latest = check_latest_version()
    if latest is None:
        return
    try:
        if is_newer(latest):
            logger.info("Newer version available: %s (running %s)", latest, __version__)
    except ConfigError as e:
        logger.warning("Could not compare versions: %s", e)
