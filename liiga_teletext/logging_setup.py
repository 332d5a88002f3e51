# liiga_teletext/logging_setup.py
"""
Logging sink setup.

Logs always go to a file; the terminal is owned by the teletext page, so stderr output is
only enabled for --debug and --once runs.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from .config import default_log_path

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s %(message)s"


def resolve_log_path(flag_path: Optional[str], config_path: Optional[str]) -> Path:
    """--log-file wins over the configured path (which already includes LIIGA_LOG_FILE)."""
    raw = flag_path or config_path
    return Path(raw).expanduser() if raw else default_log_path()


def configure_logging(log_path: Path, debug: bool = False, stderr: bool = False) -> Path:
    """
    Attach the file handler (and optionally stderr) to the root logger.

    Args:
        log_path: file to append to; parent directories are created.
        debug: DEBUG level instead of INFO.
        stderr: also echo to stderr (WARNING and up unless debug).

    Returns:
        The log file path in use.
    """
    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()

    root.setLevel(logging.DEBUG if debug else logging.INFO)
    formatter = logging.Formatter(LOG_FORMAT)

    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(log_path, encoding="utf-8")
        fh.setFormatter(formatter)
        root.addHandler(fh)
    except OSError:
        # Unwritable log location, log to stderr instead
        stderr = True

    if stderr or debug:
        sh = logging.StreamHandler()
        sh.setLevel(logging.DEBUG if debug else logging.WARNING)
        sh.setFormatter(formatter)
        root.addHandler(sh)

    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests").setLevel(logging.WARNING)
    return log_path
