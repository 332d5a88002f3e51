# liiga_teletext/config.py
"""
Configuration for the teletext app.

Settings come from a TOML file in the platform config directory and can be overridden
from the environment:
  - LIIGA_API_DOMAIN
  - LIIGA_LOG_FILE
  - LIIGA_HTTP_TIMEOUT
  - TZ
"""

from __future__ import annotations

from dataclasses import dataclass
import json
import logging
import os
from pathlib import Path
import sys
import tomllib
from typing import Any, Callable, Dict, Optional

from dateutil import tz

from .exceptions import ConfigError, FatalError

logger = logging.getLogger(__name__)

APP_DIR_NAME = "liiga_teletext"
DEFAULT_HTTP_TIMEOUT_SECONDS = 30

# Domain values that mean "not configured"; used by CI to avoid real network calls.
PLACEHOLDER_DOMAINS = ("", "placeholder", "test", "unset")


def _env_int(name: str, default: int) -> int:
    """Read an integer environment variable, returning default on missing/invalid values."""
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


def _env_str(name: str, default: Optional[str]) -> Optional[str]:
    """Read a string environment variable; unset means default (empty string is a value)."""
    raw = os.getenv(name)
    return default if raw is None else raw.strip()


def config_dir() -> Path:
    """Return the platform config directory (not the app subdirectory)."""
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support"
    if sys.platform.startswith("win"):
        appdata = os.environ.get("APPDATA")
        return Path(appdata) if appdata else Path.home() / "AppData" / "Roaming"
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg).expanduser()
    return Path.home() / ".config"


def config_path() -> Path:
    return config_dir() / APP_DIR_NAME / "config.toml"


def default_log_path() -> Path:
    return config_dir() / APP_DIR_NAME / "logs" / "liiga_teletext.log"


def is_placeholder_domain(domain: Optional[str]) -> bool:
    """True when the API domain is empty or one of the CI placeholder values."""
    return (domain or "").strip().lower() in PLACEHOLDER_DOMAINS


def normalize_domain(domain: str) -> str:
    """
    Force an https:// scheme and strip trailing slashes.

    Placeholder values are returned untouched so callers can still detect them.
    """
    d = (domain or "").strip()
    if is_placeholder_domain(d):
        return d
    if d.startswith("http://"):
        d = "https://" + d[len("http://"):]
    elif not d.startswith("https://"):
        d = "https://" + d
    return d.rstrip("/")


def read_settings(path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Read the raw settings table from the TOML file.

    Returns an empty dict when the file does not exist.

    Raises:
        ConfigError if the file exists but cannot be parsed.
    """
    p = path or config_path()
    if not p.exists():
        return {}
    try:
        with p.open("rb") as fh:
            return tomllib.load(fh)
    except (tomllib.TOMLDecodeError, OSError) as e:
        raise ConfigError(f"Could not read config file {p}: {e}") from e


def write_settings(settings: Dict[str, Any], path: Optional[Path] = None) -> Path:
    """
    Write the settings table back as TOML.

    Only the three known keys are written; None values are left out.
    """
    p = path or config_path()
    lines = []
    for key in ("api_domain", "log_file_path", "http_timeout_seconds"):
        value = settings.get(key)
        if value is None:
            continue
        if isinstance(value, bool) or not isinstance(value, (int, str)):
            raise FatalError(f"Cannot serialize config value {key}={value!r}")
        # JSON string escaping is valid TOML basic-string escaping
        lines.append(f"{key} = {json.dumps(value) if isinstance(value, str) else value}")
    try:
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text("\n".join(lines) + "\n", encoding="utf-8")
    except OSError as e:
        raise FatalError(f"Could not write config file {p}: {e}") from e
    logger.info("Saved config to %s", p)
    return p


@dataclass(frozen=True)
class Config:
    """
    Immutable resolved configuration.

    Environment variables win over the values the instance was built with.
    """

    api_domain: str = ""
    log_file_path: Optional[str] = None
    http_timeout_seconds: int = DEFAULT_HTTP_TIMEOUT_SECONDS
    tz_name: str = ""

    def __post_init__(self):
        # dataclass frozen => use object.__setattr__
        object.__setattr__(self, "api_domain", normalize_domain(_env_str("LIIGA_API_DOMAIN", self.api_domain) or ""))
        object.__setattr__(self, "log_file_path", _env_str("LIIGA_LOG_FILE", self.log_file_path) or None)

        timeout = _env_int("LIIGA_HTTP_TIMEOUT", self.http_timeout_seconds)
        object.__setattr__(self, "http_timeout_seconds", timeout if timeout > 0 else DEFAULT_HTTP_TIMEOUT_SECONDS)
        object.__setattr__(self, "tz_name", _env_str("TZ", self.tz_name) or "")

    @property
    def local_tz(self):
        """Timezone object used for all local conversions (system zone when unset)."""
        return (tz.gettz(self.tz_name) if self.tz_name else None) or tz.tzlocal()

    @property
    def has_placeholder_domain(self) -> bool:
        return is_placeholder_domain(self.api_domain)

    @classmethod
    def load(
        cls,
        path: Optional[Path] = None,
        prompt: Optional[Callable[[str], str]] = None,
    ) -> "Config":
        """
        Build the config from the TOML file plus environment overrides.

        Args:
            path: config file location (defaults to the platform path).
            prompt: input function used on first run when no domain is configured;
                None disables prompting.

        Returns:
            Resolved Config.
        """
        p = path or config_path()
        settings = read_settings(p)

        raw_timeout = settings.get("http_timeout_seconds", DEFAULT_HTTP_TIMEOUT_SECONDS)
        if not isinstance(raw_timeout, int) or isinstance(raw_timeout, bool):
            raise ConfigError(f"http_timeout_seconds must be an integer, got {raw_timeout!r}")

        domain = settings.get("api_domain")
        if domain is None and os.getenv("LIIGA_API_DOMAIN") is None and prompt is not None:
            domain = prompt_for_domain(prompt)
            settings["api_domain"] = normalize_domain(domain)
            write_settings(settings, p)

        return cls(
            api_domain=str(domain or ""),
            log_file_path=settings.get("log_file_path"),
            http_timeout_seconds=raw_timeout,
        )

    def describe(self, path: Optional[Path] = None) -> str:
        """Human-readable config listing for --list-config."""
        p = path or config_path()

        def marker(env: str) -> str:
            return " (env)" if os.getenv(env) is not None else ""

        return "\n".join([
            f"Config file: {p}",
            f"api_domain = {self.api_domain or '<not set>'}{marker('LIIGA_API_DOMAIN')}",
            f"log_file_path = {self.log_file_path or default_log_path()}{marker('LIIGA_LOG_FILE')}",
            f"http_timeout_seconds = {self.http_timeout_seconds}{marker('LIIGA_HTTP_TIMEOUT')}",
        ])


def prompt_for_domain(prompt: Callable[[str], str]) -> str:
    """Ask the user for the API domain on first run."""
    answer = prompt("Anna API-osoite (esim. https://api.example.com): ").strip()
    if not answer:
        raise ConfigError("API domain is required")
    return answer


def update_settings(path: Optional[Path] = None, **changes: Any) -> Path:
    """Apply changes to the persisted settings; a None value removes the key."""
    settings = read_settings(path)
    for key, value in changes.items():
        if value is None:
            settings.pop(key, None)
        else:
            settings[key] = normalize_domain(value) if key == "api_domain" else value
    return write_settings(settings, path)
