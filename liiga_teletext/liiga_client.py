# liiga_teletext/liiga_client.py
"""
Thin HTTP client wrapper for the Liiga JSON API.

Transport and status failures are translated into the application error taxonomy here,
so nothing above this module has to know about requests.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests

from . import __version__
from .exceptions import DataShapeError, NotFoundError, RateLimitError, RetryableError

logger = logging.getLogger(__name__)

# Retry hints (seconds) per failure type
RATE_LIMIT_DELAY = 60
SERVER_ERROR_DELAY = 5
SERVICE_UNAVAILABLE_DELAY = 30
TIMEOUT_DELAY = 2
CONNECTION_DELAY = 10


class LiigaClient:
    """A minimal client for retrieving JSON from the Liiga API base."""

    def __init__(self, base_url: str, timeout: int = 30) -> None:
        """Store the base URL and build request headers."""
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._headers = {"User-Agent": f"liiga-teletext/{__version__}", "Accept": "application/json"}

    def get_json(self, path: str, timeout: Optional[float] = None) -> Any:
        """
        Execute a GET request to base_url + path and return parsed JSON.

        Args:
            path: path and query string starting with "/".
            timeout: per-call timeout; the smaller of this and the configured timeout wins.

        Raises:
            RetryableError / RateLimitError on transient failures,
            NotFoundError on 404, DataShapeError on other 4xx or bad JSON.
        """
        url = f"{self.base_url}{path}"
        effective = min(timeout, self.timeout) if timeout else self.timeout
        logger.debug("GET %s (timeout %ss)", url, effective)

        try:
            r = requests.get(url, timeout=effective, headers=self._headers)
        except requests.Timeout as e:
            raise RetryableError(f"Request timed out: {e}", retry_after=TIMEOUT_DELAY, url=url) from e
        except requests.ConnectionError as e:
            raise RetryableError(f"Connection failed: {e}", retry_after=CONNECTION_DELAY, url=url) from e
        except requests.RequestException as e:
            raise RetryableError(f"Request failed: {e}", retry_after=SERVER_ERROR_DELAY, url=url) from e

        self._raise_for_status(r, url)

        try:
            return r.json()
        except ValueError as e:
            raise DataShapeError(f"Invalid JSON in response: {e}", url=url, status_code=r.status_code) from e

    @staticmethod
    def _raise_for_status(r: requests.Response, url: str) -> None:
        status = r.status_code
        if status < 400:
            return
        if status == 429:
            retry_after = _retry_after_header(r.headers.get("Retry-After"), RATE_LIMIT_DELAY)
            raise RateLimitError("Rate limited by the API", retry_after=retry_after, url=url, status_code=status)
        if status == 503:
            raise RetryableError(
                "Service unavailable", retry_after=SERVICE_UNAVAILABLE_DELAY, url=url, status_code=status
            )
        if status >= 500:
            raise RetryableError("Server error", retry_after=SERVER_ERROR_DELAY, url=url, status_code=status)
        if status == 404:
            raise NotFoundError("Not found", url=url, status_code=status)
        raise DataShapeError("Unexpected client error", url=url, status_code=status)

    def games_for_date(self, tournament: str, date: str, timeout: Optional[float] = None) -> Dict[str, Any]:
        """Fetch one tournament's games for a date (YYYY-MM-DD)."""
        return self.get_json(f"/games?tournament={tournament}&date={date}", timeout=timeout)

    def schedule(self, tournament: str, season: int, timeout: Optional[float] = None) -> Any:
        """Fetch the first week of a tournament's season schedule."""
        return self.get_json(f"/schedule?tournament={tournament}&week=1&season={season}", timeout=timeout)

    def game_details(self, season: int, game_id: int, timeout: Optional[float] = None) -> Dict[str, Any]:
        """Fetch one game with its goal events and player lists."""
        return self.get_json(f"/games/{season}/{game_id}", timeout=timeout)


def _retry_after_header(raw: Optional[str], default: float) -> float:
    """Parse a numeric Retry-After header; HTTP-date values fall back to default."""
    try:
        return float(raw) if raw else default
    except ValueError:
        return default
