# liiga_teletext/exceptions.py
"""
Error taxonomy.

The controller only needs to know which bucket an error falls in:
  - retryable: keep the last page, show a warning, back off
  - not_found / data_shape: replace the page body with an error row
  - config: abort with a message
  - fatal: propagate, the terminal guard cleans up
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    RETRYABLE = "retryable"
    NOT_FOUND = "not_found"
    DATA_SHAPE = "data_shape"
    CONFIG = "config"
    FATAL = "fatal"


class LiigaError(Exception):
    """
    Base application error.

    `message` is the user-facing text. The request details (`url`, `status_code`) and any
    extra `context` are added by `str()` for log lines.
    """

    kind = ErrorKind.FATAL

    def __init__(self, message: str, *, url: Optional[str] = None, status_code: Optional[int] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.url = url
        self.status_code = status_code
        self.context = dict(context or {})

    def __str__(self) -> str:
        details = []
        if self.status_code is not None:
            details.append(f"HTTP {self.status_code}")
        if self.url:
            details.append(self.url)
        details.extend(f"{k}={v}" for k, v in self.context.items())
        if not details:
            return self.message
        return f"{self.message} ({', '.join(details)})"


class RetryableError(LiigaError):
    """Transient failure: timeout, connection problem, 5xx."""
    kind = ErrorKind.RETRYABLE

    def __init__(self, message: str, retry_after: float = 5.0, **kwargs) -> None:
        super().__init__(message, **kwargs)
        self.retry_after = retry_after


class RateLimitError(RetryableError):
    """Raised on HTTP 429."""

    def __init__(self, message: str = "rate limited", retry_after: float = 60.0, **kwargs) -> None:
        super().__init__(message, retry_after=retry_after, **kwargs)


class NotFoundError(LiigaError):
    """Requested date, tournament or season does not exist upstream."""
    kind = ErrorKind.NOT_FOUND


class DataShapeError(LiigaError):
    """Malformed JSON or a payload missing required fields."""
    kind = ErrorKind.DATA_SHAPE


class ConfigError(LiigaError):
    """Invalid or missing configuration."""
    kind = ErrorKind.CONFIG


class FatalError(LiigaError):
    """Terminal I/O, raw mode or config serialization failure."""
    kind = ErrorKind.FATAL


def classify(exc: BaseException) -> ErrorKind:
    """Map any exception to its taxonomy bucket; unknown exceptions are fatal."""
    if isinstance(exc, LiigaError):
        return exc.kind
    return ErrorKind.FATAL
