"""Exchange logging at DEBUG, filtered by LogLevel."""
from __future__ import annotations

import logging
from enum import Enum

from reqline.core.errors import RetryableError
from reqline.core.request import Request, Response

logger = logging.getLogger(__name__)


class LogLevel(str, Enum):
    NONE = "none"  # nothing
    BASIC = "basic"  # request line, status and elapsed time
    HEADERS = "headers"  # + headers
    FULL = "full"  # + bodies


class ExchangeLog:
    """One per client; every line is prefixed with the method's config key."""

    def __init__(self, level: LogLevel = LogLevel.NONE, log: logging.Logger | None = None) -> None:
        self.level = level
        self._log = log or logger

    def _enabled(self, level: LogLevel) -> bool:
        order = [LogLevel.NONE, LogLevel.BASIC, LogLevel.HEADERS, LogLevel.FULL]
        return self.level is not LogLevel.NONE and order.index(self.level) >= order.index(level)

    def request(self, config_key: str, request: Request) -> None:
        if not self._enabled(LogLevel.BASIC):
            return
        self._log.debug(f"[{config_key}] ---> {request.method.value} {request.url} HTTP/1.1")
        if not self._enabled(LogLevel.HEADERS):
            return
        for name, value in request.header_items():
            self._log.debug(f"[{config_key}] {name}: {value}")
        size = len(request.body) if request.body else 0
        if size and self._enabled(LogLevel.FULL):
            self._log.debug(f"[{config_key}] {request.body.decode(request.charset, errors='replace')}")
        self._log.debug(f"[{config_key}] ---> END HTTP ({size}-byte body)")

    def retry(self, config_key: str, error: RetryableError, interval: float) -> None:
        if self._enabled(LogLevel.BASIC):
            self._log.debug(f"[{config_key}] ---> RETRYING in {interval:.3f}s after {type(error).__name__}: {error}")

    def transport_error(self, config_key: str, error: Exception, elapsed_ms: int) -> None:
        if self._enabled(LogLevel.BASIC):
            self._log.debug(f"[{config_key}] <--- ERROR {type(error).__name__}: {error} ({elapsed_ms}ms)")

    def response(self, config_key: str, response: Response, elapsed_ms: int) -> Response:
        """Logs the response; at FULL the body is read and the returned response holds it in memory."""
        if not self._enabled(LogLevel.BASIC):
            return response
        reason = f" {response.reason}" if response.reason else ""
        self._log.debug(f"[{config_key}] <--- HTTP/1.1 {response.status}{reason} ({elapsed_ms}ms)")
        if not self._enabled(LogLevel.HEADERS):
            return response
        for name, values in response.headers.items():
            for value in values:
                self._log.debug(f"[{config_key}] {name}: {value}")
        size = 0
        if self._enabled(LogLevel.FULL) and response.body is not None:
            response = response.buffered()
            data = response.read()
            size = len(data)
            if size:
                self._log.debug(f"[{config_key}] {data.decode(response.charset, errors='replace')}")
        self._log.debug(f"[{config_key}] <--- END HTTP ({size}-byte body)")
        return response
