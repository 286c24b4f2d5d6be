"""Error taxonomy: build-time, encode/decode, transport and response errors."""
from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from reqline.core.request import Request


class ReqlineError(Exception):
    """Base for every error raised by reqline."""


class BuildError(ReqlineError):
    """Interface cannot be turned into a client: bad annotations, hierarchy, roles. Never retried."""


class EncodeError(ReqlineError):
    """Body encoder rejected an argument."""


class DecodeError(ReqlineError):
    """Response body could not be decoded into the declared type."""

    def __init__(self, message: str, status: int = -1, request: Request | None = None) -> None:
        super().__init__(message)
        self.status = status
        self.request = request


class RetryableError(ReqlineError):
    """
    Error the retry policy may act on.
    retry_after: absolute time before which the next attempt should not start, if known.
    """

    def __init__(
        self,
        message: str,
        *,
        status: int = -1,
        request: Request | None = None,
        retry_after: datetime | None = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.request = request
        self.retry_after = retry_after


class TransportError(RetryableError):
    """Network-level failure: the request never produced a response."""


class ExchangeError(ReqlineError):
    """Request failed above the network layer (e.g. a redirect loop). Never retried."""

    def __init__(self, message: str, request: Request | None = None) -> None:
        super().__init__(message)
        self.request = request


class ResponseError(ReqlineError):
    """Response in the error range, as produced by the error decoder."""

    def __init__(
        self,
        message: str,
        *,
        status: int,
        reason: str = "",
        request: Request | None = None,
        body: bytes = b"",
        headers: dict[str, list[str]] | None = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.reason = reason
        self.request = request
        self.body = body
        self.headers = headers or {}

    def content_utf8(self) -> str:
        return self.body.decode("utf-8", errors="replace")


class RetryableResponseError(ResponseError, RetryableError):
    """Error-range response that explicitly asks to be retried (e.g. carries Retry-After)."""

    def __init__(
        self,
        message: str,
        *,
        status: int,
        reason: str = "",
        request: Request | None = None,
        body: bytes = b"",
        headers: dict[str, list[str]] | None = None,
        retry_after: datetime | None = None,
    ) -> None:
        ResponseError.__init__(
            self, message, status=status, reason=reason, request=request, body=body, headers=headers
        )
        self.retry_after = retry_after
