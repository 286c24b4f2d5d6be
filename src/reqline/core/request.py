"""Immutable request, transport options and the response handed back by a transport."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Mapping, Protocol, runtime_checkable

if TYPE_CHECKING:
    from reqline.core.template import RequestTemplate


class HttpMethod(str, Enum):
    GET = "GET"
    HEAD = "HEAD"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    CONNECT = "CONNECT"
    OPTIONS = "OPTIONS"
    TRACE = "TRACE"
    PATCH = "PATCH"


@dataclass(frozen=True)
class Options:
    """
    Per-request transport options. Builder default applies to every call;
    a method parameter typed Options overrides it for one call.
    """

    connect_timeout: float = 10.0
    read_timeout: float = 60.0
    follow_redirects: bool = True


@dataclass(frozen=True)
class Request:
    """Fully resolved request: what the transport sends."""

    method: HttpMethod
    url: str
    headers: Mapping[str, tuple[str, ...]] = field(default_factory=dict)
    body: bytes | None = None
    charset: str = "utf-8"
    template: RequestTemplate | None = field(default=None, repr=False, compare=False)

    def header_items(self) -> list[tuple[str, str]]:
        """Flattened (name, value) pairs, one per header value."""
        return [(name, value) for name, values in self.headers.items() for value in values]

    def __str__(self) -> str:
        lines = [f"{self.method.value} {self.url} HTTP/1.1"]
        lines.extend(f"{name}: {value}" for name, value in self.header_items())
        if self.body:
            lines.append("")
            lines.append(self.body.decode(self.charset, errors="replace"))
        return "\n".join(lines)


@runtime_checkable
class ResponseBody(Protocol):
    """Response payload: read once, close when done."""

    def read(self) -> bytes:
        ...

    def close(self) -> None:
        ...


class BytesBody:
    """Body already held in memory."""

    def __init__(self, data: bytes) -> None:
        self._data = data
        self.closed = False

    def read(self) -> bytes:
        return self._data

    def close(self) -> None:
        self.closed = True


class Response:
    """
    Response returned by a transport. Owns an open body until close() is called.
    Usable as a context manager.
    """

    def __init__(
        self,
        status: int,
        *,
        reason: str = "",
        headers: Mapping[str, list[str]] | None = None,
        body: ResponseBody | bytes | None = None,
        request: Request | None = None,
    ) -> None:
        self.status = status
        self.reason = reason
        self.headers: dict[str, list[str]] = {k: list(v) for k, v in (headers or {}).items()}
        self.body: ResponseBody | None = BytesBody(body) if isinstance(body, bytes) else body
        self.request = request

    def header(self, name: str) -> list[str]:
        """All values of a header, case-insensitive."""
        lowered = name.lower()
        for key, values in self.headers.items():
            if key.lower() == lowered:
                return values
        return []

    @property
    def charset(self) -> str:
        for content_type in self.header("Content-Type"):
            for part in content_type.split(";")[1:]:
                key, _, value = part.strip().partition("=")
                if key.lower() == "charset" and value:
                    return value.strip('"')
        return "utf-8"

    def read(self) -> bytes:
        return self.body.read() if self.body is not None else b""

    def text(self) -> str:
        return self.read().decode(self.charset, errors="replace")

    def buffered(self) -> Response:
        """Copy whose body is fully in memory; closes this response's body."""
        try:
            data = self.read()
        finally:
            self.close()
        return Response(self.status, reason=self.reason, headers=self.headers, body=data, request=self.request)

    def close(self) -> None:
        if self.body is not None:
            self.body.close()

    def __enter__(self) -> Response:
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"Response(status={self.status}, reason={self.reason!r})"
