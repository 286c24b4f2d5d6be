"""Transport protocols: send a resolved request, get a response. User's choice of HTTP client."""
from typing import Protocol, runtime_checkable

from reqline.core.request import Options, Request, Response


@runtime_checkable
class Transport(Protocol):
    """
    Blocking transport. Raise TransportError (or OSError) when no response was received;
    the returned Response body stays open until the caller closes it.
    """

    def send(self, request: Request, options: Options) -> Response:
        ...


@runtime_checkable
class AsyncTransport(Protocol):
    """Same contract as Transport, as a coroutine."""

    async def send(self, request: Request, options: Options) -> Response:
        ...
