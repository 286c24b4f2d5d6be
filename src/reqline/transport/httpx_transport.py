"""Transports backed by httpx: HttpxTransport (sync, streaming body) and AsyncHttpxTransport."""
from __future__ import annotations

import httpx

from reqline.core.errors import ExchangeError, TransportError
from reqline.core.request import Options, Request, Response


def _timeout(options: Options) -> httpx.Timeout:
    return httpx.Timeout(options.read_timeout, connect=options.connect_timeout)


def _headers(response: httpx.Response) -> dict[str, list[str]]:
    headers: dict[str, list[str]] = {}
    for name, value in response.headers.multi_items():
        headers.setdefault(name, []).append(value)
    return headers


class _StreamBody:
    """Open httpx stream; read() buffers it, close() releases the connection."""

    def __init__(self, response: httpx.Response) -> None:
        self._response = response

    def read(self) -> bytes:
        return self._response.read()

    def close(self) -> None:
        self._response.close()


class HttpxTransport:
    """
    Sends requests through an httpx.Client. Pass your own client to share a pool
    or to plug an httpx transport (e.g. httpx.MockTransport in tests).
    """

    def __init__(self, client: httpx.Client | None = None) -> None:
        self._client = client or httpx.Client()

    def send(self, request: Request, options: Options) -> Response:
        http_request = self._client.build_request(
            request.method.value,
            request.url,
            headers=request.header_items(),
            content=request.body,
            timeout=_timeout(options),
        )
        try:
            http_response = self._client.send(
                http_request, stream=True, follow_redirects=options.follow_redirects
            )
        except httpx.TransportError as e:
            raise TransportError(
                f"{type(e).__name__} executing {request.method.value} {request.url}: {e}",
                request=request,
            ) from e
        except httpx.RequestError as e:
            raise ExchangeError(
                f"{type(e).__name__} executing {request.method.value} {request.url}: {e}",
                request=request,
            ) from e
        return Response(
            http_response.status_code,
            reason=http_response.reason_phrase,
            headers=_headers(http_response),
            body=_StreamBody(http_response),
            request=request,
        )

    def close(self) -> None:
        self._client.close()


class AsyncHttpxTransport:
    """Sends requests through an httpx.AsyncClient; the body is read before returning."""

    def __init__(self, client: httpx.AsyncClient | None = None) -> None:
        self._client = client or httpx.AsyncClient()

    async def send(self, request: Request, options: Options) -> Response:
        http_request = self._client.build_request(
            request.method.value,
            request.url,
            headers=request.header_items(),
            content=request.body,
            timeout=_timeout(options),
        )
        try:
            http_response = await self._client.send(http_request, follow_redirects=options.follow_redirects)
        except httpx.TransportError as e:
            raise TransportError(
                f"{type(e).__name__} executing {request.method.value} {request.url}: {e}",
                request=request,
            ) from e
        except httpx.RequestError as e:
            raise ExchangeError(
                f"{type(e).__name__} executing {request.method.value} {request.url}: {e}",
                request=request,
            ) from e
        return Response(
            http_response.status_code,
            reason=http_response.reason_phrase,
            headers=_headers(http_response),
            body=http_response.content,
            request=request,
        )

    async def aclose(self) -> None:
        await self._client.aclose()
