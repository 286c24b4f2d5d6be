"""Shared fixtures: scripted transports that record every request they receive."""

import pytest

from reqline import ClientBuilder, DefaultRetryer
from reqline.core.request import BytesBody, Response


class RecordingTransport:
    """
    Replays scripted replies in order; the last one repeats.
    A reply is an exception instance (raised) or a (status, body, headers) tuple.
    """

    def __init__(self, *replies):
        self.replies = list(replies) or [(200, b"", {})]
        self.requests = []
        self.options = []
        self.responses = []

    def _next(self, request, options):
        self.requests.append(request)
        self.options.append(options)
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, Exception):
            raise reply
        status, body, headers = reply
        response = Response(status, reason="", headers=headers, body=BytesBody(body), request=request)
        self.responses.append(response)
        return response

    def send(self, request, options):
        return self._next(request, options)

    @property
    def last(self):
        return self.requests[-1]


class AsyncRecordingTransport(RecordingTransport):
    async def send(self, request, options):
        return self._next(request, options)


@pytest.fixture
def transport():
    """Transport answering 200 with an empty body until scripted otherwise."""
    return RecordingTransport()


@pytest.fixture
def builder(transport):
    """Builder wired to the recording transport; retries do not sleep."""
    return ClientBuilder().transport(transport).retryer(DefaultRetryer(0.0, 0.0, 5))


@pytest.fixture
def async_transport():
    return AsyncRecordingTransport()
