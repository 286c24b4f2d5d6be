"""Tests for capabilities enriching the components a ClientBuilder assembles."""

import dataclasses
from typing import Annotated, Protocol

from reqline import Capability, Options, Param, request_line
from reqline.client import SynchronousMethodHandler

BASE = "http://api.test"


class Api(Protocol):
    @request_line("GET /users/{id}")
    def user(self, id: Annotated[int, Param()]) -> str:
        ...


class TracingTransport:
    def __init__(self, delegate):
        self.delegate = delegate
        self.calls = 0

    def send(self, request, options):
        self.calls += 1
        headers = {**request.headers, "X-Trace": ("t-1",)}
        return self.delegate.send(dataclasses.replace(request, headers=headers), options)


class Tracing(Capability):
    transport = None

    def enrich_transport(self, transport):
        self.transport = TracingTransport(transport)
        return self.transport


def test_capability_wraps_the_transport(builder, transport):
    tracing = Tracing()
    client = builder.add_capability(tracing).target(Api, BASE)
    transport.replies = [(200, b"alice", {})]

    assert client.user(1) == "alice"
    assert tracing.transport.calls == 1
    assert transport.last.headers["X-Trace"] == ("t-1",)
    assert isinstance(client._dispatch["user"], SynchronousMethodHandler)


class Shouting:
    """Only defines the hooks it needs."""

    def enrich_decoder(self, decoder):
        class Upper:
            def decode(self, response, return_type):
                return decoder.decode(response, return_type).upper()

        return Upper()


class Exclaiming:
    def enrich_decoder(self, decoder):
        class Exclaim:
            def decode(self, response, return_type):
                return decoder.decode(response, return_type) + "!"

        return Exclaim()


def test_capabilities_apply_in_order_added(builder, transport):
    transport.replies = [(200, b"bob", {})]
    client = builder.add_capability(Shouting()).add_capability(Exclaiming()).target(Api, BASE)
    assert client.user(2) == "BOB!"


class ShortTimeouts(Capability):
    def enrich_options(self, options):
        return dataclasses.replace(options, read_timeout=1.5)


def test_capability_enriches_default_options(builder, transport):
    client = builder.options(Options(connect_timeout=2.0)).add_capability(ShortTimeouts()).target(Api, BASE)
    client.user(3)
    assert transport.options[-1] == Options(connect_timeout=2.0, read_timeout=1.5)


class Passive(Capability):
    pass


def test_untouched_components_are_kept(builder, transport):
    transport.replies = [(200, b"carol", {})]
    client = builder.add_capability(Passive()).target(Api, BASE)
    assert client.user(4) == "carol"
    assert transport.last.url == f"{BASE}/users/4"
