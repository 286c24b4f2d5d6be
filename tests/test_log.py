"""Tests for exchange logging levels."""

import logging
from typing import Annotated, Protocol

from reqline import LogLevel, Param, TransportError, request_line

BASE = "http://api.test"


class Api(Protocol):
    @request_line("POST /echo/{id}")
    def echo(self, id: Annotated[str, Param()], payload: str) -> str:
        ...


def messages(caplog):
    return [record.getMessage() for record in caplog.records if record.name == "reqline.client.log"]


def test_none_logs_nothing(builder, caplog):
    caplog.set_level(logging.DEBUG, logger="reqline")
    builder.target(Api, BASE).echo("1", "hi")
    assert messages(caplog) == []


def test_basic_logs_request_and_status_lines(builder, transport, caplog):
    caplog.set_level(logging.DEBUG, logger="reqline")
    transport.replies = [(200, b"pong", {"Content-Type": ["text/plain"]})]

    builder.log_level("basic").target(Api, BASE).echo("1", "hi")

    lines = messages(caplog)
    assert lines[0] == "[Api#echo(str,str)] ---> POST http://api.test/echo/1 HTTP/1.1"
    assert lines[1].startswith("[Api#echo(str,str)] <--- HTTP/1.1 200 (")
    assert len(lines) == 2


def test_full_logs_bodies_and_decoder_still_reads_them(builder, transport, caplog):
    caplog.set_level(logging.DEBUG, logger="reqline")
    transport.replies = [(200, b"pong", {"Content-Type": ["text/plain"]})]

    result = builder.log_level(LogLevel.FULL).target(Api, BASE).echo("1", "hi")

    assert result == "pong"
    lines = messages(caplog)
    assert "[Api#echo(str,str)] hi" in lines
    assert "[Api#echo(str,str)] ---> END HTTP (2-byte body)" in lines
    assert "[Api#echo(str,str)] Content-Type: text/plain" in lines
    assert "[Api#echo(str,str)] pong" in lines
    assert "[Api#echo(str,str)] <--- END HTTP (4-byte body)" in lines
    assert transport.responses[0].body.closed


def test_retries_and_transport_errors_are_logged(builder, transport, caplog):
    caplog.set_level(logging.DEBUG, logger="reqline")
    transport.replies = [TransportError("reset"), (200, b"ok", {})]

    builder.log_level("basic").target(Api, BASE).echo("1", "hi")

    lines = messages(caplog)
    assert any(line.startswith("[Api#echo(str,str)] <--- ERROR TransportError: reset") for line in lines)
    assert any(line.startswith("[Api#echo(str,str)] ---> RETRYING") for line in lines)


def test_custom_logger(builder, caplog):
    caplog.set_level(logging.DEBUG, logger="my.client")
    builder.logger(logging.getLogger("my.client")).log_level("basic").target(Api, BASE).echo("1", "hi")
    assert any(record.name == "my.client" for record in caplog.records)
