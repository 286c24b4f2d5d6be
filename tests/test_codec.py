"""Tests for the bundled encoders, decoders and error decoder."""

import json
from datetime import datetime, timezone
from typing import Any, Optional

import pytest
from pydantic import BaseModel

from reqline import (
    ClientBuilder,
    DecodeError,
    DefaultDecoder,
    DefaultErrorDecoder,
    EncodeError,
    JsonDecoder,
    JsonEncoder,
    Request,
    RequestTemplate,
    Response,
    ResponseError,
    RetryableResponseError,
    request_line,
)
from reqline.codec import FORM_MAP, DefaultEncoder, FieldQueryMapEncoder, StringDecoder, empty_value_of
from reqline.core.request import HttpMethod

REQUEST = Request(method=HttpMethod.GET, url="http://api.test/things")


class Thing(BaseModel):
    id: int
    label: Optional[str] = None


def response(status=200, body=b"", headers=None):
    return Response(status, reason="", headers=headers or {}, body=body, request=REQUEST)


def test_empty_values():
    assert empty_value_of(list[str]) == []
    assert empty_value_of(dict[str, int]) == {}
    assert empty_value_of(bytes) == b""
    assert empty_value_of(str) is None
    assert empty_value_of(Thing) is None


def test_default_encoder_form_and_text():
    template = RequestTemplate()
    DefaultEncoder().encode({"a": "1", "b": ["x", "y"]}, FORM_MAP, template)
    assert template.body_bytes == b"a=1&b=x&b=y"
    assert template.header_values("content-type") == ["application/x-www-form-urlencoded; charset=UTF-8"]

    template = RequestTemplate()
    DefaultEncoder().encode(b"\x00\x01", bytes, template)
    assert template.body_bytes == b"\x00\x01"
    assert template.headers() == {}


def test_default_encoder_rejects_other_types():
    with pytest.raises(EncodeError):
        DefaultEncoder().encode(Thing(id=1), Thing, RequestTemplate())


def test_default_decoder():
    decoder = DefaultDecoder()
    assert decoder.decode(response(body="héllo".encode()), str) == "héllo"
    assert decoder.decode(response(body=b"\x01"), bytes) == b"\x01"
    assert decoder.decode(response(status=204), list[str]) == []
    assert decoder.decode(response(body=b"ignored"), type(None)) is None


def test_string_decoder_rejects_other_types():
    with pytest.raises(DecodeError, match="Thing is not a type supported"):
        StringDecoder().decode(response(body=b"{}"), Thing)


def test_string_decoder_honours_charset():
    latin = response(body="é".encode("latin-1"), headers={"Content-Type": ["text/plain; charset=latin-1"]})
    assert StringDecoder().decode(latin, str) == "é"


def test_json_decoder():
    decoder = JsonDecoder()
    assert decoder.decode(response(body=b'{"id": 1}'), Thing) == Thing(id=1)
    assert decoder.decode(response(body=b'[{"id": 1}, {"id": 2, "label": "b"}]'), list[Thing]) == [
        Thing(id=1),
        Thing(id=2, label="b"),
    ]
    assert decoder.decode(response(body=b"  "), Thing) is None
    assert decoder.decode(response(status=404), list[Thing]) == []
    with pytest.raises(DecodeError, match="not a valid Thing"):
        decoder.decode(response(body=b'{"id": "x"}'), Thing)


def test_json_encoder_keeps_existing_content_type():
    template = RequestTemplate()
    template.header("Content-Type", "application/vnd.api+json")
    JsonEncoder().encode({"a": [1, 2]}, dict[str, Any], template)
    assert template.body_bytes == b'{"a":[1,2]}'
    assert template.header_values("Content-Type") == ["application/vnd.api+json"]


def test_json_encoder_wraps_serialization_errors():
    with pytest.raises(EncodeError):
        JsonEncoder().encode({"a": object()}, Any, RequestTemplate())


def test_error_decoder_builds_response_error():
    error = DefaultErrorDecoder().decode("Api#things()", response(status=500, body=b"oops"))
    assert isinstance(error, ResponseError)
    assert not isinstance(error, RetryableResponseError)
    assert str(error) == "[500]  during [GET] to [http://api.test/things] [Api#things()]: [oops]"
    assert error.body == b"oops"


def test_error_decoder_retry_after_seconds_and_date():
    error = DefaultErrorDecoder().decode("k", response(status=503, headers={"Retry-After": ["120"]}))
    assert isinstance(error, RetryableResponseError)
    remaining = (error.retry_after - datetime.now(timezone.utc)).total_seconds()
    assert 100 < remaining <= 120

    dated = DefaultErrorDecoder().decode(
        "k", response(status=503, headers={"Retry-After": ["Wed, 21 Oct 2015 07:28:00 GMT"]})
    )
    assert dated.retry_after == datetime(2015, 10, 21, 7, 28, tzinfo=timezone.utc)

    garbage = DefaultErrorDecoder().decode("k", response(status=503, headers={"Retry-After": ["soon"]}))
    assert not isinstance(garbage, RetryableResponseError)


def test_field_query_map_encoder():
    class Plain:
        def __init__(self):
            self.state = "open"
            self.page = None
            self._secret = "x"

    encoder = FieldQueryMapEncoder()
    assert encoder.encode(Plain()) == {"state": "open"}
    assert encoder.encode(Thing(id=1)) == {"id": 1}
    assert encoder.encode(None) == {}
    with pytest.raises(EncodeError):
        encoder.encode(42)


class Envelope:
    @request_line("GET /things/1")
    def thing(self) -> Thing:
        ...


def test_map_and_decode_unwraps_an_envelope(transport):
    transport.replies = [(200, b'{"data": {"id": 1, "label": "one"}}', {})]

    def unwrap(resp, return_type):
        inner = json.dumps(json.loads(resp.read())["data"]).encode()
        return Response(resp.status, reason=resp.reason, headers=resp.headers, body=inner, request=resp.request)

    client = ClientBuilder().transport(transport).map_and_decode(unwrap, JsonDecoder()).target(
        Envelope, "http://api.test"
    )
    assert client.thing() == Thing(id=1, label="one")
