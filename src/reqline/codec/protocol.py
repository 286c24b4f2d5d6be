"""Codec protocols: body encoding, response decoding, error decoding, query-map encoding."""
from __future__ import annotations

from typing import Any, Mapping, Protocol, runtime_checkable

from reqline.core.request import Response
from reqline.core.template import RequestTemplate

# body_type passed to Encoder.encode when the object is a form: name -> value(s).
FORM_MAP = Mapping[str, Any]


@runtime_checkable
class Encoder(Protocol):
    """Writes an object into the template body. Raise EncodeError when the object is unsupported."""

    def encode(self, obj: Any, body_type: Any, template: RequestTemplate) -> None:
        ...


@runtime_checkable
class Decoder(Protocol):
    """Reads a successful (or 404 with decode404) response into the declared return type."""

    def decode(self, response: Response, return_type: Any) -> Any:
        ...


@runtime_checkable
class ErrorDecoder(Protocol):
    """
    Turns an error-range response into an exception (returned, not raised).
    Return a RetryableError subclass to have the retry policy consider the call again.
    """

    def decode(self, config_key: str, response: Response) -> Exception:
        ...


@runtime_checkable
class QueryMapEncoder(Protocol):
    """Object -> str-keyed mapping, for QueryMap arguments that are not mappings already."""

    def encode(self, obj: Any) -> dict[str, Any]:
        ...
