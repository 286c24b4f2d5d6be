"""JSON bodies and typed JSON responses via pydantic TypeAdapter."""
from __future__ import annotations

from functools import lru_cache
from typing import Any

from pydantic import TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError

from reqline.codec.default import empty_value_of
from reqline.codec.protocol import FORM_MAP
from reqline.core.errors import DecodeError, EncodeError
from reqline.core.request import Response
from reqline.core.template import RequestTemplate


@lru_cache(maxsize=256)
def _cached_adapter(tp: Any) -> TypeAdapter[Any]:
    return TypeAdapter(tp)


def type_adapter(tp: Any) -> TypeAdapter[Any]:
    """TypeAdapter for a type, cached when the type is hashable."""
    try:
        return _cached_adapter(tp)
    except TypeError:
        return TypeAdapter(tp)


class JsonEncoder:
    """Serializes the body (models, dataclasses, mappings, lists...) with its declared type."""

    def __init__(self, content_type: str = "application/json") -> None:
        self._content_type = content_type

    def encode(self, obj: Any, body_type: Any, template: RequestTemplate) -> None:
        declared = Any if body_type is None or body_type is FORM_MAP else body_type
        try:
            data = type_adapter(declared).dump_json(obj)
        except PydanticSerializationError as e:
            raise EncodeError(f"Unable to serialize {type(obj).__name__} as JSON: {e}") from e
        template.body(data)
        if not template.header_values("Content-Type"):
            template.header("Content-Type", self._content_type)


class JsonDecoder:
    """Validates the JSON body against the method's return type. Empty bodies decode to None."""

    def decode(self, response: Response, return_type: Any) -> Any:
        if return_type is None or return_type is type(None):
            return None
        if response.status in (404, 204):
            return empty_value_of(return_type)
        data = response.read()
        if not data.strip():
            return None
        if return_type is bytes:
            return data
        try:
            return type_adapter(return_type).validate_json(data)
        except ValidationError as e:
            raise DecodeError(
                f"Response body is not a valid {getattr(return_type, '__name__', return_type)}: {e}",
                status=response.status,
                request=response.request,
            ) from e
