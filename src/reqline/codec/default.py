"""Out-of-the-box codecs: text/bytes/form bodies, text/bytes responses, status errors."""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Callable, get_origin
from urllib.parse import urlencode

from reqline.codec.protocol import FORM_MAP, Decoder
from reqline.core.errors import DecodeError, EncodeError, ResponseError, RetryableResponseError
from reqline.core.request import Response
from reqline.core.template import RequestTemplate

_MAX_BODY_IN_MESSAGE = 400


def empty_value_of(return_type: Any) -> Any:
    """Value returned for 404 (with decode404) and 204: empty container for container types, else None."""
    origin = get_origin(return_type) or return_type
    if origin in (list, tuple, set, frozenset, dict):
        return origin()
    if origin is bytes:
        return b""
    return None


class DefaultEncoder:
    """str and bytes bodies as-is; forms as application/x-www-form-urlencoded."""

    def encode(self, obj: Any, body_type: Any, template: RequestTemplate) -> None:
        if body_type is FORM_MAP:
            template.body(urlencode(obj, doseq=True))
            if not template.header_values("Content-Type"):
                template.header("Content-Type", "application/x-www-form-urlencoded; charset=UTF-8")
        elif body_type is str or isinstance(obj, str):
            template.body(str(obj))
        elif body_type is bytes or isinstance(obj, (bytes, bytearray)):
            template.body(bytes(obj))
        elif obj is not None:
            raise EncodeError(f"{type(obj).__name__} is not a type supported by this encoder.")


class StringDecoder:
    def decode(self, response: Response, return_type: Any) -> Any:
        if return_type in (str, Any, object):
            return response.text()
        raise DecodeError(
            f"{getattr(return_type, '__name__', return_type)} is not a type supported by this decoder.",
            status=response.status,
            request=response.request,
        )


class DefaultDecoder(StringDecoder):
    """None/bytes/str return types; 404 and 204 decode to the empty value."""

    def decode(self, response: Response, return_type: Any) -> Any:
        if return_type is None or return_type is type(None):
            return None
        if response.status in (404, 204):
            return empty_value_of(return_type)
        if response.body is None:
            return None
        if return_type is bytes:
            return response.read()
        return super().decode(response, return_type)


class ResponseMappingDecoder:
    """Applies mapper(response, type) before delegating to decoder."""

    def __init__(self, mapper: Callable[[Response, Any], Response], decoder: Decoder) -> None:
        self._mapper = mapper
        self._delegate = decoder

    def decode(self, response: Response, return_type: Any) -> Any:
        return self._delegate.decode(self._mapper(response, return_type), return_type)


def _retry_after(values: list[str], now: datetime) -> datetime | None:
    if not values:
        return None
    value = values[0].strip()
    if value.isdigit():
        return now + timedelta(seconds=int(value))
    try:
        parsed = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


class DefaultErrorDecoder:
    """
    ResponseError for every error status; RetryableResponseError when the
    server sent Retry-After (seconds or HTTP date).
    """

    def decode(self, config_key: str, response: Response) -> Exception:
        body = response.read()
        request = response.request
        target = f" during [{request.method.value}] to [{request.url}]" if request is not None else ""
        snippet = body[:_MAX_BODY_IN_MESSAGE].decode(response.charset, errors="replace")
        message = f"[{response.status}] {response.reason}{target} [{config_key}]: [{snippet}]"
        retry_after = _retry_after(response.header("Retry-After"), datetime.now(timezone.utc))
        if retry_after is not None:
            return RetryableResponseError(
                message,
                status=response.status,
                reason=response.reason,
                request=request,
                body=body,
                headers=response.headers,
                retry_after=retry_after,
            )
        return ResponseError(
            message,
            status=response.status,
            reason=response.reason,
            request=request,
            body=body,
            headers=response.headers,
        )
