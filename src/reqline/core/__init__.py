from reqline.core.config import ClientConfig
from reqline.core.errors import (
    BuildError,
    DecodeError,
    EncodeError,
    ExchangeError,
    ReqlineError,
    ResponseError,
    RetryableError,
    RetryableResponseError,
    TransportError,
)
from reqline.core.request import BytesBody, HttpMethod, Options, Request, Response, ResponseBody
from reqline.core.target import EmptyTarget, HardCodedTarget, Target
from reqline.core.template import CollectionFormat, RequestTemplate

__all__ = [
    "BuildError",
    "BytesBody",
    "ClientConfig",
    "CollectionFormat",
    "DecodeError",
    "EmptyTarget",
    "EncodeError",
    "ExchangeError",
    "HardCodedTarget",
    "HttpMethod",
    "Options",
    "ReqlineError",
    "Request",
    "RequestTemplate",
    "Response",
    "ResponseBody",
    "ResponseError",
    "RetryableError",
    "RetryableResponseError",
    "Target",
    "TransportError",
]
