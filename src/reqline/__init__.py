"""
Reqline — declarative HTTP clients.
Describe an API as an annotated interface; ClientBuilder().target(Api, url) returns an object implementing it.
"""
from reqline.client import (
    BasicAuthInterceptor,
    Capability,
    ClientBuilder,
    DefaultRetryer,
    ExceptionPropagationPolicy,
    LogLevel,
    NeverRetry,
    RequestInterceptor,
    Retryer,
)
from reqline.codec import (
    DefaultDecoder,
    DefaultEncoder,
    DefaultErrorDecoder,
    JsonDecoder,
    JsonEncoder,
)
from reqline.contract import (
    DefaultContract,
    HeaderMap,
    Param,
    QueryMap,
    body,
    headers,
    ignore,
    request_line,
)
from reqline.core import (
    BuildError,
    ClientConfig,
    CollectionFormat,
    DecodeError,
    EmptyTarget,
    EncodeError,
    ExchangeError,
    HardCodedTarget,
    Options,
    ReqlineError,
    Request,
    RequestTemplate,
    Response,
    ResponseError,
    RetryableError,
    RetryableResponseError,
    TransportError,
)
from reqline.transport import AsyncHttpxTransport, HttpxTransport

__all__ = [
    "AsyncHttpxTransport",
    "BasicAuthInterceptor",
    "Capability",
    "BuildError",
    "ClientBuilder",
    "ClientConfig",
    "CollectionFormat",
    "DecodeError",
    "DefaultContract",
    "DefaultDecoder",
    "DefaultEncoder",
    "DefaultErrorDecoder",
    "DefaultRetryer",
    "EmptyTarget",
    "EncodeError",
    "ExchangeError",
    "ExceptionPropagationPolicy",
    "HardCodedTarget",
    "HeaderMap",
    "HttpxTransport",
    "JsonDecoder",
    "JsonEncoder",
    "LogLevel",
    "NeverRetry",
    "Options",
    "Param",
    "QueryMap",
    "ReqlineError",
    "Request",
    "RequestInterceptor",
    "RequestTemplate",
    "Response",
    "ResponseError",
    "RetryableError",
    "RetryableResponseError",
    "Retryer",
    "TransportError",
    "body",
    "headers",
    "ignore",
    "request_line",
]
