from reqline.contract.annotations import (
    Body,
    Expander,
    HeaderMap,
    Headers,
    Ignore,
    Param,
    QueryMap,
    RequestLine,
    ToStringExpander,
    body,
    headers,
    ignore,
    request_line,
)
from reqline.contract.contract import (
    BaseContract,
    Contract,
    DeclarativeContract,
    DefaultContract,
    config_key,
    interface_methods,
    is_default_method,
)
from reqline.contract.descriptor import MethodDescriptor

__all__ = [
    "BaseContract",
    "Body",
    "Contract",
    "DeclarativeContract",
    "DefaultContract",
    "Expander",
    "HeaderMap",
    "Headers",
    "Ignore",
    "MethodDescriptor",
    "Param",
    "QueryMap",
    "RequestLine",
    "ToStringExpander",
    "body",
    "config_key",
    "headers",
    "ignore",
    "interface_methods",
    "is_default_method",
    "request_line",
]
