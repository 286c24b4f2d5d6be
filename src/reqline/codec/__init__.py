from reqline.codec.default import (
    DefaultDecoder,
    DefaultEncoder,
    DefaultErrorDecoder,
    ResponseMappingDecoder,
    StringDecoder,
    empty_value_of,
)
from reqline.codec.json_codec import JsonDecoder, JsonEncoder
from reqline.codec.protocol import FORM_MAP, Decoder, Encoder, ErrorDecoder, QueryMapEncoder
from reqline.codec.querymap import FieldQueryMapEncoder

__all__ = [
    "FORM_MAP",
    "Decoder",
    "DefaultDecoder",
    "DefaultEncoder",
    "DefaultErrorDecoder",
    "Encoder",
    "ErrorDecoder",
    "FieldQueryMapEncoder",
    "JsonDecoder",
    "JsonEncoder",
    "QueryMapEncoder",
    "ResponseMappingDecoder",
    "StringDecoder",
    "empty_value_of",
]
