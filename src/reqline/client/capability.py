"""
Capability — decorates the components a ClientBuilder assembles.
Each enrich_* hook receives the configured component and returns the one to use instead;
hooks a capability does not define leave the component as is.
"""
from __future__ import annotations

import logging
from typing import Any, Iterable, Protocol, TypeVar

from reqline.client.interceptor import RequestInterceptor
from reqline.client.retry import Retryer
from reqline.codec.protocol import Decoder, Encoder, ErrorDecoder, QueryMapEncoder
from reqline.contract.contract import Contract
from reqline.core.request import Options

logger = logging.getLogger(__name__)

C = TypeVar("C")


class Capability(Protocol):
    """Subclass and override the hooks you need; the rest return their argument."""

    def enrich_transport(self, transport: Any) -> Any:
        return transport

    def enrich_retryer(self, retryer: Retryer) -> Retryer:
        return retryer

    def enrich_interceptor(self, interceptor: RequestInterceptor) -> RequestInterceptor:
        return interceptor

    def enrich_logger(self, log: logging.Logger | None) -> logging.Logger | None:
        return log

    def enrich_contract(self, contract: Contract) -> Contract:
        return contract

    def enrich_options(self, options: Options) -> Options:
        return options

    def enrich_encoder(self, encoder: Encoder) -> Encoder:
        return encoder

    def enrich_decoder(self, decoder: Decoder) -> Decoder:
        return decoder

    def enrich_error_decoder(self, error_decoder: ErrorDecoder) -> ErrorDecoder:
        return error_decoder

    def enrich_query_map_encoder(self, query_map_encoder: QueryMapEncoder) -> QueryMapEncoder:
        return query_map_encoder

    def enrich_method_handler_factory(self, factory: Any) -> Any:
        return factory


def enrich(component: C, capabilities: Iterable[Any], hook: str) -> C:
    """Pass component through every capability's hook, in registration order."""
    for capability in capabilities:
        method = getattr(capability, hook, None)
        if method is None:
            continue
        enriched = method(component)
        if enriched is not component:
            logger.debug(f"{type(capability).__name__}.{hook} replaced {type(component).__name__}")
        component = enriched
    return component
