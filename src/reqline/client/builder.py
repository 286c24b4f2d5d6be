"""
ClientBuilder — fluent configuration of a client, then .target(Api, url).
Every setter returns the builder; unset parts fall back to ClientConfig values and the default codecs.
"""
from __future__ import annotations

import dataclasses
import logging
from typing import Any, Callable, Iterable, TypeVar

from reqline.client.capability import Capability, enrich
from reqline.client.dispatch import ParseHandlersByName, ReflectiveClientFactory
from reqline.client.handler import ExceptionPropagationPolicy, MethodHandlerFactory
from reqline.client.interceptor import RequestInterceptor
from reqline.client.log import ExchangeLog, LogLevel
from reqline.client.retry import DefaultRetryer, Retryer
from reqline.codec.default import DefaultDecoder, DefaultEncoder, DefaultErrorDecoder, ResponseMappingDecoder
from reqline.codec.protocol import Decoder, Encoder, ErrorDecoder, QueryMapEncoder
from reqline.codec.querymap import FieldQueryMapEncoder
from reqline.contract.contract import Contract, DefaultContract
from reqline.core.config import ClientConfig
from reqline.core.request import Options, Response
from reqline.core.target import EmptyTarget, HardCodedTarget, Target
from reqline.transport.httpx_transport import HttpxTransport

T = TypeVar("T")


class ClientBuilder:
    """
    ClientBuilder().decoder(JsonDecoder()).log_level("basic").target(GitHub, "https://api.github.com")
    A builder can create any number of clients; each build() snapshots the current settings.
    """

    def __init__(self) -> None:
        self._config = ClientConfig()
        self._contract: Contract = DefaultContract()
        self._transport: Any = None
        self._retryer: Retryer | None = None
        self._options: Options | None = None
        self._encoder: Encoder = DefaultEncoder()
        self._decoder: Decoder = DefaultDecoder()
        self._query_map_encoder: QueryMapEncoder = FieldQueryMapEncoder()
        self._error_decoder: ErrorDecoder = DefaultErrorDecoder()
        self._interceptors: list[RequestInterceptor] = []
        self._logger: logging.Logger | None = None
        self._capabilities: list[Capability] = []

    def config(self, config: ClientConfig) -> ClientBuilder:
        """Timeouts, retry, decode404, log level etc. from one object (see ClientConfig.from_env)."""
        self._config = config
        return self

    def contract(self, contract: Contract) -> ClientBuilder:
        self._contract = contract
        return self

    def transport(self, transport: Any) -> ClientBuilder:
        """Transport or AsyncTransport; an async send() makes every client method a coroutine."""
        self._transport = transport
        return self

    def retryer(self, retryer: Retryer) -> ClientBuilder:
        self._retryer = retryer
        return self

    def options(self, options: Options) -> ClientBuilder:
        self._options = options
        return self

    def encoder(self, encoder: Encoder) -> ClientBuilder:
        self._encoder = encoder
        return self

    def decoder(self, decoder: Decoder) -> ClientBuilder:
        self._decoder = decoder
        return self

    def map_and_decode(self, mapper: Callable[[Response, Any], Response], decoder: Decoder) -> ClientBuilder:
        """Rewrite each response before decoding, e.g. to unwrap an envelope."""
        self._decoder = ResponseMappingDecoder(mapper, decoder)
        return self

    def query_map_encoder(self, query_map_encoder: QueryMapEncoder) -> ClientBuilder:
        self._query_map_encoder = query_map_encoder
        return self

    def error_decoder(self, error_decoder: ErrorDecoder) -> ClientBuilder:
        self._error_decoder = error_decoder
        return self

    def interceptor(self, interceptor: RequestInterceptor) -> ClientBuilder:
        """Appended to the chain; interceptors run in the order added."""
        self._interceptors.append(interceptor)
        return self

    def interceptors(self, interceptors: Iterable[RequestInterceptor]) -> ClientBuilder:
        """Replace the whole chain."""
        self._interceptors = list(interceptors)
        return self

    def logger(self, logger: logging.Logger) -> ClientBuilder:
        self._logger = logger
        return self

    def add_capability(self, capability: Capability) -> ClientBuilder:
        """Capabilities enrich the built components in the order added."""
        self._capabilities.append(capability)
        return self

    def log_level(self, level: LogLevel | str) -> ClientBuilder:
        self._config = dataclasses.replace(self._config, log_level=LogLevel(level).value)
        return self

    def decode404(self) -> ClientBuilder:
        """Decode 404 into the empty value of the return type instead of raising."""
        self._config = dataclasses.replace(self._config, decode404=True)
        return self

    def do_not_close_after_decode(self) -> ClientBuilder:
        """Leave the response open after decoding (for decoders returning lazy iterators)."""
        self._config = dataclasses.replace(self._config, close_after_decode=False)
        return self

    def exception_propagation_policy(self, policy: ExceptionPropagationPolicy | str) -> ClientBuilder:
        self._config = dataclasses.replace(
            self._config, propagation_policy=ExceptionPropagationPolicy(policy).value
        )
        return self

    def error_status_threshold(self, status: int) -> ClientBuilder:
        """Statuses at or above this go to the error decoder (default 400)."""
        self._config = dataclasses.replace(self._config, error_status_threshold=status)
        return self

    def build(self) -> ReflectiveClientFactory:
        config = self._config
        capabilities = list(self._capabilities)
        transport = self._transport
        if transport is None:
            transport = HttpxTransport()
        transport = enrich(transport, capabilities, "enrich_transport")
        retryer = enrich(
            self._retryer or DefaultRetryer(config.retry_period, config.retry_max_period, config.retry_max_attempts),
            capabilities,
            "enrich_retryer",
        )
        interceptors = [enrich(interceptor, capabilities, "enrich_interceptor") for interceptor in self._interceptors]
        log = enrich(self._logger, capabilities, "enrich_logger")
        factory = enrich(
            MethodHandlerFactory(
                transport,
                retryer,
                interceptors,
                ExchangeLog(LogLevel(config.log_level), log),
                decode404=config.decode404,
                close_after_decode=config.close_after_decode,
                propagation_policy=ExceptionPropagationPolicy(config.propagation_policy),
                error_status_threshold=config.error_status_threshold,
            ),
            capabilities,
            "enrich_method_handler_factory",
        )
        handlers_by_name = ParseHandlersByName(
            enrich(self._contract, capabilities, "enrich_contract"),
            enrich(self._options or config.options, capabilities, "enrich_options"),
            enrich(self._encoder, capabilities, "enrich_encoder"),
            enrich(self._decoder, capabilities, "enrich_decoder"),
            enrich(self._query_map_encoder, capabilities, "enrich_query_map_encoder"),
            enrich(self._error_decoder, capabilities, "enrich_error_decoder"),
            factory,
        )
        return ReflectiveClientFactory(handlers_by_name)

    def target(self, api: type[T] | Target[T], url: str | None = None, name: str | None = None) -> T:
        """
        Client for api at url. Without url the client has no base URL and every method
        must take an httpx.URL argument. A ready Target may be passed instead of api.
        """
        if isinstance(api, type):
            target: Target[Any] = HardCodedTarget(api, url, name) if url else EmptyTarget(api, name or "empty")
        else:
            target = api
        return self.build().new_instance(target)
