"""
Client generation: one handler per interface method, bound into a generated subclass of the interface.
"""
from __future__ import annotations

import functools
import inspect
import logging
import types
from typing import Any, Callable, Mapping

from reqline.client.builders import select_template_builder
from reqline.client.handler import DefaultMethodHandler, MethodHandler, MethodHandlerFactory, UnhandledMethodHandler
from reqline.codec.protocol import Decoder, Encoder, ErrorDecoder, QueryMapEncoder
from reqline.contract.contract import Contract, config_key, interface_methods, is_default_method
from reqline.core.request import Options
from reqline.core.target import Target

logger = logging.getLogger(__name__)


class ParseHandlersByName:
    """Parses the target's interface and creates a handler per config key."""

    def __init__(
        self,
        contract: Contract,
        options: Options,
        encoder: Encoder,
        decoder: Decoder,
        query_map_encoder: QueryMapEncoder,
        error_decoder: ErrorDecoder,
        factory: MethodHandlerFactory,
    ) -> None:
        self.contract = contract
        self.options = options
        self.encoder = encoder
        self.decoder = decoder
        self.query_map_encoder = query_map_encoder
        self.error_decoder = error_decoder
        self.factory = factory

    def apply(self, target: Target[Any]) -> dict[str, MethodHandler]:
        result: dict[str, MethodHandler] = {}
        for descriptor in self.contract.parse_and_validate(target.type):
            if descriptor.warnings:
                logger.debug(f"{descriptor.config_key}:{descriptor.warning_text()}")
            if descriptor.ignored:
                result[descriptor.config_key] = UnhandledMethodHandler(descriptor.config_key)
                continue
            build_template = select_template_builder(descriptor, self.encoder, self.query_map_encoder, target)
            result[descriptor.config_key] = self.factory.create(
                target, descriptor, build_template, self.options, self.decoder, self.error_decoder
            )
        return result


class ClientProxy:
    """
    Base of every generated client. Equality, hash and repr come from the target,
    so two clients for the same target compare equal.
    """

    def __init__(self, target: Target[Any], dispatch: Mapping[str, MethodHandler]) -> None:
        self._target = target
        self._dispatch = dispatch

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, ClientProxy):
            return NotImplemented
        return self._target == other._target

    def __hash__(self) -> int:
        return hash(self._target)

    def __repr__(self) -> str:
        return repr(self._target)


def _proxy_method(name: str, func: Callable[..., Any]) -> Callable[..., Any]:
    signature = inspect.signature(func)

    @functools.wraps(func)
    def method(self: ClientProxy, *args: Any, **kwargs: Any) -> Any:
        bound = signature.bind(self, *args, **kwargs)
        bound.apply_defaults()
        argv = tuple(bound.arguments.values())[1:]
        return self._dispatch[name].invoke(argv)

    method.__isabstractmethod__ = False
    return method


class ReflectiveClientFactory:
    """new_instance(target) → client implementing target.type."""

    def __init__(self, handlers_by_name: ParseHandlersByName) -> None:
        self.handlers_by_name = handlers_by_name

    def new_instance(self, target: Target[Any]) -> Any:
        api = target.type
        name_to_handler = self.handlers_by_name.apply(target)
        method_to_handler: dict[str, MethodHandler] = {}
        default_handlers: list[DefaultMethodHandler] = []
        namespace: dict[str, Any] = {}

        for name, func in interface_methods(api):
            if is_default_method(func):
                handler = DefaultMethodHandler(func)
                default_handlers.append(handler)
            else:
                handler = name_to_handler[config_key(api, func)]
            method_to_handler[name] = handler
            namespace[name] = _proxy_method(name, func)

        client_class = types.new_class(
            f"{api.__name__}Client", (ClientProxy, api), exec_body=lambda ns: ns.update(namespace)
        )
        proxy = client_class(target, types.MappingProxyType(method_to_handler))
        for handler in default_handlers:
            handler.bind_to(proxy)
        logger.debug(f"Created {client_class.__name__} for {target!r} with {len(method_to_handler)} methods")
        return proxy
