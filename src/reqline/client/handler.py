"""
Method handlers: what runs when a client method is called.
Synchronous and async HTTP handlers share preparation and response handling;
DefaultMethodHandler runs a method's own body against the client.
"""
from __future__ import annotations

import asyncio
import inspect
import time
from enum import Enum
from typing import Any, Callable, Protocol, Sequence, runtime_checkable

from reqline.client.builders import BuildTemplateByResolvingArgs
from reqline.client.interceptor import RequestInterceptor
from reqline.client.log import ExchangeLog
from reqline.client.retry import Retryer
from reqline.codec.protocol import Decoder, ErrorDecoder
from reqline.contract.descriptor import MethodDescriptor
from reqline.core.errors import BuildError, DecodeError, ReqlineError, RetryableError, TransportError
from reqline.core.request import Options, Request, Response
from reqline.core.target import Target


class ExceptionPropagationPolicy(str, Enum):
    NONE = "none"  # raise reqline errors as they are
    UNWRAP = "unwrap"  # raise the underlying cause of exhausted retries and decoder failures


@runtime_checkable
class MethodHandler(Protocol):
    def invoke(self, argv: Sequence[Any]) -> Any:
        ...


def _elapsed_ms(start: float) -> int:
    return int((time.monotonic() - start) * 1000)


class _HttpMethodHandler:
    """Everything except the send-and-retry loop, which differs between sync and async."""

    def __init__(
        self,
        target: Target[Any],
        descriptor: MethodDescriptor,
        build_template: BuildTemplateByResolvingArgs,
        options: Options,
        decoder: Decoder,
        error_decoder: ErrorDecoder,
        *,
        transport: Any,
        retryer: Retryer,
        interceptors: Sequence[RequestInterceptor],
        log: ExchangeLog,
        decode404: bool,
        close_after_decode: bool,
        propagation_policy: ExceptionPropagationPolicy,
        error_status_threshold: int,
    ) -> None:
        self.target = target
        self.descriptor = descriptor
        self.build_template = build_template
        self.options = options
        self.decoder = decoder
        self.error_decoder = error_decoder
        self.transport = transport
        self.retryer = retryer
        self.interceptors = list(interceptors)
        self.log = log
        self.decode404 = decode404
        self.close_after_decode = close_after_decode
        self.propagation_policy = propagation_policy
        self.error_status_threshold = error_status_threshold

    @property
    def config_key(self) -> str:
        return self.descriptor.config_key

    def _prepare(self, argv: Sequence[Any]) -> tuple[Request, Options]:
        template = self.build_template.create(argv)
        for interceptor in self.interceptors:
            interceptor.apply(template)
        request = self.target.apply(template)
        return request, self._find_options(argv)

    def _find_options(self, argv: Sequence[Any]) -> Options:
        index = self.descriptor.options_index
        if index is not None and argv[index] is not None:
            return argv[index]
        return self.options

    def _should_decode(self, status: int) -> bool:
        if status < self.error_status_threshold:
            return True
        return self.decode404 and status == 404 and self.descriptor.return_type not in (None, type(None))

    def _handle_response(self, request: Request, response: Response) -> Any:
        if response.request is None:
            response.request = request
        return_type = self.descriptor.return_type
        should_close = True
        try:
            if return_type is Response:
                return response.buffered()
            if self._should_decode(response.status):
                if return_type is None or return_type is type(None):
                    return None
                result = self._decode(response)
                should_close = self.close_after_decode
                return result
            raise self.error_decoder.decode(self.config_key, response)
        finally:
            if should_close:
                response.close()

    def _decode(self, response: Response) -> Any:
        try:
            return self.decoder.decode(response, self.descriptor.return_type)
        except ReqlineError:
            raise
        except Exception as e:
            if self.propagation_policy is ExceptionPropagationPolicy.UNWRAP:
                raise
            raise DecodeError(
                f"{type(e).__name__} reading {response.request.method.value} {response.request.url}: {e}",
                status=response.status,
                request=response.request,
            ) from e

    def _transport_error(self, request: Request, error: Exception, start: float) -> TransportError:
        self.log.transport_error(self.config_key, error, _elapsed_ms(start))
        if isinstance(error, TransportError):
            return error
        return TransportError(
            f"{type(error).__name__} executing {request.method.value} {request.url}: {error}",
            request=request,
        )

    def _next_interval(self, retryer: Retryer, error: RetryableError) -> float:
        """Wait before the next attempt; raises when the retryer gives up."""
        try:
            interval = retryer.continue_or_propagate(error)
        except RetryableError as exhausted:
            if self.propagation_policy is ExceptionPropagationPolicy.UNWRAP and exhausted.__cause__ is not None:
                raise exhausted.__cause__
            raise
        self.log.retry(self.config_key, error, interval)
        return interval

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.config_key})"


class SynchronousMethodHandler(_HttpMethodHandler):
    def invoke(self, argv: Sequence[Any]) -> Any:
        request, options = self._prepare(argv)
        retryer = self.retryer.clone()
        while True:
            try:
                return self._execute_and_decode(request, options)
            except RetryableError as e:
                interval = self._next_interval(retryer, e)
            if interval > 0:
                time.sleep(interval)

    def _execute_and_decode(self, request: Request, options: Options) -> Any:
        self.log.request(self.config_key, request)
        start = time.monotonic()
        try:
            response = self.transport.send(request, options)
        except TransportError as e:
            raise self._transport_error(request, e, start)
        except OSError as e:
            raise self._transport_error(request, e, start) from e
        response = self.log.response(self.config_key, response, _elapsed_ms(start))
        return self._handle_response(request, response)


class AsyncMethodHandler(_HttpMethodHandler):
    """invoke() returns a coroutine; waits between attempts with asyncio.sleep."""

    async def invoke(self, argv: Sequence[Any]) -> Any:
        request, options = self._prepare(argv)
        retryer = self.retryer.clone()
        while True:
            try:
                return await self._execute_and_decode(request, options)
            except RetryableError as e:
                interval = self._next_interval(retryer, e)
            if interval > 0:
                await asyncio.sleep(interval)

    async def _execute_and_decode(self, request: Request, options: Options) -> Any:
        self.log.request(self.config_key, request)
        start = time.monotonic()
        try:
            response = await self.transport.send(request, options)
        except TransportError as e:
            raise self._transport_error(request, e, start)
        except OSError as e:
            raise self._transport_error(request, e, start) from e
        response = self.log.response(self.config_key, response, _elapsed_ms(start))
        return self._handle_response(request, response)


class DefaultMethodHandler:
    """Calls the interface's own implementation with the client as self. Usable only after bind_to()."""

    def __init__(self, func: Callable[..., Any]) -> None:
        self.func = func
        self._params = list(inspect.signature(func).parameters.values())[1:]
        self._proxy: Any = None

    def bind_to(self, proxy: Any) -> None:
        self._proxy = proxy

    def invoke(self, argv: Sequence[Any]) -> Any:
        if self._proxy is None:
            raise RuntimeError(f"{self.func.__qualname__} invoked before bind_to()")
        args: list[Any] = []
        kwargs: dict[str, Any] = {}
        for param, value in zip(self._params, argv):
            if param.kind is param.VAR_POSITIONAL:
                args.extend(value)
            elif param.kind is param.VAR_KEYWORD:
                kwargs.update(value)
            elif param.kind is param.KEYWORD_ONLY:
                kwargs[param.name] = value
            else:
                args.append(value)
        return self.func(self._proxy, *args, **kwargs)


class UnhandledMethodHandler:
    """Methods marked @ignore: calling them is an error."""

    def __init__(self, config_key: str) -> None:
        self.config_key = config_key

    def invoke(self, argv: Sequence[Any]) -> Any:
        raise BuildError(f"{self.config_key} is not a method handled by reqline")


class MethodHandlerFactory:
    """Creates HTTP handlers sharing one transport, retryer prototype, interceptor chain and log."""

    def __init__(
        self,
        transport: Any,
        retryer: Retryer,
        interceptors: Sequence[RequestInterceptor],
        log: ExchangeLog,
        *,
        decode404: bool = False,
        close_after_decode: bool = True,
        propagation_policy: ExceptionPropagationPolicy = ExceptionPropagationPolicy.NONE,
        error_status_threshold: int = 400,
    ) -> None:
        self.transport = transport
        self.retryer = retryer
        self.interceptors = list(interceptors)
        self.log = log
        self.decode404 = decode404
        self.close_after_decode = close_after_decode
        self.propagation_policy = propagation_policy
        self.error_status_threshold = error_status_threshold

    @property
    def is_async(self) -> bool:
        return inspect.iscoroutinefunction(self.transport.send)

    def create(
        self,
        target: Target[Any],
        descriptor: MethodDescriptor,
        build_template: BuildTemplateByResolvingArgs,
        options: Options,
        decoder: Decoder,
        error_decoder: ErrorDecoder,
    ) -> MethodHandler:
        handler_class = AsyncMethodHandler if self.is_async else SynchronousMethodHandler
        return handler_class(
            target,
            descriptor,
            build_template,
            options,
            decoder,
            error_decoder,
            transport=self.transport,
            retryer=self.retryer,
            interceptors=self.interceptors,
            log=self.log,
            decode404=self.decode404,
            close_after_decode=self.close_after_decode,
            propagation_policy=self.propagation_policy,
            error_status_threshold=self.error_status_threshold,
        )
