from reqline.client.builder import ClientBuilder
from reqline.client.capability import Capability, enrich
from reqline.client.builders import (
    BuildEncodedTemplateFromArgs,
    BuildFormEncodedTemplateFromArgs,
    BuildTemplateByResolvingArgs,
    select_template_builder,
)
from reqline.client.dispatch import ClientProxy, ParseHandlersByName, ReflectiveClientFactory
from reqline.client.handler import (
    AsyncMethodHandler,
    DefaultMethodHandler,
    ExceptionPropagationPolicy,
    MethodHandler,
    MethodHandlerFactory,
    SynchronousMethodHandler,
    UnhandledMethodHandler,
)
from reqline.client.interceptor import BasicAuthInterceptor, RequestInterceptor
from reqline.client.log import ExchangeLog, LogLevel
from reqline.client.retry import DefaultRetryer, NeverRetry, Retryer

__all__ = [
    "AsyncMethodHandler",
    "BasicAuthInterceptor",
    "BuildEncodedTemplateFromArgs",
    "BuildFormEncodedTemplateFromArgs",
    "BuildTemplateByResolvingArgs",
    "Capability",
    "ClientBuilder",
    "ClientProxy",
    "DefaultMethodHandler",
    "DefaultRetryer",
    "ExceptionPropagationPolicy",
    "ExchangeLog",
    "LogLevel",
    "MethodHandler",
    "MethodHandlerFactory",
    "NeverRetry",
    "ParseHandlersByName",
    "ReflectiveClientFactory",
    "RequestInterceptor",
    "Retryer",
    "SynchronousMethodHandler",
    "UnhandledMethodHandler",
    "enrich",
    "select_template_builder",
]
