"""
Contract — parses an interface into one MethodDescriptor per HTTP method.
BaseContract validates the interface and classifies parameters; DeclarativeContract dispatches
annotations to registered processors; DefaultContract registers reqline's own annotations.
"""
from __future__ import annotations

import abc
import ast
import inspect
import logging
import re
import textwrap
import typing
from collections.abc import Mapping
from typing import Annotated, Any, Callable, Optional, Protocol, get_args, get_origin, runtime_checkable

import httpx

from reqline.contract.annotations import (
    Body,
    HeaderMap,
    Headers,
    Ignore,
    Param,
    QueryMap,
    RequestLine,
    annotations_of,
)
from reqline.contract.descriptor import MethodDescriptor
from reqline.core.errors import BuildError
from reqline.core.request import HttpMethod, Options

logger = logging.getLogger(__name__)

_FRAMEWORK_MODULES = ("builtins", "typing", "typing_extensions", "abc")

ClassProcessor = Callable[[Any, MethodDescriptor], None]
MethodProcessor = Callable[[Any, MethodDescriptor], None]
ParameterProcessor = Callable[[Any, MethodDescriptor, int, str], None]


@runtime_checkable
class Contract(Protocol):
    """Which declarations are valid on an interface, and what they mean."""

    def parse_and_validate(self, target_type: type) -> list[MethodDescriptor]:
        ...


def interface_parents(cls: type) -> list[type]:
    """Direct bases that are interfaces themselves (object, Protocol, Generic, ABC excluded)."""
    return [base for base in cls.__bases__ if base.__module__ not in _FRAMEWORK_MODULES]


def interface_methods(target_type: type) -> list[tuple[str, Callable[..., Any]]]:
    """
    Public functions of the interface and its parent, parent first, overrides in place.
    Static/class methods and properties are not functions and drop out here.
    """
    members: dict[str, Any] = {}
    for klass in reversed(target_type.__mro__):
        if klass.__module__ in _FRAMEWORK_MODULES:
            continue
        for name, value in vars(klass).items():
            if not name.startswith("_"):
                members[name] = value
    return [(name, value) for name, value in members.items() if inspect.isfunction(value)]


def _is_placeholder(statement: ast.stmt) -> bool:
    if isinstance(statement, ast.Pass):
        return True
    if isinstance(statement, ast.Expr) and isinstance(statement.value, ast.Constant):
        return statement.value.value is Ellipsis or isinstance(statement.value.value, str)
    if isinstance(statement, ast.Raise) and statement.exc is not None:
        exc = statement.exc.func if isinstance(statement.exc, ast.Call) else statement.exc
        return isinstance(exc, ast.Name) and exc.id == "NotImplementedError"
    return False


def is_default_method(func: Callable[..., Any]) -> bool:
    """True when the method has a real body (anything beyond docstring, ..., pass, raise NotImplementedError)."""
    if getattr(func, "__isabstractmethod__", False):
        return False
    try:
        tree = ast.parse(textwrap.dedent(inspect.getsource(func)))
    except (OSError, TypeError, SyntaxError):
        return False
    node = tree.body[0] if tree.body else None
    if not isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
        return False
    return not all(_is_placeholder(statement) for statement in node.body)


def _raw_type_name(tp: Any) -> str:
    if get_origin(tp) is Annotated:
        tp = get_args(tp)[0]
    tp = get_origin(tp) or tp
    return getattr(tp, "__name__", None) or getattr(tp, "_name", None) or str(tp)


def _type_hints(target_type: type, func: Callable[..., Any]) -> dict[str, Any]:
    try:
        return typing.get_type_hints(func, include_extras=True)
    except Exception as e:
        raise BuildError(
            f"Unable to resolve type hints of {target_type.__name__}.{func.__name__}: {e}"
        ) from e


def config_key(target_type: type, func: Callable[..., Any], hints: dict[str, Any] | None = None) -> str:
    """
    'GitHub#contributors(str,str)': target type, method name and raw parameter type names.
    Used for dispatch, diagnostics and log lines.
    """
    if hints is None:
        hints = _type_hints(target_type, func)
    params = list(inspect.signature(func).parameters.values())[1:]
    names = ",".join(_raw_type_name(hints.get(p.name, Any)) for p in params)
    return f"{target_type.__name__}#{func.__name__}({names})"


def _split_annotated(hint: Any) -> tuple[Any, tuple[Any, ...]]:
    if get_origin(hint) is Annotated:
        args = get_args(hint)
        return args[0], tuple(args[1:])
    # Python 3.10 wraps Annotated in Optional when the default is None
    inner = _unwrap_optional(hint)
    if inner is not hint and get_origin(inner) is Annotated:
        args = get_args(inner)
        return Optional[args[0]], tuple(args[1:])
    return hint, ()


def _unwrap_optional(tp: Any) -> Any:
    args = get_args(tp)
    if args and type(None) in args:
        rest = [arg for arg in args if arg is not type(None)]
        if len(rest) == 1:
            return rest[0]
    return tp


def _is_mapping(tp: Any) -> bool:
    origin = get_origin(tp) or tp
    return isinstance(origin, type) and issubclass(origin, Mapping)


def _check_map_keys(name: str, tp: Any) -> None:
    args = get_args(tp)
    if not args and isinstance(tp, type):
        for base in getattr(tp, "__orig_bases__", ()):
            if _is_mapping(base) and get_args(base):
                args = get_args(base)
                break
    if args and args[0] is not str:
        raise BuildError(f"{name} key must be a str: {_raw_type_name(args[0])}")


def _check_map_string(name: str, tp: Any) -> None:
    if not _is_mapping(tp):
        raise BuildError(f"{name} parameter must be a Mapping: {_raw_type_name(tp)}")
    _check_map_keys(name, tp)


class BaseContract(abc.ABC):
    """Validation and parameter classification shared by every contract."""

    def parse_and_validate(self, target_type: type) -> list[MethodDescriptor]:
        if getattr(target_type, "__parameters__", ()):
            raise BuildError(f"Parameterized types unsupported: {target_type.__name__}")
        parents = interface_parents(target_type)
        if len(parents) > 1:
            raise BuildError(f"Only single inheritance supported: {target_type.__name__}")
        if parents and interface_parents(parents[0]):
            raise BuildError(f"Only single-level inheritance supported: {target_type.__name__}")

        result: dict[str, MethodDescriptor] = {}
        for _, func in interface_methods(target_type):
            if is_default_method(func):
                continue
            descriptor = self.parse_method(target_type, func)
            if descriptor.config_key in result:
                raise BuildError(f"Overrides unsupported: {descriptor.config_key}")
            result[descriptor.config_key] = descriptor
        logger.debug(f"Parsed {len(result)} methods of {target_type.__name__}")
        return list(result.values())

    def parse_method(self, target_type: type, func: Callable[..., Any]) -> MethodDescriptor:
        hints = _type_hints(target_type, func)
        data = MethodDescriptor(
            config_key=config_key(target_type, func, hints),
            target_type=target_type,
            method=func,
            return_type=hints.get("return", Any),
        )

        parents = interface_parents(target_type)
        if parents:
            self.process_annotation_on_class(data, parents[0])
        self.process_annotation_on_class(data, target_type)

        for annotation in annotations_of(func):
            self.process_annotation_on_method(data, annotation, func)
        if data.ignored:
            return data
        if data.template.method is None:
            raise BuildError(
                f"Method {data.config_key} not annotated with HTTP method type (ex. GET, POST)"
                f"{data.warning_text()}"
            )

        params = list(inspect.signature(func).parameters.values())[1:]
        param_types: list[Any] = []
        for index, param in enumerate(params):
            if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
                raise BuildError(f"Variadic parameters unsupported: {data.config_key}")
            param_type, markers = _split_annotated(hints.get(param.name, Any))
            param_types.append(param_type)

            is_http_annotation = False
            if markers:
                is_http_annotation = self.process_annotations_on_parameter(data, markers, index, param.name)
            if is_http_annotation:
                data.ignore_param(index)

            if _unwrap_optional(param_type) is httpx.URL:
                data.url_index = index
            elif _unwrap_optional(param_type) is Options:
                data.options_index = index
            elif not is_http_annotation:
                if data.is_already_processed(index):
                    if data.form_params and data.body_index is not None:
                        raise BuildError(
                            f"Body parameters cannot be used with form parameters: {data.config_key}"
                            f"{data.warning_text()}"
                        )
                else:
                    if data.form_params:
                        raise BuildError(
                            f"Body parameters cannot be used with form parameters: {data.config_key}"
                            f"{data.warning_text()}"
                        )
                    if data.body_index is not None:
                        raise BuildError(
                            f"Method has too many Body parameters: {data.config_key}{data.warning_text()}"
                        )
                    data.body_index = index
                    data.body_type = param_type

        if data.body_index is not None and data.form_params:
            raise BuildError(
                f"Body parameters cannot be used with form parameters: {data.config_key}"
                f"{data.warning_text()}"
            )
        if data.header_map_index is not None:
            _check_map_string("HeaderMap", _unwrap_optional(param_types[data.header_map_index]))
        if data.query_map_index is not None:
            query_map_type = _unwrap_optional(param_types[data.query_map_index])
            if _is_mapping(query_map_type):
                _check_map_keys("QueryMap", query_map_type)
        return data

    @abc.abstractmethod
    def process_annotation_on_class(self, data: MethodDescriptor, cls: type) -> None:
        """Called for the parent interface (if any), then for the interface itself."""

    @abc.abstractmethod
    def process_annotation_on_method(self, data: MethodDescriptor, annotation: Any, func: Callable[..., Any]) -> None:
        ...

    @abc.abstractmethod
    def process_annotations_on_parameter(
        self, data: MethodDescriptor, annotations: tuple[Any, ...], index: int, param_name: str
    ) -> bool:
        """Return True when an HTTP-relevant annotation was found on the parameter."""


class DeclarativeContract(BaseContract):
    """
    Contract assembled from processors registered per annotation type.
    Register via .register_class_annotation(...) etc.; each returns self for chaining.
    """

    def __init__(self) -> None:
        self._class_processors: dict[type, ClassProcessor] = {}
        self._method_processors: dict[type, MethodProcessor] = {}
        self._parameter_processors: dict[type, ParameterProcessor] = {}

    def register_class_annotation(self, annotation_type: type, processor: ClassProcessor) -> DeclarativeContract:
        self._class_processors[annotation_type] = processor
        return self

    def register_method_annotation(self, annotation_type: type, processor: MethodProcessor) -> DeclarativeContract:
        self._method_processors[annotation_type] = processor
        return self

    def register_parameter_annotation(
        self, annotation_type: type, processor: ParameterProcessor
    ) -> DeclarativeContract:
        self._parameter_processors[annotation_type] = processor
        return self

    def process_annotation_on_class(self, data: MethodDescriptor, cls: type) -> None:
        for annotation in annotations_of(cls):
            processor = self._class_processors.get(type(annotation))
            if processor is not None:
                processor(annotation, data)

    def process_annotation_on_method(self, data: MethodDescriptor, annotation: Any, func: Callable[..., Any]) -> None:
        processor = self._method_processors.get(type(annotation))
        if processor is None:
            data.add_warning(
                f"Method {func.__name__} has an annotation {type(annotation).__name__} "
                f"that is not used by contract {type(self).__name__}"
            )
            return
        processor(annotation, data)

    def process_annotations_on_parameter(
        self, data: MethodDescriptor, annotations: tuple[Any, ...], index: int, param_name: str
    ) -> bool:
        is_http_annotation = False
        for annotation in annotations:
            if isinstance(annotation, type) and annotation in self._parameter_processors:
                annotation = annotation()
            processor = self._parameter_processors.get(type(annotation))
            if processor is not None:
                processor(annotation, data, index, param_name)
                is_http_annotation = True
        return is_http_annotation


_REQUEST_LINE = re.compile(r"^([A-Z]+)[ ]*(.*)$")


def _to_header_map(lines: tuple[str, ...], where: str) -> dict[str, list[str]]:
    result: dict[str, list[str]] = {}
    for line in lines:
        name, sep, value = line.partition(":")
        if not sep or not name.strip():
            raise BuildError(f"Header {line!r} is not formatted as 'Name: value' on {where}.")
        result.setdefault(name.strip(), []).append(value.strip())
    return result


class DefaultContract(DeclarativeContract):
    """RequestLine, Headers, Body, Ignore on methods; Headers on classes; Param, QueryMap, HeaderMap on parameters."""

    def __init__(self) -> None:
        super().__init__()
        self.register_class_annotation(Headers, self._class_headers)
        self.register_method_annotation(RequestLine, self._request_line)
        self.register_method_annotation(Body, self._body)
        self.register_method_annotation(Headers, self._method_headers)
        self.register_method_annotation(Ignore, self._ignore)
        self.register_parameter_annotation(Param, self._param)
        self.register_parameter_annotation(QueryMap, self._query_map)
        self.register_parameter_annotation(HeaderMap, self._header_map)

    @staticmethod
    def _class_headers(annotation: Headers, data: MethodDescriptor) -> None:
        if not annotation.values:
            raise BuildError(f"Headers annotation was empty on type {data.target_type.__name__}.")
        for name, values in _to_header_map(annotation.values, f"type {data.config_key}").items():
            data.template.header(name, *values)

    @staticmethod
    def _request_line(annotation: RequestLine, data: MethodDescriptor) -> None:
        text = annotation.value.strip()
        if not text:
            raise BuildError(f"RequestLine annotation was empty on method {data.config_key}.")
        match = _REQUEST_LINE.match(text)
        if match is None:
            raise BuildError(f"RequestLine annotation didn't start with an HTTP verb on method {data.config_key}")
        try:
            data.template.method = HttpMethod(match.group(1))
        except ValueError:
            raise BuildError(
                f"RequestLine annotation has unsupported HTTP verb {match.group(1)} on method {data.config_key}"
            ) from None
        data.template.uri(match.group(2))
        data.template.decode_slash = annotation.decode_slash
        data.template.collection_format = annotation.collection_format

    @staticmethod
    def _body(annotation: Body, data: MethodDescriptor) -> None:
        if not annotation.value:
            raise BuildError(f"Body annotation was empty on method {data.config_key}.")
        if "{" not in annotation.value:
            data.template.body(annotation.value)
        else:
            data.template.body_template(annotation.value)

    @staticmethod
    def _method_headers(annotation: Headers, data: MethodDescriptor) -> None:
        if not annotation.values:
            raise BuildError(f"Headers annotation was empty on method {data.config_key}.")
        for name, values in _to_header_map(annotation.values, f"method {data.config_key}").items():
            data.template.header(name, *values)

    @staticmethod
    def _ignore(annotation: Ignore, data: MethodDescriptor) -> None:
        data.ignored = True

    @staticmethod
    def _param(annotation: Param, data: MethodDescriptor, index: int, param_name: str) -> None:
        name = annotation.name or param_name
        if not name:
            raise BuildError(f"Param annotation was empty on param {index}.")
        data.name_param(name, index)
        expander = annotation.expander
        if expander is not None:
            data.index_to_expander[index] = expander() if isinstance(expander, type) else expander
        if not data.template.has_request_variable(name) and name not in data.form_params:
            data.form_params.append(name)

    @staticmethod
    def _query_map(annotation: QueryMap, data: MethodDescriptor, index: int, param_name: str) -> None:
        if data.query_map_index is not None:
            raise BuildError(f"QueryMap annotation was present on multiple parameters: {data.config_key}")
        data.query_map_index = index
        data.query_map_encoded = annotation.encoded

    @staticmethod
    def _header_map(annotation: HeaderMap, data: MethodDescriptor, index: int, param_name: str) -> None:
        if data.header_map_index is not None:
            raise BuildError(f"HeaderMap annotation was present on multiple parameters: {data.config_key}")
        data.header_map_index = index
