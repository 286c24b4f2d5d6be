"""
Declarative bindings for interface methods.

Class/method annotations are dataclasses attached with decorators:

    @headers("Accept: application/json")
    class GitHub(Protocol):
        @request_line("GET /repos/{owner}/{repo}/contributors")
        def contributors(self, owner: Annotated[str, Param()], repo: Annotated[str, Param()]) -> list[Contributor]:
            ...

Parameter annotations are typing.Annotated markers: Param, QueryMap, HeaderMap.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Protocol, TypeVar, runtime_checkable

from reqline.core.template import CollectionFormat

ANNOTATIONS_ATTR = "__reqline_annotations__"

F = TypeVar("F", bound=Callable[..., Any])


@runtime_checkable
class Expander(Protocol):
    """Turns one argument value into its template text."""

    def expand(self, value: Any) -> str:
        ...


class ToStringExpander:
    def expand(self, value: Any) -> str:
        return str(value)


@dataclass(frozen=True)
class RequestLine:
    """'VERB uri-template', e.g. 'GET /users/{id}?fields={fields}'."""

    value: str
    decode_slash: bool = True
    collection_format: CollectionFormat = CollectionFormat.EXPLODED


@dataclass(frozen=True)
class Headers:
    """'Name: value' lines; values may hold {placeholders}."""

    values: tuple[str, ...]


@dataclass(frozen=True)
class Body:
    """Literal body, or a body template when it holds {placeholders}."""

    value: str


@dataclass(frozen=True)
class Ignore:
    """Method stays on the interface but raises when called."""


@dataclass(frozen=True)
class Param:
    """
    Binds a parameter to a template variable. Empty name means the Python parameter name.
    expander: Expander instance or class; default str().
    """

    name: str = ""
    expander: Any = None


@dataclass(frozen=True)
class QueryMap:
    """Mapping (or object, via the QueryMapEncoder) whose entries become query parameters."""

    encoded: bool = False


@dataclass(frozen=True)
class HeaderMap:
    """Mapping whose entries become request headers."""


def annotations_of(target: Any) -> tuple[Any, ...]:
    """Annotations declared directly on a class or function (not inherited)."""
    return tuple(vars(target).get(ANNOTATIONS_ATTR, ())) if hasattr(target, "__dict__") else ()


def annotate(target: Any, annotation: Any) -> Any:
    """Attach an annotation; decorators run bottom-up, so prepend to keep source order."""
    setattr(target, ANNOTATIONS_ATTR, (annotation, *annotations_of(target)))
    return target


def request_line(
    value: str,
    *,
    decode_slash: bool = True,
    collection_format: CollectionFormat = CollectionFormat.EXPLODED,
) -> Callable[[F], F]:
    def decorator(func: F) -> F:
        return annotate(func, RequestLine(value, decode_slash, collection_format))

    return decorator


def headers(*values: str) -> Callable[[Any], Any]:
    """Usable on an interface class or on a method."""

    def decorator(target: Any) -> Any:
        return annotate(target, Headers(tuple(values)))

    return decorator


def body(value: str) -> Callable[[F], F]:
    def decorator(func: F) -> F:
        return annotate(func, Body(value))

    return decorator


def ignore(func: F) -> F:
    return annotate(func, Ignore())
