"""Target: the interface type plus the endpoint its requests go to."""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Generic, Protocol, TypeVar, runtime_checkable

if TYPE_CHECKING:
    from reqline.core.request import Request
    from reqline.core.template import RequestTemplate

T = TypeVar("T")


@runtime_checkable
class Target(Protocol[T]):
    """Where calls on an interface are sent. apply() turns a resolved template into a request."""

    @property
    def type(self) -> type[T]:
        ...

    @property
    def name(self) -> str:
        ...

    @property
    def url(self) -> str:
        ...

    def apply(self, template: RequestTemplate) -> Request:
        ...


class HardCodedTarget(Generic[T]):
    """Fixed base URL. A per-call URL argument already set on the template wins."""

    def __init__(self, type: type[T], url: str, name: str | None = None) -> None:
        if not url:
            raise ValueError("url must not be empty")
        self._type = type
        self._url = url.rstrip("/")
        self._name = name or self._url

    @property
    def type(self) -> type[T]:
        return self._type

    @property
    def name(self) -> str:
        return self._name

    @property
    def url(self) -> str:
        return self._url

    def apply(self, template: RequestTemplate) -> Request:
        if not template.target_url.startswith("http"):
            template.target(self._url)
        return template.request()

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, HardCodedTarget):
            return NotImplemented
        return (self._type, self._name, self._url) == (other._type, other._name, other._url)

    def __hash__(self) -> int:
        return hash((self._type, self._name, self._url))

    def __repr__(self) -> str:
        if self._name == self._url:
            return f"HardCodedTarget(type={self._type.__name__}, url={self._url})"
        return f"HardCodedTarget(type={self._type.__name__}, name={self._name}, url={self._url})"


class EmptyTarget(Generic[T]):
    """No base URL: every method must take a URL argument."""

    def __init__(self, type: type[T], name: str = "empty") -> None:
        self._type = type
        self._name = name

    @property
    def type(self) -> type[T]:
        return self._type

    @property
    def name(self) -> str:
        return self._name

    @property
    def url(self) -> str:
        raise ValueError("EmptyTarget has no url")

    def apply(self, template: RequestTemplate) -> Request:
        if not template.target_url.startswith("http") and not template.path.startswith("http"):
            raise ValueError(
                "Request with non-absolute URL not supported with empty target: " + template.url()
            )
        return template.request()

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, EmptyTarget):
            return NotImplemented
        return (self._type, self._name) == (other._type, other._name)

    def __hash__(self) -> int:
        return hash((self._type, self._name))

    def __repr__(self) -> str:
        return f"EmptyTarget(type={self._type.__name__}, name={self._name})"
