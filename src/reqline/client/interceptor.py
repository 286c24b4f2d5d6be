"""Request interceptors: run in registration order on the resolved template, before it becomes a Request."""
from __future__ import annotations

import base64
from typing import Protocol, runtime_checkable

from reqline.core.template import RequestTemplate


@runtime_checkable
class RequestInterceptor(Protocol):
    """May add or replace headers, queries or the body. Must not keep a reference to the template."""

    def apply(self, template: RequestTemplate) -> None:
        ...


class BasicAuthInterceptor:
    """Sets Authorization: Basic <base64(username:password)>."""

    def __init__(self, username: str, password: str, charset: str = "utf-8") -> None:
        token = base64.b64encode(f"{username}:{password}".encode(charset)).decode("ascii")
        self._header = f"Basic {token}"

    def apply(self, template: RequestTemplate) -> None:
        template.header("Authorization", self._header)
