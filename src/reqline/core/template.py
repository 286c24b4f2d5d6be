"""
RequestTemplate — request shape with {name} placeholders.
One skeleton per interface method, copied on every call and resolved against call arguments.
"""
from __future__ import annotations

import re
from enum import Enum
from typing import TYPE_CHECKING, Any, Iterable, Mapping
from urllib.parse import quote, unquote

from reqline.core.request import HttpMethod, Request

if TYPE_CHECKING:
    from reqline.contract.descriptor import MethodDescriptor
    from reqline.core.target import Target

_VARIABLE = re.compile(r"\{([A-Za-z0-9_.\-]+)\}")

_PATH_SAFE = "-._~!$&'()*+,;=:@"
_QUERY_SAFE = "-._~!$'()*,;:@/?"


class CollectionFormat(Enum):
    """How a list value bound to a single query placeholder is rendered."""

    EXPLODED = "exploded"  # a=1&a=2
    CSV = "csv"  # a=1,2
    SSV = "ssv"  # a=1%202
    TSV = "tsv"  # a=1%092
    PIPES = "pipes"  # a=1%7C2

    @property
    def separator(self) -> str | None:
        return {"csv": ",", "ssv": " ", "tsv": "\t", "pipes": "|"}.get(self.value)


def pct_encode(value: str) -> str:
    """Percent-encode everything except unreserved characters."""
    return quote(value, safe="-._~")


def encode_path_value(value: str, decode_slash: bool = True) -> str:
    return quote(value, safe=_PATH_SAFE + ("/" if decode_slash else ""))


def encode_query_value(value: str) -> str:
    return quote(value, safe=_QUERY_SAFE)


def template_variables(text: str | None) -> list[str]:
    """Placeholder names in order of appearance."""
    return _VARIABLE.findall(text) if text else []


def _as_text(value: Any) -> str | list[str]:
    if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
        return value.decode() if isinstance(value, bytes) else str(value)
    return [str(v) for v in value if v is not None]


def _expand(
    text: str, variables: Mapping[str, Any], encode: Any = None, drop_unresolved: bool = True
) -> str | None:
    """
    Substitute placeholders in text. Returns None when text has placeholders, none resolved
    and drop_unresolved is set.
    Unresolved placeholders among resolved ones become empty; list values are joined with ','.
    """
    names = template_variables(text)
    if not names:
        return text
    if drop_unresolved and not any(name in variables for name in names):
        return None

    def replace(match: re.Match[str]) -> str:
        name = match.group(1)
        if name not in variables:
            return ""
        value = _as_text(variables[name])
        items = value if isinstance(value, list) else [value]
        return ",".join(encode(item) if encode else item for item in items)

    return _VARIABLE.sub(replace, text)


def _single_variable(text: str | None) -> str | None:
    """Name of the placeholder when text is exactly one placeholder."""
    if text is None:
        return None
    match = _VARIABLE.fullmatch(text)
    return match.group(1) if match else None


def _split_query(query: str) -> list[tuple[str, str | None]]:
    pairs: list[tuple[str, str | None]] = []
    for part in query.split("&"):
        if not part:
            continue
        name, sep, value = part.partition("=")
        pairs.append((name, value if sep else None))
    return pairs


class RequestTemplate:
    """
    Mutable request builder. The skeleton owned by a descriptor is never resolved itself:
    callers resolve a copy obtained via RequestTemplate.from_template().
    """

    def __init__(self) -> None:
        self.method: HttpMethod | None = None
        self.charset = "utf-8"
        self.decode_slash = True
        self.collection_format = CollectionFormat.EXPLODED
        self.descriptor: MethodDescriptor | None = None
        self.reqline_target: Target | None = None
        self.resolved = False
        self._target = ""
        self._path = ""
        self._queries: dict[str, list[str | None]] = {}
        self._headers: dict[str, list[str]] = {}
        self._body: bytes | None = None
        self._body_template: str | None = None

    @classmethod
    def from_template(cls, other: RequestTemplate) -> RequestTemplate:
        """Independent copy: no list or dict is shared with other."""
        copy = cls()
        copy.method = other.method
        copy.charset = other.charset
        copy.decode_slash = other.decode_slash
        copy.collection_format = other.collection_format
        copy.descriptor = other.descriptor
        copy.reqline_target = other.reqline_target
        copy.resolved = other.resolved
        copy._target = other._target
        copy._path = other._path
        copy._queries = {name: list(values) for name, values in other._queries.items()}
        copy._headers = {name: list(values) for name, values in other._headers.items()}
        copy._body = other._body
        copy._body_template = other._body_template
        return copy

    # uri / target

    def uri(self, text: str, append: bool = False) -> RequestTemplate:
        """Set (or append to) the path template; a query part is split into query templates."""
        path, sep, query = text.partition("?")
        if path and not path.startswith(("/", "{", "http")):
            path = "/" + path
        self._path = self._path + path if append else path
        if sep:
            for name, value in _split_query(query):
                self._queries.setdefault(name, []).append(value)
        return self

    @property
    def path(self) -> str:
        return self._path

    def target(self, url: str) -> RequestTemplate:
        """Set the base URL. A query part is merged into the query templates."""
        base, sep, query = url.partition("?")
        self._target = base.rstrip("/")
        if sep:
            for name, value in _split_query(query):
                self._queries.setdefault(name, []).append(value)
        return self

    @property
    def target_url(self) -> str:
        return self._target

    # query

    def _query_key(self, name: str) -> str | None:
        decoded = unquote(name)
        for key in self._queries:
            if key == name or unquote(key) == decoded:
                return key
        return None

    def query(self, name: str, values: Iterable[str | None] | str | None) -> RequestTemplate:
        """
        Replace all values of a query parameter. An empty iterable removes it.
        Names match whether or not they are percent-encoded; the existing slot keeps its position.
        """
        if values is None or isinstance(values, str):
            values = [values]
        values = list(values)
        key = self._query_key(name)
        if not values:
            if key is not None:
                del self._queries[key]
        elif key is None or key == name:
            self._queries[name] = values
        else:
            self._queries = {
                (name if existing == key else existing): (values if existing == key else current)
                for existing, current in self._queries.items()
            }
        return self

    def queries(self) -> dict[str, list[str | None]]:
        return {name: list(values) for name, values in self._queries.items()}

    def query_line(self) -> str:
        """Rendered query string. None values are dropped; a name with only None values is emitted bare."""
        parts: list[str] = []
        for name, values in self._queries.items():
            present = [value for value in values if value is not None]
            if not present:
                parts.append(name)
            else:
                parts.extend(f"{name}={value}" for value in present)
        return "&".join(parts)

    # headers

    def _header_key(self, name: str) -> str | None:
        lowered = name.lower()
        for key in self._headers:
            if key.lower() == lowered:
                return key
        return None

    def header(self, name: str, *values: str) -> RequestTemplate:
        """Replace all values of a header (case-insensitive). No values removes it."""
        key = self._header_key(name)
        if key is not None:
            del self._headers[key]
        if values:
            self._headers[name] = list(values)
        return self

    def add_header(self, name: str, values: Iterable[str]) -> RequestTemplate:
        """Append values to a header, creating it if needed."""
        values = list(values)
        if not values:
            return self
        key = self._header_key(name)
        if key is None:
            self._headers[name] = values
        else:
            self._headers[key].extend(values)
        return self

    def headers(self) -> dict[str, list[str]]:
        return {name: list(values) for name, values in self._headers.items()}

    def header_values(self, name: str) -> list[str]:
        key = self._header_key(name)
        return list(self._headers[key]) if key is not None else []

    # body

    def body(self, data: bytes | str | None, charset: str | None = None) -> RequestTemplate:
        """Set a literal body; clears any body template."""
        if charset:
            self.charset = charset
        self._body = data.encode(self.charset) if isinstance(data, str) else data
        self._body_template = None
        return self

    def body_template(self, text: str) -> RequestTemplate:
        self._body_template = text
        self._body = None
        return self

    @property
    def body_bytes(self) -> bytes | None:
        return self._body

    @property
    def body_template_text(self) -> str | None:
        return self._body_template

    # variables

    def variables(self) -> list[str]:
        """Every placeholder name in path, query, headers and body template (unique, ordered)."""
        found: list[str] = template_variables(self._path)
        for name, values in self._queries.items():
            found += template_variables(name)
            for value in values:
                found += template_variables(value)
        for values in self._headers.values():
            for value in values:
                found += template_variables(value)
        found += template_variables(self._body_template)
        return list(dict.fromkeys(found))

    def has_request_variable(self, name: str) -> bool:
        return name in self.variables()

    # resolution

    def resolve(self, variables: Mapping[str, Any]) -> RequestTemplate:
        """Substitute variables in place. Call on a copy, never on a descriptor's skeleton."""
        self._path = _expand(
            self._path,
            variables,
            lambda v: encode_path_value(v, self.decode_slash),
            drop_unresolved=False,
        ) or ""

        queries: dict[str, list[str | None]] = {}
        for name, values in self._queries.items():
            expanded_name = _expand(name, variables)
            if expanded_name is None:
                continue
            expanded: list[str | None] = []
            for value in values:
                expanded += self._expand_query_value(value, variables)
            if expanded or values == [None]:
                queries.setdefault(expanded_name, []).extend(expanded or [None])
        self._queries = queries

        headers: dict[str, list[str]] = {}
        for name, values in self._headers.items():
            expanded_values: list[str] = []
            for value in values:
                single = _single_variable(value)
                if single is not None and single in variables:
                    found = _as_text(variables[single])
                    expanded_values += found if isinstance(found, list) else [found]
                    continue
                text = _expand(value, variables)
                if text is not None:
                    expanded_values.append(text)
            if expanded_values:
                headers[name] = expanded_values
        self._headers = headers

        if self._body_template is not None:
            text = _expand(self._body_template, variables, drop_unresolved=False) or ""
            self._body = text.encode(self.charset)
            self._body_template = None

        self.resolved = True
        return self

    def _expand_query_value(self, value: str | None, variables: Mapping[str, Any]) -> list[str | None]:
        if value is None:
            return []
        single = _single_variable(value)
        if single is not None and single in variables:
            found = _as_text(variables[single])
            if not isinstance(found, list):
                return [encode_query_value(found)]
            encoded = [encode_query_value(item) for item in found]
            separator = self.collection_format.separator
            if separator is None or not encoded:
                return list(encoded)
            return [quote(separator, safe=",").join(encoded)]
        text = _expand(value, variables, encode_query_value)
        return [] if text is None else [text]

    # materialization

    def url(self) -> str:
        query = self.query_line()
        base = self._path if self._path.startswith("http") else self._target + self._path
        return f"{base}?{query}" if query else base

    def request(self) -> Request:
        if not self.resolved:
            raise RuntimeError("template has not been resolved")
        if self.method is None:
            raise RuntimeError("template has no HTTP method")
        return Request(
            method=self.method,
            url=self.url(),
            headers={name: tuple(values) for name, values in self._headers.items()},
            body=self._body,
            charset=self.charset,
            template=self,
        )

    def __repr__(self) -> str:
        method = self.method.value if self.method else "?"
        return f"RequestTemplate({method} {self.url()!r})"
