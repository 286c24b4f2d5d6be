"""MethodDescriptor — compiled metadata of one interface method."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

from reqline.contract.annotations import Expander
from reqline.core.template import RequestTemplate


@dataclass(eq=False)
class MethodDescriptor:
    """
    Filled in by a Contract, then only read. Parameter positions exclude self.
    template is the skeleton every call copies before resolving.
    """

    config_key: str = ""
    target_type: type | None = None
    method: Callable[..., Any] | None = None
    return_type: Any = Any
    url_index: int | None = None
    options_index: int | None = None
    body_index: int | None = None
    body_type: Any = None
    header_map_index: int | None = None
    query_map_index: int | None = None
    query_map_encoded: bool = False
    form_params: list[str] = field(default_factory=list)
    index_to_name: dict[int, list[str]] = field(default_factory=dict)
    index_to_expander: dict[int, Expander] = field(default_factory=dict)
    ignored_params: set[int] = field(default_factory=set)
    ignored: bool = False
    warnings: list[str] = field(default_factory=list)
    template: RequestTemplate = field(default_factory=RequestTemplate)

    def __post_init__(self) -> None:
        self.template.descriptor = self

    def name_param(self, name: str, index: int) -> None:
        """Link a template variable name to a parameter position."""
        self.index_to_name.setdefault(index, []).append(name)

    def ignore_param(self, index: int) -> None:
        self.ignored_params.add(index)

    def is_already_processed(self, index: int) -> bool:
        return (
            index in (self.url_index, self.options_index, self.body_index)
            or index in (self.header_map_index, self.query_map_index)
            or index in self.index_to_name
            or index in self.ignored_params
        )

    def add_warning(self, warning: str) -> None:
        self.warnings.append(warning)

    def warning_text(self) -> str:
        return "".join(f"\n- {warning}" for warning in self.warnings)

    def __repr__(self) -> str:
        return f"MethodDescriptor({self.config_key})"
