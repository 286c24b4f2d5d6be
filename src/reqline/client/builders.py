"""
Template builders: turn call arguments into a resolved RequestTemplate.
One builder per method, chosen once by select_template_builder().
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, Sequence

from reqline.codec.protocol import FORM_MAP, Encoder, QueryMapEncoder
from reqline.contract.annotations import ToStringExpander
from reqline.contract.descriptor import MethodDescriptor
from reqline.core.errors import EncodeError
from reqline.core.target import Target
from reqline.core.template import RequestTemplate, pct_encode

_TO_STRING = ToStringExpander()


def _is_multi(value: Any) -> bool:
    return isinstance(value, Iterable) and not isinstance(value, (str, bytes, Mapping))


class BuildTemplateByResolvingArgs:
    """Path, query, header and body-template variables; then query map and header map."""

    def __init__(self, descriptor: MethodDescriptor, query_map_encoder: QueryMapEncoder, target: Target[Any]) -> None:
        self.descriptor = descriptor
        self.query_map_encoder = query_map_encoder
        self.target = target

    def create(self, argv: Sequence[Any]) -> RequestTemplate:
        descriptor = self.descriptor
        mutable = RequestTemplate.from_template(descriptor.template)
        mutable.reqline_target = self.target

        if descriptor.url_index is not None:
            url = argv[descriptor.url_index]
            if url is None:
                raise ValueError(f"URI parameter {descriptor.url_index} was null")
            mutable.target(str(url))

        variables: dict[str, Any] = {}
        for index, names in descriptor.index_to_name.items():
            value = argv[index]
            if value is None:
                continue
            value = self._expand(index, value)
            for name in names:
                variables[name] = value

        template = self.resolve(argv, mutable, variables)

        if descriptor.query_map_index is not None:
            query_map = self._to_query_map(argv[descriptor.query_map_index])
            template = self._add_query_map(query_map, template)

        if descriptor.header_map_index is not None:
            header_map = argv[descriptor.header_map_index]
            if header_map is not None:
                template = self._add_header_map(header_map, template)
        return template

    def _expand(self, index: int, value: Any) -> Any:
        expander = self.descriptor.index_to_expander.get(index, _TO_STRING)
        if _is_multi(value):
            return [expander.expand(item) for item in value if item is not None]
        return expander.expand(value)

    def resolve(self, argv: Sequence[Any], mutable: RequestTemplate, variables: dict[str, Any]) -> RequestTemplate:
        return mutable.resolve(variables)

    def _to_query_map(self, value: Any) -> Mapping[str, Any]:
        if isinstance(value, Mapping):
            return value
        try:
            return self.query_map_encoder.encode(value)
        except EncodeError:
            raise
        except Exception as e:
            raise EncodeError(f"Failed to encode query map argument: {e}") from e

    def _add_query_map(self, query_map: Mapping[str, Any], template: RequestTemplate) -> RequestTemplate:
        encoded = self.descriptor.query_map_encoded

        def text(value: Any) -> str | None:
            if value is None:
                return None
            return str(value) if encoded else pct_encode(str(value))

        for name, value in query_map.items():
            values = [text(item) for item in value] if _is_multi(value) else [text(value)]
            template.query(str(name) if encoded else pct_encode(str(name)), values)
        return template

    def _add_header_map(self, header_map: Mapping[str, Any], template: RequestTemplate) -> RequestTemplate:
        for name, value in header_map.items():
            if _is_multi(value):
                values = [str(item) for item in value if item is not None]
            else:
                values = [] if value is None else [str(value)]
            template.add_header(name, values)
        return template


class BuildFormEncodedTemplateFromArgs(BuildTemplateByResolvingArgs):
    """Variables not used by the template are handed to the encoder as a form map."""

    def __init__(
        self,
        descriptor: MethodDescriptor,
        encoder: Encoder,
        query_map_encoder: QueryMapEncoder,
        target: Target[Any],
    ) -> None:
        super().__init__(descriptor, query_map_encoder, target)
        self.encoder = encoder

    def resolve(self, argv: Sequence[Any], mutable: RequestTemplate, variables: dict[str, Any]) -> RequestTemplate:
        form = {name: value for name, value in variables.items() if name in self.descriptor.form_params}
        try:
            self.encoder.encode(form, FORM_MAP, mutable)
        except EncodeError:
            raise
        except Exception as e:
            raise EncodeError(f"Failed to encode form parameters of {self.descriptor.config_key}: {e}") from e
        return super().resolve(argv, mutable, variables)


class BuildEncodedTemplateFromArgs(BuildTemplateByResolvingArgs):
    """The unannotated parameter is handed to the encoder as the body."""

    def __init__(
        self,
        descriptor: MethodDescriptor,
        encoder: Encoder,
        query_map_encoder: QueryMapEncoder,
        target: Target[Any],
    ) -> None:
        super().__init__(descriptor, query_map_encoder, target)
        self.encoder = encoder

    def resolve(self, argv: Sequence[Any], mutable: RequestTemplate, variables: dict[str, Any]) -> RequestTemplate:
        index = self.descriptor.body_index
        body = argv[index]
        if body is None:
            raise ValueError(f"Body parameter {index} was null")
        try:
            self.encoder.encode(body, self.descriptor.body_type, mutable)
        except EncodeError:
            raise
        except Exception as e:
            raise EncodeError(f"Failed to encode body of {self.descriptor.config_key}: {e}") from e
        return super().resolve(argv, mutable, variables)


def select_template_builder(
    descriptor: MethodDescriptor,
    encoder: Encoder,
    query_map_encoder: QueryMapEncoder,
    target: Target[Any],
) -> BuildTemplateByResolvingArgs:
    """Form encoding when there are form params and no body template; body encoding when a body param exists."""
    if descriptor.form_params and descriptor.template.body_template_text is None:
        return BuildFormEncodedTemplateFromArgs(descriptor, encoder, query_map_encoder, target)
    if descriptor.body_index is not None:
        return BuildEncodedTemplateFromArgs(descriptor, encoder, query_map_encoder, target)
    return BuildTemplateByResolvingArgs(descriptor, query_map_encoder, target)
