"""Default QueryMapEncoder: public fields of models, dataclasses and plain objects."""
from __future__ import annotations

import dataclasses
from typing import Any, Mapping

from pydantic import BaseModel

from reqline.core.errors import EncodeError


class FieldQueryMapEncoder:
    """
    Field name -> value for each public, non-None field.
    pydantic models use their aliases, so a field can be renamed on the wire.
    """

    def encode(self, obj: Any) -> dict[str, Any]:
        if obj is None:
            return {}
        if isinstance(obj, Mapping):
            return dict(obj)
        if isinstance(obj, BaseModel):
            return obj.model_dump(by_alias=True, exclude_none=True)
        if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
            return {
                f.name: getattr(obj, f.name)
                for f in dataclasses.fields(obj)
                if not f.name.startswith("_") and getattr(obj, f.name) is not None
            }
        if hasattr(obj, "__dict__"):
            return {
                name: value
                for name, value in vars(obj).items()
                if not name.startswith("_") and value is not None
            }
        raise EncodeError(f"{type(obj).__name__} cannot be encoded as a query map")
