from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from starlette_yui.utils import _immutable_copy, _mutable_copy
from starlette_yui.validation import validate_source


@dataclass(frozen=True)
class PresetSpec:
    name: str
    values: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    description: Optional[str] = None

    def __post_init__(self) -> None:
        validate_source(self.values)
        object.__setattr__(self, "values", _immutable_copy(self.values))

    def to_mapping(self) -> Dict[str, Any]:
        """Fresh mutable copy of the preset values, safe to hand to a merge."""
        return _mutable_copy(self.values)
