from __future__ import annotations

import json
import os
from copy import deepcopy
from types import MappingProxyType
from typing import Any, Dict, Mapping

__all__ = [
    "_immutable_copy",
    "_mutable_copy",
    "_deep_merge",
    "_stable_serialize",
    "_debug_mode_from_env",
    "_runtime_path_from_env",
]

# Characters that must not appear verbatim inside an inline <script> block.
_SCRIPT_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


def _immutable_copy(value: Any) -> Any:
    try:
        return _recursive_immutable_copy(value)
    except Exception as e:
        raise ValueError("Value is not deepcopy-able") from e


def _recursive_immutable_copy(value: Any) -> Any:
    if isinstance(value, (list, tuple)):
        return tuple(_recursive_immutable_copy(v) for v in value)
    if isinstance(value, Mapping):
        return MappingProxyType({k: _recursive_immutable_copy(v) for k, v in value.items()})
    return deepcopy(value)


def _mutable_copy(value: Any) -> Any:
    """Inverse of _immutable_copy: read-only views become plain dicts and lists."""
    if isinstance(value, (list, tuple)):
        return [_mutable_copy(v) for v in value]
    if isinstance(value, Mapping):
        return {k: _mutable_copy(v) for k, v in value.items()}
    return deepcopy(value)


def _deep_merge(target: Dict[str, Any], source: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Merge `source` into `target` in place and return `target`.

    Nested mappings are merged recursively; every other value (lists included)
    replaces the existing one. Values are copied so later changes to `source`
    do not leak into `target`.
    """
    for key, value in source.items():
        current = target.get(key)
        if isinstance(value, Mapping) and isinstance(current, Mapping):
            if not isinstance(current, dict):
                current = _mutable_copy(current)
            target[key] = _deep_merge(current, value)
        else:
            target[key] = _mutable_copy(value)
    return target


def _stable_serialize(data: Mapping[str, Any]) -> str:
    out = json.dumps(_mutable_copy(data), separators=(",", ":"), sort_keys=True)
    for char, escaped in _SCRIPT_ESCAPES.items():
        out = out.replace(char, escaped)
    return out


def _debug_mode_from_env() -> bool:
    return os.getenv("APP_ENV", "development").strip().lower() != "production"


def _runtime_path_from_env() -> str | None:
    return os.getenv("YUI_RUNTIME_PATH") or None
