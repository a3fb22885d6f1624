from __future__ import annotations

import logging
from typing import Any, Dict, Mapping

from .exceptions import ConfigValidationError

logger = logging.getLogger("starlette_yui.validation")
logger.addHandler(logging.NullHandler())

_SCALARS = (str, bool, int, float, type(None))


def _check_value(path: str, value: Any, errors: Dict[str, str]) -> None:
    if isinstance(value, _SCALARS):
        return
    if isinstance(value, (list, tuple)):
        for idx, item in enumerate(value):
            _check_value(f"{path}[{idx}]", item, errors)
        return
    if isinstance(value, Mapping):
        for k, v in value.items():
            if not isinstance(k, str):
                errors[f"{path}.{k!r}"] = "Key must be a str."
                continue
            _check_value(f"{path}.{k}", v, errors)
        return
    errors[path] = f"Value of type {type(value).__name__} is not serializable."


def validate_source(source: Any) -> None:
    """
    Validate a partial configuration object before it is merged.

    A source must be a mapping with string keys whose values are strings,
    booleans, numbers, None, lists or nested mappings of the same.
    """
    if not isinstance(source, Mapping):
        raise ConfigValidationError(
            {"<source>": f"Expected a mapping, got {type(source).__name__}."}
        )
    errors: Dict[str, str] = {}
    for key, value in source.items():
        if not isinstance(key, str):
            errors[repr(key)] = "Key must be a str."
            continue
        _check_value(key, value, errors)
    if errors:
        logger.error("Invalid configuration source: %s", errors)
        raise ConfigValidationError(errors)


def validate_sources(*sources: Any) -> None:
    errors: Dict[str, str] = {}
    for idx, source in enumerate(sources):
        try:
            validate_source(source)
        except ConfigValidationError as exc:
            for key, msg in exc.errors.items():
                errors[f"[{idx}] {key}"] = msg
    if errors:
        raise ConfigValidationError(errors)
