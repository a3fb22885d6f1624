from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Tuple

from .registry import PresetRegistry
from .spec import PresetSpec

logger = logging.getLogger("starlette_yui.presets")
logger.addHandler(logging.NullHandler())

__all__ = [
    "PresetSpec",
    "PresetRegistry",
    "REGISTRY",
    "register_preset",
    "get_preset",
    "list_presets",
    "register_builtin_presets",
]

REGISTRY = PresetRegistry()


def register_preset(
    name: str,
    values: Mapping[str, Any],
    *,
    description: Optional[str] = None,
    aliases: Tuple[str, ...] = (),
    override: bool = False,
) -> PresetSpec:
    spec = PresetSpec(name=name, values=values, description=description)
    REGISTRY.register(spec, aliases=aliases, override=override)
    logger.debug("Preset registered name=%r keys=%s", name, sorted(spec.values))
    return spec


def get_preset(name: str) -> PresetSpec:
    return REGISTRY.get(name)


def list_presets() -> Tuple[str, ...]:
    return REGISTRY.all_names()


def register_builtin_presets() -> None:
    """(Re)register the presets shipped with starlette-yui."""
    register_preset(
        "debug",
        {
            "combine": False,
            "debug": True,
            "filter": "debug",
            "logLevel": "debug",
            "useBrowserConsole": True,
        },
        description="Turns on debug mode for the YUI loader.",
        aliases=("debugMode",),
        override=True,
    )


register_builtin_presets()
