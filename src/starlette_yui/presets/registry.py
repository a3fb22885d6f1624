from __future__ import annotations

import logging
from typing import Dict, Iterable, Tuple

from starlette_yui.exceptions import PresetDuplicateError, PresetNotFoundError

from .spec import PresetSpec

logger = logging.getLogger("starlette_yui.presets")
logger.addHandler(logging.NullHandler())


class PresetRegistry:
    def __init__(self) -> None:
        self._specs: Dict[str, PresetSpec] = {}
        self._aliases: Dict[str, str] = {}

    @staticmethod
    def _canon(name: str) -> str:
        return name.strip().lower()

    def register(
        self, spec: PresetSpec, aliases: Iterable[str] = (), override: bool = False
    ) -> None:
        key = self._canon(spec.name)
        aliases = tuple(aliases)
        logger.debug(
            "Register called: name=%r canon=%r override=%s aliases=%r",
            spec.name,
            key,
            override,
            aliases,
        )
        if not override and key in self._specs:
            logger.error("Register failed: preset %r already registered", key)
            raise PresetDuplicateError(f"Preset {spec.name!r} already registered.")
        canon_aliases = [self._canon(a) for a in aliases]
        for a, ak in zip(aliases, canon_aliases):
            if not override and ak in self._aliases and self._aliases[ak] != key:
                logger.error("Alias conflict: %r already points to %r", ak, self._aliases[ak])
                raise PresetDuplicateError(f"Alias {a!r} already used for {self._aliases[ak]!r}.")
        self._specs[key] = spec
        for ak in canon_aliases:
            self._aliases[ak] = key

    def has(self, name_or_alias: str) -> bool:
        try:
            self._resolve_key(name_or_alias)
            return True
        except PresetNotFoundError:
            return False

    def get(self, name_or_alias: str) -> PresetSpec:
        return self._specs[self._resolve_key(name_or_alias)]

    def _resolve_key(self, name_or_alias: str) -> str:
        if isinstance(name_or_alias, str):
            k = self._canon(name_or_alias)
            if k in self._specs:
                return k
            if k in self._aliases:
                return self._aliases[k]
        logger.error(
            "Unknown preset: %r | known=%r", name_or_alias, tuple(sorted(self._specs))
        )
        raise PresetNotFoundError(f"Unknown preset {name_or_alias!r}.")

    def all_names(self) -> Tuple[str, ...]:
        return tuple(sorted(self._specs.keys()))

    def clear(self) -> None:
        logger.debug("Clearing registry: presets=%d aliases=%d", len(self._specs), len(self._aliases))
        self._specs.clear()
        self._aliases.clear()
