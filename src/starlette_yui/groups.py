from __future__ import annotations

import logging
from typing import Any, Mapping, Tuple

from .store import ConfigStore

logger = logging.getLogger("starlette_yui.groups")
logger.addHandler(logging.NullHandler())


class ModuleGroups:
    """Registers YUI module groups into the static configuration under `groups`."""

    def __init__(self, store: ConfigStore) -> None:
        self._store = store

    def register(self, name: str, group_config: Mapping[str, Any]) -> None:
        if not isinstance(name, str) or not name.strip():
            raise ValueError("Module group name must be a non-empty str")
        self._store.merge({"groups": {name: group_config}})
        logger.info("Module group registered name=%r", name)

    def names(self) -> Tuple[str, ...]:
        groups = self._store.get().get("groups") or {}
        return tuple(sorted(groups))
