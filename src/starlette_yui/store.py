from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from .exceptions import ConfigurationFrozenError
from .locks import FreezeGuard
from .utils import _deep_merge, _immutable_copy
from .validation import validate_sources

logger = logging.getLogger("starlette_yui.store")
logger.addHandler(logging.NullHandler())


class ConfigStore:
    """
    Single configuration document with deep-merge updates.

    The document is mutable until freeze() is called. Freezing replaces it with
    a read-only copy; from then on merge() raises ConfigurationFrozenError and
    the document never changes again.
    """

    def __init__(self, initial: Optional[Mapping[str, Any]] = None) -> None:
        self._guard = FreezeGuard()
        self._config: Dict[str, Any] = {}
        self._frozen_view: Optional[MappingProxyType] = None
        if initial:
            self.merge(initial)
        logger.debug("ConfigStore init keys=%s", sorted(self._config))

    def merge(self, *sources: Mapping[str, Any]) -> Mapping[str, Any]:
        try:
            self._guard.ensure_unfrozen()
        except ConfigurationFrozenError:
            logger.error("Rejecting merge of %d source(s): configuration is frozen", len(sources))
            raise
        if not sources:
            return self._config
        # Validate everything before the first write so a bad source leaves no trace.
        validate_sources(*sources)
        for source in sources:
            _deep_merge(self._config, source)
        logger.debug("Store.merge sources=%d keys=%s", len(sources), sorted(self._config))
        return self._config

    def get(self) -> Mapping[str, Any]:
        if self._frozen_view is not None:
            return self._frozen_view
        return self._config

    def freeze(self) -> None:
        if self._guard.is_frozen():
            return
        self._frozen_view = _immutable_copy(self._config)
        self._guard.freeze()
        logger.info("ConfigStore frozen keys=%s", sorted(self._config))

    def thaw(self) -> None:
        self._guard.thaw()

    def is_frozen(self) -> bool:
        return self._guard.is_frozen()

    def snapshot(self) -> Dict[str, Any]:
        """Shallow copy of the document; nested values of a frozen store stay read-only."""
        return dict(self.get())

    def __repr__(self) -> str:
        return f"<ConfigStore frozen={self.is_frozen()} keys={len(self._config)}>"
