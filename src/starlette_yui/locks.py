from __future__ import annotations

import warnings

from .exceptions import ConfigurationFrozenError


class FreezeGuard:
    def __init__(self) -> None:
        self._frozen = False

    def freeze(self) -> None:
        self._frozen = True

    def thaw(self) -> None:
        if self._frozen:
            warnings.warn(
                "Configuration is frozen. Freezing cannot be undone once it was exposed",
                UserWarning,
                stacklevel=2,
            )

    def ensure_unfrozen(self) -> None:
        if self._frozen:
            raise ConfigurationFrozenError(
                "Configuration is immutable after the first call to expose()"
            )

    def is_frozen(self) -> bool:
        return self._frozen
