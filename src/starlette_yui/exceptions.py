from __future__ import annotations

from typing import Dict


class YUIError(Exception):
    """Base starlette-yui exception."""


class SetupError(YUIError):
    """Raised when the YUI runtime or the host application is not set up correctly."""


class ConfigurationFrozenError(YUIError):
    """Raised when attempting mutation after the configuration was exposed."""


class ConfigValidationError(YUIError):
    """Raised when one or more configuration sources are invalid."""

    def __init__(self, errors: Dict[str, str]) -> None:
        self.errors = errors
        super().__init__(f"Validation errors: {errors}")


class PresetNotFoundError(YUIError):
    """Raised when a requested preset is not registered."""


class PresetDuplicateError(YUIError):
    """Raised when attempting to register a duplicate preset."""
