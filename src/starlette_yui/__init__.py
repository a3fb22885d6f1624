"""
starlette-yui: YUI bootstrap configuration for Starlette and FastAPI applications.

- Attaches one YUIExtension per application under `app.state.yui`.
- Deep-merges static YUI configuration during setup.
- Freezes that configuration on the first exposed request.
- Exposes a per-request snapshot as template locals (`state`, `yui_seed`).

    import starlette_yui
    from fastapi import Depends, FastAPI

    app = starlette_yui.augment(FastAPI())
    app.state.yui.apply_config({"fetchCSS": False}).debug_mode()

    @app.get("/", dependencies=[Depends(starlette_yui.expose())])
    def index(request: Request):
        return templates.TemplateResponse(request, "index.html")
"""

from __future__ import annotations

from starlette_yui.contributors import Contributor, ContributorBus, SnapshotDraft
from starlette_yui.exceptions import (
    ConfigurationFrozenError,
    ConfigValidationError,
    PresetDuplicateError,
    PresetNotFoundError,
    SetupError,
    YUIError,
)
from starlette_yui.exposure import (
    ExposeMiddleware,
    ExposurePhase,
    ExposureSnapshot,
    expose,
    get_extension,
    template_context,
)
from starlette_yui.extension import YUIExtension
from starlette_yui.presets import get_preset, list_presets, register_preset
from starlette_yui.registry import AugmentationRegistry
from starlette_yui.runtime import YUIRuntime, load_runtime
from starlette_yui.store import ConfigStore

# Process-wide registry, used by the module-level shortcuts below
registry = AugmentationRegistry()

attach = registry.attach
augment = registry.augment
wrap_factory = registry.wrap_factory

__all__ = [
    "registry",
    "attach",
    "augment",
    "wrap_factory",
    "expose",
    "template_context",
    "get_extension",
    "AugmentationRegistry",
    "YUIExtension",
    "ConfigStore",
    "ExposeMiddleware",
    "ExposurePhase",
    "ExposureSnapshot",
    "Contributor",
    "ContributorBus",
    "SnapshotDraft",
    "YUIRuntime",
    "load_runtime",
    "register_preset",
    "get_preset",
    "list_presets",
    "YUIError",
    "SetupError",
    "ConfigurationFrozenError",
    "ConfigValidationError",
    "PresetNotFoundError",
    "PresetDuplicateError",
]
