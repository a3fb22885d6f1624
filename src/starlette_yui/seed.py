from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Mapping, Tuple

from starlette.requests import Request

from .contributors import SnapshotDraft

logger = logging.getLogger("starlette_yui.seed")
logger.addHandler(logging.NullHandler())

SEED_KEY = "yui_seed"
DEFAULT_SEED: Tuple[str, ...] = ("yui",)

_FILTER_SUFFIX = {"min": "-min.js", "debug": "-debug.js", "raw": ".js"}


def _module_path(name: str, filter_: Any) -> str:
    name_ = filter_.strip().lower() if isinstance(filter_, str) else "min"
    suffix = _FILTER_SUFFIX.get(name_, "-min.js")
    return f"{name}/{name}{suffix}"


def build_seed(modules: Iterable[str], config: Mapping[str, Any]) -> List[Dict[str, str]]:
    """
    Build the script entries that load the seed modules in the browser.

    With `combine` on, every module goes into a single combo URL; otherwise
    each module gets its own URL under `base`.
    """
    modules = list(modules)
    if not modules:
        return []
    filter_ = config.get("filter", "min")
    if config.get("combine"):
        combo_base = config.get("comboBase", "")
        sep = config.get("comboSep", "&")
        root = config.get("root", "")
        return [{"src": combo_base + sep.join(root + _module_path(m, filter_) for m in modules)}]
    base = config.get("base", "")
    return [{"src": base + _module_path(m, filter_)} for m in modules]


class SeedContributor:
    """Adds the seed script entries to each request's template locals."""

    def __init__(self, modules: Iterable[str] = DEFAULT_SEED) -> None:
        self.modules: Tuple[str, ...] = tuple(modules)

    def __call__(self, request: Request, draft: SnapshotDraft) -> None:
        draft.extras[SEED_KEY] = build_seed(self.modules, draft.config)
        logger.debug("Seed built modules=%r combine=%r", self.modules, draft.config.get("combine"))

    def __repr__(self) -> str:
        return f"<SeedContributor modules={self.modules!r}>"
