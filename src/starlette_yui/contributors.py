from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Literal, Mapping

from starlette.requests import Request

from .utils import _deep_merge, _mutable_copy

logger = logging.getLogger("starlette_yui.contributors")
logger.addHandler(logging.NullHandler())


@dataclass
class SnapshotDraft:
    """
    Mutable, request-scoped working copy that contributors write into.

    `config` starts as a shallow copy of the frozen document. Nested values are
    read-only, so contributors either replace top-level keys or go through
    merge_config(), which copies nested mappings before writing.
    """

    config: Dict[str, Any]
    extras: Dict[str, Any] = field(default_factory=dict)

    def merge_config(self, values: Mapping[str, Any]) -> None:
        _deep_merge(self.config, values)

    def copy(self) -> "SnapshotDraft":
        return SnapshotDraft(config=_mutable_copy(self.config), extras=_mutable_copy(self.extras))


Contributor = Callable[[Request, SnapshotDraft], None]


class ContributorBus:
    def __init__(self, failure_mode: Literal["ignore", "log", "raise"] = "raise") -> None:
        self._contributors: List[Contributor] = []

        if failure_mode not in ("ignore", "log", "raise"):
            raise ValueError("failure_mode must be one of 'ignore', 'log', 'raise'")
        self._failure_mode = failure_mode

    def register(self, func: Contributor) -> None:
        if not callable(func):
            raise TypeError("Contributor must be callable")
        self._contributors.append(func)

    def run(self, request: Request, draft: SnapshotDraft) -> None:
        for contributor in self._contributors:
            if self._failure_mode == "raise":
                # The draft is discarded with the request when the error propagates.
                contributor(request, draft)
                continue
            # Tolerant modes work on a copy so a failing contributor leaves nothing behind.
            working = draft.copy()
            try:
                contributor(request, working)
                draft.config, draft.extras = working.config, working.extras
            except Exception as exc:
                if self._failure_mode == "log":
                    logger.error("Contributor %r failed: %s", contributor, exc)
                else:
                    logger.debug("Contributor %r failed but ignored: %s", contributor, exc)

    def __len__(self) -> int:
        return len(self._contributors)

    def clear(self) -> None:
        self._contributors.clear()
