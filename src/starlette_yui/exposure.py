from __future__ import annotations

import enum
import logging
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, Mapping

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from .contributors import ContributorBus, SnapshotDraft
from .exceptions import SetupError
from .store import ConfigStore
from .utils import _immutable_copy, _mutable_copy, _stable_serialize

if TYPE_CHECKING:
    from .extension import YUIExtension

logger = logging.getLogger("starlette_yui.exposure")
logger.addHandler(logging.NullHandler())

# Attribute name of the extension on `app.state`.
ACCESSOR = "yui"
# Attribute names on `request.state`.
STATE_ATTR = "yui_snapshot"
PHASE_ATTR = "yui_phase"
# Template local holding the inline bootstrap script.
TEMPLATE_KEY = "state"
DEFAULT_NAMESPACE = "window.YUI_config"


class ExposurePhase(enum.Enum):
    PENDING = "pending"
    SNAPSHOTTED = "snapshotted"
    ATTACHED = "attached"


@dataclass(frozen=True, eq=False)
class ExposureSnapshot:
    """Per-request, read-only view of the frozen configuration plus request contributions."""

    config: Mapping[str, Any]
    extras: Mapping[str, Any]
    namespace: str = DEFAULT_NAMESPACE

    def to_json(self) -> str:
        """Deterministic JSON, safe to embed inside a <script> element."""
        return _stable_serialize(self.config)

    def to_script(self) -> str:
        return f"{self.namespace} = {self.to_json()};"

    def template_locals(self) -> Dict[str, Any]:
        out: Dict[str, Any] = _mutable_copy(self.extras)
        out[TEMPLATE_KEY] = self.to_script()
        return out


class Exposer:
    """
    Builds and attaches exposure snapshots for one extension.

    The first exposure freezes the store; the lock only guards that transition.
    Every later call reads the frozen document without locking.
    """

    def __init__(
        self,
        store: ConfigStore,
        contributors: ContributorBus,
        namespace: str = DEFAULT_NAMESPACE,
    ) -> None:
        self._store = store
        self._contributors = contributors
        self._namespace = namespace
        self._freeze_lock = threading.Lock()
        self._exposed = False

    @property
    def exposed(self) -> bool:
        return self._exposed

    def _freeze_once(self) -> None:
        if self._exposed:
            return
        with self._freeze_lock:
            if not self._exposed:
                self._store.freeze()
                self._exposed = True
                logger.info("First exposure: configuration is now immutable.")

    def build(self, request: Request) -> ExposureSnapshot:
        self._freeze_once()
        draft = SnapshotDraft(config=self._store.snapshot())
        self._contributors.run(request, draft)
        return ExposureSnapshot(
            config=_immutable_copy(draft.config),
            extras=_immutable_copy(draft.extras),
            namespace=self._namespace,
        )

    def expose(self, request: Request) -> ExposureSnapshot:
        setattr(request.state, PHASE_ATTR, ExposurePhase.PENDING)
        snapshot = self.build(request)
        setattr(request.state, PHASE_ATTR, ExposurePhase.SNAPSHOTTED)
        setattr(request.state, STATE_ATTR, snapshot)
        setattr(request.state, PHASE_ATTR, ExposurePhase.ATTACHED)
        logger.debug("Exposed YUI state for %s", request.url.path)
        return snapshot


def get_extension(app: Any) -> "YUIExtension":
    state = getattr(app, "state", None)
    extension = getattr(state, ACCESSOR, None) if state is not None else None
    if extension is None:
        logger.error("Application %r was not augmented with starlette-yui", app)
        raise SetupError(
            "The application has no `state.yui` extension. "
            "Call starlette_yui.augment(app) during setup."
        )
    return extension


def expose() -> Callable[[Request], Awaitable[ExposureSnapshot]]:
    """
    Dependency that exposes the YUI state of whichever app serves the request.

        @app.get("/", dependencies=[Depends(starlette_yui.expose())])
    """

    async def expose_dependency(request: Request) -> ExposureSnapshot:
        return get_extension(request.app).expose_request(request)

    return expose_dependency


def template_context(request: Request) -> Dict[str, Any]:
    """Jinja2Templates context processor returning the exposed template locals."""
    snapshot = getattr(request.state, STATE_ATTR, None)
    if snapshot is None:
        return {}
    return snapshot.template_locals()


class ExposeMiddleware(BaseHTTPMiddleware):
    """Exposes the YUI state on every request that goes through the app."""

    def __init__(self, app: ASGIApp, extension: "YUIExtension | None" = None) -> None:
        super().__init__(app)
        self.extension = extension

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        extension = self.extension or get_extension(request.app)
        extension.expose_request(request)
        return await call_next(request)
