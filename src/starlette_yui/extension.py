from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from starlette.requests import Request

from .contributors import Contributor, ContributorBus
from .exceptions import ConfigurationFrozenError
from .exposure import DEFAULT_NAMESPACE, Exposer, ExposureSnapshot
from .groups import ModuleGroups
from .presets import get_preset
from .runtime import RuntimeLoader, load_runtime
from .seed import DEFAULT_SEED, SeedContributor
from .store import ConfigStore

logger = logging.getLogger("starlette_yui.extension")
logger.addHandler(logging.NullHandler())

CDN_HOST = "http://yui.yahooapis.com/"


class YUIExtension:
    """
    Per-application YUI configuration and exposure.

    Holds the static configuration used to boot YUI in the browser. The
    configuration can be changed during application setup; the first request
    that goes through expose() freezes it for the rest of the process.

        app = FastAPI()
        starlette_yui.augment(app)
        app.state.yui.apply_config({"fetchCSS": False}).debug_mode()

        @app.get("/", dependencies=[Depends(starlette_yui.expose())])
        def index(request: Request): ...
    """

    def __init__(
        self,
        app: Any,
        *,
        debug: bool = False,
        runtime_path: Optional[str] = None,
        runtime_loader: RuntimeLoader = load_runtime,
        namespace: str = DEFAULT_NAMESPACE,
    ) -> None:
        # Raises SetupError before anything else is built.
        self.runtime = runtime_loader(runtime_path, debug)
        self.app = app
        self.debug = debug
        self.version = self.runtime.version
        self.path = self.runtime.path
        logger.info(
            "Using yui@%s from [%s] in %s mode.",
            self.version,
            self.path,
            "debug" if debug else "production",
        )

        self._store = ConfigStore(self.default_config(self.version, debug))
        self._groups = ModuleGroups(self._store)
        self._seed = SeedContributor(DEFAULT_SEED)
        self._contributors = ContributorBus()
        self._contributors.register(self._seed)
        self._exposer = Exposer(self._store, self._contributors, namespace)

    @staticmethod
    def default_config(version: str, debug: bool) -> Dict[str, Any]:
        """Defaults based on the runtime version, assuming the default CDN."""
        return {
            "version": version,
            "base": f"{CDN_HOST}{version}/",
            "comboBase": f"{CDN_HOST}combo?",
            "comboSep": "&",
            "root": f"{version}/",
            "filter": "debug" if debug else "min",
            "combine": not debug,
        }

    def _ensure_unfrozen(self, action: str) -> None:
        if self._store.is_frozen():
            logger.error("Attempted %s after the configuration was exposed.", action)
            raise ConfigurationFrozenError(
                f"Cannot {action}: configuration is immutable after the first call to expose()"
            )

    # configuration
    def configure(self, *sources: Mapping[str, Any]) -> "YUIExtension":
        """
        Deep-merge one or more partial configurations into the static configuration.

            app.state.yui.configure({"fetchCSS": False})
        """
        self._store.merge(*sources)
        return self

    apply_config = configure

    def apply_preset(
        self, name: str, overrides: Optional[Mapping[str, Any]] = None
    ) -> "YUIExtension":
        """Merge a named preset, then `overrides` on top of it, in a single merge."""
        preset = get_preset(name)
        if overrides:
            self._store.merge(preset.to_mapping(), overrides)
        else:
            self._store.merge(preset.to_mapping())
        logger.debug("Preset %r applied overrides=%s", preset.name, sorted(overrides or {}))
        return self

    def debug_mode(self, overrides: Optional[Mapping[str, Any]] = None) -> "YUIExtension":
        """
        Turn on debug mode for the YUI loader: `debug=True`, `logLevel="debug"`,
        `combine=False`, `filter="debug"` and `useBrowserConsole=True`. Any key in
        `overrides` wins over those defaults.
        """
        return self.apply_preset("debug", overrides)

    def get_config(self) -> Mapping[str, Any]:
        return self._store.get()

    config = property(get_config)

    def is_frozen(self) -> bool:
        return self._store.is_frozen()

    # collaborators
    def register_group(self, name: str, group_config: Mapping[str, Any]) -> "YUIExtension":
        self._groups.register(name, group_config)
        return self

    @property
    def groups(self) -> ModuleGroups:
        return self._groups

    def seed(self, *modules: str) -> "YUIExtension":
        """Replace the list of modules loaded by the client seed (default: `yui`)."""
        self._ensure_unfrozen("change the seed")
        self._seed.modules = tuple(modules)
        return self

    @property
    def seed_modules(self) -> tuple:
        return self._seed.modules

    def add_contributor(self, contributor: Contributor) -> "YUIExtension":
        self._ensure_unfrozen("add a contributor")
        self._contributors.register(contributor)
        return self

    # exposure
    def expose_request(self, request: Request) -> ExposureSnapshot:
        return self._exposer.expose(request)

    def expose(self):
        """Dependency bound to this extension, for apps that hold the extension directly."""

        async def expose_dependency(request: Request) -> ExposureSnapshot:
            return self.expose_request(request)

        return expose_dependency

    def __repr__(self) -> str:
        return f"<YUIExtension version={self.version} debug={self.debug} frozen={self.is_frozen()}>"
