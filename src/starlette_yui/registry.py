from __future__ import annotations

import logging
import threading
from functools import wraps
from typing import Any, Callable, Optional, TypeVar, cast
from weakref import WeakKeyDictionary, ref

from .exceptions import SetupError
from .exposure import ACCESSOR
from .extension import YUIExtension
from .utils import _debug_mode_from_env, _runtime_path_from_env

logger = logging.getLogger("starlette_yui.registry")
logger.addHandler(logging.NullHandler())

F = TypeVar("F", bound=Callable[..., Any])

_WRAPPED_MARK = "__starlette_yui_wrapped__"


class AugmentationRegistry:
    """
    Process-wide attachment point for YUIExtension.

    attach() binds exactly one extension to an application. wrap_factory()
    returns an application factory that attaches every app it creates; it
    never modifies the factory or the framework class itself.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        # factory -> weakref to its wrapper; wrappers hold their factory strongly.
        self._wrappers: "WeakKeyDictionary[Callable[..., Any], ref]" = WeakKeyDictionary()

    def attach(
        self,
        app: Any,
        *,
        debug: Optional[bool] = None,
        runtime_path: Optional[str] = None,
        **options: Any,
    ) -> YUIExtension:
        state = getattr(app, "state", None)
        if state is None:
            raise SetupError(f"{app!r} has no `state`; expected a Starlette application.")
        with self._lock:
            existing = getattr(state, ACCESSOR, None)
            if existing is not None:
                logger.debug(
                    "skipping the creation of `app.state.%s` because it was already defined.",
                    ACCESSOR,
                )
                return existing
            if debug is None:
                debug = _debug_mode_from_env()
            if runtime_path is None:
                runtime_path = _runtime_path_from_env()
            extension = YUIExtension(app, debug=debug, runtime_path=runtime_path, **options)
            setattr(state, ACCESSOR, extension)
            logger.debug("Attached %r to %r", extension, app)
            return extension

    def augment(self, app: Any, **options: Any) -> Any:
        self.attach(app, **options)
        return app

    def wrap_factory(self, factory: F, **options: Any) -> F:
        """
        Return a factory that builds the app with `factory` and attaches the extension.

            create_app = registry.wrap_factory(FastAPI)
            app = create_app(title="demo")   # app.state.yui is ready
        """
        with self._lock:
            if getattr(factory, _WRAPPED_MARK, False):
                logger.debug("Factory %r is already wrapped; returning it unchanged.", factory)
                return factory
            wrapper_ref = self._wrappers.get(factory)
            existing = wrapper_ref() if wrapper_ref is not None else None
            if existing is not None:
                logger.debug("Reusing existing wrapper for %r.", factory)
                return cast(F, existing)

            @wraps(factory, updated=())
            def wrapper(*args: Any, **kwargs: Any) -> Any:
                app = factory(*args, **kwargs)
                self.attach(app, **options)
                return app

            setattr(wrapper, _WRAPPED_MARK, True)
            self._wrappers[factory] = ref(wrapper)
            return cast(F, wrapper)

    def is_wrapped(self, factory: Callable[..., Any]) -> bool:
        with self._lock:
            if getattr(factory, _WRAPPED_MARK, False):
                return True
            wrapper_ref = self._wrappers.get(factory)
            return wrapper_ref is not None and wrapper_ref() is not None
