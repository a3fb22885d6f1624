from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from typing import Callable, Optional

from .exceptions import SetupError

logger = logging.getLogger("starlette_yui.runtime")
logger.addHandler(logging.NullHandler())

_PEER_HINT = "`starlette-yui` needs the `yui` npm package installed next to the application."


@dataclass(frozen=True)
class YUIRuntime:
    """Location and version of the YUI client runtime served to browsers."""

    version: str
    path: str
    debug: bool = False

    @property
    def build_path(self) -> str:
        return os.path.join(self.path, "build")


RuntimeLoader = Callable[[Optional[str], bool], YUIRuntime]


def default_runtime_path() -> str:
    return os.path.join(os.getcwd(), "node_modules", "yui")


def load_runtime(path: Optional[str] = None, debug: bool = False) -> YUIRuntime:
    """
    Locate the YUI runtime at `path` and read its version from package.json.

    Raises SetupError if the runtime cannot be found or its metadata is unusable.
    This is a deployment defect and is never retried.
    """
    path = os.path.abspath(path or default_runtime_path())
    manifest = os.path.join(path, "package.json")
    try:
        with open(manifest, encoding="utf-8") as fh:
            meta = json.load(fh)
    except FileNotFoundError as e:
        logger.error("YUI runtime not found at %s", path)
        raise SetupError(f"Error trying to locate the yui runtime at {path!r}. {_PEER_HINT}") from e
    except (OSError, ValueError) as e:
        logger.error("Unreadable YUI runtime manifest %s: %s", manifest, e)
        raise SetupError(f"Error trying to read {manifest!r}. {_PEER_HINT}") from e

    version = meta.get("version") if isinstance(meta, dict) else None
    if not isinstance(version, str) or not version:
        logger.error("YUI runtime manifest %s has no version", manifest)
        raise SetupError(f"{manifest!r} does not declare a version. {_PEER_HINT}")

    return YUIRuntime(version=version, path=path, debug=debug)
