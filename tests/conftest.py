import json

import pytest
from starlette.applications import Starlette
from starlette.requests import Request

from starlette_yui.presets import REGISTRY, register_builtin_presets
from starlette_yui.registry import AugmentationRegistry

YUI_VERSION = "3.10.1"


@pytest.fixture(autouse=True)
def seed_presets():
    REGISTRY.clear()
    register_builtin_presets()
    yield
    REGISTRY.clear()
    register_builtin_presets()


@pytest.fixture
def runtime_dir(tmp_path):
    path = tmp_path / "node_modules" / "yui"
    path.mkdir(parents=True)
    (path / "package.json").write_text(json.dumps({"name": "yui", "version": YUI_VERSION}))
    return str(path)


@pytest.fixture
def registry():
    return AugmentationRegistry()


@pytest.fixture
def app():
    return Starlette()


@pytest.fixture
def yui(registry, app, runtime_dir):
    return registry.attach(app, debug=False, runtime_path=runtime_dir)


def make_request(path="/", app=None):
    scope = {
        "type": "http",
        "method": "GET",
        "path": path,
        "headers": [],
        "query_string": b"",
    }
    if app is not None:
        scope["app"] = app
    return Request(scope)


@pytest.fixture
def request_factory():
    return make_request
