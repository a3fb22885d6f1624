import threading

import pytest
from fastapi import Depends, FastAPI
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route
from starlette.testclient import TestClient

from starlette_yui.exceptions import ConfigurationFrozenError, SetupError
from starlette_yui.exposure import (
    STATE_ATTR,
    TEMPLATE_KEY,
    ExposeMiddleware,
    ExposurePhase,
    ExposureSnapshot,
    expose,
    get_extension,
    template_context,
)

from conftest import YUI_VERSION


def snapshot_view(request: Request) -> dict:
    snapshot = getattr(request.state, STATE_ATTR)
    local = template_context(request)
    return {
        "combine": snapshot.config["combine"],
        "state": local[TEMPLATE_KEY],
        "seed": local["yui_seed"],
        "phase": request.state.yui_phase.value,
    }


@pytest.fixture
def fastapi_app(registry, runtime_dir):
    app = FastAPI()
    registry.attach(app, debug=False, runtime_path=runtime_dir)

    @app.get("/page", dependencies=[Depends(expose())])
    def page(request: Request):
        return snapshot_view(request)

    @app.get("/plain")
    def plain(request: Request):
        return template_context(request)

    return app


def test_expose_dependency_attaches_snapshot(fastapi_app):
    fastapi_app.state.yui.configure({"fetchCSS": False})
    with TestClient(fastapi_app) as client:
        body = client.get("/page").json()
    assert body["combine"] is True
    assert body["phase"] == ExposurePhase.ATTACHED.value
    assert body["state"].startswith("window.YUI_config = {")
    assert body["state"].endswith("};")
    assert '"fetchCSS":false' in body["state"]
    assert body["seed"] == [
        {"src": f"http://yui.yahooapis.com/combo?{YUI_VERSION}/yui/yui-min.js"}
    ]


def test_first_exposure_freezes_configuration(fastapi_app):
    yui = fastapi_app.state.yui
    yui.configure({"fetchCSS": False})
    assert yui.is_frozen() is False
    with TestClient(fastapi_app) as client:
        client.get("/plain")
        assert yui.is_frozen() is False
        client.get("/page")
        assert yui.is_frozen() is True
        with pytest.raises(ConfigurationFrozenError):
            yui.configure({"combine": False})
        assert client.get("/page").json()["combine"] is True


def test_routes_without_exposure_have_no_template_locals(fastapi_app):
    with TestClient(fastapi_app) as client:
        assert client.get("/plain").json() == {}


def test_extension_bound_dependency(registry, runtime_dir):
    app = FastAPI()
    yui = registry.attach(app, runtime_path=runtime_dir)

    @app.get("/", dependencies=[Depends(yui.expose())])
    def index(request: Request):
        return {"exposed": getattr(request.state, STATE_ATTR) is not None}

    with TestClient(app) as client:
        assert client.get("/").json() == {"exposed": True}


def test_expose_middleware(registry, runtime_dir):
    async def endpoint(request):
        return JSONResponse(snapshot_view(request))

    app = Starlette(routes=[Route("/", endpoint)], middleware=[Middleware(ExposeMiddleware)])
    registry.attach(app, debug=True, runtime_path=runtime_dir).debug_mode()
    with TestClient(app) as client:
        body = client.get("/").json()
    assert body["combine"] is False
    assert body["seed"] == [
        {"src": f"http://yui.yahooapis.com/{YUI_VERSION}/yui/yui-debug.js"}
    ]


def test_expose_middleware_with_explicit_extension(registry, runtime_dir):
    other = Starlette()
    yui = registry.attach(other, runtime_path=runtime_dir).configure({"lang": "fr"})

    async def endpoint(request):
        return JSONResponse(snapshot_view(request))

    app = Starlette(
        routes=[Route("/", endpoint)],
        middleware=[Middleware(ExposeMiddleware, extension=yui)],
    )
    with TestClient(app) as client:
        assert '"lang":"fr"' in client.get("/").json()["state"]


def test_expose_on_unaugmented_app_raises():
    app = FastAPI()

    @app.get("/", dependencies=[Depends(expose())])
    def index():
        return {}

    with TestClient(app) as client:
        with pytest.raises(SetupError):
            client.get("/")


def test_get_extension(yui, app):
    assert get_extension(app) is yui
    with pytest.raises(SetupError):
        get_extension(Starlette())
    with pytest.raises(SetupError):
        get_extension(object())


def test_contributor_errors_propagate(fastapi_app):
    def broken(request, draft):
        draft.config["half"] = True
        raise RuntimeError("registry unavailable")

    fastapi_app.state.yui.add_contributor(broken)
    with TestClient(fastapi_app) as client:
        with pytest.raises(RuntimeError, match="registry unavailable"):
            client.get("/page")


def test_snapshots_are_isolated(yui, request_factory):
    def per_request(request, draft):
        draft.extras["path"] = request.url.path
        draft.merge_config({"groups": {"request": {"path": request.url.path}}})

    yui.register_group("app", {"base": "/app/"})
    yui.add_contributor(per_request)

    first_request = request_factory("/one")
    second_request = request_factory("/two")
    first = yui.expose_request(first_request)
    second = yui.expose_request(second_request)

    assert first is not second
    assert first.config is not second.config
    assert first.extras["path"] == "/one"
    assert second.extras["path"] == "/two"
    assert first.config["groups"]["request"]["path"] == "/one"
    assert second.config["groups"]["request"]["path"] == "/two"
    assert first.config["groups"]["app"]["base"] == "/app/"
    assert "request" not in yui.get_config()["groups"]

    first_locals = template_context(first_request)
    first_locals["path"] = "/mutated"
    first_locals["yui_seed"].append({"src": "/extra.js"})
    assert template_context(first_request)["path"] == "/one"
    assert second.extras["path"] == "/two"
    assert len(second.extras["yui_seed"]) == 1


def test_snapshot_is_read_only(yui, request_factory):
    snapshot = yui.expose_request(request_factory())
    assert isinstance(snapshot, ExposureSnapshot)
    with pytest.raises(TypeError):
        snapshot.config["combine"] = False  # type: ignore[index]
    with pytest.raises(AttributeError):
        snapshot.namespace = "window.OTHER"  # type: ignore[misc]


def test_snapshot_serialization_is_deterministic_and_script_safe(yui, request_factory):
    yui.configure({"zeta": 1, "alpha": "</script><script>alert(1)</script>"})
    first = yui.expose_request(request_factory())
    second = yui.expose_request(request_factory())
    assert first.to_json() == second.to_json()
    assert first.to_json().index('"alpha"') < first.to_json().index('"zeta"')
    assert "</script>" not in first.to_script()
    assert first.template_locals()[TEMPLATE_KEY] == first.to_script()


def test_custom_namespace(registry, app, runtime_dir, request_factory):
    yui = registry.attach(app, runtime_path=runtime_dir, namespace="window.APP.yui")
    snapshot = yui.expose_request(request_factory())
    assert snapshot.to_script().startswith("window.APP.yui = {")


def test_concurrent_first_exposures_freeze_once(yui, request_factory):
    snapshots = []
    errors = []
    barrier = threading.Barrier(8)

    def worker(i):
        try:
            barrier.wait()
            snapshots.append(yui.expose_request(request_factory(f"/{i}")))
        except Exception as exc:  # pragma: no cover - surfaced by the assertion below
            errors.append(exc)

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert len(snapshots) == 8
    assert yui.is_frozen() is True
    assert len({s.to_json() for s in snapshots}) == 1


def test_extension_does_not_accept_a_failure_mode(registry, app, runtime_dir):
    with pytest.raises(TypeError):
        registry.attach(app, runtime_path=runtime_dir, failure_mode="ignore")
    assert getattr(app.state, "yui", None) is None


def test_snapshot_hashes_by_identity(yui, request_factory):
    first = yui.expose_request(request_factory())
    second = yui.expose_request(request_factory())
    assert hash(first) == hash(first)
    assert first == first
    assert first != second
    assert len({first, second}) == 2
