import logging

from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.requests import Request

import starlette_yui

if __name__ == "__main__":
    logging.basicConfig(level=logging.DEBUG)

    app = starlette_yui.augment(
        Starlette(middleware=[Middleware(starlette_yui.ExposeMiddleware)]),
        debug=True,
    )
    app.state.yui.configure({"lang": "en-US"})
    print("Config:", dict(app.state.yui.get_config()))

    request = Request({"type": "http", "method": "GET", "path": "/", "headers": [], "app": app})
    snapshot = app.state.yui.expose_request(request)
    print("State:", snapshot.to_script())

    try:
        app.state.yui.configure({"lang": "fr-FR"})
    except starlette_yui.ConfigurationFrozenError as exc:
        print("Frozen:", exc)
