# Serve with any ASGI server, e.g. `uvicorn basic_usage:app --port 3000`
from fastapi import Depends, FastAPI, Request
from fastapi.responses import HTMLResponse

import starlette_yui

app = starlette_yui.augment(FastAPI(), runtime_path="node_modules/yui")

app.state.yui.apply_config({"fetchCSS": False}).debug_mode().seed("yui", "app-main")
app.state.yui.register_group("app", {"base": "/static/app/", "combine": False})

PAGE = """<!doctype html>
<html><body>
<div id="content"></div>
{seed}
<script>
{state}
YUI().use('node', function (Y) {{
    Y.one('#content').setContent('<p>Ready!</p>');
}});
</script>
</body></html>"""


@app.get("/", response_class=HTMLResponse, dependencies=[Depends(starlette_yui.expose())])
def index(request: Request):
    local = starlette_yui.template_context(request)
    seed = "\n".join(f'<script src="{entry["src"]}"></script>' for entry in local["yui_seed"])
    return PAGE.format(seed=seed, state=local["state"])
