"""
server.py — YTManager REST API
================================
Exposes every action of actions.py that declares a path over HTTP, so a
stream deck, an OBS script or a browser dock can drive YTManager.

ROUTES:
  GET  /health          → {"status": "ok", "timestamp": ...}
  GET  /api/endpoints   → every route with its parameters
  <METHOD> /api<path>   → one route per action

PARAMETERS:
  GET          → query string (?playlist=a&playlist=b for lists)
  PUT/POST/... → JSON body, kebab-case name or its camelCase form
                 ({"tags-add-description": true} or {"tagsAddDescription": true})

METHOD OVERRIDE:
  Clients that can only send GET (browser sources, simple HTTP buttons) call
  a PUT/POST route with ?_method=PUT. Any other GET on such a route is a 404.

CONCURRENCY:
  Handlers share one stream library and run one at a time: a request that
  arrives while another runs waits for it.

USAGE:
    ytmanager serve --port 3001
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timezone
from typing import Any

import uvicorn
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from actions import ACTIONS, ActionDefinition, Context, ParamType
from errors import ActionError, InvalidFormatError

logger = logging.getLogger("ytmanager.server")

METHOD_OVERRIDE_PARAM = "_method"


def _camel_case(name: str) -> str:
    head, *rest = name.split("-")
    return head + "".join(part.capitalize() for part in rest)


def _convert_query_value(param_type: ParamType, values: list[str]) -> Any:
    if param_type == ParamType.STRING_LIST:
        return values
    value = values[-1]
    if param_type == ParamType.INTEGER:
        try:
            return int(value)
        except ValueError:
            raise InvalidFormatError(f"Expected an integer, got {value!r}") from None
    if param_type == ParamType.BOOLEAN:
        return value.lower() == "true"
    return value


def _convert_body_value(param_type: ParamType, value: Any) -> Any:
    if param_type == ParamType.STRING_LIST:
        values = value if isinstance(value, list) else [value]
        return [str(item) for item in values]
    if isinstance(value, (list, dict)):
        raise InvalidFormatError(f"Expected a single value, got {value!r}")
    if param_type == ParamType.BOOLEAN and isinstance(value, bool):
        return value
    if isinstance(value, bool):
        value = str(value).lower()
    return _convert_query_value(param_type, [str(value)])


def extract_params(action: ActionDefinition, query, body: dict | None) -> dict:
    """
    Collect the parameters of an action from a request.

    Args:
        action: The action being called
        query:  Starlette QueryParams (used when body is None)
        body:   Decoded JSON body for non-GET requests

    Raises:
        InvalidFormatError: On a value of the wrong type, a value outside the
                            parameter's choices or a missing required parameter
    """
    params: dict[str, Any] = {}

    for param in action.parameters:
        value = None
        if body is None:
            values = query.getlist(param.name)
            if values:
                value = _convert_query_value(param.type, values)
        else:
            value = body.get(param.name)
            if value is None:
                value = body.get(_camel_case(param.name))
            if value is not None:
                value = _convert_body_value(param.type, value)

        if value is not None and param.choices and value not in param.choices:
            raise InvalidFormatError(
                f"Invalid value for {param.name}: {value!r} (expected one of {', '.join(param.choices)})"
            )
        if value is not None:
            params[param.name] = value
        elif param.default is not None:
            params[param.name] = param.default
        elif param.required:
            raise InvalidFormatError(f"Missing required parameter: {param.name}")

    return params


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


def _make_endpoint(action: ActionDefinition, ctx: Context, lock: threading.Lock):
    def run_handler(params: dict):
        with lock:
            return action.handler(params, ctx)

    async def endpoint(request: Request):
        body = None
        if request.method == "GET":
            if action.method != "GET":
                override = request.query_params.get(METHOD_OVERRIDE_PARAM, "")
                if override.upper() != action.method:
                    raise HTTPException(status_code=404, detail="Not Found")
        else:
            raw = await request.body()
            try:
                body = await request.json() if raw else {}
            except ValueError:
                return _error(400, "Invalid JSON body")
            if not isinstance(body, dict):
                return _error(400, "JSON body must be an object")

        try:
            params = extract_params(action, request.query_params, body)
            result = await run_in_threadpool(run_handler, params)
        except InvalidFormatError as e:
            return _error(400, str(e))
        except ActionError as e:
            return _error(404, str(e))
        except Exception as e:
            logger.error(f"❌ Error in action {action.name}: {e}")
            logger.debug(f"Full error: {type(e).__name__}: {e}", exc_info=True)
            return _error(500, str(e))

        return JSONResponse(content=result if result is not None else {"success": True})

    endpoint.__name__ = action.name.replace("-", "_")
    return endpoint


def list_endpoints() -> list[dict]:
    endpoints = [
        {"method": "GET", "path": "/health", "description": "Health check"},
        {"method": "GET", "path": "/api/endpoints", "description": "List all endpoints"},
    ]
    for action in ACTIONS:
        if not action.path:
            continue
        endpoints.append({
            "name": action.name,
            "description": action.description,
            "method": action.method,
            "path": f"/api{action.path}",
            "parameters": [param.to_dict() for param in action.parameters],
        })
    return endpoints


def create_app(ctx: Context) -> FastAPI:
    """Build the FastAPI application for the given context."""
    app = FastAPI(
        title="YTManager API",
        description="Drive your YouTube live stream from anywhere",
        version="1.0.0",
    )

    @app.get("/health")
    async def health():
        return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}

    @app.get("/api/endpoints")
    async def endpoints():
        return {
            "endpoints": list_endpoints(),
            "usage": {
                "methodOverride": (
                    f"Call any PUT/POST route with GET by adding ?{METHOD_OVERRIDE_PARAM}=PUT "
                    f"(or POST) to the query string"
                ),
            },
        }

    handler_lock = threading.Lock()
    for action in ACTIONS:
        if not action.path:
            continue
        path = f"/api{action.path}"
        endpoint = _make_endpoint(action, ctx, handler_lock)
        app.add_api_route(path, endpoint, methods=[action.method], name=action.name)
        if action.method != "GET":
            app.add_api_route(path, endpoint, methods=["GET"], name=f"{action.name}-override")
        logger.debug(f"Route registered: {action.method} {path}")

    return app


def run_server(ctx: Context, host: str = "localhost", port: int = 3001) -> None:
    app = create_app(ctx)
    logger.info(f"🌐 Server running at http://{host}:{port}")
    uvicorn.run(app, host=host, port=int(port), log_level="info")
