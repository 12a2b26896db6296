"""
HTTP host for formval.

Receives the posts of the client-side collector and answers with the
contract it expects::

    {"success": bool, "errors": {...}, "values": {...}}
"""

import json
import logging
from collections.abc import Callable, Mapping
from typing import Any
from urllib.parse import parse_qsl

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from formval.config import get_config
from formval.errors import FormvalError
from formval.orchestrator import Form
from formval.tracing import setup_tracing

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("formval-server")

FormFactory = Callable[[Mapping[str, Any]], Form]


def parse_urlencoded(body: str) -> dict[str, Any]:
    """
    Decode a urlencoded form body.

    ``name[]`` keys are collected into lists; ``name[key]`` keys are kept
    as they are so hash fields can assemble them.
    """
    data: dict[str, Any] = {}
    for key, value in parse_qsl(body, keep_blank_values=True):
        if key.endswith("[]"):
            data.setdefault(key[:-2], []).append(value)
        else:
            data[key] = value
    return data


async def read_submission(request: Request) -> dict[str, Any]:
    """Read a JSON or urlencoded request body into a plain dict."""
    body = (await request.body()).decode("utf-8")
    if not body:
        return {}
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("application/json"):
        data = json.loads(body)
        if not isinstance(data, dict):
            raise ValueError("JSON body must be an object")
        return data
    return parse_urlencoded(body)


def create_app(forms: Mapping[str, FormFactory]) -> Starlette:
    """
    Create the Starlette app serving the given forms.

    Args:
        forms: Form id to factory. Each factory takes the decoded submission
            and returns a ``Form`` with its fields defined.
    """

    async def submit_form(request: Request) -> JSONResponse:
        """Validate one submission."""
        form_id = request.path_params["form_id"]
        factory = forms.get(form_id)
        if factory is None:
            return JSONResponse({"success": False, "error": f"Unknown form: {form_id}"}, status_code=404)

        try:
            data = await read_submission(request)
        except ValueError as e:
            return JSONResponse({"success": False, "error": f"Malformed body: {e}"}, status_code=400)

        try:
            form = factory(data)
            result = await form.validate()
        except FormvalError as e:
            logger.error(f"Error validating form {form_id}: {e}")
            return JSONResponse({"success": False, "error": e.to_dict()}, status_code=400)

        logger.info(f"Form {form_id}: {'valid' if result else 'invalid'}")
        return JSONResponse(result.to_response())

    async def health_check(request: Request) -> JSONResponse:
        """Health check endpoint."""
        return JSONResponse({
            "status": "healthy",
            "service": "formval",
            "forms": sorted(forms),
        })

    return Starlette(
        routes=[
            Route("/health", health_check, methods=["GET"]),
            Route("/forms/{form_id}", submit_form, methods=["POST"]),
        ],
    )


async def run_server(
    forms: Mapping[str, FormFactory],
    host: str | None = None,
    port: int | None = None,
) -> None:
    """
    Serve the forms with uvicorn.

    Args:
        forms: Form id to factory, see ``create_app``.
        host: Host to bind to (default: config)
        port: Port to listen on (default: config)
    """
    import uvicorn

    config = get_config()
    host = host or config.server_host
    port = port or config.server_port

    if config.enable_tracing:
        setup_tracing(console=True, verbose=True)

    logger.info(f"Starting formval server on {host}:{port} with forms: {', '.join(sorted(forms))}")

    app = create_app(forms)
    server_config = uvicorn.Config(app, host=host, port=port, log_level=config.log_level)
    server = uvicorn.Server(server_config)
    await server.serve()
