"""Image Relay — FastAPI Application.

This module defines :func:`create_app`, which builds the FastAPI application
from a :class:`~imagerelay.core.config.RelayConfig`, all REST API routes, and
the ``main()`` CLI function that launches the uvicorn server.

Architecture
------------
The application is a stateless relay:

- **Configuration** is an immutable ``RelayConfig`` handed to
  :func:`create_app` and kept on ``app.state``.  There are no module-level
  configuration globals.
- **Image generation** is delegated to the upstream inference API through
  :class:`~imagerelay.core.inference.InferenceClient`; the workflow lives in
  :class:`~imagerelay.api.generation.GenerationService`.
- **Audit persistence** uses a single JSON array file managed by
  :class:`~imagerelay.core.log_store.LogStore` — no database required.
- **Static assets** (an optional front-end directory) are served by
  FastAPI's ``StaticFiles`` middleware.

Endpoints
---------
========  ==================  ==========================================
Method    Path                Purpose
========  ==================  ==========================================
POST      ``/generate``       Generate images for a prompt
GET       ``/admin/logs``     Password-gated audit log listing
GET       ``/health``         Liveness probe
========  ==================  ==========================================

Every error response has the body ``{"error": "<message>"}``.

Usage
-----
CLI (installed entry point)::

    imagerelay

Direct invocation::

    python -m imagerelay.api.main
"""

from __future__ import annotations

import hmac
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import APIRouter, FastAPI, Header, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from imagerelay import __version__
from imagerelay.api.generation import GenerationService
from imagerelay.api.models import (
    ErrorResponse,
    GenerateRequest,
    GenerateResponse,
    LogsResponse,
)
from imagerelay.core.config import RelayConfig
from imagerelay.core.errors import (
    ConfigurationError,
    ForbiddenError,
    MissingPromptError,
    RelayError,
)
from imagerelay.core.inference import InferenceClient
from imagerelay.core.log_store import LogStore

logger = logging.getLogger(__name__)

router = APIRouter()

# Startup warning detail for each credential reported by
# RelayConfig.missing_credentials().
_DISABLED_BY_MISSING = {
    "hf_token": "POST /generate will fail until it is configured.",
    "admin_password": "GET /admin/logs is disabled.",
}

# ---------------------------------------------------------------------------
# Application lifecycle — credential warnings and HTTP client teardown.
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application startup and shutdown lifecycle.

    On startup:
        Logs a warning for every credential that is not configured.  The
        server still starts; the affected endpoint answers with a 500 until
        the credential is provided.

    On shutdown:
        Closes the upstream HTTP connection pool.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control back to the application for the duration of its lifetime.
    """
    # --- Startup -----------------------------------------------------------
    config: RelayConfig = app.state.config
    for name in config.missing_credentials():
        logger.warning(f"{name} is not set; {_DISABLED_BY_MISSING[name]}")
    logger.info(f"Relaying prompts to {config.model_id}, audit log at {config.log_file}")

    yield  # Application runs here.

    # --- Shutdown ----------------------------------------------------------
    await app.state.inference_client.aclose()
    logger.info("Inference client closed on shutdown.")


# ---------------------------------------------------------------------------
# Error rendering.
# ---------------------------------------------------------------------------


async def _relay_error_handler(request: Request, exc: RelayError) -> JSONResponse:
    """Render any :class:`RelayError` as ``{"error": message}``."""
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed request bodies as client errors (400, not 422)."""
    return JSONResponse(status_code=400, content={"error": "Invalid request body"})


# ---------------------------------------------------------------------------
# Routes.
# ---------------------------------------------------------------------------


@router.get("/health")
async def health() -> dict:
    """Liveness probe; always returns ``{"ok": true}``."""
    return {"ok": True}


@router.post(
    "/generate",
    response_model=GenerateResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def generate(request: Request, req: GenerateRequest | None = None):
    """Generate images for a prompt via the upstream inference API.

    This endpoint:

    1. Rejects requests without a prompt (400).
    2. Calls the inference API once per configured image, sequentially.
    3. Passes the status and body of the first failing call straight through.
    4. Logs the prompt and image hashes, then returns the images as data URIs.

    Args:
        request: Incoming request, used to reach ``app.state``.
        req: Validated :class:`GenerateRequest` payload, if a body was sent.

    Returns:
        ``{"image": [uri, ...]}``, or ``{"image": uri}`` when the server is
        configured for a single image per request.

    Raises:
        MissingPromptError: 400 when ``prompt`` is absent or blank.
        ConfigurationError: 500 when the upstream token is not configured.
        UpstreamError: Upstream status when an inference call fails.
    """
    prompt = req.prompt if req is not None else None
    if not prompt or not prompt.strip():
        raise MissingPromptError()

    service: GenerationService = request.app.state.generation_service
    config: RelayConfig = request.app.state.config

    try:
        images = await service.generate(prompt)
    except RelayError:
        raise
    except Exception as exc:
        logger.exception("Unexpected error during generation")
        return JSONResponse(status_code=500, content={"error": str(exc)})

    if config.images_per_request == 1:
        return {"image": images[0]}
    return {"image": images}


@router.get(
    "/admin/logs",
    response_model=LogsResponse,
    responses={403: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def get_logs(
    request: Request,
    password: str | None = None,
    x_admin_password: str | None = Header(default=None),
) -> dict:
    """Return the full audit log to an authenticated admin.

    The password may be supplied in the ``x-admin-password`` header or the
    ``password`` query parameter.  The header wins when both are present.

    Args:
        request: Incoming request, used to reach ``app.state``.
        password: Admin password from the query string.
        x_admin_password: Admin password from the request header.

    Returns:
        ``{"logs": [...]}`` with every entry in append order.

    Raises:
        ConfigurationError: 500 when no admin password is configured.
        ForbiddenError: 403 when the supplied password is missing or wrong.
        LogStoreError: 500 when the log file cannot be read.
    """
    config: RelayConfig = request.app.state.config
    if not config.admin_password:
        raise ConfigurationError("Admin password not configured")

    supplied = x_admin_password if x_admin_password is not None else password
    if supplied is None or not hmac.compare_digest(
        supplied.encode("utf-8"), config.admin_password.encode("utf-8")
    ):
        logger.warning(f"Rejected admin log request from {_client_host(request)}")
        raise ForbiddenError()

    log_store: LogStore = request.app.state.log_store
    return {"logs": await run_in_threadpool(log_store.read_all)}


def _client_host(request: Request) -> str:
    return request.client.host if request.client else "unknown"


# ---------------------------------------------------------------------------
# Application factory.
# ---------------------------------------------------------------------------


def create_app(
    config: RelayConfig | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        config: Configuration to run with.  Loaded from the environment when
            omitted (this is what ``uvicorn --factory`` does).
        transport: Optional httpx transport for the inference client, used by
            tests to stub the upstream service.

    Returns:
        A fully wired FastAPI application.
    """
    if config is None:
        config = RelayConfig()

    app = FastAPI(
        title="Image Relay",
        description="Prompt-to-image relay with a hashed audit log.",
        version=__version__,
        lifespan=lifespan,
    )

    inference_client = InferenceClient(config, transport=transport)
    log_store = LogStore(config.log_file)

    app.state.config = config
    app.state.inference_client = inference_client
    app.state.log_store = log_store
    app.state.generation_service = GenerationService(
        inference_client,
        log_store,
        images_per_request=config.images_per_request,
    )

    app.add_exception_handler(RelayError, _relay_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router)

    # Mounted last so the API routes above take precedence over files.
    if config.static_dir is not None:
        if config.static_dir.is_dir():
            app.mount("/", StaticFiles(directory=str(config.static_dir), html=True), name="static")
        else:
            logger.warning(f"Static directory {config.static_dir} does not exist; not serving it.")

    return app


# ---------------------------------------------------------------------------
# CLI entry point.
# ---------------------------------------------------------------------------


def main() -> None:
    """Launch the uvicorn ASGI server.

    Reads host, port, and log level from :class:`RelayConfig` (which loads
    from ``IMAGERELAY_*`` environment variables, or ``PORT``).  Defaults to
    ``0.0.0.0:3000``.

    This function is registered as the ``imagerelay`` console script in
    ``pyproject.toml``.
    """
    import uvicorn

    config = RelayConfig()
    logging.basicConfig(
        level=config.log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    uvicorn.run(
        "imagerelay.api.main:create_app",
        factory=True,
        host=config.server_host,
        port=config.server_port,
        reload=False,
    )


if __name__ == "__main__":
    main()
