"""
FastAPI application for the Ollama-to-Claude proxy.

Endpoints:
  POST /api/generate  - Ollama-compatible generation, translated to Claude
  POST /v1/messages   - Native Claude Messages API passthrough
  GET  /api/tags      - Known model aliases
  GET  /health        - Liveness check, no dependencies
  GET  /version       - Service version
"""
import asyncio
import logging
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, Awaitable, Optional

import httpx
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from starlette.requests import ClientDisconnect

from . import __version__
from .client import ClaudeClient
from .config import Settings
from .errors import BadRequestError, GatewayError, ProviderError
from .models import GenerationRequest, GenerationResponse
from .resolver import ModelResolver
from .translate import build_conversation_request, build_generation_response, extract_text

logger = logging.getLogger(__name__)

# How often a pending provider call checks whether its client went away.
DISCONNECT_POLL_SECONDS = 0.25

# nginx's "client closed request"; never actually seen by the client.
CLIENT_CLOSED_REQUEST = 499


def setup_logging(settings: Settings) -> logging.Logger:
    """Configure logging with file and console handlers."""
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    root_logger.handlers.clear()

    # Console handler (always)
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # File handler (if configured)
    if settings.log_path:
        try:
            log_path = Path(settings.log_path)
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_path)
            file_handler.setLevel(log_level)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
            root_logger.info("Logging to file: %s", log_path)
        except OSError as e:
            root_logger.error("Failed to set up file logging: %s", e)

    return logging.getLogger(__name__)


async def _until_disconnect(request: Request, call: Awaitable[Any]) -> Any:
    """
    Await `call`, cancelling it if the inbound client disconnects first.

    Raises HTTPException(499) on disconnect.
    """
    task = asyncio.ensure_future(call)
    try:
        while True:
            done, _ = await asyncio.wait({task}, timeout=DISCONNECT_POLL_SECONDS)
            if done:
                return task.result()
            if await request.is_disconnected():
                logger.info("Client disconnected, cancelling provider call")
                task.cancel()
                raise HTTPException(status_code=CLIENT_CLOSED_REQUEST, detail="Client closed request")
    finally:
        if not task.done():
            task.cancel()


def create_app(
    settings: Settings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """
    Create the proxy application.

    Args:
        settings: Validated settings, shared read-only by every request
        transport: Optional httpx transport for the provider (tests use
                   httpx.MockTransport)

    Returns:
        Configured FastAPI application
    """
    resolver = ModelResolver(settings.claude_default_model)
    client = ClaudeClient.from_settings(settings, transport=transport)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Ollama-Claude proxy starting up")
        logger.info("Claude API endpoint: %s", client.endpoint)
        logger.info("Default model: %s", resolver.default_model)

        yield

        logger.info("Ollama-Claude proxy shutting down")
        await client.aclose()

    app = FastAPI(
        title="Ollama-Claude Proxy",
        description="Ollama-compatible API backed by the Claude Messages API",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["POST", "GET", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    @app.exception_handler(RequestValidationError)
    async def bad_request(request: Request, exc: RequestValidationError):
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', '')}"
            for err in exc.errors()
        )
        error = BadRequestError(problems or "invalid request body")
        logger.warning("Rejected %s %s: %s", request.method, request.url.path, error.message)
        return JSONResponse(status_code=error.status_code, content={"detail": f"Bad request: {error.message}"})

    @app.get("/health", response_class=PlainTextResponse)
    async def health():
        """Liveness check. Does not contact the provider."""
        return "OK"

    @app.get("/version")
    async def version():
        return {"service": "ollama-claude-proxy", "version": __version__}

    @app.get("/api/tags")
    async def tags():
        """List the model aliases this proxy understands."""
        return {
            "models": [
                {"name": alias, "model": model_id}
                for alias, model_id in sorted(resolver.aliases.items())
            ],
            "default_model": resolver.default_model,
        }

    @app.post("/api/generate", response_model=GenerationResponse)
    async def generate(request: Request, body: GenerationRequest):
        """Ollama-compatible generation endpoint."""
        model_id = resolver.resolve(body.model)
        logger.info("Mapped Ollama model '%s' to Claude model '%s'", body.model, model_id)

        conversation = build_conversation_request(body, model_id, settings)

        try:
            result = await _until_disconnect(request, client.send(conversation))
        except ProviderError as e:
            raise HTTPException(status_code=502, detail=f"Claude API error: {e.message}")
        except GatewayError as e:
            raise HTTPException(status_code=e.status_code, detail=f"Claude API error ({e.kind}): {e.message}")

        return build_generation_response(body, extract_text(result))

    @app.post("/v1/messages")
    async def messages(request: Request):
        """Claude Messages API passthrough. Mirrors the provider's reply."""
        try:
            raw_body = await request.body()
        except ClientDisconnect as e:
            logger.warning("Error reading request body: %s", e)
            return PlainTextResponse("Error reading request body: client disconnected", status_code=400)

        try:
            reply = await _until_disconnect(
                request,
                client.forward(
                    raw_body,
                    request.headers.get("content-type"),
                    request.headers.get("accept-encoding"),
                ),
            )
        except GatewayError as e:
            return PlainTextResponse(f"Claude API error ({e.kind}): {e.message}", status_code=e.status_code)

        response = Response(content=reply.body, status_code=reply.status_code)
        response.raw_headers = list(reply.headers)
        return response

    return app
