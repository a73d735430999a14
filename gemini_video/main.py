import logging
import sys

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.routing import Mount

from gemini_video.config import get_settings, load_config
from gemini_video.exceptions import (
    ConfigError,
    InvalidArgumentsError,
    LocalFileError,
    UnknownToolError,
    UploadError,
)
from gemini_video.mcp_server import create_server
from gemini_video.routers.video import router as video_router
from gemini_video.tools import ToolDispatcher

logger = logging.getLogger(__name__)


# --- Localhost-only middleware ---

class LocalhostOnlyMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        client_host = request.client.host if request.client else None
        if client_host not in ("127.0.0.1", "::1", "localhost"):
            return JSONResponse(
                status_code=403,
                content={"error_code": "forbidden", "message": "Localhost access only"},
            )
        return await call_next(request)


# --- FastAPI app ---

def _error(status_code: int, error_code: str, exc: Exception) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error_code": error_code, "message": str(exc)})


def create_api(dispatcher: ToolDispatcher) -> FastAPI:
    api = FastAPI(title="Gemini Video", version="1.0.0")
    api.state.dispatcher = dispatcher
    api.include_router(video_router)

    @api.exception_handler(UnknownToolError)
    async def unknown_tool_handler(request: Request, exc: UnknownToolError):
        return _error(404, "unknown_tool", exc)

    @api.exception_handler(InvalidArgumentsError)
    async def invalid_arguments_handler(request: Request, exc: InvalidArgumentsError):
        return _error(422, "invalid_arguments", exc)

    @api.exception_handler(LocalFileError)
    async def local_file_handler(request: Request, exc: LocalFileError):
        return _error(400, "local_file_error", exc)

    @api.exception_handler(UploadError)
    async def upload_error_handler(request: Request, exc: UploadError):
        return _error(502, "upload_error", exc)

    @api.exception_handler(Exception)
    async def generation_error_handler(request: Request, exc: Exception):
        return _error(500, "gemini_error", exc)

    return api


# --- Starlette root app ---

def create_app(dispatcher: ToolDispatcher) -> Starlette:
    mcp_app = create_server(dispatcher.config, dispatcher).http_app(path="/", stateless_http=True)
    return Starlette(
        middleware=[Middleware(LocalhostOnlyMiddleware)],
        routes=[
            Mount("/mcp", app=mcp_app),
            Mount("/", app=create_api(dispatcher)),
        ],
        lifespan=mcp_app.lifespan,
    )


def run():
    try:
        settings = get_settings()
    except ValidationError as e:
        logging.basicConfig(stream=sys.stderr)
        logger.error("Invalid settings: %s", e)
        sys.exit(1)
    logging.basicConfig(
        level=settings.log_level,
        stream=sys.stderr,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        config = load_config()
    except ConfigError:
        logger.exception("Fatal error while starting the Gemini video MCP server")
        sys.exit(1)

    dispatcher = ToolDispatcher(config)
    logger.info("Gemini Video MCP Server ready (model: %s)", config.model)

    if settings.mcp_transport == "http":
        uvicorn.run(
            create_app(dispatcher),
            host=settings.mcp_host,
            port=settings.mcp_port,
            log_level=settings.log_level.lower(),
        )
    else:
        # stdout carries the stdio protocol; logs stay on stderr
        create_server(config, dispatcher).run()


if __name__ == "__main__":
    run()
