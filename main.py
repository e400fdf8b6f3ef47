"""
FastAPI Application Entry Point

Integrates:
  - Memo routes (mounted under /api)
  - Health check
  - Middleware for logging & error handling

Startup resolves configuration and builds the one shared memo repository.
Missing Notion credentials stop the process before it serves requests.

Run: uvicorn main:app --host 0.0.0.0 --port 3000
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api import router as memo_router
from api.memo_routes import health
from config import ConfigError
from infra import InfraBootstrap, bootstrap_infrastructure
from memo import MemoError

API_PREFIX = "/api"

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def error_body(status_code: int, message: str) -> Dict[str, Any]:
    return {
        "status": "error",
        "statusCode": status_code,
        "message": message,
    }


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan: startup and shutdown handlers.
    """
    # Startup
    infra: Optional[InfraBootstrap] = getattr(app.state, "infra", None)
    if infra is None:
        try:
            infra = bootstrap_infrastructure()
        except ConfigError as e:
            logger.critical(f"Cannot start memo service: {e}")
            raise
        app.state.infra = infra

    logging.getLogger().setLevel(infra.config.log_level)
    logger.info("=" * 60)
    logger.info("Notion memo service starting up...")
    logger.info(f"Backend: {infra.config.memo_backend}")
    logger.info(f"Environment: {infra.config.environment}")
    logger.info(f"Server is running on port {infra.config.port}")
    logger.info("=" * 60)

    yield

    # Shutdown
    logger.info("Notion memo service shutting down...")
    await infra.aclose()


def create_app(infra: Optional[InfraBootstrap] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        infra: Pre-built infrastructure (tests inject a stub-backed one);
            when omitted it is bootstrapped from configuration at startup
    """
    app = FastAPI(
        title="Notion Memo API",
        description="Create, list, update and archive memos stored in Notion",
        version="1.0.0",
        lifespan=lifespan,
    )
    if infra is not None:
        app.state.infra = infra

    # Middleware for logging
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log all requests."""
        logger.info(f"{request.method} {request.url.path}")
        try:
            response = await call_next(request)
            return response
        except Exception as e:
            logger.error(f"Request error: {str(e)}", exc_info=True)
            return JSONResponse(
                status_code=500,
                content=error_body(500, "Internal server error"),
            )

    # Error handlers
    @app.exception_handler(MemoError)
    async def memo_error_handler(request: Request, exc: MemoError):
        logger.error(f"{exc.status_code} - {exc.message}")
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.status_code, exc.message),
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        if errors:
            first = errors[0]
            location = ".".join(str(part) for part in first.get("loc", ()))
            message = f"Invalid request: {location}: {first.get('msg', 'invalid value')}"
        else:
            message = "Invalid request"
        logger.warning(f"400 - {message}")
        return JSONResponse(status_code=400, content=error_body(400, message))

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            target = request.url.path
            if request.url.query:
                target = f"{target}?{request.url.query}"
            return JSONResponse(
                status_code=404,
                content={
                    "status": "error",
                    "message": f"Can't find {target} on this server",
                },
            )
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.status_code, str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    # Routes
    app.include_router(memo_router, prefix=API_PREFIX)
    app.add_api_route("/health", health, methods=["GET"], tags=["Health"])

    @app.get("/")
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Notion Memo API",
            "version": "1.0.0",
            "status": "running",
            "endpoints": {
                "health": f"GET {API_PREFIX}/health",
                "create_memo": f"POST {API_PREFIX}/memo",
                "list_memos": f"GET {API_PREFIX}/memos",
                "update_memo": f"PATCH {API_PREFIX}/memo/{{id}}",
                "archive_memo": f"DELETE {API_PREFIX}/memo/{{id}}",
            },
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    from config import get_config

    config = get_config()
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=config.port,
        reload=config.environment == "development",
    )
