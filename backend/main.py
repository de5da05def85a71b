"""Main FastAPI application for Ansar.

Entry point for the application. Configures:
- FastAPI app with settings
- CORS and rate limiting middleware
- Exception handlers
- Route registration
"""

import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import get_app_config, get_cors_config, get_settings, setup_logging
from dependencies import get_chat_orchestrator
from middleware import RateLimitMiddleware
from responses import ResponseCode, error_dict
from router import router as api_router

setup_logging(get_settings().log_level)
logger = logging.getLogger(__name__)


# =============================================================================
# Lifespan Management
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log provider status on startup and release HTTP pools on shutdown."""
    logger.info("Starting Ansar...")

    settings = get_settings()
    logger.info("Environment: %s", settings.environment)
    logger.info("Claude model: %s", settings.claude_model)
    logger.info("OpenAI model: %s", settings.openai_model)

    orchestrator = get_chat_orchestrator()
    for client in orchestrator.clients:
        logger.info("%s API key: %s", client.name, client.credential_status())

    # Not fatal: chat requests answer with a localized "no key" message
    if not any(client.is_available() for client in orchestrator.clients):
        logger.warning("No LLM provider configured; chat requests will fail")

    yield

    logger.info("Shutting down Ansar...")
    for client in orchestrator.clients:
        await client.aclose()


app_config = get_app_config()
app = FastAPI(lifespan=lifespan, **app_config)

app.add_middleware(CORSMiddleware, **get_cors_config())

# Protects the chat endpoints (every turn costs provider calls)
app.add_middleware(RateLimitMiddleware)


# =============================================================================
# Middleware
# =============================================================================


@app.middleware("http")
async def tag_request(request: Request, call_next):
    """Attach a short ID that log lines and error envelopes can quote."""
    request.state.request_id = uuid.uuid4().hex[:8]
    response = await call_next(request)
    response.headers.setdefault("X-Request-ID", request.state.request_id)
    return response


# =============================================================================
# Exception Handlers
# =============================================================================

# Statuses raised by routing itself (unknown path, wrong method)
HTTP_ERROR_CODES = {
    404: ResponseCode.NOT_FOUND,
    405: ResponseCode.VALIDATION_ERROR,
    429: ResponseCode.RATE_LIMITED,
}


def _error_json(
    request: Request,
    code: ResponseCode,
    message: str,
    status_code: int,
    details: dict | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=error_dict(
            code,
            custom_message=message,
            error_details=details,
            request_id=getattr(request.state, "request_id", None),
        ),
    )


@app.exception_handler(RequestValidationError)
async def on_invalid_request(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report every failing field of a malformed chat request."""
    problems = [
        {"loc": list(err.get("loc", [])), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]
    field = problems[0]["loc"][-1] if problems and problems[0]["loc"] else "unknown"
    return _error_json(
        request,
        ResponseCode.VALIDATION_ERROR,
        f"Validation failed for field '{field}'",
        422,
        {"validation_errors": problems},
    )


@app.exception_handler(StarletteHTTPException)
async def on_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    code = HTTP_ERROR_CODES.get(exc.status_code, ResponseCode.INTERNAL_ERROR)
    return _error_json(request, code, str(exc.detail), exc.status_code)


@app.exception_handler(Exception)
async def on_unhandled(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s", request.url.path)
    return _error_json(
        request,
        ResponseCode.INTERNAL_ERROR,
        "An unexpected error occurred",
        500,
        {"exception_type": type(exc).__name__},
    )


# =============================================================================
# Routes
# =============================================================================

app.include_router(api_router, prefix="/api")


@app.get("/", include_in_schema=False)
async def root():
    """Root endpoint - shows API info."""
    return {
        "name": "Ansar",
        "description": "Islamic knowledge assistant backend",
        "docs": "/api/docs",
        "health": "/api/health",
    }


# =============================================================================
# Development Server
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=get_settings().debug,
    )
