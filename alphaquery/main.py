import logging

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.routing import Mount

from alphaquery.config import get_settings
from alphaquery.exceptions import (
    AuthenticationError,
    DecodeError,
    IntegrationError,
    PrimaryTextError,
    RateLimitError,
)
from alphaquery.mcp_server import mcp
from alphaquery.models.common import ErrorResponse, StatusResponse
from alphaquery.routers.wolfram import router as wolfram_router


# --- Localhost-only middleware ---

class LocalhostOnlyMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        client_host = request.client.host if request.client else None
        if client_host not in ("127.0.0.1", "::1", "localhost"):
            return _error(403, "forbidden", "Localhost access only")
        return await call_next(request)


# --- FastAPI app ---

api = FastAPI(title="Alphaquery", version="0.1.0")
api.include_router(wolfram_router)


@api.get("/api/status")
def api_status() -> StatusResponse:
    configured = bool(get_settings().wolfram_app_id)
    return StatusResponse(
        integration="wolfram",
        configured=configured,
        message="ready" if configured else "Set WOLFRAM_APP_ID in .env",
    )


# --- Exception handlers ---

def _error(status_code: int, error_code: str, message: str) -> JSONResponse:
    body = ErrorResponse(error_code=error_code, message=message)
    return JSONResponse(status_code=status_code, content=body.model_dump())


@api.exception_handler(AuthenticationError)
async def auth_error_handler(request: Request, exc: AuthenticationError):
    return _error(401, "auth_error", str(exc))


@api.exception_handler(IntegrationError)
async def integration_error_handler(request: Request, exc: IntegrationError):
    return _error(500, "integration_error", str(exc))


@api.exception_handler(RateLimitError)
async def rate_limit_error_handler(request: Request, exc: RateLimitError):
    return _error(429, "rate_limit", str(exc))


@api.exception_handler(DecodeError)
async def decode_error_handler(request: Request, exc: DecodeError):
    return _error(502, "decode_error", str(exc))


@api.exception_handler(PrimaryTextError)
async def no_answer_handler(request: Request, exc: PrimaryTextError):
    return _error(404, "no_answer", str(exc))


# --- Starlette root app ---

mcp_app = mcp.http_app(path="/", stateless_http=True)

app = Starlette(
    middleware=[Middleware(LocalhostOnlyMiddleware)],
    routes=[
        Mount("/mcp", app=mcp_app),
        Mount("/", app=api),
    ],
)


def run():
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    uvicorn.run(
        "alphaquery.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
