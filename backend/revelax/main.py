"""FastAPI application entrypoint for the room coordinator."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi import HTTPException
from fastapi import Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

import revelax.runtime as runtime
from revelax.api.errors import handle_http_exception
from revelax.api.errors import validation_error_message
from revelax.api.routers.rooms import CREATE_ROOM_PATH
from revelax.api.routers.rooms import router as rooms_router
from revelax.ws.routers import router as ws_router


def startup() -> None:
    """Ensure tables exist and start from an empty connection registry."""
    runtime.startup()


@asynccontextmanager
async def lifespan(_: FastAPI):
    startup()
    yield


app = FastAPI(title="revelax", lifespan=lifespan)
app.include_router(rooms_router)
app.include_router(ws_router)


@app.exception_handler(HTTPException)
async def handle_http_exception_route(request: Request, exc: HTTPException) -> JSONResponse:
    """Adapter used by FastAPI exception handling."""
    return await handle_http_exception(request, exc)


@app.exception_handler(RequestValidationError)
async def handle_validation_error_route(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Room creation always answers {success, error}; other routes keep the default 422."""
    if request.method == "POST" and request.url.path == CREATE_ROOM_PATH:
        return JSONResponse(
            status_code=400,
            content={"success": False, "error": validation_error_message(exc)},
        )
    return await request_validation_exception_handler(request, exc)


__all__ = [
    "app",
    "startup",
]
