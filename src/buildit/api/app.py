"""FastAPI application setup."""

from __future__ import annotations

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from buildit import __version__
from buildit.api.models import APIResponse
from buildit.api.routes import pipelines, system, webhooks
from buildit.broker import BrokerError
from buildit.dispatcher import DispatchError, InvalidBuildRequestError
from buildit.state_store import PipelineNotFoundError, StateStoreError


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=APIResponse[None](data=None, error=message).model_dump(),
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Services are injected through ``buildit.api.dependencies`` before serving.
    """
    app = FastAPI(
        title="BuildIt! API",
        description="REST API for BuildIt! - distributed package build coordination",
        version=__version__,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        _request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        _request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        messages = "; ".join(str(err.get("msg")) for err in exc.errors())
        return _error(status.HTTP_422_UNPROCESSABLE_ENTITY, messages)

    @app.exception_handler(PipelineNotFoundError)
    async def pipeline_not_found_handler(
        _request: Request, _exc: PipelineNotFoundError
    ) -> JSONResponse:
        return _error(status.HTTP_404_NOT_FOUND, "Pipeline not found")

    @app.exception_handler(InvalidBuildRequestError)
    async def invalid_build_request_handler(
        _request: Request, exc: InvalidBuildRequestError
    ) -> JSONResponse:
        return _error(status.HTTP_400_BAD_REQUEST, str(exc))

    @app.exception_handler(DispatchError)
    async def dispatch_error_handler(_request: Request, exc: DispatchError) -> JSONResponse:
        return _error(status.HTTP_502_BAD_GATEWAY, f"Failed to create job: {exc}")

    @app.exception_handler(BrokerError)
    async def broker_error_handler(_request: Request, _exc: BrokerError) -> JSONResponse:
        return _error(status.HTTP_503_SERVICE_UNAVAILABLE, "Message broker unavailable")

    @app.exception_handler(StateStoreError)
    async def state_store_error_handler(_request: Request, _exc: StateStoreError) -> JSONResponse:
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")

    # Include routers
    app.include_router(system.router, prefix="/api")
    app.include_router(pipelines.router, prefix="/api")
    app.include_router(webhooks.router, prefix="/api")

    return app
