from collections.abc import AsyncIterator
import contextlib
import logging
from typing import Any

from fastapi import FastAPI, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse
from prometheus_client import generate_latest

from .component_factory import build_gateway_registry
from .component_registry import ComponentRegistry
from .config import ChatGateSettings
from .enums import NodeRole
from .middleware import BodySizeLimitMiddleware
from .services.audio.api import router as audio_router
from .services.gateway.api import router as gateway_router
from .services.gateway.errors import (
    GatewayError,
    RequestValidationFailed,
    WorkerUnavailableError,
)
from .services.gateway.metrics import error_counter as gateway_error_counter
from .services.translation.api import router as translation_router
from .telemetry import error_counter, instrument_fastapi_app


logger = logging.getLogger(__name__)

ROLE_TITLES = {
    NodeRole.GATEWAY: "Chat Gateway",
    NodeRole.TRANSLATION: "Translation Worker",
    NodeRole.AUDIO: "Audio Worker",
}


def _create_base_app(settings: ChatGateSettings, registry: ComponentRegistry) -> FastAPI:
    """Create the base FastAPI app with lifecycle and middleware configured."""

    @contextlib.asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        logger.info("Application startup: %s", settings.role.value)
        await registry.start_all()
        yield
        logger.info("Application shutdown")
        await registry.stop_all()

    app = FastAPI(
        title=f"{ROLE_TITLES[settings.role]} (node {settings.node_number})",
        version="0.1.0",
        lifespan=lifespan,
        default_response_class=ORJSONResponse,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if settings.role is NodeRole.GATEWAY:
        app.add_middleware(
            BodySizeLimitMiddleware,
            max_body_bytes=settings.max_gateway_body_bytes,
            node_label=str(settings.node_number),
        )

    instrument_fastapi_app(app)

    app.state.registry = registry
    return app


def _error_response(settings: ChatGateSettings, exc: GatewayError) -> ORJSONResponse:
    error_counter.labels(
        node=str(settings.node_number),
        service=settings.role.value,
        error_kind=exc.kind.value,
    ).inc()
    gateway_error_counter.labels(error_kind=exc.kind.value).inc()
    return ORJSONResponse(status_code=exc.status_code, content=jsonable_encoder(exc.to_body()))


def _register_exception_handlers(app: FastAPI, settings: ChatGateSettings) -> None:
    """Render every gateway failure as the standard error body."""

    @app.exception_handler(GatewayError)
    async def gateway_error_handler(request: Request, exc: GatewayError) -> ORJSONResponse:
        logger.warning(
            "%s %s failed with %s: %s", request.method, request.url.path, exc.kind.value, exc
        )
        return _error_response(settings, exc)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> ORJSONResponse:
        logger.warning("Invalid request to %s: %s", request.url.path, exc.errors())
        return _error_response(
            settings,
            RequestValidationFailed(
                "Invalid request",
                details=[
                    {"loc": list(err["loc"]), "msg": err["msg"], "type": err["type"]}
                    for err in exc.errors()
                ],
            ),
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> ORJSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _error_response(
            settings,
            WorkerUnavailableError("Internal server error", details=str(exc)),
        )


def _register_endpoints(app: FastAPI, settings: ChatGateSettings) -> None:
    """Register health check and metrics endpoints."""

    @app.get("/health")
    async def health_check() -> dict[str, Any]:
        registry: ComponentRegistry = app.state.registry
        return {
            "status": "healthy",
            "node": settings.node_number,
            "role": settings.role.value,
            "components": {
                name: {"status": "ready", "type": type(component).__name__}
                for name, component in registry.components.items()
            },
        }

    @app.get("/metrics", response_class=Response)
    @app.head("/metrics", response_class=Response)
    async def metrics() -> Response:
        """Prometheus metrics endpoint."""
        return Response(
            content=generate_latest(),
            media_type="text/plain; version=0.0.4; charset=utf-8",
        )


def create_app(settings: ChatGateSettings, registry: ComponentRegistry | None = None) -> FastAPI:
    """
    Create the FastAPI application for this node's role.

    Args:
        settings: Node configuration; ``settings.role`` selects the routes
        registry: Prebuilt component registry (gateway only); built from
            settings when omitted
    """
    role = settings.role
    logger.info("Creating application for node %d (%s)", settings.node_number, role.value)

    if registry is None:
        registry = (
            build_gateway_registry(settings) if role is NodeRole.GATEWAY else ComponentRegistry()
        )

    app = _create_base_app(settings, registry)

    if role is NodeRole.GATEWAY:
        app.include_router(gateway_router, prefix="/api")
        _register_exception_handlers(app, settings)
    elif role is NodeRole.TRANSLATION:
        app.include_router(translation_router, prefix="/rpc")
    elif role is NodeRole.AUDIO:
        app.include_router(audio_router, prefix="/rpc")

    _register_endpoints(app, settings)
    return app
