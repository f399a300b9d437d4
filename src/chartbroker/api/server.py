"""FastAPI application for the OSB surface."""

import time
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from chartbroker._package import __version__
from chartbroker.api.errors import error_response, register_exception_handlers
from chartbroker.api.routers import bindings, catalog, instances
from chartbroker.application.services.broker_service import ServiceBroker
from chartbroker.infrastructure.monitoring.metrics import MetricsCollector

API_VERSION_HEADER = "X-Broker-API-Version"


def create_fastapi_app(broker: ServiceBroker, metrics: Optional[MetricsCollector] = None) -> FastAPI:
    app = FastAPI(
        title="chartbroker",
        description="Open Service Broker that provisions Helm charts",
        version=__version__,
    )
    app.state.broker = broker
    app.state.metrics = metrics

    @app.middleware("http")
    async def require_api_version(request: Request, call_next):
        if request.url.path.startswith("/v2") and API_VERSION_HEADER.lower() not in request.headers:
            return error_response(412, f"{API_VERSION_HEADER} header is required", "PreconditionFailed")
        return await call_next(request)

    if metrics is not None:

        @app.middleware("http")
        async def record_metrics(request: Request, call_next):
            start = time.monotonic()
            response = await call_next(request)
            metrics.increment_counter(f"http.{request.method.lower()}_{response.status_code}_total")
            metrics.record_time("http.request", time.monotonic() - start)
            return response

        @app.get("/metrics", include_in_schema=False)
        async def prometheus_metrics() -> Response:
            return Response(content=metrics.render(), media_type=metrics.content_type)

    @app.get("/healthz", include_in_schema=False)
    async def healthz() -> JSONResponse:
        return JSONResponse(content={"status": "ok", "version": __version__})

    register_exception_handlers(app)
    app.include_router(catalog.router)
    app.include_router(instances.router)
    app.include_router(bindings.router)
    return app
