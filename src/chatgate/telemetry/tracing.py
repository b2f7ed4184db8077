"""
OpenTelemetry tracing for chatgate nodes.

One tracer provider per process, tagged with the node's number and role.
Spans go to the OTLP collector when an endpoint is configured and to stdout
otherwise.
"""

from __future__ import annotations

import logging
from threading import Lock
from typing import TYPE_CHECKING

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter


if TYPE_CHECKING:
    from fastapi import FastAPI
    from opentelemetry.sdk.trace.export import SpanExporter

    from chatgate.config import ChatGateSettings

logger = logging.getLogger(__name__)
_setup_lock = Lock()

# Never traced by the FastAPI instrumentation.
UNTRACED_PATHS = ("/metrics", "/health", "/api/health")


class _TracingState:
    provider: TracerProvider | None = None


_tracing_state = _TracingState()


def _build_exporter(settings: ChatGateSettings) -> SpanExporter:
    if not settings.otel_exporter_endpoint:
        return ConsoleSpanExporter()
    try:
        return OTLPSpanExporter(
            endpoint=settings.otel_exporter_endpoint,
            insecure=settings.otel_exporter_insecure,
            timeout=5,
        )
    except Exception as exc:
        logger.warning("OTLP exporter unavailable (%s); exporting spans to stdout", exc)
        return ConsoleSpanExporter()


def setup_tracing(settings: ChatGateSettings, service_name: str) -> bool:
    """
    Install the global tracer provider for this node.

    Safe to call more than once; only the first call with tracing enabled
    has any effect.

    Returns:
        True if tracing is active after the call
    """
    if not settings.enable_tracing:
        return False

    with _setup_lock:
        if _tracing_state.provider is not None:
            return True

        provider = TracerProvider(
            resource=Resource.create(
                {
                    SERVICE_NAME: service_name,
                    "service.namespace": "chatgate",
                    "service.instance.id": f"node-{settings.node_number}",
                    "chatgate.node": settings.node_number,
                    "chatgate.role": settings.role.value,
                }
            )
        )
        provider.add_span_processor(BatchSpanProcessor(_build_exporter(settings)))
        trace.set_tracer_provider(provider)

        # Worker calls from the gateway carry trace context to the workers.
        try:
            HTTPXClientInstrumentor().instrument()
        except Exception as exc:
            logger.warning("Failed to instrument httpx for tracing: %s", exc)

        _tracing_state.provider = provider
        logger.info("OpenTelemetry tracing configured for %s", service_name)
        return True


def shutdown_tracing() -> None:
    """Flush pending spans and drop the provider."""
    with _setup_lock:
        provider = _tracing_state.provider
        _tracing_state.provider = None
    if provider is not None:
        provider.shutdown()
        logger.info("OpenTelemetry tracing shut down")


def instrument_fastapi_app(app: FastAPI) -> None:
    try:
        FastAPIInstrumentor.instrument_app(app, excluded_urls=",".join(UNTRACED_PATHS))
    except Exception as exc:
        logger.warning("Unable to instrument FastAPI app for tracing: %s", exc)
