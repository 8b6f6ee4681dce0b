"""
OpenTelemetry Distributed Tracing Configuration.

Sets up OpenTelemetry with:
- TracerProvider with the service name
- BatchSpanProcessor for efficient span export
- Console exporter by default, OTLP when OTEL_EXPORTER_OTLP_ENDPOINT is set
- Environment variable control (OTEL_ENABLED=true/false)

Usage:
    from app.core.tracing import setup_tracing, get_tracer, instrument_app

    setup_tracing()
    instrument_app(app)

    tracer = get_tracer(__name__)
    with tracer.start_as_current_span("journal.generate_summaries") as span:
        span.set_attribute("journal.answer_count", 4)

Environment Variables:
    OTEL_ENABLED: Set to "true" to enable tracing (default: false)
    OTEL_SERVICE_NAME: Override service name (default: qjournal-service)
    OTEL_EXPORTER_OTLP_ENDPOINT: OTLP endpoint for production (optional)
"""

import logging
import os
from typing import Optional

from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.sdk.resources import Resource, SERVICE_NAME
from opentelemetry.trace import Tracer
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor

logger = logging.getLogger("QJournal.Tracing")

DEFAULT_SERVICE_NAME = "qjournal-service"

_tracer_provider: Optional[TracerProvider] = None
_is_initialized = False


def is_tracing_enabled() -> bool:
    """
    Check whether OTEL_ENABLED turns tracing on.

    Returns:
        True if OTEL_ENABLED is "true" (case-insensitive), False otherwise.
    """
    return os.getenv("OTEL_ENABLED", "false").lower() == "true"


def setup_tracing(service_name: Optional[str] = None) -> Optional[TracerProvider]:
    """
    Initialize OpenTelemetry tracing.

    Does nothing and returns None unless OTEL_ENABLED is "true". Spans go to
    the OTLP endpoint when OTEL_EXPORTER_OTLP_ENDPOINT is set, to the console
    otherwise.

    Args:
        service_name: Optional override for the service name.
                     Defaults to OTEL_SERVICE_NAME env var or DEFAULT_SERVICE_NAME.

    Returns:
        The configured TracerProvider, or None if tracing is disabled.
    """
    global _tracer_provider, _is_initialized

    if _is_initialized:
        return _tracer_provider

    if not is_tracing_enabled():
        logger.info("OpenTelemetry tracing is disabled (set OTEL_ENABLED=true to enable)")
        _is_initialized = True
        return None

    effective_service_name = (
        service_name
        or os.getenv("OTEL_SERVICE_NAME")
        or DEFAULT_SERVICE_NAME
    )

    _tracer_provider = TracerProvider(resource=Resource.create({SERVICE_NAME: effective_service_name}))

    otlp_endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
    if otlp_endpoint:
        try:
            from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
            exporter = OTLPSpanExporter(endpoint=otlp_endpoint)
            logger.info(f"Using OTLP exporter with endpoint: {otlp_endpoint}")
        except ImportError:
            logger.warning("OTLP exporter requested but grpc dependencies not installed, falling back to console")
            exporter = ConsoleSpanExporter()
    else:
        exporter = ConsoleSpanExporter()

    _tracer_provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(_tracer_provider)

    _is_initialized = True
    logger.info(f"OpenTelemetry tracing initialized for service: {effective_service_name}")

    return _tracer_provider


def get_tracer(name: str) -> Tracer:
    """
    Get a tracer for custom spans.

    Args:
        name: The name for the tracer, typically __name__ of the module.

    Returns:
        A Tracer instance. If tracing is disabled, returns a no-op tracer.

    Example:
        tracer = get_tracer(__name__)
        with tracer.start_as_current_span("journal.upsert") as span:
            span.set_attribute("journal.entry_date", "2024-01-15")
    """
    return trace.get_tracer(name)


def instrument_app(app) -> None:
    """
    Instrument a FastAPI application and outbound httpx calls.

    Incoming requests get a span with method, path and status code; outbound
    calls to the identity provider carry the trace context.

    Args:
        app: The FastAPI application instance to instrument.
    """
    if not is_tracing_enabled():
        return

    FastAPIInstrumentor.instrument_app(app)
    HTTPXClientInstrumentor().instrument()
    logger.info("FastAPI and httpx instrumentation enabled")


def shutdown_tracing() -> None:
    """
    Shutdown the tracing provider and flush any remaining spans.

    Called from the application lifespan when the service stops.
    """
    global _tracer_provider, _is_initialized

    if _tracer_provider is not None:
        _tracer_provider.shutdown()
        _tracer_provider = None
    _is_initialized = False
