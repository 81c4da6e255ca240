"""
OpenTelemetry Distributed Tracing

Configures a tracer provider for the service and exports spans over OTLP/HTTP
to whatever collector ``OTEL_EXPORTER_OTLP_ENDPOINT`` points at.
"""

import logging
from typing import Optional

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.django import DjangoInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

logger = logging.getLogger(__name__)

_initialized = False


def setup_tracing(
    service_name: str = "booth-backend",
    endpoint: str = "http://localhost:4318/v1/traces",
    enable: bool = True,
) -> None:
    """
    Initialize OpenTelemetry tracing with an OTLP exporter.

    Args:
        service_name: Name of the service for tracing
        endpoint: OTLP/HTTP traces endpoint of the collector
        enable: Enable/disable tracing

    Example:
        setup_tracing(service_name="booth-backend", endpoint="http://otel-collector:4318/v1/traces")
    """
    global _initialized

    if _initialized:
        logger.warning("Tracing already initialized. Skipping.")
        return

    if not enable:
        logger.info("Tracing disabled via configuration")
        return

    try:
        resource = Resource(attributes={SERVICE_NAME: service_name})
        tracer_provider = TracerProvider(resource=resource)
        trace.set_tracer_provider(tracer_provider)

        tracer_provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=endpoint)))
        logger.info(f"OTLP tracing configured: {endpoint}")

        # Traces all incoming HTTP requests
        DjangoInstrumentor().instrument()

        _initialized = True
        logger.info(f"OpenTelemetry tracing initialized for service: {service_name}")

    except Exception as e:
        logger.error(f"Failed to initialize tracing: {e}", exc_info=True)


def get_tracer(name: Optional[str] = None) -> trace.Tracer:
    """
    Get a tracer for creating custom spans.

    Without a configured provider this returns a no-op tracer, so callers
    never need to check whether tracing is enabled.

    Example:
        tracer = get_tracer(__name__)

        with tracer.start_as_current_span("create_order") as span:
            add_span_attributes(span, product_id=product_id)
    """
    return trace.get_tracer(name or __name__)


def add_span_attributes(span: trace.Span, **attributes) -> None:
    for key, value in attributes.items():
        span.set_attribute(key, str(value))
