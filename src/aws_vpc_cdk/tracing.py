"""OpenTelemetry tracing configuration.

Provisioning pipeline steps run inside spans. Without ``setup_tracing`` the
global no-op tracer provider is used.
"""

import os
from typing import Optional

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, SpanExporter

from . import __version__


def setup_tracing(
    service_name: str = "aws_vpc_cdk",
    otlp_endpoint: Optional[str] = None,
    exporter: Optional[SpanExporter] = None,
) -> TracerProvider:
    """Configure OpenTelemetry tracing with an OTLP exporter.

    Args:
        service_name: Name of the service for tracing
        otlp_endpoint: OTLP collector endpoint (defaults to env var OTEL_EXPORTER_OTLP_ENDPOINT)
        exporter: Span exporter to use instead of OTLP

    Returns:
        The tracer provider installed as the global provider
    """
    if exporter is None:
        endpoint = otlp_endpoint or os.getenv(
            "OTEL_EXPORTER_OTLP_ENDPOINT",
            "http://localhost:4317",
        )
        exporter = OTLPSpanExporter(endpoint=endpoint, insecure=True)

    resource = Resource.create(
        {
            "service.name": service_name,
            "service.version": __version__,
            "deployment.environment": os.getenv("ENVIRONMENT", "development"),
        }
    )

    tracer_provider = TracerProvider(resource=resource)
    tracer_provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(tracer_provider)
    return tracer_provider


def get_tracer(name: str) -> trace.Tracer:
    """Get a tracer instance.

    Example:
        >>> tracer = get_tracer(__name__)
        >>> with tracer.start_as_current_span("partition_subnets"):
        ...     pass
    """
    return trace.get_tracer(name)


__all__ = ["setup_tracing", "get_tracer"]
