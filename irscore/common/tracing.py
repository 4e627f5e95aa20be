"""Tracing configuration for scoring processes.

Wraps OpenTelemetry setup. Without ``configure_tracing`` the global no-op
provider is used, so ``traced_span`` is always safe to call.
"""

from contextlib import contextmanager
import os
from typing import Any, Iterator, Optional

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter, SpanExporter
import structlog

from irscore import __version__

logger = structlog.get_logger("tracing")

TRACER_NAME = "irscore"


def configure_tracing(
    service_name: str,
    exporter: Optional[SpanExporter] = None,
) -> trace.Tracer:
    """Install a tracer provider for this process.

    Parameters
    - service_name: Logical identifier used in the trace resource
    - exporter: Span exporter; defaults to the console exporter

    Returns
    - A tracer for ad-hoc span creation
    """
    tracer_provider = TracerProvider(
        resource=Resource.create({
            "service.name": service_name,
            "service.version": __version__,
            "deployment.environment": os.getenv("IRSCORE_ENV", "local"),
        })
    )
    tracer_provider.add_span_processor(BatchSpanProcessor(exporter or ConsoleSpanExporter()))
    trace.set_tracer_provider(tracer_provider)

    logger.info("Tracing configured", service_name=service_name)
    return trace.get_tracer(TRACER_NAME)


def get_tracer() -> trace.Tracer:
    return trace.get_tracer(TRACER_NAME)


@contextmanager
def traced_span(operation_name: str, **attributes: Any) -> Iterator[trace.Span]:
    """Run a block inside a span; exceptions are recorded and re-raised."""
    with get_tracer().start_as_current_span(operation_name) as span:
        for key, value in attributes.items():
            span.set_attribute(key, str(value))
        yield span
