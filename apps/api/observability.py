from __future__ import annotations

import logging
import os
import sys

try:
    from opentelemetry import trace
    from opentelemetry.sdk.resources import Resource
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
    from opentelemetry.exporter.otlp.proto.http.trace_exporter import (
        OTLPSpanExporter,
    )
except Exception:  # pragma: no cover - optional dependency resolution
    trace = None
    TracerProvider = None


logger = logging.getLogger("unified_schedule.api")


def init_observability(service_name: str = "unified-schedule") -> bool:
    """Install a tracer provider once. Returns True when tracing is active."""
    if "pytest" in sys.modules:
        return False
    if trace is None or TracerProvider is None:
        logger.warning(
            "OpenTelemetry SDK not available. Install observability dependencies to enable tracing."
        )
        return False
    if isinstance(trace.get_tracer_provider(), TracerProvider):
        return True

    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))
    otlp_endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
    if otlp_endpoint:
        provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint)))
    elif os.getenv("OTEL_CONSOLE_EXPORT", "false").lower() == "true":
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))
    trace.set_tracer_provider(provider)
    return True
