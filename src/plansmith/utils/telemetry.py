"""Tracing for plan construction and apply.

Spans cover ``plansmith.plan.create``, ``plansmith.plan.apply``,
``plansmith.bundle.apply`` and ``plansmith.action.dispatch``. They are no-ops
until :func:`configure_telemetry` installs a tracer provider, which needs the
``otel`` extra.
"""

from __future__ import annotations

from typing import Any

from opentelemetry import trace

ATTR_PLAN = "plansmith.plan"
ATTR_NAMESPACE = "plansmith.namespace"
ATTR_PLAN_COUNT = "plansmith.plan.count"
ATTR_COMPONENT_COUNT = "plansmith.component.count"
ATTR_BUNDLE = "plansmith.bundle"
ATTR_BUNDLE_LOCAL = "plansmith.bundle.local"
ATTR_BUNDLE_COUNT = "plansmith.bundle.count"
ATTR_ACTION = "plansmith.action"
ATTR_ON_FAILURE = "plansmith.on_failure"
ATTR_DRY_RUN = "plansmith.dry_run"
ATTR_EXIT_CODE = "plansmith.exit_code"

_OTEL_EXTRA_HINT = "Install it with: pip install plansmith[otel]"


def get_tracer(name: str | None = None) -> trace.Tracer:
    """Tracer for *name*, defaulting to the ``plansmith`` instrumentation."""
    return trace.get_tracer(name or "plansmith")


def configure_telemetry(
    *,
    service_name: str = "plansmith",
    export_to_console: bool = True,
    otlp_endpoint: str | None = None,
) -> None:
    """Install a global tracer provider for plan and bundle spans.

    Spans go to stdout when *export_to_console* is set and, batched, to the
    OTLP/gRPC collector at *otlp_endpoint* when one is given.

    Raises:
        ImportError: ``opentelemetry-sdk`` (or, for OTLP, the exporter) is
            missing.
    """
    try:
        from opentelemetry.sdk.resources import Resource  # pyright: ignore[reportMissingImports]
        from opentelemetry.sdk.trace import TracerProvider  # pyright: ignore[reportMissingImports]
        from opentelemetry.sdk.trace.export import (  # pyright: ignore[reportMissingImports]
            BatchSpanProcessor,
            ConsoleSpanExporter,
            SimpleSpanProcessor,
        )
    except ImportError as exc:
        raise ImportError(f"opentelemetry-sdk is required for plansmith tracing. {_OTEL_EXTRA_HINT}") from exc

    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))
    if export_to_console:
        provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter()))
    if otlp_endpoint:
        provider.add_span_processor(BatchSpanProcessor(_otlp_exporter(otlp_endpoint)))
    trace.set_tracer_provider(provider)


def _otlp_exporter(endpoint: str) -> Any:
    try:
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import (  # pyright: ignore[reportMissingImports]
            OTLPSpanExporter,
        )
    except ImportError as exc:
        raise ImportError(f"opentelemetry-exporter-otlp is required for OTLP export. {_OTEL_EXTRA_HINT}") from exc
    return OTLPSpanExporter(endpoint=endpoint)
