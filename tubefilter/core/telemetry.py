"""
Telemetry for the HTTP surface and the catalog dependency.

Request metrics are exposed by prometheus-fastapi-instrumentator at
/metrics and traces are exported over OTLP. Catalog calls are counted,
timed and wrapped in a span by the gateway via `observe_catalog_call`.
"""
import time
from contextlib import contextmanager
from typing import Iterator, Optional

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from prometheus_client import Counter, Histogram
from prometheus_fastapi_instrumentator import Instrumentator

from tubefilter.config import Settings, get_settings

CATALOG_REQUESTS = Counter(
    "tubefilter_catalog_requests_total",
    "Catalog API requests by resource and outcome",
    ["resource", "outcome"],
)
CATALOG_LATENCY = Histogram(
    "tubefilter_catalog_request_seconds",
    "Catalog API request latency",
    ["resource"],
)

tracer = trace.get_tracer("tubefilter.catalog")


@contextmanager
def observe_catalog_call(resource: str) -> Iterator[None]:
    """Count, time and trace one catalog request. Raising inside marks it an error."""
    start = time.perf_counter()
    with tracer.start_as_current_span(f"catalog {resource}") as span:
        span.set_attribute("catalog.resource", resource)
        try:
            yield
        except Exception:
            CATALOG_REQUESTS.labels(resource=resource, outcome="error").inc()
            raise
        else:
            CATALOG_REQUESTS.labels(resource=resource, outcome="ok").inc()
        finally:
            CATALOG_LATENCY.labels(resource=resource).observe(time.perf_counter() - start)


def _setup_metrics(app: FastAPI) -> None:
    # Inert unless ENABLE_METRICS=true is set in the environment
    Instrumentator(
        should_group_status_codes=False,
        should_ignore_untemplated=True,
        should_respect_env_var=True,
        should_instrument_requests_inprogress=True,
        excluded_handlers=["/metrics", "/health", "/health/ready", "/docs", "/redoc"],
        env_var_name="ENABLE_METRICS",
        inprogress_name="tubefilter_requests_inprogress",
        inprogress_labels=True,
    ).instrument(app).expose(app, include_in_schema=False)


def _setup_tracing(app: FastAPI, settings: Settings) -> None:
    resource = Resource.create(attributes={
        "service.name": settings.APP_NAME,
        "service.version": settings.APP_VERSION,
        "deployment.environment": "development" if settings.DEBUG else "production",
    })
    provider = TracerProvider(resource=resource)

    # None falls back to OTEL_EXPORTER_OTLP_ENDPOINT, then localhost:4317
    exporter = OTLPSpanExporter(endpoint=settings.OTLP_ENDPOINT)
    provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)

    FastAPIInstrumentor.instrument_app(
        app,
        tracer_provider=provider,
        excluded_urls="health,metrics",
    )


def setup_telemetry(app: FastAPI, settings: Optional[Settings] = None) -> None:
    """Wire Prometheus metrics and OpenTelemetry tracing according to settings."""
    settings = settings or get_settings()

    if settings.ENABLE_PROMETHEUS:
        _setup_metrics(app)

    if settings.ENABLE_OTEL:
        _setup_tracing(app, settings)
