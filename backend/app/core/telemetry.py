"""OpenTelemetry configuration and the price lookup instruments."""

from __future__ import annotations

import logging
from typing import Any, ContextManager

from fastapi import FastAPI
from opentelemetry import metrics, trace
from opentelemetry._logs import set_logger_provider
from opentelemetry.exporter.otlp.proto.grpc._log_exporter import OTLPLogExporter
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.instrumentation.logging import LoggingInstrumentor
from opentelemetry.sdk._logs import LoggerProvider
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import MetricReader, PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, SpanExporter
from opentelemetry.sdk.trace.sampling import ParentBased, TraceIdRatioBased
from opentelemetry.semconv.resource import ResourceAttributes
from opentelemetry.trace import Span

from app.config import AppSettings

logger = logging.getLogger(__name__)

INSTRUMENTATION_NAME = "equity_tracker.prices"
PRICE_FETCH_COUNTER = "price_fetch.requests"
PRICE_FETCH_DURATION = "price_fetch.duration"

_TELEMETRY_INITIALISED = False
_METRIC_EXPORT_INTERVAL_MS = 10000


class PriceFetchTelemetry:
    """Counts Alpha Vantage lookups by outcome and traces cache refreshes.

    Without explicit providers the global ones are used, which are no-ops
    until :func:`setup_telemetry` installs real ones.
    """

    def __init__(
        self,
        tracer_provider: trace.TracerProvider | None = None,
        meter_provider: metrics.MeterProvider | None = None,
    ) -> None:
        self._tracer = trace.get_tracer(INSTRUMENTATION_NAME, tracer_provider=tracer_provider)
        meter = metrics.get_meter(INSTRUMENTATION_NAME, meter_provider=meter_provider)
        self._requests = meter.create_counter(
            PRICE_FETCH_COUNTER,
            unit="1",
            description="Daily close lookups by symbol and outcome (ok, empty, timeout, error)",
        )
        self._duration = meter.create_histogram(
            PRICE_FETCH_DURATION,
            unit="s",
            description="Wall time of a daily close lookup, rate-limit waits included",
        )

    def record_fetch(self, symbol: str, outcome: str, elapsed: float) -> None:
        self._requests.add(1, {"symbol": symbol, "outcome": outcome})
        self._duration.record(elapsed, {"outcome": outcome})

    def span(self, name: str, attributes: dict[str, Any] | None = None) -> ContextManager[Span]:
        return self._tracer.start_as_current_span(name, attributes=attributes)


def _build_resource(settings: AppSettings) -> Resource:
    attributes: dict[str, Any] = {
        ResourceAttributes.SERVICE_NAME: settings.telemetry_service_name or settings.app_name,
        ResourceAttributes.SERVICE_NAMESPACE: "equity-tracker",
    }
    return Resource.create(attributes)


def build_providers(
    settings: AppSettings,
    *,
    span_exporter: SpanExporter | None = None,
    metric_reader: MetricReader | None = None,
) -> tuple[TracerProvider, MeterProvider]:
    """Return tracer and meter providers exporting over OTLP unless overridden."""

    resource = _build_resource(settings)
    exporter_options = _build_exporter_options(settings)

    tracer_provider = TracerProvider(
        resource=resource,
        sampler=ParentBased(TraceIdRatioBased(settings.telemetry_sample_ratio)),
    )
    tracer_provider.add_span_processor(
        BatchSpanProcessor(span_exporter or OTLPSpanExporter(**exporter_options))
    )

    if metric_reader is None:
        metric_reader = PeriodicExportingMetricReader(
            OTLPMetricExporter(**exporter_options),
            export_interval_millis=_METRIC_EXPORT_INTERVAL_MS,
        )
    meter_provider = MeterProvider(resource=resource, metric_readers=[metric_reader])
    return tracer_provider, meter_provider


def setup_telemetry(
    app: FastAPI,
    settings: AppSettings,
    *,
    span_exporter: SpanExporter | None = None,
    metric_reader: MetricReader | None = None,
) -> bool:
    """Install global providers and instrument FastAPI plus outbound httpx calls.

    Returns ``True`` when instrumentation was installed by this call.
    """

    global _TELEMETRY_INITIALISED  # noqa: PLW0603

    if _TELEMETRY_INITIALISED:
        return False

    if not settings.telemetry_enabled:
        logger.info("Telemetry disabled via configuration")
        return False

    tracer_provider, meter_provider = build_providers(
        settings,
        span_exporter=span_exporter,
        metric_reader=metric_reader,
    )
    trace.set_tracer_provider(tracer_provider)
    metrics.set_meter_provider(meter_provider)
    _configure_logging(_build_resource(settings), _build_exporter_options(settings))

    FastAPIInstrumentor.instrument_app(
        app,
        tracer_provider=tracer_provider,
        meter_provider=meter_provider,
    )
    # Alpha Vantage lookups show up as child spans of the equity request
    HTTPXClientInstrumentor().instrument(tracer_provider=tracer_provider)

    _TELEMETRY_INITIALISED = True
    logger.info("Telemetry initialised for %s", settings.telemetry_service_name)
    return True


def _build_exporter_options(settings: AppSettings) -> dict[str, Any]:
    options: dict[str, Any] = {"insecure": settings.telemetry_otlp_insecure}
    if settings.telemetry_otlp_endpoint:
        options["endpoint"] = settings.telemetry_otlp_endpoint
    return options


def _configure_logging(resource: Resource, exporter_options: dict[str, Any]) -> None:
    logger_provider = LoggerProvider(resource=resource)
    logger_provider.add_log_record_processor(BatchLogRecordProcessor(OTLPLogExporter(**exporter_options)))
    set_logger_provider(logger_provider)
    LoggingInstrumentor().instrument(set_logging_format=False)


__all__ = [
    "PRICE_FETCH_COUNTER",
    "PRICE_FETCH_DURATION",
    "PriceFetchTelemetry",
    "build_providers",
    "setup_telemetry",
]
