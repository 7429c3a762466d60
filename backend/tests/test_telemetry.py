"""Telemetry setup tests."""

from __future__ import annotations

from fastapi import FastAPI
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.sdk.metrics.export import InMemoryMetricReader
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from app.config import AppSettings
from app.core import telemetry


def test_disabled_telemetry_installs_nothing(monkeypatch):
    monkeypatch.setattr(telemetry, "_TELEMETRY_INITIALISED", False)
    app = FastAPI()

    assert telemetry.setup_telemetry(app, AppSettings(telemetry_enabled=False)) is False
    assert telemetry._TELEMETRY_INITIALISED is False
    assert not getattr(app, "_is_instrumented_by_opentelemetry", False)


def test_enabled_telemetry_instruments_once(monkeypatch):
    monkeypatch.setattr(telemetry, "_TELEMETRY_INITIALISED", False)
    monkeypatch.setattr(telemetry, "_configure_logging", lambda resource, options: None)
    app = FastAPI()
    settings = AppSettings(telemetry_enabled=True, telemetry_service_name="equity-tracker-test")

    try:
        installed = telemetry.setup_telemetry(
            app,
            settings,
            span_exporter=InMemorySpanExporter(),
            metric_reader=InMemoryMetricReader(),
        )
        assert installed is True
        assert app._is_instrumented_by_opentelemetry is True
        assert telemetry.setup_telemetry(app, settings) is False
    finally:
        FastAPIInstrumentor.uninstrument_app(app)
        HTTPXClientInstrumentor().uninstrument()


def test_build_providers_exports_price_fetch_spans():
    spans = InMemorySpanExporter()
    tracer_provider, meter_provider = telemetry.build_providers(
        AppSettings(telemetry_service_name="prices"),
        span_exporter=spans,
        metric_reader=InMemoryMetricReader(),
    )
    instruments = telemetry.PriceFetchTelemetry(tracer_provider=tracer_provider, meter_provider=meter_provider)

    with instruments.span("refresh_portfolio_prices", {"portfolio.symbols": 2}):
        pass
    tracer_provider.force_flush()

    (span,) = spans.get_finished_spans()
    assert span.attributes["portfolio.symbols"] == 2
    assert span.resource.attributes["service.name"] == "prices"
