"""
Pytest configuration and fixtures for the orders API tests.

Every test gets its own telemetry pipeline backed by in-memory exporters, so
spans, metric points and log records can be asserted without a collector.
"""

import pytest
from fastapi.testclient import TestClient
from opentelemetry.sdk._logs.export import InMemoryLogExporter
from opentelemetry.sdk.metrics.export import InMemoryMetricReader
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from orders_api.api.main import create_app
from orders_api.config import Settings
from orders_api.observability import TelemetryConfig, initialize_observability


@pytest.fixture
def test_settings() -> Settings:
    """Create test settings."""
    return Settings(
        otel_exporter_otlp_endpoint="http://collector.test:4318",
        otel_service_name="orders-api-test",
        environment="test",
        log_level="DEBUG",
    )


@pytest.fixture
def span_exporter() -> InMemorySpanExporter:
    return InMemorySpanExporter()


@pytest.fixture
def metric_reader() -> InMemoryMetricReader:
    return InMemoryMetricReader()


@pytest.fixture
def log_exporter() -> InMemoryLogExporter:
    return InMemoryLogExporter()


@pytest.fixture
def telemetry(test_settings, span_exporter, metric_reader, log_exporter):
    """Isolated telemetry pipeline; no globals, no auto-instrumentation."""
    config = TelemetryConfig(
        collector_endpoint=test_settings.otel_exporter_otlp_endpoint,
        service_name=test_settings.otel_service_name,
        deployment_environment=test_settings.environment,
        instrumentations=(),
    )
    pipeline = initialize_observability(
        config,
        span_exporter=span_exporter,
        metric_readers=[metric_reader],
        log_exporter=log_exporter,
        set_global=False,
    )
    yield pipeline

    # Cleanup
    pipeline.shutdown()


@pytest.fixture
def app(test_settings, telemetry):
    return create_app(test_settings, telemetry)


@pytest.fixture
def client(app) -> TestClient:
    """Create test HTTP client."""
    return TestClient(app)


@pytest.fixture
def context(app):
    return app.state.context


@pytest.fixture
def finished_spans(telemetry, span_exporter):
    """Callable returning finished spans, optionally filtered by name."""

    def _finished_spans(name: str = None):
        telemetry.tracer_provider.force_flush()
        spans = span_exporter.get_finished_spans()
        if name is not None:
            spans = [span for span in spans if span.name == name]
        return list(spans)

    return _finished_spans


@pytest.fixture
def metric_points(metric_reader):
    """Callable returning the data points recorded for one instrument."""

    def _metric_points(name: str):
        data = metric_reader.get_metrics_data()
        points = []
        if data is None:
            return points
        for resource_metrics in data.resource_metrics:
            for scope_metrics in resource_metrics.scope_metrics:
                for metric in scope_metrics.metrics:
                    if metric.name == name:
                        points.extend(metric.data.data_points)
        return points

    return _metric_points


@pytest.fixture
def sample_order_data() -> dict:
    """Sample order request data."""
    return {"customer": "Alice", "items": ["Laptop", "Mouse"], "total": 1250}
