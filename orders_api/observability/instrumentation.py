"""
OpenTelemetry Instrumentation Setup

This module builds the process-wide telemetry pipeline for the orders API:
- TRACES: BatchSpanProcessor -> OTLP/HTTP {endpoint}/v1/traces
- METRICS: PeriodicExportingMetricReader (10s) -> OTLP/HTTP {endpoint}/v1/metrics
- LOGS: BatchLogRecordProcessor -> OTLP/HTTP {endpoint}/v1/logs

plus auto-instrumentation of the HTTP framework (FastAPI server spans) and of
the stdlib logging module (trace ids on every LogRecord). Filesystem
instrumentation is never enabled.

FAILURE MODE:
Construction errors (bad endpoint, unloadable exporter) are fatal and raise
TelemetryInitializationError: the service refuses to start without its
pipeline. Export errors at runtime (collector down, network timeouts) stay
inside the SDK's background threads. Batch processors drop data once their
bounded queues fill up, request handlers never see the failure.

Usage in the app factory:
    telemetry = initialize_observability(TelemetryConfig.from_settings(settings))
    telemetry.instrument_app(app)
    ...
    telemetry.shutdown()  # flush on lifespan exit
"""

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence, Tuple

from opentelemetry import _logs, metrics, trace
from opentelemetry.exporter.otlp.proto.http._log_exporter import OTLPLogExporter
from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import MetricReader, PeriodicExportingMetricReader
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, SpanExporter

from .. import __version__
from ..config import Settings
from ..exceptions import TelemetryInitializationError

logger = logging.getLogger(__name__)

INSTRUMENTATION_NAME = "orders-api"

# Logger whose records are shipped to the collector. SDK-internal loggers stay
# outside it so exporter errors can't feed back into the log exporter.
EXPORTED_LOGGER_NAME = "orders_api"

DEFAULT_INSTRUMENTATIONS: Tuple[str, ...] = ("fastapi", "logging")
SUPPORTED_INSTRUMENTATIONS = frozenset(DEFAULT_INSTRUMENTATIONS)


@dataclass(frozen=True)
class TelemetryConfig:
    """Immutable telemetry configuration, resolved once at startup."""
    collector_endpoint: str = "http://localhost:4318"
    service_name: str = "orders-api"
    service_version: str = __version__
    deployment_environment: str = "development"
    metric_export_interval_ms: int = 10000
    instrumentations: Tuple[str, ...] = DEFAULT_INSTRUMENTATIONS
    prometheus_enabled: bool = False

    @classmethod
    def from_settings(cls, settings: Settings) -> "TelemetryConfig":
        return cls(
            collector_endpoint=settings.otel_exporter_otlp_endpoint,
            service_name=settings.otel_service_name,
            deployment_environment=settings.environment,
            metric_export_interval_ms=settings.metric_export_interval_ms,
            prometheus_enabled=settings.prometheus_enabled,
        )

    def signal_url(self, signal: str) -> str:
        """OTLP/HTTP path for one signal: traces, metrics or logs."""
        return f"{self.collector_endpoint.rstrip('/')}/v1/{signal}"


def create_resource(config: TelemetryConfig) -> Resource:
    """
    Creates an OpenTelemetry Resource with service metadata.

    Resource attributes are attached to every span, metric point and log
    record this process emits. Resource.create() also merges
    OTEL_RESOURCE_ATTRIBUTES from the environment.
    """
    return Resource.create({
        SERVICE_NAME: config.service_name,
        SERVICE_VERSION: config.service_version,
        "deployment.environment": config.deployment_environment,
    })


@dataclass
class Telemetry:
    """
    Handle on the running telemetry pipeline.

    Owns the three providers. Handlers get their tracer and meter from here
    instead of the OTel globals, so a test can run several isolated pipelines
    in one process.
    """
    config: TelemetryConfig
    tracer_provider: TracerProvider
    meter_provider: MeterProvider
    logger_provider: LoggerProvider
    log_handler: Optional[logging.Handler] = None
    _instrumented_apps: List[Any] = field(default_factory=list)
    _logging_instrumentor: Any = None
    _shut_down: bool = False

    @property
    def tracer(self) -> trace.Tracer:
        return self.tracer_provider.get_tracer(INSTRUMENTATION_NAME, self.config.service_version)

    @property
    def meter(self) -> metrics.Meter:
        return self.meter_provider.get_meter(INSTRUMENTATION_NAME, self.config.service_version)

    def instrument_app(self, app: Any) -> None:
        """Enable FastAPI server-span instrumentation on one application."""
        if "fastapi" not in self.config.instrumentations:
            return
        from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

        FastAPIInstrumentor.instrument_app(
            app,
            tracer_provider=self.tracer_provider,
            meter_provider=self.meter_provider,
        )
        self._instrumented_apps.append(app)
        logger.info("FastAPI instrumentation enabled")

    def force_flush(self, timeout_millis: int = 30000) -> None:
        """Push everything buffered so far to the exporters."""
        self.tracer_provider.force_flush(timeout_millis)
        self.meter_provider.force_flush(timeout_millis)
        self.logger_provider.force_flush(timeout_millis)

    def shutdown(self) -> None:
        """
        Flush and stop the pipeline. Safe to call more than once.

        Export errors during the final flush are logged by the SDK, never
        raised: shutdown must not turn a clean exit into a crash.
        """
        if self._shut_down:
            return
        self._shut_down = True

        if self._instrumented_apps:
            from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

            for app in self._instrumented_apps:
                FastAPIInstrumentor.uninstrument_app(app)
            self._instrumented_apps.clear()

        if self._logging_instrumentor is not None:
            self._logging_instrumentor.uninstrument()

        if self.log_handler is not None:
            logging.getLogger(EXPORTED_LOGGER_NAME).removeHandler(self.log_handler)

        self.tracer_provider.shutdown()
        self.meter_provider.shutdown()
        self.logger_provider.shutdown()
        logger.info("Observability shutdown complete")


# ============================================================================
# TRACING SETUP
# ============================================================================

def setup_tracing(
    config: TelemetryConfig,
    resource: Resource,
    span_exporter: Optional[SpanExporter] = None,
) -> TracerProvider:
    """
    Build the tracer provider.

    BatchSpanProcessor buffers finished spans in a bounded in-memory queue
    (2048) and exports from a background thread. Ending a span only enqueues
    it; a full queue drops spans instead of blocking the request.
    """
    provider = TracerProvider(resource=resource)
    exporter = span_exporter or OTLPSpanExporter(endpoint=config.signal_url("traces"))
    provider.add_span_processor(BatchSpanProcessor(exporter))
    logger.info("Tracing initialized: %s -> %s", config.service_name, config.signal_url("traces"))
    return provider


# ============================================================================
# METRICS SETUP
# ============================================================================

def setup_metrics(
    config: TelemetryConfig,
    resource: Resource,
    metric_readers: Optional[Sequence[MetricReader]] = None,
) -> MeterProvider:
    """
    Build the meter provider.

    Push model: the periodic reader collects every export interval (10s by
    default) and pushes to the collector. With prometheus_enabled a pull
    reader is added next to it, served by the /metrics route.
    """
    if metric_readers is not None:
        readers = list(metric_readers)
    else:
        exporter = OTLPMetricExporter(endpoint=config.signal_url("metrics"))
        readers = [
            PeriodicExportingMetricReader(
                exporter,
                export_interval_millis=config.metric_export_interval_ms,
            )
        ]

    if config.prometheus_enabled:
        from opentelemetry.exporter.prometheus import PrometheusMetricReader

        readers.append(PrometheusMetricReader())

    provider = MeterProvider(resource=resource, metric_readers=readers)
    logger.info(
        "Metrics initialized: %s -> %s every %sms",
        config.service_name,
        config.signal_url("metrics"),
        config.metric_export_interval_ms,
    )
    return provider


# ============================================================================
# LOGS SETUP
# ============================================================================

def setup_logs(
    config: TelemetryConfig,
    resource: Resource,
    log_exporter: Optional[Any] = None,
) -> Tuple[LoggerProvider, logging.Handler]:
    """
    Build the logger provider and a stdlib handler feeding it.

    The handler goes on the application logger only. stdout JSON output is
    configured separately in logging_config and is unaffected.
    """
    provider = LoggerProvider(resource=resource)
    exporter = log_exporter or OTLPLogExporter(endpoint=config.signal_url("logs"))
    provider.add_log_record_processor(BatchLogRecordProcessor(exporter))

    handler = LoggingHandler(level=logging.NOTSET, logger_provider=provider)
    logging.getLogger(EXPORTED_LOGGER_NAME).addHandler(handler)
    logger.info("Log export initialized: %s -> %s", config.service_name, config.signal_url("logs"))
    return provider, handler


def _enable_logging_instrumentation(tracer_provider: TracerProvider) -> Any:
    from opentelemetry.instrumentation.logging import LoggingInstrumentor

    instrumentor = LoggingInstrumentor()
    # Stamp otelTraceID/otelSpanID only: no root LoggingHandler (setup_logs owns
    # the single exporting handler) and no format change (the JSON formatter
    # owns it). Older releases ignore the last two flags.
    instrumentor.instrument(
        tracer_provider=tracer_provider,
        set_logging_format=False,
        inject_trace_context=True,
        enable_log_auto_instrumentation=False,
    )
    return instrumentor


# ============================================================================
# INITIALIZATION FUNCTION (Called by the app factory)
# ============================================================================

def initialize_observability(
    config: Optional[TelemetryConfig] = None,
    *,
    span_exporter: Optional[SpanExporter] = None,
    metric_readers: Optional[Sequence[MetricReader]] = None,
    log_exporter: Optional[Any] = None,
    set_global: bool = True,
) -> Telemetry:
    """
    One-call setup for traces, metrics and logs.

    Args:
        config: Telemetry configuration (defaults to TelemetryConfig())
        span_exporter: Replaces the OTLP span exporter (tests use in-memory)
        metric_readers: Replace the periodic OTLP reader
        log_exporter: Replaces the OTLP log exporter
        set_global: Register providers as the OTel globals

    Returns:
        Telemetry handle exposing tracer, meter and shutdown()

    Raises:
        TelemetryInitializationError: if any exporter or provider can't be built
    """
    config = config or TelemetryConfig()

    unknown = set(config.instrumentations) - SUPPORTED_INSTRUMENTATIONS
    if unknown:
        raise TelemetryInitializationError(
            f"Unsupported instrumentations: {', '.join(sorted(unknown))}"
        )

    try:
        resource = create_resource(config)
        tracer_provider = setup_tracing(config, resource, span_exporter)
        meter_provider = setup_metrics(config, resource, metric_readers)
        logger_provider, log_handler = setup_logs(config, resource, log_exporter)
    except Exception as e:
        logger.error("Telemetry initialization failed: %s", e)
        raise TelemetryInitializationError(f"Telemetry initialization failed: {e}") from e

    if set_global:
        trace.set_tracer_provider(tracer_provider)
        metrics.set_meter_provider(meter_provider)
        _logs.set_logger_provider(logger_provider)

    telemetry = Telemetry(
        config=config,
        tracer_provider=tracer_provider,
        meter_provider=meter_provider,
        logger_provider=logger_provider,
        log_handler=log_handler,
    )

    if "logging" in config.instrumentations:
        telemetry._logging_instrumentor = _enable_logging_instrumentation(tracer_provider)

    logger.info(
        "OpenTelemetry started for %s -> %s",
        config.service_name,
        config.collector_endpoint,
    )
    return telemetry
