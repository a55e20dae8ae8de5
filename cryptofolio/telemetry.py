"""OpenTelemetry metrics and logs for portfolio fetches."""

import logging
import os

from opentelemetry import metrics
from opentelemetry._logs import set_logger_provider
from opentelemetry.exporter.otlp.proto.http._log_exporter import OTLPLogExporter
from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter
from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource

from cryptofolio import __version__

# Module-level state
_initialized = False
_meter = None
_log_handler = None

_fetches_total = None
_fetch_duration = None


def setup_telemetry() -> bool:
    """Initialize OpenTelemetry metrics and log export.

    Disabled unless OTLP_ENABLED=true. Returns True if telemetry was
    initialized.
    """
    global _initialized, _meter, _log_handler
    global _fetches_total, _fetch_duration

    if _initialized:
        return True

    if os.getenv("OTLP_ENABLED", "false").lower() != "true":
        return False

    otlp_endpoint = os.getenv("OTLP_ENDPOINT", "http://localhost:4318/v1/metrics")
    export_interval = int(os.getenv("OTLP_EXPORT_INTERVAL", "5000"))

    resource = Resource.create({
        "service.name": "cryptofolio",
        "service.version": __version__,
    })

    # === METRICS ===
    exporter = OTLPMetricExporter(endpoint=otlp_endpoint)
    reader = PeriodicExportingMetricReader(
        exporter,
        export_interval_millis=export_interval,
    )
    provider = MeterProvider(resource=resource, metric_readers=[reader])
    metrics.set_meter_provider(provider)

    _meter = metrics.get_meter("cryptofolio", __version__)

    _fetches_total = _meter.create_counter(
        "portfolio_fetches_total",
        description="Total number of store fetch actions by outcome",
        unit="1",
    )

    _fetch_duration = _meter.create_histogram(
        "portfolio_fetch_duration_seconds",
        description="Duration of store fetch actions",
        unit="s",
    )

    # === LOGS ===
    logs_endpoint = otlp_endpoint.replace("/v1/metrics", "/v1/logs")
    log_exporter = OTLPLogExporter(endpoint=logs_endpoint)
    logger_provider = LoggerProvider(resource=resource)
    logger_provider.add_log_record_processor(BatchLogRecordProcessor(log_exporter))
    set_logger_provider(logger_provider)

    _log_handler = LoggingHandler(
        level=logging.INFO,
        logger_provider=logger_provider,
    )

    _initialized = True
    return True


def get_log_handler() -> LoggingHandler | None:
    """Get the OTLP logging handler to attach to Python loggers."""
    return _log_handler


def is_enabled() -> bool:
    """Check if telemetry is initialized and enabled."""
    return _initialized


def record_fetch(action: str, outcome: str, duration: float) -> None:
    """Record a completed fetch action.

    Args:
        action: Store action name, e.g. "fetch_portfolio_data"
        outcome: "success" or "error"
        duration: Wall time in seconds
    """
    if not _initialized:
        return

    attributes = {"action": action, "outcome": outcome}
    _fetches_total.add(1, attributes)
    _fetch_duration.record(duration, attributes)
