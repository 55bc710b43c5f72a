"""Instances collector entry point."""

import logging
import signal
import sys

from opentelemetry import metrics
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource
from pydantic import ValidationError

from . import __version__
from .api import start_api_server_thread
from .collector import CollectionPipeline
from .exceptions import ConfigurationError
from .logging_setup import setup_logging
from .scheduler import HourlyScheduler
from .settings import Settings, get_settings
from .sink import InfluxSink

logger = logging.getLogger(__name__)


def init_otel_sdk(settings: Settings) -> None:
    """Install an OTLP-exporting meter provider."""
    resource = Resource.create(
        {
            "service.name": "instances-collector",
            "service.version": __version__,
            "deployment.environment": settings.environment,
        }
    )
    metric_reader = PeriodicExportingMetricReader(
        OTLPMetricExporter(endpoint=settings.otel_endpoint, insecure=True),
        export_interval_millis=60_000,
    )
    meter_provider = MeterProvider(resource=resource, metric_readers=[metric_reader])
    metrics.set_meter_provider(meter_provider)
    logger.info("OpenTelemetry metrics initialized (endpoint=%s)", settings.otel_endpoint)


def _describe_errors(exc: ValidationError) -> str:
    """Field and message for each error, leaving out input values that may hold credentials."""
    return "; ".join(
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
        for err in exc.errors(include_url=False, include_input=False)
    )


def main() -> None:
    """Main entry point for the instances collector."""
    try:
        settings = get_settings()
    except ValidationError as e:
        setup_logging()
        logger.error("Invalid configuration: %s", _describe_errors(e))
        sys.exit(1)

    setup_logging(
        level=settings.log_level,
        json_output=settings.log_format == "json",
        environment=settings.environment,
    )

    if settings.otel_endpoint:
        init_otel_sdk(settings)

    logger.info("Starting instances collector %s...", __version__)
    logger.info("Source: %s", settings.source.url)
    try:
        sink = InfluxSink(settings.influx)
        pipeline = CollectionPipeline(settings, sink=sink)
    except ConfigurationError as e:
        logger.error("Invalid configuration: %s", e.message)
        sys.exit(1)
    logger.info("InfluxDB: %s", sink.connection.address)

    # Liveness server runs independently of collection
    start_api_server_thread(settings.api.host, settings.api.port)

    scheduler = HourlyScheduler(pipeline.run_cycle)

    # Handle shutdown signals
    def shutdown_handler(signum: int, frame: object) -> None:
        sig_name = signal.Signals(signum).name
        logger.info("Received %s, initiating graceful shutdown...", sig_name)
        scheduler.stop()

    signal.signal(signal.SIGTERM, shutdown_handler)
    signal.signal(signal.SIGINT, shutdown_handler)

    # Blocks until stopped
    try:
        scheduler.run()
    except Exception as e:
        logger.exception("Fatal error in instances collector: %s", e)
        sys.exit(1)
    finally:
        pipeline.close()

    logger.info("Instances collector exited")


if __name__ == "__main__":
    main()
