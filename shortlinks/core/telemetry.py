"""OpenTelemetry instrumentation for the short links application."""

import logging
from contextlib import suppress
from functools import lru_cache
from typing import Dict, Optional, Tuple, Union

from opentelemetry import metrics, trace
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter as OTLPGrpcMetricExporter
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter as OTLPGrpcSpanExporter
from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter as OTLPHttpMetricExporter
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter as OTLPHttpSpanExporter
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.sdk.trace.sampling import ParentBasedTraceIdRatio, TraceIdRatioBased

from shortlinks.core.config import settings

logger = logging.getLogger(__name__)


@lru_cache
def setup_telemetry() -> Tuple[Optional[TracerProvider], Optional[MeterProvider]]:
    """Install tracer and meter providers exporting over OTLP.

    Without this call the OpenTelemetry API hands out no-op tracers and
    meters, so instrumented code runs unchanged when telemetry is off.
    """
    if not settings.OTEL_ENABLED:
        logger.info("OpenTelemetry instrumentation is disabled")
        return None, None

    resource = Resource.create({
        "service.name": settings.OTEL_SERVICE_NAME,
        "service.version": settings.APP_VERSION,
        "deployment.environment": settings.ENVIRONMENT.value,
        **parse_resource_attributes(settings.OTEL_RESOURCE_ATTRIBUTES),
    })
    return _setup_tracing(resource), _setup_metrics(resource)


def instrument_engine(db_engine) -> None:
    """Emit a span for every statement run through ``db_engine``."""
    if not settings.OTEL_ENABLED:
        return

    SQLAlchemyInstrumentor().instrument(
        engine=db_engine.sync_engine,
        tracer_provider=trace.get_tracer_provider(),
    )
    logger.info("SQLAlchemy instrumentation enabled")


def _use_grpc() -> bool:
    return settings.OTEL_EXPORTER_OTLP_PROTOCOL.lower() == "grpc"


def _setup_tracing(resource: Resource) -> TracerProvider:
    tracer_provider = TracerProvider(
        resource=resource,
        sampler=create_sampler(settings.OTEL_TRACES_SAMPLER, settings.OTEL_TRACES_SAMPLER_ARG),
    )
    trace.set_tracer_provider(tracer_provider)

    if _use_grpc():
        exporter = OTLPGrpcSpanExporter(endpoint=settings.OTEL_EXPORTER_OTLP_ENDPOINT, insecure=True)
    else:
        exporter = OTLPHttpSpanExporter(endpoint=settings.OTEL_EXPORTER_OTLP_ENDPOINT)

    tracer_provider.add_span_processor(BatchSpanProcessor(exporter))
    logger.info(f"OpenTelemetry tracer configured with {settings.OTEL_EXPORTER_OTLP_PROTOCOL} exporter")
    return tracer_provider


def _setup_metrics(resource: Resource) -> MeterProvider:
    if _use_grpc():
        exporter = OTLPGrpcMetricExporter(endpoint=settings.OTEL_EXPORTER_OTLP_METRICS_ENDPOINT, insecure=True)
    else:
        exporter = OTLPHttpMetricExporter(endpoint=settings.OTEL_EXPORTER_OTLP_METRICS_ENDPOINT)

    reader = PeriodicExportingMetricReader(
        exporter,
        export_interval_millis=settings.OTEL_METRICS_EXPORT_INTERVAL_MILLIS,
    )
    meter_provider = MeterProvider(resource=resource, metric_readers=[reader])
    metrics.set_meter_provider(meter_provider)
    logger.info(f"OpenTelemetry metrics configured with {settings.OTEL_EXPORTER_OTLP_PROTOCOL} exporter")
    return meter_provider


def create_sampler(sampler_type: str, sampler_arg: float) -> Union[ParentBasedTraceIdRatio, TraceIdRatioBased]:
    """Create a sampler based on configuration."""
    if sampler_type.lower() == "parentbased_traceidratio":
        return ParentBasedTraceIdRatio(sampler_arg)
    return TraceIdRatioBased(sampler_arg)


def parse_resource_attributes(attributes_str: str) -> Dict[str, str]:
    """Parse ``key=value,key=value`` into a dict, skipping malformed pairs."""
    if not attributes_str:
        return {}

    attributes = {}
    for pair in attributes_str.split(","):
        with suppress(ValueError):
            key, value = pair.strip().split("=", 1)
            attributes[key] = value
    return attributes


def get_tracer(name: Optional[str] = None) -> trace.Tracer:
    return trace.get_tracer(name or settings.OTEL_SERVICE_NAME)


def get_meter(name: Optional[str] = None) -> metrics.Meter:
    return metrics.get_meter(name or settings.OTEL_SERVICE_NAME)
