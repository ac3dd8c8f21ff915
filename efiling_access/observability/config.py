"""
OpenTelemetry Configuration

Sets up distributed tracing and structured logging for the e-filing access
core. Spans are emitted by the resolvers regardless; this module decides
where they go.
"""

import logging
from typing import Optional
from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.sampling import TraceIdRatioBased
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter

from ..settings import ScopingSettings, get_scoping_settings

SERVICE_NAME = 'efiling-access'

SAMPLING_RATIOS = {
    'production': 0.1,
    'staging': 0.5,
}

_tracer_provider: Optional[TracerProvider] = None


def setup_observability(settings: Optional[ScopingSettings] = None) -> Optional[TracerProvider]:
    """Initialize OpenTelemetry instrumentation based on configuration."""
    global _tracer_provider
    settings = settings or get_scoping_settings()
    environment = settings.environment

    setup_structured_logging(environment)

    if not settings.otel_enabled or environment == 'test':
        return None

    if _tracer_provider is not None:
        return _tracer_provider

    # Environment-specific sampling
    sampler = TraceIdRatioBased(SAMPLING_RATIOS.get(environment, 1.0))

    resource = Resource.create({
        "service.name": SERVICE_NAME,
        "service.version": settings.service_version,
        "deployment.environment": environment
    })

    tracer_provider = TracerProvider(sampler=sampler, resource=resource)

    if environment in ('production', 'staging'):
        # OTLP collector; endpoint and headers come from OTEL_EXPORTER_OTLP_* variables
        tracer_provider.add_span_processor(
            BatchSpanProcessor(OTLPSpanExporter(), max_export_batch_size=512)
        )
    else:
        # Development: Console output
        tracer_provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(tracer_provider)
    _tracer_provider = tracer_provider
    return tracer_provider


def setup_structured_logging(environment: str) -> None:
    """Configure logging levels per environment."""
    log_level = {
        'production': logging.WARNING,
        'staging': logging.INFO,
        'development': logging.DEBUG,
        'test': logging.WARNING
    }.get(environment, logging.INFO)

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s %(levelname)s %(name)s %(message)s',
        handlers=[logging.StreamHandler()]
    )

    if environment == 'production':
        # Production: Reduce noise, focus on errors and business events
        logging.getLogger('pymongo').setLevel(logging.WARNING)
        logging.getLogger('urllib3').setLevel(logging.WARNING)

    elif environment == 'development':
        logging.getLogger('efiling_access.domain').setLevel(logging.DEBUG)
        logging.getLogger('efiling_access.services').setLevel(logging.DEBUG)
        logging.getLogger('pymongo').setLevel(logging.INFO)
