"""Observability setup for OpenTelemetry, metrics, and structured logging."""

import logging

from opentelemetry import trace, metrics
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource
from prometheus_client import Counter, Histogram, Gauge, generate_latest, CollectorRegistry
import structlog

from .config import settings

SERVICE_NAME = "tourism-api"
SERVICE_VERSION = "1.0.0"

# Prometheus metrics
REGISTRY = CollectorRegistry()

# Request metrics
REQUEST_COUNT = Counter(
    'http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status_code'],
    registry=REGISTRY
)

REQUEST_DURATION = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint'],
    registry=REGISTRY
)

# Business metrics
BOOKINGS_CREATED = Counter(
    'bookings_created_total',
    'Total tour bookings created',
    registry=REGISTRY
)

PAYMENTS_SUBMITTED = Counter(
    'payments_submitted_total',
    'Total payments submitted',
    ['type'],
    registry=REGISTRY
)

PAYMENTS_REVIEWED = Counter(
    'payments_reviewed_total',
    'Total payments approved or rejected',
    ['decision'],
    registry=REGISTRY
)

CART_ITEMS_ADDED = Counter(
    'cart_items_added_total',
    'Total add-to-cart operations',
    ['mode'],
    registry=REGISTRY
)

STOCK_ORDERS_CREATED = Counter(
    'stock_orders_created_total',
    'Total stock orders placed with suppliers',
    ['source'],
    registry=REGISTRY
)

LOW_STOCK_ITEMS = Gauge(
    'equipment_low_stock_items',
    'Equipment items below their low-stock threshold',
    registry=REGISTRY
)

OUT_OF_STOCK_ITEMS = Gauge(
    'equipment_out_of_stock_items',
    'Equipment items with no stock left',
    registry=REGISTRY
)


def setup_structured_logging():
    """Configure structured logging with structlog."""

    def add_trace_context(logger, method_name, event_dict):
        """Add trace context to log events."""
        span = trace.get_current_span()
        if span and span.is_recording():
            ctx = span.get_span_context()
            event_dict['trace_id'] = format(ctx.trace_id, '032x')
            event_dict['span_id'] = format(ctx.span_id, '016x')
        return event_dict

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            add_trace_context,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.ConsoleRenderer() if settings.debug else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, settings.log_level)
        ),
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def _resource() -> Resource:
    return Resource.create({
        "service.name": SERVICE_NAME,
        "service.version": SERVICE_VERSION,
        "environment": settings.environment,
    })


def setup_tracing():
    """Setup OpenTelemetry tracing; spans are exported only when an OTLP endpoint is set."""
    provider = TracerProvider(resource=_resource())
    if settings.otlp_endpoint:
        provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=settings.otlp_endpoint)))
    trace.set_tracer_provider(provider)
    return trace.get_tracer(__name__)


def setup_metrics():
    """Setup OpenTelemetry metrics."""
    if settings.otlp_endpoint:
        otlp_exporter = OTLPMetricExporter(endpoint=settings.otlp_endpoint)
        reader = PeriodicExportingMetricReader(exporter=otlp_exporter, export_interval_millis=60000)
        metrics.set_meter_provider(MeterProvider(resource=_resource(), metric_readers=[reader]))
    return metrics.get_meter(__name__)


def instrument_fastapi(app):
    """Instrument FastAPI with OpenTelemetry."""
    FastAPIInstrumentor.instrument_app(app)


def instrument_sqlalchemy(engine=None):
    """Instrument SQLAlchemy with OpenTelemetry."""
    if engine is not None:
        SQLAlchemyInstrumentor().instrument(engine=engine.sync_engine)
    else:
        SQLAlchemyInstrumentor().instrument()


class MetricsCollector:
    """Collector for request and business metrics."""

    @staticmethod
    def record_request(method: str, endpoint: str, status_code: int, duration_seconds: float):
        REQUEST_COUNT.labels(method=method, endpoint=endpoint, status_code=str(status_code)).inc()
        REQUEST_DURATION.labels(method=method, endpoint=endpoint).observe(duration_seconds)

    @staticmethod
    def record_booking_created():
        """Record a booking creation."""
        BOOKINGS_CREATED.inc()

    @staticmethod
    def record_payment_submitted(payment_type: str):
        """Record a payment submission."""
        PAYMENTS_SUBMITTED.labels(type=payment_type).inc()

    @staticmethod
    def record_payment_reviewed(decision: str):
        """Record an admin payment decision."""
        PAYMENTS_REVIEWED.labels(decision=decision).inc()

    @staticmethod
    def record_cart_item_added(is_rental: bool):
        CART_ITEMS_ADDED.labels(mode="rental" if is_rental else "purchase").inc()

    @staticmethod
    def record_stock_order_created(is_auto_order: bool):
        STOCK_ORDERS_CREATED.labels(source="auto" if is_auto_order else "manual").inc()

    @staticmethod
    def set_stock_alerts(low_stock: int, out_of_stock: int):
        """Set the current number of low and out of stock items."""
        LOW_STOCK_ITEMS.set(low_stock)
        OUT_OF_STOCK_ITEMS.set(out_of_stock)


def get_prometheus_metrics():
    """Get Prometheus metrics for the /metrics endpoint."""
    return generate_latest(REGISTRY)


# Global metrics collector instance
metrics_collector = MetricsCollector()
