from fastapi import FastAPI
from loguru import logger
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor

from .alembic_helper import run_alembic_migrations
from .settings import ledger_settings


def setup_logging() -> None:
    """Configure Loguru for consistent, structured service logs."""
    logger.remove()
    logger.add(
        sink=lambda msg: print(msg, end=""),
        level=ledger_settings().log_level.upper(),
        backtrace=False,
        diagnose=False,
        colorize=False,
        serialize=False,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
               "<level>{level: <8}</level> | "
               "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
               "<level>{message}</level> | {extra}",
    )
    logger.debug("Logging configured at level {}", ledger_settings().log_level.upper())


def setup_instrumentation(app: FastAPI) -> None:
    """Attach OpenTelemetry tracing to the app once per process."""
    settings = ledger_settings()
    if not settings.otel_enabled:
        logger.info("OpenTelemetry disabled for {}", settings.service_name)
        return
    if isinstance(trace.get_tracer_provider(), TracerProvider):
        logger.info("OpenTelemetry tracer provider already set; instrumenting app only.")
        FastAPIInstrumentor.instrument_app(app, tracer_provider=trace.get_tracer_provider())
        return

    resource = Resource(attributes={SERVICE_NAME: settings.service_name})
    tracer_provider = TracerProvider(resource=resource)
    tracer_provider.add_span_processor(
        BatchSpanProcessor(OTLPSpanExporter(endpoint=settings.otel_endpoint, insecure=True))
    )
    trace.set_tracer_provider(tracer_provider)
    FastAPIInstrumentor.instrument_app(app, tracer_provider=tracer_provider)
    app.state.tracer_provider = tracer_provider
    logger.info("OpenTelemetry exporting to {}", settings.otel_endpoint)


async def init_service_startup(app: FastAPI) -> None:
    """Log the effective configuration and bring the schema up to date."""
    app.state.is_ready = False
    settings = ledger_settings()
    logger.info("Starting {} ({})", settings.service_name, settings.environment)
    for key, value in settings.safe_dict().items():
        logger.info("    {}: {}", key, value)

    tracer = trace.get_tracer(__name__)
    with tracer.start_as_current_span("db.run_migrations"):
        try:
            await run_alembic_migrations(settings.sync_db_url)
        except Exception as exc:
            # Keep serving; readiness reports the database state separately
            logger.error("Alembic migrations failed: {}", exc)

    app.state.is_ready = True
    logger.info("{} startup completed", settings.service_name)


async def shutdown_instrumentation(app: FastAPI) -> None:
    """Flush pending spans before the process exits."""
    tracer_provider = getattr(app.state, "tracer_provider", None)
    if tracer_provider is not None:
        tracer_provider.shutdown()
        logger.info("OpenTelemetry instrumentation shut down.")
