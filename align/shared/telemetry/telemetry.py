"""OpenTelemetry distributed tracing configuration"""

import logging

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.logging import LoggingInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.sdk.trace.sampling import ParentBased, TraceIdRatioBased
from sqlalchemy.ext.asyncio import AsyncEngine

logger = logging.getLogger(__name__)


class TelemetryConfig:
    """
    OpenTelemetry configuration for distributed tracing

    Features:
    - Automatic instrumentation of FastAPI, SQLAlchemy and logging
    - Console exporter for development, OTLP for any compatible backend
    - Custom spans around the language model call and transcript writes
    """

    def __init__(
        self,
        service_name: str,
        service_version: str,
        environment: str = "development",
        enabled: bool = True,
    ):
        self.service_name = service_name
        self.service_version = service_version
        self.environment = environment
        self.enabled = enabled
        self.tracer_provider: TracerProvider | None = None

    def setup_telemetry(
        self,
        exporter_type: str = "console",
        otlp_endpoint: str | None = None,
        sample_rate: float = 1.0,
    ) -> TracerProvider | None:
        """
        Initialize OpenTelemetry tracing

        Args:
            exporter_type: Type of exporter ("console", "otlp", "none")
            otlp_endpoint: OTLP gRPC endpoint (e.g., "http://localhost:4317")
            sample_rate: Sampling rate (0.0-1.0, default 1.0 = 100%)

        Returns:
            TracerProvider instance or None if disabled
        """
        if not self.enabled:
            logger.info("Telemetry disabled")
            return None

        try:
            resource = Resource(
                attributes={
                    SERVICE_NAME: self.service_name,
                    SERVICE_VERSION: self.service_version,
                    "deployment.environment": self.environment,
                }
            )
            self.tracer_provider = TracerProvider(
                resource=resource, sampler=ParentBased(TraceIdRatioBased(sample_rate))
            )

            if exporter_type == "none":
                logger.info("Telemetry enabled but no exporter configured")
                trace.set_tracer_provider(self.tracer_provider)
                return self.tracer_provider

            if exporter_type == "otlp" and otlp_endpoint:
                # OTLP exporter - use TLS for https:// endpoints
                use_insecure = otlp_endpoint.startswith("http://")
                exporter = OTLPSpanExporter(endpoint=otlp_endpoint, insecure=use_insecure)
                logger.info("Using OTLP span exporter: %s", otlp_endpoint)
            else:
                if exporter_type != "console":
                    logger.warning("Unknown exporter type '%s', using console", exporter_type)
                exporter = ConsoleSpanExporter()

            self.tracer_provider.add_span_processor(BatchSpanProcessor(exporter))
            trace.set_tracer_provider(self.tracer_provider)

            logger.info(
                "OpenTelemetry initialized: service=%s, version=%s, exporter=%s",
                self.service_name,
                self.service_version,
                exporter_type,
            )
            return self.tracer_provider

        except Exception as e:
            logger.exception("Failed to initialize telemetry: %s", e)
            return None

    def instrument_fastapi(self, app: FastAPI):
        """Trace HTTP requests, durations, status codes and exceptions"""
        if not self.enabled or not self.tracer_provider:
            return

        try:
            FastAPIInstrumentor.instrument_app(
                app,
                tracer_provider=self.tracer_provider,
                excluded_urls="/health",  # Don't trace health checks
            )
            logger.info("FastAPI instrumentation enabled")
        except Exception as e:
            logger.error("Failed to instrument FastAPI: %s", e)

    def instrument_sqlalchemy(self, engine: AsyncEngine):
        """Trace database queries and their duration"""
        if not self.enabled or not self.tracer_provider:
            return

        try:
            SQLAlchemyInstrumentor().instrument(
                engine=engine.sync_engine,  # Use sync engine for instrumentation
                tracer_provider=self.tracer_provider,
            )
            logger.info("SQLAlchemy instrumentation enabled")
        except Exception as e:
            logger.error("Failed to instrument SQLAlchemy: %s", e)

    def instrument_logging(self):
        """Add trace_id / span_id to log records"""
        if not self.enabled or not self.tracer_provider:
            return

        try:
            LoggingInstrumentor().instrument(
                tracer_provider=self.tracer_provider, set_logging_format=True
            )
            logger.info("Logging instrumentation enabled")
        except Exception as e:
            logger.error("Failed to instrument logging: %s", e)

    def shutdown(self):
        """Shutdown tracer provider and flush remaining spans"""
        if self.tracer_provider:
            try:
                self.tracer_provider.shutdown()
                logger.info("Telemetry shutdown complete")
            except Exception as e:
                logger.error("Error during telemetry shutdown: %s", e)


# Global telemetry instance
_telemetry: TelemetryConfig | None = None


def get_telemetry() -> TelemetryConfig | None:
    """Get global telemetry instance"""
    return _telemetry


def set_telemetry(telemetry: TelemetryConfig | None):
    """Set global telemetry instance"""
    global _telemetry
    _telemetry = telemetry
