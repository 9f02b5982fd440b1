import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from align.application.interfaces.llm import ILanguageModelClient
from align.infrastructure.config.settings import Settings, get_settings
from align.infrastructure.external.llm import OpenAIChatClient
from align.infrastructure.persistence.database import Database
from align.presentation.api.error_handlers import register_exception_handlers
from align.presentation.api.v1.routes import mediate, surfaces, vent
from align.presentation.middleware import (
    CorrelationIDMiddleware,
    HostRoutingMiddleware,
    RequestSizeLimitMiddleware,
    SecurityHeadersMiddleware,
)
from align.shared.telemetry.logging import setup_logging
from align.shared.telemetry.telemetry import TelemetryConfig, get_telemetry, set_telemetry

logger = logging.getLogger(__name__)


def _setup_telemetry(app: FastAPI, settings: Settings) -> None:
    """
    Initialize OpenTelemetry distributed tracing; failures never block startup.

    Runs in create_app: FastAPI instrumentation adds middleware, which is not
    allowed once the app has started.
    """
    if not settings.telemetry_enabled:
        logger.info("Distributed tracing disabled in configuration")
        return

    try:
        telemetry = TelemetryConfig(
            service_name=settings.app_name,
            service_version=settings.app_version,
            environment=settings.environment,
            enabled=True,
        )
        telemetry.setup_telemetry(
            exporter_type=settings.telemetry_exporter,
            otlp_endpoint=settings.telemetry_otlp_endpoint,
            sample_rate=settings.telemetry_sample_rate,
        )
        telemetry.instrument_fastapi(app)
        telemetry.instrument_logging()
        set_telemetry(telemetry)
        logger.info("Distributed tracing initialized: exporter=%s", settings.telemetry_exporter)
    except Exception as e:
        logger.warning("Telemetry initialization failed: %s. Continuing without tracing.", e)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Process lifecycle: build the shared database engine and model client
    once, hand them to every request through app.state, dispose at shutdown.

    Resources injected into create_app() are used as-is and left for the
    caller to close.
    """
    settings: Settings = app.state.settings
    setup_logging(settings)

    owns_database = app.state.database is None
    owns_llm_client = app.state.llm_client is None
    if owns_database:
        app.state.database = Database.from_settings(settings)
    if owns_llm_client:
        app.state.llm_client = OpenAIChatClient.from_settings(settings)

    telemetry = get_telemetry()
    if telemetry:
        telemetry.instrument_sqlalchemy(app.state.database.engine)

    yield

    if telemetry:
        telemetry.shutdown()
        set_telemetry(None)

    if owns_llm_client:
        await app.state.llm_client.close()
        app.state.llm_client = None
    if owns_database:
        await app.state.database.dispose()
        app.state.database = None


def create_app(
    settings: Settings | None = None,
    database: Database | None = None,
    llm_client: ILanguageModelClient | None = None,
) -> FastAPI:
    """
    Application factory.

    Args:
        settings: Configuration (defaults to get_settings())
        database: Pre-built database (tests); otherwise created in lifespan
        llm_client: Pre-built model client (tests); otherwise created in lifespan
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = database
    app.state.llm_client = llm_client

    register_exception_handlers(app)
    _setup_telemetry(app, settings)

    # Middleware order matters - applied in reverse (last added runs first)
    # 1. Routing gate (innermost, sees the correlation id)
    app.add_middleware(
        HostRoutingMiddleware,
        subdomain=settings.app_subdomain,
        prefix=settings.app_path_prefix,
        entry_path=settings.app_entry_path,
        dashboard_path=settings.app_dashboard_path,
        public_paths=settings.public_app_paths,
    )

    # 2. Request size limit
    app.add_middleware(RequestSizeLimitMiddleware, max_request_size=settings.max_request_size)

    # 3. Correlation ID for request tracing
    app.add_middleware(CorrelationIDMiddleware)

    # 4. Security headers
    app.add_middleware(SecurityHeadersMiddleware, environment=settings.environment)

    # 5. CORS middleware
    # Security: Using allow_credentials=True requires specific origins (not wildcard)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in settings.allowed_origins.split(",") if o.strip()],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Routers
    app.include_router(mediate.router, prefix="/api/mediate", tags=["mediate"])
    app.include_router(vent.router, prefix="/api/vent", tags=["vent"])
    app.include_router(surfaces.router, tags=["surfaces"])

    return app


app = create_app()
