import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.endpoints import router
from app.api.routes import health
from app.core.config import Config, settings
from app.core.tracing import instrument_app, setup_tracing, shutdown_tracing
from app.features.auth.keycloak import KeycloakTokenVerifier
from app.features.database.client import DatabaseClient
from app.features.journaling.service import JournalService
from app.features.journaling.summaries import SummaryOrchestrator
from app.services.http_client import HTTPClientManager
from app.services.llm import TextGenerator, build_text_generator
from app.shared.correlation import CorrelationMiddleware
from app.shared.errors import register_exception_handlers
from app.shared.logging_config import setup_logging

logger = logging.getLogger("QJournal.Main")


def create_app(
    config: Config = settings,
    database: Optional[DatabaseClient] = None,
    text_generator: Optional[TextGenerator] = None,
    token_verifier: Optional[KeycloakTokenVerifier] = None,
) -> FastAPI:
    """
    Build the application.

    Collaborators that are not passed in are created from ``config`` when
    the app starts and released when it stops.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_tracing(config.SERVICE_NAME)

        http = HTTPClientManager()
        await http.startup()

        owns_database = database is None
        db: Optional[DatabaseClient] = database
        try:
            if db is None:
                db = await DatabaseClient.connect(config.SUPABASE_URL, config.SUPABASE_KEY)

            app.state.database = db
            app.state.token_verifier = token_verifier or KeycloakTokenVerifier(
                http,
                issuer=config.KEYCLOAK_ISSUER,
                jwks_url=config.KEYCLOAK_JWKS_URL,
                cache_seconds=config.JWKS_CACHE_SECONDS,
            )
            app.state.journal_service = JournalService(
                db,
                SummaryOrchestrator(text_generator or build_text_generator(config)),
                history_limit=config.HISTORY_LIMIT,
                dashboard_limit=config.DASHBOARD_LIMIT,
                max_history_limit=config.MAX_HISTORY_LIMIT,
            )
            logger.info("Journal service started")

            yield
        finally:
            if owns_database and db is not None:
                await db.close()
            await http.shutdown()
            shutdown_tracing()
            logger.info("Journal service stopped")

    app = FastAPI(
        title="QJournal Service",
        description="Daily reflective journaling with AI-generated summaries",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials="*" not in config.CORS_ORIGINS,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "X-Correlation-ID", "X-Request-ID"],
    )
    app.add_middleware(CorrelationMiddleware)

    register_exception_handlers(app)

    app.include_router(router, prefix="/api")
    app.include_router(health.router)

    instrument_app(app)
    return app


setup_logging(service_name=settings.SERVICE_NAME)

app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
