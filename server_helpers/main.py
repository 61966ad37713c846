import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlmodel import SQLModel

from server_helpers import config, dependencies
from server_helpers.db.migrations import init_postgres_migrations
from server_helpers.db.postgres import validate_db_conn_or_fail
from server_helpers.routers import health, models
from server_helpers.server.middlewares import (
    add_cors_middleware_and_endpoint,
    add_logging_middleware,
    add_requester_id_header_middleware,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Blocks until the database answers or the retry budget runs out
    validate_db_conn_or_fail(dependencies.engine, config.DEBUG)
    init_postgres_migrations(dependencies.engine, SQLModel.metadata, config.MIGRATION_MAX_WAIT_MS,
                             config.IS_RUNNING_LOCALLY, config.DEBUG)
    logger.info("Server started -- Ready to accept connections")
    yield


def create_app(debug: bool = config.DEBUG, startup_checks: bool = True) -> FastAPI:
    app = FastAPI(title="Server Helpers", lifespan=lifespan if startup_checks else None)

    app.include_router(health.router, prefix="/api/v1")
    app.include_router(models.router, prefix="/api/v1")

    # Last added runs first: CORS, then trace id, then requester id
    if config.REQUIRE_REQUESTER_ID:
        add_requester_id_header_middleware(app, config.REQUESTER_ID_HEADER, debug)
    add_logging_middleware(app, config.TRACE_ID_HEADER, debug)
    add_cors_middleware_and_endpoint(app, config.REQUESTER_ID_HEADER)
    return app


app = create_app()
