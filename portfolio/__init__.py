# Uvicorn application factory <https://www.uvicorn.org/#application-factories>
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from portfolio.api.ws.handlers import load_handlers
from portfolio.logging import logger
from portfolio.managers.websocket_connection_manager import ConnectionManager
from portfolio.middlewares.access_log import AccessLogMiddleware
from portfolio.middlewares.correlation_id import CorrelationIDMiddleware
from portfolio.routing import MessageDispatcher, collect_subrouters
from portfolio.services.registry import Services, build_services
from portfolio.settings import app_settings
from portfolio.storage.db import Database
from portfolio.utils.error_handler import register_exception_handlers


def lifespan(database: Database | None):
    """
    Build the application lifespan for an optional database handle.
    """

    @asynccontextmanager
    async def wrapper(app: FastAPI) -> AsyncIterator[None]:
        """
        Startup: wait for the database and create missing tables.
        Shutdown: close pooled database connections.
        """
        logger.info("Application startup initiated")
        if database is not None:
            await database.wait_until_ready()
            await database.create_tables()

        yield

        logger.info("Application shutdown initiated")
        if database is not None:
            await database.dispose()
        logger.info("Application shutdown complete")

    return wrapper


def application(
    services: Services | None = None, database: Database | None = None
) -> FastAPI:
    """
    Initializes and configures the FastAPI application.

    Without arguments a ``Database`` is created from settings and the
    database-backed services are wired to it. Tests pass in-memory
    ``services`` instead, in which case no database is used unless one is
    given explicitly.

    The connection manager, dispatcher, services and database are stored
    on ``app.state`` where endpoints and dependencies look them up. HTTP
    routers and WebSocket consumers are collected from ``api/http`` and
    ``api/ws/consumers``. Files in ``STATIC_DIR`` are served under
    ``STATIC_URL`` when the directory exists.
    """
    if services is None:
        if database is None:
            database = Database.from_settings()
        services = build_services(database)

    connection_manager = ConnectionManager()
    dispatcher = MessageDispatcher(connection_manager)
    load_handlers(dispatcher, services)

    app = FastAPI(
        title="Portfolio API",
        description="Portfolio collections over HTTP with live WebSocket updates",
        version="1.0.0",
        lifespan=lifespan(database),
    )

    app.state.services = services
    app.state.database = database
    app.state.connection_manager = connection_manager
    app.state.dispatcher = dispatcher

    # Collect routers
    app.include_router(collect_subrouters())

    if os.path.isdir(app_settings.STATIC_DIR):
        app.mount(
            app_settings.STATIC_URL,
            StaticFiles(directory=app_settings.STATIC_DIR),
            name="static",
        )
    else:
        logger.info(
            f"Static directory {app_settings.STATIC_DIR} not found, "
            "static files are not served"
        )

    register_exception_handlers(app)

    # Middlewares (execute in REVERSE order of registration)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(AccessLogMiddleware)
    app.add_middleware(CorrelationIDMiddleware)

    return app
