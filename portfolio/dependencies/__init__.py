"""
FastAPI dependencies for the application.

Everything is read from ``app.state``, which the application factory
populates, so tests can build an app around fake services.

Example:
    ```python
    @router.get("/health")
    async def health(manager: ConnectionManagerDep) -> dict:
        return {"connections": manager.active_connections}
    ```
"""

from typing import Annotated

from fastapi import Depends, Request

from portfolio.managers.websocket_connection_manager import ConnectionManager
from portfolio.services.registry import Services
from portfolio.storage.db import Database


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_connection_manager(request: Request) -> ConnectionManager:
    return request.app.state.connection_manager


def get_database(request: Request) -> Database | None:
    """Database handle, or None when the app runs on in-memory services."""
    return getattr(request.app.state, "database", None)


ServicesDep = Annotated[Services, Depends(get_services)]
ConnectionManagerDep = Annotated[
    ConnectionManager, Depends(get_connection_manager)
]
DatabaseDep = Annotated[Database | None, Depends(get_database)]

__all__ = [
    "ConnectionManagerDep",
    "DatabaseDep",
    "ServicesDep",
    "get_connection_manager",
    "get_database",
    "get_services",
]
