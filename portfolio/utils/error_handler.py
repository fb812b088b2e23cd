"""
Exception handlers translating application errors into HTTP responses.

Route functions raise ``AppException`` subclasses (usually from a domain
service) and never build error responses themselves. The handlers render
every failure with the same ``{"message": ...}`` body existing clients
expect.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import SQLAlchemyError

from portfolio.exceptions import AppException
from portfolio.logging import logger


async def app_exception_handler(
    request: Request, exc: AppException
) -> JSONResponse:
    logger.warning(
        f"AppException on {request.method} {request.url.path}: {exc.message}",
        extra={"exception_type": type(exc).__name__},
    )
    return JSONResponse(
        status_code=exc.http_status, content={"message": exc.message}
    )


async def database_exception_handler(
    request: Request, exc: SQLAlchemyError
) -> JSONResponse:
    logger.error(
        f"Database error on {request.method} {request.url.path}: {exc}",
        exc_info=True,
    )
    return JSONResponse(
        status_code=500, content={"message": "Database error occurred"}
    )


async def invalid_data_handler(
    request: Request, exc: PydanticValidationError
) -> JSONResponse:
    # Raised by services when merged update data no longer validates
    logger.warning(
        f"Invalid data on {request.method} {request.url.path}: {exc}"
    )
    return JSONResponse(
        status_code=400,
        content={
            "message": "Invalid data",
            "errors": exc.errors(include_url=False, include_context=False),
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Install the application exception handlers.

    Args:
        app: Application to configure.
    """
    app.add_exception_handler(AppException, app_exception_handler)
    app.add_exception_handler(SQLAlchemyError, database_exception_handler)
    app.add_exception_handler(PydanticValidationError, invalid_data_handler)
