"""
Global Exception Handlers for FastAPI

**What**: Catches all exceptions and converts them to structured JSON responses
**Why**: Ensures consistent error format across entire API
**How**: Registers handlers with FastAPI app for different exception types

**Exception Handler Priority** (first match wins):
1. AppException (custom exceptions) → Structured response with status_code
2. RequestValidationError → 422 with field-level errors
3. SQLAlchemy IntegrityError → 400 (constraint violations are user errors)
4. SQLAlchemy DatabaseError → 500 (connection failures are system errors)
5. Exception (catch-all) → 500 with correlation ID
"""

import logging
import uuid
from datetime import datetime
from typing import Union

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError, DatabaseError as SQLAlchemyDatabaseError
from starlette.middleware.base import BaseHTTPMiddleware

from expression_db.core.exceptions import AppException, is_client_error
from expression_db.schemas.errors import (
    ErrorResponse,
    ValidationErrorResponse,
    ValidationErrorDetail,
)

logger = logging.getLogger(__name__)


# =============================================================================
# Correlation ID Middleware
# =============================================================================

class CorrelationIDMiddleware(BaseHTTPMiddleware):
    """
    Adds correlation ID to every request for tracing.

    **Flow**:
    1. Reuse the client's X-Request-ID header, or generate a UUID
    2. Store in request.state.correlation_id
    3. Echo it in the response headers
    """

    async def dispatch(self, request: Request, call_next):
        correlation_id = request.headers.get("X-Request-ID")

        if not correlation_id:
            correlation_id = str(uuid.uuid4())

        request.state.correlation_id = correlation_id

        response = await call_next(request)
        response.headers["X-Request-ID"] = correlation_id

        return response


# =============================================================================
# Exception Handlers
# =============================================================================

async def handle_app_exception(request: Request, exc: AppException) -> JSONResponse:
    """
    Handle custom AppException with structured error response.

    **Logging**:
    - 4xx errors: WARNING level (client error, missing row, bad discriminator)
    - 5xx errors: ERROR level with traceback (server error)
    """
    correlation_id = getattr(request.state, "correlation_id", None)

    if is_client_error(exc):
        logger.warning(
            f"Client error: {exc.error_code} - {exc.message}",
            extra={"correlation_id": correlation_id, "details": exc.details}
        )
    else:
        logger.error(
            f"Server error: {exc.error_code} - {exc.message}",
            exc_info=True,
            extra={"correlation_id": correlation_id, "details": exc.details}
        )

    error_response = ErrorResponse(
        code=exc.error_code,
        message=exc.message,
        timestamp=datetime.utcnow(),
        correlation_id=correlation_id,
        details=exc.details if exc.details else None
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=error_response.model_dump(exclude_none=True, mode="json")
    )


async def handle_validation_error(
    request: Request,
    exc: Union[RequestValidationError, PydanticValidationError]
) -> JSONResponse:
    """
    Handle Pydantic validation errors with field-level details.

    **Status Code**: 422 Unprocessable Entity
    **Example**: POST /expression-links with fpkm=-1 →
    `{"code": "VALIDATION_ERROR", "errors": [{"field": "body.fpkm", ...}]}`
    """
    correlation_id = getattr(request.state, "correlation_id", None)

    validation_errors = []
    for error in exc.errors():
        # error["loc"] is tuple like ("body", "fpkm")
        field_path = ".".join(str(loc) for loc in error["loc"])

        validation_errors.append(
            ValidationErrorDetail(
                field=field_path,
                message=error["msg"],
                type=error["type"]
            )
        )

    logger.warning(
        f"Validation error: {len(validation_errors)} field(s) invalid",
        extra={
            "correlation_id": correlation_id,
            "validation_errors": [e.model_dump() for e in validation_errors]
        }
    )

    error_response = ValidationErrorResponse(
        code="VALIDATION_ERROR",
        message="Request validation failed",
        timestamp=datetime.utcnow(),
        correlation_id=correlation_id,
        errors=validation_errors
    )

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=error_response.model_dump(exclude_none=True, mode="json")
    )


async def handle_integrity_error(request: Request, exc: IntegrityError) -> JSONResponse:
    """
    Handle database constraint violations (unique, foreign key, check).

    **Why 400 not 500**: The request tried to store something the schema forbids
    **Common Cases**:
    - Unique constraint: duplicate cufflinks accession within a dataset
    - Check constraint: source_type outside the closed set, negative fpkm
    """
    correlation_id = getattr(request.state, "correlation_id", None)

    error_msg = str(exc.orig)
    lowered = error_msg.lower()

    if "unique constraint" in lowered or "duplicate" in lowered:
        code, message = "DUPLICATE_ENTRY", "A record with these values already exists"
    elif "foreign key constraint" in lowered:
        code, message = "INVALID_REFERENCE", "Referenced record does not exist"
    elif "check constraint" in lowered:
        code, message = "CONSTRAINT_VIOLATION", "Value violates database constraint"
    else:
        code, message = "INTEGRITY_ERROR", "Database integrity constraint violated"

    error_response = ErrorResponse(
        code=code,
        message=message,
        timestamp=datetime.utcnow(),
        correlation_id=correlation_id
    )

    logger.warning(
        f"Integrity error: {error_response.code}",
        extra={"correlation_id": correlation_id, "db_error": error_msg}
    )

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_response.model_dump(exclude_none=True, mode="json")
    )


async def handle_database_error(
    request: Request,
    exc: SQLAlchemyDatabaseError
) -> JSONResponse:
    """
    Handle database connection/transaction errors.

    **Why 500**: Not user's fault - system/infrastructure issue
    **Note**: No retry here; retries belong to the database driver/pool
    """
    correlation_id = getattr(request.state, "correlation_id", None)

    logger.error(
        "Database error occurred",
        exc_info=True,
        extra={"correlation_id": correlation_id}
    )

    error_response = ErrorResponse(
        code="DATABASE_ERROR",
        message="A database error occurred. Please try again later.",
        timestamp=datetime.utcnow(),
        correlation_id=correlation_id
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_response.model_dump(exclude_none=True, mode="json")
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    """
    Catch-all handler for unexpected exceptions.

    Always logs the full traceback; never exposes exception details to the client.
    """
    correlation_id = getattr(request.state, "correlation_id", None)

    logger.error(
        f"Unexpected error: {type(exc).__name__}",
        exc_info=True,
        extra={"correlation_id": correlation_id}
    )

    error_response = ErrorResponse(
        code="INTERNAL_ERROR",
        message="An unexpected error occurred. Please try again later.",
        timestamp=datetime.utcnow(),
        correlation_id=correlation_id
    )

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_response.model_dump(exclude_none=True, mode="json")
    )


# =============================================================================
# Registration Function
# =============================================================================

def register_exception_handlers(app: FastAPI) -> None:
    """
    Register all exception handlers with FastAPI app.

    **Order**: Specific exceptions first, generic last
    """
    app.add_exception_handler(AppException, handle_app_exception)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(IntegrityError, handle_integrity_error)
    app.add_exception_handler(SQLAlchemyDatabaseError, handle_database_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    logger.info("Exception handlers registered successfully")
