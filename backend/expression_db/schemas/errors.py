"""
Error Response Schemas for API Consistency

**What**: Pydantic models for structured error responses
**Why**: Ensures all errors have consistent JSON format across API
**How**: The global exception handlers serialize exceptions using these schemas

**Standard Error Format**:
```json
{
    "code": "INVALID_DISCRIMINATOR",        // Machine-readable error code
    "message": "Invalid source_type ...",   // Human-readable message
    "timestamp": "2024-12-02T10:00:00Z",   // When error occurred
    "correlation_id": "abc-123-def",        // X-Request-ID of the request
    "details": {"source_type": "protein"}   // Debug context
}
```
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """
    Standard error response for all API errors.

    **Fields**:
    - code: ERROR_CODE in SCREAMING_SNAKE_CASE
    - message: Human-readable description
    - timestamp: ISO 8601 format (UTC)
    - correlation_id: Request ID for tracing
    - details: Optional debug info
    """

    code: str = Field(
        ...,
        description="Machine-readable error code (e.g., 'FEATURE_NOT_FOUND')",
        examples=["FEATURE_NOT_FOUND", "INVALID_DISCRIMINATOR", "DANGLING_REFERENCE"]
    )

    message: str = Field(
        ...,
        description="Human-readable error message",
        examples=["gene with id 123 not found"]
    )

    timestamp: datetime = Field(
        default_factory=datetime.utcnow,
        description="When the error occurred (UTC)",
        examples=["2024-12-02T10:00:00Z"]
    )

    correlation_id: Optional[str] = Field(
        None,
        description="Request ID for tracing (X-Request-ID header)",
        examples=["abc-123-def-456"]
    )

    details: Optional[Dict[str, Any]] = Field(
        None,
        description="Additional error context for debugging",
        examples=[{"source_type": "protein", "source_id": 7}]
    )

    class Config:
        """Pydantic configuration."""
        json_schema_extra = {
            "example": {
                "code": "FEATURE_NOT_FOUND",
                "message": "gene with id 123 not found",
                "timestamp": "2024-12-02T10:00:00Z",
                "correlation_id": "abc-123-def",
                "details": {"kind": "gene", "feature_id": 123},
            }
        }


class ValidationErrorDetail(BaseModel):
    """
    Detailed validation error for a specific field.

    **Example**:
    ```json
    {"field": "query.dataset_id", "message": "Input should be a valid integer", "type": "int_parsing"}
    ```
    """

    field: str = Field(..., description="Path to the invalid field", examples=["body.fpkm"])
    message: str = Field(..., description="What's wrong with this field")
    type: str = Field(..., description="Pydantic error type (machine-readable)")


class ValidationErrorResponse(ErrorResponse):
    """
    Extended error response for validation failures (422).

    **What**: Includes field-level validation errors
    **When**: Request body/params fail Pydantic validation
    """

    errors: List[ValidationErrorDetail] = Field(
        ...,
        description="List of field-level validation errors",
        min_length=1
    )


ERROR_RESPONSE_404_EXAMPLE = {
    "description": "Resource not found",
    "model": ErrorResponse,
}

ERROR_RESPONSE_400_EXAMPLE = {
    "description": "Bad request - invalid discriminator or measurement",
    "model": ErrorResponse,
}

ERROR_RESPONSE_409_EXAMPLE = {
    "description": "Link row points at a feature that doesn't exist",
    "model": ErrorResponse,
}
