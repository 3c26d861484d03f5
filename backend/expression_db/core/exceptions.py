"""
Custom Exception Hierarchy for Expression DB

**What**: Domain-specific exceptions with structured error information
**Why**: Lookup misses, broken polymorphic references and bad discriminators
must be told apart by callers and by the API layer
**How**: All exceptions inherit from AppException with status_code, error_code, and context

**Taxonomy**:
- NotFoundError (404): a primary-key or identifier lookup found no row.
  Expected absence, recoverable.
- ResolutionError (409): a link row could not be resolved to its feature.
  This is a consistency violation, not an expected miss.
  - DanglingReferenceError: source_id has no row in the addressed table
  - InvalidDiscriminatorError (400): source_type outside the closed set
- InvalidMeasurementError (400): negative FPKM
- DatasetScopeRequiredError (400): cufflinks accession looked up without a dataset

**Usage Example**:
```python
if gene is None:
    raise FeatureNotFoundError(kind="gene", feature_id=42)

# Gets handled globally and returns:
{
    "code": "FEATURE_NOT_FOUND",
    "message": "gene with id 42 not found",
    "timestamp": "2024-12-02T10:00:00Z",
    "correlation_id": "abc-123-def",
    "details": {"kind": "gene", "feature_id": 42}
}
```
"""

from typing import Any, Optional


# =============================================================================
# Base Exception
# =============================================================================

class AppException(Exception):
    """
    Base exception for all application errors.

    **Attributes**:
    - status_code: HTTP status code (e.g., 404, 400, 500)
    - error_code: Machine-readable error identifier (e.g., "FEATURE_NOT_FOUND")
    - message: Human-readable error message
    - details: Additional context for debugging
    """

    status_code: int = 500
    error_code: str = "INTERNAL_ERROR"
    message_template: str = "An unexpected error occurred"

    def __init__(self, message: Optional[str] = None, **details: Any):
        self.details = details

        # Format message with details if template contains placeholders
        if message:
            self.message = message
        else:
            try:
                self.message = self.message_template.format(**details)
            except KeyError:
                # If template references missing detail keys, use template as-is
                self.message = self.message_template

        super().__init__(self.message)


# =============================================================================
# 404 Not Found Errors
# =============================================================================

class NotFoundError(AppException):
    """
    Raised when a lookup on a table yields no row.

    **Status**: 404 Not Found
    **Note**: A miss while resolving a link row is a DanglingReferenceError instead
    """
    status_code = 404
    error_code = "NOT_FOUND"
    message_template = "{table} with id {id} not found"


class GenomeNotFoundError(NotFoundError):
    """Raised when genome lookup by ID or species name fails."""
    error_code = "GENOME_NOT_FOUND"
    message_template = "Genome with {key} {value} not found"

    def __init__(self, genome_id: Optional[int] = None, name: Optional[str] = None):
        if genome_id is not None:
            super().__init__(key="id", value=genome_id, genome_id=genome_id)
        elif name is not None:
            super().__init__(key="name", value=name, name=name)
        else:
            super().__init__(key="identifier", value="unknown")


class DatasetNotFoundError(NotFoundError):
    error_code = "DATASET_NOT_FOUND"
    message_template = "Dataset with id {dataset_id} not found"


class SampleNotFoundError(NotFoundError):
    error_code = "SAMPLE_NOT_FOUND"
    message_template = "Sample with id {sample_id} not found"


class ExternalDbNotFoundError(NotFoundError):
    error_code = "EXTERNAL_DB_NOT_FOUND"
    message_template = "External database with id {external_db_id} not found"


class LinkNotFoundError(NotFoundError):
    error_code = "LINK_NOT_FOUND"
    message_template = "{table} row with id {link_id} not found"


class FeatureNotFoundError(NotFoundError):
    """
    Raised when a feature lookup by numeric id, stable id or accession fails.

    **Example**: GET /features/gene/999 for a gene that doesn't exist
    """
    error_code = "FEATURE_NOT_FOUND"
    message_template = "{kind} with {key} {value} not found"

    def __init__(
        self,
        kind: str,
        feature_id: Optional[int] = None,
        identifier: Optional[str] = None,
        dataset_id: Optional[int] = None,
    ):
        if feature_id is not None:
            super().__init__(kind=kind, key="id", value=feature_id, feature_id=feature_id)
        elif dataset_id is not None:
            super().__init__(
                kind=kind,
                key="identifier",
                value=f"{identifier} in dataset {dataset_id}",
                identifier=identifier,
                dataset_id=dataset_id,
            )
        else:
            super().__init__(kind=kind, key="identifier", value=identifier, identifier=identifier)


# =============================================================================
# Resolution Errors (polymorphic link consistency)
# =============================================================================

class ResolutionError(AppException):
    """
    Raised when a polymorphic link row cannot be resolved to its feature.

    **Status**: 409 Conflict
    **Why 409**: The stored data contradicts itself; retrying won't help
    """
    status_code = 409
    error_code = "RESOLUTION_ERROR"
    message_template = "Could not resolve {source_type} {source_id}"


class DanglingReferenceError(ResolutionError):
    """
    Raised when (source_id, source_type) names a row that doesn't exist.

    **When to use**:
    - Resolving a link row whose feature was never ingested
    - Inserting a link that would point at a missing feature
    """
    error_code = "DANGLING_REFERENCE"
    message_template = "No {source_type} with id {source_id} exists"


class InvalidDiscriminatorError(ResolutionError):
    """
    Raised when source_type is not one of the four feature kinds.

    **Status**: 400 Bad Request
    **Valid values**: gene, transcript, cufflinks_gene, cufflinks_transcript
    **Always fatal**: never silently ignored on resolve or insert
    """
    status_code = 400
    error_code = "INVALID_DISCRIMINATOR"
    message_template = (
        "Invalid source_type '{source_type}'. Must be one of: "
        "gene, transcript, cufflinks_gene, cufflinks_transcript"
    )


# =============================================================================
# 400 Bad Request Errors (User Input Errors)
# =============================================================================

class InvalidMeasurementError(AppException):
    """
    Raised when an FPKM value is negative.

    **Status**: 400 Bad Request
    **Note**: 0.0 is valid ("not detected")
    """
    status_code = 400
    error_code = "INVALID_MEASUREMENT"
    message_template = "FPKM must be >= 0. Got: {fpkm}"


class DatasetScopeRequiredError(AppException):
    """
    Raised when a cufflinks accession is looked up without a dataset.

    **Status**: 400 Bad Request
    **Why**: Cufflinks accessions (XLOC_*, TCONS_*) are only unique within a dataset
    """
    status_code = 400
    error_code = "DATASET_SCOPE_REQUIRED"
    message_template = "Looking up {kind} by accession requires a dataset"


# =============================================================================
# Convenience Functions
# =============================================================================

def is_client_error(exception: AppException) -> bool:
    """
    Check if exception is a client error (4xx) vs server error (5xx).

    Affects logging level (warn vs error) in the global handlers.
    """
    return 400 <= exception.status_code < 500
