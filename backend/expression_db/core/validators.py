"""
Custom Validators for Expression DB

**What**: Reusable validation functions for the database invariants
**Why**: The same checks guard model construction, the insert service and
the request schemas
**How**: `validate_*` return the (normalized) value or raise; `is_valid_*`
are the non-throwing versions

**Usage**:
```python
from expression_db.core.validators import validate_source_type

kind = validate_source_type(payload.source_type)  # -> FeatureKind
```
"""

import math
import re
from typing import Optional

from expression_db.core.exceptions import (
    InvalidDiscriminatorError,
    InvalidMeasurementError,
)
from expression_db.core.kinds import ANNOTATION_SOURCES, FeatureKind


# =============================================================================
# Discriminator Validation
# =============================================================================

def validate_source_type(source_type: object) -> FeatureKind:
    """
    Validate a link-table discriminator and return its FeatureKind.

    **Raises**: InvalidDiscriminatorError if the value isn't one of the
    four fixed tags (exact, case-sensitive match)

    **Valid Examples**: "gene", "transcript", "cufflinks_gene",
    "cufflinks_transcript", FeatureKind.GENE

    **Invalid Examples**:
    - "protein" → not a feature kind
    - "Gene" → tags are case-sensitive
    - "ensembl_gene" → legacy tag, no longer accepted
    """
    if isinstance(source_type, FeatureKind):
        return source_type

    try:
        return FeatureKind(source_type)
    except ValueError:
        raise InvalidDiscriminatorError(source_type=source_type) from None


def is_valid_source_type(source_type: object) -> bool:
    """Non-throwing version of validate_source_type."""
    try:
        validate_source_type(source_type)
        return True
    except InvalidDiscriminatorError:
        return False


# =============================================================================
# Measurement Validation
# =============================================================================

def validate_fpkm(fpkm: Optional[float]) -> float:
    """
    Validate an FPKM measurement.

    **Rules**:
    - Must be a finite number
    - Must be >= 0 (exactly 0 means "not detected" and is valid)

    **Raises**: InvalidMeasurementError
    """
    if fpkm is None or isinstance(fpkm, bool) or not isinstance(fpkm, (int, float)):
        raise InvalidMeasurementError(fpkm=fpkm)

    if math.isnan(fpkm) or math.isinf(fpkm) or fpkm < 0:
        raise InvalidMeasurementError(fpkm=fpkm)

    return float(fpkm)


# =============================================================================
# Annotation / Identifier Validation
# =============================================================================

def validate_annotation_source(source: str) -> str:
    """
    Validate annotation provenance label.

    **Valid Values**: "ensembl", "rum", "none"
    """
    if source not in ANNOTATION_SOURCES:
        raise ValueError(
            f"Annotation source must be one of {ANNOTATION_SOURCES}. Got: '{source}'"
        )
    return source


def validate_stable_id(stable_id: str) -> str:
    """
    Validate a reference stable identifier (e.g. ENSG00000121101).

    **Format**: letters followed by digits, optional ".version" suffix
    **Note**: Relaxed check - doesn't verify the id exists in Ensembl
    """
    if not isinstance(stable_id, str):
        raise ValueError(f"Stable id must be a string, got {type(stable_id).__name__}")

    stable_id = stable_id.strip()
    if not re.match(r'^[A-Za-z]+[0-9]+(\.[0-9]+)?$', stable_id):
        raise ValueError(
            f"Stable id must look like 'ENSG00000121101'. Got: '{stable_id}'"
        )
    return stable_id


__all__ = [
    'validate_source_type',
    'is_valid_source_type',
    'validate_fpkm',
    'validate_annotation_source',
    'validate_stable_id',
]
