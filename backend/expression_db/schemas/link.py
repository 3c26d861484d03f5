from pydantic import BaseModel, Field
from typing import Optional

from expression_db.core.kinds import FeatureKind


# =============================================================================
# Shared Link Fields
# =============================================================================

class LinkSource(BaseModel):
    """
    Polymorphic source of a link row.

    **source_type** is accepted as a plain string on input so an unknown
    kind reaches the insert service and is rejected there with
    INVALID_DISCRIMINATOR instead of a generic validation error.
    """

    source_type: str = Field(
        ...,
        description="Feature kind: gene, transcript, cufflinks_gene or cufflinks_transcript",
        examples=["gene", "cufflinks_transcript"]
    )
    source_id: int = Field(..., description="Primary key inside the source_type table", gt=0)


# =============================================================================
# Expression Links (feature -> sample, with FPKM)
# =============================================================================

class ExpressionLinkCreate(LinkSource):
    """Schema for inserting one expression value."""

    sample_id: int = Field(..., gt=0)
    fpkm: float = Field(
        ...,
        ge=0.0,
        description="Expression in FPKM (>= 0; 0 means not detected)",
        examples=[0.0, 12.5, 1043.2]
    )


class ExpressionLink(BaseModel):
    """
    Schema for expression link response.

    **sample_name** is included because dataset views are ordered by it.
    """

    id: int = Field(..., gt=0)
    source_type: FeatureKind
    source_id: int
    sample_id: int
    sample_name: Optional[str] = None
    fpkm: float = Field(..., ge=0.0)

    @classmethod
    def from_model(cls, link) -> "ExpressionLink":
        return cls(
            id=link.id,
            source_type=link.source_type,
            source_id=link.source_id,
            sample_id=link.sample_id,
            sample_name=link.sample.name if link.sample is not None else None,
            fpkm=link.fpkm,
        )


# =============================================================================
# External cross-references and aligned features (feature -> external db)
# =============================================================================

class FeatureXrefCreate(LinkSource):
    """Schema for inserting an external cross-reference."""

    external_db_id: int = Field(..., gt=0)
    dbprimary_acc: Optional[str] = Field(None, max_length=100, examples=["PF00069"])
    display_label: Optional[str] = Field(None, max_length=255, examples=["Pkinase"])


class FeatureXref(BaseModel):
    """Schema for external cross-reference response."""

    id: int
    source_type: FeatureKind
    source_id: int
    external_db_id: int
    dbprimary_acc: Optional[str] = None
    display_label: Optional[str] = None

    class Config:
        from_attributes = True


class AlignFeatureCreate(LinkSource):
    """Schema for inserting an aligned-feature prediction (motif/target hit)."""

    external_db_id: int = Field(..., gt=0)
    hit_name: Optional[str] = Field(None, max_length=100, examples=["hsa-miR-21-5p"])
    seq_start: Optional[int] = Field(None, ge=0)
    seq_end: Optional[int] = Field(None, ge=0)
    score: Optional[float] = None
    evalue: Optional[float] = Field(None, ge=0.0)


class AlignFeature(BaseModel):
    """Schema for aligned-feature response."""

    id: int
    source_type: FeatureKind
    source_id: int
    external_db_id: int
    hit_name: Optional[str] = None
    seq_start: Optional[int] = None
    seq_end: Optional[int] = None
    score: Optional[float] = None
    evalue: Optional[float] = None

    class Config:
        from_attributes = True


# =============================================================================
# Entropy
# =============================================================================

class Entropy(BaseModel):
    """
    Schema for tissue-specificity entropy response.

    **What**: Shannon entropy (natural log) of a feature's FPKM across a dataset
    **max_entropy**: ln(sample_count), the value for perfectly uniform expression
    """

    kind: FeatureKind
    feature_id: int
    dataset_id: int
    sample_count: int = Field(..., ge=0, description="Samples with a measurement for the feature")
    entropy: float = Field(..., ge=0.0)
    max_entropy: float = Field(..., ge=0.0)
