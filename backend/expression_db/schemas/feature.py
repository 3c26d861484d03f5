from pydantic import BaseModel, Field
from typing import Optional

from expression_db.core.kinds import FeatureKind


class Feature(BaseModel):
    """
    Schema for a feature of any kind.

    **What**: One response shape for genes, transcripts and cufflinks models
    **identifier**: Ensembl stable id for reference kinds, cufflinks accession otherwise
    **dataset_id**: Set only for cufflinks kinds (their ids are dataset-scoped)
    """

    kind: FeatureKind = Field(..., description="Feature kind (link-table discriminator)")
    id: int = Field(..., description="Primary key within the kind's own table", gt=0)
    identifier: str = Field(
        ...,
        description="Stable id or dataset-scoped accession",
        examples=["ENSG00000121101", "ENST00000240045", "XLOC_000001", "TCONS_00000001"]
    )
    dataset_id: Optional[int] = Field(None, description="Owning dataset (cufflinks kinds only)")
    parent_id: Optional[int] = Field(None, description="Owning gene id (transcript kinds only)")
    genome_id: Optional[int] = None
    display_label: Optional[str] = None
    biotype: Optional[str] = None
    ref_id: Optional[str] = Field(
        None,
        description="Reference stable id a cufflinks model maps to, if any",
        examples=["ENSG00000121101"]
    )

    @classmethod
    def from_model(cls, feature) -> "Feature":
        """Build the response from any of the four feature models."""
        kind = type(feature).kind
        return cls(
            kind=kind,
            id=feature.id,
            identifier=feature.accession if kind.is_dataset_scoped else feature.stable_id,
            dataset_id=getattr(feature, "dataset_id", None),
            parent_id=getattr(feature, "gene_id", None) or getattr(feature, "cufflinks_gene_id", None),
            genome_id=getattr(feature, "genome_id", None),
            display_label=getattr(feature, "display_label", None),
            biotype=getattr(feature, "biotype", None),
            ref_id=getattr(feature, "ref_id", None),
        )
