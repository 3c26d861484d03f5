import enum
from dataclasses import dataclass
from typing import Optional


class FeatureKind(str, enum.Enum):
    """
    Closed set of feature variants a link row can point at.

    The values are stored verbatim in the `source_type` column of every
    link table and must round-trip exactly.
    """

    GENE = "gene"
    TRANSCRIPT = "transcript"
    CUFFLINKS_GENE = "cufflinks_gene"
    CUFFLINKS_TRANSCRIPT = "cufflinks_transcript"

    @property
    def is_dataset_scoped(self) -> bool:
        """Cufflinks models only have meaning inside their dataset."""
        return self in (FeatureKind.CUFFLINKS_GENE, FeatureKind.CUFFLINKS_TRANSCRIPT)


SOURCE_TYPES = tuple(kind.value for kind in FeatureKind)

ANNOTATION_SOURCES = ("ensembl", "rum", "none")


@dataclass(frozen=True)
class FeatureRef:
    """
    Identity of a feature across all four id spaces.

    dataset_id is None for reference features and the owning dataset for
    cufflinks features, so equal local ids from different datasets (or
    different kinds) never compare equal.
    """

    kind: FeatureKind
    id: int
    dataset_id: Optional[int] = None
