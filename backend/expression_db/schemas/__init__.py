from expression_db.schemas.genome import Genome, Dataset, Sample, ExternalDb
from expression_db.schemas.feature import Feature
from expression_db.schemas.link import (
    ExpressionLink,
    ExpressionLinkCreate,
    FeatureXref,
    FeatureXrefCreate,
    AlignFeature,
    AlignFeatureCreate,
    Entropy,
)

__all__ = [
    "Genome",
    "Dataset",
    "Sample",
    "ExternalDb",
    "Feature",
    "ExpressionLink",
    "ExpressionLinkCreate",
    "FeatureXref",
    "FeatureXrefCreate",
    "AlignFeature",
    "AlignFeatureCreate",
    "Entropy",
]
