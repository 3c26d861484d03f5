from typing import Dict, Type, Union

from expression_db.core.kinds import FeatureKind, FeatureRef
from expression_db.models.genome import Annotation, Dataset, ExternalDb, Genome, Sample
from expression_db.models.feature import CufflinksGene, CufflinksTranscript, Gene, Transcript
from expression_db.models.link import AlignFeature, ExpressionLink, FeatureXref

Feature = Union[Gene, Transcript, CufflinksGene, CufflinksTranscript]
Link = Union[ExpressionLink, FeatureXref, AlignFeature]

# One table per discriminator value
FEATURE_MODELS: Dict[FeatureKind, Type[Feature]] = {
    FeatureKind.GENE: Gene,
    FeatureKind.TRANSCRIPT: Transcript,
    FeatureKind.CUFFLINKS_GENE: CufflinksGene,
    FeatureKind.CUFFLINKS_TRANSCRIPT: CufflinksTranscript,
}

__all__ = [
    "Genome",
    "Dataset",
    "Annotation",
    "Sample",
    "ExternalDb",
    "Gene",
    "Transcript",
    "CufflinksGene",
    "CufflinksTranscript",
    "ExpressionLink",
    "FeatureXref",
    "AlignFeature",
    "Feature",
    "Link",
    "FeatureKind",
    "FeatureRef",
    "FEATURE_MODELS",
]
