"""
Feature models: the four entity kinds link rows can point at.

Reference genes/transcripts come from the reference annotation (Ensembl).
Cufflinks genes/transcripts are de-novo predictions and only have meaning
inside the dataset they were predicted from; their accessions (XLOC_*,
TCONS_*) are not stable across datasets. Use ref_id to relate them to the
reference annotation where possible.

Every feature carries view-only relationships to the three link tables.
The join uses source_id AND source_type: the four kinds have independent
id spaces, so gene 7 and transcript 7 must never share links.
"""

from typing import Optional

from sqlalchemy import Column, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship, validates

from expression_db.core.kinds import FeatureKind, FeatureRef
from expression_db.core.validators import validate_stable_id
from expression_db.database import Base


def _linked(owner: str, link: str, kind: FeatureKind, order_by: Optional[str] = None):
    """View-only relationship from a feature model to one link table."""
    return relationship(
        link,
        primaryjoin=(
            f"and_({owner}.id == foreign({link}.source_id), "
            f"{link}.source_type == '{kind.value}')"
        ),
        viewonly=True,
        order_by=order_by,
    )


class Gene(Base):
    """
    Reference (Ensembl) gene.
    Belongs to a genome and an annotation; has many transcripts.
    """

    __tablename__ = "genes"

    kind = FeatureKind.GENE

    id = Column(Integer, primary_key=True, index=True)
    stable_id = Column(String(50), unique=True, nullable=False, index=True)  # e.g., "ENSG00000121101"
    display_label = Column(String(100), nullable=True)  # e.g., "TEX14"
    biotype = Column(String(50), nullable=True)
    genome_id = Column(Integer, ForeignKey("genomes.id"), nullable=True, index=True)
    annotation_id = Column(Integer, ForeignKey("annotations.id"), nullable=True)

    genome = relationship("Genome", back_populates="genes")
    annotation = relationship("Annotation", back_populates="genes")
    transcripts = relationship("Transcript", back_populates="gene", order_by="Transcript.id")

    expression_links = _linked("Gene", "ExpressionLink", kind, order_by="ExpressionLink.sample_id")
    feature_xrefs = _linked("Gene", "FeatureXref", kind, order_by="FeatureXref.external_db_id")
    align_features = _linked("Gene", "AlignFeature", kind)

    @validates("stable_id")
    def _validate_stable_id(self, key, value):
        return validate_stable_id(value)

    @property
    def ref(self) -> FeatureRef:
        return FeatureRef(self.kind, self.id)

    def __repr__(self):
        return f"<Gene(id={self.id}, stable_id={self.stable_id})>"


class Transcript(Base):
    """Reference (Ensembl) transcript. Belongs to one gene."""

    __tablename__ = "transcripts"

    kind = FeatureKind.TRANSCRIPT

    id = Column(Integer, primary_key=True, index=True)
    stable_id = Column(String(50), unique=True, nullable=False, index=True)  # e.g., "ENST00000240045"
    biotype = Column(String(50), nullable=True)
    gene_id = Column(Integer, ForeignKey("genes.id"), nullable=False, index=True)

    gene = relationship("Gene", back_populates="transcripts")

    expression_links = _linked("Transcript", "ExpressionLink", kind, order_by="ExpressionLink.sample_id")
    feature_xrefs = _linked("Transcript", "FeatureXref", kind, order_by="FeatureXref.external_db_id")
    align_features = _linked("Transcript", "AlignFeature", kind)

    @validates("stable_id")
    def _validate_stable_id(self, key, value):
        return validate_stable_id(value)

    @property
    def ref(self) -> FeatureRef:
        return FeatureRef(self.kind, self.id)

    def __repr__(self):
        return f"<Transcript(id={self.id}, stable_id={self.stable_id}, gene_id={self.gene_id})>"


class CufflinksGene(Base):
    """
    Cufflinks-predicted gene model, valid only within its dataset.
    Identity is (dataset_id, id); the accession is unique per dataset only.
    """

    __tablename__ = "cufflinks_genes"

    kind = FeatureKind.CUFFLINKS_GENE

    id = Column(Integer, primary_key=True, index=True)
    accession = Column(String(50), nullable=False, index=True)  # e.g., "XLOC_000001"
    dataset_id = Column(Integer, ForeignKey("datasets.id"), nullable=False, index=True)
    genome_id = Column(Integer, ForeignKey("genomes.id"), nullable=True, index=True)
    annotation_id = Column(Integer, ForeignKey("annotations.id"), nullable=True)
    ref_id = Column(String(50), nullable=True)  # stable id of the overlapping reference gene
    locus = Column(String(100), nullable=True)  # e.g., "1:11873-14409"

    dataset = relationship("Dataset", back_populates="cufflinks_genes")
    genome = relationship("Genome", back_populates="cufflinks_genes")
    annotation = relationship("Annotation", back_populates="cufflinks_genes")
    transcripts = relationship(
        "CufflinksTranscript", back_populates="gene", order_by="CufflinksTranscript.id"
    )

    expression_links = _linked("CufflinksGene", "ExpressionLink", kind, order_by="ExpressionLink.sample_id")
    feature_xrefs = _linked("CufflinksGene", "FeatureXref", kind, order_by="FeatureXref.external_db_id")
    align_features = _linked("CufflinksGene", "AlignFeature", kind)

    __table_args__ = (
        UniqueConstraint("dataset_id", "accession", name="uq_cufflinks_genes_dataset_accession"),
    )

    @property
    def ref(self) -> FeatureRef:
        return FeatureRef(self.kind, self.id, self.dataset_id)

    def __repr__(self):
        return (
            f"<CufflinksGene(id={self.id}, accession={self.accession}, "
            f"dataset_id={self.dataset_id})>"
        )


class CufflinksTranscript(Base):
    """
    Cufflinks-predicted transcript model.
    dataset_id always equals the owning cufflinks gene's dataset.
    """

    __tablename__ = "cufflinks_transcripts"

    kind = FeatureKind.CUFFLINKS_TRANSCRIPT

    id = Column(Integer, primary_key=True, index=True)
    accession = Column(String(50), nullable=False, index=True)  # e.g., "TCONS_00000001"
    cufflinks_gene_id = Column(Integer, ForeignKey("cufflinks_genes.id"), nullable=False, index=True)
    dataset_id = Column(Integer, ForeignKey("datasets.id"), nullable=False, index=True)
    ref_id = Column(String(50), nullable=True)  # stable id of the matching reference transcript
    class_code = Column(String(1), nullable=True)  # cuffcompare class code, e.g. "=", "j", "u"

    gene = relationship("CufflinksGene", back_populates="transcripts")

    expression_links = _linked(
        "CufflinksTranscript", "ExpressionLink", kind, order_by="ExpressionLink.sample_id"
    )
    feature_xrefs = _linked(
        "CufflinksTranscript", "FeatureXref", kind, order_by="FeatureXref.external_db_id"
    )
    align_features = _linked("CufflinksTranscript", "AlignFeature", kind)

    __table_args__ = (
        UniqueConstraint("dataset_id", "accession", name="uq_cufflinks_transcripts_dataset_accession"),
    )

    @property
    def ref(self) -> FeatureRef:
        return FeatureRef(self.kind, self.id, self.dataset_id)

    def __repr__(self):
        return (
            f"<CufflinksTranscript(id={self.id}, accession={self.accession}, "
            f"dataset_id={self.dataset_id})>"
        )
