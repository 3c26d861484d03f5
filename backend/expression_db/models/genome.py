from sqlalchemy import CheckConstraint, Column, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship, validates

from expression_db.core.kinds import ANNOTATION_SOURCES
from expression_db.core.validators import validate_annotation_source
from expression_db.database import Base


class Genome(Base):
    """
    A reference genome (one species/assembly).
    One genome has many reference genes and many cufflinks gene models.
    """

    __tablename__ = "genomes"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), unique=True, nullable=False, index=True)  # e.g., "homo_sapiens"
    assembly = Column(String(50), nullable=True)  # e.g., "GRCh37"

    genes = relationship("Gene", back_populates="genome", order_by="Gene.id")
    cufflinks_genes = relationship("CufflinksGene", back_populates="genome", order_by="CufflinksGene.id")

    def __repr__(self):
        return f"<Genome(id={self.id}, name={self.name})>"


class Dataset(Base):
    """
    One experiment the expression data was taken from.
    Datasets own their samples and the cufflinks models predicted from them.
    """

    __tablename__ = "datasets"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), unique=True, nullable=False)
    description = Column(Text, nullable=True)

    samples = relationship("Sample", back_populates="dataset", order_by="Sample.name")
    cufflinks_genes = relationship("CufflinksGene", back_populates="dataset", order_by="CufflinksGene.id")

    def __repr__(self):
        return f"<Dataset(id={self.id}, name={self.name})>"


class Annotation(Base):
    """
    Provenance of a gene set: the reference annotation it was built against.
    """

    __tablename__ = "annotations"

    id = Column(Integer, primary_key=True, index=True)
    source = Column(String(20), nullable=False)  # ensembl, rum, none
    release = Column(String(50), nullable=True)

    genes = relationship("Gene", back_populates="annotation")
    cufflinks_genes = relationship("CufflinksGene", back_populates="annotation")

    __table_args__ = (
        CheckConstraint(
            "source IN ({})".format(", ".join(f"'{s}'" for s in ANNOTATION_SOURCES)),
            name="ck_annotations_source",
        ),
    )

    @validates("source")
    def _validate_source(self, key, value):
        return validate_annotation_source(value)

    def __repr__(self):
        return f"<Annotation(id={self.id}, source={self.source})>"


class Sample(Base):
    """
    A tissue/condition reads were measured from.
    Each sample belongs to exactly one dataset.
    """

    __tablename__ = "samples"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)  # e.g., "liver"
    description = Column(Text, nullable=True)
    dataset_id = Column(Integer, ForeignKey("datasets.id"), nullable=False, index=True)

    dataset = relationship("Dataset", back_populates="samples")

    def __repr__(self):
        return f"<Sample(id={self.id}, name={self.name}, dataset_id={self.dataset_id})>"


class ExternalDb(Base):
    """
    An external annotation/feature source (domain database, motif scan, ...)
    referenced by FeatureXref and AlignFeature rows.
    """

    __tablename__ = "external_dbs"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), unique=True, nullable=False)  # e.g., "Pfam", "miRBase"
    release = Column(String(50), nullable=True)

    def __repr__(self):
        return f"<ExternalDb(id={self.id}, name={self.name})>"
