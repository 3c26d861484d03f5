"""
Polymorphic link tables.

Each row carries (source_id, source_type) naming one feature of any of the
four kinds, plus a target: a Sample for ExpressionLink (with an FPKM value),
an ExternalDb entry for FeatureXref and AlignFeature.

IMPORTANT: source_type selects the table source_id points into. Rows with
a source_type outside the closed set are rejected at construction time and
by a CHECK constraint.
"""

from sqlalchemy import (
    CheckConstraint,
    Column,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship, synonym, validates

from expression_db.core.kinds import SOURCE_TYPES
from expression_db.core.validators import validate_fpkm, validate_source_type
from expression_db.database import Base

_SOURCE_TYPE_CHECK = "source_type IN ({})".format(", ".join(f"'{s}'" for s in SOURCE_TYPES))


class LinkMixin:
    """Columns and discriminator validation shared by all link tables."""

    # Reverse lookups order by this column when set
    default_order = None

    id = Column(Integer, primary_key=True, index=True)
    source_id = Column(Integer, nullable=False)
    source_type = Column(String(30), nullable=False)

    @validates("source_type")
    def _validate_source_type(self, key, value):
        return validate_source_type(value).value

    @property
    def source_kind(self):
        return validate_source_type(self.source_type)


class ExpressionLink(LinkMixin, Base):
    """
    Feature -> Sample link holding the expression value (FPKM).
    This table holds the expression data.
    """

    __tablename__ = "xref_samples"

    default_order = "sample_id"

    sample_id = Column(Integer, ForeignKey("samples.id"), nullable=False, index=True)
    fpkm = Column(Float, nullable=False)

    target_id = synonym("sample_id")
    measurement = synonym("fpkm")

    # Always loaded: filtering and ordering need the sample's dataset and name
    sample = relationship("Sample", lazy="selectin")

    __table_args__ = (
        CheckConstraint(_SOURCE_TYPE_CHECK, name="ck_xref_samples_source_type"),
        CheckConstraint("fpkm >= 0", name="ck_xref_samples_fpkm"),
        # One value per feature and sample
        UniqueConstraint("source_type", "source_id", "sample_id", name="uq_xref_samples_source_sample"),
        Index("idx_xref_samples_source", "source_type", "source_id"),
    )

    @validates("fpkm")
    def _validate_fpkm(self, key, value):
        return validate_fpkm(value)

    def __repr__(self):
        return (
            f"<ExpressionLink(id={self.id}, {self.source_type}={self.source_id}, "
            f"sample_id={self.sample_id}, fpkm={self.fpkm})>"
        )


class FeatureXref(LinkMixin, Base):
    """Feature -> external database cross-reference (no measurement)."""

    __tablename__ = "xref_features"

    default_order = "external_db_id"

    external_db_id = Column(Integer, ForeignKey("external_dbs.id"), nullable=False, index=True)
    dbprimary_acc = Column(String(100), nullable=True)  # accession in the external db, e.g. "PF00069"
    display_label = Column(String(255), nullable=True)

    target_id = synonym("external_db_id")

    external_db = relationship("ExternalDb", lazy="selectin")

    __table_args__ = (
        CheckConstraint(_SOURCE_TYPE_CHECK, name="ck_xref_features_source_type"),
        Index("idx_xref_features_source", "source_type", "source_id"),
    )

    def __repr__(self):
        return (
            f"<FeatureXref(id={self.id}, {self.source_type}={self.source_id}, "
            f"external_db_id={self.external_db_id}, acc={self.dbprimary_acc})>"
        )


class AlignFeature(LinkMixin, Base):
    """
    Aligned-feature prediction on a feature (motif hit, miRNA target site...).
    No default ordering.
    """

    __tablename__ = "align_features"

    external_db_id = Column(Integer, ForeignKey("external_dbs.id"), nullable=False, index=True)
    hit_name = Column(String(100), nullable=True)
    seq_start = Column(Integer, nullable=True)
    seq_end = Column(Integer, nullable=True)
    score = Column(Float, nullable=True)
    evalue = Column(Float, nullable=True)

    target_id = synonym("external_db_id")

    external_db = relationship("ExternalDb", lazy="selectin")

    __table_args__ = (
        CheckConstraint(_SOURCE_TYPE_CHECK, name="ck_align_features_source_type"),
        Index("idx_align_features_source", "source_type", "source_id"),
    )

    def __repr__(self):
        return (
            f"<AlignFeature(id={self.id}, {self.source_type}={self.source_id}, "
            f"hit_name={self.hit_name})>"
        )
