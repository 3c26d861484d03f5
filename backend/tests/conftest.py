"""
Test Configuration and Fixtures for Expression DB

=== DATABASE ===
Every test gets a fresh in-memory SQLite database (aiosqlite + StaticPool),
created from the same SQLAlchemy models the service uses against PostgreSQL.

=== SEEDED DATA (expression_data fixture) ===

    genome homo_sapiens, annotation ensembl
    dataset D1 "body_map":    samples liver, brain, heart
    dataset D2 "brain_atlas": sample cortex

    gene G1 ENSG00000121101         liver=10  brain=0  heart=30  (D1), cortex=5 (D2)
    gene G2 ENSG00000000003         no expression
    transcript T1 ENST00000240045   liver=7   heart=7            (D1)
    cufflinks gene XLOC_000001 in D1  liver=3
    cufflinks gene XLOC_000001 in D2  (same accession, different model)
    cufflinks transcript TCONS_00000001 (of the D1 XLOC_000001)

G1, T1 and the D1 cufflinks gene all have primary key 1 in their own tables,
so any resolver that ignores source_type mixes their links up.
"""

from types import SimpleNamespace
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from expression_db.database import Base, get_db, init_db
from expression_db.main import app
from expression_db.models import (
    AlignFeature,
    Annotation,
    CufflinksGene,
    CufflinksTranscript,
    Dataset,
    ExpressionLink,
    ExternalDb,
    FeatureXref,
    Gene,
    Genome,
    Sample,
    Transcript,
)
from expression_db.store import Store


# =============================================================================
# DATABASE FIXTURES - SQLite In-Memory for Fast Testing
# =============================================================================


@pytest_asyncio.fixture(scope="function")
async def db_engine():
    """
    In-memory SQLite engine with all tables created.

    StaticPool keeps the single in-memory connection alive for every
    session of the test.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    await init_db(engine)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """Database session for one test; uncommitted work is rolled back afterwards."""
    session_maker = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with session_maker() as session:
        yield session
        await session.rollback()


@pytest.fixture
def store(db_session: AsyncSession) -> Store:
    return Store(db_session)


# =============================================================================
# MODEL FIXTURES - Seeded Expression Database
# =============================================================================


@pytest_asyncio.fixture
async def expression_data(db_session: AsyncSession) -> SimpleNamespace:
    """
    Seed the database described in the module docstring.

    The session is cleared after seeding so tests load rows the way the
    service does, instead of reusing the objects built here.
    """
    genome = Genome(name="homo_sapiens", assembly="GRCh37")
    annotation = Annotation(source="ensembl", release="75")
    d1 = Dataset(name="body_map", description="Illumina Body Map 2.0")
    d2 = Dataset(name="brain_atlas", description="Cortex only")
    db_session.add_all([genome, annotation, d1, d2])
    await db_session.flush()

    liver = Sample(name="liver", dataset=d1)
    brain = Sample(name="brain", dataset=d1)
    heart = Sample(name="heart", dataset=d1)
    cortex = Sample(name="cortex", dataset=d2)
    db_session.add_all([liver, brain, heart, cortex])

    g1 = Gene(stable_id="ENSG00000121101", display_label="TEX14", biotype="protein_coding",
              genome=genome, annotation=annotation)
    g2 = Gene(stable_id="ENSG00000000003", display_label="TSPAN6", biotype="protein_coding",
              genome=genome, annotation=annotation)
    db_session.add_all([g1, g2])
    await db_session.flush()

    t1 = Transcript(stable_id="ENST00000240045", biotype="protein_coding", gene=g1)
    cg_d1 = CufflinksGene(accession="XLOC_000001", dataset=d1, genome=genome,
                          annotation=annotation, ref_id=g1.stable_id, locus="17:56600000-56770000")
    cg_d2 = CufflinksGene(accession="XLOC_000001", dataset=d2, genome=genome, annotation=annotation)
    db_session.add_all([t1, cg_d1, cg_d2])
    await db_session.flush()

    ct = CufflinksTranscript(accession="TCONS_00000001", gene=cg_d1, dataset_id=d1.id,
                             ref_id=t1.stable_id, class_code="=")
    pfam = ExternalDb(name="Pfam", release="27.0")
    mirbase = ExternalDb(name="miRBase", release="20")
    db_session.add_all([ct, pfam, mirbase])
    await db_session.flush()

    links = [
        # Inserted out of sample-id order on purpose
        ExpressionLink(source_type="gene", source_id=g1.id, sample=liver, fpkm=10.0),
        ExpressionLink(source_type="gene", source_id=g1.id, sample=heart, fpkm=30.0),
        ExpressionLink(source_type="gene", source_id=g1.id, sample=brain, fpkm=0.0),
        ExpressionLink(source_type="gene", source_id=g1.id, sample=cortex, fpkm=5.0),
        ExpressionLink(source_type="transcript", source_id=t1.id, sample=liver, fpkm=7.0),
        ExpressionLink(source_type="transcript", source_id=t1.id, sample=heart, fpkm=7.0),
        ExpressionLink(source_type="cufflinks_gene", source_id=cg_d1.id, sample=liver, fpkm=3.0),
    ]
    xrefs = [
        FeatureXref(source_type="gene", source_id=g1.id, external_db=mirbase,
                    dbprimary_acc="MIMAT0000076", display_label="hsa-miR-21-5p"),
        FeatureXref(source_type="gene", source_id=g1.id, external_db=pfam,
                    dbprimary_acc="PF00069", display_label="Pkinase"),
        FeatureXref(source_type="transcript", source_id=t1.id, external_db=pfam,
                    dbprimary_acc="PF07714", display_label="Pkinase_Tyr"),
    ]
    aligns = [
        AlignFeature(source_type="gene", source_id=g1.id, external_db=mirbase,
                     hit_name="hsa-miR-21-5p", seq_start=120, seq_end=141, score=152.0, evalue=1e-5),
    ]
    db_session.add_all(links + xrefs + aligns)
    await db_session.commit()

    data = SimpleNamespace(
        genome=genome, annotation=annotation, d1=d1, d2=d2,
        liver=liver, brain=brain, heart=heart, cortex=cortex,
        g1=g1, g2=g2, t1=t1, cg_d1=cg_d1, cg_d2=cg_d2, ct=ct,
        pfam=pfam, mirbase=mirbase,
    )
    db_session.expunge_all()
    return data


# =============================================================================
# API FIXTURES - FastAPI Test Client
# =============================================================================


@pytest_asyncio.fixture
async def test_client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """
    httpx AsyncClient wired to the FastAPI app.

    The app's get_db dependency is overridden so API calls use the test
    session (and see the seeded data).
    """

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
