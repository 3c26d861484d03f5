from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from expression_db.database import get_db
from expression_db.models import Dataset, Genome
from expression_db.schemas import feature as feature_schemas
from expression_db.schemas import genome as schemas
from expression_db.schemas import link as link_schemas
from expression_db.schemas.errors import ERROR_RESPONSE_404_EXAMPLE
from expression_db.services import features
from expression_db.store import Store

router = APIRouter()


# =============================================================================
# Genomes
# =============================================================================

@router.get("/genomes", response_model=List[schemas.Genome])
async def list_genomes(db: AsyncSession = Depends(get_db)):
    """List all genomes, ordered by species name."""
    return await Store(db).find_all(Genome, order_by=Genome.name)


@router.get(
    "/genomes/by-name/{name}",
    response_model=schemas.Genome,
    responses={404: ERROR_RESPONSE_404_EXAMPLE},
)
async def get_genome_by_name(name: str, db: AsyncSession = Depends(get_db)):
    """Get a genome by species name (e.g. `homo_sapiens`)."""
    return await features.get_genome_by_name(Store(db), name)


@router.get(
    "/genomes/{genome_id}",
    response_model=schemas.Genome,
    responses={404: ERROR_RESPONSE_404_EXAMPLE},
)
async def get_genome(genome_id: int, db: AsyncSession = Depends(get_db)):
    """Get a specific genome by ID."""
    return await features.get_genome(Store(db), genome_id)


@router.get(
    "/genomes/{genome_id}/genes",
    response_model=List[feature_schemas.Feature],
    responses={404: ERROR_RESPONSE_404_EXAMPLE},
)
async def list_genome_genes(genome_id: int, db: AsyncSession = Depends(get_db)):
    """Reference genes of a genome."""
    store = Store(db)
    genome = await features.get_genome(store, genome_id)
    genes = await features.genes_for_genome(store, genome)
    return [feature_schemas.Feature.from_model(gene) for gene in genes]


# =============================================================================
# Datasets and samples
# =============================================================================

@router.get("/datasets", response_model=List[schemas.Dataset])
async def list_datasets(db: AsyncSession = Depends(get_db)):
    """List all datasets."""
    return await Store(db).find_all(Dataset, order_by=Dataset.id)


@router.get(
    "/datasets/{dataset_id}",
    response_model=schemas.Dataset,
    responses={404: ERROR_RESPONSE_404_EXAMPLE},
)
async def get_dataset(dataset_id: int, db: AsyncSession = Depends(get_db)):
    """Get a specific dataset by ID."""
    return await features.get_dataset(Store(db), dataset_id)


@router.get(
    "/datasets/{dataset_id}/samples",
    response_model=List[schemas.Sample],
    responses={404: ERROR_RESPONSE_404_EXAMPLE},
)
async def list_dataset_samples(dataset_id: int, db: AsyncSession = Depends(get_db)):
    """Samples of a dataset, alphabetical by name."""
    store = Store(db)
    dataset = await features.get_dataset(store, dataset_id)
    return await features.samples_for_dataset(store, dataset)


@router.get(
    "/samples/{sample_id}",
    response_model=schemas.Sample,
    responses={404: ERROR_RESPONSE_404_EXAMPLE},
)
async def get_sample(sample_id: int, db: AsyncSession = Depends(get_db)):
    """Get a specific sample by ID."""
    return await features.get_sample(Store(db), sample_id)


@router.get(
    "/samples/{sample_id}/expression",
    response_model=List[link_schemas.ExpressionLink],
    responses={404: ERROR_RESPONSE_404_EXAMPLE},
)
async def list_sample_expression(sample_id: int, db: AsyncSession = Depends(get_db)):
    """Every expression value measured in a sample, across all feature kinds."""
    store = Store(db)
    sample = await features.get_sample(store, sample_id)
    links = await features.expression_for_sample(store, sample)
    return [link_schemas.ExpressionLink.from_model(link) for link in links]
