"""
Feature Lookup and Relation Traversal

**What**: Find features by numeric id, stable id or dataset-scoped accession,
and walk the foreign-key relations (genome -> genes, gene -> transcripts,
dataset -> samples, sample -> expression)
**Why**: Callers pick a feature before asking for its expression; traversal
must be a plain read with explicit queries (no lazy loads from async code)

**Identifier rules**:
- gene / transcript: looked up by Ensembl stable id (ENSG..., ENST...)
- cufflinks_gene / cufflinks_transcript: looked up by accession (XLOC_...,
  TCONS_...) and ONLY together with a dataset, because the same accession
  names different models in different datasets
"""

import logging
from typing import List, Optional

from expression_db.core.exceptions import (
    DatasetNotFoundError,
    DatasetScopeRequiredError,
    FeatureNotFoundError,
    GenomeNotFoundError,
    SampleNotFoundError,
)
from expression_db.core.kinds import FeatureKind, FeatureRef
from expression_db.models import (
    FEATURE_MODELS,
    CufflinksGene,
    CufflinksTranscript,
    Dataset,
    ExpressionLink,
    Feature,
    Gene,
    Genome,
    Sample,
    Transcript,
)
from expression_db.store import Store

logger = logging.getLogger(__name__)


# =============================================================================
# Feature lookup
# =============================================================================

async def get_feature(store: Store, kind: FeatureKind, feature_id: int) -> Feature:
    """Load a feature of `kind` by primary key."""
    kind = FeatureKind(kind)
    feature = await store.find_by_id(FEATURE_MODELS[kind], feature_id)
    if feature is None:
        raise FeatureNotFoundError(kind=kind.value, feature_id=feature_id)
    return feature


async def get_feature_by_ref(store: Store, ref: FeatureRef) -> Feature:
    """
    Load the feature a FeatureRef names.

    For cufflinks kinds the stored dataset must match ref.dataset_id;
    a model with the same local id in another dataset is a different feature.
    """
    feature = await get_feature(store, ref.kind, ref.id)
    if ref.kind.is_dataset_scoped and feature.dataset_id != ref.dataset_id:
        raise FeatureNotFoundError(
            kind=ref.kind.value, identifier=str(ref.id), dataset_id=ref.dataset_id
        )
    return feature


async def find_feature(
    store: Store,
    kind: FeatureKind,
    identifier: str,
    dataset: Optional[Dataset] = None,
) -> Feature:
    """
    Look a feature up by its external identifier.

    **Args**:
    - kind: feature kind
    - identifier: stable id (reference kinds) or accession (cufflinks kinds)
    - dataset: required for cufflinks kinds, ignored otherwise

    **Raises**:
    - DatasetScopeRequiredError: cufflinks kind without a dataset
    - FeatureNotFoundError: nothing matches

    **Example**:
    ```python
    gene = await find_feature(store, FeatureKind.GENE, "ENSG00000121101")
    xloc = await find_feature(store, FeatureKind.CUFFLINKS_GENE, "XLOC_000001", dataset)
    ```
    """
    kind = FeatureKind(kind)
    model = FEATURE_MODELS[kind]

    if kind.is_dataset_scoped:
        if dataset is None:
            raise DatasetScopeRequiredError(kind=kind.value)
        feature = await store.find_one_where(
            model,
            model.accession == identifier,
            model.dataset_id == dataset.id,
        )
        if feature is None:
            raise FeatureNotFoundError(kind=kind.value, identifier=identifier, dataset_id=dataset.id)
        return feature

    feature = await store.find_one_where(model, model.stable_id == identifier)
    if feature is None:
        raise FeatureNotFoundError(kind=kind.value, identifier=identifier)
    return feature


# =============================================================================
# Genomes, datasets, samples
# =============================================================================

async def get_genome(store: Store, genome_id: int) -> Genome:
    genome = await store.find_by_id(Genome, genome_id)
    if genome is None:
        raise GenomeNotFoundError(genome_id=genome_id)
    return genome


async def get_genome_by_name(store: Store, name: str) -> Genome:
    """Genome by species name, e.g. 'homo_sapiens'."""
    genome = await store.find_one_where(Genome, Genome.name == name)
    if genome is None:
        raise GenomeNotFoundError(name=name)
    return genome


async def get_dataset(store: Store, dataset_id: int) -> Dataset:
    dataset = await store.find_by_id(Dataset, dataset_id)
    if dataset is None:
        raise DatasetNotFoundError(dataset_id=dataset_id)
    return dataset


async def get_sample(store: Store, sample_id: int) -> Sample:
    sample = await store.find_by_id(Sample, sample_id)
    if sample is None:
        raise SampleNotFoundError(sample_id=sample_id)
    return sample


# =============================================================================
# Traversal
# =============================================================================

async def genes_for_genome(store: Store, genome: Genome) -> List[Gene]:
    return await store.find_where(Gene, Gene.genome_id == genome.id, order_by=Gene.id)


async def cufflinks_genes_for_genome(
    store: Store, genome: Genome, dataset: Optional[Dataset] = None
) -> List[CufflinksGene]:
    """Cufflinks models of a genome, optionally narrowed to one dataset."""
    criteria = [CufflinksGene.genome_id == genome.id]
    if dataset is not None:
        criteria.append(CufflinksGene.dataset_id == dataset.id)
    return await store.find_where(CufflinksGene, *criteria, order_by=CufflinksGene.id)


async def transcripts_for_gene(store: Store, gene: Gene) -> List[Transcript]:
    return await store.find_where(Transcript, Transcript.gene_id == gene.id, order_by=Transcript.id)


async def cufflinks_transcripts_for_gene(
    store: Store, gene: CufflinksGene
) -> List[CufflinksTranscript]:
    return await store.find_where(
        CufflinksTranscript,
        CufflinksTranscript.cufflinks_gene_id == gene.id,
        order_by=CufflinksTranscript.id,
    )


async def samples_for_dataset(store: Store, dataset: Dataset) -> List[Sample]:
    """Samples of a dataset, alphabetical by name."""
    return await store.find_where(
        Sample, Sample.dataset_id == dataset.id, order_by=(Sample.name, Sample.id)
    )


async def expression_for_sample(store: Store, sample: Sample) -> List[ExpressionLink]:
    """Every expression value measured in one sample, across all feature kinds."""
    return await store.find_where(
        ExpressionLink,
        ExpressionLink.sample_id == sample.id,
        order_by=(ExpressionLink.source_type, ExpressionLink.source_id),
    )


async def reference_gene_for(store: Store, gene: CufflinksGene) -> Optional[Gene]:
    """
    Reference gene a cufflinks model overlaps (via ref_id), if any.

    Returns None when ref_id is unset or names no known gene; this is the
    normal case for novel loci.
    """
    if not gene.ref_id:
        return None
    return await store.find_one_where(Gene, Gene.stable_id == gene.ref_id)
