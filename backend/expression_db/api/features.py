from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
import math

from expression_db.core.kinds import FeatureKind
from expression_db.database import get_db
from expression_db.models import AlignFeature, ExpressionLink, FeatureXref
from expression_db.schemas import feature as feature_schemas
from expression_db.schemas import link as link_schemas
from expression_db.schemas.errors import (
    ERROR_RESPONSE_400_EXAMPLE,
    ERROR_RESPONSE_404_EXAMPLE,
)
from expression_db.services import entropy, expression, features, resolver
from expression_db.store import Store

router = APIRouter()


@router.get(
    "/features/{kind}/lookup/{identifier}",
    response_model=feature_schemas.Feature,
    responses={400: ERROR_RESPONSE_400_EXAMPLE, 404: ERROR_RESPONSE_404_EXAMPLE},
)
async def lookup_feature(
    kind: FeatureKind,
    identifier: str,
    dataset_id: Optional[int] = Query(None, gt=0, description="Required for cufflinks kinds"),
    db: AsyncSession = Depends(get_db)
):
    """
    Look a feature up by stable id or accession.

    **Examples**:
    ```
    GET /features/gene/lookup/ENSG00000121101
    GET /features/cufflinks_gene/lookup/XLOC_000001?dataset_id=2
    ```
    """
    store = Store(db)
    dataset = await features.get_dataset(store, dataset_id) if dataset_id is not None else None
    feature = await features.find_feature(store, kind, identifier, dataset)
    return feature_schemas.Feature.from_model(feature)


@router.get(
    "/features/{kind}/{feature_id}",
    response_model=feature_schemas.Feature,
    responses={404: ERROR_RESPONSE_404_EXAMPLE},
)
async def get_feature(
    kind: FeatureKind,
    feature_id: int,
    db: AsyncSession = Depends(get_db)
):
    """Get a feature by kind and numeric id."""
    feature = await features.get_feature(Store(db), kind, feature_id)
    return feature_schemas.Feature.from_model(feature)


@router.get(
    "/features/{kind}/{feature_id}/expression",
    response_model=List[link_schemas.ExpressionLink],
    responses={404: ERROR_RESPONSE_404_EXAMPLE},
)
async def get_feature_expression(
    kind: FeatureKind,
    feature_id: int,
    dataset_id: Optional[int] = Query(None, gt=0, description="Only samples of this dataset"),
    sample_id: Optional[int] = Query(None, gt=0, description="Only this sample"),
    db: AsyncSession = Depends(get_db)
):
    """
    Expression values (FPKM) of a feature.

    **Query Parameters**:
    - dataset_id: keep samples of this dataset, ordered by sample name
    - sample_id: keep only this sample (0 or 1 result)
    - neither: every link, ordered by sample id

    A feature without expression in the dataset/sample returns `[]`.
    """
    store = Store(db)
    feature = await features.get_feature(store, kind, feature_id)
    links = await resolver.resolve_reverse(store, feature, ExpressionLink)

    if dataset_id is not None:
        dataset = await features.get_dataset(store, dataset_id)
        links = expression.links_for_dataset(links, dataset)
    if sample_id is not None:
        sample = await features.get_sample(store, sample_id)
        links = expression.links_for_sample(links, sample)

    return [link_schemas.ExpressionLink.from_model(link) for link in links]


@router.get(
    "/features/{kind}/{feature_id}/entropy",
    response_model=link_schemas.Entropy,
    responses={404: ERROR_RESPONSE_404_EXAMPLE},
)
async def get_feature_entropy(
    kind: FeatureKind,
    feature_id: int,
    dataset_id: int = Query(..., gt=0),
    db: AsyncSession = Depends(get_db)
):
    """
    Tissue-specificity entropy of a feature across a dataset's samples.

    **Interpretation**:
    - 0.0: expressed in a single sample, or not at all
    - max_entropy (= ln n): identical expression in all n samples
    """
    store = Store(db)
    feature = await features.get_feature(store, kind, feature_id)
    dataset = await features.get_dataset(store, dataset_id)

    links = await expression.xrefs_by_dataset(store, feature, dataset)
    n = len(links)

    return link_schemas.Entropy(
        kind=kind,
        feature_id=feature.id,
        dataset_id=dataset.id,
        sample_count=n,
        entropy=await entropy.entropy_by_dataset(store, feature, dataset, links=links),
        max_entropy=math.log(n) if n > 0 else 0.0,
    )


@router.get(
    "/features/{kind}/{feature_id}/xrefs",
    response_model=List[link_schemas.FeatureXref],
    responses={404: ERROR_RESPONSE_404_EXAMPLE},
)
async def get_feature_xrefs(
    kind: FeatureKind,
    feature_id: int,
    db: AsyncSession = Depends(get_db)
):
    """External database cross-references of a feature, ordered by external db id."""
    store = Store(db)
    feature = await features.get_feature(store, kind, feature_id)
    return await resolver.resolve_reverse(store, feature, FeatureXref)


@router.get(
    "/features/{kind}/{feature_id}/align-features",
    response_model=List[link_schemas.AlignFeature],
    responses={404: ERROR_RESPONSE_404_EXAMPLE},
)
async def get_feature_align_features(
    kind: FeatureKind,
    feature_id: int,
    db: AsyncSession = Depends(get_db)
):
    """Aligned-feature predictions (motif/target hits) on a feature."""
    store = Store(db)
    feature = await features.get_feature(store, kind, feature_id)
    return await resolver.resolve_reverse(store, feature, AlignFeature)
