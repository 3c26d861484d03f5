from enum import Enum

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from expression_db.database import get_db
from expression_db.models import AlignFeature, ExpressionLink, FeatureXref
from expression_db.schemas import feature as feature_schemas
from expression_db.schemas import link as schemas
from expression_db.schemas.errors import (
    ERROR_RESPONSE_400_EXAMPLE,
    ERROR_RESPONSE_404_EXAMPLE,
    ERROR_RESPONSE_409_EXAMPLE,
)
from expression_db.services import resolver
from expression_db.store import Store

router = APIRouter()


class LinkTable(str, Enum):
    """URL names of the three polymorphic link tables."""

    EXPRESSION_LINKS = "expression-links"
    FEATURE_XREFS = "feature-xrefs"
    ALIGN_FEATURES = "align-features"


LINK_TABLE_MODELS = {
    LinkTable.EXPRESSION_LINKS: ExpressionLink,
    LinkTable.FEATURE_XREFS: FeatureXref,
    LinkTable.ALIGN_FEATURES: AlignFeature,
}

_INSERT_ERRORS = {
    400: ERROR_RESPONSE_400_EXAMPLE,
    404: ERROR_RESPONSE_404_EXAMPLE,
    409: ERROR_RESPONSE_409_EXAMPLE,
}


@router.post(
    "/expression-links",
    response_model=schemas.ExpressionLink,
    status_code=status.HTTP_201_CREATED,
    responses=_INSERT_ERRORS,
)
async def create_expression_link(
    link_in: schemas.ExpressionLinkCreate,
    db: AsyncSession = Depends(get_db)
):
    """
    Store one expression value.

    **Rejected** (nothing is written):
    - source_type not in gene/transcript/cufflinks_gene/cufflinks_transcript → 400 INVALID_DISCRIMINATOR
    - no feature with source_id of that kind → 409 DANGLING_REFERENCE
    - unknown sample → 404 SAMPLE_NOT_FOUND
    """
    link = await resolver.insert_link(Store(db), ExpressionLink, **link_in.model_dump())
    await db.commit()
    await db.refresh(link, attribute_names=["sample"])
    return schemas.ExpressionLink.from_model(link)


@router.post(
    "/feature-xrefs",
    response_model=schemas.FeatureXref,
    status_code=status.HTTP_201_CREATED,
    responses=_INSERT_ERRORS,
)
async def create_feature_xref(
    xref_in: schemas.FeatureXrefCreate,
    db: AsyncSession = Depends(get_db)
):
    """Store an external database cross-reference for a feature."""
    xref = await resolver.insert_link(Store(db), FeatureXref, **xref_in.model_dump())
    await db.commit()
    return xref


@router.post(
    "/align-features",
    response_model=schemas.AlignFeature,
    status_code=status.HTTP_201_CREATED,
    responses=_INSERT_ERRORS,
)
async def create_align_feature(
    align_in: schemas.AlignFeatureCreate,
    db: AsyncSession = Depends(get_db)
):
    """Store an aligned-feature prediction for a feature."""
    align = await resolver.insert_link(Store(db), AlignFeature, **align_in.model_dump())
    await db.commit()
    return align


@router.get(
    "/{link_table}/{link_id}/feature",
    response_model=feature_schemas.Feature,
    responses={404: ERROR_RESPONSE_404_EXAMPLE, 409: ERROR_RESPONSE_409_EXAMPLE},
)
async def resolve_link_feature(
    link_table: LinkTable,
    link_id: int,
    db: AsyncSession = Depends(get_db)
):
    """
    Resolve a link row to the feature it points at.

    **Example**:
    ```
    GET /expression-links/15/feature
    → {"kind": "transcript", "id": 7, "identifier": "ENST00000240045", ...}
    ```

    A row pointing at a missing feature answers 409 DANGLING_REFERENCE.
    """
    store = Store(db)
    link = await resolver.get_link(store, LINK_TABLE_MODELS[link_table], link_id)
    feature = await resolver.resolve_forward(store, link)
    return feature_schemas.Feature.from_model(feature)
