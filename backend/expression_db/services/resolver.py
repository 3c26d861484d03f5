"""
Polymorphic Link Resolver

This module bridges the shared link tables (xref_samples, xref_features,
align_features) and the four feature tables they point into.

=== HOW A LINK ROW NAMES ITS FEATURE ===

A link row stores two columns for its source:

    source_type = "transcript"    <- which table
    source_id   = 7               <- primary key inside that table

The four feature tables have independent id spaces. Gene 7, transcript 7
and cufflinks gene 7 are unrelated features, so:

- Forward (link -> feature) dispatches on source_type first, then loads
  source_id from that one table.
- Reverse (feature -> links) filters on BOTH columns. Filtering on
  source_id alone would merge the links of gene 7 and transcript 7.

=== WRITES ===

insert_link() is the only write path. It rejects unknown discriminators and
references to rows that don't exist before anything reaches the session,
so a dangling link is never created.
"""

import logging
from typing import Any, Dict, List, Tuple, Type

from expression_db.core.exceptions import (
    AppException,
    DanglingReferenceError,
    ExternalDbNotFoundError,
    InvalidDiscriminatorError,
    LinkNotFoundError,
    SampleNotFoundError,
)
from expression_db.core.kinds import FeatureKind
from expression_db.core.validators import validate_fpkm, validate_source_type
from expression_db.models import (
    FEATURE_MODELS,
    AlignFeature,
    ExpressionLink,
    ExternalDb,
    Feature,
    FeatureXref,
    Link,
    Sample,
)
from expression_db.store import Store

logger = logging.getLogger(__name__)


# Link table -> (target model, target column, error raised when the target is missing)
LINK_TARGETS: Dict[Type[Link], Tuple[type, str, Type[AppException]]] = {
    ExpressionLink: (Sample, "sample_id", SampleNotFoundError),
    FeatureXref: (ExternalDb, "external_db_id", ExternalDbNotFoundError),
    AlignFeature: (ExternalDb, "external_db_id", ExternalDbNotFoundError),
}


def feature_kind(feature: Feature) -> FeatureKind:
    """Kind tag of a feature instance (raises for anything that isn't a feature)."""
    kind = getattr(type(feature), "kind", None)
    if not isinstance(kind, FeatureKind):
        raise InvalidDiscriminatorError(source_type=type(feature).__name__)
    return kind


# =============================================================================
# Forward: link row -> feature
# =============================================================================

async def resolve_forward(store: Store, link: Link) -> Feature:
    """
    Return the feature a link row points at.

    **Raises**:
    - InvalidDiscriminatorError: source_type isn't one of the four kinds
    - DanglingReferenceError: no row with source_id in the addressed table

    Both are ResolutionError subclasses.
    """
    kind = validate_source_type(link.source_type)
    model = FEATURE_MODELS[kind]

    feature = await store.find_by_id(model, link.source_id)
    if feature is None:
        logger.warning(
            f"Dangling {link.__tablename__} row {link.id}: "
            f"no {kind.value} with id {link.source_id}"
        )
        raise DanglingReferenceError(
            source_type=kind.value,
            source_id=link.source_id,
            link_id=link.id,
            table=link.__tablename__,
        )
    return feature


# =============================================================================
# Reverse: feature -> link rows
# =============================================================================

async def resolve_reverse(
    store: Store,
    feature: Feature,
    link_model: Type[Link] = ExpressionLink,
) -> List[Link]:
    """
    Return every row of `link_model` that references `feature`.

    **Ordering**:
    - ExpressionLink: ascending sample id
    - FeatureXref: ascending external db id
    - AlignFeature: none (storage order)
    """
    kind = feature_kind(feature)

    order_by = None
    if link_model.default_order:
        order_by = (getattr(link_model, link_model.default_order), link_model.id)

    return await store.find_where(
        link_model,
        link_model.source_type == kind.value,
        link_model.source_id == feature.id,
        order_by=order_by,
    )


async def get_link(store: Store, link_model: Type[Link], link_id: int) -> Link:
    """Load a link row by primary key (LinkNotFoundError when absent)."""
    link = await store.find_by_id(link_model, link_id)
    if link is None:
        raise LinkNotFoundError(table=link_model.__tablename__, link_id=link_id)
    return link


# =============================================================================
# Insert (the only write path)
# =============================================================================

async def insert_link(
    store: Store,
    link_model: Type[Link],
    *,
    source_type: Any,
    source_id: int,
    **fields: Any,
) -> Link:
    """
    Insert a link row after checking the discriminator and both references.

    **Raises** (nothing is added to the session in any of these cases):
    - InvalidDiscriminatorError: source_type outside the closed set
    - DanglingReferenceError: no feature with source_id of that kind
    - SampleNotFoundError / ExternalDbNotFoundError: missing target row
    - InvalidMeasurementError: negative FPKM on an expression link

    **Example**:
    ```python
    link = await insert_link(
        store, ExpressionLink,
        source_type="gene", source_id=gene.id, sample_id=liver.id, fpkm=12.5,
    )
    await db.commit()
    ```
    """
    table = link_model.__tablename__

    try:
        kind = validate_source_type(source_type)
    except InvalidDiscriminatorError:
        logger.warning(
            f"Rejected {table} insert: invalid source_type {source_type!r}",
            extra={"source_id": source_id},
        )
        raise

    if link_model is ExpressionLink:
        fields["fpkm"] = validate_fpkm(fields.get("fpkm"))

    feature = await store.find_by_id(FEATURE_MODELS[kind], source_id)
    if feature is None:
        logger.warning(f"Rejected {table} insert: no {kind.value} with id {source_id}")
        raise DanglingReferenceError(source_type=kind.value, source_id=source_id, table=table)

    target_model, target_column, not_found = LINK_TARGETS[link_model]
    target_id = fields.get(target_column)
    if target_id is None or await store.find_by_id(target_model, target_id) is None:
        logger.warning(f"Rejected {table} insert: {target_column}={target_id} does not exist")
        raise not_found(**{target_column: target_id})

    link = await store.insert(link_model, source_type=kind.value, source_id=source_id, **fields)
    logger.info(f"Inserted {table} row {link.id} for {kind.value} {source_id}")
    return link
