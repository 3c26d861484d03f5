"""
Expression Entropy (Tissue Specificity)

=== BIOINFORMATICS PRIMER ===

How specific is a gene to one tissue? Normalize its FPKM values across
the samples of a dataset into a probability distribution and take the
Shannon entropy:

    p_i = fpkm_i / sum(fpkm)
    H   = -sum(p_i * ln(p_i))        (terms with p_i == 0 contribute 0)

- H == 0: all expression in a single sample (tissue-specific), or the
  feature is undetected everywhere
- H == ln(n): identical expression in all n samples (housekeeping-like)

Example: liver=10, brain=0, heart=30 -> p = [0.25, 0, 0.75]
H = -(0.25 ln 0.25 + 0.75 ln 0.75) ~= 0.5623

=== END PRIMER ===
"""

import math
from typing import Iterable, List, Optional

from expression_db.core.validators import validate_fpkm
from expression_db.models import Dataset, ExpressionLink, Feature, Sample
from expression_db.services.expression import xrefs_by_dataset
from expression_db.services.resolver import resolve_reverse
from expression_db.store import Store


def shannon_entropy(values: Iterable[float]) -> float:
    """
    Natural-log Shannon entropy of non-negative values after normalizing them.

    **Returns**: 0.0 for an empty input or when every value is 0
    **Raises**: InvalidMeasurementError for negative values
    """
    values = [validate_fpkm(value) for value in values]
    total = sum(values)
    if total == 0:
        return 0.0

    entropy = 0.0
    for value in values:
        p = value / total
        if p > 0:
            entropy -= p * math.log(p)
    return entropy


def expression_entropy(links: Iterable[ExpressionLink]) -> float:
    """Entropy of the FPKM values carried by a set of expression links."""
    return shannon_entropy(link.fpkm for link in links)


async def entropy_by_dataset(
    store: Store,
    feature: Feature,
    dataset: Dataset,
    links: Optional[List[ExpressionLink]] = None,
) -> float:
    """
    Tissue-specificity entropy of `feature` across the samples of `dataset`.

    A feature without expression in the dataset scores 0.0.
    `links` takes the result of `xrefs_by_dataset` when the caller already
    has it (the API reports the sample count alongside).
    """
    if links is None:
        links = await xrefs_by_dataset(store, feature, dataset)
    return expression_entropy(links)


async def entropy_for_samples(store: Store, feature: Feature, samples: Iterable[Sample]) -> float:
    """
    Entropy of `feature` over an arbitrary set of samples (possibly spanning datasets).

    Samples without a measurement for the feature contribute nothing.
    """
    sample_ids = {sample.id for sample in samples}
    links = await resolve_reverse(store, feature, ExpressionLink)
    selected: List[ExpressionLink] = [link for link in links if link.sample_id in sample_ids]
    return expression_entropy(selected)
