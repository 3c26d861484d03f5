"""
Expression Filtering and Ordering

**What**: Narrow a feature's expression links to one dataset or one sample
**Why**: The resolver returns every link of a feature; most questions are
asked per experiment ("how is this gene expressed across the tissues of D1?")
**How**: Two pure filters over an already-resolved list, plus async
wrappers that resolve first and then filter

The pure filters never mutate their input and cache nothing, so calling
them repeatedly with the same arguments gives equal results.
"""

from typing import Iterable, List

from expression_db.models import Dataset, ExpressionLink, Feature, Sample
from expression_db.services.resolver import resolve_reverse
from expression_db.store import Store


def links_for_dataset(links: Iterable[ExpressionLink], dataset: Dataset) -> List[ExpressionLink]:
    """
    Keep links whose sample belongs to `dataset`, ordered by sample name.

    Datasets are compared by primary key. The sort is stable, so samples
    sharing a name keep their incoming (sample id) order.
    """
    selected = [link for link in links if link.sample.dataset_id == dataset.id]
    return sorted(selected, key=lambda link: link.sample.name)


def links_for_sample(links: Iterable[ExpressionLink], sample: Sample) -> List[ExpressionLink]:
    """Keep links measured in `sample` (0 or 1 expected, returned as a list)."""
    return [link for link in links if link.sample_id == sample.id]


async def xrefs_by_dataset(store: Store, feature: Feature, dataset: Dataset) -> List[ExpressionLink]:
    """
    Expression links of `feature` within `dataset`, ordered by sample name.

    A feature with no expression in the dataset gives an empty list.
    """
    links = await resolve_reverse(store, feature, ExpressionLink)
    return links_for_dataset(links, dataset)


async def xrefs_by_sample(store: Store, feature: Feature, sample: Sample) -> List[ExpressionLink]:
    """Expression links of `feature` in one sample."""
    links = await resolve_reverse(store, feature, ExpressionLink)
    return links_for_sample(links, sample)
