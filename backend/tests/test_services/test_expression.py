"""
Tests for expression filtering by dataset and sample

The pure filters are checked on hand-built link lists (no database);
the async wrappers on the seeded database.
"""

from types import SimpleNamespace

import pytest

from expression_db.models import CufflinksGene, Dataset, Gene, Sample, Transcript
from expression_db.services import expression, resolver


def make_link(link_id, sample_id, sample_name, dataset_id, fpkm):
    sample = SimpleNamespace(id=sample_id, name=sample_name, dataset_id=dataset_id)
    return SimpleNamespace(id=link_id, sample_id=sample_id, sample=sample, fpkm=fpkm)


# =============================================================================
# Pure filters
# =============================================================================


def test_links_for_dataset_orders_by_sample_name():
    links = [
        make_link(1, 1, "liver", 1, 10.0),
        make_link(2, 2, "brain", 1, 0.0),
        make_link(3, 3, "heart", 1, 30.0),
        make_link(4, 4, "cortex", 2, 5.0),
    ]

    selected = expression.links_for_dataset(links, SimpleNamespace(id=1))

    assert [link.sample.name for link in selected] == ["brain", "heart", "liver"]


def test_links_for_dataset_keeps_input_order_for_equal_names():
    """Two samples called 'liver' stay in sample-id order."""
    links = [
        make_link(1, 1, "liver", 1, 1.0),
        make_link(2, 2, "brain", 1, 2.0),
        make_link(3, 3, "liver", 1, 3.0),
    ]

    selected = expression.links_for_dataset(links, SimpleNamespace(id=1))

    assert [link.id for link in selected] == [2, 1, 3]


def test_links_for_dataset_does_not_mutate_input():
    links = [make_link(1, 2, "b", 1, 1.0), make_link(2, 1, "a", 1, 1.0)]
    original = list(links)

    first = expression.links_for_dataset(links, SimpleNamespace(id=1))
    second = expression.links_for_dataset(links, SimpleNamespace(id=1))

    assert links == original
    assert first == second


def test_links_for_dataset_with_no_match():
    links = [make_link(1, 1, "liver", 1, 10.0)]
    assert expression.links_for_dataset(links, SimpleNamespace(id=2)) == []
    assert expression.links_for_dataset([], SimpleNamespace(id=1)) == []


def test_links_for_sample():
    links = [make_link(1, 1, "liver", 1, 10.0), make_link(2, 2, "brain", 1, 0.0)]

    assert [link.id for link in expression.links_for_sample(links, SimpleNamespace(id=2))] == [2]
    assert expression.links_for_sample(links, SimpleNamespace(id=9)) == []


# =============================================================================
# Against the database
# =============================================================================


@pytest.mark.asyncio
async def test_xrefs_by_dataset(store, expression_data):
    gene = await store.find_by_id(Gene, expression_data.g1.id)
    d1 = await store.find_by_id(Dataset, expression_data.d1.id)
    d2 = await store.find_by_id(Dataset, expression_data.d2.id)

    body_map = await expression.xrefs_by_dataset(store, gene, d1)
    brain_atlas = await expression.xrefs_by_dataset(store, gene, d2)

    assert [(link.sample.name, link.fpkm) for link in body_map] == [
        ("brain", 0.0),
        ("heart", 30.0),
        ("liver", 10.0),
    ]
    assert [(link.sample.name, link.fpkm) for link in brain_atlas] == [("cortex", 5.0)]


@pytest.mark.asyncio
async def test_xrefs_by_dataset_is_idempotent(store, expression_data):
    """Two calls with the same arguments give the same ordered rows."""
    gene = await store.find_by_id(Gene, expression_data.g1.id)
    d1 = await store.find_by_id(Dataset, expression_data.d1.id)

    first = await expression.xrefs_by_dataset(store, gene, d1)
    second = await expression.xrefs_by_dataset(store, gene, d1)

    assert [link.id for link in first] == [link.id for link in second]
    assert [(link.sample.name, link.fpkm) for link in first] == [
        (link.sample.name, link.fpkm) for link in second
    ]


@pytest.mark.asyncio
async def test_xrefs_by_dataset_is_subset_of_reverse(store, expression_data):
    gene = await store.find_by_id(Gene, expression_data.g1.id)
    d1 = await store.find_by_id(Dataset, expression_data.d1.id)

    everything = await resolver.resolve_reverse(store, gene)
    subset = await expression.xrefs_by_dataset(store, gene, d1)

    assert {link.id for link in subset} <= {link.id for link in everything}
    assert all(link.sample.dataset_id == d1.id for link in subset)


@pytest.mark.asyncio
async def test_xrefs_by_dataset_empty(store, expression_data):
    """No expression in the dataset is an empty list, not an error."""
    unexpressed = await store.find_by_id(Gene, expression_data.g2.id)
    transcript = await store.find_by_id(Transcript, expression_data.t1.id)
    d1 = await store.find_by_id(Dataset, expression_data.d1.id)
    d2 = await store.find_by_id(Dataset, expression_data.d2.id)

    assert await expression.xrefs_by_dataset(store, unexpressed, d1) == []
    assert await expression.xrefs_by_dataset(store, transcript, d2) == []


@pytest.mark.asyncio
async def test_xrefs_by_sample(store, expression_data):
    gene = await store.find_by_id(Gene, expression_data.g1.id)
    xloc = await store.find_by_id(CufflinksGene, expression_data.cg_d1.id)
    heart = await store.find_by_id(Sample, expression_data.heart.id)
    liver = await store.find_by_id(Sample, expression_data.liver.id)

    assert [link.fpkm for link in await expression.xrefs_by_sample(store, gene, heart)] == [30.0]
    assert [link.fpkm for link in await expression.xrefs_by_sample(store, xloc, liver)] == [3.0]
    assert await expression.xrefs_by_sample(store, xloc, heart) == []
