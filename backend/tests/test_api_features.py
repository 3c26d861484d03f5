"""
Tests for Features API Endpoints

Tests cover:
- Lookup by kind + id and by stable id / accession
- Expression listing with dataset and sample filters
- Entropy endpoint
- Cross-references and aligned features
- Error responses (404 FEATURE_NOT_FOUND, 400 DATASET_SCOPE_REQUIRED, 422 unknown kind)
"""

import math

import pytest
from httpx import AsyncClient


# =============================================================================
# READ Tests - GET /features/{kind}/{id}
# =============================================================================


@pytest.mark.asyncio
async def test_get_gene(test_client: AsyncClient, expression_data):
    response = await test_client.get(f"/api/features/gene/{expression_data.g1.id}")

    assert response.status_code == 200
    data = response.json()
    assert data["kind"] == "gene"
    assert data["identifier"] == "ENSG00000121101"
    assert data["display_label"] == "TEX14"
    assert data.get("dataset_id") is None


@pytest.mark.asyncio
async def test_get_cufflinks_transcript(test_client: AsyncClient, expression_data):
    response = await test_client.get(f"/api/features/cufflinks_transcript/{expression_data.ct.id}")

    assert response.status_code == 200
    data = response.json()
    assert data["identifier"] == "TCONS_00000001"
    assert data["dataset_id"] == expression_data.d1.id
    assert data["parent_id"] == expression_data.cg_d1.id
    assert data["ref_id"] == "ENST00000240045"


@pytest.mark.asyncio
async def test_get_feature_not_found(test_client: AsyncClient, expression_data):
    response = await test_client.get("/api/features/transcript/999")

    assert response.status_code == 404
    data = response.json()
    assert data["code"] == "FEATURE_NOT_FOUND"
    assert "correlation_id" in data


@pytest.mark.asyncio
async def test_get_feature_unknown_kind(test_client: AsyncClient, expression_data):
    """Kinds outside the closed set are rejected by path validation."""
    response = await test_client.get("/api/features/protein/1")

    assert response.status_code == 422
    assert response.json()["code"] == "VALIDATION_ERROR"


# =============================================================================
# LOOKUP Tests - GET /features/{kind}/lookup/{identifier}
# =============================================================================


@pytest.mark.asyncio
async def test_lookup_by_stable_id(test_client: AsyncClient, expression_data):
    response = await test_client.get("/api/features/transcript/lookup/ENST00000240045")

    assert response.status_code == 200
    assert response.json()["id"] == expression_data.t1.id


@pytest.mark.asyncio
async def test_lookup_cufflinks_needs_dataset(test_client: AsyncClient, expression_data):
    response = await test_client.get("/api/features/cufflinks_gene/lookup/XLOC_000001")

    assert response.status_code == 400
    assert response.json()["code"] == "DATASET_SCOPE_REQUIRED"


@pytest.mark.asyncio
async def test_lookup_cufflinks_in_each_dataset(test_client: AsyncClient, expression_data):
    r1 = await test_client.get(
        "/api/features/cufflinks_gene/lookup/XLOC_000001",
        params={"dataset_id": expression_data.d1.id},
    )
    r2 = await test_client.get(
        "/api/features/cufflinks_gene/lookup/XLOC_000001",
        params={"dataset_id": expression_data.d2.id},
    )

    assert r1.status_code == r2.status_code == 200
    assert r1.json()["id"] == expression_data.cg_d1.id
    assert r2.json()["id"] == expression_data.cg_d2.id


@pytest.mark.asyncio
async def test_lookup_unknown_dataset(test_client: AsyncClient, expression_data):
    response = await test_client.get(
        "/api/features/cufflinks_gene/lookup/XLOC_000001", params={"dataset_id": 999}
    )

    assert response.status_code == 404
    assert response.json()["code"] == "DATASET_NOT_FOUND"


# =============================================================================
# EXPRESSION Tests - GET /features/{kind}/{id}/expression
# =============================================================================


@pytest.mark.asyncio
async def test_expression_all_samples(test_client: AsyncClient, expression_data):
    response = await test_client.get(f"/api/features/gene/{expression_data.g1.id}/expression")

    assert response.status_code == 200
    data = response.json()
    assert [row["sample_name"] for row in data] == ["liver", "brain", "heart", "cortex"]
    assert all(row["source_type"] == "gene" for row in data)


@pytest.mark.asyncio
async def test_expression_by_dataset(test_client: AsyncClient, expression_data):
    response = await test_client.get(
        f"/api/features/gene/{expression_data.g1.id}/expression",
        params={"dataset_id": expression_data.d1.id},
    )

    assert response.status_code == 200
    assert [(row["sample_name"], row["fpkm"]) for row in response.json()] == [
        ("brain", 0.0),
        ("heart", 30.0),
        ("liver", 10.0),
    ]


@pytest.mark.asyncio
async def test_expression_by_sample(test_client: AsyncClient, expression_data):
    response = await test_client.get(
        f"/api/features/transcript/{expression_data.t1.id}/expression",
        params={"sample_id": expression_data.heart.id},
    )

    assert response.status_code == 200
    data = response.json()
    assert len(data) == 1
    assert data[0]["fpkm"] == 7.0
    assert data[0]["source_type"] == "transcript"


@pytest.mark.asyncio
async def test_expression_empty_dataset(test_client: AsyncClient, expression_data):
    response = await test_client.get(
        f"/api/features/transcript/{expression_data.t1.id}/expression",
        params={"dataset_id": expression_data.d2.id},
    )

    assert response.status_code == 200
    assert response.json() == []


# =============================================================================
# ENTROPY Tests - GET /features/{kind}/{id}/entropy
# =============================================================================


@pytest.mark.asyncio
async def test_entropy(test_client: AsyncClient, expression_data):
    response = await test_client.get(
        f"/api/features/gene/{expression_data.g1.id}/entropy",
        params={"dataset_id": expression_data.d1.id},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["sample_count"] == 3
    assert data["entropy"] == pytest.approx(0.5623, abs=1e-4)
    assert data["max_entropy"] == pytest.approx(math.log(3))


@pytest.mark.asyncio
async def test_entropy_without_expression(test_client: AsyncClient, expression_data):
    response = await test_client.get(
        f"/api/features/gene/{expression_data.g2.id}/entropy",
        params={"dataset_id": expression_data.d1.id},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["sample_count"] == 0
    assert data["entropy"] == 0.0
    assert data["max_entropy"] == 0.0


@pytest.mark.asyncio
async def test_entropy_requires_dataset(test_client: AsyncClient, expression_data):
    response = await test_client.get(f"/api/features/gene/{expression_data.g1.id}/entropy")

    assert response.status_code == 422


# =============================================================================
# LINKED ROWS - GET /features/{kind}/{id}/xrefs, /align-features
# =============================================================================


@pytest.mark.asyncio
async def test_xrefs_ordered_by_external_db(test_client: AsyncClient, expression_data):
    response = await test_client.get(f"/api/features/gene/{expression_data.g1.id}/xrefs")

    assert response.status_code == 200
    assert [row["dbprimary_acc"] for row in response.json()] == ["PF00069", "MIMAT0000076"]


@pytest.mark.asyncio
async def test_align_features(test_client: AsyncClient, expression_data):
    gene = await test_client.get(f"/api/features/gene/{expression_data.g1.id}/align-features")
    transcript = await test_client.get(f"/api/features/transcript/{expression_data.t1.id}/align-features")

    assert gene.status_code == 200
    assert [row["hit_name"] for row in gene.json()] == ["hsa-miR-21-5p"]
    assert transcript.json() == []
