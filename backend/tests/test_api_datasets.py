"""
Tests for Genome, Dataset and Sample API Endpoints
"""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_health(test_client: AsyncClient):
    response = await test_client.get("/api/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert "X-Request-ID" in response.headers


@pytest.mark.asyncio
async def test_correlation_id_is_echoed(test_client: AsyncClient, expression_data):
    response = await test_client.get("/api/datasets/999", headers={"X-Request-ID": "req-42"})

    assert response.status_code == 404
    assert response.headers["X-Request-ID"] == "req-42"
    assert response.json()["correlation_id"] == "req-42"


# =============================================================================
# Genomes
# =============================================================================


@pytest.mark.asyncio
async def test_list_genomes(test_client: AsyncClient, expression_data):
    response = await test_client.get("/api/genomes")

    assert response.status_code == 200
    assert [g["name"] for g in response.json()] == ["homo_sapiens"]


@pytest.mark.asyncio
async def test_get_genome_by_name(test_client: AsyncClient, expression_data):
    response = await test_client.get("/api/genomes/by-name/homo_sapiens")

    assert response.status_code == 200
    assert response.json()["id"] == expression_data.genome.id


@pytest.mark.asyncio
async def test_get_genome_not_found(test_client: AsyncClient, expression_data):
    by_id = await test_client.get("/api/genomes/999")
    by_name = await test_client.get("/api/genomes/by-name/mus_musculus")

    assert by_id.status_code == by_name.status_code == 404
    assert by_id.json()["code"] == "GENOME_NOT_FOUND"
    assert by_name.json()["details"]["name"] == "mus_musculus"


@pytest.mark.asyncio
async def test_list_genome_genes(test_client: AsyncClient, expression_data):
    response = await test_client.get(f"/api/genomes/{expression_data.genome.id}/genes")

    assert response.status_code == 200
    assert [g["identifier"] for g in response.json()] == ["ENSG00000121101", "ENSG00000000003"]


# =============================================================================
# Datasets and samples
# =============================================================================


@pytest.mark.asyncio
async def test_list_datasets(test_client: AsyncClient, expression_data):
    response = await test_client.get("/api/datasets")

    assert response.status_code == 200
    assert [d["name"] for d in response.json()] == ["body_map", "brain_atlas"]


@pytest.mark.asyncio
async def test_dataset_samples_alphabetical(test_client: AsyncClient, expression_data):
    response = await test_client.get(f"/api/datasets/{expression_data.d1.id}/samples")

    assert response.status_code == 200
    samples = response.json()
    assert [s["name"] for s in samples] == ["brain", "heart", "liver"]
    assert all(s["dataset_id"] == expression_data.d1.id for s in samples)


@pytest.mark.asyncio
async def test_get_sample_not_found(test_client: AsyncClient, expression_data):
    response = await test_client.get("/api/samples/999")

    assert response.status_code == 404
    assert response.json()["code"] == "SAMPLE_NOT_FOUND"


@pytest.mark.asyncio
async def test_sample_expression_across_kinds(test_client: AsyncClient, expression_data):
    response = await test_client.get(f"/api/samples/{expression_data.heart.id}/expression")

    assert response.status_code == 200
    assert [(row["source_type"], row["fpkm"]) for row in response.json()] == [
        ("gene", 30.0),
        ("transcript", 7.0),
    ]
