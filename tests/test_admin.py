"""Admin endpoint tests: metrics snapshot and link listing."""

import json

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_metrics_counts_every_outcome(client: AsyncClient) -> None:
    created = await client.post("/reg", data={"url": "https://example.com/a"})
    slug = created.json()["slug"]

    await client.get(f"/{slug}")
    await client.get("/0000000000")
    await client.get("/rev/https://example.com/a")

    response = await client.get("/admin/metrics")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    text = response.text

    assert f'linker_http_requests_total{{handler="create",slug="{slug}"}} 1.0' in text
    # Served from the cache filled by the create call.
    assert f'linker_http_requests_total{{handler="resolve",slug="{slug}"}} 1.0' in text
    assert f'linker_cache_hits_total{{handler="resolve",slug="{slug}"}} 1.0' in text
    assert 'linker_http_requests_total{handler="resolve",slug="0000000000"} 1.0' in text
    assert 'linker_cache_misses_total{handler="resolve",slug="0000000000"} 1.0' in text
    assert f'linker_http_requests_total{{handler="reverse",slug="{slug}"}} 1.0' in text


@pytest.mark.asyncio
async def test_metrics_counts_conflicts(client: AsyncClient) -> None:
    await client.post("/reg", data={"url": "https://example.com/a"})
    await client.post("/reg", data={"url": "https://example.com/a"})

    response = await client.get("/admin/metrics")
    assert 'linker_http_requests_total{handler="create",slug=""} 1.0' in response.text


@pytest.mark.asyncio
async def test_list_links_ndjson(client: AsyncClient) -> None:
    first = (await client.post("/reg", data={"url": "https://example.com/a"})).json()
    second = (await client.post("/reg", data={"url": "https://example.com/b", "hidden": "true"})).json()

    response = await client.get("/admin/links")
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/x-ndjson")

    records = [json.loads(line) for line in response.text.splitlines()]
    expected = sorted(
        [
            {"slug": first["slug"], "url": "https://example.com/a", "hidden": False},
            {"slug": second["slug"], "url": "https://example.com/b", "hidden": True},
        ],
        key=lambda record: record["slug"],
    )
    assert records == expected


@pytest.mark.asyncio
async def test_list_links_empty(client: AsyncClient) -> None:
    response = await client.get("/admin/links")
    assert response.status_code == 200
    assert response.text == ""


@pytest.mark.asyncio
async def test_http_metrics_exposed(client: AsyncClient) -> None:
    await client.get("/health")
    response = await client.get("/metrics")
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_metrics_counts_malformed_slug(client: AsyncClient) -> None:
    response = await client.get("/short")
    assert response.status_code == 400

    response = await client.get("/admin/metrics")
    assert 'linker_http_requests_total{handler="resolve",slug=""} 1.0' in response.text
