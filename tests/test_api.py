"""Tests for the shopping planner API."""

import pytest
from httpx import ASGITransport, AsyncClient

from shop_planner.main import build_app


@pytest.fixture
def app(settings):
    return build_app(settings)


@pytest.fixture
async def client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


STORES = [
    {"id": "aldi", "name": "Aldi", "rating": 4},
    {"id": "tesco", "name": "Tesco", "rating": 4},
]
ITEMS = [{"name": "bread", "unit": "loaf"}, {"name": "milk"}]


class TestHealth:
    async def test_health_check(self, client):
        resp = await client.get("/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "healthy"
        assert data["service"] == "shop-planner"


class TestShoppingEndpoints:
    async def test_optimize(self, client):
        resp = await client.post("/api/v1/shopping/optimize", json={
            "items": ITEMS,
            "stores": STORES,
        })
        assert resp.status_code == 200
        data = resp.json()
        assert [s["store"]["id"] for s in data["stores"]] == ["aldi"]
        assert data["total_estimated_cost"] == 314.5
        assert data["status"] == "complete"
        assert data["over_budget"] is False

    async def test_optimize_over_budget(self, client):
        resp = await client.post("/api/v1/shopping/optimize", json={
            "items": ITEMS,
            "stores": STORES,
            "constraints": {"max_budget": 100},
        })
        assert resp.status_code == 200
        data = resp.json()
        assert data["stores"] == []
        assert data["over_budget"] is True
        assert data["status"] == "constraint_unsatisfiable"
        assert data["suggestion"]["stores"]

    async def test_cheapest(self, client):
        resp = await client.post("/api/v1/shopping/cheapest", json={
            "items": ITEMS,
            "stores": STORES,
        })
        assert resp.status_code == 200
        data = resp.json()
        assert [s["store"]["id"] for s in data["stores"]] == ["aldi"]
        assert data["total_estimated_cost"] == 314.5

    async def test_fastest_route(self, client):
        resp = await client.post("/api/v1/shopping/fastest-route", json={
            "items": ITEMS,
            "stores": STORES,
            "origin": {"id": "home", "name": "Home", "kind": "home"},
        })
        assert resp.status_code == 200
        data = resp.json()
        assert [s["store"]["id"] for s in data["stores"]] == ["aldi", "tesco"]

    async def test_breakdown(self, client):
        resp = await client.post("/api/v1/shopping/breakdown", json={
            "store": STORES[0],
            "items": [{"name": "bread"}, {"name": "cheese"}],
            "stores": STORES,
        })
        assert resp.status_code == 200
        data = resp.json()
        assert [i["name"] for i in data["unavailable_items"]] == ["cheese"]
        assert data["alternatives"][0]["store_id"] == "tesco"


class TestErrors:
    async def test_empty_list_rejected(self, client):
        resp = await client.post("/api/v1/shopping/optimize", json={
            "items": [],
            "stores": STORES,
        })
        assert resp.status_code == 422
        data = resp.json()
        assert data["error"] == "Invalid input"
        assert "empty" in data["detail"]

    async def test_too_many_stores_per_combination(self, client):
        resp = await client.post("/api/v1/shopping/cheapest", json={
            "items": ITEMS,
            "stores": STORES,
            "max_stores": 5,
        })
        assert resp.status_code == 422

    async def test_malformed_body(self, client):
        resp = await client.post("/api/v1/shopping/optimize", json={"items": ITEMS})
        assert resp.status_code == 422
