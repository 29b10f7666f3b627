"""Smoke tests for app wiring."""

from __future__ import annotations

from backend.main import app


async def test_health(async_client):
    res = await async_client.get("/health")
    assert res.status_code == 200
    assert res.json() == {"status": "ok"}


def test_routes_registered():
    paths = {route.path for route in app.routes}
    for path in (
        "/health",
        "/api/apply",
        "/api/artifact",
        "/api/blocks",
        "/api/preview",
        "/api/preview/render",
        "/ws/preview",
    ):
        assert path in paths
    assert "/api/prompts/{kind}" in paths


async def test_unknown_route_404(async_client):
    res = await async_client.get("/api/nope")
    assert res.status_code == 404
