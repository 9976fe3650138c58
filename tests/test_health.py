"""
Tests for operational endpoints.
"""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    response = await client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["cache"] == {"status": "disabled"}
    assert data["pending_notifications"] == 0


@pytest.mark.asyncio
async def test_request_id_echoed(client: AsyncClient):
    response = await client.get("/", headers={"X-Request-ID": "door-7"})
    assert response.headers["X-Request-ID"] == "door-7"


@pytest.mark.asyncio
async def test_metrics_exposes_issuance_counters(client: AsyncClient, fan_headers, free_event):
    await client.post("/api/v1/events/join", json={"event_id": free_event.id}, headers=fan_headers)

    response = await client.get("/metrics")
    assert response.status_code == 200
    assert "ticket_issuance_attempts_total" in response.text
    assert "tickets_issued_total" in response.text
