from unittest.mock import AsyncMock, MagicMock, patch

import pytest


@pytest.mark.asyncio
async def test_health_check_endpoint(client):
    """Test standard health check endpoint."""
    response = await client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["service"] == "DealHub"
    assert "version" in data


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("connected", "status_code", "status"),
    [(True, 200, "ready"), (False, 503, "not_ready")],
)
async def test_readiness_check_endpoint(client, connected, status_code, status):
    db_manager = MagicMock()
    db_manager.check_connection = AsyncMock(return_value=connected)

    with patch("dealhub.infrastructure.api.app.get_db_manager", return_value=db_manager):
        response = await client.get("/ready")

    assert response.status_code == status_code
    assert response.json()["status"] == status


@pytest.mark.asyncio
async def test_correlation_id_is_echoed(client):
    response = await client.get("/health", headers={"X-Correlation-ID": "abc123"})

    assert response.headers["X-Correlation-ID"] == "abc123"


@pytest.mark.asyncio
async def test_correlation_id_generated_when_absent(client):
    response = await client.get("/health")

    assert response.headers["X-Correlation-ID"]
