"""Integration tests for the health and root endpoints."""

import pytest
from httpx import AsyncClient

from folio import __version__


@pytest.mark.integration
class TestHealth:
    async def test_health(self, client: AsyncClient):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "healthy", "version": __version__}

    async def test_root(self, client: AsyncClient):
        response = await client.get("/")

        assert response.status_code == 200
        assert response.json()["name"] == "Folio API"

