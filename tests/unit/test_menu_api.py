"""Unit tests for menu API endpoints."""
from unittest.mock import AsyncMock

import pytest

from orderbot.main import app
from orderbot.core.dependencies import get_menu_repository
from orderbot.services.menu.base import MenuFetchError, MenuSource
from orderbot.services.menu.repository import MenuRepository


def failing_repository(code):
    source = AsyncMock(spec=MenuSource)
    source.fetch.side_effect = MenuFetchError("menu failed", code)
    return MenuRepository(source)


class TestHealth:
    """Test health endpoint."""

    def test_health(self, test_client):
        """Test GET /health reports ok."""
        response = test_client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


class TestMenuAPI:
    """Test menu API endpoints."""

    def test_get_menu_success(self, test_client):
        """Test GET /api/menu returns the full menu."""
        response = test_client.get("/api/menu")

        assert response.status_code == 200
        data = response.json()
        assert [item["id"] for item in data["items"]] == [
            "cheeseburger", "burger", "lobster_roll", "fries", "soda"
        ]
        assert data["categories"] == ["mains", "sides", "drinks"]
        assert data["summary"].startswith("mains: Cheeseburger ($11.00)")

    def test_prices_serialized_as_strings(self, test_client):
        """Test decimal prices keep their exact value in JSON."""
        response = test_client.get("/api/menu")

        burger = response.json()["items"][1]
        assert burger["base_price"] == "10.00"
        assert burger["modifier_groups"][0]["options"][0]["price_adjustment"] == "1.00"

    def test_refresh(self, test_client):
        """Test POST /api/menu/refresh refetches the menu."""
        response = test_client.post("/api/menu/refresh")

        assert response.status_code == 200
        assert len(response.json()["items"]) == 5

    @pytest.mark.parametrize(
        "code, status",
        [
            (MenuFetchError.NETWORK_ERROR, 503),
            (MenuFetchError.HTTP_ERROR, 502),
            (MenuFetchError.INVALID_FORMAT, 500),
        ],
    )
    def test_menu_errors(self, test_client, code, status):
        """Test menu failures map to HTTP status codes."""
        app.dependency_overrides[get_menu_repository] = lambda: failing_repository(code)

        response = test_client.get("/api/menu")

        assert response.status_code == status
        assert response.json()["detail"]["code"] == code
