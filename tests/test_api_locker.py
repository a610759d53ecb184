"""Tests for locker API endpoints."""

from pathlib import Path

import pytest
from httpx import ASGITransport, AsyncClient

from lockerscope.api.locker import get_exclusives, get_index
from lockerscope.config import settings
from lockerscope.main import app
from lockerscope.services.catalog_index import CatalogIndex
from lockerscope.services.exclusivity import ExclusiveAllowList


@pytest.fixture
async def client(catalog_index: CatalogIndex, allow_list: ExclusiveAllowList):
    """Async test client backed by the sample catalog."""
    app.dependency_overrides[get_index] = lambda: catalog_index
    app.dependency_overrides[get_exclusives] = lambda: allow_list

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
async def bare_client():
    """Async test client with no dependency overrides."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


class TestPlanLocker:
    async def test_plan_per_category(
        self, client: AsyncClient, sample_report_text: list[str]
    ) -> None:
        """Every category is planned with counts and placements."""
        response = await client.post("/locker/plan", json={"text_blocks": sample_report_text})

        assert response.status_code == 200
        data = response.json()
        assert data["total_items"] == 6
        assert data["unresolved"] == 0
        assert data["combined"] is None

        by_category = {c["category"]: c for c in data["categories"]}
        characters = by_category["AthenaCharacter"]
        assert characters["folder"] == "Characters"
        assert characters["total"] == 3
        assert characters["exclusive"] == 2
        assert len(characters["layout"]["placements"]) == 3

    async def test_placement_fields(
        self, client: AsyncClient, sample_report_text: list[str]
    ) -> None:
        """Placements carry label, color, flags and image URL."""
        response = await client.post("/locker/plan", json={"text_blocks": sample_report_text})
        characters = next(
            c for c in response.json()["categories"] if c["category"] == "AthenaCharacter"
        )
        placements = characters["layout"]["placements"]

        first = placements[0]
        assert first["exclusive"] is True
        assert first["color_key"] == "exclusive"
        assert first["color"] == [235, 227, 88]
        assert (first["row"], first["col"]) == (0, 0)

        legend = next(p for p in placements if p["item_id"] == "CID_500_Athena_Commando_M_Legend")
        assert legend["label"] == "Legend Skin"
        assert legend["rarity"] == "legendary"
        assert legend["image_url"] == "https://img.test/cid_500/icon.png"
        assert legend["resolved"] is True

    async def test_include_combined(
        self, client: AsyncClient, sample_report_text: list[str]
    ) -> None:
        response = await client.post(
            "/locker/plan",
            json={"text_blocks": sample_report_text, "include_combined": True},
        )

        combined = response.json()["combined"]
        assert combined["category"] == "combined"
        assert combined["total"] == 6

    async def test_item_lists_sorted(
        self, client: AsyncClient, sample_report_text: list[str]
    ) -> None:
        response = await client.post("/locker/plan", json={"text_blocks": sample_report_text})
        lists = response.json()["item_lists"]
        assert lists["AthenaCharacter"] == sorted(lists["AthenaCharacter"])
        assert lists["AthenaDance"] == ["EID-Floss"]

    async def test_no_items_is_400(self, client: AsyncClient) -> None:
        """Reports without item lines are rejected."""
        response = await client.post("/locker/plan", json={"text_blocks": ["hello"]})
        assert response.status_code == 400

    async def test_missing_body_field_is_422(self, client: AsyncClient) -> None:
        response = await client.post("/locker/plan", json={})
        assert response.status_code == 422

    async def test_missing_catalog_is_503(
        self,
        bare_client: AsyncClient,
        tmp_path: Path,
        sample_report_text: list[str],
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Planning needs a catalog."""
        monkeypatch.setattr(settings, "catalog_path", tmp_path / "missing.json")

        response = await bare_client.post(
            "/locker/plan", json={"text_blocks": sample_report_text}
        )

        assert response.status_code == 503
        assert "catalog" in response.json()["detail"].lower()


class TestAccountSummary:
    async def test_summary(self, bare_client: AsyncClient, sample_report_text: list[str]) -> None:
        """Account details and counts are returned without needing a catalog."""
        response = await bare_client.post(
            "/locker/account", json={"text_blocks": sample_report_text}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["total_items"] == 6
        assert data["category_counts"]["AthenaCharacter"] == 3
        assert " | Display Name : LockerFan" in data["summary"]
        assert "----- Cosmetic Counts -----" in data["summary"]

    async def test_empty_report(self, bare_client: AsyncClient) -> None:
        response = await bare_client.post("/locker/account", json={"text_blocks": []})
        assert response.status_code == 200
        assert response.json()["total_items"] == 0
