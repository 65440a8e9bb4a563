"""Unit tests for the scan/type resolution pipeline."""

from unittest.mock import AsyncMock

import httpx
import pytest

from assets.catalog import CatalogClient
from assets.errors import CatalogError
from assets.resolution import MESSAGES, Failed, FailureReason, Navigate, ResolutionPipeline
from conftest import make_asset, make_page


@pytest.fixture
def pipeline(catalog, navigator, notifier):
    return ResolutionPipeline(catalog, navigator, notifier)


class TestResolve:
    """Outcomes and their single terminal side effect."""

    @pytest.mark.asyncio
    async def test_unique_match_navigates(self, pipeline, catalog, navigator, notifier):
        outcome = await pipeline.resolve("https://x/y?asset=QR123")

        assert outcome == Navigate(facility_id="F2", asset_id="A9")
        catalog.lookup_registry.assert_awaited_once_with("QR123")
        query = catalog.list_assets.call_args[0][0]
        assert query["qr_code_id"] == "K1"
        assert navigator.visited == ["/facility/F2/assets/A9"]
        assert notifier.history == []

    @pytest.mark.asyncio
    async def test_invalid_input_makes_no_requests(self, pipeline, catalog, navigator, notifier):
        outcome = await pipeline.resolve("not a url")

        assert isinstance(outcome, Failed)
        assert outcome.reason is FailureReason.INVALID_INPUT
        catalog.lookup_registry.assert_not_called()
        catalog.list_assets.assert_not_called()
        assert navigator.visited == []
        assert [n.message for n in notifier.history] == [MESSAGES[FailureReason.INVALID_INPUT]]

    @pytest.mark.asyncio
    async def test_missing_identifier_is_invalid_input(self, pipeline, catalog):
        outcome = await pipeline.resolve("https://x/y?other=1")
        assert outcome.reason is FailureReason.INVALID_INPUT
        catalog.lookup_registry.assert_not_called()

    @pytest.mark.asyncio
    async def test_registry_miss_skips_catalog(self, pipeline, catalog, navigator, notifier):
        catalog.lookup_registry = AsyncMock(return_value=None)

        outcome = await pipeline.resolve("https://x/y?asset=QR123")

        assert outcome.reason is FailureReason.REGISTRY_LOOKUP_MISS
        catalog.list_assets.assert_not_called()
        assert navigator.visited == []
        assert len(notifier.history) == 1

    @pytest.mark.asyncio
    async def test_catalog_miss(self, pipeline, catalog, notifier):
        catalog.list_assets = AsyncMock(return_value=make_page([]))

        outcome = await pipeline.resolve("https://x/y?asset=QR123")

        assert outcome.reason is FailureReason.CATALOG_MISS
        assert notifier.history[0].message == "Asset not found"

    @pytest.mark.asyncio
    async def test_multiple_matches_are_ambiguous(self, pipeline, catalog, navigator):
        catalog.list_assets = AsyncMock(
            return_value=make_page([make_asset("A1"), make_asset("A2")])
        )

        outcome = await pipeline.resolve("https://x/y?asset=QR123")

        assert outcome.reason is FailureReason.AMBIGUOUS
        assert navigator.visited == []

    @pytest.mark.asyncio
    async def test_count_above_one_is_ambiguous(self, pipeline, catalog):
        catalog.list_assets = AsyncMock(return_value=make_page([make_asset()], count=3))
        outcome = await pipeline.resolve("https://x/y?asset=QR123")
        assert outcome.reason is FailureReason.AMBIGUOUS

    @pytest.mark.asyncio
    async def test_match_without_facility_is_a_miss(self, pipeline, catalog):
        catalog.list_assets = AsyncMock(return_value=make_page([make_asset(facility_id=None)]))
        outcome = await pipeline.resolve("https://x/y?asset=QR123")
        assert outcome.reason is FailureReason.CATALOG_MISS

    @pytest.mark.asyncio
    async def test_transport_fault_reported_as_registry_miss(self, pipeline, catalog, notifier):
        catalog.lookup_registry = AsyncMock(side_effect=CatalogError("timeout"))

        outcome = await pipeline.resolve("https://x/y?asset=QR123")

        assert outcome.reason is FailureReason.REGISTRY_LOOKUP_MISS
        assert outcome.transport_error is True
        assert notifier.history[0].message == "Invalid Asset Id"

    @pytest.mark.asyncio
    async def test_registry_without_key_uses_scanned_code(self, pipeline, catalog):
        from assets.models import RegistryRecord

        catalog.lookup_registry = AsyncMock(return_value=RegistryRecord(id="R1"))
        await pipeline.resolve("https://x/y?assetQR=QR555")
        assert catalog.list_assets.call_args[0][0]["qr_code_id"] == "QR555"


@pytest.mark.asyncio
async def test_lookup_has_no_side_effects(catalog, navigator, notifier):
    pipeline = ResolutionPipeline(catalog, navigator, notifier)
    outcome = await pipeline.lookup("https://x/y?asset=QR123")
    assert outcome.path == "/facility/F2/assets/A9"
    assert navigator.visited == []
    assert notifier.history == []


class TestUntrustedCodesOverHttp:
    """Hostile tag codes end in one notification and never leave the registry path."""

    @staticmethod
    def _client(seen):
        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url.raw_path)
            if request.url.raw_path.startswith(b"/api/v1/public/asset/"):
                return httpx.Response(404)
            return httpx.Response(200, json={"id": "U1", "count": 1, "results": []})

        return CatalogClient("http://catalog.test", transport=httpx.MockTransport(handler))

    @pytest.mark.asyncio
    async def test_control_character_is_a_registry_miss(self, navigator, notifier):
        seen = []
        async with self._client(seen) as client:
            outcome = await ResolutionPipeline(client, navigator, notifier).resolve(
                "https://x/y?asset=QR%0A1"
            )

        assert outcome.reason is FailureReason.REGISTRY_LOOKUP_MISS
        assert seen == [b"/api/v1/public/asset/QR%0A1/"]
        assert [n.message for n in notifier.history] == ["Invalid Asset Id"]
        assert navigator.visited == []

    @pytest.mark.asyncio
    async def test_dot_segments_cannot_reach_other_endpoints(self, navigator, notifier):
        seen = []
        async with self._client(seen) as client:
            outcome = await ResolutionPipeline(client, navigator, notifier).resolve(
                "https://x/y?asset=..%2F..%2Fusers%2Fme"
            )

        assert outcome.reason is FailureReason.REGISTRY_LOOKUP_MISS
        assert seen == [b"/api/v1/public/asset/..%2F..%2Fusers%2Fme/"]
        assert len(notifier.history) == 1
