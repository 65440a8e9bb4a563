"""Unit tests for the catalog HTTP client."""

import httpx
import pytest

from assets.catalog import CatalogClient, path_segment
from assets.errors import CatalogError

ASSET_PAYLOAD = {
    "id": "A9",
    "name": "Ventilator 1",
    "location_object": {
        "id": "L1",
        "name": "ICU",
        "facility": {"id": "F2", "name": "General Hospital"},
    },
    "is_working": True,
    "warranty_amc_end_of_validity": "",
    "unknown_field": "ignored",
}


def _client(handler):
    return CatalogClient("http://catalog.test/", token="secret", transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_list_assets_sends_query_and_parses_page():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["params"] = dict(request.url.params)
        seen["auth"] = request.headers.get("Authorization")
        return httpx.Response(200, json={"count": 40, "results": [ASSET_PAYLOAD]})

    async with _client(handler) as client:
        page = await client.list_assets({"limit": 18, "offset": 18, "search_text": "vent"})

    assert seen["path"] == "/api/v1/asset/"
    assert seen["params"] == {"limit": "18", "offset": "18", "search_text": "vent"}
    assert seen["auth"] == "Bearer secret"
    assert page.count == 40
    record = page.results[0]
    assert record.facility_id == "F2"
    assert record.warranty_amc_end_of_validity is None


@pytest.mark.asyncio
async def test_registry_not_found_is_none():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/v1/public/asset/QR123/"
        return httpx.Response(404, json={"detail": "Not found."})

    async with _client(handler) as client:
        assert await client.lookup_registry("QR123") is None


@pytest.mark.asyncio
async def test_registry_hit():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"id": "R1", "qr_code_id": "K1", "name": "Ventilator 1"})

    async with _client(handler) as client:
        record = await client.lookup_registry("QR123")

    assert record.search_key("QR123") == "K1"


@pytest.mark.asyncio
async def test_server_error_raises_catalog_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="oops")

    async with _client(handler) as client:
        with pytest.raises(CatalogError) as excinfo:
            await client.list_assets({})

    assert excinfo.value.status_code == 500


@pytest.mark.asyncio
async def test_search_404_is_an_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404)

    async with _client(handler) as client:
        with pytest.raises(CatalogError):
            await client.list_assets({})


@pytest.mark.asyncio
async def test_transport_failure_raises_catalog_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    async with _client(handler) as client:
        with pytest.raises(CatalogError):
            await client.lookup_registry("QR123")


@pytest.mark.asyncio
async def test_invalid_json_raises_catalog_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=b"<html>")

    async with _client(handler) as client:
        with pytest.raises(CatalogError):
            await client.list_assets({})


@pytest.mark.asyncio
async def test_facility_and_location_lookups():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/v1/getallfacilities/F2/":
            return httpx.Response(200, json={"id": "F2", "name": "General Hospital"})
        if request.url.path == "/api/v1/facility/F2/asset_location/L1/":
            return httpx.Response(200, json={"id": "L1", "name": "ICU"})
        return httpx.Response(404)

    async with _client(handler) as client:
        facility = await client.get_facility("F2")
        location = await client.get_location("F2", "L1")
        missing = await client.get_location("F2", "L404")

    assert facility.name == "General Hospital"
    assert location.name == "ICU"
    assert missing is None


class TestPathSegments:
    """Identifiers are encoded so they cannot leave their path segment."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("QR123", "QR123"),
            ("../../users/me", "..%2F..%2Fusers%2Fme"),
            ("QR\n1", "QR%0A1"),
            ("..", "%2E%2E"),
            (".", "%2E"),
        ],
    )
    def test_path_segment(self, value, expected):
        assert path_segment(value) == expected

    @pytest.mark.asyncio
    async def test_registry_code_with_slashes_stays_under_registry(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url.raw_path)
            return httpx.Response(404)

        async with _client(handler) as client:
            assert await client.lookup_registry("../../users/me") is None

        assert seen == [b"/api/v1/public/asset/..%2F..%2Fusers%2Fme/"]

    @pytest.mark.asyncio
    async def test_registry_code_with_control_character(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url.raw_path)
            return httpx.Response(404)

        async with _client(handler) as client:
            assert await client.lookup_registry("QR\n1") is None

        assert seen == [b"/api/v1/public/asset/QR%0A1/"]

    @pytest.mark.asyncio
    async def test_location_ids_are_encoded(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.url.raw_path)
            return httpx.Response(404)

        async with _client(handler) as client:
            assert await client.get_location("F/2", "..") is None

        assert seen == [b"/api/v1/facility/F%2F2/asset_location/%2E%2E/"]

    @pytest.mark.asyncio
    async def test_invalid_url_is_catalog_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={})

        async with _client(handler) as client:
            with pytest.raises(CatalogError):
                await client._get("/api/v1/asset/\n")
