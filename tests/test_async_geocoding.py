import aiohttp
import pytest

from data_sources.async_geocoding import reverse_geocode, search_location_by_address
from data_sources.models import GeocodeResult
from tests.conftest import FakeResponse, FakeSession

NOMINATIM = "https://nominatim.test"


@pytest.mark.asyncio
async def test_first_match_returned():
    session = FakeSession([FakeResponse(200, [
        {"lat": "39.7817", "lon": "-89.6501", "display_name": "Springfield, Illinois, USA"},
        {"lat": "37.2090", "lon": "-93.2923", "display_name": "Springfield, Missouri, USA"},
    ])])

    result = await search_location_by_address("Springfield", session=session, base_url=NOMINATIM)

    assert result == GeocodeResult(39.7817, -89.6501, "Springfield, Illinois, USA")
    method, url, kwargs = session.calls[0]
    assert (method, url) == ("GET", f"{NOMINATIM}/search")
    assert kwargs["params"]["q"] == "Springfield"
    assert kwargs["params"]["limit"] == 1
    assert kwargs["params"]["format"] == "json"


@pytest.mark.asyncio
async def test_no_match_returns_none():
    session = FakeSession([FakeResponse(200, [])])
    assert await search_location_by_address("Nowhere", session=session, base_url=NOMINATIM) is None


@pytest.mark.asyncio
async def test_blank_address_makes_no_request():
    session = FakeSession([])
    assert await search_location_by_address("   ", session=session) is None
    assert session.calls == []


@pytest.mark.asyncio
async def test_http_error_returns_none():
    session = FakeSession([FakeResponse(503)])
    assert await search_location_by_address("Springfield", session=session, base_url=NOMINATIM) is None


@pytest.mark.asyncio
async def test_network_error_returns_none():
    session = FakeSession([FakeResponse(error=aiohttp.ClientConnectionError("down"))])
    assert await search_location_by_address("Springfield", session=session, base_url=NOMINATIM) is None


@pytest.mark.asyncio
async def test_malformed_match_returns_none():
    session = FakeSession([FakeResponse(200, [{"display_name": "no coords"}])])
    assert await search_location_by_address("Springfield", session=session, base_url=NOMINATIM) is None


@pytest.mark.asyncio
async def test_reverse_geocode_city_state_country():
    session = FakeSession([FakeResponse(200, {
        "display_name": "Boulder, Colorado, USA",
        "address": {"town": "Boulder", "state": "Colorado", "country": "United States"},
    })])

    result = await reverse_geocode(40.015, -105.27, session=session, base_url=NOMINATIM)

    assert result.city == "Boulder"
    assert result.state == "Colorado"
    assert result.country == "United States"
    assert session.calls[0][1] == f"{NOMINATIM}/reverse"
    assert session.calls[0][2]["params"]["zoom"] == 10


@pytest.mark.asyncio
async def test_reverse_geocode_unknown_parts():
    session = FakeSession([FakeResponse(200, {"display_name": "Ocean", "address": {}})])

    result = await reverse_geocode(0.0, 0.0, session=session, base_url=NOMINATIM)

    assert (result.city, result.state, result.country) == ("Unknown", "Unknown", "Unknown")


@pytest.mark.asyncio
async def test_reverse_geocode_error_payload():
    session = FakeSession([FakeResponse(200, {"error": "Unable to geocode"})])
    assert await reverse_geocode(0.0, 0.0, session=session, base_url=NOMINATIM) is None


@pytest.mark.asyncio
async def test_reverse_geocode_invalid_coordinates():
    session = FakeSession([])
    assert await reverse_geocode(123.0, 0.0, session=session) is None
    assert session.calls == []
