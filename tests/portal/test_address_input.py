"""Tests for Mapbox address autocomplete."""

import httpx
import pytest

from portal.address_input import MapboxGeocoder, address_from_feature

FEATURE = {
    "place_name": "248 Postle Street, Brisbane Queensland 4000, Australia",
    "text": "Postle Street",
    "context": [
        {"id": "postcode.1", "text": "4000"},
        {"id": "place.2", "text": "Brisbane"},
        {"id": "region.3", "text": "Queensland"},
        {"id": "country.4", "text": "Australia"},
    ],
}


@pytest.mark.asyncio
async def test_short_queries_skip_the_request():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json={"features": []})

    geocoder = MapboxGeocoder(access_token="pk.test", transport=httpx.MockTransport(handler))

    assert await geocoder.suggest("24") == []
    assert calls == []


@pytest.mark.asyncio
async def test_suggest_queries_mapbox():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json={"features": [FEATURE]})

    geocoder = MapboxGeocoder(
        access_token="pk.test",
        base_url="https://mapbox.local",
        transport=httpx.MockTransport(handler),
    )

    features = await geocoder.suggest("248 Postle")

    assert features == [FEATURE]
    request = calls[0]
    assert request.url.path == "/geocoding/v5/mapbox.places/248 Postle.json"
    assert request.url.params["access_token"] == "pk.test"
    assert request.url.params["autocomplete"] == "true"
    assert request.url.params["country"] == "AU"


@pytest.mark.asyncio
async def test_suggest_swallows_errors():
    def failing(request):
        return httpx.Response(500, text="boom")

    def broken(request):
        raise httpx.ConnectError("unreachable", request=request)

    for handler in (failing, broken):
        geocoder = MapboxGeocoder(access_token="pk.test", transport=httpx.MockTransport(handler))
        assert await geocoder.suggest("248 Postle") == []


def test_address_from_feature():
    address = address_from_feature(FEATURE)

    assert address.full_address == FEATURE["place_name"]
    assert address.street_number == "248"
    assert address.line1 == "Postle Street"
    assert address.city == "Brisbane"
    assert address.state == "Queensland"
    assert address.postal_code == "4000"
    assert address.region == "AU"


def test_address_from_feature_unknown_country_defaults_to_australia():
    feature = {**FEATURE, "context": [{"id": "country.9", "text": "New Zealand"}]}

    address = address_from_feature(feature)

    assert address.country == "Australia"
    assert address.region == "AU"
