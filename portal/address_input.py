"""Address autocomplete backed by the Mapbox geocoding API."""

import logging
from urllib.parse import quote

import httpx

import config
from models.address import Address
from services.addresses import COUNTRY_REGIONS, DEFAULT_COUNTRY, country_to_region, parse_street

logger = logging.getLogger(__name__)

MIN_QUERY_LENGTH = 3

__all__ = ["MapboxGeocoder", "address_from_feature", "country_to_region", "parse_street"]


class MapboxGeocoder:
    """Forward geocoding restricted to one country. No debounce, no retry."""

    def __init__(
        self,
        access_token: str | None = None,
        base_url: str | None = None,
        country: str = "AU",
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.access_token = access_token if access_token is not None else config.settings.MAPBOX_API_KEY
        self.base_url = (base_url or config.settings.MAPBOX_BASE_URL).rstrip("/")
        self.country = country
        self.transport = transport

    async def suggest(self, query: str) -> list[dict]:
        """
        Suggestions for a partial address.

        Returns:
            Mapbox features; empty for queries under three characters or when
            the request fails
        """
        query = (query or "").strip()
        if len(query) < MIN_QUERY_LENGTH:
            return []

        url = f"{self.base_url}/geocoding/v5/mapbox.places/{quote(query)}.json"
        params = {
            "access_token": self.access_token,
            "autocomplete": "true",
            "country": self.country,
        }
        try:
            async with httpx.AsyncClient(transport=self.transport, timeout=10.0) as client:
                response = await client.get(url, params=params)
                response.raise_for_status()
                return response.json().get("features", [])
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Address lookup failed for %r: %s", query, e)
            return []


def _context_text(feature: dict, kind: str) -> str:
    for entry in feature.get("context") or []:
        if kind in entry.get("id", ""):
            return entry.get("text", "")
    return ""


def address_from_feature(feature: dict) -> Address:
    """Build an Address from a selected Mapbox feature."""
    country = _context_text(feature, "country") or DEFAULT_COUNTRY
    if country not in COUNTRY_REGIONS:
        country = DEFAULT_COUNTRY

    return Address(
        full_address=feature.get("place_name", ""),
        line1=feature.get("text", ""),
        city=_context_text(feature, "place"),
        state=_context_text(feature, "region"),
        postal_code=_context_text(feature, "postcode"),
        country=country,
    )
