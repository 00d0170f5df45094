"""Address helpers shared by the API schemas and the portal address input."""

import re

DEFAULT_COUNTRY = "Australia"
DEFAULT_REGION = "AU"

COUNTRY_REGIONS = {
    "Australia": "AU",
    "United States": "US",
    "Norway": "NO",
}

REGION_COUNTRIES = {region: country for country, region in COUNTRY_REGIONS.items()}

STREET_PATTERNS = (
    re.compile(r"^(\d+[A-Za-z]?)\s+(.+)"),  # "248 Postle Street, ..."
    re.compile(r"^(\d+[A-Za-z]?),\s*(.+)"),  # "248, Postle Street, ..."
    re.compile(r"^(\d+[A-Za-z]?)[/-]\s*(.+)"),  # "248/A Street Name ..."
)


def country_to_region(country: str | None) -> str:
    """Map a full country name to its ISO code; unknown countries fall back to AU."""
    if not country:
        return DEFAULT_REGION
    return COUNTRY_REGIONS.get(country.strip(), DEFAULT_REGION)


def region_to_country(region: str | None) -> str:
    if not region:
        return DEFAULT_COUNTRY
    return REGION_COUNTRIES.get(region.strip().upper(), DEFAULT_COUNTRY)


def parse_street(full_address: str | None) -> tuple[str, str] | None:
    """
    Split a formatted address into street number and street name.

    Args:
        full_address: Address such as a Mapbox ``place_name``

    Returns:
        (street_number, street_name), or None when the address does not
        start with a street number
    """
    if not full_address:
        return None

    text = full_address.strip()
    for pattern in STREET_PATTERNS:
        match = pattern.match(text)
        if match:
            street_number = match.group(1)
            street_name = match.group(2).split(",")[0].strip()
            return street_number, street_name
    return None
