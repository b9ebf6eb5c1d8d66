"""
Location Classifier — infer a place type from a free-text address.

Only used for surcharge/risk signalling, never for eligibility. Anything that
matches nothing is treated as residential.
"""

import re

from services.domain import Endpoint, LocationType

# Checked top to bottom; first row with a matching keyword wins.
LOCATION_KEYWORDS: tuple[tuple[LocationType, tuple[str, ...]], ...] = (
    (LocationType.HOSPITAL, ("hospital", "clinic", "medical")),
    (LocationType.MALL, ("mall", "shopping", "plaza")),
    (LocationType.OFFICE, ("office", "corporate", "business")),
    (LocationType.SCHOOL, ("school", "university", "college")),
)

_WORD = re.compile(r"[a-z]+")


def classify(address: str | None) -> LocationType:
    """Map an address to a LocationType by case-insensitive keyword match."""
    if not address:
        return LocationType.RESIDENTIAL

    # Whole words only, so "Mallam Street" is not a mall
    words = set(_WORD.findall(address.lower()))
    for location_type, keywords in LOCATION_KEYWORDS:
        for keyword in keywords:
            if words & {keyword, keyword + "s", keyword + "es"}:
                return location_type
    return LocationType.RESIDENTIAL


def resolve_location_type(endpoint: Endpoint) -> LocationType:
    """Explicit location_type on the endpoint wins over inference."""
    if endpoint.location_type is not None:
        return LocationType(endpoint.location_type)
    return classify(endpoint.address)
