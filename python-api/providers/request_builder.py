"""Outbound Travelpayouts URL construction."""

import httpx

from models.flights import FlightSearchRequest
from providers.endpoints import EndpointDefinition, select_endpoint

_UPPERCASE = frozenset({"origin", "destination", "airline_code", "currency"})

# Sent whenever set, even as false/0.
_SENT_WHEN_FALSY = frozenset({"show_to_affiliates", "one_way", "trip_class"})


def _format_value(key: str, value) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if key in _UPPERCASE:
        return str(value).upper()
    return str(value)


def build_query(endpoint: EndpointDefinition, search: FlightSearchRequest) -> list[tuple[str, str]]:
    """Pick the endpoint's accepted keys out of the search, dropping the rest."""
    pairs = []
    for key in endpoint.params:
        value = getattr(search, key, None)
        if value is None:
            continue
        if not value and key not in _SENT_WHEN_FALSY:
            continue
        pairs.append((key, _format_value(key, value)))
    return pairs


def build_flights_url(
    search: FlightSearchRequest,
    token: str,
    endpoint: EndpointDefinition | None = None,
) -> str:
    """Build the fully-qualified provider URL, access token included."""
    endpoint = endpoint or select_endpoint(search.type)
    pairs = build_query(endpoint, search)
    pairs.append(("token", token))
    return str(httpx.URL(endpoint.base_url, params=pairs))
