"""Travelpayouts cached-price endpoint catalog.

Each search ``type`` maps to one immutable EndpointDefinition. The table is
the single source of truth for which query keys reach the provider.
"""

from dataclasses import dataclass
from types import MappingProxyType

from config import TRAVELPAYOUTS_BASE_URL

DEFAULT_ENDPOINT = "cheap"


@dataclass(frozen=True)
class EndpointDefinition:
    name: str
    path: str
    params: tuple[str, ...]
    required: tuple[str, ...] = ()

    @property
    def base_url(self) -> str:
        return f"{TRAVELPAYOUTS_BASE_URL}{self.path}"


_DEFINITIONS = (
    EndpointDefinition(
        "cheap", "/v1/prices/cheap",
        ("origin", "destination", "depart_date", "return_date", "currency", "page"),
        required=("origin",),
    ),
    EndpointDefinition(
        "direct", "/v1/prices/direct",
        ("origin", "destination", "depart_date", "return_date", "currency"),
        required=("origin",),
    ),
    EndpointDefinition(
        "calendar", "/v1/prices/calendar",
        ("origin", "destination", "depart_date", "return_date", "calendar_type", "length", "currency"),
        required=("origin",),
    ),
    EndpointDefinition(
        "monthly", "/v1/prices/monthly",
        ("origin", "destination", "currency"),
        required=("origin",),
    ),
    EndpointDefinition(
        "latest", "/v2/prices/latest",
        ("origin", "destination", "currency", "period_type", "page", "limit",
         "show_to_affiliates", "one_way", "sorting", "trip_class"),
        required=("origin",),
    ),
    EndpointDefinition(
        "week-matrix", "/v2/prices/week-matrix",
        ("origin", "destination", "currency", "show_to_affiliates", "depart_date", "return_date"),
        required=("origin",),
    ),
    EndpointDefinition(
        "month-matrix", "/v2/prices/month-matrix",
        ("origin", "destination", "currency", "show_to_affiliates", "month"),
        required=("origin",),
    ),
    EndpointDefinition(
        "nearest-places-matrix", "/v2/prices/nearest-places-matrix",
        ("origin", "destination", "currency", "limit", "show_to_affiliates",
         "depart_date", "return_date", "flexibility"),
        required=("origin",),
    ),
    EndpointDefinition(
        "airline-directions", "/v1/airline-directions",
        ("airline_code", "limit"),
        required=("airline_code",),
    ),
    EndpointDefinition(
        "city-directions", "/v1/city-directions",
        ("origin", "currency"),
        required=("origin",),
    ),
)

ENDPOINTS = MappingProxyType({d.name: d for d in _DEFINITIONS})


def select_endpoint(endpoint_type) -> EndpointDefinition:
    """Return the definition for ``endpoint_type``.

    Unknown or missing types fall back to ``cheap`` rather than erroring.
    """
    if not isinstance(endpoint_type, str):
        return ENDPOINTS[DEFAULT_ENDPOINT]
    return ENDPOINTS.get(endpoint_type, ENDPOINTS[DEFAULT_ENDPOINT])
