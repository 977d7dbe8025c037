"""Travelpayouts cached flights proxy.

Validates the search, selects the endpoint, builds the outbound URL and
performs a single timeout-bounded fetch. The provider's JSON is returned
untouched inside the response envelope.
"""

import re
from datetime import datetime, timezone

import httpx
from pydantic import ValidationError

from config import FLIGHTS_TIMEOUT, FLIGHTS_USER_AGENT
from models.flights import FlightSearchRequest, ProxyResponse
from providers.base import fetch_json, logger
from providers.endpoints import EndpointDefinition, select_endpoint
from providers.errors import ConfigurationError, SearchValidationError
from providers.request_builder import build_flights_url

IATA_RE = re.compile(r"[A-Za-z]{2,3}")

_CODE_FIELDS = (
    ("origin", "Origin"),
    ("destination", "Destination"),
    ("airline_code", "Airline code"),
)


def parse_flight_search(body) -> FlightSearchRequest:
    if body is None:
        body = {}
    if not isinstance(body, dict):
        raise SearchValidationError("Request body must be a JSON object")
    try:
        return FlightSearchRequest.model_validate(body)
    except ValidationError as e:
        err = e.errors()[0]
        field = ".".join(str(p) for p in err["loc"]) or "body"
        raise SearchValidationError(f"Invalid parameter {field}: {err['msg']}") from e


def validate_flight_search(search: FlightSearchRequest) -> EndpointDefinition:
    """Run the ordered checks; the first failure short-circuits."""
    if not search.origin:
        raise SearchValidationError("Missing required parameter: origin")

    for field, label in _CODE_FIELDS:
        value = getattr(search, field)
        if value and not (isinstance(value, str) and IATA_RE.fullmatch(value)):
            raise SearchValidationError(f"{label} must be a valid 2-3 letter IATA code")

    endpoint = select_endpoint(search.type)
    for field in endpoint.required:
        if not getattr(search, field):
            raise SearchValidationError(f"Missing required parameter: {field}")
    return endpoint


def _count_entries(data) -> int:
    inner = data.get("data") if isinstance(data, dict) else None
    if isinstance(inner, (dict, list)):
        return len(inner)
    return 0


def requested_type(search: FlightSearchRequest, endpoint: EndpointDefinition) -> str:
    """The tag the caller asked for, even when an unknown tag was served by cheap."""
    if search.type is None or search.type == "":
        return endpoint.name
    return str(search.type)


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


async def search_cached_flights(client: httpx.AsyncClient, body, token: str | None) -> dict:
    """Proxy one flight search to Travelpayouts.

    Returns: { success, data, endpoint, timestamp }
    Raises ProxyError subclasses for every failure.
    """
    if not token:
        logger.error("Travelpayouts API token not configured")
        raise ConfigurationError(
            "API token not configured. Please set TRAVELPAYOUTS_API_TOKEN environment variable."
        )

    search = parse_flight_search(body)
    endpoint = validate_flight_search(search)
    url = build_flights_url(search, token, endpoint)

    data = await fetch_json(
        client,
        url,
        timeout=FLIGHTS_TIMEOUT,
        headers={
            "X-Access-Token": token,
            "Accept-Encoding": "gzip, deflate",
            "User-Agent": FLIGHTS_USER_AGENT,
        },
        description=f"flights:{endpoint.name}",
        failure_message=f"Failed to fetch {endpoint.name} flight data from Travelpayouts API",
    )

    logger.info(
        f"[flights:{endpoint.name}] Fetched {search.origin}->{search.destination or '*'}, "
        f"{_count_entries(data)} entries"
    )
    return ProxyResponse(
        success=True,
        data=data,
        endpoint=requested_type(search, endpoint),
        timestamp=_utc_timestamp(),
    ).model_dump(exclude_none=True)
