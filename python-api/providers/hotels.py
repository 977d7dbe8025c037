"""Hotellook cached hotels proxy.

Two sequential provider calls:
1. Lookup resolves the free-text query to a location or a hotel
2. Popularity listing (location) or cached price (hotel) for that id

Every returned hotel carries a displayable price. When the provider has no
price the value is a deterministic placeholder and ``priceEstimated`` is set.
"""

import hashlib
from dataclasses import dataclass

import httpx
from pydantic import ValidationError

from config import (
    HOTELS_CACHE_URL,
    HOTELS_LANGUAGE,
    HOTELS_LOOKUP_LIMIT,
    HOTELS_LOOKUP_URL,
    HOTELS_SELECTION_LIMIT,
    HOTELS_SELECTIONS_URL,
    HOTELS_TIMEOUT,
)
from models.hotels import (
    HotelResult,
    HotelSearchRequest,
    LookupHotel,
    LookupLocation,
    LookupResults,
)
from providers.base import fetch_json, logger, redact
from providers.errors import (
    ConfigurationError,
    ProxyError,
    SearchValidationError,
    UnknownUpstreamError,
)

DEFAULT_STARS = 3
DEFAULT_RATING = 70
DEFAULT_DISTANCE = 5


@dataclass(frozen=True)
class ResolvedTarget:
    """Outcome of the lookup step: exactly one of location/hotel is set."""

    kind: str
    location: LookupLocation | None = None
    hotel: LookupHotel | None = None


def parse_hotel_search(body) -> HotelSearchRequest:
    if body is None:
        body = {}
    if not isinstance(body, dict):
        raise SearchValidationError("Request body must be a JSON object")
    try:
        search = HotelSearchRequest.model_validate(body)
    except ValidationError as e:
        err = e.errors()[0]
        field = ".".join(str(p) for p in err["loc"]) or "body"
        raise SearchValidationError(f"Invalid parameter {field}: {err['msg']}") from e

    if not search.query or not search.query.strip():
        raise SearchValidationError("Missing required parameter: query")
    if search.checkIn and search.checkOut and search.checkOut < search.checkIn:
        raise SearchValidationError("checkOut must not be before checkIn")
    return search


def _url(base: str, params: dict) -> str:
    return str(httpx.URL(base, params={k: v for k, v in params.items() if v is not None}))


async def lookup(client: httpx.AsyncClient, search: HotelSearchRequest, token: str) -> LookupResults:
    url = _url(HOTELS_LOOKUP_URL, {
        "query": search.query.strip(),
        "lang": HOTELS_LANGUAGE,
        "lookFor": "hotel" if search.type == "hotel" else "both",
        "limit": str(HOTELS_LOOKUP_LIMIT),
        "token": token,
    })
    data = await fetch_json(
        client, url,
        timeout=HOTELS_TIMEOUT,
        description="hotels:lookup",
        failure_message="Lookup API request failed",
    )
    results = data.get("results") if isinstance(data, dict) else None
    if not isinstance(results, dict):
        return LookupResults()
    try:
        return LookupResults(
            locations=results.get("locations") or [],
            hotels=results.get("hotels") or [],
        )
    except ValidationError as e:
        raise UnknownUpstreamError("Lookup API returned an unexpected shape") from e


def resolve_target(search: HotelSearchRequest, results: LookupResults) -> ResolvedTarget | None:
    """Pick the branch for step two, or None when nothing matched."""
    order = ("hotel", "location") if search.type == "hotel" else ("location", "hotel")
    for kind in order:
        if kind == "location" and results.locations:
            return ResolvedTarget("location", location=results.locations[0])
        if kind == "hotel" and results.hotels:
            return ResolvedTarget("hotel", hotel=results.hotels[0])
    return None


async def fetch_location_hotels(
    client: httpx.AsyncClient, search: HotelSearchRequest, location: LookupLocation, token: str
) -> list[dict]:
    url = _url(HOTELS_SELECTIONS_URL, {
        "currency": search.currency.lower(),
        "language": HOTELS_LANGUAGE,
        "limit": str(HOTELS_SELECTION_LIMIT),
        "id": location.id,
        "type": "popularity",
        "check_in": search.checkIn.isoformat() if search.checkIn else None,
        "check_out": search.checkOut.isoformat() if search.checkOut else None,
        "token": token,
    })
    data = await fetch_json(
        client, url,
        timeout=HOTELS_TIMEOUT,
        description="hotels:popularity",
        failure_message="Hotel selections request failed",
    )
    popularity = data.get("popularity") if isinstance(data, dict) else None
    if not isinstance(popularity, list):
        return []
    return [h for h in popularity if isinstance(h, dict)][:HOTELS_SELECTION_LIMIT]


async def fetch_hotel_price(
    client: httpx.AsyncClient, search: HotelSearchRequest, hotel: LookupHotel, token: str
) -> list[dict]:
    url = _url(HOTELS_CACHE_URL, {
        "locationId": hotel.locationId,
        "hotelId": hotel.id,
        "checkIn": search.checkIn.isoformat() if search.checkIn else None,
        "checkOut": search.checkOut.isoformat() if search.checkOut else None,
        "adults": str(search.adults),
        "children": str(search.children),
        "currency": search.currency.lower(),
        "limit": "1",
        "token": token,
    })
    data = await fetch_json(
        client, url,
        timeout=HOTELS_TIMEOUT,
        description="hotels:cache",
        failure_message="Hotel price request failed",
    )
    # cache.json answers with a list for multi-hotel queries
    if isinstance(data, list):
        data = data[0] if data else None
    entry = hotel.model_dump()
    if isinstance(data, dict):
        entry["priceInfo"] = data
    return [entry]


def estimate_price(hotel_id: str) -> int:
    """Stable placeholder nightly price in [50, 249] for hotels with no price data."""
    digest = hashlib.md5(hotel_id.encode()).hexdigest()
    return int(digest[:8], 16) % 200 + 50


def normalize_hotel(raw: dict, index: int, search: HotelSearchRequest, results: LookupResults) -> HotelResult:
    """Map a popularity or cache entry to a HotelResult.

    Price order: last_price_info.price, then priceInfo.priceFrom, then a placeholder.
    """
    price_info = raw.get("priceInfo")
    if not isinstance(price_info, dict):
        price_info = {}
    last_price_info = raw.get("last_price_info")
    if not isinstance(last_price_info, dict):
        last_price_info = {}
    hotel_id = raw.get("hotel_id") or raw.get("id")
    hotel_id = str(hotel_id) if hotel_id else f"hotel-{index}"
    name = raw.get("name") or raw.get("label") or f"Hotel {index + 1}"

    if raw.get("locationName"):
        location = raw["locationName"]
    elif results.locations and results.locations[0].fullName:
        location = results.locations[0].fullName
    else:
        location = search.query

    estimated = False
    last_price = last_price_info.get("price")
    if last_price:
        price = last_price
    elif price_info.get("priceFrom"):
        price = price_info["priceFrom"]
    else:
        price = estimate_price(hotel_id)
        estimated = True

    return HotelResult(
        id=hotel_id,
        name=name,
        location=location,
        price=price,
        stars=raw.get("stars") or price_info.get("stars") or DEFAULT_STARS,
        rating=raw.get("rating") or DEFAULT_RATING,
        distance=raw.get("distance") or DEFAULT_DISTANCE,
        amenities=["Free WiFi"] if raw.get("has_wifi") else [],
        description=f"{name} located in {raw.get('locationName') or search.query}.",
        priceEstimated=estimated,
    )


async def search_cached_hotels(client: httpx.AsyncClient, body, token: str | None) -> dict:
    """Resolve the query and return normalized hotels.

    Returns: { success: true, data: [...] }
    Raises ProxyError subclasses; no partial results are returned.
    """
    if not token:
        logger.error("TravelPayouts token not configured")
        raise ConfigurationError("TravelPayouts token not configured")

    search = parse_hotel_search(body)
    results = await lookup(client, search, token)

    target = resolve_target(search, results)
    if target is None:
        logger.info(f"[hotels] No matches for {search.query!r}")
        return {"success": True, "data": []}

    if target.kind == "location":
        raw_hotels = await fetch_location_hotels(client, search, target.location, token)
    else:
        raw_hotels = await fetch_hotel_price(client, search, target.hotel, token)

    hotels = [normalize_hotel(h, i, search, results) for i, h in enumerate(raw_hotels)]
    logger.info(f"[hotels:{target.kind}] {len(hotels)} hotels for {search.query!r}")
    return {"success": True, "data": [h.model_dump() for h in hotels]}


def hotel_error_body(exc: ProxyError, token: str | None = None) -> dict:
    """Caller-facing body for a failed hotel search."""
    if isinstance(exc, (ConfigurationError, SearchValidationError)):
        return {"success": False, "error": exc.message}
    return {
        "success": False,
        "error": "Failed to search hotels",
        "details": redact(exc.message, token),
    }
