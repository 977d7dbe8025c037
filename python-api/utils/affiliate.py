"""Affiliate deep links to the Aviasales booking site.

Parameter names are fixed by the affiliate program; renaming any of them
breaks commission attribution.
"""

import httpx

from config import AFFILIATE_BOOKING_URL, AFFILIATE_MARKER, DEFAULT_CURRENCY


def build_flight_booking_url(
    search: dict,
    flight: dict | None = None,
    currency: str | None = None,
    marker: str = AFFILIATE_MARKER,
) -> str:
    """Build the booking link for a chosen flight.

    Values from the flight (``origin``, ``destination``, date part of
    ``departure_at``) win over the ones the user searched with.
    """
    flight = flight or {}
    departure_at = flight.get("departure_at") or ""
    depart_date = departure_at.split("T")[0] or search.get("depart_date") or ""

    params = [
        ("marker", marker),
        ("origin", flight.get("origin") or search.get("origin") or ""),
        ("destination", flight.get("destination") or search.get("destination") or ""),
        ("depart_date", depart_date),
        ("adults", str(search.get("adults") or "1")),
        ("children", str(search.get("children") or "0")),
        ("infants", str(search.get("infants") or "0")),
        ("currency", currency or DEFAULT_CURRENCY),
        ("with_request", "true"),
    ]
    return str(httpx.URL(AFFILIATE_BOOKING_URL, params=params))
