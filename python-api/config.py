"""Configuration for the Travelix search proxy API."""

import os

# Server
PORT = int(os.environ.get("PORT", "5000"))
HOST = os.environ.get("HOST", "0.0.0.0")

# CORS: comma-separated origins, "*" allows any
ALLOWED_ORIGINS = [o.strip() for o in os.environ.get("ALLOWED_ORIGINS", "*").split(",") if o.strip()]

# Logging
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

# Provider (Travelpayouts data API)
TRAVELPAYOUTS_BASE_URL = "https://api.travelpayouts.com"
FLIGHTS_USER_AGENT = "Travelpayouts-Cached-Flights-API/1.0"

# Provider (Hotellook)
HOTELS_LOOKUP_URL = "http://engine.hotellook.com/api/v2/lookup.json"
HOTELS_CACHE_URL = "http://engine.hotellook.com/api/v2/cache.json"
HOTELS_SELECTIONS_URL = "http://yasen.hotellook.com/tp/public/widget_location_dump.json"
HOTELS_LOOKUP_LIMIT = 10
HOTELS_SELECTION_LIMIT = 8
HOTELS_LANGUAGE = "en"

# Timeouts (seconds)
FLIGHTS_TIMEOUT = 30.0
HOTELS_TIMEOUT = 20.0

# Flight search defaults
DEFAULT_CURRENCY = "USD"
DEFAULT_LIMIT = 50

# Affiliate booking links
AFFILIATE_MARKER = os.environ.get("AFFILIATE_MARKER", "297036")
AFFILIATE_BOOKING_URL = "https://www.aviasales.com/search"

# Shutdown
DRAIN_TIMEOUT = 10.0  # seconds to wait for in-flight requests


def get_api_token() -> str | None:
    """Read the provider access token at request time.

    Returns None when neither variable is set (or both are empty).
    """
    return (
        os.environ.get("TRAVELPAYOUTS_API_TOKEN")
        or os.environ.get("TRAVELPAYOUTS_TOKEN")
        or None
    )
