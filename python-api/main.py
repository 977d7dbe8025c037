"""FastAPI search proxy - Travelpayouts cached flights and Hotellook hotels."""

import asyncio
import json
import sys
import os
import time as _time
from contextlib import asynccontextmanager

import httpx
from fastapi import Depends, FastAPI, Query, Request
from fastapi.responses import JSONResponse, Response

# Proxy health tracking
_proxy_stats = {
    "flights": {"success": 0, "failure": 0, "empty": 0, "last_success": 0},
    "hotels": {"success": 0, "failure": 0, "empty": 0, "last_success": 0},
}

# Active request counter for graceful shutdown
_active_requests = 0

# Ensure project root is on path for imports
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from config import PORT, HOST, ALLOWED_ORIGINS, DRAIN_TIMEOUT, get_api_token
from providers.base import redact
from providers.errors import ProxyError
from providers.flights import IATA_RE, search_cached_flights
from providers.hotels import hotel_error_body, search_cached_hotels
from utils.affiliate import build_flight_booking_url

CORS_HEADERS = {
    "Access-Control-Allow-Credentials": "true",
    "Access-Control-Allow-Methods": "GET,OPTIONS,PATCH,DELETE,POST,PUT",
    "Access-Control-Allow-Headers": (
        "X-CSRF-Token, X-Requested-With, Accept, Accept-Version, Content-Length, "
        "Content-MD5, Content-Type, Date, X-Api-Version"
    ),
}

# Marks a body that was present but not valid JSON
_MALFORMED = object()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open/close the shared outbound HTTP client with the app."""
    print("Starting outbound HTTP client...")
    app.state.http_client = httpx.AsyncClient(follow_redirects=True)
    yield
    print("Shutting down: draining active requests...")
    for _ in range(int(DRAIN_TIMEOUT / 0.5)):
        if _active_requests == 0:
            break
        await asyncio.sleep(0.5)
    if _active_requests > 0:
        print(f"WARNING: Shutting down with {_active_requests} active requests still in progress")
    print("Closing outbound HTTP client...")
    await app.state.http_client.aclose()


app = FastAPI(title="Travelix Search Proxy", lifespan=lifespan)


def get_http_client(request: Request) -> httpx.AsyncClient:
    client = getattr(request.app.state, "http_client", None)
    if client is None:
        client = httpx.AsyncClient(follow_redirects=True)
        request.app.state.http_client = client
    return client


def cors_headers(origin: str | None) -> dict:
    """CORS headers for a response, with the allowed origin taken from ALLOWED_ORIGINS."""
    headers = dict(CORS_HEADERS)
    if "*" in ALLOWED_ORIGINS:
        headers["Access-Control-Allow-Origin"] = "*"
    elif origin in ALLOWED_ORIGINS:
        headers["Access-Control-Allow-Origin"] = origin
        headers["Vary"] = "Origin"
    return headers


def _json(request: Request, content: dict, status_code: int = 200) -> JSONResponse:
    return JSONResponse(
        content, status_code=status_code, headers=cors_headers(request.headers.get("origin"))
    )


async def _read_json(request: Request):
    raw = await request.body()
    if not raw.strip():
        return None
    try:
        return json.loads(raw)
    except ValueError:
        return _MALFORMED


def _record(name: str, outcome: str):
    _proxy_stats[name][outcome] += 1
    if outcome == "success":
        _proxy_stats[name]["last_success"] = _time.time()


def _method_not_allowed(request: Request) -> JSONResponse:
    resp = _json(request, {"success": False, "error": "Method not allowed. Use POST."}, 405)
    resp.headers["Allow"] = "POST, OPTIONS"
    return resp


# ── Health check ──
@app.get("/health")
async def health():
    now = _time.time()
    proxy_health = {}
    for name, stats in _proxy_stats.items():
        total = stats["success"] + stats["failure"] + stats["empty"]
        success_rate = round(stats["success"] / total * 100, 1) if total > 0 else None
        last_success_ago = round(now - stats["last_success"]) if stats["last_success"] > 0 else None
        proxy_health[name] = {
            "total_requests": total,
            "success_rate": success_rate,
            "last_success_seconds_ago": last_success_ago,
        }
    return {
        "status": "ok",
        "token_configured": get_api_token() is not None,
        "proxies": proxy_health,
    }


# ── Cached flights (Travelpayouts) ──
@app.options("/api/cached-flights")
@app.options("/api/cached-hotels")
async def api_preflight(request: Request):
    return Response(status_code=200, headers=cors_headers(request.headers.get("origin")))


@app.api_route("/api/cached-flights", methods=["GET", "PUT", "PATCH", "DELETE"])
@app.api_route("/api/cached-hotels", methods=["GET", "PUT", "PATCH", "DELETE"])
async def api_wrong_method(request: Request):
    return _method_not_allowed(request)


@app.post("/api/cached-flights")
async def api_cached_flights(
    request: Request,
    client: httpx.AsyncClient = Depends(get_http_client),
):
    global _active_requests
    request_id = request.headers.get("x-request-id", "no-id")
    _active_requests += 1
    try:
        body = await _read_json(request)
        if isinstance(body, dict):
            print(f"[api] [{request_id}] cached-flights {body.get('type') or 'cheap'} "
                  f"{body.get('origin')}->{body.get('destination')}")
        result = await search_cached_flights(client, body, get_api_token())
        data = result.get("data")
        if isinstance(data, dict) and not data.get("data"):
            _record("flights", "empty")
        else:
            _record("flights", "success")
        return _json(request, result)
    except ProxyError as e:
        _record("flights", "failure")
        print(f"[api] [{request_id}] cached-flights error: {e.message}")
        return _json(request, {"success": False, "error": e.message}, e.status_code)
    except Exception as e:
        _record("flights", "failure")
        print(f"[api] [{request_id}] cached-flights error: {type(e).__name__}")
        return _json(
            request,
            {"success": False, "error": "Failed to fetch flight data from Travelpayouts API"},
            500,
        )
    finally:
        _active_requests -= 1


# ── Cached hotels (Hotellook) ──
@app.post("/api/cached-hotels")
async def api_cached_hotels(
    request: Request,
    client: httpx.AsyncClient = Depends(get_http_client),
):
    global _active_requests
    request_id = request.headers.get("x-request-id", "no-id")
    _active_requests += 1
    token = get_api_token()
    try:
        body = await _read_json(request)
        if isinstance(body, dict):
            print(f"[api] [{request_id}] cached-hotels {body.get('type')} {body.get('query')!r}")
        result = await search_cached_hotels(client, body, token)
        _record("hotels", "success" if result["data"] else "empty")
        return _json(request, result)
    except ProxyError as e:
        _record("hotels", "failure")
        print(f"[api] [{request_id}] cached-hotels error: {e.message}")
        return _json(request, hotel_error_body(e, token), e.status_code)
    except Exception as e:
        _record("hotels", "failure")
        print(f"[api] [{request_id}] cached-hotels error: {type(e).__name__}")
        return _json(
            request,
            {
                "success": False,
                "error": "Failed to search hotels",
                "details": redact(str(e), token),
            },
            500,
        )
    finally:
        _active_requests -= 1


# ── Affiliate booking link (Aviasales) ──
@app.get("/api/booking-link")
async def api_booking_link(
    request: Request,
    origin: str = Query(..., description="Origin IATA code"),
    destination: str = Query(..., description="Destination IATA code"),
    depart_date: str | None = Query(None, description="Departure date YYYY-MM-DD"),
    departure_at: str | None = Query(None, description="Chosen flight's departure timestamp"),
    adults: int = Query(1, ge=1, le=9),
    children: int = Query(0, ge=0, le=6),
    infants: int = Query(0, ge=0, le=6),
    currency: str = Query("USD", min_length=3, max_length=3),
):
    for label, code in (("Origin", origin), ("Destination", destination)):
        if not IATA_RE.fullmatch(code):
            return _json(
                request,
                {"success": False, "error": f"{label} must be a valid 2-3 letter IATA code"},
                400,
            )

    url = build_flight_booking_url(
        search={
            "origin": origin.upper(),
            "destination": destination.upper(),
            "depart_date": depart_date,
            "adults": adults,
            "children": children,
            "infants": infants,
        },
        flight={"departure_at": departure_at} if departure_at else None,
        currency=currency.upper(),
    )
    return _json(request, {"success": True, "url": url})


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host=HOST, port=PORT, reload=False)
