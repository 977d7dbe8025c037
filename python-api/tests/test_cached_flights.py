import httpx
import pytest


URL = "/api/cached-flights"

PROVIDER_PAYLOAD = {
    "success": True,
    "data": {"LON": {"0": {"price": 412, "airline": "BA", "flight_number": 178}}},
    "currency": "usd",
}


def test_example_search(api, upstream, token):
    upstream.respond(200, json=PROVIDER_PAYLOAD)

    resp = api.post(URL, json={"origin": "jfk", "destination": "lon", "type": "cheap"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["endpoint"] == "cheap"
    assert body["data"] == PROVIDER_PAYLOAD
    assert body["timestamp"].endswith("Z")

    assert len(upstream.requests) == 1
    sent = upstream.requests[0]
    assert sent.url.path == "/v1/prices/cheap"
    assert sent.url.params["origin"] == "JFK"
    assert sent.url.params["destination"] == "LON"
    assert sent.url.params["token"] == token
    assert sent.headers["X-Access-Token"] == token


def test_token_never_returned(api, upstream, token):
    upstream.respond(200, json=PROVIDER_PAYLOAD)
    resp = api.post(URL, json={"origin": "jfk"})
    assert token not in resp.text


@pytest.mark.parametrize("requested,echoed", [("bogus", "bogus"), (5, "5"), (["latest"], "['latest']")])
def test_unknown_type_is_served_by_cheap(api, upstream, token, requested, echoed):
    upstream.respond(200, json=PROVIDER_PAYLOAD)
    resp = api.post(URL, json={"origin": "jfk", "type": requested})
    assert resp.status_code == 200
    assert resp.json()["endpoint"] == echoed
    assert upstream.requests[0].url.path == "/v1/prices/cheap"


def test_missing_token(api, upstream, no_token):
    resp = api.post(URL, json={"origin": "jfk"})
    assert resp.status_code == 500
    assert resp.json() == {
        "success": False,
        "error": "API token not configured. Please set TRAVELPAYOUTS_API_TOKEN environment variable.",
    }
    assert upstream.requests == []


def test_fallback_token_variable(api, upstream, no_token, monkeypatch):
    monkeypatch.setenv("TRAVELPAYOUTS_TOKEN", "legacy-token")
    upstream.respond(200, json=PROVIDER_PAYLOAD)
    resp = api.post(URL, json={"origin": "jfk"})
    assert resp.status_code == 200
    assert upstream.requests[0].url.params["token"] == "legacy-token"


def test_token_check_precedes_input_checks(api, upstream, no_token):
    resp = api.post(URL, json={"origin": "not-a-code"})
    assert resp.status_code == 500
    assert "token" in resp.json()["error"]


def test_missing_origin(api, upstream, token):
    resp = api.post(URL, json={"destination": "lon"})
    assert resp.status_code == 400
    assert resp.json() == {"success": False, "error": "Missing required parameter: origin"}
    assert upstream.requests == []


def test_empty_body_means_missing_origin(api, upstream, token):
    resp = api.post(URL, content=b"")
    assert resp.status_code == 400
    assert resp.json()["error"] == "Missing required parameter: origin"


def test_malformed_body(api, upstream, token):
    resp = api.post(URL, content=b"{origin:", headers={"Content-Type": "application/json"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Request body must be a JSON object"
    assert upstream.requests == []


@pytest.mark.parametrize("origin", ["su", "MOW", "jFk", "Lon"])
def test_valid_origins_pass(api, upstream, token, origin):
    upstream.respond(200, json=PROVIDER_PAYLOAD)
    resp = api.post(URL, json={"origin": origin})
    assert resp.status_code == 200
    assert upstream.requests[0].url.params["origin"] == origin.upper()


@pytest.mark.parametrize("origin", ["J", "JFKX", "J1K", "JF-", "NY C", "JFK\n", "ÄBC"])
def test_invalid_origins_rejected(api, upstream, token, origin):
    resp = api.post(URL, json={"origin": origin})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Origin must be a valid 2-3 letter IATA code"
    assert upstream.requests == []


def test_invalid_destination(api, upstream, token):
    resp = api.post(URL, json={"origin": "jfk", "destination": "London"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Destination must be a valid 2-3 letter IATA code"


def test_invalid_airline_code(api, upstream, token):
    resp = api.post(URL, json={"origin": "jfk", "type": "airline-directions", "airline_code": "S7X1"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Airline code must be a valid 2-3 letter IATA code"


@pytest.mark.parametrize("field,label", [
    ("origin", "Origin"),
    ("destination", "Destination"),
    ("airline_code", "Airline code"),
])
@pytest.mark.parametrize("value", [123, 1.5, ["JFK"], {"code": "JFK"}, True])
def test_non_string_codes_rejected(api, upstream, token, field, label, value):
    body = {"origin": "jfk", "type": "airline-directions", "airline_code": "SU"}
    body[field] = value
    resp = api.post(URL, json=body)
    assert resp.status_code == 400
    assert resp.json() == {"success": False, "error": f"{label} must be a valid 2-3 letter IATA code"}
    assert upstream.requests == []


def test_first_failing_check_wins(api, upstream, token):
    resp = api.post(URL, json={"origin": "1", "destination": "2", "airline_code": "3"})
    assert resp.json()["error"] == "Origin must be a valid 2-3 letter IATA code"


def test_airline_directions_requires_airline_code(api, upstream, token):
    resp = api.post(URL, json={"origin": "jfk", "type": "airline-directions"})
    assert resp.status_code == 400
    assert resp.json()["error"] == "Missing required parameter: airline_code"
    assert upstream.requests == []


def test_trip_class_out_of_range(api, upstream, token):
    resp = api.post(URL, json={"origin": "jfk", "type": "latest", "trip_class": 7})
    assert resp.status_code == 400
    assert resp.json()["error"].startswith("Invalid parameter trip_class")


def test_timeout(api, upstream, token):
    upstream.fail(httpx.ReadTimeout)
    resp = api.post(URL, json={"origin": "jfk"})
    assert resp.status_code == 408
    assert resp.json() == {"success": False, "error": "Request timeout. Please try again."}
    assert len(upstream.requests) == 1


@pytest.mark.parametrize("status,message", [
    (401, "Invalid API token. Please check your TRAVELPAYOUTS_API_TOKEN."),
    (429, "Rate limit exceeded. Please try again later."),
    (500, "Travelpayouts API is currently unavailable. Please try again later."),
    (503, "Travelpayouts API is currently unavailable. Please try again later."),
    (404, "API responded with status 404"),
])
def test_provider_errors(api, upstream, token, status, message):
    upstream.respond(status, json={"error": "nope"})
    resp = api.post(URL, json={"origin": "jfk"})
    assert resp.status_code == 500
    assert resp.json() == {"success": False, "error": message}
    # never retried
    assert len(upstream.requests) == 1


def test_network_failure(api, upstream, token):
    upstream.fail(httpx.ConnectError)
    resp = api.post(URL, json={"origin": "jfk", "type": "monthly"})
    assert resp.status_code == 500
    assert resp.json()["error"] == "Failed to fetch monthly flight data from Travelpayouts API"


def test_provider_returns_garbage(api, upstream, token):
    upstream.respond(200, text="<html>maintenance</html>")
    resp = api.post(URL, json={"origin": "jfk"})
    assert resp.status_code == 500
    assert resp.json()["success"] is False
