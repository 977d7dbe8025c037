"""Pydantic models for the cached flights proxy."""

from typing import Any

from pydantic import BaseModel, Field

from config import DEFAULT_CURRENCY, DEFAULT_LIMIT


class FlightSearchRequest(BaseModel):
    """Body of POST /api/cached-flights.

    Only ``origin`` is required; which of the remaining fields reach the
    provider depends on the endpoint selected by ``type``.
    """

    # Any: a non-string type falls back to cheap, non-string codes fail the IATA check
    type: Any = "cheap"
    origin: Any = None
    destination: Any = None
    depart_date: str | None = None
    return_date: str | None = None
    currency: str | None = DEFAULT_CURRENCY
    limit: int | None = DEFAULT_LIMIT
    page: int | None = None
    show_to_affiliates: bool | None = True
    period_type: str | None = "year"
    calendar_type: str | None = "departure_date"
    airline_code: Any = None
    flexibility: int | None = None
    distance: int | None = None
    length: int | None = None
    trip_class: int | None = Field(0, ge=0, le=3)
    one_way: bool | None = False
    sorting: str | None = "price"
    trip_duration: int | None = None
    month: str | None = None

    class Config:
        extra = "ignore"


class ProxyResponse(BaseModel):
    success: bool
    data: Any = None
    error: str | None = None
    endpoint: str | None = None
    timestamp: str | None = None
