"""Pydantic models for the cached hotels proxy."""

from datetime import date
from typing import Literal

from pydantic import BaseModel, Field

from config import DEFAULT_CURRENCY


class HotelSearchRequest(BaseModel):
    type: Literal["location", "hotel", "lookup", "cache", "static-hotels"] = "location"
    query: str | None = None
    checkIn: date | None = None
    checkOut: date | None = None
    adults: int = Field(2, ge=1)
    children: int = Field(0, ge=0)
    currency: str = DEFAULT_CURRENCY


class LookupLocation(BaseModel):
    id: str
    cityName: str | None = None
    fullName: str | None = None
    countryCode: str | None = None
    countryName: str | None = None

    class Config:
        extra = "allow"
        coerce_numbers_to_str = True


class LookupHotel(BaseModel):
    id: str
    label: str | None = None
    locationName: str | None = None
    locationId: str | None = None
    fullName: str | None = None

    class Config:
        extra = "allow"
        coerce_numbers_to_str = True


class LookupResults(BaseModel):
    locations: list[LookupLocation] = []
    hotels: list[LookupHotel] = []


class HotelResult(BaseModel):
    id: str
    name: str
    location: str
    price: float
    stars: float
    rating: float
    distance: float
    amenities: list[str] = []
    description: str = ""
    contact: str = "Contact information available on booking"
    priceEstimated: bool = False
