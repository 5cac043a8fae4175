"""
Request models - Pydantic schemas for search input validation
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import Optional, Dict, Any
from datetime import date

from .flight import CabinClass


MAX_SEATED_TRAVELERS = 9


class FlightSearchParams(BaseModel):
    """
    Flight offer search parameters

    Mirrors the query accepted by the provider's flight-offers endpoint.
    """
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "origin_location_code": "JFK",
                "destination_location_code": "LAX",
                "departure_date": "2026-06-15",
                "return_date": "2026-06-22",
                "adults": 1
            }
        }
    )

    origin_location_code: str = Field(
        ...,
        description="3-letter IATA code of the origin city or airport"
    )
    destination_location_code: str = Field(
        ...,
        description="3-letter IATA code of the destination city or airport"
    )
    departure_date: date = Field(..., description="Outbound date")
    return_date: Optional[date] = Field(None, description="Inbound date, omitted for one-way")

    adults: int = Field(default=1, ge=1, le=9)
    children: Optional[int] = Field(None, ge=0, le=8)
    infants: Optional[int] = Field(None, ge=0, le=9)

    travel_class: Optional[CabinClass] = None
    non_stop: Optional[bool] = None
    currency_code: Optional[str] = Field(None, pattern=r"^[A-Z]{3}$")
    max_price: Optional[int] = Field(None, ge=1)
    max: Optional[int] = Field(None, ge=1, le=250, description="Max number of offers")

    @field_validator("origin_location_code", "destination_location_code", mode="before")
    @classmethod
    def validate_iata(cls, v):
        """Normalize and validate IATA location codes"""
        if not isinstance(v, str):
            raise ValueError("location code must be a string")
        code = v.strip().upper()
        if len(code) != 3 or not code.isalpha():
            raise ValueError(f"Invalid IATA location code: {v!r}")
        return code

    @model_validator(mode="after")
    def validate_trip(self):
        """Cross-field checks on dates and travelers"""
        if self.origin_location_code == self.destination_location_code:
            raise ValueError("origin and destination must differ")
        if self.return_date is not None and self.return_date < self.departure_date:
            raise ValueError("return_date cannot be before departure_date")
        if (self.infants or 0) > self.adults:
            raise ValueError("each infant must travel with an adult")
        if self.adults + (self.children or 0) > MAX_SEATED_TRAVELERS:
            raise ValueError(f"at most {MAX_SEATED_TRAVELERS} seated travelers per search")
        return self

    @property
    def passengers(self) -> int:
        return self.adults + (self.children or 0) + (self.infants or 0)

    @property
    def is_round_trip(self) -> bool:
        return self.return_date is not None

    def to_query(self) -> Dict[str, Any]:
        """
        Render the provider query string parameters

        Unset optional parameters are omitted entirely.
        """
        query: Dict[str, Any] = {
            "originLocationCode": self.origin_location_code,
            "destinationLocationCode": self.destination_location_code,
            "departureDate": self.departure_date.isoformat(),
            "adults": self.adults,
        }
        if self.return_date:
            query["returnDate"] = self.return_date.isoformat()
        if self.children:
            query["children"] = self.children
        if self.infants:
            query["infants"] = self.infants
        if self.travel_class:
            query["travelClass"] = self.travel_class.value
        if self.non_stop is not None:
            query["nonStop"] = "true" if self.non_stop else "false"
        if self.currency_code:
            query["currencyCode"] = self.currency_code
        if self.max_price:
            query["maxPrice"] = self.max_price
        if self.max:
            query["max"] = self.max
        return query
