"""
Flight data models - Normalized, immutable flight offer schemas
Independent of the upstream Amadeus wire format
"""

import re
from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator
from typing import Optional, Tuple
from datetime import date, datetime
from enum import Enum


class CabinClass(str, Enum):
    """Cabin classes offered by the provider"""
    ECONOMY = "ECONOMY"
    PREMIUM_ECONOMY = "PREMIUM_ECONOMY"
    BUSINESS = "BUSINESS"
    FIRST = "FIRST"


class Direction(str, Enum):
    """Direction of an itinerary within an offer"""
    OUTBOUND = "outbound"
    INBOUND = "inbound"


DURATION_RE = re.compile(r"^P(?:(\d+)D)?(?:T(?:(\d+)H)?(?:(\d+)M)?)?$")


class Duration(BaseModel):
    """
    Elapsed time of a segment or itinerary

    total_minutes and formatted are derived from hours/minutes and cannot be
    set independently.
    """
    model_config = ConfigDict(frozen=True)

    hours: int = Field(default=0, ge=0)
    minutes: int = Field(default=0, ge=0)

    @computed_field
    @property
    def total_minutes(self) -> int:
        return self.hours * 60 + self.minutes

    @computed_field
    @property
    def formatted(self) -> str:
        return f"{self.hours}h {self.minutes}m"

    def to_iso(self) -> str:
        """Render back to the compact provider notation, e.g. PT2H30M"""
        if not self.hours and not self.minutes:
            return "PT0M"
        text = "PT"
        if self.hours:
            text += f"{self.hours}H"
        if self.minutes:
            text += f"{self.minutes}M"
        return text

    @classmethod
    def from_minutes(cls, total_minutes: int) -> "Duration":
        hours, minutes = divmod(int(total_minutes), 60)
        return cls(hours=hours, minutes=minutes)


def parse_duration(value: str) -> Duration:
    """
    Parse a compact ISO 8601 duration ("PT2H30M", "PT45M", "PT3H")

    Missing hour or minute components default to 0. A day component is
    folded into hours.

    Raises:
        ValueError: If the string is not a recognizable duration
    """
    if not isinstance(value, str):
        raise ValueError(f"Duration must be a string, got {type(value).__name__}")

    match = DURATION_RE.match(value.strip())
    if not match or value.strip() == "P":
        raise ValueError(f"Unrecognized duration: {value!r}")

    days = int(match.group(1) or 0)
    hours = int(match.group(2) or 0)
    minutes = int(match.group(3) or 0)
    return Duration(hours=days * 24 + hours, minutes=minutes)


class Price(BaseModel):
    """Money for one offer, derived once from the provider grand total"""
    model_config = ConfigDict(frozen=True)

    total: float = Field(..., ge=0, description="Grand total for all travelers")
    base: float = Field(..., ge=0, description="Base fare before taxes")
    currency: str = Field(..., pattern=r"^[A-Z]{3}$", description="3-letter currency code")
    per_traveler: float = Field(..., ge=0, description="Grand total divided by priced travelers")


class Airline(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str
    name: str


class FlightPoint(BaseModel):
    """Departure or arrival point of a segment"""
    model_config = ConfigDict(frozen=True)

    airport_code: str = Field(..., description="3-letter IATA airport code")
    city_code: str = Field(..., description="IATA city code (falls back to airport code)")
    country_code: str = Field(default="", description="ISO country code, empty when unknown")
    terminal: Optional[str] = None
    date_time: str = Field(..., description="Local ISO 8601 timestamp as sent by the provider")
    time: str = Field(..., description="Local time of day, HH:MM")
    date: str = Field(..., description="Local date, YYYY-MM-DD")

    @property
    def hour(self) -> int:
        return int(self.time.split(":")[0])


class Segment(BaseModel):
    """
    One flown leg on a single flight number

    operating_airline is None when the provider does not report a distinct
    operating carrier.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    departure: FlightPoint
    arrival: FlightPoint
    duration: Duration
    flight_number: str = Field(..., description="Marketing carrier code + flight number")
    airline: Airline
    operating_airline: Optional[Airline] = None
    aircraft: str
    stops: int = Field(default=0, ge=0)


class Itinerary(BaseModel):
    """One direction of an offer"""
    model_config = ConfigDict(frozen=True)

    direction: Direction
    duration: Duration = Field(..., description="Provider-declared total, layovers included")
    segments: Tuple[Segment, ...] = Field(..., min_length=1)

    @computed_field
    @property
    def stops(self) -> int:
        return len(self.segments) - 1

    @property
    def first_segment(self) -> Segment:
        return self.segments[0]

    @property
    def last_segment(self) -> Segment:
        return self.segments[-1]


class FlightOffer(BaseModel):
    """
    A priced, bookable flight proposal

    is_one_way and is_non_stop are derived from the itineraries, so they can
    never disagree with them.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    price: Price
    itineraries: Tuple[Itinerary, ...] = Field(..., min_length=1, max_length=2)
    validating_airline: Airline
    booking_class: CabinClass = CabinClass.ECONOMY
    seats_available: int = Field(default=0, ge=0)
    last_ticketing_date: Optional[str] = None

    @model_validator(mode="after")
    def check_directions(self):
        """Outbound first, inbound second"""
        for index, itinerary in enumerate(self.itineraries):
            expected = Direction.OUTBOUND if index == 0 else Direction.INBOUND
            if itinerary.direction != expected:
                raise ValueError(
                    f"itinerary {index} must be {expected.value}, got {itinerary.direction.value}"
                )
        return self

    @computed_field
    @property
    def is_one_way(self) -> bool:
        return len(self.itineraries) == 1

    @computed_field
    @property
    def is_non_stop(self) -> bool:
        return all(itinerary.stops == 0 for itinerary in self.itineraries)

    @property
    def outbound(self) -> Itinerary:
        return self.itineraries[0]

    @property
    def inbound(self) -> Optional[Itinerary]:
        return self.itineraries[1] if len(self.itineraries) > 1 else None

    @property
    def average_duration_minutes(self) -> float:
        """Mean itinerary duration, fair for both one-way and round trips"""
        total = sum(itinerary.duration.total_minutes for itinerary in self.itineraries)
        return total / len(self.itineraries)


class SearchSummary(BaseModel):
    """Echo of the parameters a result set was produced for"""
    model_config = ConfigDict(frozen=True)

    origin: str
    destination: str
    departure_date: date
    return_date: Optional[date] = None
    passengers: int = Field(..., ge=1)


class SearchMeta(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_count: int = Field(..., ge=0)
    search_params: SearchSummary
    searched_at: datetime


class FlightSearchResult(BaseModel):
    """Normalized offers plus metadata for one search invocation"""
    model_config = ConfigDict(frozen=True)

    offers: Tuple[FlightOffer, ...] = ()
    meta: SearchMeta

    @field_validator("offers", mode="before")
    @classmethod
    def coerce_offers(cls, v):
        return tuple(v) if isinstance(v, list) else v


def format_offer_summary(offer: FlightOffer) -> str:
    """
    Generate a concise, human-readable offer summary

    Args:
        offer: FlightOffer object

    Returns:
        Formatted string with key offer information
    """
    legs = []
    for itinerary in offer.itineraries:
        first = itinerary.first_segment
        last = itinerary.last_segment
        stops = "non-stop" if itinerary.stops == 0 else f"{itinerary.stops} stop(s)"
        legs.append(
            f"{first.departure.airport_code} {first.departure.time} → "
            f"{last.arrival.airport_code} {last.arrival.time} "
            f"({itinerary.duration.formatted}, {stops})"
        )

    return (
        f"[{offer.id}] {offer.price.total:.2f} {offer.price.currency} | "
        f"{offer.validating_airline.name} | "
        + " | ".join(legs)
    )
