"""
Filter models - Criteria applied to a result set and the bounds offered to the user
"""

import math
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import FrozenSet, Optional, Tuple
from enum import IntEnum

from .flight import Airline


class StopCategory(IntEnum):
    """Stop buckets shown to the user: non-stop, 1 stop, 2+ stops"""
    NON_STOP = 0
    ONE_STOP = 1
    TWO_PLUS = 2

    @classmethod
    def from_stops(cls, stops: int) -> "StopCategory":
        return cls(min(max(stops, 0), 2))


class FilterCriteria(BaseModel):
    """
    Multi-dimensional filter over normalized offers

    An empty stops or airlines set means no restriction on that dimension.
    The defaults let every offer through.
    """
    model_config = ConfigDict(frozen=True)

    stops: FrozenSet[StopCategory] = frozenset()
    airlines: FrozenSet[str] = frozenset()
    price_range: Tuple[float, float] = (0.0, math.inf)
    departure_hour_range: Tuple[int, int] = (0, 24)
    arrival_hour_range: Tuple[int, int] = (0, 24)
    max_duration_minutes: Optional[int] = Field(None, ge=0)

    @field_validator("airlines", mode="before")
    @classmethod
    def upper_airlines(cls, v):
        if v is None:
            return frozenset()
        return frozenset(str(code).strip().upper() for code in v)

    @field_validator("price_range")
    @classmethod
    def validate_price_range(cls, v):
        low, high = v
        if low < 0 or low > high:
            raise ValueError(f"invalid price range {v}")
        return v

    @field_validator("departure_hour_range", "arrival_hour_range")
    @classmethod
    def validate_hour_range(cls, v):
        low, high = v
        if not (0 <= low <= high <= 24):
            raise ValueError(f"hour range must lie within 0..24, got {v}")
        return v


class FilterOptions(BaseModel):
    """Bounds and choices derived from an unfiltered result set"""
    model_config = ConfigDict(frozen=True)

    airlines: Tuple[Airline, ...] = ()
    min_price: int = 0
    max_price: int = 1000
    max_duration: int = Field(default=1440, description="Minutes, rounded up to 30")
    has_non_stop: bool = False
    has_one_stop: bool = False
    has_two_plus_stops: bool = False

    @model_validator(mode="after")
    def check_price_bounds(self):
        if self.min_price > self.max_price:
            raise ValueError("min_price cannot exceed max_price")
        return self

    @property
    def stop_categories(self) -> FrozenSet[StopCategory]:
        present = set()
        if self.has_non_stop:
            present.add(StopCategory.NON_STOP)
        if self.has_one_stop:
            present.add(StopCategory.ONE_STOP)
        if self.has_two_plus_stops:
            present.add(StopCategory.TWO_PLUS)
        return frozenset(present)
