"""
Location models - Cities and airports returned by location search
"""

from pydantic import BaseModel, ConfigDict, Field, model_validator
from typing import Optional, Tuple
from enum import Enum


class LocationKind(str, Enum):
    CITY = "CITY"
    AIRPORT = "AIRPORT"


class LocationEntry(BaseModel):
    """
    A normalized city or airport

    Only cities carry nested airports. An airport is returned either on its
    own or under exactly one city.
    """
    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "example": {
                "id": "CNYC",
                "kind": "CITY",
                "code": "NYC",
                "name": "NEW YORK",
                "city_name": "NEW YORK",
                "city_code": "NYC",
                "country_name": "UNITED STATES OF AMERICA",
                "country_code": "US",
                "detailed_name": "NEW YORK/NY/US",
                "score": 100,
                "airports": []
            }
        }
    )

    id: str
    kind: LocationKind
    code: str = Field(..., description="IATA code")
    name: str
    city_name: str = ""
    city_code: str = ""
    country_name: str = ""
    country_code: str = ""
    detailed_name: str = ""
    score: Optional[float] = Field(None, description="Traveler popularity score")
    airports: Optional[Tuple["LocationEntry", ...]] = None

    @model_validator(mode="after")
    def only_cities_own_airports(self):
        if self.kind != LocationKind.CITY and self.airports is not None:
            raise ValueError("only CITY entries may have nested airports")
        return self

    @property
    def label(self) -> str:
        """Display label, e.g. 'NEW YORK (NYC)'"""
        return f"{self.name} ({self.code})"

    def with_airports(self, airports) -> "LocationEntry":
        """Return a copy of this city with the given airports nested"""
        return self.model_copy(update={"airports": tuple(airports)})


LocationEntry.model_rebuild()
