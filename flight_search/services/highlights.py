"""
Highlight Selector - Cheapest and fastest offers of a result set
"""

from enum import Enum
from typing import List, Sequence

from pydantic import BaseModel, ConfigDict

from flight_search.models.flight import Duration, FlightOffer


class HighlightKind(str, Enum):
    CHEAPEST = "cheapest"
    FASTEST = "fastest"


class Highlight(BaseModel):
    """A distinguished offer surfaced above the result list"""
    model_config = ConfigDict(frozen=True)

    kind: HighlightKind
    label: str
    offer: FlightOffer
    average_duration_minutes: float
    description: str


def format_average_duration(minutes: float) -> str:
    return Duration.from_minutes(round(minutes)).formatted


class HighlightSelector:
    """
    Picks the cheapest offer and the fastest by mean itinerary duration

    Ties go to the first offer in input order. When one offer is both the
    cheapest and the fastest, no highlight is returned.
    """

    def select_highlights(self, offers: Sequence[FlightOffer]) -> List[Highlight]:
        if not offers:
            return []

        # sorted() is stable, so the first of equal offers wins
        cheapest = sorted(offers, key=lambda offer: offer.price.total)[0]
        fastest = sorted(offers, key=lambda offer: offer.average_duration_minutes)[0]

        if cheapest.id == fastest.id:
            return []

        return [
            Highlight(
                kind=HighlightKind.CHEAPEST,
                label="Cheapest",
                offer=cheapest,
                average_duration_minutes=cheapest.average_duration_minutes,
                description=f"{format_average_duration(cheapest.average_duration_minutes)} avg · Lowest price"
            ),
            Highlight(
                kind=HighlightKind.FASTEST,
                label="Fastest",
                offer=fastest,
                average_duration_minutes=fastest.average_duration_minutes,
                description=f"{format_average_duration(fastest.average_duration_minutes)} avg · Shortest trip"
            )
        ]
