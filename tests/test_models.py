"""
Domain model tests: durations, offer invariants, request validation
"""

import pytest
from pydantic import ValidationError

from flight_search.models.filters import FilterCriteria, FilterOptions, StopCategory
from flight_search.models.flight import Direction, Duration, parse_duration
from flight_search.models.location import LocationEntry, LocationKind

from factories import make_itinerary, make_offer, search_params


@pytest.mark.parametrize("value,hours,minutes", [
    ("PT2H30M", 2, 30),
    ("PT45M", 0, 45),
    ("PT3H", 3, 0),
    ("PT0M", 0, 0),
    ("PT26H5M", 26, 5),
    ("P1DT2H", 26, 0),
])
def test_parse_duration(value, hours, minutes):
    duration = parse_duration(value)
    assert (duration.hours, duration.minutes) == (hours, minutes)
    assert duration.total_minutes == hours * 60 + minutes


@pytest.mark.parametrize("value", ["", "2H30M", "PT2X", "P", "garbage", None])
def test_parse_duration_rejects_garbage(value):
    with pytest.raises(ValueError):
        parse_duration(value)


@pytest.mark.parametrize("value", ["PT2H30M", "PT45M", "PT3H", "PT0M", "PT13H55M"])
def test_duration_renormalization_is_stable(value):
    first = parse_duration(value)
    second = parse_duration(first.to_iso())
    assert second == first
    assert second.formatted == first.formatted


def test_duration_derived_fields():
    duration = Duration(hours=2, minutes=30)
    assert duration.total_minutes == 150
    assert duration.formatted == "2h 30m"
    assert Duration.from_minutes(150) == duration

    with pytest.raises(ValidationError):
        duration.hours = 3


def test_offer_flags_follow_itineraries():
    one_way = make_offer("1", stops=0)
    assert one_way.is_one_way is True
    assert one_way.is_non_stop is True

    round_trip = make_offer("2", stops=0, inbound_stops=1)
    assert round_trip.is_one_way is False
    assert round_trip.is_non_stop is False, "A connecting return makes the offer not non-stop"
    assert round_trip.inbound.stops == 1


def test_offer_rejects_wrong_direction_order():
    offer = make_offer("1")
    with pytest.raises(ValidationError):
        offer.model_validate({
            **offer.model_dump(),
            "itineraries": [make_itinerary(Direction.INBOUND).model_dump()]
        })


def test_offer_average_duration():
    offer = make_offer("1", minutes=300, inbound_stops=0, inbound_minutes=200)
    assert offer.average_duration_minutes == 250


def test_search_params_validation():
    params = search_params(origin_location_code=" jfk ")
    assert params.origin_location_code == "JFK"
    assert params.passengers == 1

    with pytest.raises(ValidationError):
        search_params(destination_location_code="JFK")
    with pytest.raises(ValidationError):
        search_params(return_date="2026-06-01")
    with pytest.raises(ValidationError):
        search_params(adults=1, infants=2)
    with pytest.raises(ValidationError):
        search_params(adults=5, children=5)
    with pytest.raises(ValidationError):
        search_params(origin_location_code="NEWYORK")


def test_search_params_to_query_omits_unset():
    query = search_params().to_query()
    assert query == {
        "originLocationCode": "JFK",
        "destinationLocationCode": "LAX",
        "departureDate": "2026-06-15",
        "adults": 1
    }

    query = search_params(
        return_date="2026-06-22",
        children=1,
        infants=1,
        travel_class="BUSINESS",
        non_stop=False,
        currency_code="EUR",
        max_price=900,
        max=20
    ).to_query()
    assert query["returnDate"] == "2026-06-22"
    assert query["travelClass"] == "BUSINESS"
    assert query["nonStop"] == "false"
    assert query["maxPrice"] == 900
    assert query["max"] == 20


def test_only_cities_have_airports():
    airport = LocationEntry(id="AJFK", kind=LocationKind.AIRPORT, code="JFK", name="JFK")
    city = LocationEntry(id="CNYC", kind=LocationKind.CITY, code="NYC", name="NEW YORK")
    assert city.with_airports([airport]).airports == (airport,)

    with pytest.raises(ValidationError):
        LocationEntry(id="AJFK", kind=LocationKind.AIRPORT, code="JFK", name="JFK", airports=[])


def test_stop_category_buckets():
    assert StopCategory.from_stops(0) == StopCategory.NON_STOP
    assert StopCategory.from_stops(1) == StopCategory.ONE_STOP
    assert StopCategory.from_stops(2) == StopCategory.TWO_PLUS
    assert StopCategory.from_stops(5) == StopCategory.TWO_PLUS


def test_filter_criteria_validation():
    criteria = FilterCriteria(stops={0, 2}, airlines=["aa", " ba"])
    assert criteria.stops == frozenset({StopCategory.NON_STOP, StopCategory.TWO_PLUS})
    assert criteria.airlines == frozenset({"AA", "BA"})

    with pytest.raises(ValidationError):
        FilterCriteria(price_range=(500, 100))
    with pytest.raises(ValidationError):
        FilterCriteria(departure_hour_range=(0, 25))
    with pytest.raises(ValidationError):
        FilterOptions(min_price=10, max_price=5)
