"""
Offer normalizer tests against hand-built provider payloads
"""

from datetime import datetime, timezone

import pytest

from flight_search.core.exceptions import NormalizationError
from flight_search.models.flight import CabinClass, Direction, parse_duration
from flight_search.services.normalizer import CodeDictionary, OfferNormalizer

from factories import (
    FakeClock,
    raw_itinerary,
    raw_offer,
    raw_response,
    raw_segment,
    search_params
)


SEARCHED_AT = datetime(2026, 5, 1, 9, 30, tzinfo=timezone.utc)


def normalize(*offers, **kwargs):
    return OfferNormalizer().normalize(raw_response(*offers, **kwargs), search_params(), SEARCHED_AT)


def test_per_traveler_price_divides_by_traveler_pricings():
    result = normalize(raw_offer(grand_total="856.42", base="700.00", travelers=2))
    price = result.offers[0].price

    assert price.total == pytest.approx(856.42)
    assert price.base == pytest.approx(700.00)
    assert price.per_traveler == pytest.approx(428.21)
    assert price.currency == "USD"


def test_per_traveler_ignores_lap_infants_without_pricing():
    params = search_params(adults=2, infants=1)
    raw = raw_response(raw_offer(grand_total="900.00", travelers=2))

    result = OfferNormalizer().normalize(raw, params, SEARCHED_AT)

    assert result.meta.search_params.passengers == 3
    assert result.offers[0].price.per_traveler == pytest.approx(450.0), \
        "Divisor is the number of priced travelers, not the passenger count"


def test_round_trip_with_connecting_return():
    outbound = raw_itinerary(raw_segment(seg_id="1"), duration="PT6H30M")
    inbound = raw_itinerary(
        raw_segment(seg_id="2", origin="LAX", destination="ORD", carrier="UA", duration="PT4H"),
        raw_segment(seg_id="3", origin="ORD", destination="JFK", carrier="UA", duration="PT2H15M"),
        duration="PT8H5M"
    )
    offer = normalize(raw_offer(itineraries=[outbound, inbound])).offers[0]

    assert offer.is_non_stop is False
    assert offer.is_one_way is False
    assert offer.itineraries[0].direction == Direction.OUTBOUND
    assert offer.itineraries[1].direction == Direction.INBOUND
    assert offer.itineraries[0].stops == 0
    assert offer.itineraries[1].stops == 1
    assert offer.itineraries[1].duration.total_minutes == 485, \
        "Itinerary duration is the provider total, not the segment sum"


def test_one_way_direct_offer():
    offer = normalize(raw_offer()).offers[0]

    assert offer.is_one_way is True
    assert offer.is_non_stop is True
    assert offer.seats_available == 9
    assert offer.last_ticketing_date == "2026-06-01"
    assert offer.booking_class == CabinClass.ECONOMY


def test_segment_fields_resolve_through_dictionaries():
    segment = normalize(raw_offer(itineraries=[raw_itinerary(raw_segment(departure_terminal="8"))])) \
        .offers[0].outbound.segments[0]

    assert segment.flight_number == "AA100"
    assert segment.airline.name == "AMERICAN AIRLINES"
    assert segment.aircraft == "AIRBUS A321"
    assert segment.departure.city_code == "NYC"
    assert segment.departure.country_code == "US"
    assert segment.departure.terminal == "8"
    assert segment.departure.time == "08:00"
    assert segment.departure.date == "2026-06-15"
    assert segment.arrival.time == "11:30"
    assert segment.duration.formatted == "6h 30m"


def test_unknown_codes_fall_back_to_raw_code():
    segment_raw = raw_segment(origin="XXA", destination="XXB", carrier="ZZ", aircraft="999")
    offer = normalize(
        raw_offer(itineraries=[raw_itinerary(segment_raw)], validating="ZZ"),
        dictionaries={}
    ).offers[0]
    segment = offer.outbound.segments[0]

    assert segment.airline.name == "ZZ"
    assert segment.aircraft == "999"
    assert segment.departure.city_code == "XXA"
    assert segment.departure.country_code == ""
    assert offer.validating_airline.name == "ZZ"


def test_operating_airline_only_when_reported():
    plain = raw_segment(seg_id="1")
    codeshare = raw_segment(seg_id="2", carrier="AA", operating="UA")
    offer = normalize(raw_offer(itineraries=[raw_itinerary(plain, codeshare)])).offers[0]
    first, second = offer.outbound.segments

    assert first.operating_airline is None
    assert "operating_airline" not in first.model_dump(exclude_none=True)
    assert second.operating_airline.code == "UA"
    assert second.operating_airline.name == "UNITED AIRLINES"
    assert second.airline.code == "AA"


def test_validating_airline_falls_back_to_first_carrier():
    offer = normalize(raw_offer(validating=None)).offers[0]
    assert offer.validating_airline.code == "AA"


def test_booking_class_from_fare_details():
    offer = normalize(raw_offer(cabin="BUSINESS")).offers[0]
    assert offer.booking_class == CabinClass.BUSINESS


def test_meta_uses_provider_count_and_params():
    result = normalize(raw_offer("1"), raw_offer("2"), count=57)

    assert result.meta.total_count == 57
    assert result.meta.searched_at == SEARCHED_AT
    assert result.meta.search_params.origin == "JFK"
    assert result.meta.search_params.destination == "LAX"

    assert normalize(raw_offer("1")).meta.total_count == 1


def test_searched_at_defaults_to_clock():
    clock = FakeClock()
    result = OfferNormalizer(clock=clock).normalize(raw_response(), search_params())
    assert result.meta.searched_at == clock.now
    assert result.offers == ()


def test_normalization_is_deterministic():
    raw = raw_response(raw_offer("1"), raw_offer("2", grand_total="410.10"))
    first = OfferNormalizer().normalize(raw, search_params(), SEARCHED_AT)
    second = OfferNormalizer().normalize(raw, search_params(), SEARCHED_AT)
    assert first == second


def test_renormalizing_durations_is_stable():
    offer = normalize(raw_offer(itineraries=[raw_itinerary(duration="PT13H5M")])).offers[0]
    duration = offer.outbound.duration
    assert parse_duration(duration.to_iso()) == duration


@pytest.mark.parametrize("mutate", [
    lambda offer: offer.pop("itineraries"),
    lambda offer: offer.update(itineraries=[]),
    lambda offer: offer["itineraries"][0].update(segments=[]),
    lambda offer: offer["itineraries"][0].update(duration="six hours"),
    lambda offer: offer.update(travelerPricings=[]),
    lambda offer: offer["price"].pop("currency"),
    lambda offer: offer["itineraries"][0]["segments"][0]["departure"].update(at="not a date"),
    lambda offer: offer.update(itineraries=[raw_itinerary()] * 3),
])
def test_malformed_offer_fails_fast(mutate):
    offer = raw_offer("bad")
    mutate(offer)

    with pytest.raises(NormalizationError) as exc_info:
        normalize(offer)

    assert "bad" in exc_info.value.message


def test_malformed_payload_shape():
    normalizer = OfferNormalizer()
    with pytest.raises(NormalizationError):
        normalizer.normalize(["not", "a", "dict"], search_params())
    with pytest.raises(NormalizationError):
        normalizer.normalize({"data": {"id": "1"}}, search_params())


def test_code_dictionary_is_total():
    carriers = CodeDictionary({"AA": "AMERICAN AIRLINES", "XX": ""})
    assert carriers.name_for("AA") == "AMERICAN AIRLINES"
    assert carriers.name_for("XX") == "XX"
    assert carriers.name_for("QQ") == "QQ"
    assert "AA" in carriers
    assert len(CodeDictionary(None)) == 0


@pytest.mark.parametrize("count", [None, "57", -1, 2.5, True])
def test_malformed_meta_count(count):
    raw = raw_response(raw_offer("1"))
    raw["meta"] = {"count": count}

    with pytest.raises(NormalizationError) as exc_info:
        OfferNormalizer().normalize(raw, search_params(), SEARCHED_AT)

    assert "meta.count" in exc_info.value.message
