"""
Highlight selector tests
"""

from flight_search.services.highlights import HighlightKind, HighlightSelector

from factories import make_offer


def test_no_offers_no_highlights():
    assert HighlightSelector().select_highlights([]) == []


def test_same_offer_cheapest_and_fastest_gives_no_highlight():
    offers = [
        make_offer("best", total=200.0, minutes=180),
        make_offer("other", total=300.0, minutes=240),
    ]
    assert HighlightSelector().select_highlights(offers) == []


def test_cheapest_and_fastest():
    offers = [
        make_offer("slow-cheap", total=150.0, minutes=600),
        make_offer("fast-pricey", total=500.0, minutes=200),
        make_offer("middle", total=300.0, minutes=400),
    ]
    highlights = HighlightSelector().select_highlights(offers)

    assert [h.kind for h in highlights] == [HighlightKind.CHEAPEST, HighlightKind.FASTEST]
    assert highlights[0].offer.id == "slow-cheap"
    assert highlights[1].offer.id == "fast-pricey"
    assert highlights[0].description == "10h 0m avg · Lowest price"
    assert highlights[1].label == "Fastest"


def test_fastest_uses_average_itinerary_duration():
    offers = [
        make_offer("cheap", total=100.0, minutes=500),
        # outbound 200 but inbound 700: average 450
        make_offer("lopsided", total=400.0, minutes=200, inbound_stops=0, inbound_minutes=700),
        # 300 both ways: average 300
        make_offer("balanced", total=450.0, minutes=300, inbound_stops=0, inbound_minutes=300),
    ]
    highlights = HighlightSelector().select_highlights(offers)

    assert highlights[1].offer.id == "balanced"
    assert highlights[1].average_duration_minutes == 300


def test_ties_go_to_first_offer():
    offers = [
        make_offer("a", total=100.0, minutes=500),
        make_offer("b", total=100.0, minutes=500),
        make_offer("c", total=300.0, minutes=120),
        make_offer("d", total=400.0, minutes=120),
    ]
    highlights = HighlightSelector().select_highlights(offers)

    assert highlights[0].offer.id == "a"
    assert highlights[1].offer.id == "c"
