"""
Flight Search - Command-line front end
Searches priced itineraries and airport/city locations from the terminal
"""

import argparse
import asyncio
import logging
import logging.config
import sys
from pathlib import Path
from typing import List, Optional

# Load .env file explicitly (before importing config)
from dotenv import load_dotenv
env_path = Path.cwd() / ".env"
load_dotenv(dotenv_path=env_path)

from flight_search.core.config import get_settings
from flight_search.core.exceptions import FlightSearchError
from flight_search.models.filters import FilterCriteria, StopCategory
from flight_search.models.flight import format_offer_summary
from flight_search.models.request import FlightSearchParams
from flight_search.services.search import FlightSearchService, get_flight_search_service

logger = logging.getLogger(__name__)


def _split_codes(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="flight-search", description="Search flight offers")
    commands = parser.add_subparsers(dest="command", required=True)

    search = commands.add_parser("search", help="Search flight offers")
    search.add_argument("origin")
    search.add_argument("destination")
    search.add_argument("departure_date")
    search.add_argument("--return-date", dest="return_date", default=None)
    search.add_argument("--adults", type=int, default=1)
    search.add_argument("--children", type=int, default=None)
    search.add_argument("--infants", type=int, default=None)
    search.add_argument("--travel-class", dest="travel_class", default=None)
    search.add_argument("--non-stop", dest="non_stop", action="store_true", default=None)
    search.add_argument("--currency", dest="currency_code", default=None)
    search.add_argument("--max-price", dest="max_price", type=int, default=None)
    search.add_argument("--max", type=int, default=None)
    search.add_argument("--stops", default=None, help="Allowed stop categories, e.g. 0,1 (2 means 2+)")
    search.add_argument("--airlines", default=None, help="Allowed outbound airlines, e.g. AA,BA")

    locations = commands.add_parser("locations", help="Search airports and cities")
    locations.add_argument("keyword")
    locations.add_argument("--max", type=int, default=None)

    return parser


async def run_search(service: FlightSearchService, args: argparse.Namespace) -> None:
    params = FlightSearchParams(
        origin_location_code=args.origin,
        destination_location_code=args.destination,
        departure_date=args.departure_date,
        return_date=args.return_date,
        adults=args.adults,
        children=args.children,
        infants=args.infants,
        travel_class=args.travel_class,
        non_stop=args.non_stop,
        currency_code=args.currency_code,
        max_price=args.max_price,
        max=args.max
    )

    result = await service.search(params)
    options = service.filter_options(result.offers)
    criteria = FilterCriteria(
        stops={StopCategory(int(stop)) for stop in _split_codes(args.stops)},
        airlines=_split_codes(args.airlines)
    )
    offers = service.apply_filters(result.offers, criteria)

    print(f"\n✈️  {len(offers)} of {len(result.offers)} offer(s)")
    print(
        f"  Price: {options.min_price}-{options.max_price} | "
        f"Max duration: {options.max_duration} min | "
        f"Airlines: {', '.join(airline.code for airline in options.airlines) or '-'}"
    )

    highlights = service.highlights(offers)
    if highlights:
        print("\n⭐ Highlights:")
        for highlight in highlights:
            print(f"  {highlight.label}: {format_offer_summary(highlight.offer)}")
            print(f"    {highlight.description}")

    print()
    for offer in offers:
        print(format_offer_summary(offer))


async def run_locations(service: FlightSearchService, args: argparse.Namespace) -> None:
    entries = await service.search_locations(args.keyword, args.max)
    if not entries:
        print("No locations found")
        return

    for entry in entries:
        print(f"{entry.kind.value:<8} {entry.label} - {entry.detailed_name}")
        for airport in entry.airports or ():
            print(f"  └ {airport.label}")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = get_settings()
    except ValueError as e:
        logger.error(f"Configuration error: {str(e)}")
        return 1

    logging.config.dictConfig(settings.get_log_config())
    service = get_flight_search_service()

    handler = run_search if args.command == "search" else run_locations
    try:
        asyncio.run(handler(service, args))
    except FlightSearchError as e:
        logger.error(f"{e.code}: {e.message}")
        return 1
    except ValueError as e:
        logger.error(f"Invalid input: {str(e)}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
