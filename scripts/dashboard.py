"""
CLI entry point for the Breeze dashboard.

Usage:
    python scripts/dashboard.py --city London
    python scripts/dashboard.py --search "San Fran" --pick 1
    python scripts/dashboard.py --lat 40.7128 --lon -74.0060 --celsius
    python scripts/dashboard.py --current
    python scripts/dashboard.py --ticker
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.api.schemas import state_response, ticker_model
from src.dashboard.config import DashboardConfig, build_orchestrator
from src.dashboard.state import SearchStatus
from src.data.schema import Coordinate, find_top_city


def _ask_location_permission() -> bool:
    answer = input("Allow Breeze to use your approximate location? [y/N] ")
    return answer.strip().lower() in ("y", "yes")


async def run(args, config: DashboardConfig) -> int:
    orchestrator = build_orchestrator(config, location_prompt=_ask_location_permission)

    if args.ticker:
        entries = await orchestrator.load_city_ticker()
        print(json.dumps([ticker_model(e).model_dump() for e in entries], indent=2))
        return 0

    if args.search:
        orchestrator.set_search_query(args.search)
        await asyncio.sleep(config.search_debounce)
        # Wait for the geocoding request itself to land
        while orchestrator.state.search_status is SearchStatus.SEARCHING:
            await asyncio.sleep(0.05)
        results = orchestrator.state.search_results
        if not results:
            print(f"ERROR: No places found for '{args.search}'", file=sys.stderr)
            return 1
        if args.pick is None:
            for i, place in enumerate(results, start=1):
                print(f"{i}. {place.display_name}")
            return 0
        if not (1 <= args.pick <= len(results)):
            print(f"ERROR: --pick must be between 1 and {len(results)}", file=sys.stderr)
            return 1
        await orchestrator.select_place(results[args.pick - 1])
    elif args.city:
        place = find_top_city(args.city)
        if place is None:
            print(f"ERROR: '{args.city}' is not in the city catalog; use --search", file=sys.stderr)
            return 1
        await orchestrator.select_place(place)
    elif args.current:
        await orchestrator.use_current_location()
    else:
        try:
            coordinate = Coordinate(args.lat, args.lon)
        except ValueError as e:
            print(f"ERROR: {e}", file=sys.stderr)
            return 1
        await orchestrator.refresh_location(coordinate)

    await orchestrator.wait_for_background()
    response = state_response(orchestrator.state, fahrenheit=config.use_fahrenheit)
    print(json.dumps(response.model_dump(exclude={"search", "ticker"}), indent=2, ensure_ascii=False))
    return 0 if orchestrator.state.error is None else 2


def main():
    parser = argparse.ArgumentParser(
        description="Show air quality, pollen and climate history for a place",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/dashboard.py --city Tokyo
  python scripts/dashboard.py --search Springfield --pick 2
  python scripts/dashboard.py --lat 51.5074 --lon -0.1278 --celsius
        """,
    )
    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument("--city", help="City from the built-in catalog (e.g., London)")
    target.add_argument("--search", help="Free-text city search (at least 2 characters)")
    target.add_argument("--lat", type=float, help="Latitude (use with --lon)")
    target.add_argument("--current", action="store_true", help="Use the device (IP) location")
    target.add_argument("--ticker", action="store_true", help="US AQI for every catalog city")
    parser.add_argument("--lon", type=float, help="Longitude (use with --lat)")
    parser.add_argument("--pick", type=int, default=None, help="1-based search result to show")
    units = parser.add_mutually_exclusive_group()
    units.add_argument("--celsius", action="store_true", help="Show temperatures in Celsius")
    units.add_argument("--fahrenheit", action="store_true", help="Show temperatures in Fahrenheit")
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args()
    if args.lat is not None and args.lon is None:
        parser.error("--lat requires --lon")

    # Configure logging
    level = logging.DEBUG if args.verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    config = DashboardConfig.from_env()
    if args.celsius:
        config.use_fahrenheit = False
    elif args.fahrenheit:
        config.use_fahrenheit = True

    sys.exit(asyncio.run(run(args, config)))


if __name__ == "__main__":
    main()
