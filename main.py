"""
Airport Cycle Simulation - Main Entry Point

Modules:

- aircraft.py: Aircraft classes, fuel model and delay bookkeeping
- passenger.py: Passenger lifecycle (arrival, check-in, security, boarding)
- ground_operations.py: Gate, runway and security pools per airport
- flight_scheduler.py: Arrival and departure protocols
- simulation.py: Cycle engine
- population.py: Seeded generation of airports, aircraft and passengers
- terminal_feed.py: Prefixed status output
- statistical_analysis.py: Utilisation summary and charts

Run ``python main.py --help`` for options.
"""

import argparse
import datetime as dt
import sys
from typing import List, Optional

import numpy as np

from population import DEFAULT_AIRCRAFT, PASSENGER_NAMES, generate_population
from simulation import CYCLE_MINUTES, SimulationEngine
from statistical_analysis import (UtilisationRecorder, plot_utilisation, print_utilisation_summary,
                                  summarise_utilisation)
from terminal_feed import TerminalFeed

DEFAULT_MAX_CYCLES = 200
DEFAULT_FEED_LINES = 5000
SEEDED_START = dt.datetime(2025, 1, 1, 6, 0)  # clock used for seeded runs without --start
START_FORMAT = "%Y-%m-%d %H:%M"


def non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"expected a non-negative integer, got {value}")
    return number


def start_time_arg(value: str) -> dt.datetime:
    try:
        return dt.datetime.strptime(value, START_FORMAT)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD HH:MM, got {value!r}") from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Multi-airport cycle simulation")
    parser.add_argument("--seed", type=int, default=None, help="Seed for the random generator")
    parser.add_argument(
        "--aircraft",
        type=non_negative_int,
        default=DEFAULT_AIRCRAFT,
        help="Number of aircraft to generate",
    )
    parser.add_argument(
        "--start",
        type=start_time_arg,
        default=None,
        help="Simulated start time (YYYY-MM-DD HH:MM). Seeded runs default to a fixed clock",
    )
    parser.add_argument(
        "--max-cycles",
        type=int,
        default=DEFAULT_MAX_CYCLES,
        help="Stop after this many cycles even if the simulation has not completed",
    )
    parser.add_argument(
        "--cycle-minutes",
        type=int,
        default=CYCLE_MINUTES,
        help="Simulated minutes per cycle",
    )
    parser.add_argument(
        "--strict-cargo",
        action="store_true",
        help="Only finish once every cargo aircraft has departed",
    )
    parser.add_argument("--plot", action="store_true", help="Show utilisation charts at the end")
    parser.add_argument("--quiet", action="store_true", help="Only print the final summary")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    feed = TerminalFeed(echo=not args.quiet, max_lines=DEFAULT_FEED_LINES)
    rng = np.random.default_rng(args.seed)
    if args.start is not None:
        start_time = args.start
    elif args.seed is not None:
        start_time = SEEDED_START
    else:
        start_time = dt.datetime.now().replace(second=0, microsecond=0)

    feed.banner("AIRPORT CYCLE SIMULATION")
    try:
        airports, aircraft, passengers = generate_population(
            rng, start_time, num_aircraft=args.aircraft, passenger_names=PASSENGER_NAMES, feed=feed)
        engine = SimulationEngine(
            airports, aircraft, passengers,
            rng=rng,
            start_time=start_time,
            feed=feed,
            cycle_minutes=args.cycle_minutes,
            track_outstanding_cargo=args.strict_cargo,
        )
    except ValueError as exc:
        print(f"[ERROR] {exc}", file=sys.stderr)
        return 1

    recorder = UtilisationRecorder()
    result = engine.run_simulation(max_cycles=args.max_cycles, on_cycle=recorder.record)

    print("\n" + "=" * 70)
    print(" SIMULATION SUMMARY")
    print("=" * 70)
    print(f"  Cycles run:          {result['cycles']}")
    print(f"  Completed:           {'yes' if result['completed'] else 'no (cycle cap reached)'}")
    print(f"  Final time:          {result['final_time']}")
    print(f"  Passengers boarded:  {result['passengers_boarded']}")
    print(f"  Passengers missed:   {result['passengers_missed']}")
    print(f"  Aircraft departed:   {result['aircraft_departed']}")

    print_utilisation_summary(summarise_utilisation(recorder))
    if args.plot:
        plot_utilisation(recorder, show=True)
    return 0


if __name__ == "__main__":
    sys.exit(main())
