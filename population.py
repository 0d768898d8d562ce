"""
Population Module

Builds the initial airports, aircraft and passengers for a simulation run
from a seeded numpy Generator, so two runs with the same seed start from the
same world.
"""

import datetime as dt
from typing import List, Optional, Sequence, Tuple

import numpy as np

from aircraft import Aircraft, AircraftClass, create_aircraft, draw_flight_duration
from ground_operations import Airport
from passenger import Passenger
from terminal_feed import TerminalFeed

DEFAULT_AIRCRAFT = 20

# (name, gates, runways, security checkpoints, class)
AIRPORTS = (
    # Major passenger hubs
    ("Atlanta Hartsfield-Jackson", 5, 3, 2, "COMMERCIAL"),
    ("Los Angeles International", 4, 3, 2, "COMMERCIAL"),
    ("Chicago O'Hare", 6, 4, 3, "COMMERCIAL"),
    ("Dallas/Fort Worth", 5, 3, 2, "COMMERCIAL"),
    ("Denver International", 6, 4, 3, "COMMERCIAL"),
    ("New York John F. Kennedy International", 6, 4, 3, "COMMERCIAL"),
    ("Miami International", 5, 3, 2, "COMMERCIAL"),
    ("San Francisco International", 6, 4, 3, "COMMERCIAL"),
    ("Seattle-Tacoma International", 5, 3, 2, "COMMERCIAL"),
    ("Las Vegas Harry Reid International", 4, 3, 2, "COMMERCIAL"),
    # Freight hubs
    ("Memphis International (FedEx Hub)", 4, 2, 1, "CARGO"),
    ("Louisville (UPS Hub)", 4, 2, 1, "CARGO"),
    # Executive fields
    ("Teterboro Airport (Private)", 2, 1, 1, "PRIVATE"),
    ("Van Nuys Airport (Private)", 3, 2, 1, "PRIVATE"),
)

MODELS = {
    AircraftClass.COMMERCIAL: ("Boeing 737", "Boeing 787", "Airbus A320", "Airbus A350", "Embraer E190"),
    AircraftClass.CARGO: ("Boeing 747-8F", "Boeing 777F", "Airbus A330-200F", "McDonnell Douglas MD-11F",
                          "Antonov An-124"),
    AircraftClass.PRIVATE: ("Gulfstream G650", "Bombardier Global 7500", "Cessna Citation X",
                            "Embraer Phenom 300", "Dassault Falcon 7X"),
}

# Distance per fuel unit, (low, high)
FUEL_EFFICIENCY = {
    AircraftClass.COMMERCIAL: (5.0, 6.5),
    AircraftClass.CARGO: (3.5, 4.7),
    AircraftClass.PRIVATE: (6.0, 8.0),
}

FUEL_CAPACITY = {
    AircraftClass.COMMERCIAL: (12000, 18000),
    AircraftClass.CARGO: (15000, 20000),
    AircraftClass.PRIVATE: (2000, 4000),
}

# Seats, or tons for freighters
CAPACITIES = {
    AircraftClass.COMMERCIAL: (150, 180, 200, 220),
    AircraftClass.CARGO: (20, 30, 50, 60),
    AircraftClass.PRIVATE: (10, 15, 20, 25),
}

DEPARTURE_OFFSET_MINUTES = (60, 120)
DEPARTURE_STEP_MINUTES = 15

PASSENGER_NAMES = (
    "Amara Okafor", "Liam Byrne", "Priya Raman", "Tomas Novak", "Hana Sato",
    "Mateo Alvarez", "Freya Lindqvist", "Kwame Mensah", "Isla McLeod", "Yusuf Demir",
    "Chloe Martin", "Arjun Mehta", "Zofia Kowalska", "Noah Fischer", "Leila Haddad",
    "Oscar Pereira", "Mei Lin", "Ruairi Walsh", "Sofia Rossi", "Daniel Osei",
)


def build_airports(feed: Optional[TerminalFeed] = None, table=AIRPORTS) -> List[Airport]:
    return [Airport(name, gates, runways, checkpoints, airport_class, feed=feed)
            for name, gates, runways, checkpoints, airport_class in table]


def random_departure_time(rng: np.random.Generator, start_time: dt.datetime) -> dt.datetime:
    """
    Departure 60-120 minutes after ``start_time`` in 15 minute steps,
    aligned to the quarter hour.
    """
    low, high = DEPARTURE_OFFSET_MINUTES
    steps = (high - low) // DEPARTURE_STEP_MINUTES
    offset = low + int(rng.integers(0, steps + 1)) * DEPARTURE_STEP_MINUTES
    departure = start_time + dt.timedelta(minutes=offset)
    return departure.replace(minute=(departure.minute // DEPARTURE_STEP_MINUTES) * DEPARTURE_STEP_MINUTES,
                             second=0, microsecond=0)


def random_aircraft(rng: np.random.Generator, airports: Sequence[Airport],
                    start_time: dt.datetime) -> Optional[Aircraft]:
    """
    Draw one aircraft: a class, an origin of that class and any other
    airport as destination. Returns None when the drawn class has no
    origin airport or no other airport exists.
    """
    aircraft_class = list(AircraftClass)[int(rng.integers(len(AircraftClass)))]

    origins = [a for a in airports if a.airport_class is aircraft_class]
    if not origins:
        return None
    origin = origins[int(rng.integers(len(origins)))]
    destinations = [a for a in airports if a is not origin]
    if not destinations:
        return None
    destination = destinations[int(rng.integers(len(destinations)))]

    models = MODELS[aircraft_class]
    low, high = FUEL_EFFICIENCY[aircraft_class]
    fuel_low, fuel_high = FUEL_CAPACITY[aircraft_class]
    capacities = CAPACITIES[aircraft_class]

    return create_aircraft(
        aircraft_class,
        models[int(rng.integers(len(models)))],
        capacities[int(rng.integers(len(capacities)))],
        low + rng.random() * (high - low),
        float(rng.integers(fuel_low, fuel_high)),
        origin.name,
        destination.name,
        random_departure_time(rng, start_time),
        draw_flight_duration(rng),
    )


def assign_passengers(rng: np.random.Generator, aircraft: Sequence[Aircraft],
                      names: Sequence[str]) -> List[Passenger]:
    """Hand passengers out round-robin over the passenger-bearing aircraft."""
    carriers = [a for a in aircraft if not a.is_cargo]
    if not carriers:
        return []
    return [Passenger(name, carriers[i % len(carriers)], rng) for i, name in enumerate(names)]


def generate_population(rng: np.random.Generator, start_time: dt.datetime,
                        num_aircraft: int = DEFAULT_AIRCRAFT,
                        passenger_names: Sequence[str] = PASSENGER_NAMES,
                        feed: Optional[TerminalFeed] = None
                        ) -> Tuple[List[Airport], List[Aircraft], List[Passenger]]:
    """
    Generate the starting world for a run.

    Parameters
    ----------
    rng : numpy.random.Generator
        Source of every random draw.
    start_time : datetime
        Simulated clock at the first cycle.
    num_aircraft : int
        Number of aircraft draws. Draws without a valid route are skipped,
        so fewer aircraft may be returned.
    passenger_names : sequence of str
        One passenger per name.
    feed : TerminalFeed, optional
        Passed to each airport and used for load messages.

    Returns
    -------
    tuple
        (airports, aircraft, passengers)
    """
    if num_aircraft < 0:
        raise ValueError("Number of aircraft cannot be negative")
    feed = feed or TerminalFeed(echo=False)

    airports = build_airports(feed)
    feed.status_update(f"Loaded {len(airports)} airports.")

    aircraft = []
    for _ in range(num_aircraft):
        plane = random_aircraft(rng, airports, start_time)
        if plane is None:
            feed.error("No valid route found for a generated aircraft; skipping it.")
            continue
        aircraft.append(plane)
        feed.status_update(
            f"Created {plane.label} ({plane.capacity} {plane.capacity_unit}) from "
            f"{plane.origin} to {plane.destination}, departing {plane.departure_time:%H:%M}.")

    passengers = assign_passengers(rng, aircraft, passenger_names)
    feed.status_update(f"Loaded {len(passengers)} passengers.")
    return airports, aircraft, passengers
