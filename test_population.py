import datetime as dt

import numpy as np
import pytest

from ground_operations import AirportDirectory
from population import AIRPORTS, CAPACITIES, FUEL_CAPACITY, FUEL_EFFICIENCY, generate_population
from simulation import SimulationEngine


def _summary(world):
    airports, aircraft, passengers = world
    return ([a.name for a in airports],
            [(p.model, p.origin, p.destination, p.departure_time, p.flight_duration) for p in aircraft],
            [(p.name, p.security_wait, p.boarding_wait) for p in passengers])


def test_same_seed_same_world(t0):
    first = generate_population(np.random.default_rng(5), t0)
    second = generate_population(np.random.default_rng(5), t0)
    assert _summary(first) == _summary(second)


def test_airports_loaded(t0, rng):
    airports, _, _ = generate_population(rng, t0, num_aircraft=0)
    assert len(airports) == len(AIRPORTS)
    assert len({a.name.lower() for a in airports}) == len(airports)


def test_aircraft_parameters_follow_class(t0):
    airports, aircraft, _ = generate_population(np.random.default_rng(9), t0, num_aircraft=40)
    directory = AirportDirectory(airports)
    assert aircraft

    for plane in aircraft:
        cls = plane.aircraft_class
        assert directory.get_airport_by_name(plane.origin).airport_class is cls
        assert directory.get_airport_by_name(plane.destination) is not None
        assert plane.origin != plane.destination
        assert plane.capacity in CAPACITIES[cls]
        low, high = FUEL_EFFICIENCY[cls]
        assert low <= plane.fuel_efficiency <= high
        low, high = FUEL_CAPACITY[cls]
        assert low <= plane.fuel_capacity <= high
        assert plane.fuel_level == plane.fuel_capacity


def test_departures_on_quarter_hours(t0):
    _, aircraft, _ = generate_population(np.random.default_rng(9), t0, num_aircraft=40)
    for plane in aircraft:
        offset = plane.departure_time - t0
        assert dt.timedelta(minutes=60) <= offset <= dt.timedelta(minutes=120)
        assert plane.departure_time.minute % 15 == 0


def test_passengers_round_robin_on_passenger_aircraft(t0):
    _, aircraft, passengers = generate_population(
        np.random.default_rng(9), t0, num_aircraft=10, passenger_names=[f"P{i}" for i in range(25)])
    carriers = [a for a in aircraft if not a.is_cargo]

    assert len(passengers) == 25
    assert not any(p.assigned_flight.is_cargo for p in passengers)
    for i, p in enumerate(passengers):
        assert p.assigned_flight is carriers[i % len(carriers)]


def test_no_aircraft_means_no_passengers(t0, rng, feed):
    airports, aircraft, passengers = generate_population(rng, t0, num_aircraft=0, feed=feed)
    assert aircraft == [] and passengers == []
    assert feed.matching("Loaded 0 passengers")
    with pytest.raises(ValueError):
        SimulationEngine(airports, aircraft, passengers, rng=rng, start_time=t0, feed=feed)


def test_negative_count_rejected(t0, rng):
    with pytest.raises(ValueError):
        generate_population(rng, t0, num_aircraft=-1)
