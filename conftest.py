import datetime as dt

import numpy as np
import pytest

from aircraft import create_aircraft
from ground_operations import Airport
from passenger import Passenger
from terminal_feed import TerminalFeed

T0 = dt.datetime(2025, 3, 14, 8, 0)


@pytest.fixture
def t0():
    return T0


@pytest.fixture
def rng():
    return np.random.default_rng(42)


@pytest.fixture
def feed():
    return TerminalFeed(echo=False)


@pytest.fixture
def make_airport(feed):
    def _make(name="Alpha", gates=2, runways=1, checkpoints=2, airport_class="COMMERCIAL"):
        return Airport(name, gates, runways, checkpoints, airport_class, feed=feed)
    return _make


@pytest.fixture
def make_aircraft():
    def _make(aircraft_class="COMMERCIAL", origin="Alpha", destination="Beta",
              departure_time=T0 + dt.timedelta(minutes=60), fuel_capacity=10000.0,
              fuel_efficiency=5.0, capacity=150, flight_duration=90, model="Boeing 737"):
        return create_aircraft(aircraft_class, model, capacity, fuel_efficiency, fuel_capacity,
                               origin, destination, departure_time, flight_duration)
    return _make


@pytest.fixture
def make_passenger(rng):
    def _make(name, flight, security_wait=5, boarding_wait=5, check_in_wait=0):
        """Passenger with no random issues, so each step takes one cycle."""
        p = Passenger(name, flight, rng)
        p.check_in_issue = p.security_issue = p.boarding_issue = False
        p.check_in_wait = check_in_wait
        p.security_wait = security_wait
        p.boarding_wait = boarding_wait
        return p
    return _make
