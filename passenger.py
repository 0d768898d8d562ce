"""
Passenger Module

A passenger arrives two hours before the assigned aircraft's scheduled
departure, checks in, clears security and boards. Each step can be held up
by a randomly rolled issue that adds wait minutes burned down 30 minutes per
cycle.
"""

import datetime as dt
from enum import Enum

import numpy as np

from aircraft import Aircraft

ARRIVAL_LEAD = dt.timedelta(hours=2)
BASE_WAIT_RANGE = (5, 34)      # minutes, inclusive
ISSUE_EXTRA_RANGE = (10, 29)   # minutes, inclusive
WAIT_STEP = 30                 # minutes burned per processing cycle


class PassengerStatus(Enum):
    UNARRIVED = "unarrived"
    ARRIVED = "arrived"
    CHECKED_IN = "checked_in"
    SECURITY_CLEARED = "security_cleared"
    BOARDED = "boarded"
    IN_FLIGHT = "in_flight"


def _draw(rng: np.random.Generator, bounds) -> int:
    low, high = bounds
    return int(rng.integers(low, high + 1))


class Passenger:
    """Passenger bound to exactly one passenger-bearing aircraft."""

    def __init__(self, name: str, assigned_flight: Aircraft, rng: np.random.Generator):
        if assigned_flight.is_cargo:
            raise ValueError(f"Passenger {name} cannot be assigned to a cargo aircraft")

        self._name = str(name)
        self._assigned_flight = assigned_flight
        self._arrival_time = assigned_flight.departure_time - ARRIVAL_LEAD

        self.has_arrived = False
        self.has_checked_in = False
        self.has_cleared_security = False
        self.has_boarded = False
        self.in_flight = False
        self.received_peak_hour_penalty = False

        # Check-in has no base wait; only an issue holds it up
        self.check_in_wait = 0
        self.security_wait = _draw(rng, BASE_WAIT_RANGE)
        self.boarding_wait = _draw(rng, BASE_WAIT_RANGE)

        self.check_in_issue = bool(rng.random() < 0.5)
        self.security_issue = bool(rng.random() < 0.5)
        self.boarding_issue = bool(rng.random() < 0.5)
        if self.check_in_issue:
            self.check_in_wait += _draw(rng, ISSUE_EXTRA_RANGE)
        if self.security_issue:
            self.security_wait += _draw(rng, ISSUE_EXTRA_RANGE)
        if self.boarding_issue:
            self.boarding_wait += _draw(rng, ISSUE_EXTRA_RANGE)

    @property
    def name(self) -> str:
        return self._name

    @property
    def assigned_flight(self) -> Aircraft:
        return self._assigned_flight

    @property
    def arrival_time(self) -> dt.datetime:
        return self._arrival_time

    @property
    def status(self) -> PassengerStatus:
        if self.in_flight:
            return PassengerStatus.IN_FLIGHT
        if self.has_boarded:
            return PassengerStatus.BOARDED
        if self.has_cleared_security:
            return PassengerStatus.SECURITY_CLEARED
        if self.has_checked_in:
            return PassengerStatus.CHECKED_IN
        if self.has_arrived:
            return PassengerStatus.ARRIVED
        return PassengerStatus.UNARRIVED

    def arrive_at_airport(self) -> bool:
        self.has_arrived = True
        return True

    def check_in(self) -> bool:
        """
        Attempt check-in. While an issue is still outstanding the wait is
        reduced by one cycle and the passenger stays at the counter.
        """
        if not self.has_arrived:
            return False
        if self.has_checked_in:
            return True
        if self.check_in_issue and self.check_in_wait > 0:
            self.check_in_wait = max(0, self.check_in_wait - WAIT_STEP)
            return False
        self.has_checked_in = True
        return True

    def clear_security(self):
        if not self.has_checked_in:
            raise RuntimeError(f"{self.name} cannot clear security before check-in")
        self.has_cleared_security = True

    def board_flight(self) -> bool:
        if not (self.has_checked_in and self.has_cleared_security):
            return False
        if self.has_boarded:
            return True
        if self.boarding_issue and self.boarding_wait > 0:
            self.boarding_wait = max(0, self.boarding_wait - WAIT_STEP)
            return False
        self.has_boarded = True
        return True

    def mark_in_flight(self) -> bool:
        """Status-only transition once the aircraft has taken off."""
        if not self.has_boarded:
            return False
        self.in_flight = True
        return True

    def __repr__(self):
        return f"<Passenger {self.name} {self.status.value}>"
