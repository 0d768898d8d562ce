"""
Aircraft Module

Defines the Aircraft parent class and the class-specific subclasses used in the
simulation. Each aircraft carries its schedule, fuel model, gate assignment and
delay history, plus the helpers the flight scheduler needs to move it through
its turnaround.
"""

import datetime as dt
from enum import Enum
from typing import List, Optional, Tuple

import numpy as np

# Representative distances between airports (miles) used for cruise burn
ESTIMATED_DISTANCES = (500, 1000, 1500, 2000, 2500)

REFUEL_THRESHOLD = 0.2            # fraction of fuel capacity
ARRIVAL_DELAY_RANGE = (30, 60)    # minutes, inclusive
DEPARTURE_DELAY_RANGE = (20, 60)  # minutes, inclusive
FLIGHT_DURATION_RANGE = (60, 240)  # minutes, inclusive
DEPARTURE_ESTIMATE_HOURS = (2.0, 5.0)


class AircraftClass(Enum):
    COMMERCIAL = "COMMERCIAL"
    CARGO = "CARGO"
    PRIVATE = "PRIVATE"

    @classmethod
    def parse(cls, value) -> "AircraftClass":
        """
        Resolve a classification from an enum member or a string.

        Accepts the member names plus the ``PRIVATE_JET`` and
        ``PASSENGER-COMMERCIAL`` spellings. Anything else is rejected so that
        pool sizing and eligibility filters never see a defaulted class.
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise ValueError(f"Unknown aircraft class: {value!r}")
        key = value.strip().upper().replace(" ", "_").replace("-", "_")
        key = _CLASS_ALIASES.get(key, key)
        try:
            return cls[key]
        except KeyError:
            raise ValueError(f"Unknown aircraft class: {value!r}") from None


_CLASS_ALIASES = {
    "PRIVATE_JET": "PRIVATE",
    "PASSENGER_COMMERCIAL": "COMMERCIAL",
}


class AircraftStatus(Enum):
    SCHEDULED = "scheduled"
    ARRIVED = "arrived"
    REFUELING = "refueling"
    MAINTENANCE = "maintenance"
    DELAYED = "delayed"
    DEPARTURE_REQUESTED = "departure_requested"
    DEPARTED = "departed"


class DelayReason(Enum):
    WEATHER = "Weather conditions (storm, fog, etc.)"
    CONGESTION = "Heavy airport congestion"
    BOARDING = "Passenger boarding delays"
    REFUELING = "Refueling before departure"
    SECURITY = "Extra security clearance for cargo"


def draw_flight_duration(rng: np.random.Generator) -> int:
    """Flight duration in minutes, uniform over FLIGHT_DURATION_RANGE."""
    low, high = FLIGHT_DURATION_RANGE
    return int(rng.integers(low, high + 1))


class Aircraft:
    """
    Parent class for all aircraft types.
    Handles schedule, fuel, gate assignment and delay bookkeeping.
    """

    aircraft_class: AircraftClass = AircraftClass.COMMERCIAL
    capacity_unit: str = "seats"

    def __init__(self, model: str, capacity: int, fuel_efficiency: float,
                 fuel_capacity: float, origin: str, destination: str,
                 departure_time: dt.datetime, flight_duration: int = 60):
        """
        Initialise an Aircraft instance.

        Parameters
        ----------
        model : str
            Model name (e.g., 'Boeing 737').
        capacity : int
            Seats for passenger-bearing aircraft, tons for freighters.
        fuel_efficiency : float
            Distance flown per unit of fuel.
        fuel_capacity : float
            Maximum fuel the tanks hold. The aircraft starts full.
        origin : str
            Name of the airport the aircraft departs from.
        destination : str
            Name of the airport where it takes a gate before departure.
        departure_time : datetime
            Scheduled departure.
        flight_duration : int
            Flight duration in minutes.
        """
        self._model = str(model)
        self.capacity = capacity
        self.fuel_efficiency = fuel_efficiency
        self.fuel_capacity = fuel_capacity
        self.fuel_level: float = float(fuel_capacity)
        self._origin = str(origin)
        self._destination = str(destination)
        self.departure_time: dt.datetime = departure_time
        self.flight_duration = flight_duration

        # Public attributes (mutable operational state)
        self.status = AircraftStatus.SCHEDULED
        self.requires_refuel = False
        self.held_gate: Optional[Tuple[object, int]] = None  # (airport, gate number)
        self.held_runway: Optional[int] = None
        self.delay_history: List[dict] = []
        self.maintenance_count = 0
        self.cargo_manifest: Optional[dict] = None

    # ------------------ GETTERS AND SETTERS ---------------------------------
    @property
    def model(self) -> str:
        return self._model

    @property
    def origin(self) -> str:
        return self._origin

    @property
    def destination(self) -> str:
        return self._destination

    @property
    def is_cargo(self) -> bool:
        return self.aircraft_class is AircraftClass.CARGO

    @property
    def capacity(self) -> int:
        return self._capacity

    @capacity.setter
    def capacity(self, value: int):
        if value <= 0:
            raise ValueError("Capacity must be positive")
        self._capacity = int(value)

    @property
    def fuel_efficiency(self) -> float:
        return self._fuel_efficiency

    @fuel_efficiency.setter
    def fuel_efficiency(self, value: float):
        if value <= 0:
            raise ValueError("Fuel efficiency must be positive")
        self._fuel_efficiency = float(value)

    @property
    def fuel_capacity(self) -> float:
        return self._fuel_capacity

    @fuel_capacity.setter
    def fuel_capacity(self, value: float):
        if value <= 0:
            raise ValueError("Fuel capacity must be positive")
        self._fuel_capacity = float(value)

    @property
    def flight_duration(self) -> int:
        """Flight duration in minutes."""
        return self._flight_duration

    @flight_duration.setter
    def flight_duration(self, value: int):
        if value <= 0:
            raise ValueError("Flight duration must be positive")
        self._flight_duration = int(value)

    @property
    def estimated_arrival_time(self) -> dt.datetime:
        return self.departure_time + dt.timedelta(minutes=self.flight_duration)

    @property
    def assigned_gate(self) -> Optional[int]:
        return self.held_gate[1] if self.held_gate is not None else None

    @property
    def label(self) -> str:
        return f"{self.aircraft_class.value} ({self.model})"

    # ------------------ FUEL MODEL ------------------------------------------
    def consume_arrival_fuel(self, rng: np.random.Generator) -> float:
        """
        Burn the cruise estimate for the inbound leg.

        fuel burned = distance / efficiency, with the distance drawn from
        ESTIMATED_DISTANCES. Fuel never drops below zero.
        """
        distance = float(rng.choice(ESTIMATED_DISTANCES))
        burned = distance / self.fuel_efficiency
        self.fuel_level = max(0.0, self.fuel_level - burned)
        return burned

    def fuel_required_for_departure(self, rng: np.random.Generator) -> float:
        """
        Fuel needed for the outbound leg: estimated hours × efficiency.

        Computed independently of the arrival burn.
        """
        low, high = DEPARTURE_ESTIMATE_HOURS
        hours = low + rng.random() * (high - low)
        return hours * self.fuel_efficiency

    def needs_refueling(self) -> bool:
        return self.fuel_level < self.fuel_capacity * REFUEL_THRESHOLD

    def refuel(self) -> bool:
        """Fill the tanks. Only has effect when a refuel was requested."""
        if not self.requires_refuel:
            return False
        self.status = AircraftStatus.REFUELING
        self.fuel_level = self.fuel_capacity
        self.requires_refuel = False
        return True

    def has_sufficient_fuel(self, required: float) -> bool:
        return not self.requires_refuel and self.fuel_level >= required

    # ------------------ TURNAROUND ------------------------------------------
    def assign_gate(self, airport, gate_number: int):
        self.held_gate = (airport, gate_number)
        self.status = AircraftStatus.ARRIVED

    def perform_maintenance(self):
        self.status = AircraftStatus.MAINTENANCE
        self.maintenance_count += 1

    def load_cargo(self, cargo_type: str, tons: int) -> dict:
        self.cargo_manifest = {"type": cargo_type, "tons": int(tons)}
        return self.cargo_manifest

    def request_departure(self, runway: int):
        self.held_runway = runway
        self.status = AircraftStatus.DEPARTURE_REQUESTED

    def depart(self, required_fuel: float) -> Tuple[object, int]:
        """
        Leave the gate and burn the outbound fuel.

        Returns the (airport, gate number) pair that was held so the caller
        can hand the gate back to the right pool.
        """
        if self.held_gate is None:
            raise RuntimeError(f"{self.label} cannot depart without a gate")
        if not self.has_sufficient_fuel(required_fuel):
            raise RuntimeError(f"{self.label} cannot depart with insufficient fuel")

        self.fuel_level -= required_fuel
        released = self.held_gate
        self.held_gate = None
        self.status = AircraftStatus.DEPARTED
        return released

    # ------------------ DELAYS ----------------------------------------------
    def _push_departure(self, minutes: int, reason: Optional[DelayReason], phase: str) -> int:
        self.departure_time += dt.timedelta(minutes=minutes)
        if self.status is not AircraftStatus.SCHEDULED:
            self.status = AircraftStatus.DELAYED
        self.delay_history.append({
            "phase": phase,
            "minutes": minutes,
            "reason": reason,
            "new_departure": self.departure_time,
        })
        return minutes

    def delay_arrival(self, rng: np.random.Generator) -> int:
        low, high = ARRIVAL_DELAY_RANGE
        return self._push_departure(int(rng.integers(low, high + 1)), DelayReason.CONGESTION, "arrival")

    def delay_departure(self, rng: np.random.Generator, reason: DelayReason = DelayReason.BOARDING) -> int:
        low, high = DEPARTURE_DELAY_RANGE
        return self._push_departure(int(rng.integers(low, high + 1)), reason, "departure")

    def __repr__(self):
        return f"<{self.__class__.__name__} {self.model} {self.origin}->{self.destination}>"


# ------ AIRCRAFT SUBCLASSES --------------------------------------------------------------
class CommercialAircraft(Aircraft):
    """Passenger airliner. Capacity counts seats."""
    aircraft_class = AircraftClass.COMMERCIAL
    capacity_unit = "seats"


class CargoAircraft(Aircraft):
    """
    Freighter. Capacity is measured in tons and no passengers are ever
    assigned, so departure skips the boarding check.
    """
    aircraft_class = AircraftClass.CARGO
    capacity_unit = "tons cargo"


class PrivateJet(Aircraft):
    """Small executive jet. Capacity counts seats."""
    aircraft_class = AircraftClass.PRIVATE
    capacity_unit = "seats"


FLEET = {
    AircraftClass.COMMERCIAL: CommercialAircraft,
    AircraftClass.CARGO: CargoAircraft,
    AircraftClass.PRIVATE: PrivateJet,
}


def create_aircraft(aircraft_class, model: str, capacity: int, fuel_efficiency: float,
                    fuel_capacity: float, origin: str, destination: str,
                    departure_time: dt.datetime, flight_duration: int) -> Aircraft:
    """Build the subclass matching ``aircraft_class``; unknown classes raise ValueError."""
    cls = FLEET[AircraftClass.parse(aircraft_class)]
    return cls(model, capacity, fuel_efficiency, fuel_capacity, origin, destination,
               departure_time, flight_duration)
