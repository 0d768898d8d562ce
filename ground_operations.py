"""
Ground Operations Module

Handles the bounded resources of each airport:
- Gate allocation and release
- Runway allocation and release
- Security checkpoint backlog and peak-hour handling

Gates and runways are numbered 1..total and always handed out lowest-free
first. Collaborators only ever receive counts or snapshot copies.
"""

import heapq
from typing import Dict, Iterable, List, Optional, Tuple

import numpy as np

from aircraft import Aircraft, AircraftClass
from terminal_feed import TerminalFeed

PEAK_HOUR_PROBABILITY = 0.5
SECURITY_STEP = 30          # minutes of security wait burned per cycle
PEAK_HOUR_PENALTY = 60      # one-time extra minutes during a peak cycle


def _positive_int(value, what: str) -> int:
    if int(value) != value or value <= 0:
        raise ValueError(f"{what} must be a positive integer")
    return int(value)


# ------ AIRPORT RESOURCE POOL --------------------------------------------------------------
class Airport:

    def __init__(self, name: str, total_gates: int, total_runways: int,
                 total_security_checkpoints: int, airport_class,
                 feed: Optional[TerminalFeed] = None):
        """
        Initialise an airport's resource pools.

        Parameters
        ----------
        name : str
            Airport name, matched case-insensitively by the directory.
        total_gates : int
            Number of gates, numbered 1..total_gates.
        total_runways : int
            Number of runways, numbered 1..total_runways.
        total_security_checkpoints : int
            Backlog size at which security counts as overloaded.
        airport_class : AircraftClass or str
            COMMERCIAL, CARGO or PRIVATE. Unknown values raise ValueError.
        feed : TerminalFeed, optional
            Where gate/runway/security events are reported.
        """
        self._name = str(name)
        self._total_gates = _positive_int(total_gates, "Gate count")
        self._total_runways = _positive_int(total_runways, "Runway count")
        self._total_security_checkpoints = _positive_int(
            total_security_checkpoints, "Security checkpoint count")
        self._airport_class = AircraftClass.parse(airport_class)
        self.feed = feed or TerminalFeed(echo=False)

        # free pools (min-heaps) and holders
        self._free_gates: List[int] = list(range(1, self._total_gates + 1))
        self._free_runways: List[int] = list(range(1, self._total_runways + 1))
        heapq.heapify(self._free_gates)
        heapq.heapify(self._free_runways)
        self._gate_holders: Dict[int, Aircraft] = {}
        self._runway_holders: Dict[int, Aircraft] = {}

        # security state
        self._security_backlog: List[object] = []
        self.is_peak_hour = False

    # ------ GETTERS --------------------------------------------------------------
    @property
    def name(self) -> str:
        return self._name

    @property
    def airport_class(self) -> AircraftClass:
        return self._airport_class

    @property
    def total_gates(self) -> int:
        return self._total_gates

    @property
    def total_runways(self) -> int:
        return self._total_runways

    @property
    def total_security_checkpoints(self) -> int:
        return self._total_security_checkpoints

    @property
    def available_gates(self) -> int:
        return len(self._free_gates)

    @property
    def available_runways(self) -> int:
        return len(self._free_runways)

    def held_gates(self) -> Dict[int, Aircraft]:
        """Snapshot of gate number -> aircraft."""
        return dict(self._gate_holders)

    def held_runways(self) -> Dict[int, Aircraft]:
        """Snapshot of runway number -> aircraft."""
        return dict(self._runway_holders)

# ------ GATE LOGIC --------------------------------------------------------------
    def any_gate_available(self) -> bool:
        return bool(self._free_gates)

    def allocate_gate(self, aircraft: Aircraft) -> Optional[int]:
        """
        Hand the lowest free gate to an aircraft.

        Returns
        -------
        int or None
            Gate number, or None when every gate is held.
        """
        if not self._free_gates:
            self.feed.gate_event(
                f"{self.name} has no available gates "
                f"({self.available_runways} runways available)")
            return None

        gate = heapq.heappop(self._free_gates)
        self._gate_holders[gate] = aircraft
        self.feed.gate_event(
            f"{self.name} assigned Gate {gate} to {aircraft.label}. "
            f"Remaining available gates: {self.available_gates}")
        return gate

    def release_gate(self, gate_number: int) -> bool:
        """
        Free the given gate. Gates that are not currently held are ignored.
        """
        if gate_number not in self._gate_holders:
            return False
        del self._gate_holders[gate_number]
        heapq.heappush(self._free_gates, gate_number)
        self.feed.gate_event(f"Gate {gate_number} at {self.name} is now available.")
        return True

# ------ RUNWAY LOGIC --------------------------------------------------------------
    def is_runway_available(self) -> bool:
        return bool(self._free_runways)

    def request_runway(self, aircraft: Aircraft) -> Optional[int]:
        """
        Mark the lowest free runway occupied by ``aircraft``.
        Never waits: None means the caller retries on a later cycle.
        """
        if not self._free_runways:
            self.feed.announce_clearance(
                f"No available runways for {aircraft.label} at {self.name}.")
            return None

        runway = heapq.heappop(self._free_runways)
        self._runway_holders[runway] = aircraft
        aircraft.request_departure(runway)
        self.feed.runway_status(True, f"runway {runway} at {self.name} occupied by {aircraft.label}")
        return runway

    def release_runway(self, aircraft: Aircraft) -> Optional[int]:
        """Return the runway held by ``aircraft`` to the pool."""
        for runway, holder in self._runway_holders.items():
            if holder is aircraft:
                break
        else:
            return None

        del self._runway_holders[runway]
        heapq.heappush(self._free_runways, runway)
        aircraft.held_runway = None
        self.feed.runway_status(False, f"{aircraft.label} vacated runway {runway} at {self.name}")
        return runway

# ------ SECURITY LOGIC --------------------------------------------------------------
    @property
    def security_backlog(self) -> int:
        return len(self._security_backlog)

    @property
    def is_security_overloaded(self) -> bool:
        return self.is_peak_hour or len(self._security_backlog) >= self._total_security_checkpoints

    def process_passenger_security(self, passenger) -> bool:
        """
        Run one cycle of security screening for a passenger.

        The remaining wait drops by SECURITY_STEP minutes; the first time a
        passenger is screened during a peak cycle PEAK_HOUR_PENALTY minutes
        are added. A wait at or below zero clears security.

        Returns
        -------
        bool
            True when the passenger cleared security this call.
        """
        if not passenger.has_checked_in:
            self.feed.security_event(
                f"{passenger.name} cannot go through security without checking in.")
            return False
        if passenger.has_cleared_security:
            return True

        if not any(queued is passenger for queued in self._security_backlog):
            self._security_backlog.append(passenger)

        additional_delay = 0
        if self.is_peak_hour and not passenger.received_peak_hour_penalty:
            additional_delay = PEAK_HOUR_PENALTY
            passenger.received_peak_hour_penalty = True

        security_wait = passenger.security_wait - SECURITY_STEP + additional_delay
        if security_wait > 0:
            passenger.security_wait = security_wait
            self.feed.security_event(
                f"{passenger.name} is delayed at security at {self.name}. "
                f"Remaining wait: {security_wait} minutes.")
            return False

        passenger.security_wait = 0
        passenger.clear_security()
        self.remove_from_security(passenger)
        self.feed.security_event(f"{passenger.name} has cleared security at {self.name}")
        return True

    def remove_from_security(self, passenger) -> bool:
        for i, queued in enumerate(self._security_backlog):
            if queued is passenger:
                del self._security_backlog[i]
                return True
        return False

# ------ PEAK HOURS --------------------------------------------------------------
    def handle_peak_hours(self, rng: np.random.Generator) -> bool:
        self.is_peak_hour = bool(rng.random() < PEAK_HOUR_PROBABILITY)
        self.feed.status_update(
            f"{self.name} is now "
            + ("in peak hours! Expect delays." if self.is_peak_hour else "operating normally."))
        return self.is_peak_hour

    def snapshot(self) -> dict:
        return {
            "name": self.name,
            "airport_class": self.airport_class.value,
            "total_gates": self.total_gates,
            "available_gates": self.available_gates,
            "total_runways": self.total_runways,
            "available_runways": self.available_runways,
            "security_backlog": self.security_backlog,
            "security_overloaded": self.is_security_overloaded,
        }

    def __repr__(self):
        return f"<Airport {self.name} {self.airport_class.value}>"


class AirportDirectory:
    """Read-only lookup of airports by name."""

    def __init__(self, airports: Iterable[Airport]):
        self._airports: Tuple[Airport, ...] = tuple(airports)

    @property
    def airports(self) -> Tuple[Airport, ...]:
        return self._airports

    def get_airport_by_name(self, name: str) -> Optional[Airport]:
        """
        Case-insensitive lookup. When several airports share a name the
        first one registered wins.
        """
        wanted = str(name).lower()
        for airport in self._airports:
            if airport.name.lower() == wanted:
                return airport
        return None

    def __iter__(self):
        return iter(self._airports)

    def __len__(self):
        return len(self._airports)
