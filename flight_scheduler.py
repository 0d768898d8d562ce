"""
Flight Scheduler Module

Moves aircraft between the scheduled (not yet arrived) registry and the
grounded registry, and implements the arrival and departure protocols:
gate assignment, refuelling, maintenance, boarding/fuel checks and runway
contention. Shortages never block; they delay the aircraft and the attempt
is retried on a later cycle.
"""

import datetime as dt
from typing import Callable, Iterable, List, Optional, Tuple

import numpy as np

from aircraft import Aircraft, DelayReason
from ground_operations import AirportDirectory
from terminal_feed import TerminalFeed

# Arrival window relative to scheduled departure (minutes before)
ARRIVAL_WINDOW_OPENS = dt.timedelta(minutes=60)
ARRIVAL_WINDOW_CLOSES = dt.timedelta(minutes=30)

# (flight duration threshold in minutes, maintenance probability)
MAINTENANCE_PROBABILITIES = ((120, 0.5), (60, 0.3))
SHORT_FLIGHT_MAINTENANCE_PROBABILITY = 0.15


class FlightScheduler:

    def __init__(self, rng: np.random.Generator,
                 passengers_for_flight: Callable[[Aircraft], Iterable] = lambda aircraft: (),
                 feed: Optional[TerminalFeed] = None):
        """
        Parameters
        ----------
        rng : numpy.random.Generator
            Shared random source for fuel, maintenance and delay draws.
        passengers_for_flight : callable
            Returns the active passengers assigned to an aircraft.
        feed : TerminalFeed, optional
            Where arrival/departure events are reported.
        """
        self.rng = rng
        self.passengers_for_flight = passengers_for_flight
        self.feed = feed or TerminalFeed(echo=False)

        self._scheduled: List[Aircraft] = []
        self._arrived: List[Aircraft] = []
        self._departed: List[Aircraft] = []

    # ------ REGISTRIES --------------------------------------------------------------
    def schedule_flight(self, aircraft: Aircraft, departure_time: dt.datetime):
        aircraft.departure_time = departure_time
        self._scheduled.append(aircraft)

    @property
    def pending_flights(self) -> Tuple[Aircraft, ...]:
        return tuple(self._scheduled)

    @property
    def arrived_planes(self) -> Tuple[Aircraft, ...]:
        return tuple(self._arrived)

    @property
    def departed_flights(self) -> Tuple[Aircraft, ...]:
        return tuple(self._departed)

    def is_arrived(self, aircraft: Aircraft) -> bool:
        return any(a is aircraft for a in self._arrived)

    def outstanding_cargo(self) -> int:
        """Cargo aircraft that have not departed yet, grounded or not."""
        return sum(1 for a in self._scheduled + self._arrived if a.is_cargo)

    # ------ ARRIVALS --------------------------------------------------------------
    @staticmethod
    def in_arrival_window(aircraft: Aircraft, current_time: dt.datetime) -> bool:
        earliest = aircraft.departure_time - ARRIVAL_WINDOW_OPENS
        latest = aircraft.departure_time - ARRIVAL_WINDOW_CLOSES
        return earliest <= current_time < latest

    def maintenance_probability(self, aircraft: Aircraft) -> float:
        for threshold, probability in MAINTENANCE_PROBABILITIES:
            if aircraft.flight_duration > threshold:
                return probability
        return SHORT_FLIGHT_MAINTENANCE_PROBABILITY

    def should_perform_maintenance(self, aircraft: Aircraft) -> bool:
        return bool(self.rng.random() < self.maintenance_probability(aircraft))

    def process_arrivals(self, current_time: dt.datetime, directory: AirportDirectory) -> List[Aircraft]:
        """
        Give a gate to every scheduled aircraft inside its arrival window.

        Returns the aircraft that arrived this cycle.
        """
        arrived_now = []
        stamp = current_time.strftime("%H:%M")

        for aircraft in list(self._scheduled):
            if not self.in_arrival_window(aircraft, current_time):
                continue

            destination = directory.get_airport_by_name(aircraft.destination)
            if destination is None:
                self.feed.error(f"Airport not found for {aircraft.destination}; "
                                f"{aircraft.label} will retry next cycle.")
                continue

            gate = destination.allocate_gate(aircraft)
            if gate is None:
                minutes = aircraft.delay_arrival(self.rng)
                self.feed.arrival_event(
                    f"{aircraft.label} delayed {minutes} min due to no available gates at "
                    f"{destination.name}. New departure: {aircraft.departure_time:%H:%M}")
                continue

            burned = aircraft.consume_arrival_fuel(self.rng)
            aircraft.assign_gate(destination, gate)
            self._scheduled.remove(aircraft)
            self._arrived.append(aircraft)
            arrived_now.append(aircraft)
            self.feed.arrival_event(
                f"{aircraft.label} has arrived at {destination.name} gate {gate} "
                f"(Arrived at: {stamp}). Burned {burned:.1f}, remaining fuel {aircraft.fuel_level:.1f}")

            if aircraft.needs_refueling():
                aircraft.requires_refuel = True
                aircraft.refuel()
                self.feed.arrival_event(f"{aircraft.label} is refueling at {destination.name}")
            else:
                self.feed.arrival_event(f"{aircraft.label} has sufficient fuel.")

            if self.should_perform_maintenance(aircraft):
                aircraft.perform_maintenance()
                self.feed.arrival_event(
                    f"{aircraft.label} is undergoing maintenance at {destination.name}")

        if not arrived_now:
            self.feed.status_update("No airplane arrivals or maintenance tasks were processed this cycle.")
        return arrived_now

    # ------ DEPARTURES --------------------------------------------------------------
    def process_departures(self, current_time: dt.datetime, directory: AirportDirectory) -> List[Aircraft]:
        """
        Release every grounded aircraft whose departure time has come and
        that passes the boarding, fuel and runway checks.

        Returns the aircraft that departed this cycle.
        """
        departed_now = []

        for aircraft in list(self._arrived):
            if aircraft.departure_time > current_time:
                continue

            origin = directory.get_airport_by_name(aircraft.origin)
            if origin is None:
                self.feed.error(f"Airport not found for {aircraft.origin}")
                continue

            if not aircraft.is_cargo:
                passengers = list(self.passengers_for_flight(aircraft))
                if not all(p.has_boarded for p in passengers):
                    minutes = aircraft.delay_departure(self.rng, DelayReason.BOARDING)
                    self.feed.departure_event(
                        f"{aircraft.label} at {origin.name} delayed {minutes} min due to "
                        f"passengers still boarding.")
                    continue

            required = aircraft.fuel_required_for_departure(self.rng)
            if not aircraft.has_sufficient_fuel(required):
                aircraft.requires_refuel = True
                aircraft.refuel()
                minutes = aircraft.delay_departure(self.rng, DelayReason.REFUELING)
                self.feed.departure_event(
                    f"{aircraft.label} at {origin.name} delayed {minutes} min for refueling.")
                continue

            runway = origin.request_runway(aircraft)
            if runway is None:
                minutes = aircraft.delay_departure(self.rng, DelayReason.CONGESTION)
                self.feed.departure_event(
                    f"{aircraft.label} delayed {minutes} min due to congestion at {origin.name}")
                continue

            gate_airport, gate = aircraft.depart(required)
            gate_airport.release_gate(gate)
            self._arrived.remove(aircraft)
            self._departed.append(aircraft)
            origin.release_runway(aircraft)
            departed_now.append(aircraft)
            self.feed.departure_event(
                f"{aircraft.label} departed successfully from {origin.name} on runway {runway} "
                f"to {aircraft.destination}. Remaining fuel {aircraft.fuel_level:.1f}")

            if not aircraft.is_cargo:
                for passenger in self.passengers_for_flight(aircraft):
                    passenger.mark_in_flight()

        if not departed_now:
            self.feed.status_update("No airplane departures were processed this cycle.")
        return departed_now
