"""
Simulation Module

Main cycle loop for the multi-airport simulation. Each cycle advances the
simulated clock by a fixed interval and runs every phase once, in order:

 1. arrivals / maintenance       7. missed-passenger pruning
 2. passenger arrival            8. boarding
 3. check-in                     9. peak-hour toggle
 4. security                    10. departures
 5. cargo flights               11. status snapshot
 6. waiting area
"""

import datetime as dt
from typing import Callable, Dict, List, Optional, Sequence

import numpy as np

from aircraft import Aircraft, DelayReason
from flight_scheduler import ARRIVAL_WINDOW_CLOSES, ARRIVAL_WINDOW_OPENS, FlightScheduler
from ground_operations import Airport, AirportDirectory
from passenger import Passenger
from terminal_feed import TerminalFeed

CYCLE_MINUTES = 30
TIME_FORMAT = "%Y-%m-%d %H:%M"

CARGO_TYPES = (
    "Medical Supplies",
    "Electronics",
    "Automotive Parts",
    "Perishables",
    "Industrial Equipment",
)
URGENT_CARGO = {"medical supplies", "perishables"}
CARGO_LOADS = (20, 30, 50, 60, 80)  # tons

MISSED_FLIGHT_EXCUSES = (
    "The queue for coffee was longer than the queue for security.",
    "Nobody told me the gate moved to the other terminal.",
    "My watch is still on holiday time.",
    "I was only answering one more email.",
    "The moving walkway was going the wrong way, I'm sure of it.",
    "I thought boarding closed when the doors closed, not before.",
)


class SimulationEngine:

    def __init__(self, airports: Sequence[Airport], aircraft: Sequence[Aircraft],
                 passengers: Sequence[Passenger], rng: Optional[np.random.Generator] = None,
                 start_time: Optional[dt.datetime] = None, feed: Optional[TerminalFeed] = None,
                 cycle_minutes: int = CYCLE_MINUTES, track_outstanding_cargo: bool = False):
        """
        Initialise the simulation and schedule every aircraft.

        Parameters
        ----------
        airports, aircraft, passengers : sequence
            Initial population. None of them may be empty.
        rng : numpy.random.Generator, optional
            Shared random source. Defaults to an unseeded generator.
        start_time : datetime, optional
            Simulated clock at cycle 1. Defaults to the current minute.
        feed : TerminalFeed, optional
            Status output. Defaults to a printing feed.
        cycle_minutes : int
            Simulated minutes per cycle.
        track_outstanding_cargo : bool
            Stop only once every cargo aircraft has departed, rather than
            when none is currently grounded.
        """
        if not airports:
            raise ValueError("At least one airport is required to start the simulation")
        if not aircraft:
            raise ValueError("At least one aircraft is required to start the simulation")
        if not passengers:
            raise ValueError("At least one passenger is required to start the simulation")
        if cycle_minutes <= 0:
            raise ValueError("Cycle length must be positive")
        if dt.timedelta(minutes=cycle_minutes) > ARRIVAL_WINDOW_OPENS - ARRIVAL_WINDOW_CLOSES:
            raise ValueError(
                f"Cycle length of {cycle_minutes} minutes is longer than the "
                f"{(ARRIVAL_WINDOW_OPENS - ARRIVAL_WINDOW_CLOSES).seconds // 60} minute arrival window")

        self.rng = rng if rng is not None else np.random.default_rng()
        self.feed = feed or TerminalFeed()
        self.cycle_length = dt.timedelta(minutes=cycle_minutes)
        self.track_outstanding_cargo = track_outstanding_cargo
        self.current_time = start_time or dt.datetime.now().replace(second=0, microsecond=0)
        self.cycles_run = 0

        self.directory = AirportDirectory(airports)
        self._passengers: List[Passenger] = list(passengers)
        self._missed: List[str] = []
        self._boarding_log: List[Dict] = []
        self._boarded: List[Passenger] = []  # parallel to _boarding_log

        self.flight_scheduler = FlightScheduler(self.rng, self.passengers_for_flight, self.feed)

        # aircraft -> destination airport (where it takes a gate)
        self._destinations: Dict[Aircraft, Airport] = {}
        for plane in aircraft:
            self.flight_scheduler.schedule_flight(plane, plane.departure_time)
            destination = self.directory.get_airport_by_name(plane.destination)
            if destination is None:
                self.feed.error(f"No airport named {plane.destination} for {plane.label}")
            else:
                self._destinations[plane] = destination

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------
    @property
    def airports(self):
        return self.directory.airports

    @property
    def passengers(self):
        return tuple(self._passengers)

    @property
    def missed_passengers(self):
        return tuple(self._missed)

    @property
    def boarding_log(self):
        return tuple(dict(entry) for entry in self._boarding_log)

    def passengers_for_flight(self, aircraft: Aircraft) -> List[Passenger]:
        return [p for p in self._passengers if p.assigned_flight is aircraft]

    def destination_of(self, aircraft: Aircraft) -> Optional[Airport]:
        airport = self._destinations.get(aircraft)
        if airport is None:
            airport = self.directory.get_airport_by_name(aircraft.destination)
            if airport is not None:
                self._destinations[aircraft] = airport
        return airport

    def current_simulation_time(self) -> str:
        return self.current_time.strftime(TIME_FORMAT)

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------
    def run_simulation(self, max_cycles: Optional[int] = None,
                       on_cycle: Optional[Callable[["SimulationEngine"], None]] = None) -> dict:
        """
        Run cycles until the termination predicate holds.

        Parameters
        ----------
        max_cycles : int, optional
            Safety cap. When reached first the summary reports
            ``completed=False``.
        on_cycle : callable, optional
            Called with the engine after every cycle (status snapshot hook).

        Returns
        -------
        dict
            Summary of the run.
        """
        self.feed.banner("Starting airport simulation...")

        completed = self.is_complete()
        while not completed:
            if max_cycles is not None and self.cycles_run >= max_cycles:
                self.feed.error(f"Simulation stopped after {self.cycles_run} cycles without completing.")
                break
            self.step()
            if on_cycle is not None:
                on_cycle(self)
            completed = self.is_complete()

        if completed:
            self.feed.status_update(
                "Simulation completed. All passengers have boarded, and all flights have departed.")
        return self.summary(completed)

    def step(self):
        """Run one full cycle and advance the clock."""
        self.cycles_run += 1
        self.feed.section(f"=== Cycle {self.cycles_run} {self.current_simulation_time()} ===")

        self.feed.section("Arrival and Maintenance Processing:")
        self.flight_scheduler.process_arrivals(self.current_time, self.directory)
        self.process_passenger_arrival()
        self.process_check_in()
        self.process_security()
        self.process_cargo_flights()
        self.process_waiting_passengers()
        self.remove_missed_passengers()
        self.process_boarding()
        self.process_peak_hours()

        self.feed.section("Departures Processing:")
        departed = self.flight_scheduler.process_departures(self.current_time, self.directory)
        for plane in departed:
            if plane.is_cargo:
                self.feed.cargo_event(
                    f"LIVE TRACKING: {plane.model} en route to {plane.destination}. "
                    f"ETA: {plane.estimated_arrival_time:%H:%M}")
            for passenger in self.passengers_for_flight(plane):
                if passenger.has_boarded:
                    self.update_passenger_log_to_in_flight(passenger, plane)

        self.display_airport_status()
        self.current_time += self.cycle_length

    def is_complete(self) -> bool:
        return self.all_passengers_boarded() and self.all_cargo_departed()

    def all_passengers_boarded(self) -> bool:
        return all(p.has_boarded for p in self._passengers)

    def all_cargo_departed(self) -> bool:
        if self.track_outstanding_cargo:
            return self.flight_scheduler.outstanding_cargo() == 0
        return not any(plane.is_cargo for plane in self.flight_scheduler.arrived_planes)

    # ------------------------------------------------------------------
    # Passenger phases
    # ------------------------------------------------------------------
    def process_passenger_arrival(self) -> int:
        self.feed.section("Passenger Arrival Processing:")
        arrivals = 0
        for passenger in self._passengers:
            if not passenger.has_arrived and passenger.arrival_time <= self.current_time:
                passenger.arrive_at_airport()
                flight = passenger.assigned_flight
                self.feed.passenger_event(
                    f"{passenger.name} arrived for {flight.label} to {flight.destination} "
                    f"(Arrival {passenger.arrival_time:%H:%M}, Departure {flight.departure_time:%H:%M})")
                arrivals += 1

        if not arrivals:
            self.feed.passenger_event("No new passenger arrivals this cycle.")
        return arrivals

    def process_check_in(self) -> int:
        self.feed.section("Check-In Processing:")
        checked_in = 0
        for passenger in self._passengers:
            if not passenger.has_arrived or passenger.has_checked_in:
                continue
            if passenger.check_in():
                self.feed.passenger_event(f"{passenger.name} has successfully checked in.")
                checked_in += 1
            else:
                self.feed.passenger_event(
                    f"{passenger.name} is delayed at check-in. "
                    f"Remaining wait: {passenger.check_in_wait} minutes.")

        if not checked_in:
            self.feed.passenger_event("No check-ins this cycle.")
        return checked_in

    def process_security(self) -> int:
        self.feed.section("Security Checkpoint Processing:")
        processed = 0
        for passenger in self._passengers:
            if not passenger.has_checked_in or passenger.has_cleared_security:
                continue

            airport = self.destination_of(passenger.assigned_flight)
            if airport is None:
                self.feed.error(f"{passenger.name} does not have a resolvable departure airport.")
                continue

            initial_wait = passenger.security_wait
            airport.process_passenger_security(passenger)
            if initial_wait != passenger.security_wait or passenger.has_cleared_security:
                processed += 1

        if not processed:
            self.feed.security_event("No passengers processed at security this cycle.")
        return processed

    def process_waiting_passengers(self) -> int:
        self.feed.section("Passenger Waiting Area Processing:")
        waiting = 0
        for passenger in self._passengers:
            if passenger.has_boarded or not passenger.has_cleared_security:
                continue
            flight = passenger.assigned_flight
            if not self.flight_scheduler.is_arrived(flight):
                self.feed.passenger_event(
                    f"{passenger.name} is waiting in the seating area for flight "
                    f"{flight.label} to {flight.destination}.")
                waiting += 1

        if not waiting:
            self.feed.passenger_event("No passengers are currently waiting in the seating area.")
        return waiting

    def remove_missed_passengers(self) -> List[Passenger]:
        self.feed.section("Missed Flights Processing:")
        missed = [p for p in self._passengers
                  if not p.has_boarded and self.current_time > p.assigned_flight.departure_time]

        for passenger in missed:
            self._passengers.remove(passenger)
            self._missed.append(passenger.name)
            airport = self.destination_of(passenger.assigned_flight)
            if airport is not None:
                airport.remove_from_security(passenger)
            excuse = MISSED_FLIGHT_EXCUSES[int(self.rng.integers(len(MISSED_FLIGHT_EXCUSES)))]
            self.feed.passenger_event(
                f"{passenger.name} has been removed from the system. They missed their flight to "
                f"{passenger.assigned_flight.destination}. Comment: \"{excuse}\"")

        if not missed:
            self.feed.passenger_event("No passengers missed their flight this cycle.")
        return missed

    def process_boarding(self) -> int:
        self.feed.section("Passenger Boarding Processing:")
        boarded = 0
        for passenger in self._passengers:
            if passenger.has_boarded or not (passenger.has_checked_in and passenger.has_cleared_security):
                continue

            flight = passenger.assigned_flight
            if not self.flight_scheduler.is_arrived(flight):
                self.feed.passenger_event(
                    f"{passenger.name} cannot board yet; flight {flight.label} has not arrived.")
                continue
            if self.current_time > flight.departure_time:
                self.feed.passenger_event(
                    f"{passenger.name} missed their flight to {flight.destination}! "
                    f"Flight has already departed.")
                continue

            if passenger.board_flight():
                boarded += 1
                self.feed.passenger_event(f"{passenger.name} has boarded the flight.")
                self._boarded.append(passenger)
                self._boarding_log.append({
                    "passenger": passenger.name,
                    "aircraft": flight.model,
                    "destination": flight.destination,
                    "status": "BOARDED",
                    "time": self.current_simulation_time(),
                    "message": (f"{passenger.name} has boarded {flight.aircraft_class.value} to "
                                f"{flight.destination}. Estimated departure: {flight.departure_time:%H:%M}"),
                })
            else:
                self.feed.passenger_event(
                    f"{passenger.name} is delayed at boarding. "
                    f"Remaining wait: {passenger.boarding_wait} minutes.")

        if not boarded:
            self.feed.passenger_event("No passengers boarded this cycle.")
        return boarded

    def update_passenger_log_to_in_flight(self, passenger: Passenger, aircraft: Aircraft) -> bool:
        """Switch the passenger's boarding log entry to IN FLIGHT."""
        for boarded, entry in zip(self._boarded, self._boarding_log):
            if boarded is passenger and entry["status"] == "BOARDED":
                entry["status"] = "IN FLIGHT"
                entry["time"] = self.current_simulation_time()
                entry["message"] = (
                    f"{passenger.name} is on {aircraft.aircraft_class.value} to {aircraft.destination} "
                    f"(Expected Arrival: {aircraft.estimated_arrival_time:%H:%M}) <<< IN FLIGHT")
                return True
        return False

    # ------------------------------------------------------------------
    # Cargo and airport phases
    # ------------------------------------------------------------------
    def process_cargo_flights(self) -> int:
        self.feed.section("Cargo Flight Processing:")
        updates = 0
        for plane in self.flight_scheduler.arrived_planes:
            if not plane.is_cargo:
                continue

            cargo_type = CARGO_TYPES[int(self.rng.integers(len(CARGO_TYPES)))]
            tons = CARGO_LOADS[int(self.rng.integers(len(CARGO_LOADS)))]
            plane.load_cargo(cargo_type, tons)
            self.feed.cargo_event(
                f"CARGO LOADED: {plane.model} is transporting {tons} tons of {cargo_type} "
                f"to {plane.destination}")

            if cargo_type.lower() in URGENT_CARGO:
                minutes = plane.delay_departure(self.rng, reason=DelayReason.SECURITY)
                self.feed.cargo_event(
                    f"URGENT SHIPMENT! Extra security clearance required. "
                    f"{plane.model} delayed {minutes} min.")

            self.feed.cargo_event(
                f"GROUND STATUS: {plane.model} loading for {plane.destination}. "
                f"Scheduled departure: {plane.departure_time:%H:%M}")
            updates += 1

        if not updates:
            self.feed.cargo_event("No cargo updates this cycle.")
        return updates

    def process_peak_hours(self):
        self.feed.section("Peak Hours Processing:")
        for airport in self.directory:
            airport.handle_peak_hours(self.rng)

    def airport_status(self) -> List[dict]:
        """Per-airport snapshot for reporters."""
        return [airport.snapshot() for airport in self.directory]

    def display_airport_status(self):
        header = (f"│ {'Airport Name':<40} │ {'Gates (Available)':<22} │ "
                  f"{'Runways (Available)':<24} │ {'Security Status':<15} │")
        self.feed.raw("\n" + header)
        self.feed.raw("-" * len(header))
        for row in self.airport_status():
            security = "Overloaded" if row["security_overloaded"] else "Normal"
            self.feed.raw(
                f"│ {row['name']:<40} │ "
                f"{str(row['total_gates']) + ' (' + str(row['available_gates']) + ')':<22} │ "
                f"{str(row['total_runways']) + ' (' + str(row['available_runways']) + ')':<24} │ "
                f"{security:<15} │")

    def summary(self, completed: bool) -> dict:
        return {
            "cycles": self.cycles_run,
            "completed": completed,
            "final_time": self.current_simulation_time(),
            "passengers_boarded": sum(1 for p in self._passengers if p.has_boarded),
            "passengers_missed": len(self._missed),
            "aircraft_departed": len(self.flight_scheduler.departed_flights),
        }
