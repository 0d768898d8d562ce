import datetime as dt

import numpy as np
import pytest

from aircraft import (ARRIVAL_DELAY_RANGE, DEPARTURE_DELAY_RANGE, ESTIMATED_DISTANCES, AircraftClass,
                      AircraftStatus, CargoAircraft, CommercialAircraft, DelayReason, PrivateJet,
                      draw_flight_duration)


class TestAircraftClass:

    @pytest.mark.parametrize("value, expected", [
        ("COMMERCIAL", AircraftClass.COMMERCIAL),
        ("cargo", AircraftClass.CARGO),
        ("PRIVATE_JET", AircraftClass.PRIVATE),
        ("Private Jet", AircraftClass.PRIVATE),
        ("PASSENGER-COMMERCIAL", AircraftClass.COMMERCIAL),
        (AircraftClass.CARGO, AircraftClass.CARGO),
    ])
    def test_parse_accepts_names_and_aliases(self, value, expected):
        assert AircraftClass.parse(value) is expected

    @pytest.mark.parametrize("value", ["HELICOPTER", "", None, 3])
    def test_parse_rejects_unknown_values(self, value):
        with pytest.raises(ValueError):
            AircraftClass.parse(value)


class TestConstruction:

    def test_factory_builds_matching_subclass(self, make_aircraft):
        assert isinstance(make_aircraft("COMMERCIAL"), CommercialAircraft)
        assert isinstance(make_aircraft("CARGO"), CargoAircraft)
        assert isinstance(make_aircraft("PRIVATE_JET"), PrivateJet)

    def test_cargo_flag_and_units(self, make_aircraft):
        freighter = make_aircraft("CARGO", capacity=50)
        assert freighter.is_cargo
        assert freighter.capacity_unit == "tons cargo"
        assert not make_aircraft("PRIVATE").is_cargo

    def test_factory_rejects_unknown_class(self, make_aircraft):
        with pytest.raises(ValueError):
            make_aircraft("GLIDER")

    @pytest.mark.parametrize("field", ["capacity", "fuel_efficiency", "fuel_capacity", "flight_duration"])
    def test_non_positive_parameters_rejected(self, make_aircraft, field):
        with pytest.raises(ValueError):
            make_aircraft(**{field: 0})

    def test_starts_full_and_scheduled(self, make_aircraft):
        plane = make_aircraft(fuel_capacity=12000)
        assert plane.fuel_level == 12000
        assert plane.status is AircraftStatus.SCHEDULED
        assert plane.held_gate is None
        assert plane.assigned_gate is None

    def test_estimated_arrival_follows_departure(self, make_aircraft, t0):
        plane = make_aircraft(departure_time=t0, flight_duration=95)
        assert plane.estimated_arrival_time == t0 + dt.timedelta(minutes=95)
        plane.departure_time += dt.timedelta(minutes=30)
        assert plane.estimated_arrival_time == t0 + dt.timedelta(minutes=125)

    def test_flight_duration_draws_in_range(self, rng):
        draws = [draw_flight_duration(rng) for _ in range(200)]
        assert min(draws) >= 60
        assert max(draws) <= 240


class TestFuel:

    def test_arrival_burn_is_distance_over_efficiency(self, make_aircraft, rng):
        plane = make_aircraft(fuel_capacity=10000, fuel_efficiency=5.0)
        burned = plane.consume_arrival_fuel(rng)
        assert burned in [d / 5.0 for d in ESTIMATED_DISTANCES]
        assert plane.fuel_level == pytest.approx(10000 - burned)

    def test_fuel_never_drops_below_zero(self, make_aircraft, rng):
        plane = make_aircraft(fuel_capacity=10.0, fuel_efficiency=1.0)
        plane.consume_arrival_fuel(rng)
        assert plane.fuel_level == 0.0

    def test_departure_requirement_range(self, make_aircraft, rng):
        plane = make_aircraft(fuel_efficiency=4.0)
        required = [plane.fuel_required_for_departure(rng) for _ in range(100)]
        assert min(required) >= 2.0 * 4.0
        assert max(required) <= 5.0 * 4.0

    def test_refuel_threshold(self, make_aircraft):
        plane = make_aircraft(fuel_capacity=1000)
        plane.fuel_level = 200
        assert not plane.needs_refueling()
        plane.fuel_level = 199
        assert plane.needs_refueling()

    def test_refuel_only_when_requested(self, make_aircraft):
        plane = make_aircraft(fuel_capacity=1000)
        plane.fuel_level = 100
        assert plane.refuel() is False
        assert plane.fuel_level == 100

        plane.requires_refuel = True
        assert plane.refuel() is True
        assert plane.fuel_level == 1000
        assert plane.requires_refuel is False
        assert plane.status is AircraftStatus.REFUELING

    def test_pending_refuel_is_never_sufficient(self, make_aircraft):
        plane = make_aircraft(fuel_capacity=1000)
        assert plane.has_sufficient_fuel(10)
        plane.requires_refuel = True
        assert not plane.has_sufficient_fuel(10)


class TestTurnaround:

    def test_depart_requires_gate(self, make_aircraft):
        plane = make_aircraft()
        with pytest.raises(RuntimeError):
            plane.depart(10)

    def test_depart_requires_fuel(self, make_aircraft):
        plane = make_aircraft(fuel_capacity=1000)
        plane.assign_gate("Beta", 1)
        plane.fuel_level = 5
        with pytest.raises(RuntimeError):
            plane.depart(10)
        assert plane.held_gate == ("Beta", 1)

    def test_depart_hands_back_gate_and_burns_fuel(self, make_aircraft):
        plane = make_aircraft(fuel_capacity=1000)
        plane.assign_gate("Beta", 3)
        assert plane.status is AircraftStatus.ARRIVED
        assert plane.assigned_gate == 3

        released = plane.depart(100)
        assert released == ("Beta", 3)
        assert plane.held_gate is None
        assert plane.fuel_level == 900
        assert plane.status is AircraftStatus.DEPARTED

    def test_maintenance_counts(self, make_aircraft):
        plane = make_aircraft()
        plane.perform_maintenance()
        plane.perform_maintenance()
        assert plane.maintenance_count == 2
        assert plane.status is AircraftStatus.MAINTENANCE

    def test_load_cargo_records_manifest(self, make_aircraft):
        freighter = make_aircraft("CARGO")
        freighter.load_cargo("Electronics", 30)
        assert freighter.cargo_manifest == {"type": "Electronics", "tons": 30}


class TestDelays:

    def test_arrival_delay_keeps_scheduled_status(self, make_aircraft, t0):
        plane = make_aircraft(departure_time=t0)
        minutes = plane.delay_arrival(np.random.default_rng(1))
        low, high = ARRIVAL_DELAY_RANGE
        assert low <= minutes <= high
        assert plane.departure_time == t0 + dt.timedelta(minutes=minutes)
        assert plane.status is AircraftStatus.SCHEDULED
        assert plane.delay_history[-1]["phase"] == "arrival"
        assert plane.delay_history[-1]["reason"] is DelayReason.CONGESTION

    def test_departure_delay_records_reason(self, make_aircraft, t0):
        plane = make_aircraft(departure_time=t0)
        plane.assign_gate("Beta", 1)
        minutes = plane.delay_departure(np.random.default_rng(1), DelayReason.REFUELING)
        low, high = DEPARTURE_DELAY_RANGE
        assert low <= minutes <= high
        assert plane.status is AircraftStatus.DELAYED
        entry = plane.delay_history[-1]
        assert entry["reason"] is DelayReason.REFUELING
        assert entry["new_departure"] == plane.departure_time
