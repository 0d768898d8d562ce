import pytest

from aircraft import AircraftClass
from ground_operations import PEAK_HOUR_PENALTY, Airport, AirportDirectory


class FixedDraw:
    """Stands in for a Generator whose next random() is known."""

    def __init__(self, value):
        self.value = value

    def random(self):
        return self.value


def _conserved(airport):
    return (airport.available_gates + len(airport.held_gates()) == airport.total_gates
            and airport.available_runways + len(airport.held_runways()) == airport.total_runways)


def _checked_in(make_passenger, flight, name="Nadia", security_wait=5):
    p = make_passenger(name, flight, security_wait=security_wait)
    p.arrive_at_airport()
    p.check_in()
    return p


class TestConstruction:

    def test_class_aliases(self, make_airport):
        assert make_airport(airport_class="PRIVATE_JET").airport_class is AircraftClass.PRIVATE

    def test_unknown_class_rejected(self, make_airport):
        with pytest.raises(ValueError):
            make_airport(airport_class="SPACEPORT")

    @pytest.mark.parametrize("kwargs", [{"gates": 0}, {"runways": -1}, {"checkpoints": 0}, {"gates": 1.5}])
    def test_capacities_must_be_positive_integers(self, make_airport, kwargs):
        with pytest.raises(ValueError):
            make_airport(**kwargs)

    def test_snapshot(self, make_airport):
        snap = make_airport("Beta", gates=3, runways=2).snapshot()
        assert snap["name"] == "Beta"
        assert snap["total_gates"] == snap["available_gates"] == 3
        assert snap["total_runways"] == snap["available_runways"] == 2
        assert snap["security_overloaded"] is False


class TestGates:

    def test_lowest_free_gate_first(self, make_airport, make_aircraft):
        airport = make_airport(gates=3)
        planes = [make_aircraft() for _ in range(3)]
        assert [airport.allocate_gate(p) for p in planes] == [1, 2, 3]

        assert airport.release_gate(2)
        assert airport.allocate_gate(make_aircraft()) == 2
        assert _conserved(airport)

    def test_exhausted_pool_returns_none(self, make_airport, make_aircraft, feed):
        airport = make_airport(gates=1)
        assert airport.allocate_gate(make_aircraft()) == 1
        assert airport.allocate_gate(make_aircraft()) is None
        assert not airport.any_gate_available()
        assert feed.matching("no available gates")
        assert _conserved(airport)

    def test_releasing_free_gate_is_ignored(self, make_airport):
        airport = make_airport(gates=2)
        assert airport.release_gate(1) is False
        assert airport.release_gate(99) is False
        assert airport.available_gates == 2

    def test_held_gates_is_a_copy(self, make_airport, make_aircraft):
        airport = make_airport()
        plane = make_aircraft()
        airport.allocate_gate(plane)
        held = airport.held_gates()
        held.clear()
        assert airport.held_gates() == {1: plane}


class TestRunways:

    def test_request_marks_aircraft(self, make_airport, make_aircraft, feed):
        airport = make_airport(runways=2)
        plane = make_aircraft()
        assert airport.request_runway(plane) == 1
        assert plane.held_runway == 1
        assert airport.held_runways() == {1: plane}
        assert feed.matching("ATC | Runway BUSY")

    def test_contention(self, make_airport, make_aircraft):
        airport = make_airport(runways=1)
        first, second = make_aircraft(), make_aircraft()
        assert airport.request_runway(first) == 1
        assert airport.request_runway(second) is None
        assert not airport.is_runway_available()
        assert second.held_runway is None

    def test_release_by_identity(self, make_airport, make_aircraft, feed):
        airport = make_airport(runways=2)
        first, second = make_aircraft(), make_aircraft()
        airport.request_runway(first)
        airport.request_runway(second)

        assert airport.release_runway(second) == 2
        assert second.held_runway is None
        assert airport.held_runways() == {1: first}
        assert airport.release_runway(second) is None
        assert feed.matching("ATC | Runway FREE")
        assert _conserved(airport)


class TestSecurity:

    def test_requires_check_in(self, make_airport, make_aircraft, make_passenger):
        airport = make_airport()
        p = make_passenger("Nadia", make_aircraft())
        assert airport.process_passenger_security(p) is False
        assert airport.security_backlog == 0

    def test_wait_burns_down_thirty_minutes_per_call(self, make_airport, make_aircraft, make_passenger):
        airport = make_airport()
        p = _checked_in(make_passenger, make_aircraft(), security_wait=40)

        assert airport.process_passenger_security(p) is False
        assert p.security_wait == 10
        assert airport.security_backlog == 1

        assert airport.process_passenger_security(p) is True
        assert p.has_cleared_security
        assert p.security_wait == 0
        assert airport.security_backlog == 0

    def test_peak_hour_penalty_applied_once(self, make_airport, make_aircraft, make_passenger):
        airport = make_airport()
        airport.is_peak_hour = True
        p = _checked_in(make_passenger, make_aircraft(), security_wait=20)

        assert airport.process_passenger_security(p) is False
        assert p.security_wait == 20 - 30 + PEAK_HOUR_PENALTY
        assert p.received_peak_hour_penalty

        assert airport.process_passenger_security(p) is False
        assert p.security_wait == 20
        assert airport.process_passenger_security(p) is True

    def test_overload_from_backlog(self, make_airport, make_aircraft, make_passenger):
        airport = make_airport(checkpoints=2)
        flight = make_aircraft()
        a = _checked_in(make_passenger, flight, "A", security_wait=90)
        b = _checked_in(make_passenger, flight, "B", security_wait=90)

        airport.process_passenger_security(a)
        assert not airport.is_security_overloaded
        airport.process_passenger_security(b)
        assert airport.is_security_overloaded

        assert airport.remove_from_security(a)
        assert not airport.remove_from_security(a)
        assert not airport.is_security_overloaded

    def test_peak_hour_toggle(self, make_airport):
        airport = make_airport()
        assert airport.handle_peak_hours(FixedDraw(0.1)) is True
        assert airport.is_security_overloaded
        assert airport.handle_peak_hours(FixedDraw(0.9)) is False
        assert not airport.is_peak_hour


class TestDirectory:

    def test_lookup_is_case_insensitive(self, make_airport):
        beta = make_airport("Beta")
        directory = AirportDirectory([make_airport("Alpha"), beta])
        assert directory.get_airport_by_name("BETA") is beta
        assert directory.get_airport_by_name("Gamma") is None
        assert len(directory) == 2

    def test_first_registered_wins(self, make_airport):
        first = make_airport("Miami International")
        second = make_airport("Miami International", airport_class="PRIVATE")
        directory = AirportDirectory([first, second])
        assert directory.get_airport_by_name("miami international") is first
