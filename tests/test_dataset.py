import threading

from poi_browser.dataset import SeedResolution, build_dataset
from poi_browser.geocode import GeocodingError
from poi_browser.models import Coordinate


LOOKUP = {
    "addr-ok-a": Coordinate(43.30, 5.37),
    "addr-ok-c": Coordinate(43.29, 5.38),
}


class RecordingResolver:
    def __init__(self, lookup, failing=()):
        self.lookup = lookup
        self.failing = set(failing)
        self.calls = []

    def __call__(self, address, session):
        self.calls.append(address)
        if address in self.failing:
            raise GeocodingError("connection reset")
        return self.lookup.get(address)


def test_build_dataset_drops_unresolved_and_keeps_seed_order():
    seed = [("A", "addr-ok-a"), ("B", "addr-bad"), ("C", "addr-ok-c")]
    resolver = RecordingResolver(LOOKUP)

    places = build_dataset(seed, session=None, resolver=resolver)

    assert [p.name for p in places] == ["A", "C"]
    assert places[0].position == Coordinate(43.30, 5.37)
    assert places[1].address == "addr-ok-c"
    assert resolver.calls == ["addr-ok-a", "addr-bad", "addr-ok-c"]


def test_transport_failure_is_treated_as_not_found(caplog):
    seed = [("A", "addr-ok-a"), ("B", "addr-flaky"), ("C", "addr-ok-c")]
    resolver = RecordingResolver(LOOKUP, failing={"addr-flaky"})

    with caplog.at_level("WARNING"):
        places = build_dataset(seed, session=None, resolver=resolver)

    assert [p.name for p in places] == ["A", "C"]
    assert "Dropping 'B'" in caplog.text


def test_seed_resolution_reports_outcomes_and_restarts():
    seed = [("A", "addr-ok-a"), ("B", "addr-bad"), ("D", "addr-flaky")]
    resolver = RecordingResolver(LOOKUP, failing={"addr-flaky"})
    resolution = SeedResolution(seed, session=None, resolver=resolver)

    first = list(resolution)
    second = list(resolution)

    assert [o.reason for o in first] == [None, "geocode_not_found", "geocode_error"]
    assert first == second
    assert len(resolver.calls) == 6


def test_seed_resolution_is_lazy():
    seed = [("A", "addr-ok-a"), ("C", "addr-ok-c")]
    resolver = RecordingResolver(LOOKUP)
    outcomes = iter(SeedResolution(seed, session=None, resolver=resolver))

    assert resolver.calls == []
    assert next(outcomes).name == "A"
    assert resolver.calls == ["addr-ok-a"]


def test_abort_stops_before_next_request():
    abort = threading.Event()
    seed = [("A", "addr-ok-a"), ("C", "addr-ok-c")]

    def resolver(address, session):
        abort.set()
        return LOOKUP[address]

    places = build_dataset(seed, session=None, abort=abort, resolver=resolver)

    assert [p.name for p in places] == ["A"]


class EmptyResponse:
    def raise_for_status(self):
        pass

    def json(self):
        return {"features": []}


class EmptySession:
    def get(self, url, params=None, headers=None, timeout=None):
        return EmptyResponse()


def test_not_found_address_warns_once(caplog):
    with caplog.at_level("WARNING"):
        places = build_dataset([("B", "addr-bad")], session=EmptySession())

    assert places == []
    warnings = [r.getMessage() for r in caplog.records if r.levelname == "WARNING"]
    assert warnings == ["Dropping 'B': address not found (addr-bad)"]
