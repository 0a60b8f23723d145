"""Shared TLE text and fakes for the test suite."""

from datetime import datetime, timedelta, timezone

from satnow.errors import PropagationError
from satnow.propagation import GroundPoint, LookAngle, Propagator
from satnow.tle import OrbitalRecord

ISS_NAME = "ISS (ZARYA)"
ISS_LINE1 = "1 25544U 98067A   23259.57580000  .00012022  00000-0  21844-3 0  9995"
ISS_LINE2 = "2 25544  51.6416 220.9944 0004263 122.0101 312.2755 15.49541986415598"

VANGUARD_NAME = "VANGUARD 1"
VANGUARD_LINE1 = "1 00005U 58002B   00179.78495062  .00000023  00000-0  28098-4 0  4753"
VANGUARD_LINE2 = "2 00005  34.2682 348.7242 1859667 331.7664  19.3264 10.82419157413667"

ISS_TEXT = f"{ISS_NAME}\n{ISS_LINE1}\n{ISS_LINE2}\n"
VANGUARD_TEXT = f"{VANGUARD_NAME}\n{VANGUARD_LINE1}\n{VANGUARD_LINE2}\n"


def make_record(catalog_id, name=""):
    """ISS elements under another catalog number."""
    cat = f"{catalog_id:05d}"
    return OrbitalRecord.from_lines(name, ISS_LINE1[:2] + cat + ISS_LINE1[7:], ISS_LINE2[:2] + cat + ISS_LINE2[7:])


class FakeClock:
    def __init__(self, start=datetime(2024, 1, 1, tzinfo=timezone.utc), step=timedelta(seconds=1)):
        self.now = start
        self.step = step
        self.calls = 0

    def __call__(self):
        now = self.now
        self.now += self.step
        self.calls += 1
        return now


class FakePropagator(Propagator):
    """Ranges come from a dict keyed by catalog number; edit it between recomputes."""

    def __init__(self, ranges=None, failing=()):
        self.ranges = dict(ranges or {})
        self.failing = set(failing)
        self.calls = []

    def look_angle(self, record, observer, when):
        self.calls.append((record.catalog_id, when))
        if record.catalog_id in self.failing:
            raise PropagationError(f"{record.display_name}: Satellite has decayed")
        return LookAngle(90.0, 10.0, self.ranges.get(record.catalog_id, 1000.0))

    def ground_point(self, record, when):
        if record.catalog_id in self.failing:
            raise PropagationError(f"{record.display_name}: Satellite has decayed")
        return GroundPoint(10.0, 20.0, 420.0, 7.66)
