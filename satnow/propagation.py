"""
Skyfield-based propagation service.

Purpose
-------
Given an OrbitalRecord and a time, produce the look angle (azimuth,
elevation, range) from a fixed ground observer, and the sub-satellite
ground point for the detail view.

Role in System
--------------
- Used by the tracked-satellite model for every add/recompute.
- Failures (bad elements, decayed orbits, NaN positions) are raised as
  PropagationError; the model turns them into unavailable look angles.
"""

import math
from dataclasses import dataclass

import numpy as np
from geopy.distance import geodesic
from skyfield.api import EarthSatellite, load, wgs84

from satnow.errors import ConfigurationError, PropagationError


@dataclass(frozen=True)
class ObserverPosition:
    latitude: float
    longitude: float
    altitude: float = 0.0  # meters

    def validate(self):
        if not (-90.0 <= self.latitude <= 90.0) or not (-180.0 <= self.longitude <= 180.0):
            raise ConfigurationError(
                f"Invalid coordinates (latitude: {self.latitude}, longitude: {self.longitude})"
            )
        if not math.isfinite(self.altitude):
            raise ConfigurationError(f"Invalid altitude: {self.altitude}")
        return self


@dataclass(frozen=True)
class LookAngle:
    azimuth: float
    elevation: float
    range_km: float
    reason: str = ""

    @classmethod
    def unavailable(cls, reason):
        return cls(math.nan, math.nan, math.inf, reason)

    @property
    def available(self):
        return math.isfinite(self.range_km)

    def __str__(self):
        if not self.available:
            return f"unavailable ({self.reason})" if self.reason else "unavailable"
        return f"Az: {self.azimuth:.3f}, El: {self.elevation:.3f}, Rng: {self.range_km:.3f}"


@dataclass(frozen=True)
class GroundPoint:
    latitude: float
    longitude: float
    altitude_km: float
    speed_km_s: float


def ground_distance_km(observer: ObserverPosition, point: GroundPoint) -> float:
    """great-circle distance from the observer to the sub-satellite point"""
    return geodesic((observer.latitude, observer.longitude), (point.latitude, point.longitude)).km


class Propagator:
    def look_angle(self, record, observer, when) -> LookAngle:
        raise NotImplementedError

    def ground_point(self, record, when) -> GroundPoint:
        raise PropagationError("ground point not supported")


class SkyfieldPropagator(Propagator):
    def __init__(self, ts=None):
        self.ts = ts or load.timescale()
        # one EarthSatellite per record, records are immutable
        self._sats = {}

    def _satellite(self, record):
        sat = self._sats.get(record)
        if sat is None:
            try:
                sat = EarthSatellite(record.line1, record.line2, record.name or None, self.ts)
            except Exception as e:
                raise PropagationError(f"{record.display_name}: cannot load elements: {e}") from e
            self._sats[record] = sat
        return sat

    def look_angle(self, record, observer, when):
        sat = self._satellite(record)
        t = self.ts.from_datetime(when)
        gs = wgs84.latlon(observer.latitude, observer.longitude, elevation_m=observer.altitude)
        topocentric = (sat - gs).at(t)
        alt, az, distance = topocentric.altaz()

        values = np.array([az.degrees, alt.degrees, distance.km], dtype=float)
        if not np.all(np.isfinite(values)):
            message = getattr(topocentric, "message", None) or "no position"
            raise PropagationError(f"{record.display_name}: {message}")
        return LookAngle(float(values[0]) % 360.0, float(values[1]), float(values[2]))

    def ground_point(self, record, when):
        sat = self._satellite(record)
        geocentric = sat.at(self.ts.from_datetime(when))
        pos = wgs84.geographic_position_of(geocentric)
        speed = float(np.linalg.norm(geocentric.velocity.km_per_s))
        point = GroundPoint(pos.latitude.degrees, pos.longitude.degrees, pos.elevation.km, speed)
        if not all(math.isfinite(v) for v in (point.latitude, point.longitude, point.altitude_km, speed)):
            message = getattr(geocentric, "message", None) or "no position"
            raise PropagationError(f"{record.display_name}: {message}")
        return point
