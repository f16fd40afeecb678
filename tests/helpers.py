import math
import threading
from datetime import datetime, timedelta, timezone

from app.services.geo import EARTH_RADIUS_M, Point

T0 = datetime(2026, 10, 17, 9, 0, tzinfo=timezone.utc)

# 강남역 근처
ORIGIN = Point(127.0276, 37.4979)

_M_PER_DEG_LAT = EARTH_RADIUS_M * math.pi / 180.0


class FakeClock:
    """Controllable UTC clock shared by every store in a test."""

    def __init__(self, start: datetime = T0) -> None:
        self._now = start
        self._lock = threading.Lock()

    def __call__(self) -> datetime:
        with self._lock:
            return self._now

    def advance(self, **kwargs) -> datetime:
        with self._lock:
            self._now += timedelta(**kwargs)
            return self._now


def offset_point(origin: Point, east_m: float = 0.0, north_m: float = 0.0) -> Point:
    """Point roughly east_m/north_m metres away from origin (small offsets only)."""
    dlat = north_m / _M_PER_DEG_LAT
    dlng = east_m / (_M_PER_DEG_LAT * math.cos(math.radians(origin.lat)))
    return Point(origin.lng + dlng, origin.lat + dlat)
