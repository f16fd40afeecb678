# 좌표 값 타입과 구면(great-circle) 거리 계산

import math
from dataclasses import dataclass

from app.services.errors import InvalidArgument

EARTH_RADIUS_M = 6371000.0  # 지구 평균 반경 m
METERS_PER_DEGREE = 111320.0  # 적도 기준 1도당 미터 (그리드 클러스터링용 근사)


@dataclass(frozen=True)
class Point:
    """WGS84 좌표. 순서는 (lng, lat), GeoJSON/PostGIS 와 동일."""

    lng: float
    lat: float

    def __post_init__(self) -> None:
        validate_coordinates(self.lng, self.lat)

    @property
    def coords(self) -> tuple[float, float]:
        return (self.lng, self.lat)


def validate_coordinates(lng: float, lat: float) -> None:
    """경도 [-180, 180], 위도 [-90, 90] 이 아니면 InvalidArgument."""
    for name, value in (("lng", lng), ("lat", lat)):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise InvalidArgument(f"{name} must be a number")
        if not math.isfinite(value):
            raise InvalidArgument(f"{name} must be finite")
    if not -180.0 <= lng <= 180.0:
        raise InvalidArgument(f"lng out of range: {lng}")
    if not -90.0 <= lat <= 90.0:
        raise InvalidArgument(f"lat out of range: {lat}")


def haversine_m(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """두 위경도 사이 구면 거리(미터)."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlam = math.radians(lng2 - lng1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlam / 2) ** 2
    # 부동소수 오차로 a 가 1 을 살짝 넘는 경우 방지
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_M * c


def distance_m(a: Point, b: Point) -> float:
    return haversine_m(a.lat, a.lng, b.lat, b.lng)
