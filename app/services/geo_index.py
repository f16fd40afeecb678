# 반경 검색: DB 위 구면 거리 쿼리. 프로세스 로컬 상태 없음
#
# PostgreSQL: lng/lat 에서 생성되는 geography(POINT, 4326) 컬럼(location)과 GIST 인덱스 위에서
# ST_DWithin / ST_Distance (구 모델, use_spheroid=false).
# SQLite(로컬 개발/테스트): 연결 시 등록한 haversine_m SQL 함수 + 위도 범위 선필터.
# 쓰기는 모두 commit 후 반환되므로 어느 워커의 쿼리든 그 이전에 끝난 쓰기를 본다.

import math
from typing import Any, Iterable, List, NamedTuple, Optional, Tuple

from geoalchemy2 import Geography
from shapely.geometry import Point as ShapelyPoint
from sqlalchemy import and_, func, literal_column, select
from sqlalchemy.orm import Session
from sqlalchemy.sql.elements import ColumnElement

from app.services.errors import InvalidArgument
from app.services.geo import EARTH_RADIUS_M, Point

SRID = 4326
LOCATION_COLUMN = "location"

# 위도 1도 = R * pi / 180 m. 구면 거리는 항상 R * |Δφ| 이상이므로 위도 선필터는 손실이 없다.
_METERS_PER_LAT_DEGREE = EARTH_RADIUS_M * math.pi / 180.0


class GeoHit(NamedTuple):
    entity: Any
    distance_m: float


class RadiusResult(NamedTuple):
    hits: List[GeoHit]
    total: int  # limit/offset 적용 전 전체 건수


def validate_radius_query(max_distance_m: float, limit: Optional[int], offset: int) -> None:
    if isinstance(max_distance_m, bool) or not isinstance(max_distance_m, (int, float)):
        raise InvalidArgument("max_distance_m must be a number")
    if not math.isfinite(max_distance_m) or max_distance_m <= 0:
        raise InvalidArgument("max_distance_m must be > 0")
    if limit is not None and limit < 0:
        raise InvalidArgument("limit must be >= 0")
    if offset < 0:
        raise InvalidArgument("offset must be >= 0")


class GeoIndex:
    """
    (lng, lat) 컬럼을 가진 모델 위의 반경 검색.

    - 거리 오름차순, 같은 거리는 tiebreak 컬럼 오름차순 (모먼트는 id = 삽입 순서)
    - 경계(거리 == max_distance_m)는 포함
    - total 은 같은 SQL 문에서 window count 로 계산 → 페이지와 같은 스냅샷
    """

    def __init__(self, model, tiebreak: ColumnElement):
        self.model = model
        self.tiebreak = tiebreak

    def _location(self) -> ColumnElement:
        # PostgreSQL 전용 생성 컬럼이라 ORM 매핑에는 없음 (마이그레이션 001/003)
        return literal_column(
            f"{self.model.__tablename__}.{LOCATION_COLUMN}",
            type_=Geography(geometry_type="POINT", srid=SRID, spatial_index=False),
        )

    def radius_clause(self, dialect_name: str, origin: Point, max_distance_m: float) -> Tuple[ColumnElement, ColumnElement]:
        """(반경 조건, 거리 m 식)."""
        if dialect_name == "postgresql":
            location = self._location()
            origin_geog = func.ST_GeogFromText(f"SRID={SRID};{ShapelyPoint(origin.lng, origin.lat).wkt}")
            distance = func.ST_Distance(location, origin_geog, False)
            return func.ST_DWithin(location, origin_geog, max_distance_m, False), distance

        distance = func.haversine_m(origin.lat, origin.lng, self.model.lat, self.model.lng)
        lat_window = max_distance_m / _METERS_PER_LAT_DEGREE * (1 + 1e-9)
        condition = and_(
            self.model.lat.between(origin.lat - lat_window, origin.lat + lat_window),
            distance <= max_distance_m,
        )
        return condition, distance

    def query_radius(
        self,
        db: Session,
        origin: Point,
        max_distance_m: float,
        limit: Optional[int] = None,
        offset: int = 0,
        where: Iterable[ColumnElement] = (),
    ) -> RadiusResult:
        """origin 기준 max_distance_m 이내 행을 가까운 순으로. where 는 추가 필터 (예: 만료 제외)."""
        validate_radius_query(max_distance_m, limit, offset)
        filters = list(where)
        condition, distance = self.radius_clause(db.get_bind().dialect.name, origin, max_distance_m)

        stmt = (
            select(self.model, distance.label("distance_m"), func.count().over().label("total"))
            .where(condition, *filters)
            .order_by(distance, self.tiebreak)
            .offset(offset)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        rows = db.execute(stmt).all()

        if rows:
            total = int(rows[0].total)
        elif offset > 0 or limit == 0:
            # 행이 없으면 window count 도 없으므로 건수만 다시 센다
            total = int(
                db.execute(select(func.count()).select_from(self.model).where(condition, *filters)).scalar_one()
            )
        else:
            total = 0
        return RadiusResult(hits=[GeoHit(row[0], float(row.distance_m)) for row in rows], total=total)
