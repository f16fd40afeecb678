# 그리드 클러스터링: 주변 사용자를 고정 크기 격자로 묶어 지도 표시용 집계 생성
#
# 격자 간격은 gridSizeMeters / 111320 (적도 기준 1도당 미터)를 경도/위도 모두에 적용한다.
# 고위도에서 경도 방향 셀이 좁아지는 근사이며, 셀 개수 기대값이 이 근사를 전제로 한다.

import math
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, Hashable, Iterable, List, Optional, Tuple

from shapely.geometry import MultiPoint

from app.services.errors import InvalidArgument
from app.services.geo import METERS_PER_DEGREE, Point

DEFAULT_GRID_SIZE_M = 500.0

# (user_id, 위치, origin 까지 거리 m)
Member = Tuple[Hashable, Point, float]


@dataclass(frozen=True)
class Cluster:
    grid_x: int
    grid_y: int
    count: int
    centroid: Point
    mean_distance: float

    @property
    def grid_cell_id(self) -> str:
        return f"{self.grid_x}:{self.grid_y}"


def grid_step_deg(grid_size_m: float) -> float:
    if not isinstance(grid_size_m, (int, float)) or not math.isfinite(grid_size_m) or grid_size_m <= 0:
        raise InvalidArgument("grid_size_m must be > 0")
    return grid_size_m / METERS_PER_DEGREE


def cell_of(origin: Point, point: Point, step_deg: float) -> Tuple[int, int]:
    """origin 기준 정수 격자 좌표 (gridX, gridY)."""
    grid_x = math.floor((point.lng - origin.lng) / step_deg)
    grid_y = math.floor((point.lat - origin.lat) / step_deg)
    return (grid_x, grid_y)


class GridClusterer:
    """반경 필터가 끝난 (사용자, 거리) 목록을 격자 셀별 Cluster 로 집계."""

    def __init__(self, default_grid_size_m: float = DEFAULT_GRID_SIZE_M):
        grid_step_deg(default_grid_size_m)
        self.default_grid_size_m = default_grid_size_m

    def cluster(
        self,
        origin: Point,
        members: Iterable[Member],
        grid_size_m: Optional[float] = None,
        exclude_user_id: Optional[Hashable] = None,
    ) -> List[Cluster]:
        """
        1명짜리 셀도 클러스터로 반환. 입력이 비면 빈 목록.
        정렬: mean_distance 오름차순, 같으면 (grid_x, grid_y).
        """
        step = grid_step_deg(self.default_grid_size_m if grid_size_m is None else grid_size_m)

        cells: Dict[Tuple[int, int], List[Tuple[Point, float]]] = defaultdict(list)
        for user_id, point, distance in members:
            if exclude_user_id is not None and user_id == exclude_user_id:
                continue
            cells[cell_of(origin, point, step)].append((point, distance))

        clusters = []
        for (grid_x, grid_y), cell in cells.items():
            centroid = MultiPoint([p.coords for p, _ in cell]).centroid
            mean_distance = round(sum(d for _, d in cell) / len(cell), 2)
            clusters.append(
                Cluster(
                    grid_x=grid_x,
                    grid_y=grid_y,
                    count=len(cell),
                    centroid=Point(_clamp(centroid.x, 180.0), _clamp(centroid.y, 90.0)),
                    mean_distance=mean_distance,
                )
            )
        clusters.sort(key=lambda c: (c.mean_distance, c.grid_x, c.grid_y))
        return clusters


def _clamp(value: float, bound: float) -> float:
    # 평균 계산 오차로 경계(±180, ±90)를 미세하게 넘는 경우 보정
    return max(-bound, min(bound, value))
