# 사용자 위치 갱신/주변 사용자 클러스터 API
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query

from app.deps import enforce_rate_limit, get_current_user_id, get_query_service
from app.schemas.user import CentroidOut, ClusterOut, LocationAck, LocationUpdate
from app.services.errors import ProximityError
from app.services.geo import Point
from app.services.grid_clusterer import Cluster
from app.services.query_service import QueryService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"], dependencies=[Depends(enforce_rate_limit)])


def _cluster_to_response(cluster: Cluster) -> ClusterOut:
    return ClusterOut(
        grid_cell_id=cluster.grid_cell_id,
        count=cluster.count,
        centroid=CentroidOut(lat=cluster.centroid.lat, lng=cluster.centroid.lng),
        distance_m=cluster.mean_distance,
    )


@router.put("/location", response_model=LocationAck)
def put_location(
    body: LocationUpdate,
    user_id: str = Depends(get_current_user_id),
    service: QueryService = Depends(get_query_service),
) -> LocationAck:
    """내 위치 덮어쓰기 (이력 없음)."""
    try:
        row = service.update_user_location(user_id, Point(body.lng, body.lat))
        return LocationAck.model_validate(row)
    except ProximityError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception:
        logger.exception("update location failed", extra={"user_id": user_id})
        raise HTTPException(status_code=500, detail="Failed to update location")


@router.get("/clusters", response_model=List[ClusterOut])
def get_user_clusters(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    max_distance_m: float = Query(5000.0, gt=0),
    grid_size_m: float = Query(500.0, gt=0),
    user_id: str = Depends(get_current_user_id),
    service: QueryService = Depends(get_query_service),
) -> List[ClusterOut]:
    """반경 내 다른 사용자들을 격자 셀 단위로 집계. 가까운 셀 순."""
    try:
        clusters = service.nearby_user_clusters(Point(lng, lat), user_id, max_distance_m, grid_size_m)
    except ProximityError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception:
        logger.exception("user clusters failed", extra={"user_id": user_id})
        raise HTTPException(status_code=500, detail="Failed to load clusters")
    return [_cluster_to_response(c) for c in clusters]
