# 모먼트 생성/주변 조회/삭제 API
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.deps import enforce_rate_limit, get_current_user_id, get_query_service
from app.models.moment import Moment
from app.schemas.moment import MessageResponse, MomentCreate, MomentResponse, NearbyMomentsResponse
from app.services.errors import ProximityError
from app.services.geo import Point
from app.services.query_service import QueryService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/moments", tags=["Moments"], dependencies=[Depends(enforce_rate_limit)])


def _moment_to_response(moment: Moment, distance_m: float | None = None) -> MomentResponse:
    """ORM Moment → MomentResponse. distance_m 는 nearby 전용."""
    return MomentResponse(
        id=moment.id,
        owner_id=moment.owner_id,
        caption=moment.caption,
        media_ref=moment.media_ref,
        lat=moment.lat,
        lng=moment.lng,
        created_at=moment.created_at,
        expires_at=moment.expires_at,
        distance_m=round(distance_m, 2) if distance_m is not None else None,
    )


@router.post("", response_model=MomentResponse, status_code=status.HTTP_201_CREATED)
def create_moment(
    body: MomentCreate,
    user_id: str = Depends(get_current_user_id),
    service: QueryService = Depends(get_query_service),
) -> MomentResponse:
    """모먼트 생성. 기본 24시간 후 만료."""
    try:
        moment = service.create_moment(user_id, body.caption, body.media_ref, Point(body.lng, body.lat))
        return _moment_to_response(moment)
    except ProximityError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception:
        logger.exception("create moment failed", extra={"user_id": user_id})
        raise HTTPException(status_code=500, detail="Failed to create moment")


@router.get("/nearby", response_model=NearbyMomentsResponse)
def get_moments_nearby(
    lat: float = Query(..., ge=-90, le=90),
    lng: float = Query(..., ge=-180, le=180),
    max_distance_m: float = Query(5000.0, gt=0),
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    user_id: str = Depends(get_current_user_id),
    service: QueryService = Depends(get_query_service),
) -> NearbyMomentsResponse:
    """사용자 좌표 기준 반경 내 살아 있는 모먼트. 가까운 순 정렬, distance_m 포함."""
    try:
        result = service.nearby_moments(Point(lng, lat), max_distance_m, page, page_size)
    except ProximityError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception:
        logger.exception("nearby moments failed", extra={"user_id": user_id})
        raise HTTPException(status_code=500, detail="Failed to search moments")
    return NearbyMomentsResponse(
        moments=[_moment_to_response(row.moment, row.distance_m) for row in result.items],
        total=result.total,
        page=result.page,
        pages=result.pages,
    )


@router.get("/{moment_id}", response_model=MomentResponse)
def get_moment(
    moment_id: int,
    user_id: str = Depends(get_current_user_id),
    service: QueryService = Depends(get_query_service),
) -> MomentResponse:
    """id로 모먼트 조회. 없거나 만료면 404."""
    try:
        return _moment_to_response(service.get_moment(moment_id))
    except ProximityError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception:
        logger.exception("get moment failed", extra={"moment_id": moment_id, "user_id": user_id})
        raise HTTPException(status_code=500, detail="Failed to load moment")


@router.delete("/{moment_id}", response_model=MessageResponse)
def delete_moment(
    moment_id: int,
    user_id: str = Depends(get_current_user_id),
    service: QueryService = Depends(get_query_service),
) -> MessageResponse:
    """작성자만 삭제 가능. 없거나 만료 404, 작성자 아님 403."""
    try:
        service.delete_moment(moment_id, user_id)
        return MessageResponse(message="deleted")
    except ProximityError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception:
        logger.exception("delete moment failed", extra={"moment_id": moment_id, "user_id": user_id})
        raise HTTPException(status_code=500, detail="Failed to delete moment")
