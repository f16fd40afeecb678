# 매치(참여 요청) 생성/상태 변경/조회 API
import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.deps import enforce_rate_limit, get_current_user_id, get_query_service
from app.schemas.match import MatchCreate, MatchListResponse, MatchResponse, MatchStatusUpdate
from app.services.errors import ProximityError
from app.services.query_service import QueryService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/matches", tags=["Matches"], dependencies=[Depends(enforce_rate_limit)])


@router.post("", response_model=MatchResponse, status_code=status.HTTP_201_CREATED)
def create_match(
    body: MatchCreate,
    user_id: str = Depends(get_current_user_id),
    service: QueryService = Depends(get_query_service),
) -> MatchResponse:
    """모먼트 참여 요청. 자기 모먼트 409, 중복 요청 409, 모먼트 없음/만료 404."""
    try:
        match = service.create_match(user_id, body.moment_id, body.message)
        return MatchResponse.model_validate(match)
    except ProximityError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception:
        logger.exception("create match failed", extra={"moment_id": body.moment_id, "user_id": user_id})
        raise HTTPException(status_code=500, detail="Failed to create match")


@router.put("/{match_id}", response_model=MatchResponse)
def update_match_status(
    match_id: int,
    body: MatchStatusUpdate,
    user_id: str = Depends(get_current_user_id),
    service: QueryService = Depends(get_query_service),
) -> MatchResponse:
    """모먼트 작성자가 accepted/rejected 로 한 번만 변경. 이미 처리된 매치는 409."""
    try:
        match = service.update_match_status(match_id, user_id, body.status)
        return MatchResponse.model_validate(match)
    except ProximityError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception:
        logger.exception("update match failed", extra={"match_id": match_id, "user_id": user_id})
        raise HTTPException(status_code=500, detail="Failed to update match")


@router.get("", response_model=MatchListResponse)
def list_my_matches(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    user_id: str = Depends(get_current_user_id),
    service: QueryService = Depends(get_query_service),
) -> MatchListResponse:
    """내가 요청했거나 내 모먼트에 들어온 매치. 최신순."""
    try:
        result = service.list_my_matches(user_id, page, page_size)
    except ProximityError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception:
        logger.exception("list matches failed", extra={"user_id": user_id})
        raise HTTPException(status_code=500, detail="Failed to list matches")
    return MatchListResponse(
        matches=[MatchResponse.model_validate(m) for m in result.items],
        total=result.total,
        page=result.page,
        pages=result.pages,
    )


@router.get("/{match_id}", response_model=MatchResponse)
def get_match(
    match_id: int,
    user_id: str = Depends(get_current_user_id),
    service: QueryService = Depends(get_query_service),
) -> MatchResponse:
    """참여자(요청자/작성자)만 조회 가능. 그 외 403."""
    try:
        return MatchResponse.model_validate(service.get_match(match_id, user_id))
    except ProximityError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception:
        logger.exception("get match failed", extra={"match_id": match_id, "user_id": user_id})
        raise HTTPException(status_code=500, detail="Failed to load match")
