# 조회/쓰기 오케스트레이션: GeoIndex + MomentStore + GridClusterer + MatchEngine
#
# API 계층이 호출하는 유일한 경계. 서비스 객체는 build_query_service 로 명시적으로 조립하고
# 앱 기동 시 한 번 만들어 라우터에 주입한다 (테스트는 매번 새 인스턴스).
# 위치는 모먼트/사용자 위치 행에만 저장되고 반경 검색은 DB 에서 수행 → 워커 간 상태 공유 없음.

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List, Optional, Union

from sqlalchemy.orm import sessionmaker

from app.models.match import Match, MatchStatus
from app.models.moment import Moment
from app.models.user_location import UserLocation
from app.services.errors import InvalidArgument
from app.services.geo import Point
from app.services.geo_index import GeoIndex
from app.services.grid_clusterer import DEFAULT_GRID_SIZE_M, Cluster, GridClusterer, grid_step_deg
from app.services.match_engine import MatchEngine
from app.services.moment_store import MomentStore
from app.services.pagination import Page, offset_of, validate_page
from app.services.timeutils import Clock, utcnow
from app.services.user_location_store import UserLocationStore

DEFAULT_MAX_DISTANCE_M = 5000.0


@dataclass(frozen=True)
class NearbyMoment:
    moment: Moment
    distance_m: float


class QueryService:
    def __init__(
        self,
        session_factory: sessionmaker,
        moment_store: MomentStore,
        match_engine: MatchEngine,
        user_locations: UserLocationStore,
        clusterer: GridClusterer,
        clock: Clock = utcnow,
    ):
        self._session_factory = session_factory
        self.moments = moment_store
        self.matches = match_engine
        self.user_locations = user_locations
        self.clusterer = clusterer
        self.moment_index = GeoIndex(Moment, tiebreak=Moment.id)
        self.user_index = GeoIndex(UserLocation, tiebreak=UserLocation.user_id)
        self._clock = clock

    # --- moments ---

    def create_moment(
        self,
        owner_id: str,
        caption: str,
        media_ref: str,
        location: Point,
        ttl: Optional[timedelta] = None,
    ) -> Moment:
        return self.moments.create(owner_id, caption, media_ref, location, ttl=ttl)

    def get_moment(self, moment_id: int) -> Moment:
        return self.moments.get(moment_id)

    def nearby_moments(
        self,
        origin: Point,
        max_distance_m: float = DEFAULT_MAX_DISTANCE_M,
        page: int = 1,
        page_size: int = 10,
    ) -> Page[NearbyMoment]:
        """
        반경 내 살아 있는 모먼트를 가까운 순으로 페이지 조회.

        - 만료 필터는 반경 쿼리와 같은 SQL 에서 페이지 분할 전에 적용 → total/pages 는 살아 있는 결과 기준
        - 호출 단위 스냅샷 일관성만 보장 (페이지 사이에 생성된 모먼트는 보일 수도, 안 보일 수도 있음)
        """
        validate_page(page, page_size)
        now = self._clock()
        with self._session_factory() as db:
            result = self.moment_index.query_radius(
                db,
                origin,
                max_distance_m,
                limit=page_size,
                offset=offset_of(page, page_size),
                where=[Moment.expires_at > now],
            )
        rows = [NearbyMoment(hit.entity, hit.distance_m) for hit in result.hits]
        return Page(items=rows, total=result.total, page=page, page_size=page_size)

    def delete_moment(self, moment_id: int, requester_id: str) -> None:
        self.moments.delete(moment_id, requester_id)

    def purge_expired_moments(self, now: Optional[datetime] = None) -> int:
        """리퍼 진입점. 물리 삭제된 건수."""
        return len(self.moments.purge_expired(now=now))

    # --- matches ---

    def create_match(self, requester_id: str, moment_id: int, message: Optional[str] = None) -> Match:
        return self.matches.create_match(requester_id, moment_id, message)

    def update_match_status(
        self, match_id: int, acting_user_id: str, new_status: Union[str, MatchStatus]
    ) -> Match:
        return self.matches.update_status(match_id, acting_user_id, new_status)

    def list_my_matches(self, user_id: str, page: int = 1, page_size: int = 10) -> Page[Match]:
        return self.matches.list_for_user(user_id, page, page_size)

    def get_match(self, match_id: int, acting_user_id: str) -> Match:
        return self.matches.get_by_id(match_id, acting_user_id)

    # --- users ---

    def update_user_location(self, user_id: str, location: Point) -> UserLocation:
        return self.user_locations.upsert(user_id, location)

    def nearby_user_clusters(
        self,
        origin: Point,
        requester_id: str,
        max_distance_m: float = DEFAULT_MAX_DISTANCE_M,
        grid_size_m: float = DEFAULT_GRID_SIZE_M,
    ) -> List[Cluster]:
        """반경 내 다른 사용자들을 격자 클러스터로 반환 (페이지네이션 없음)."""
        if not isinstance(requester_id, str) or not requester_id.strip():
            raise InvalidArgument("requester_id is required")
        grid_step_deg(grid_size_m)
        with self._session_factory() as db:
            result = self.user_index.query_radius(
                db, origin, max_distance_m, where=[UserLocation.user_id != requester_id]
            )
        members = [(hit.entity.user_id, hit.entity.location, hit.distance_m) for hit in result.hits]
        return self.clusterer.cluster(origin, members, grid_size_m=grid_size_m, exclude_user_id=requester_id)


def build_query_service(session_factory: sessionmaker, clock: Clock = utcnow) -> QueryService:
    """저장소/엔진을 조립. 숨은 전역 상태 없이 호출할 때마다 새 인스턴스."""
    moment_store = MomentStore(session_factory, clock=clock)
    return QueryService(
        session_factory=session_factory,
        moment_store=moment_store,
        match_engine=MatchEngine(session_factory, moment_store, clock=clock),
        user_locations=UserLocationStore(session_factory, clock=clock),
        clusterer=GridClusterer(),
        clock=clock,
    )
