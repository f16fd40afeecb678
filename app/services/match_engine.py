# 매치 수명주기: 생성(유일성), 상태 전이(소유자만), 조회(참여자만)
import logging
from datetime import timedelta
from typing import Optional, Union

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from app.models.match import MESSAGE_MAX_LENGTH, Match, MatchStatus
from app.services.errors import Conflict, Forbidden, InvalidArgument, InvalidOperation, NotFound
from app.services.keyed_lock import KeyedLock
from app.services.match_status import check_status_transition, is_terminal
from app.services.moment_store import MomentStore
from app.services.pagination import Page, offset_of, validate_page
from app.services.timeutils import Clock, utcnow

logger = logging.getLogger(__name__)


def parse_status(value: Union[str, MatchStatus]) -> MatchStatus:
    """문자열/Enum → MatchStatus. 알 수 없는 값은 InvalidArgument."""
    if isinstance(value, MatchStatus):
        return value
    try:
        return MatchStatus(str(value).strip().lower())
    except ValueError:
        raise InvalidArgument(f"Unknown match status: {value!r}")


def _normalize_message(message: Optional[str]) -> Optional[str]:
    if message is None:
        return None
    message = message.strip()
    if len(message) > MESSAGE_MAX_LENGTH:
        raise InvalidArgument(f"message must be at most {MESSAGE_MAX_LENGTH} characters")
    return message or None


class MatchEngine:
    """
    매치 상태 머신.

    - 생성: (requester_id, moment_id) 쌍 락 + DB UniqueConstraint → 동시 요청이어도 1건만 성공
    - 전이: match_id 락 + FOR UPDATE, pending 에서 한 번만, 소유자만
    """

    def __init__(self, session_factory: sessionmaker, moment_store: MomentStore, clock: Clock = utcnow):
        self._session_factory = session_factory
        self._moments = moment_store
        self._clock = clock
        self._pair_locks = KeyedLock()
        self._match_locks = KeyedLock()

    def create_match(self, requester_id: str, moment_id: int, message: Optional[str] = None) -> Match:
        """
        모먼트 참여 요청.

        - 모먼트 없음/만료 → NotFound
        - 자기 모먼트 → InvalidOperation
        - 이미 요청함 → Conflict
        """
        if not isinstance(requester_id, str) or not requester_id.strip():
            raise InvalidArgument("requester_id is required")
        message = _normalize_message(message)
        moment = self._moments.get(moment_id)
        if moment.owner_id == requester_id:
            raise InvalidOperation("You cannot join your own moment")

        with self._pair_locks.hold((requester_id, moment_id)):
            now = self._clock()
            with self._session_factory() as db:
                existing = db.execute(
                    select(Match.id).where(Match.requester_id == requester_id, Match.moment_id == moment_id)
                ).first()
                if existing is not None:
                    raise Conflict("You have already joined this moment")
                match = Match(
                    requester_id=requester_id,
                    owner_id=moment.owner_id,
                    moment_id=moment_id,
                    status=MatchStatus.PENDING.value,
                    message=message,
                    created_at=now,
                    updated_at=now,
                )
                db.add(match)
                try:
                    db.commit()
                except IntegrityError:
                    # 다른 프로세스가 같은 쌍을 먼저 insert → UniqueConstraint 위반
                    db.rollback()
                    raise Conflict("You have already joined this moment")
                db.refresh(match)
        logger.info(
            "match requested",
            extra={"match_id": match.id, "moment_id": moment_id, "user_id": requester_id},
        )
        return match

    def update_status(self, match_id: int, acting_user_id: str, new_status: Union[str, MatchStatus]) -> Match:
        """
        모먼트 소유자가 pending 매치를 accepted/rejected 로 전이.

        검사 순서: NotFound → 이미 종료(InvalidOperation) → 소유자 아님(Forbidden) → 허용되지 않은 전이(InvalidOperation)
        종료된 매치는 누가 어떤 상태로 요청해도 InvalidOperation.
        """
        target = parse_status(new_status)
        with self._match_locks.hold(match_id):
            with self._session_factory() as db:
                match = db.execute(select(Match).where(Match.id == match_id).with_for_update()).scalar_one_or_none()
                if match is None:
                    raise NotFound("Match not found")
                current = MatchStatus(match.status)
                if is_terminal(current):
                    raise InvalidOperation(f"Match is already {current.value}")
                if match.owner_id != acting_user_id:
                    raise Forbidden("Not authorized to update this match")
                error = check_status_transition(current, target)
                if error is not None:
                    raise InvalidOperation(error)

                now = self._clock()
                # updated_at 은 항상 이전 값보다 커야 한다 (시계 해상도가 낮아도 순서 보장)
                if now <= match.updated_at:
                    now = match.updated_at + timedelta(microseconds=1)
                match.status = target.value
                match.updated_at = now
                db.commit()
                db.refresh(match)
        logger.info(
            "match status changed",
            extra={"match_id": match_id, "user_id": acting_user_id, "status": target.value},
        )
        return match

    def get_by_id(self, match_id: int, acting_user_id: str) -> Match:
        """참여자(요청자/소유자)만 조회 가능."""
        with self._session_factory() as db:
            match = db.get(Match, match_id)
        if match is None:
            raise NotFound("Match not found")
        if not match.is_participant(acting_user_id):
            raise Forbidden("Not authorized to view this match")
        return match

    def list_for_user(self, user_id: str, page: int = 1, page_size: int = 10) -> Page[Match]:
        """요청자 또는 소유자인 매치를 created_at 내림차순으로 페이지 조회."""
        validate_page(page, page_size)
        participant = or_(Match.requester_id == user_id, Match.owner_id == user_id)
        with self._session_factory() as db:
            total = db.execute(select(func.count()).select_from(Match).where(participant)).scalar_one()
            rows = db.execute(
                select(Match)
                .where(participant)
                .order_by(Match.created_at.desc(), Match.id.desc())
                .offset(offset_of(page, page_size))
                .limit(page_size)
            ).scalars().all()
        return Page(items=list(rows), total=int(total), page=page, page_size=page_size)
