# 모먼트 저장소: 생성/조회/삭제 + 만료(TTL) 정리
#
# 가시성은 리퍼 실행 여부와 무관하게 모든 읽기 경로에서 expires_at 으로 판정한다.
# 리퍼(purge_expired)는 물리 삭제만 담당하는 보조 정리 작업.

import logging
import os
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.orm import sessionmaker

from app.models.moment import CAPTION_MAX_LENGTH, Moment
from app.services.errors import Forbidden, InvalidArgument, NotFound
from app.services.geo import Point
from app.services.keyed_lock import KeyedLock
from app.services.timeutils import Clock, utcnow

logger = logging.getLogger(__name__)

DEFAULT_TTL = timedelta(hours=float(os.getenv("MOMENT_TTL_HOURS", "24")))
PURGE_BATCH_SIZE = int(os.getenv("MOMENT_PURGE_BATCH_SIZE", "500"))
MEDIA_REF_MAX_LENGTH = 500


def is_live(moment: Moment, now: datetime) -> bool:
    return now < moment.expires_at


def _require_user_id(value: str, name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidArgument(f"{name} is required")
    return value


class MomentStore:
    """모먼트 CRUD. 각 연산이 자기 세션을 열고 commit 까지 책임진다."""

    def __init__(self, session_factory: sessionmaker, clock: Clock = utcnow, default_ttl: timedelta = DEFAULT_TTL):
        self._session_factory = session_factory
        self._clock = clock
        self._default_ttl = default_ttl
        self._locks = KeyedLock()

    @staticmethod
    def is_live(moment: Moment, now: datetime) -> bool:
        return is_live(moment, now)

    def create(
        self,
        owner_id: str,
        caption: str,
        media_ref: str,
        location: Point,
        ttl: Optional[timedelta] = None,
    ) -> Moment:
        """모먼트 생성. created_at=now, expires_at=created_at+ttl (기본 24시간)."""
        _require_user_id(owner_id, "owner_id")
        caption = (caption or "").strip()
        if not caption:
            raise InvalidArgument("caption is required")
        if len(caption) > CAPTION_MAX_LENGTH:
            raise InvalidArgument(f"caption must be at most {CAPTION_MAX_LENGTH} characters")
        media_ref = (media_ref or "").strip()
        if not media_ref:
            raise InvalidArgument("media_ref is required")
        if len(media_ref) > MEDIA_REF_MAX_LENGTH:
            raise InvalidArgument(f"media_ref must be at most {MEDIA_REF_MAX_LENGTH} characters")
        if not isinstance(location, Point):
            raise InvalidArgument("location is required")
        ttl = self._default_ttl if ttl is None else ttl
        if ttl <= timedelta(0):
            raise InvalidArgument("ttl must be positive")

        created_at = self._clock()
        moment = Moment(
            owner_id=owner_id,
            caption=caption,
            media_ref=media_ref,
            lng=location.lng,
            lat=location.lat,
            created_at=created_at,
            expires_at=created_at + ttl,
        )
        with self._session_factory() as db:
            db.add(moment)
            db.commit()
            db.refresh(moment)
        logger.info("moment created", extra={"moment_id": moment.id, "user_id": owner_id})
        return moment

    def get(self, moment_id: int, now: Optional[datetime] = None) -> Moment:
        """살아 있는 모먼트만 반환. 없거나 만료면 NotFound."""
        now = now or self._clock()
        with self._session_factory() as db:
            moment = db.get(Moment, moment_id)
        if moment is None or not is_live(moment, now):
            raise NotFound("Moment not found")
        return moment

    def delete(self, moment_id: int, requester_id: str) -> Moment:
        """
        소유자만 삭제 가능.

        - 없거나 이미 만료 → NotFound
        - 소유자가 아님 → Forbidden
        반환: 삭제된 모먼트
        """
        _require_user_id(requester_id, "requester_id")
        with self._locks.hold(moment_id):
            now = self._clock()
            with self._session_factory() as db:
                # 다른 워커의 동시 삭제와는 행 잠금으로 직렬화
                moment = db.get(Moment, moment_id, with_for_update=True)
                if moment is None or not is_live(moment, now):
                    raise NotFound("Moment not found")
                if moment.owner_id != requester_id:
                    raise Forbidden("Not authorized to delete this moment")
                db.delete(moment)
                db.commit()
        logger.info("moment deleted", extra={"moment_id": moment_id, "user_id": requester_id})
        return moment

    def purge_expired(self, now: Optional[datetime] = None, batch_size: int = PURGE_BATCH_SIZE) -> List[int]:
        """
        만료된 모먼트 물리 삭제. batch_size 단위로 나눠 짧은 트랜잭션만 사용.

        반환: 삭제된 id 목록
        """
        now = now or self._clock()
        purged: List[int] = []
        while True:
            with self._session_factory() as db:
                ids = list(
                    db.execute(
                        select(Moment.id).where(Moment.expires_at <= now).order_by(Moment.id).limit(batch_size)
                    ).scalars().all()
                )
                if not ids:
                    break
                db.execute(delete(Moment).where(Moment.id.in_(ids), Moment.expires_at <= now))
                db.commit()
            purged.extend(ids)
            if len(ids) < batch_size:
                break
        if purged:
            logger.info("expired moments purged", extra={"purged": len(purged)})
        return purged
