# 사용자 위치 저장소: 사용자당 1행, last-write-wins

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from app.models.user_location import UserLocation
from app.services.errors import InvalidArgument
from app.services.geo import Point
from app.services.keyed_lock import KeyedLock
from app.services.timeutils import Clock, utcnow

logger = logging.getLogger(__name__)


class UserLocationStore:
    def __init__(self, session_factory: sessionmaker, clock: Clock = utcnow):
        self._session_factory = session_factory
        self._clock = clock
        self._locks = KeyedLock()

    def upsert(self, user_id: str, location: Point) -> UserLocation:
        """위치 덮어쓰기. 다른 프로세스와 동시에 첫 insert 가 겹치면 update 로 한 번 재시도."""
        if not isinstance(user_id, str) or not user_id.strip():
            raise InvalidArgument("user_id is required")
        if not isinstance(location, Point):
            raise InvalidArgument("location is required")
        with self._locks.hold(user_id):
            try:
                return self._write(user_id, location)
            except IntegrityError:
                logger.info("concurrent location insert, retrying as update", extra={"user_id": user_id})
                return self._write(user_id, location)

    def _write(self, user_id: str, location: Point) -> UserLocation:
        now = self._clock()
        with self._session_factory() as db:
            row = db.get(UserLocation, user_id)
            if row is None:
                row = UserLocation(user_id=user_id, lng=location.lng, lat=location.lat, updated_at=now)
                db.add(row)
            else:
                row.lng = location.lng
                row.lat = location.lat
                row.updated_at = now
            try:
                db.commit()
            except IntegrityError:
                db.rollback()
                raise
            db.refresh(row)
        return row

    def get(self, user_id: str) -> Optional[UserLocation]:
        with self._session_factory() as db:
            return db.get(UserLocation, user_id)
