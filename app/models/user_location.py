# UserLocation 모델: 사용자당 최신 위치 1행 (이력 없음)

from sqlalchemy import Column, Float, String

from app.models.base import Base, UTCDateTime
from app.services.geo import Point


class UserLocation(Base):
    """사용자 위치 테이블. 갱신 시 덮어쓰기(last-write-wins). PostgreSQL 의 location/GIST 는 moments 와 동일."""

    __tablename__ = "user_locations"

    user_id = Column(String(64), primary_key=True)
    lng = Column(Float, nullable=False)
    lat = Column(Float, nullable=False)
    updated_at = Column(UTCDateTime(), nullable=False)

    @property
    def location(self) -> Point:
        return Point(self.lng, self.lat)
