# Moment 모델: 위치 태그가 붙은 짧은 수명의 게시물

from sqlalchemy import Column, Float, Integer, String

from app.models.base import Base, UTCDateTime
from app.services.geo import Point

CAPTION_MAX_LENGTH = 200


class Moment(Base):
    """
    모먼트 테이블. expires_at 이 지나면 논리 삭제.

    위치는 lng/lat 실수 컬럼. PostgreSQL 에서는 마이그레이션이 여기서 생성되는
    geography 컬럼(location)과 GIST 인덱스를 추가하고 GeoIndex 가 그 위에서 반경 검색.
    """

    __tablename__ = "moments"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(String(64), nullable=False, index=True)  # 작성자
    caption = Column(String(CAPTION_MAX_LENGTH), nullable=False)
    media_ref = Column(String(500), nullable=False)  # 미디어 저장소 참조 (불투명 문자열)
    lng = Column(Float, nullable=False)
    lat = Column(Float, nullable=False)
    created_at = Column(UTCDateTime(), nullable=False)
    expires_at = Column(UTCDateTime(), nullable=False, index=True)  # TTL 정리 기준

    @property
    def location(self) -> Point:
        return Point(self.lng, self.lat)

    def __repr__(self) -> str:
        return f"<Moment id={self.id} owner={self.owner_id} expires_at={self.expires_at}>"
