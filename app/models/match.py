# Match 모델: 다른 사용자의 모먼트에 대한 참여 요청

from enum import Enum as PyEnum

from sqlalchemy import Column, Integer, String, UniqueConstraint

from app.models.base import Base, UTCDateTime

MESSAGE_MAX_LENGTH = 500


class MatchStatus(str, PyEnum):
    """매치 상태. PENDING → ACCEPTED / REJECTED 후에는 변경 불가."""

    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


# DB에는 String(20)으로 저장. 앱에서는 MatchStatus로 비교.
STATUS_DEFAULT = MatchStatus.PENDING.value


class Match(Base):
    """매치 테이블. (requester_id, moment_id) 당 1건. 모먼트가 정리돼도 이력으로 남는다 (FK 없음)."""

    __tablename__ = "matches"

    id = Column(Integer, primary_key=True, index=True)
    requester_id = Column(String(64), nullable=False, index=True)  # 참여를 요청한 사용자
    owner_id = Column(String(64), nullable=False, index=True)  # 모먼트 작성자
    moment_id = Column(Integer, nullable=False, index=True)
    status = Column(String(20), nullable=False, default=STATUS_DEFAULT, server_default=STATUS_DEFAULT)
    message = Column(String(MESSAGE_MAX_LENGTH), nullable=True)
    created_at = Column(UTCDateTime(), nullable=False)
    updated_at = Column(UTCDateTime(), nullable=False)

    __table_args__ = (UniqueConstraint("requester_id", "moment_id", name="uq_match_requester_moment"),)

    def is_participant(self, user_id: str) -> bool:
        return user_id in (self.requester_id, self.owner_id)
