from datetime import datetime, timezone

from sqlalchemy import DateTime
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.types import TypeDecorator


class Base(DeclarativeBase):
    """
    모든 SQLAlchemy 모델이 상속할 기본 Base 클래스

    예시:

    class Moment(Base):
        __tablename__ = "moments"
        id = Column(Integer, primary_key=True, index=True)
        ...
    """

    pass


class UTCDateTime(TypeDecorator):
    """
    항상 UTC aware datetime 으로 읽히는 DateTime(timezone=True).

    PostgreSQL(timestamptz)은 그대로, SQLite 처럼 tz 를 잃는 백엔드는
    읽을 때 UTC tzinfo 를 다시 붙인다. 만료 비교(now < expires_at)가 백엔드와 무관하게 동작.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            raise ValueError("naive datetime is not allowed; use UTC aware datetimes")
        return value.astimezone(timezone.utc)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if isinstance(value, datetime) and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
