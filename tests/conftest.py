import pytest
from fastapi.testclient import TestClient

from app.database import create_db_engine, create_session_factory
from app.models.base import Base
from app.models.match import Match  # noqa: F401  (테이블 메타데이터 등록용)
from app.models.moment import Moment  # noqa: F401
from app.models.user_location import UserLocation  # noqa: F401
from app.services.query_service import build_query_service
from helpers import FakeClock


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def engine(tmp_path):
    engine = create_db_engine(f"sqlite:///{tmp_path / 'vibelink-test.db'}", echo=False)
    Base.metadata.create_all(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def session_factory(engine):
    return create_session_factory(engine)


@pytest.fixture
def service(session_factory, clock):
    return build_query_service(session_factory, clock=clock)


@pytest.fixture
def client(service, session_factory):
    from app.database import get_db
    from app.deps import enforce_rate_limit, get_query_service
    from app.main import app

    def _test_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_query_service] = lambda: service
    app.dependency_overrides[enforce_rate_limit] = lambda: None
    app.dependency_overrides[get_db] = _test_db
    try:
        # startup 이벤트(마이그레이션/리퍼)는 실행하지 않도록 컨텍스트 매니저 없이 사용
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
