from datetime import timedelta

import pytest

from app.services.errors import Forbidden, InvalidArgument, NotFound
from app.services.geo import Point
from app.services.query_service import build_query_service
from helpers import ORIGIN, offset_point


def test_nearby_moments_sorted_with_distance(service):
    far = service.create_moment("a", "far", "m", offset_point(ORIGIN, north_m=2000))
    near = service.create_moment("b", "near", "m", offset_point(ORIGIN, east_m=300))
    service.create_moment("c", "outside", "m", offset_point(ORIGIN, east_m=7000))

    page = service.nearby_moments(ORIGIN, 5000)

    assert [row.moment.id for row in page.items] == [near.id, far.id]
    assert page.items[0].distance_m == pytest.approx(300, rel=1e-3)
    assert page.total == 2
    assert page.pages == 1


def test_nearby_visibility_follows_ttl(service, clock):
    moment = service.create_moment("a", "hello", "m", offset_point(ORIGIN, east_m=100))

    clock.advance(hours=23, minutes=59)
    assert [r.moment.id for r in service.nearby_moments(ORIGIN).items] == [moment.id]

    clock.advance(minutes=2)
    page = service.nearby_moments(ORIGIN)
    assert page.items == []
    assert page.total == 0
    assert page.pages == 0


def test_expired_moments_are_filtered_before_paging(service, clock):
    for i in range(3):
        service.create_moment("a", f"short {i}", "m", offset_point(ORIGIN, east_m=10 + i), ttl=timedelta(hours=1))
    live = [service.create_moment("a", f"long {i}", "m", offset_point(ORIGIN, east_m=100 + i)) for i in range(3)]
    clock.advance(hours=2)

    first = service.nearby_moments(ORIGIN, page=1, page_size=2)
    second = service.nearby_moments(ORIGIN, page=2, page_size=2)
    beyond = service.nearby_moments(ORIGIN, page=3, page_size=2)

    assert first.total == 3
    assert first.pages == 2
    assert [r.moment.id for r in first.items + second.items] == [m.id for m in live]
    assert beyond.items == []
    assert beyond.total == 3


def test_nearby_rejects_bad_arguments(service):
    with pytest.raises(InvalidArgument):
        service.nearby_moments(ORIGIN, 0)
    with pytest.raises(InvalidArgument):
        service.nearby_moments(ORIGIN, page=0)
    with pytest.raises(InvalidArgument):
        service.nearby_moments(ORIGIN, page_size=101)


def test_delete_removes_moment_from_search(service):
    moment = service.create_moment("a", "bye", "m", ORIGIN)

    with pytest.raises(Forbidden):
        service.delete_moment(moment.id, "b")
    service.delete_moment(moment.id, "a")

    assert service.nearby_moments(ORIGIN).total == 0
    with pytest.raises(NotFound):
        service.get_moment(moment.id)


def test_purge_expired_moments_removes_rows(service, clock):
    old = service.create_moment("a", "old", "m", ORIGIN, ttl=timedelta(minutes=30))
    fresh = service.create_moment("a", "fresh", "m", ORIGIN)
    clock.advance(hours=1)

    assert service.purge_expired_moments() == 1
    assert service.purge_expired_moments() == 0
    with pytest.raises(NotFound):
        service.get_moment(old.id)
    assert [r.moment.id for r in service.nearby_moments(ORIGIN).items] == [fresh.id]


def test_user_location_is_overwritten(service, clock):
    service.update_user_location("u1", offset_point(ORIGIN, east_m=100))
    clock.advance(minutes=1)
    row = service.update_user_location("u1", offset_point(ORIGIN, east_m=200))

    assert row.updated_at == clock()
    assert service.user_locations.get("u1").lng == pytest.approx(row.lng)
    clusters = service.nearby_user_clusters(ORIGIN, "me", 5000, 500)
    assert [c.count for c in clusters] == [1]
    assert clusters[0].mean_distance == pytest.approx(200, rel=1e-3)


def test_user_clusters_exclude_requester(service):
    service.update_user_location("me", ORIGIN)
    for i in range(4):
        service.update_user_location(f"near{i}", offset_point(ORIGIN, east_m=20 + i, north_m=20))
    for i in range(2):
        service.update_user_location(f"far{i}", offset_point(ORIGIN, east_m=1200 + i, north_m=20))
    service.update_user_location("outside", offset_point(ORIGIN, east_m=9000))

    clusters = service.nearby_user_clusters(ORIGIN, "me", 5000, 500)

    assert [c.count for c in clusters] == [4, 2]
    assert sum(c.count for c in clusters) == 6


def test_user_clusters_requires_requester(service):
    with pytest.raises(InvalidArgument):
        service.nearby_user_clusters(ORIGIN, "  ")


def test_services_sharing_a_database_see_each_others_writes(session_factory, clock):
    # 워커 두 개가 같은 DB 를 쓰는 배포 형태
    worker_a = build_query_service(session_factory, clock=clock)
    worker_b = build_query_service(session_factory, clock=clock)

    moment = worker_a.create_moment("a", "hello", "m", offset_point(ORIGIN, east_m=100))
    page = worker_b.nearby_moments(ORIGIN)
    assert page.total == 1
    assert [r.moment.id for r in page.items] == [moment.id]

    worker_a.update_user_location("u1", offset_point(ORIGIN, east_m=50))
    assert [c.count for c in worker_b.nearby_user_clusters(ORIGIN, "me", 5000, 500)] == [1]
    worker_a.update_user_location("u1", offset_point(ORIGIN, east_m=9000))
    assert worker_b.nearby_user_clusters(ORIGIN, "me", 5000, 500) == []

    worker_a.delete_moment(moment.id, "a")
    assert worker_b.nearby_moments(ORIGIN).total == 0


def test_restarted_service_serves_existing_rows(service, session_factory, clock):
    moment = service.create_moment("a", "kept", "m", ORIGIN)
    service.create_moment("a", "gone", "m", ORIGIN, ttl=timedelta(minutes=1))
    service.update_user_location("u1", Point(127.03, 37.5))
    clock.advance(minutes=5)

    restarted = build_query_service(session_factory, clock=clock)

    assert [r.moment.id for r in restarted.nearby_moments(ORIGIN).items] == [moment.id]
    assert [c.count for c in restarted.nearby_user_clusters(ORIGIN, "me", 5000, 500)] == [1]
