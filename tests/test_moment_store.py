from datetime import timedelta

import pytest

from app.services.errors import Forbidden, InvalidArgument, NotFound
from app.services.moment_store import MomentStore
from helpers import ORIGIN, T0


@pytest.fixture
def store(session_factory, clock):
    return MomentStore(session_factory, clock=clock)


def test_create_sets_24h_expiry(store):
    moment = store.create("alice", "sunset at the river", "media/1.jpg", ORIGIN)

    assert moment.id is not None
    assert moment.created_at == T0
    assert moment.expires_at == T0 + timedelta(hours=24)
    assert moment.location == ORIGIN


def test_moment_is_visible_until_expiry(store, clock):
    moment = store.create("alice", "coffee", "media/2.jpg", ORIGIN)

    clock.advance(hours=23, minutes=59)
    assert store.get(moment.id).id == moment.id

    clock.advance(minutes=2)
    with pytest.raises(NotFound):
        store.get(moment.id)


def test_expiry_instant_is_not_live(store, clock):
    moment = store.create("alice", "coffee", "media/2.jpg", ORIGIN, ttl=timedelta(minutes=10))

    clock.advance(minutes=10)

    assert not MomentStore.is_live(moment, clock())
    with pytest.raises(NotFound):
        store.get(moment.id)


@pytest.mark.parametrize(
    "owner, caption, media_ref",
    [("", "hi", "m"), ("alice", "   ", "m"), ("alice", "x" * 201, "m"), ("alice", "hi", ""), ("alice", "hi", "m" * 501)],
)
def test_create_validates_fields(store, owner, caption, media_ref):
    with pytest.raises(InvalidArgument):
        store.create(owner, caption, media_ref, ORIGIN)


def test_create_rejects_non_positive_ttl(store):
    with pytest.raises(InvalidArgument):
        store.create("alice", "hi", "m", ORIGIN, ttl=timedelta(0))


def test_get_missing_moment(store):
    with pytest.raises(NotFound):
        store.get(999)


def test_delete_requires_owner(store):
    moment = store.create("alice", "hi", "m", ORIGIN)

    with pytest.raises(Forbidden):
        store.delete(moment.id, "bob")

    store.delete(moment.id, "alice")
    with pytest.raises(NotFound):
        store.get(moment.id)
    with pytest.raises(NotFound):
        store.delete(moment.id, "alice")


def test_delete_expired_moment_is_not_found(store, clock):
    moment = store.create("alice", "hi", "m", ORIGIN)
    clock.advance(hours=25)

    with pytest.raises(NotFound):
        store.delete(moment.id, "alice")


def test_purge_removes_only_expired_rows(store, clock):
    expired = [store.create("alice", f"old {i}", "m", ORIGIN, ttl=timedelta(hours=1)) for i in range(5)]
    kept = store.create("alice", "fresh", "m", ORIGIN)
    clock.advance(hours=1)

    purged = store.purge_expired(batch_size=2)

    assert sorted(purged) == sorted(m.id for m in expired)
    assert store.get(kept.id).id == kept.id
    for m in expired:
        with pytest.raises(NotFound):
            store.get(m.id)
    assert store.purge_expired() == []


def test_length_limits_apply_after_stripping(store):
    moment = store.create("alice", "  " + "x" * 200 + "  ", " " + "m" * 500 + " ", ORIGIN)

    assert moment.caption == "x" * 200
    assert moment.media_ref == "m" * 500
