import pytest

from shiftboard.scheduling.store import ShiftStore

from factories import MON, TUE, make_shift


@pytest.fixture
def store():
    return ShiftStore([make_shift("a", "e1", MON, "09:00", "17:00"), make_shift("b", "e2", TUE, "09:00", "17:00")])


def test_overlay_hides_committed_until_discarded(store):
    moved = make_shift("a", "e1", TUE, "09:00", "17:00")
    before = store.visible()

    store.apply("a", moved)
    assert store.get("a") == moved
    assert store.committed("a").starts_at.date() == MON
    assert store.in_flight == ["a"]

    store.discard("a")
    assert store.visible() == before
    assert not store.has_overlay("a")


def test_delete_overlay_and_commit(store):
    store.apply("b", None)
    assert [s.id for s in store.visible()] == ["a"]
    assert store.get("b") is None
    store.commit("b")
    assert store.committed("b") is None
    assert store.in_flight == []


def test_commit_prefers_echoed_value(store):
    store.apply("a", make_shift("a", "e1", TUE, "09:00", "17:00"))
    echoed = make_shift("a", "e1", TUE, "09:00", "17:00", status="published")
    store.commit("a", echoed)
    assert store.get("a") == echoed


def test_one_overlay_per_shift(store):
    store.apply("a", None)
    with pytest.raises(RuntimeError):
        store.apply("a", None)


def test_replacing_committed_layer_keeps_overlays(store):
    moved = make_shift("a", "e1", TUE, "12:00", "13:00")
    store.apply("a", moved)
    store.replace_committed([make_shift("c", "e3", MON, "09:00", "10:00")])
    assert store.get("a") == moved
    assert [s.id for s in store.visible()] == ["c", "a"]


def test_every_write_bumps_version(store):
    v = store.version
    store.apply("a", None)
    store.discard("a")
    store.discard("a")  # no-op
    store.add(make_shift("z", None, MON, "01:00", "02:00"))
    assert store.version == v + 3
