import asyncio
import logging

import pytest

from shiftboard.scheduling.reconciler import Reconciler
from shiftboard.services.changes import ChangeEvent, ChangeFeed

from factories import MON, ORG, TUE, avail, make_shift


def shift_event(org=ORG, table="shifts"):
    return ChangeEvent(org, table, "UPDATE")


async def test_refresh_swaps_committed_layer_and_keeps_overlays(gateway, load_board):
    gateway.seed(make_shift("a", "e1", MON, "09:00", "17:00"))
    board = await load_board()
    moving = make_shift("a", "e1", TUE, "09:00", "17:00")
    board.store.apply("a", moving)

    gateway.seed(make_shift("b", "e2", MON, "10:00", "12:00"))
    gateway.availability = [avail("e2", 1, "08:00", "18:00")]
    await Reconciler(board, gateway).refresh()

    assert board.find_shift("a") == moving
    assert [s.id for s in board.shifts()] == ["b", "a"]
    assert board.index.has_availability_on("e2", 1)


async def test_notifications_during_refresh_collapse_into_one(gateway, load_board):
    board = await load_board()
    reconciler = Reconciler(board, gateway)
    gateway.fetches = 0
    gateway.fetch_gate = asyncio.Event()

    for _ in range(3):
        reconciler.notify(shift_event())
    while gateway.fetches == 0:
        await asyncio.sleep(0)
    for _ in range(5):
        reconciler.notify(shift_event(table="availability"))
    gateway.fetch_gate.set()
    await reconciler.idle()

    assert gateway.fetches == 2
    assert reconciler.refreshes == 2


async def test_unrelated_changes_are_ignored(gateway, load_board):
    board = await load_board()
    reconciler = Reconciler(board, gateway)
    gateway.fetches = 0

    reconciler.notify(shift_event(org="org-2"))
    reconciler.notify(shift_event(table="positions"))
    await reconciler.idle()

    assert gateway.fetches == 0


async def test_read_for_a_previous_week_is_dropped(gateway, load_board):
    gateway.seed(make_shift("a", "e1", MON, "09:00", "17:00"))
    board = await load_board()
    reconciler = Reconciler(board, gateway)
    gateway.fetch_gate = asyncio.Event()

    refresh = asyncio.create_task(reconciler.refresh())
    await asyncio.sleep(0)
    board.window = board.window.shifted(1)
    gateway.fetch_gate.set()
    await refresh

    assert reconciler.refreshes == 0
    assert [s.id for s in board.shifts()] == ["a"]


async def test_failed_refresh_keeps_last_read(gateway, load_board, monkeypatch, caplog):
    gateway.seed(make_shift("a", "e1", MON, "09:00", "17:00"))
    board = await load_board()
    reconciler = Reconciler(board, gateway)

    async def broken(org_id, window):
        raise ConnectionError("db down")

    monkeypatch.setattr(gateway, "fetch_window", broken)
    with caplog.at_level(logging.ERROR):
        reconciler.notify(shift_event())
        await reconciler.idle()

    assert "Refresh of org org-1 failed" in caplog.text
    assert [s.id for s in board.shifts()] == ["a"]


async def test_subscribes_to_feed_until_stopped(gateway, load_board):
    board = await load_board()
    feed = ChangeFeed()
    reconciler = Reconciler(board, gateway, feed)
    reconciler.start()

    feed.publish(shift_event())
    await reconciler.idle()
    assert reconciler.refreshes == 1

    await reconciler.stop()
    feed.publish(shift_event())
    await reconciler.idle()
    assert reconciler.refreshes == 1


def test_feed_isolates_failing_subscribers(caplog):
    feed = ChangeFeed()
    heard = []

    def explode(event):
        raise RuntimeError("boom")

    feed.subscribe(ORG, explode)
    unsubscribe = feed.subscribe(ORG, heard.append)
    feed.publish(shift_event())
    unsubscribe()
    feed.publish(shift_event())

    assert heard == [shift_event()]
    assert "Change subscriber failed" in caplog.text


@pytest.mark.parametrize("table", ["shifts", "availability", "time_off"])
async def test_watched_tables(gateway, load_board, table):
    board = await load_board()
    reconciler = Reconciler(board, gateway)
    reconciler.notify(shift_event(table=table))
    await reconciler.idle()
    assert reconciler.refreshes == 1
