from __future__ import annotations

import asyncio
from unittest import mock

import pytest
from _fakes import FakeUserSource, make_users, settle

from pyroster.exceptions import RosterError, RosterSourceError
from pyroster.state.store import UserStore
from pyroster.view import RosterStatus, UsersListView


class ManualTimer:
    """Sleep replacement that only returns when the test advances it."""

    def __init__(self) -> None:
        self.delays: list[float] = []
        self._ticks: asyncio.Queue[None] = asyncio.Queue()

    async def sleep(self, delay: float) -> None:
        self.delays.append(delay)
        await self._ticks.get()

    async def advance(self) -> None:
        self._ticks.put_nowait(None)
        await settle()


async def _mounted(
    source: FakeUserSource, *, preload: bool = True
) -> tuple[UsersListView, UserStore, ManualTimer]:
    store = UserStore(source)
    if preload:
        await store.fetch_users()
    timer = ManualTimer()
    view = UsersListView(store, sleep=timer.sleep)
    view.mount()
    await settle()
    return view, store, timer


# ---------------------------------------------------------------------------
# Rendering states
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_renders_loading_while_fetch_in_flight() -> None:
    gate = asyncio.Event()
    view, _store, _timer = await _mounted(FakeUserSource(fetch_gate=gate), preload=False)

    snapshot = view.render()

    assert snapshot.status == RosterStatus.LOADING
    assert snapshot.rows == []
    assert view.render_text() == "Loading users..."
    gate.set()
    await settle()
    await view.unmount()


@pytest.mark.asyncio
async def test_renders_error_message() -> None:
    source = FakeUserSource(fetch_error=RosterSourceError("Network Failed"))
    view, _store, _timer = await _mounted(source, preload=False)

    assert view.render().status == RosterStatus.ERROR
    assert "⚠️ Error: Network Failed" in view.render_text()
    await view.unmount()


@pytest.mark.asyncio
async def test_renders_no_users_found() -> None:
    view, _store, _timer = await _mounted(FakeUserSource(), preload=False)

    assert view.render().status == RosterStatus.EMPTY
    assert "🤷 No users found" in view.render_text()
    await view.unmount()


@pytest.mark.asyncio
async def test_renders_ranked_table() -> None:
    view, _store, _timer = await _mounted(FakeUserSource(users=make_users(2)))

    snapshot = view.render()

    assert snapshot.status == RosterStatus.READY
    assert snapshot.total_users == 2
    assert [(r.rank, r.name, r.score) for r in snapshot.rows] == [
        (1, "Test User 2", 55),
        (2, "Test User 1", 50),
    ]
    text = view.render_text()
    assert text.splitlines()[0] == "Total Users: 2"
    assert "Page 1 of 1" in text
    await view.unmount()


@pytest.mark.asyncio
async def test_highlights_recently_updated_rows() -> None:
    view, store, _timer = await _mounted(FakeUserSource(users=make_users(3)))

    store.update_user_score(2, 55)

    rows = {row.name: row for row in view.render().rows}
    assert rows["Test User 2"].highlighted is True
    assert rows["Test User 3"].highlighted is False
    marked = [line for line in view.render_text().splitlines() if "Recently Updated" in line]
    assert len(marked) == 1
    assert "Test User 2" in marked[0]
    await view.unmount()


# ---------------------------------------------------------------------------
# Edit mode
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_start_edit_seeds_draft_with_current_score() -> None:
    view, _store, _timer = await _mounted(FakeUserSource(users=make_users(1, base_score=75)))

    view.start_edit(1)

    row = view.render().rows[0]
    assert row.editing is True
    assert row.draft_score == 75
    assert "[75]" in view.render_text()
    await view.unmount()


@pytest.mark.asyncio
async def test_save_edit_updates_store_and_exits_edit_mode() -> None:
    view, store, _timer = await _mounted(FakeUserSource(users=make_users(1, base_score=75)))

    with mock.patch.object(store, "update_user_score", wraps=store.update_user_score) as spy:
        view.start_edit(1)
        view.set_draft(1, "88")
        view.save_edit(1)

    spy.assert_called_once_with(1, 88)
    assert view.is_editing(1) is False
    row = view.render().rows[0]
    assert row.editing is False
    assert row.score == 88
    await view.unmount()


@pytest.mark.asyncio
async def test_cancel_edit_discards_draft() -> None:
    view, store, _timer = await _mounted(FakeUserSource(users=make_users(1, base_score=75)))

    with mock.patch.object(store, "update_user_score", wraps=store.update_user_score) as spy:
        view.start_edit(1)
        view.set_draft(1, 99)
        view.cancel_edit(1)

    spy.assert_not_called()
    assert view.is_editing(1) is False
    assert view.render().rows[0].score == 75
    await view.unmount()


@pytest.mark.asyncio
async def test_edit_rejects_bad_input() -> None:
    view, _store, _timer = await _mounted(FakeUserSource(users=make_users(1)))

    with pytest.raises(KeyError):
        view.start_edit(404)
    with pytest.raises(KeyError):
        view.save_edit(1)
    view.start_edit(1)
    with pytest.raises(ValueError):
        view.set_draft(1, "eighty")
    await view.unmount()


@pytest.mark.asyncio
async def test_non_integral_draft_is_rejected_and_edit_kept() -> None:
    view, store, _timer = await _mounted(FakeUserSource(users=make_users(1, base_score=75)))
    view.start_edit(1)

    with pytest.raises(ValueError):
        view.set_draft(1, 88.5)
    with pytest.raises(ValueError):
        view.set_draft(1, True)

    assert view.is_editing(1) is True
    assert view.render().rows[0].draft_score == 75

    view.set_draft(1, 90.0)
    view.save_edit(1)

    assert store.users[0].score == 90
    assert isinstance(store.users[0].score, int)
    await view.unmount()


# ---------------------------------------------------------------------------
# Navigation
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_navigation_and_search_delegate_to_store() -> None:
    view, store, _timer = await _mounted(FakeUserSource(users=make_users(45)))

    view.next_page()
    view.next_page()
    view.next_page()
    assert store.current_page == 3
    view.previous_page()
    assert store.current_page == 2
    view.go_to_page(-1)
    assert store.current_page == 1

    view.go_to_page(2)
    view.search("test user 1")
    snapshot = view.render()
    assert snapshot.current_page == 1
    assert snapshot.search_query == "test user 1"
    assert {row.name for row in snapshot.rows} == {"Test User 1"} | {f"Test User {i}" for i in range(10, 20)}
    await view.unmount()


# ---------------------------------------------------------------------------
# Lifecycle and timers
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_mount_fetches_when_store_is_empty() -> None:
    source = FakeUserSource(users=make_users(2))
    view, store, _timer = await _mounted(source, preload=False)

    assert source.calls["fetch_all"] == 1
    assert store.user_count == 2
    await view.unmount()


@pytest.mark.asyncio
async def test_mount_skips_fetch_when_store_has_users() -> None:
    source = FakeUserSource(users=make_users(1))
    view, _store, _timer = await _mounted(source)

    assert source.calls["fetch_all"] == 1
    await view.unmount()


@pytest.mark.asyncio
async def test_refreshes_once_per_interval() -> None:
    source = FakeUserSource(users=make_users(1))
    view, _store, timer = await _mounted(source)

    assert "refresh_one" not in source.calls
    assert timer.delays == [30.0]

    await timer.advance()
    assert source.calls["refresh_one"] == 1

    await timer.advance()
    assert source.calls["refresh_one"] == 2
    await view.unmount()


@pytest.mark.asyncio
async def test_unmount_stops_refreshing() -> None:
    source = FakeUserSource(users=make_users(1))
    view, _store, timer = await _mounted(source)

    await timer.advance()
    assert source.calls["refresh_one"] == 1

    await view.unmount()
    assert view.is_mounted is False

    await timer.advance()
    await timer.advance()
    assert source.calls["refresh_one"] == 1


@pytest.mark.asyncio
async def test_refresh_results_show_up_highlighted() -> None:
    source = FakeUserSource(users=make_users(3))
    view, store, timer = await _mounted(source)
    source.refreshed = [store.users[0].model_copy(update={"score": 99})]

    await timer.advance()

    top = view.render().rows[0]
    assert (top.name, top.score, top.rank, top.highlighted) == ("Test User 1", 99, 1, True)
    await view.unmount()


@pytest.mark.asyncio
async def test_mount_twice_raises() -> None:
    view, _store, _timer = await _mounted(FakeUserSource(users=make_users(1)))

    with pytest.raises(RosterError):
        view.mount()
    await view.unmount()
