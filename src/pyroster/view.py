"""Headless users-list view.

The view reads projections from a :class:`~pyroster.state.store.UserStore`,
keeps per-row edit drafts, and owns the background refresh timer for as
long as it is mounted. Rendering produces a frozen :class:`RosterSnapshot`
(and optionally plain text), so any front end can draw it.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Coroutine
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from pyroster._constants import REFRESH_INTERVAL_S
from pyroster.exceptions import RosterError
from pyroster.source import SleepFn
from pyroster.state.store import UserStore

_logger = logging.getLogger(__name__)

RECENTLY_UPDATED_LABEL = "Recently Updated"


class RosterStatus(StrEnum):
    LOADING = "loading"
    ERROR = "error"
    EMPTY = "empty"
    READY = "ready"


class RowView(BaseModel):
    """One rendered roster row."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    user_id: int
    rank: int | None
    name: str
    email: str
    score: int
    highlighted: bool = False
    editing: bool = False
    draft_score: int | None = None


class RosterSnapshot(BaseModel):
    """Everything a front end needs to draw the roster at one instant."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    status: RosterStatus
    error: str | None = None
    total_users: int = 0
    current_page: int = 1
    total_pages: int = 1
    search_query: str = ""
    rows: list[RowView] = Field(default_factory=list)


class UsersListView:
    """Users list bound to a store.

    Usage::

        view = UsersListView(store)
        view.mount()
        ...
        await view.unmount()
    """

    def __init__(
        self,
        store: UserStore,
        *,
        refresh_interval: float = REFRESH_INTERVAL_S,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        if refresh_interval <= 0:
            raise ValueError(f"refresh_interval must be positive, got {refresh_interval}")
        self._store = store
        self._refresh_interval = refresh_interval
        self._sleep = sleep
        self._timer: asyncio.Task[None] | None = None
        self._pending: set[asyncio.Task[Any]] = set()
        self._drafts: dict[int, int] = {}

    @property
    def store(self) -> UserStore:
        return self._store

    @property
    def is_mounted(self) -> bool:
        return self._timer is not None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def mount(self) -> None:
        """Attach the view: fetch if the store is empty and start refreshing.

        Must be called from a running event loop.
        """
        if self._timer is not None:
            raise RosterError("View is already mounted")
        loop = asyncio.get_running_loop()
        if self._store.user_count == 0:
            self._spawn(self._store.fetch_users(), name="roster-fetch")
        self._timer = loop.create_task(self._refresh_loop(), name="roster-refresh-timer")
        _logger.debug("View mounted; refreshing every %.1fs", self._refresh_interval)

    async def unmount(self) -> None:
        """Stop the refresh timer. In-flight store calls are left to finish."""
        timer = self._timer
        self._timer = None
        if timer is None:
            return
        timer.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await timer
        _logger.debug("View unmounted")

    async def _refresh_loop(self) -> None:
        while True:
            await self._sleep(self._refresh_interval)
            self._spawn(self._store.refresh_user_scores(), name="roster-refresh")

    def _spawn(self, coro: Coroutine[Any, Any, None], *, name: str) -> None:
        task = asyncio.get_running_loop().create_task(coro, name=name)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    # ------------------------------------------------------------------
    # Edit mode
    # ------------------------------------------------------------------

    def is_editing(self, user_id: int) -> bool:
        return user_id in self._drafts

    def start_edit(self, user_id: int) -> None:
        """Open the score editor for *user_id*, seeded with the current score."""
        user = next((u for u in self._store.users if u.id == user_id), None)
        if user is None:
            raise KeyError(user_id)
        self._drafts[user_id] = user.score

    def set_draft(self, user_id: int, value: int | float | str) -> None:
        """Replace the draft score; raises ``ValueError`` unless *value* is integral."""
        if user_id not in self._drafts:
            raise KeyError(user_id)
        if isinstance(value, str):
            try:
                value = int(value.strip())
            except ValueError as exc:
                raise ValueError(f"score must be an integer, got {value!r}") from exc
        elif isinstance(value, float) and value.is_integer():
            value = int(value)
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"score must be an integer, got {value!r}")
        self._drafts[user_id] = value

    def save_edit(self, user_id: int) -> None:
        draft = self._drafts.pop(user_id)
        self._store.update_user_score(user_id, draft)

    def cancel_edit(self, user_id: int) -> None:
        self._drafts.pop(user_id, None)

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def go_to_page(self, page: int) -> None:
        self._store.set_current_page(page)

    def next_page(self) -> None:
        self._store.set_current_page(self._store.current_page + 1)

    def previous_page(self) -> None:
        self._store.set_current_page(self._store.current_page - 1)

    def search(self, query: str) -> None:
        self._store.set_search_query(query)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def _status(self) -> RosterStatus:
        store = self._store
        if store.is_loading:
            return RosterStatus.LOADING
        if store.has_error:
            return RosterStatus.ERROR
        if store.user_count == 0:
            return RosterStatus.EMPTY
        return RosterStatus.READY

    def render(self) -> RosterSnapshot:
        store = self._store
        status = self._status()
        rows: list[RowView] = []
        if status is RosterStatus.READY:
            recent_ids = set(store.last_updated_user_ids)
            for user in store.display_users:
                rows.append(
                    RowView(
                        user_id=user.id,
                        rank=user.rank,
                        name=user.name,
                        email=user.email,
                        score=user.score,
                        highlighted=user.id in recent_ids,
                        editing=user.id in self._drafts,
                        draft_score=self._drafts.get(user.id),
                    )
                )
        return RosterSnapshot(
            status=status,
            error=store.error,
            total_users=store.user_count,
            current_page=store.current_page,
            total_pages=store.total_pages,
            search_query=store.search_query,
            rows=rows,
        )

    def render_text(self) -> str:
        snapshot = self.render()
        if snapshot.status == RosterStatus.LOADING:
            return "Loading users..."
        if snapshot.status == RosterStatus.ERROR:
            return f"⚠️ Error: {snapshot.error}"
        if snapshot.status == RosterStatus.EMPTY:
            return "🤷 No users found"

        lines = [f"Total Users: {snapshot.total_users}"]
        if snapshot.search_query.strip():
            lines.append(f"Search: {snapshot.search_query.strip()}")
        lines.append(f"{'Rank':>4}  {'Name':<20} {'Email':<26} {'Score':>5}")
        for row in snapshot.rows:
            score = f"[{row.draft_score}]" if row.editing else str(row.score)
            line = f"{row.rank or '':>4}  {row.name:<20} {row.email:<26} {score:>5}"
            if row.highlighted:
                line += f"  {RECENTLY_UPDATED_LABEL}"
            lines.append(line)
        lines.append(f"Page {snapshot.current_page} of {snapshot.total_pages}")
        return "\n".join(lines)
