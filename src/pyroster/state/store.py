"""In-memory user roster store.

This is the only component allowed to mutate roster state. Views read the
derived projections, which are recomputed from the current state on every
access.
"""

from __future__ import annotations

import logging

from pyroster._constants import PAGE_SIZE, RECENT_UPDATES_LIMIT
from pyroster.models.user import User
from pyroster.source import UserSource
from pyroster.state.ranking import (
    clamp_page,
    filter_users,
    paginate,
    push_recent_update,
    rank_users,
    total_pages,
)

_logger = logging.getLogger(__name__)


def _describe_error(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


class UserStore:
    """Roster state with ranked, filtered and paginated projections.

    Usage::

        store = UserStore(SimulatedUserSource())
        await store.fetch_users()
        page = store.display_users
    """

    def __init__(
        self,
        source: UserSource,
        *,
        page_size: int = PAGE_SIZE,
        recent_updates_limit: int = RECENT_UPDATES_LIMIT,
    ) -> None:
        if page_size <= 0:
            raise ValueError(f"page_size must be positive, got {page_size}")
        if recent_updates_limit <= 0:
            raise ValueError(f"recent_updates_limit must be positive, got {recent_updates_limit}")
        self._source = source
        self._page_size = page_size
        self._recent_updates_limit = recent_updates_limit
        self._users: list[User] = []
        self._loading = False
        self._error: str | None = None
        self._last_updated_users: list[User] = []
        self._current_page = 1
        self._search_query = ""

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def users(self) -> list[User]:
        return list(self._users)

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def last_updated_users(self) -> list[User]:
        return list(self._last_updated_users)

    @property
    def current_page(self) -> int:
        return self._current_page

    @property
    def page_size(self) -> int:
        return self._page_size

    @property
    def search_query(self) -> str:
        return self._search_query

    # ------------------------------------------------------------------
    # Derived projections
    # ------------------------------------------------------------------

    @property
    def user_count(self) -> int:
        return len(self._users)

    @property
    def is_loading(self) -> bool:
        return self._loading

    @property
    def has_error(self) -> bool:
        return bool(self._error)

    @property
    def last_updated_user_ids(self) -> list[int]:
        return [user.id for user in self._last_updated_users]

    @property
    def ranked_users(self) -> list[User]:
        """All users ranked globally, independent of search and page."""
        return rank_users(self._users)

    @property
    def filtered_users(self) -> list[User]:
        return filter_users(self.ranked_users, self._search_query)

    @property
    def display_users(self) -> list[User]:
        """The current page of the filtered, ranked users."""
        return paginate(self.filtered_users, self._current_page, self._page_size)

    @property
    def total_pages(self) -> int:
        return total_pages(len(self.filtered_users), self._page_size)

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    async def fetch_users(self) -> None:
        """Replace the roster with a fresh collection from the source.

        A call made while a fetch is already in flight does nothing.
        """
        if self._loading:
            _logger.debug("fetch_users ignored: a fetch is already in flight")
            return
        self._loading = True
        self._error = None
        try:
            users = await self._source.fetch_all()
        except Exception as exc:
            self._error = _describe_error(exc)
            self._users = []
            self._current_page = 1
            _logger.warning("Fetching users failed: %s", self._error)
        else:
            self._users = list(users)
            self._search_query = ""
            self._current_page = 1
            self._last_updated_users = []
            _logger.debug("Fetched %d users", len(self._users))
        finally:
            self._loading = False

    async def refresh_user_scores(self) -> None:
        """Ask the source for one updated score and apply it.

        Failures are surfaced through :attr:`error`; the roster itself is
        left untouched.
        """
        self._error = None
        try:
            updated = await self._source.refresh_one(list(self._users))
        except Exception as exc:
            self._error = _describe_error(exc)
            _logger.warning("Refreshing user scores failed: %s", self._error)
            return
        if updated is None:
            return

        current = self._find(updated.id)
        if current is None:
            # Roster was replaced while the refresh was in flight.
            _logger.debug("Refreshed user %d no longer in roster", updated.id)
            return
        current.score = updated.score
        push_recent_update(self._last_updated_users, updated, limit=self._recent_updates_limit)
        _logger.debug("User %d score refreshed to %d", updated.id, updated.score)

    def update_user_score(self, user_id: int, new_score: int) -> None:
        """Set a user's score locally. Unknown ids are ignored."""
        user = self._find(user_id)
        if user is None:
            return
        user.score = new_score
        push_recent_update(self._last_updated_users, user.model_copy(), limit=self._recent_updates_limit)

    def set_current_page(self, page: int) -> None:
        self._current_page = clamp_page(page, self.total_pages)

    def set_search_query(self, query: str) -> None:
        self._search_query = query
        self._current_page = 1

    def _find(self, user_id: int) -> User | None:
        return next((user for user in self._users if user.id == user_id), None)
