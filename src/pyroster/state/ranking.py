"""Deterministic roster derivations.

Pure functions only: the store owns the state, these compute the ranked,
filtered and paged projections from it.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence

from pyroster.models.user import User


def rank_users(users: Iterable[User]) -> list[User]:
    """Return ranked copies of *users*, best score first.

    Ranks are dense: every distinct score gets one rank, starting at 1
    for the highest score. Users sharing a score share a rank and are
    ordered by name.
    """
    ordered = sorted(users, key=lambda user: (-user.score, user.name))

    groups: dict[int, list[User]] = {}
    for user in ordered:
        groups.setdefault(user.score, []).append(user)

    ranked: list[User] = []
    for rank, score in enumerate(sorted(groups, reverse=True), start=1):
        for user in sorted(groups[score], key=lambda u: u.name):
            ranked.append(user.model_copy(update={"rank": rank}))
    return ranked


def normalize_query(query: str) -> str:
    return query.strip().lower()


def filter_users(users: Sequence[User], query: str) -> list[User]:
    """Keep users whose name contains *query*, case-insensitively."""
    needle = normalize_query(query)
    if not needle:
        return list(users)
    return [user for user in users if needle in user.name.lower()]


def total_pages(count: int, page_size: int) -> int:
    """Number of pages needed for *count* items; never less than 1."""
    return max(1, math.ceil(count / page_size))


def clamp_page(page: int, pages: int) -> int:
    return max(1, min(page, max(1, pages)))


def paginate(users: Sequence[User], page: int, page_size: int) -> list[User]:
    start = (page - 1) * page_size
    return list(users[start : start + page_size])


def push_recent_update(log: list[User], user: User, *, limit: int) -> None:
    """Record *user* as the most recent update in *log*.

    An existing entry with the same id is moved rather than duplicated,
    and the oldest entries are dropped once *limit* is exceeded.
    """
    log[:] = [entry for entry in log if entry.id != user.id]
    log.append(user)
    while len(log) > limit:
        log.pop(0)
