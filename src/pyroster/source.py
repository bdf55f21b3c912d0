"""User sources feeding the roster store.

The store only depends on the :class:`UserSource` protocol. The bundled
:class:`SimulatedUserSource` stands in for a remote API: every call
sleeps for a random latency and may fail with a synthetic network error.
"""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable, Sequence
from typing import Protocol, runtime_checkable

from pyroster._constants import SIMULATED_FAILURE_MESSAGE
from pyroster.config import RosterConfig
from pyroster.exceptions import RosterSourceError
from pyroster.models.user import User

_logger = logging.getLogger(__name__)

SleepFn = Callable[[float], Awaitable[None]]


@runtime_checkable
class UserSource(Protocol):
    """Async provider of roster data."""

    async def fetch_all(self) -> list[User]:
        """Return the full user collection."""
        ...

    async def refresh_one(self, users: Sequence[User]) -> User | None:
        """Return an updated copy of one user from *users*, or ``None``."""
        ...


class SimulatedUserSource:
    """Fake remote source with randomized latency and failure injection.

    Usage::

        source = SimulatedUserSource(RosterConfig(min_delay_ms=0, max_delay_ms=0))
        users = await source.fetch_all()
    """

    def __init__(
        self,
        config: RosterConfig | None = None,
        *,
        rng: random.Random | None = None,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self._config = config or RosterConfig()
        self._rng = rng or random.Random()
        self._sleep = sleep

    def _delay_seconds(self) -> float:
        delay_ms = self._rng.randint(self._config.min_delay_ms, self._config.max_delay_ms)
        return delay_ms / 1000.0

    def _random_score(self) -> int:
        return self._rng.randrange(self._config.max_score)

    async def fetch_all(self) -> list[User]:
        delay = self._delay_seconds()
        await self._sleep(delay)
        if self._rng.random() < self._config.failure_rate:
            raise RosterSourceError(SIMULATED_FAILURE_MESSAGE, operation="fetch_all")

        users = [
            User(
                id=i,
                name=f"User {i}",
                email=f"email{i}@gmail.com",
                score=self._random_score(),
            )
            for i in range(self._config.user_count)
        ]
        _logger.debug("Simulated fetch returned %d users after %.3fs", len(users), delay)
        return users

    async def refresh_one(self, users: Sequence[User]) -> User | None:
        delay = self._delay_seconds()
        await self._sleep(delay)
        if self._rng.random() < self._config.refresh_failure_rate:
            raise RosterSourceError(SIMULATED_FAILURE_MESSAGE, operation="refresh_one")

        if self._config.user_count == 0:
            return None
        random_id = self._rng.randrange(self._config.user_count)
        new_score = self._random_score()
        target = next((user for user in users if user.id == random_id), None)
        if target is None:
            _logger.debug("Simulated refresh picked id %d, not present in %d users", random_id, len(users))
            return None
        _logger.debug("Simulated refresh: user %d score %d -> %d", random_id, target.score, new_score)
        return target.model_copy(update={"score": new_score})
