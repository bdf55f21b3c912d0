"""Roster configuration for pyroster."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pyroster._constants import (
    FAILURE_RATE,
    MAX_DELAY_MS,
    MAX_SCORE,
    MIN_DELAY_MS,
    PAGE_SIZE,
    RECENT_UPDATES_LIMIT,
    REFRESH_INTERVAL_S,
    USERS_AMOUNT,
)
from pyroster.exceptions import RosterConfigError


@dataclasses.dataclass(frozen=True)
class RosterConfig:
    """Roster configuration.

    Parameters
    ----------
    user_count : int
        Number of users generated by the simulated source on every fetch.
    max_score : int
        Exclusive upper bound for randomly generated scores.
    min_delay_ms : int
        Lower bound of the simulated latency, in milliseconds.
    max_delay_ms : int
        Upper bound of the simulated latency, in milliseconds.
    failure_rate : float
        Probability (0-1) that a simulated fetch fails.
    refresh_failure_rate : float
        Probability (0-1) that a simulated single-user refresh fails.
        Defaults to ``0`` so refreshes only fail when asked to.
    page_size : int
        Number of users per displayed page.
    refresh_interval : float
        Seconds between background score refreshes while a view is mounted.
    recent_updates_limit : int
        Maximum number of entries kept in the recent-updates log.
    """

    user_count: int = USERS_AMOUNT
    max_score: int = MAX_SCORE
    min_delay_ms: int = MIN_DELAY_MS
    max_delay_ms: int = MAX_DELAY_MS
    failure_rate: float = FAILURE_RATE
    refresh_failure_rate: float = 0.0
    page_size: int = PAGE_SIZE
    refresh_interval: float = REFRESH_INTERVAL_S
    recent_updates_limit: int = RECENT_UPDATES_LIMIT

    def __post_init__(self) -> None:
        if self.user_count < 0:
            raise RosterConfigError(f"user_count must be >= 0, got {self.user_count}")
        if self.max_score <= 0:
            raise RosterConfigError(f"max_score must be positive, got {self.max_score}")
        if self.min_delay_ms < 0 or self.max_delay_ms < self.min_delay_ms:
            raise RosterConfigError(
                f"delay range must satisfy 0 <= min <= max, got [{self.min_delay_ms}, {self.max_delay_ms}]"
            )
        for name in ("failure_rate", "refresh_failure_rate"):
            rate = getattr(self, name)
            if not 0.0 <= rate <= 1.0:
                raise RosterConfigError(f"{name} must be between 0 and 1, got {rate}")
        if self.page_size <= 0:
            raise RosterConfigError(f"page_size must be positive, got {self.page_size}")
        if self.refresh_interval <= 0:
            raise RosterConfigError(f"refresh_interval must be positive, got {self.refresh_interval}")
        if self.recent_updates_limit <= 0:
            raise RosterConfigError(f"recent_updates_limit must be positive, got {self.recent_updates_limit}")

    @classmethod
    def from_env(cls, **overrides: Any) -> RosterConfig:
        """Create configuration from environment variables.

        Reads the optional ``ROSTER_*`` variables. Explicit keyword
        arguments override environment values.

        Parameters
        ----------
        **overrides
            Explicit field values that take precedence over env vars.

        Returns
        -------
        RosterConfig
            Populated configuration.
        """
        env = os.environ

        _ENV_INT_MAP = {
            "ROSTER_USER_COUNT": "user_count",
            "ROSTER_MAX_SCORE": "max_score",
            "ROSTER_MIN_DELAY_MS": "min_delay_ms",
            "ROSTER_MAX_DELAY_MS": "max_delay_ms",
            "ROSTER_PAGE_SIZE": "page_size",
            "ROSTER_RECENT_UPDATES_LIMIT": "recent_updates_limit",
        }
        _ENV_FLOAT_MAP = {
            "ROSTER_FAILURE_RATE": "failure_rate",
            "ROSTER_REFRESH_FAILURE_RATE": "refresh_failure_rate",
            "ROSTER_REFRESH_INTERVAL": "refresh_interval",
        }

        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_INT_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                try:
                    config_kwargs[field_name] = int(val)
                except ValueError as exc:
                    raise RosterConfigError(f"{env_key} must be an integer, got {val!r}") from exc
        for env_key, field_name in _ENV_FLOAT_MAP.items():
            val = env.get(env_key)
            if val is not None and field_name not in overrides:
                try:
                    config_kwargs[field_name] = float(val)
                except ValueError as exc:
                    raise RosterConfigError(f"{env_key} must be a number, got {val!r}") from exc

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
