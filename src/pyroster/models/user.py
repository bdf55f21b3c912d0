"""User roster model."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class User(BaseModel):
    """A single roster entry.

    Parameters
    ----------
    id : int
        Unique, stable user identifier.
    name : str
        Display name; used for search and as the ranking tie-break.
    email : str
        Contact address.
    score : int
        Current score. Mutated in place by refreshes and manual edits.
    rank : int or None
        Dense rank derived from the score. Only set on ranked copies
        produced by the store; never authoritative input.
    """

    model_config = ConfigDict(
        extra="forbid",
        validate_assignment=True,
    )

    id: int
    name: str
    email: str
    score: int
    rank: int | None = Field(default=None, ge=1)
