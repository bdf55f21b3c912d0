#!/usr/bin/env python3
"""Run the user roster against the simulated source and print it.

The script mounts a users-list view, waits for the initial fetch, then
reprints the current page every time the background refresh changes the
roster, until the duration elapses.

Usage
-----
Optionally tune the simulation through ``ROSTER_*`` environment variables
and run::

    python scripts/roster_console.py

Options::

    --search TEXT          Filter users by name
    --page N               Page to display
    --duration SECONDS     How long to keep the view mounted (default: 5)
    --refresh-interval S   Seconds between score refreshes (overrides env)
    --fast                 Use zero simulated latency
    --seed N               Seed the simulated source for reproducible runs
    --edit ID=SCORE        Apply a manual score edit after loading (repeatable)
    --verbose, -v          Enable debug logging
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import random
import sys
from pathlib import Path
from typing import Any

_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from pyroster import RosterConfig, SimulatedUserSource, UsersListView, UserStore  # noqa: E402


def _parse_edit(value: str) -> tuple[int, int]:
    user_id, sep, score = value.partition("=")
    if not sep:
        raise argparse.ArgumentTypeError(f"expected ID=SCORE, got {value!r}")
    try:
        return int(user_id), int(score)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected integers in ID=SCORE, got {value!r}") from exc


async def _wait_for_load(store: UserStore, timeout: float) -> None:
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    # The view schedules the fetch on mount; give it a tick to start.
    await asyncio.sleep(0)
    while store.is_loading and loop.time() < deadline:
        await asyncio.sleep(0.05)


async def main() -> None:
    parser = argparse.ArgumentParser(
        description="Show the simulated user roster with ranking, search and pagination.",
    )
    parser.add_argument("--search", default="", help="Filter users by name")
    parser.add_argument("--page", type=int, default=1, help="Page to display")
    parser.add_argument("--duration", type=float, default=5.0, help="Seconds to keep the view mounted")
    parser.add_argument("--refresh-interval", type=float, help="Seconds between score refreshes")
    parser.add_argument("--fast", action="store_true", help="Use zero simulated latency")
    parser.add_argument("--seed", type=int, help="Seed for the simulated source")
    parser.add_argument("--edit", action="append", type=_parse_edit, default=[], metavar="ID=SCORE")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    overrides: dict[str, Any] = {}
    if args.fast:
        overrides.update(min_delay_ms=0, max_delay_ms=0)
    if args.refresh_interval is not None:
        overrides["refresh_interval"] = args.refresh_interval
    config = RosterConfig.from_env(**overrides)

    rng = random.Random(args.seed) if args.seed is not None else None
    source = SimulatedUserSource(config, rng=rng)
    store = UserStore(source, page_size=config.page_size, recent_updates_limit=config.recent_updates_limit)
    view = UsersListView(store, refresh_interval=config.refresh_interval)

    view.mount()
    try:
        await _wait_for_load(store, timeout=config.max_delay_ms / 1000.0 + 1.0)

        for user_id, score in args.edit:
            store.update_user_score(user_id, score)
        if args.search:
            view.search(args.search)
        view.go_to_page(args.page)

        print(view.render_text())
        last_seen = ([(u.id, u.score) for u in store.last_updated_users], store.error)

        loop = asyncio.get_running_loop()
        deadline = loop.time() + args.duration
        while loop.time() < deadline:
            await asyncio.sleep(0.1)
            current = ([(u.id, u.score) for u in store.last_updated_users], store.error)
            if current != last_seen:
                last_seen = current
                print()
                print(view.render_text())
    finally:
        await view.unmount()


if __name__ == "__main__":
    asyncio.run(main())
