"""pyroster - Async user roster with ranking, search and pagination."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyroster")
except PackageNotFoundError:
    __version__ = "0+local"
from pyroster.config import RosterConfig
from pyroster.exceptions import RosterConfigError, RosterError, RosterSourceError
from pyroster.models import User
from pyroster.source import SimulatedUserSource, UserSource
from pyroster.state.store import UserStore
from pyroster.view import RosterSnapshot, RosterStatus, RowView, UsersListView

__all__ = [
    "__version__",
    "RosterConfig",
    "RosterConfigError",
    "RosterError",
    "RosterSnapshot",
    "RosterSourceError",
    "RosterStatus",
    "RowView",
    "SimulatedUserSource",
    "User",
    "UserSource",
    "UserStore",
    "UsersListView",
]
