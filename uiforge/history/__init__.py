"""Version history for uiforge.

Provides the append-only version store with linear rollback and its
pluggable storage backends.

Example:
    >>> from uiforge.history import VersionStore
    >>> store = VersionStore()
    >>> version = store.add_version("login form", plan, code)
    >>> [entry.to_dict() for entry in store.get_history()]
"""

from .lib import ParentVersionMissingError, VersionStore
from .models import Version, VersionSummary
from .storage import InMemoryStorage, SQLiteStorage, VersionStorage

__all__ = [
    # Main interface
    "VersionStore",
    "ParentVersionMissingError",
    # Models
    "Version",
    "VersionSummary",
    # Storage
    "VersionStorage",
    "InMemoryStorage",
    "SQLiteStorage",
]
