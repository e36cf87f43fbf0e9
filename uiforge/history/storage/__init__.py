"""Storage backends for version history.

Available backends:
- InMemoryStorage: Process-lifetime storage (default, used in tests)
- SQLiteStorage: File-based SQLite database
"""

from .memory import InMemoryStorage
from .protocol import VersionStorage
from .sqlite import SQLiteStorage

__all__ = [
    "VersionStorage",
    "InMemoryStorage",
    "SQLiteStorage",
]
