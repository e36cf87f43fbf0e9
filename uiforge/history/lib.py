"""Version Store for uiforge.

Append-only history of accepted versions with linear rollback. Each store
instance owns its storage and a re-entrant lock; appends, rollbacks and
clears are mutually exclusive, so concurrent requests never observe an
interleaved history.
"""

import logging
import threading
from pathlib import Path

from uiforge.config import EnvVar, get_environment
from uiforge.ir import Explanation, Plan

from .models import Version, VersionSummary
from .storage import InMemoryStorage, SQLiteStorage
from .storage.protocol import VersionStorage

logger = logging.getLogger(__name__)


class ParentVersionMissingError(LookupError):
    """The parent of a new version is no longer in the history."""

    def __init__(self, parent_id: str):
        super().__init__(f"Parent version {parent_id} is no longer in the history")
        self.parent_id = parent_id


class VersionStore:
    """Linear version history with destructive rollback.

    State machine per version: created, then current or historical, then
    removed when a rollback truncates past it. Versions are never edited.

    Example:
        >>> store = VersionStore()
        >>> v1 = store.add_version("login form", plan, code)
        >>> v2 = store.add_version("add a footer", plan2, code2, is_modification=True, parent_id=v1.id)
        >>> store.rollback_to_version(v1.id).id == v1.id
        True
        >>> store.get_version(v2.id) is None
        True

    Args:
        storage: Storage backend. Defaults to InMemoryStorage.
    """

    def __init__(self, storage: VersionStorage | None = None):
        self._storage = storage if storage is not None else InMemoryStorage()
        self._storage.initialize()
        self._lock = threading.RLock()

    @classmethod
    def from_environment(cls, db_path: Path | str | None = None) -> "VersionStore":
        """Create a store from ``UIFORGE_VERSION_DB``.

        Args:
            db_path: Explicit database path, overriding the environment.

        Returns:
            SQLite-backed store when a path is configured, in-memory otherwise.
        """
        path = get_environment(EnvVar.VERSION_DB, override=db_path)
        if path is None:
            return cls()
        return cls(SQLiteStorage(path))

    def close(self) -> None:
        """Release the storage backend."""
        with self._lock:
            self._storage.close()

    # =========================================================================
    # Mutations
    # =========================================================================

    def add_version(
        self,
        user_intent: str,
        plan: Plan,
        code: str,
        explanation: Explanation | None = None,
        is_modification: bool = False,
        parent_id: str | None = None,
    ) -> Version:
        """Record a new version at the end of the history.

        Callers must have passed the tree and static validation gates; no
        validation happens here. ``parent_id``, when given, must still be in
        the history at append time.

        Returns:
            The created Version with a fresh ID and timestamp.

        Raises:
            ParentVersionMissingError: ``parent_id`` is not in the history.
        """
        version = Version.create(
            user_intent=user_intent,
            plan=plan,
            code=code,
            explanation=explanation,
            is_modification=is_modification,
            parent_id=parent_id,
        )
        with self._lock:
            if parent_id is not None and self._storage.get(parent_id) is None:
                raise ParentVersionMissingError(parent_id)
            self._storage.append(version)
        logger.info(f"Stored version {version.id} (modification={is_modification})")
        return version

    def rollback_to_version(self, version_id: str) -> Version | None:
        """Make ``version_id`` the latest version.

        Every later version is permanently discarded; there is no redo.

        Returns:
            The target Version, or None if it is not in the history. A miss
            leaves the history untouched.
        """
        with self._lock:
            target = self._storage.get(version_id)
            if target is None:
                logger.warning(f"Rollback target {version_id} not found")
                return None
            removed = self._storage.truncate_after(version_id)

        logger.info(f"Rolled back to {version_id}, discarded {len(removed or [])} version(s)")
        return target

    def clear(self) -> None:
        """Empty the store (test and reset contexts only)."""
        with self._lock:
            self._storage.clear()

    # =========================================================================
    # Lookups
    # =========================================================================

    def get_version(self, version_id: str) -> Version | None:
        """Get a version by ID, or None if absent."""
        with self._lock:
            return self._storage.get(version_id)

    def get_latest_version(self) -> Version | None:
        """The current version, or None when the history is empty."""
        with self._lock:
            ids = self._storage.ids()
            if not ids:
                return None
            return self._storage.get(ids[-1])

    def get_all_versions(self) -> list[Version]:
        """All versions in chronological order."""
        with self._lock:
            return self._storage.list_versions()

    def get_history(self) -> list[VersionSummary]:
        """Lightweight metadata for every version, in chronological order."""
        with self._lock:
            return self._storage.list_summaries()

    def count(self) -> int:
        """Number of versions in the history."""
        with self._lock:
            return self._storage.count()

    def __len__(self) -> int:
        return self.count()


__all__ = ["VersionStore", "ParentVersionMissingError"]
