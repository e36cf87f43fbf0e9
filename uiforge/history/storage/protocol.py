"""Storage protocol for version history.

Defines the interface that all storage backends must implement.
"""

from typing import Protocol

from ..models import Version, VersionSummary


class VersionStorage(Protocol):
    """Protocol defining the storage interface for version history.

    All storage backends (in-memory, SQLite) must implement this interface
    to be compatible with VersionStore. Backends are not required to be
    thread-safe; VersionStore serializes access.
    """

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def initialize(self) -> None:
        """Initialize storage (create tables, etc.)."""
        ...

    def close(self) -> None:
        """Close storage connections and clean up resources."""
        ...

    # =========================================================================
    # Version Operations
    # =========================================================================

    def append(self, version: Version) -> Version:
        """Append a version at the end of the history.

        Args:
            version: Version to store.

        Returns:
            The stored version.
        """
        ...

    def get(self, version_id: str) -> Version | None:
        """Get a version by ID.

        Returns:
            Version if found, None otherwise.
        """
        ...

    def ids(self) -> list[str]:
        """Version IDs in chronological order."""
        ...

    def list_versions(self) -> list[Version]:
        """All versions in chronological order."""
        ...

    def list_summaries(self) -> list[VersionSummary]:
        """Listing metadata in chronological order, without plan or code."""
        ...

    def truncate_after(self, version_id: str) -> list[str] | None:
        """Remove every version positioned after ``version_id``.

        Returns:
            Removed IDs in chronological order, or None (with nothing
            removed) if ``version_id`` is not in the history.
        """
        ...

    def clear(self) -> None:
        """Remove every version."""
        ...

    def count(self) -> int:
        """Number of stored versions."""
        ...
