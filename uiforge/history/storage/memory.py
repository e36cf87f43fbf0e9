"""In-memory storage backend for version history.

Process-lifetime storage; the default for VersionStore and for tests.
"""

from ..models import Version, VersionSummary


class InMemoryStorage:
    """Dictionary-backed storage with an ordered ID list."""

    def __init__(self) -> None:
        self._versions: dict[str, Version] = {}
        self._order: list[str] = []

    def initialize(self) -> None:
        """Nothing to set up."""

    def close(self) -> None:
        """Nothing to release."""

    def append(self, version: Version) -> Version:
        if version.id in self._versions:
            raise ValueError(f"Duplicate version id: {version.id}")
        self._versions[version.id] = version
        self._order.append(version.id)
        return version

    def get(self, version_id: str) -> Version | None:
        return self._versions.get(version_id)

    def ids(self) -> list[str]:
        return list(self._order)

    def list_versions(self) -> list[Version]:
        return [self._versions[vid] for vid in self._order]

    def list_summaries(self) -> list[VersionSummary]:
        return [self._versions[vid].summary() for vid in self._order]

    def truncate_after(self, version_id: str) -> list[str] | None:
        if version_id not in self._versions:
            return None
        index = self._order.index(version_id)
        removed = self._order[index + 1 :]
        del self._order[index + 1 :]
        for vid in removed:
            del self._versions[vid]
        return removed

    def clear(self) -> None:
        self._versions.clear()
        self._order.clear()

    def count(self) -> int:
        return len(self._order)
