"""Tests for version history.

Tests cover:
- Version models and payload shapes
- VersionStore operations over both storage backends
- Rollback truncation and miss semantics
- Serialized concurrent appends
"""

import threading
from datetime import UTC

import pytest

from uiforge.ir import Explanation, LayoutNode, Plan

from .lib import ParentVersionMissingError, VersionStore
from .models import Version
from .storage import InMemoryStorage, SQLiteStorage

# =============================================================================
# Fixtures
# =============================================================================


def _plan(label: str) -> Plan:
    return Plan(
        intent=label,
        layout_tree=LayoutNode(type="Button", props={"children": label}),
    )


@pytest.fixture(params=["memory", "sqlite"])
def store(request, tmp_path):
    """A VersionStore over each storage backend."""
    if request.param == "memory":
        storage = InMemoryStorage()
    else:
        storage = SQLiteStorage(tmp_path / "history" / "versions.db")
    store = VersionStore(storage)
    yield store
    store.close()


@pytest.fixture
def four_versions(store):
    """Store holding versions A, B, C, D."""
    return [
        store.add_version(label, _plan(label), f"code {label}")
        for label in ("A", "B", "C", "D")
    ]


# =============================================================================
# Model Tests
# =============================================================================


class TestVersionModel:
    """Tests for Version and VersionSummary."""

    @pytest.mark.unit
    def test_create_assigns_id_and_timestamp(self):
        a = Version.create("x", _plan("x"), "code")
        b = Version.create("x", _plan("x"), "code")
        assert a.id != b.id
        assert a.timestamp.tzinfo is UTC

    @pytest.mark.unit
    def test_payload_without_explanation(self):
        version = Version.create("x", _plan("x"), "code")
        payload = version.to_payload()
        assert set(payload) == {"id", "code", "plan"}
        assert payload["plan"]["layoutTree"]["type"] == "Button"

    @pytest.mark.unit
    def test_payload_with_explanation(self):
        explanation = Explanation(summary="A button", components_used=["Button"])
        version = Version.create("x", _plan("x"), "code", explanation=explanation)
        assert version.to_payload()["explanation"]["componentsUsed"] == ["Button"]

    @pytest.mark.unit
    def test_summary_has_no_payload(self):
        version = Version.create("x", _plan("x"), "code", is_modification=True)
        data = version.summary().to_dict()
        assert set(data) == {"id", "timestamp", "userIntent", "isModification"}
        assert data["isModification"] is True

    @pytest.mark.unit
    def test_frozen(self):
        version = Version.create("x", _plan("x"), "code")
        with pytest.raises(AttributeError):
            version.code = "changed"


# =============================================================================
# VersionStore Tests
# =============================================================================


class TestVersionStore:
    """Tests for VersionStore operations."""

    @pytest.mark.unit
    def test_empty(self, store):
        assert store.get_latest_version() is None
        assert store.get_all_versions() == []
        assert store.get_history() == []
        assert len(store) == 0

    @pytest.mark.unit
    def test_add_and_get(self, store):
        explanation = Explanation(summary="s")
        version = store.add_version(
            "login", _plan("login"), "code", explanation=explanation
        )
        stored = store.get_version(version.id)
        assert stored.id == version.id
        assert stored.plan == version.plan
        assert stored.explanation == explanation
        assert stored.timestamp == version.timestamp
        assert store.get_latest_version().id == version.id

    @pytest.mark.unit
    def test_get_missing(self, store):
        assert store.get_version("nope") is None

    @pytest.mark.unit
    def test_modification_fields(self, store):
        first = store.add_version("a", _plan("a"), "code a")
        second = store.add_version(
            "b", _plan("b"), "code b", is_modification=True, parent_id=first.id
        )
        stored = store.get_version(second.id)
        assert stored.is_modification
        assert stored.parent_id == first.id

    @pytest.mark.unit
    def test_chronological_order(self, store, four_versions):
        assert [v.id for v in store.get_all_versions()] == [v.id for v in four_versions]
        assert [s.user_intent for s in store.get_history()] == ["A", "B", "C", "D"]
        assert store.count() == 4

    @pytest.mark.unit
    def test_rollback_truncates(self, store, four_versions):
        a, b, c, d = four_versions
        target = store.rollback_to_version(b.id)
        assert target.id == b.id
        assert [v.id for v in store.get_all_versions()] == [a.id, b.id]
        assert store.get_latest_version().id == b.id
        assert store.get_version(c.id) is None
        assert store.get_version(d.id) is None

    @pytest.mark.unit
    def test_rollback_to_latest_is_noop(self, store, four_versions):
        assert store.rollback_to_version(four_versions[-1].id).id == four_versions[-1].id
        assert store.count() == 4

    @pytest.mark.unit
    def test_rollback_miss_does_not_mutate(self, store, four_versions):
        before = [v.id for v in store.get_all_versions()]
        latest = store.get_latest_version().id
        assert store.rollback_to_version("missing") is None
        assert [v.id for v in store.get_all_versions()] == before
        assert store.get_latest_version().id == latest

    @pytest.mark.unit
    def test_append_after_rollback(self, store, four_versions):
        a, b, _, _ = four_versions
        store.rollback_to_version(a.id)
        e = store.add_version("E", _plan("E"), "code E")
        assert [v.id for v in store.get_all_versions()] == [a.id, e.id]

    @pytest.mark.unit
    def test_clear(self, store, four_versions):
        store.clear()
        assert store.count() == 0
        assert store.get_latest_version() is None

    @pytest.mark.unit
    def test_history_matches_versions(self, store, four_versions):
        history = store.get_history()
        assert history == [v.summary() for v in four_versions]

    @pytest.mark.unit
    def test_missing_parent_rejected(self, store, four_versions):
        store.rollback_to_version(four_versions[0].id)
        with pytest.raises(ParentVersionMissingError) as excinfo:
            store.add_version(
                "E", _plan("E"), "code E", is_modification=True, parent_id=four_versions[2].id
            )
        assert excinfo.value.parent_id == four_versions[2].id
        assert store.count() == 1

    @pytest.mark.unit
    def test_concurrent_appends_serialized(self, store):
        def add(n: int) -> None:
            for i in range(10):
                store.add_version(f"{n}-{i}", _plan("t"), "code")

        threads = [threading.Thread(target=add, args=(n,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        ids = [v.id for v in store.get_all_versions()]
        assert len(ids) == 40
        assert len(set(ids)) == 40


class TestPersistence:
    """Tests for the SQLite backend across store instances."""

    @pytest.mark.unit
    def test_reopen(self, tmp_path):
        db = tmp_path / "versions.db"
        first = VersionStore(SQLiteStorage(db))
        version = first.add_version("a", _plan("a"), "code a")
        first.close()

        second = VersionStore(SQLiteStorage(db))
        assert second.get_latest_version().id == version.id
        second.close()

    @pytest.mark.unit
    def test_history_skips_payload_columns(self, tmp_path):
        storage = SQLiteStorage(tmp_path / "versions.db")
        store = VersionStore(storage)
        version = store.add_version("a", _plan("a"), "code a")
        conn = storage._get_conn()
        conn.execute("UPDATE versions SET plan = 'not json'")
        conn.commit()

        assert [s.id for s in store.get_history()] == [version.id]
        with pytest.raises(ValueError):
            store.get_all_versions()
        store.close()

    @pytest.mark.unit
    def test_uninitialized_storage_raises(self, tmp_path):
        storage = SQLiteStorage(tmp_path / "x.db")
        with pytest.raises(RuntimeError, match="not initialized"):
            storage.ids()

    @pytest.mark.unit
    def test_from_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv("UIFORGE_VERSION_DB", str(tmp_path / "env.db"))
        store = VersionStore.from_environment()
        store.add_version("a", _plan("a"), "code")
        store.close()
        assert (tmp_path / "env.db").exists()

    @pytest.mark.unit
    def test_from_environment_defaults_to_memory(self, monkeypatch):
        monkeypatch.delenv("UIFORGE_VERSION_DB", raising=False)
        store = VersionStore.from_environment()
        assert isinstance(store._storage, InMemoryStorage)
