"""Tests for the Building Selection Store."""

import logging

from dashboard_kernel.selection.store import (
    SELECTED_BUILDING_KEY,
    BuildingSelectionStore,
    MemoryKeyValueStore,
    SqliteKeyValueStore,
)


class TestBuildingSelectionStore:
    def setup_method(self):
        self.backend = MemoryKeyValueStore()
        self.store = BuildingSelectionStore(self.backend)

    def test_absent_selection(self):
        assert self.store.get() is None

    def test_set_then_get(self):
        self.store.set("Chicago")
        assert self.store.get() == "Chicago"

    def test_stored_as_json_record_under_fixed_key(self):
        self.store.set("Chicago")
        assert self.backend.get_item(SELECTED_BUILDING_KEY) == '{"value":"Chicago"}'

    def test_reads_record_written_by_other_clients(self):
        self.backend.set_item(SELECTED_BUILDING_KEY, '{"value": "Seattle", "label": "Seattle"}')
        assert self.store.get() == "Seattle"

    def test_non_json_content_is_absent(self, caplog):
        self.backend.set_item(SELECTED_BUILDING_KEY, "not json {")
        with caplog.at_level(logging.WARNING):
            assert self.store.get() is None
        assert "malformed stored building selection" in caplog.text

    def test_wrong_shape_is_absent(self):
        for raw in ('"Dallas"', "[]", '{"other": 1}', '{"value": ""}', '{"value": "   "}', '{"value": 42}'):
            self.backend.set_item(SELECTED_BUILDING_KEY, raw)
            assert self.store.get() is None, raw

    def test_custom_key(self):
        store = BuildingSelectionStore(self.backend, key="dashboard.building")
        store.set("Austin")
        assert self.backend.get_item("dashboard.building") is not None
        assert self.store.get() is None


class TestSqliteKeyValueStore:
    def test_persists_across_connections(self, tmp_path):
        db_path = str(tmp_path / "dashboard.db")
        first = BuildingSelectionStore(SqliteKeyValueStore(db_path))
        first.set("Dallas")
        first.set("Seattle")
        first.backend.close()

        second = BuildingSelectionStore(SqliteKeyValueStore(db_path))
        assert second.get() == "Seattle"

    def test_unreadable_database_is_absent(self, caplog):
        backend = SqliteKeyValueStore(":memory:")
        store = BuildingSelectionStore(backend)
        store.set("Dallas")
        backend.close()
        with caplog.at_level(logging.WARNING):
            assert store.get() is None
        assert "unreadable" in caplog.text
