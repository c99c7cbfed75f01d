"""Unit tests for draft persistence."""

# pylint: disable=missing-class-docstring,missing-function-docstring

import json

import pytest

from smart_case_lab.config import DRAFT_KEY
from smart_case_lab.errors import PersistenceError
from smart_case_lab.ledger import add_manual_column, remove_field, toggle_required
from smart_case_lab.storage import FileStore, load_draft, save_draft, snapshot
from smart_case_lab.table import build_table


def edited(table):
    table = add_manual_column(table, "Notes")
    table = remove_field(table, 1, "status")
    return toggle_required(table, "owner.email")


class TestSnapshot:

    def test_keys(self, list_table):
        data = snapshot(list_table)
        assert set(data) >= {
            "tableData", "currentJson", "manualHeaders", "requiredFields", "removedFieldsState", "timestamp",
        }
        assert data["tableData"]["headers"][0] == "Test Case Name"

    def test_removed_state_uses_string_indexes(self, list_table):
        assert snapshot(edited(list_table))["removedFieldsState"] == {"1": {"status": "inactive"}}


class TestDraftRoundTrip:

    def test_memory_store(self, store, list_table):
        table = edited(list_table)
        save_draft(store, table)
        loaded = load_draft(store)
        assert loaded.rows == table.rows
        assert loaded.columns == table.columns
        assert loaded.removed == {1: {"status": "inactive"}}
        assert loaded.required_fields == {"owner.email"}
        assert loaded.source_is_object is False
        assert loaded.schema.path_for("owner.name") == ("owner", "name")

    def test_file_store(self, tmp_path, sample_table):
        store = FileStore(tmp_path / "drafts")
        save_draft(store, sample_table)
        assert (tmp_path / "drafts" / f"{DRAFT_KEY}.json").exists()
        assert load_draft(store).rows == sample_table.rows

    def test_nothing_saved(self, store):
        assert load_draft(store) is None

    def test_digit_keys_survive(self, store):
        save_draft(store, build_table({"codes": {"0": "a"}}))
        assert load_draft(store).schema.path_for("codes.0") == ("codes", "0")


class TestCorruptedDraft:

    def test_invalid_json_is_kept(self, store):
        store.set(DRAFT_KEY, b"{not json")
        with pytest.raises(PersistenceError):
            load_draft(store)
        assert store.get(DRAFT_KEY) == b"{not json"

    def test_missing_table_data(self, store):
        store.set(DRAFT_KEY, json.dumps({"currentJson": {}}).encode())
        with pytest.raises(PersistenceError):
            load_draft(store)

    def test_not_an_object(self, store):
        store.set(DRAFT_KEY, b"[]")
        with pytest.raises(PersistenceError):
            load_draft(store)
