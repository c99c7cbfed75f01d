"""Unit tests for row and cell operations on the table."""

# pylint: disable=missing-class-docstring,missing-function-docstring

import pytest

from smart_case_lab import RESERVED_COLUMN
from smart_case_lab.cells import CellKind, classify_cell
from smart_case_lab.errors import StateError
from smart_case_lab.ledger import (
    add_manual_column,
    add_row,
    bulk_add_rows,
    copy_from_previous,
    delete_row,
    edit_cell,
    generate_cell,
    generate_row,
    remove_field,
    toggle_required,
    undo_remove_field,
)
from smart_case_lab.table import TestCaseTable, build_table


def names(table):
    return [row[RESERVED_COLUMN] for row in table.rows]


class TestEditCell:

    def test_replaces_value(self, sample_table):
        table = edit_cell(sample_table, 0, "name", "Renamed")
        assert table.rows[0]["name"] == "Renamed"
        assert sample_table.rows[0]["name"] == "Test Item"

    def test_blank_name_uses_row_position(self, list_table):
        table = edit_cell(list_table, 1, RESERVED_COLUMN, "   ")
        assert table.rows[1][RESERVED_COLUMN] == "TC_02"

    def test_blank_name_ignores_max_rule(self):
        table = build_table([{"a": 1}, {"a": 2}, {"a": 3}])
        table = edit_cell(table, 2, RESERVED_COLUMN, "TC_09")
        table = edit_cell(table, 0, RESERVED_COLUMN, "")
        assert names(table) == ["TC_01", "TC_02", "TC_09"]

    def test_unknown_column(self, sample_table):
        with pytest.raises(StateError):
            edit_cell(sample_table, 0, "missing", "x")

    def test_row_out_of_range(self, sample_table):
        with pytest.raises(StateError):
            edit_cell(sample_table, 3, "name", "x")

    def test_removed_cell_cannot_be_edited(self, sample_table):
        table = remove_field(sample_table, 0, "name")
        with pytest.raises(StateError):
            edit_cell(table, 0, "name", "x")


class TestAddRow:

    def test_next_name_and_blank_values(self, sample_table):
        table = add_row(sample_table)
        assert names(table) == ["TC_01", "TC_02"]
        new_row = table.rows[1]
        assert all(new_row[c] == "" for c in table.columns if c != RESERVED_COLUMN)

    def test_gap_tolerant(self):
        table = build_table([{"a": 1}, {"a": 2}, {"a": 3}])
        table = delete_row(table, 1)
        assert names(table) == ["TC_01", "TC_03"]
        assert names(add_row(table))[-1] == "TC_04"

    def test_no_columns(self):
        with pytest.raises(StateError):
            add_row(build_table([]))

    def test_manual_column_is_enough(self):
        table = add_manual_column(build_table([]), "Notes")
        table = add_row(table)
        assert table.rows[-1] == {RESERVED_COLUMN: "TC_02", "Notes": ""}


class TestDeleteRow:

    def test_add_then_delete_restores_table(self, sample_table):
        table = delete_row(add_row(sample_table), 1)
        assert table.rows == sample_table.rows
        assert table.columns == sample_table.columns

    def test_names_are_not_renumbered(self, list_table):
        table = delete_row(list_table, 0)
        assert names(table) == ["TC_02"]

    def test_removal_entries_shift(self):
        table = build_table([{"a": 1}, {"a": 2}, {"a": 3}])
        table = remove_field(table, 0, "a")
        table = remove_field(table, 2, "a")
        table = delete_row(table, 1)
        assert table.removed == {0: {"a": 1}, 1: {"a": 3}}
        restored = undo_remove_field(table, 1, "a")
        assert restored.rows[1]["a"] == 3

    def test_entries_of_deleted_row_are_dropped(self, list_table):
        table = remove_field(list_table, 0, "status")
        table = delete_row(table, 0)
        assert table.removed == {}


class TestCopyFromPrevious:

    def test_copies_everything_but_name(self, list_table):
        table = copy_from_previous(list_table, 1)
        assert table.rows[1][RESERVED_COLUMN] == "TC_02"
        assert table.rows[1]["owner.name"] == "Ann"
        assert table.rows[1]["status"] == "active"

    @pytest.mark.parametrize("row_index", [0, 5, -1])
    def test_invalid_row(self, list_table, row_index):
        with pytest.raises(StateError):
            copy_from_previous(list_table, row_index)

    def test_restores_removed_cells_of_target(self, list_table):
        table = remove_field(list_table, 1, "status")
        table = copy_from_previous(table, 1)
        assert table.rows[1]["status"] == "active"
        assert table.removed == {}


class TestManualColumns:

    def test_initialized_in_every_row(self, list_table):
        table = add_manual_column(list_table, "Notes")
        assert table.manual_columns == ("Notes",)
        assert [row["Notes"] for row in table.rows] == ["", ""]

    @pytest.mark.parametrize("name", ["", "   ", "status", RESERVED_COLUMN])
    def test_rejected_names(self, list_table, name):
        with pytest.raises(StateError):
            add_manual_column(list_table, name)

    def test_duplicate_manual(self, list_table):
        table = add_manual_column(list_table, "Notes")
        with pytest.raises(StateError):
            add_manual_column(table, "Notes")

    def test_case_sensitive(self, list_table):
        table = add_manual_column(list_table, "Status")
        assert "Status" in table.manual_columns

    def test_lifecycle(self, list_table):
        table = add_manual_column(list_table, "Notes")
        table = remove_field(table, 0, "Notes")
        assert table.manual_columns == ("Notes",)
        table = remove_field(table, 1, "Notes")
        assert table.manual_columns == ()
        table = undo_remove_field(table, 1, "Notes")
        assert table.manual_columns == ("Notes",)
        assert table.rows[1]["Notes"] == ""

    def test_readding_clears_old_removals(self, list_table):
        table = add_manual_column(list_table, "Notes")
        table = edit_cell(table, 0, "Notes", "old")
        table = remove_field(table, 0, "Notes")
        table = remove_field(table, 1, "Notes")
        table = remove_field(table, 1, "status")
        assert table.manual_columns == ()

        table = add_manual_column(table, "Notes")
        assert [row["Notes"] for row in table.rows] == ["", ""]
        assert table.removed == {1: {"status": "inactive"}}

        table = edit_cell(table, 0, "Notes", "new")
        assert undo_remove_field(table, 0, "Notes") is table
        assert table.rows[0]["Notes"] == "new"


class TestRemoveField:

    def test_tombstone_and_undo(self, list_table):
        table = remove_field(list_table, 0, "status")
        assert classify_cell(table.rows[0], "status") is CellKind.REMOVED
        assert table.removed == {0: {"status": "active"}}

        restored = undo_remove_field(table, 0, "status")
        assert restored.rows[0] == list_table.rows[0]
        assert restored.removed == {}

    def test_second_undo_is_noop(self, list_table):
        table = undo_remove_field(remove_field(list_table, 0, "status"), 0, "status")
        assert undo_remove_field(table, 0, "status") is table

    def test_remove_twice_keeps_original(self, list_table):
        table = remove_field(list_table, 0, "status")
        assert remove_field(table, 0, "status") is table
        assert table.removed[0]["status"] == "active"

    def test_name_column_cannot_be_removed(self, list_table):
        with pytest.raises(StateError):
            remove_field(list_table, 0, RESERVED_COLUMN)

    def test_schema_column_stays_in_schema(self, list_table):
        table = remove_field(list_table, 0, "status")
        table = remove_field(table, 1, "status")
        assert "status" in table.schema.columns
        assert table.manual_columns == ()

    def test_input_table_untouched(self, list_table):
        remove_field(list_table, 0, "status")
        assert list_table.rows[0]["status"] == "active"
        assert list_table.removed == {}


class TestToggleRequired:

    def test_flip(self, list_table):
        table = toggle_required(list_table, "status")
        assert table.required_fields == {"status"}
        assert toggle_required(table, "status").required_fields == frozenset()

    def test_name_column_ignored(self, list_table):
        assert toggle_required(list_table, RESERVED_COLUMN) is list_table


class TestBulkAddRows:

    def test_fills_missing_columns(self, list_table):
        table = bulk_add_rows(list_table, [{"status": "new"}])
        row = table.rows[-1]
        assert row["status"] == "new"
        assert row["id"] == ""
        assert set(row) == set(table.columns)

    def test_batch_names_are_unique(self, list_table):
        table = bulk_add_rows(list_table, [{}, {}, {}])
        assert names(table) == ["TC_01", "TC_02", "TC_03", "TC_04", "TC_05"]

    def test_given_names_are_kept(self, list_table):
        table = bulk_add_rows(list_table, [{RESERVED_COLUMN: "custom"}, {}])
        assert names(table)[-2:] == ["custom", "TC_03"]

    def test_given_case_names_advance_the_counter(self, list_table):
        table = bulk_add_rows(list_table, [{RESERVED_COLUMN: "TC_03"}, {}, {RESERVED_COLUMN: "TC_09"}, {}])
        assert names(table) == ["TC_01", "TC_02", "TC_03", "TC_04", "TC_09", "TC_10"]

    def test_unknown_keys_ignored(self, list_table):
        table = bulk_add_rows(list_table, [{"bogus": 1}])
        assert "bogus" not in table.rows[-1]


class TestGenerate:

    def test_generate_cell_uses_generator(self, list_table):
        table = generate_cell(list_table, 0, "status", lambda column: f"gen-{column}")
        assert table.rows[0]["status"] == "gen-status"

    def test_generate_row_skips_name_and_removed(self, list_table):
        table = remove_field(list_table, 0, "status")
        table = generate_row(table, 0, lambda column: "x")
        assert table.rows[0][RESERVED_COLUMN] == "TC_01"
        assert "status" not in table.rows[0]
        assert table.rows[0]["owner.email"] == "x"

    def test_generate_removed_cell_fails(self, list_table):
        table = remove_field(list_table, 0, "status")
        with pytest.raises(StateError):
            generate_cell(table, 0, "status", lambda column: "x")

    def test_empty_table_default(self):
        assert TestCaseTable().columns == (RESERVED_COLUMN,)
