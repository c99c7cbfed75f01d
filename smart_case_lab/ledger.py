"""Row and cell operations on a `TestCaseTable`.

Every function takes a table and returns a new one. Invalid calls raise
`StateError`; the input table is never modified.
"""
from __future__ import annotations

import copy
import logging
from typing import Any, Callable, Dict, Iterable, List

from . import RESERVED_COLUMN
from .cells import CellKind, classify_cell, is_editable
from .errors import StateError
from .records import default_case_name, format_case_name, max_case_number, next_case_name
from .table import RemovalLedger, Row, TestCaseTable

logger = logging.getLogger(__name__)

ValueGenerator = Callable[[str], Any]


def _check_row(table: TestCaseTable, row_index: int) -> None:
    if not isinstance(row_index, int) or row_index < 0 or row_index >= len(table.rows):
        raise StateError(f"Row {row_index} does not exist.")


def _check_column(table: TestCaseTable, column: str) -> None:
    if column not in table.columns:
        raise StateError(f"Column '{column}' does not exist.")


def edit_cell(table: TestCaseTable, row_index: int, column: str, value: Any) -> TestCaseTable:
    """Store a new cell value. A blank name cell is renamed from its position."""
    _check_row(table, row_index)
    _check_column(table, column)
    if classify_cell(table.rows[row_index], column) is CellKind.REMOVED:
        raise StateError(f"'{column}' is removed from this row. Undo the removal before editing.")

    if column == RESERVED_COLUMN and (value is None or not str(value).strip()):
        value = default_case_name(row_index)

    rows = table.copy_rows()
    rows[row_index][column] = value
    return table.evolve(rows=rows)


def add_row(table: TestCaseTable) -> TestCaseTable:
    if len(table.schema.columns) <= 1 and not table.manual_columns:
        raise StateError("Cannot add row: no columns defined. Process JSON or add a manual column first.")

    row: Row = {RESERVED_COLUMN: next_case_name(table.rows)}
    for column in table.columns:
        if column != RESERVED_COLUMN:
            row[column] = ''
    logger.debug("Adding row %s", row[RESERVED_COLUMN])
    return table.evolve(rows=[*table.copy_rows(), row])


def delete_row(table: TestCaseTable, row_index: int) -> TestCaseTable:
    """Drop a row. Remaining names are kept; removal entries of later rows shift up."""
    _check_row(table, row_index)
    rows = table.copy_rows()
    del rows[row_index]

    removed: RemovalLedger = {}
    for idx, entries in table.removed.items():
        if idx == row_index:
            continue
        removed[idx - 1 if idx > row_index else idx] = dict(entries)
    return table.evolve(rows=rows, removed=removed)


def copy_from_previous(table: TestCaseTable, row_index: int) -> TestCaseTable:
    """Copy every present value of the row above into this row, except its name."""
    if not isinstance(row_index, int) or row_index <= 0 or row_index >= len(table.rows):
        raise StateError("There is no previous row to copy from.")

    rows = table.copy_rows()
    source = rows[row_index - 1]
    target = rows[row_index]
    for column, value in source.items():
        if column == RESERVED_COLUMN:
            continue
        target[column] = copy.deepcopy(value)

    removed = table.copy_removed()
    entries = removed.get(row_index, {})
    for column in list(entries):
        if column in target:
            del entries[column]
    if row_index in removed and not entries:
        del removed[row_index]
    return table.evolve(rows=rows, removed=removed)


def add_manual_column(table: TestCaseTable, name: str) -> TestCaseTable:
    if name is None or not name.strip():
        raise StateError("Column name cannot be empty.")
    if name in table.schema.columns or name in table.manual_columns:
        raise StateError(f"Column '{name}' already exists.")

    rows = table.copy_rows()
    for row in rows:
        row[name] = ''

    # Every cell of the column is present again, so no row may keep it tombstoned.
    removed: RemovalLedger = {}
    for idx, entries in table.removed.items():
        kept = {column: value for column, value in entries.items() if column != name}
        if kept:
            removed[idx] = kept
    logger.info("Added manual column %r", name)
    return table.evolve(rows=rows, removed=removed, manual_columns=[*table.manual_columns, name])


def _column_in_use(rows: Iterable[Row], column: str) -> bool:
    return any(column in row for row in rows)


def remove_field(table: TestCaseTable, row_index: int, column: str) -> TestCaseTable:
    """Tombstone a cell, keeping its value for undo."""
    _check_row(table, row_index)
    if column == RESERVED_COLUMN:
        raise StateError("The test case name cannot be removed.")
    if column not in table.rows[row_index]:
        return table

    rows = table.copy_rows()
    removed = table.copy_removed()
    removed.setdefault(row_index, {})[column] = rows[row_index].pop(column)

    manual = list(table.manual_columns)
    if column in manual and not _column_in_use(rows, column):
        manual.remove(column)
        logger.info("Manual column %r no longer used by any row; dropped", column)
    return table.evolve(rows=rows, removed=removed, manual_columns=manual)


def undo_remove_field(table: TestCaseTable, row_index: int, column: str) -> TestCaseTable:
    entries = table.removed.get(row_index)
    if not entries or column not in entries:
        return table
    _check_row(table, row_index)

    rows = table.copy_rows()
    removed = table.copy_removed()
    rows[row_index][column] = removed[row_index].pop(column)
    if not removed[row_index]:
        del removed[row_index]

    manual = list(table.manual_columns)
    if column not in table.schema.columns and column not in manual and _column_in_use(rows, column):
        manual.append(column)
    return table.evolve(rows=rows, removed=removed, manual_columns=manual)


def toggle_required(table: TestCaseTable, column: str) -> TestCaseTable:
    if column == RESERVED_COLUMN:
        return table
    required = set(table.required_fields)
    required.symmetric_difference_update({column})
    return table.evolve(required_fields=required)


def bulk_add_rows(table: TestCaseTable, new_rows: Iterable[Dict[str, Any]]) -> TestCaseTable:
    """Append partial rows, filling gaps with ''.

    Unnamed rows are numbered from one past the highest TC_<n> seen so far,
    including names given earlier in the same batch, so generated names
    never repeat one already in the table.
    """
    columns = table.columns
    counter = max_case_number(table.rows)
    rows = table.copy_rows()
    for partial in new_rows:
        row: Row = {}
        name = partial.get(RESERVED_COLUMN)
        if name is None or not str(name).strip():
            counter += 1
            name = format_case_name(counter)
        else:
            counter = max(counter, max_case_number([{RESERVED_COLUMN: name}]))
        row[RESERVED_COLUMN] = name
        for column in columns:
            if column != RESERVED_COLUMN:
                row[column] = partial.get(column, '')
        rows.append(row)
    logger.info("Bulk added %d rows", len(rows) - len(table.rows))
    return table.evolve(rows=rows)


def generate_cell(table: TestCaseTable, row_index: int, column: str, generator: ValueGenerator) -> TestCaseTable:
    """Fill one cell with a synthetic value for its column."""
    _check_row(table, row_index)
    _check_column(table, column)
    kind = classify_cell(table.rows[row_index], column)
    if not is_editable(kind):
        raise StateError(f"'{column}' cannot be generated for this row ({kind.value}).")
    value = generator(column)
    if value is None:
        return table
    return edit_cell(table, row_index, column, value)


def generate_row(table: TestCaseTable, row_index: int, generator: ValueGenerator) -> TestCaseTable:
    _check_row(table, row_index)
    rows = table.copy_rows()
    row = rows[row_index]
    for column in table.columns:
        if column == RESERVED_COLUMN or not is_editable(classify_cell(row, column)):
            continue
        value = generator(column)
        if value is not None:
            row[column] = value
    return table.evolve(rows=rows)


def generated_rows(table: TestCaseTable, count: int, generator: ValueGenerator) -> List[Dict[str, Any]]:
    rows: List[Dict[str, Any]] = []
    for _ in range(max(0, int(count))):
        rows.append({c: generator(c) for c in table.columns if c != RESERVED_COLUMN})
    return rows

