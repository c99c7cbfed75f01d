from __future__ import annotations

import logging
import os
import tempfile
from typing import Any, List, Optional, Tuple

import gradio as gr
import pandas as pd

from . import RESERVED_COLUMN
from .cells import CellKind, classify_cell, display_value
from .commands import (
    AddManualColumn,
    AddRow,
    ApplyFieldRules,
    CopyFromPrevious,
    DeleteRow,
    Download,
    EditCell,
    ExportApiTemplate,
    ExportCsv,
    ExportJson,
    GenerateCell,
    GenerateRow,
    GenerateRows,
    IngestFile,
    IngestText,
    RemoveField,
    ShowMessage,
    ToggleRequired,
    UndoRemoveField,
    apply_command,
)
from .errors import CaseLabError, PersistenceError
from .generator import DataGenerator
from .rules import FieldRules, detect_field_type
from .storage import KeyValueStore, load_draft, save_draft
from .table import TestCaseTable, displayed_columns

logger = logging.getLogger(__name__)

GENERATOR = DataGenerator()


def header_label(table: TestCaseTable, column: str) -> str:
    return f"{column} *" if column in table.required_fields else column


def render_grid(table: Optional[TestCaseTable]) -> pd.DataFrame:
    if table is None or not table.rows:
        return pd.DataFrame(columns=[RESERVED_COLUMN])
    columns = displayed_columns(table)
    data = [[display_value(row, c) for c in columns] for row in table.rows]
    return pd.DataFrame(data, columns=[header_label(table, c) for c in columns])


def removed_cells(table: Optional[TestCaseTable]) -> List[List[Any]]:
    if table is None:
        return []
    out = []
    for idx in sorted(table.removed):
        for column, value in table.removed[idx].items():
            out.append([idx + 1, column, display_value({column: value}, column)])
    return out


def write_download(effect: Download) -> str:
    path = os.path.join(tempfile.gettempdir(), effect.filename)
    with open(path, 'wb') as f:
        f.write(effect.content)
    return path


def run_command(table, command, store: Optional[KeyValueStore] = None):
    """Apply a command and turn its effects into widget values."""
    if table is None:
        table = TestCaseTable()
    updated, effects = apply_command(table, command, GENERATOR)
    messages: List[str] = []
    download = None
    for effect in effects:
        if isinstance(effect, ShowMessage):
            messages.append(effect.text)
        elif isinstance(effect, Download):
            try:
                download = write_download(effect)
            except OSError as e:
                messages.append(f"Error during export: {str(e)}")

    if store is not None and updated is not table:
        try:
            save_draft(store, updated)
        except PersistenceError as e:
            messages.append(str(e))
    return updated, " ".join(messages), download


def _respond(table, status: str, download=None) -> Tuple:
    columns = displayed_columns(table) if table is not None else [RESERVED_COLUMN]
    data_columns = [c for c in columns if c != RESERVED_COLUMN]
    return (
        table,
        render_grid(table),
        gr.update(choices=data_columns, value=data_columns[0] if data_columns else None),
        removed_cells(table),
        status,
        download,
    )


def _command_handler(make_command, store=None):
    def handler(table, *args):
        updated, status, download = run_command(table, make_command(*args), store)
        return _respond(updated, status, download)
    return handler


def _row_index(row_number) -> int:
    try:
        return int(row_number) - 1
    except (TypeError, ValueError):
        return -1


def process_pasted_json(table, text, store=None):
    return _command_handler(lambda t: IngestText(t or ''), store)(table, text)


def process_uploaded_json(table, file_obj, store=None):
    if file_obj is None:
        return _respond(table, "No file uploaded.")
    return _command_handler(lambda f: IngestFile(f), store)(table, file_obj)


def add_row(table, store=None):
    return _command_handler(AddRow, store)(table)


def delete_row(table, row_number, store=None):
    return _command_handler(lambda n: DeleteRow(_row_index(n)), store)(table, row_number)


def copy_from_previous(table, row_number, store=None):
    return _command_handler(lambda n: CopyFromPrevious(_row_index(n)), store)(table, row_number)


def add_manual_column(table, name, store=None):
    return _command_handler(lambda n: AddManualColumn((n or '').strip()), store)(table, name)


def remove_field(table, row_number, column, store=None):
    return _command_handler(lambda n, c: RemoveField(_row_index(n), c), store)(table, row_number, column)


def undo_remove_field(table, row_number, column, store=None):
    return _command_handler(lambda n, c: UndoRemoveField(_row_index(n), c), store)(table, row_number, column)


def toggle_required(table, column, store=None):
    return _command_handler(ToggleRequired, store)(table, column)


def generate_cell(table, row_number, column, store=None):
    return _command_handler(lambda n, c: GenerateCell(_row_index(n), c), store)(table, row_number, column)


def generate_row(table, row_number, store=None):
    return _command_handler(lambda n: GenerateRow(_row_index(n)), store)(table, row_number)


def generate_rows(table, count, store=None):
    return _command_handler(lambda n: GenerateRows(int(n or 0)), store)(table, count)


def apply_rules(
    table, row_number, column, data_type, min_value, max_value, enum_values,
    number_of_cases, boolean_value, null_probability, apply_to_existing,
    remove_field_flag, remove_object_flag, store=None,
):
    try:
        rules = FieldRules(
            data_type=data_type or 'string',
            min_value=str(min_value or ''),
            max_value=str(max_value or ''),
            enum_values=enum_values or '',
            number_of_cases=int(number_of_cases or 0),
            boolean_value=boolean_value or 'true',
            null_probability=float(null_probability or 0),
            apply_to_existing=bool(apply_to_existing),
            remove_field=bool(remove_field_flag),
            remove_object=bool(remove_object_flag),
        )
    except CaseLabError as e:
        return _respond(table, str(e))
    except (TypeError, ValueError) as e:
        return _respond(table, f"Invalid rule settings: {str(e)}")
    command = ApplyFieldRules(_row_index(row_number), column, rules)
    return _command_handler(lambda: command, store)(table)


def suggest_data_type(table, row_number, column):
    sample = None
    idx = _row_index(row_number)
    if table is not None and 0 <= idx < len(table.rows):
        sample = table.rows[idx].get(column)
    return detect_field_type(column or '', sample)


def export_json(table):
    return _command_handler(ExportJson)(table)


def export_csv(table):
    return _command_handler(ExportCsv)(table)


def export_api_template(table):
    return _command_handler(ExportApiTemplate)(table)


def sync_grid_edits(table, grid, store=None):
    """Apply the cells the user changed in the grid, one edit at a time."""
    if table is None or grid is None or not table.rows:
        return _respond(table, "")

    if isinstance(grid, pd.DataFrame):
        values = grid.astype(object).where(pd.notna(grid), '').values.tolist()
    else:
        values = grid.get('data', []) if isinstance(grid, dict) else list(grid)

    columns = displayed_columns(table)
    messages: List[str] = []
    for row_idx, new_row in enumerate(values[:len(table.rows)]):
        for col_idx, column in enumerate(columns[:len(new_row)]):
            new_text = '' if new_row[col_idx] is None else str(new_row[col_idx])
            row = table.rows[row_idx]
            if new_text == display_value(row, column):
                continue
            if classify_cell(row, column) is CellKind.STRUCTURED:
                messages.append("Direct editing of objects/arrays in cell is not supported.")
                continue
            table, status, _ = run_command(table, EditCell(row_idx, column, new_text), store)
            if status:
                messages.append(status)
    return _respond(table, " ".join(messages))


def load_saved_draft(store: KeyValueStore):
    try:
        table = load_draft(store)
    except PersistenceError as e:
        logger.error("Could not load saved draft: %s", e)
        return _respond(None, f"Could not load saved draft: {str(e)}")
    if table is None:
        return _respond(None, "")
    return _respond(table, f"Restored saved draft with {len(table.rows)} test case(s).")
