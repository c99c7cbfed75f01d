"""User actions as plain data, applied to a table.

`apply_command(table, command)` returns the next table and a list of effects
for the UI to carry out. A failing command leaves the table as it was and
reports the failure as a message.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple, Type, Union

from . import RESERVED_COLUMN, ledger
from .config import MESSAGE_TTL
from .errors import CaseLabError, StateError
from .export import api_template_payload, csv_export_payload, json_export_payload
from .generator import DataGenerator
from .io_utils import parse_json_text, read_json_content
from .rules import FieldRules, apply_field_rules
from .table import TestCaseTable, build_table

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ShowMessage:
    text: str
    ttl: float = MESSAGE_TTL
    error: bool = False


@dataclass(frozen=True)
class Download:
    filename: str
    content: bytes
    mime: str


Effect = Union[ShowMessage, Download]


@dataclass(frozen=True)
class IngestText:
    text: str


@dataclass(frozen=True)
class IngestFile:
    file: Any
    mime_type: Optional[str] = None


@dataclass(frozen=True)
class EditCell:
    row: int
    column: str
    value: Any


@dataclass(frozen=True)
class AddRow:
    pass


@dataclass(frozen=True)
class DeleteRow:
    row: int


@dataclass(frozen=True)
class CopyFromPrevious:
    row: int


@dataclass(frozen=True)
class AddManualColumn:
    name: str


@dataclass(frozen=True)
class RemoveField:
    row: int
    column: str


@dataclass(frozen=True)
class UndoRemoveField:
    row: int
    column: str


@dataclass(frozen=True)
class ToggleRequired:
    column: str


@dataclass(frozen=True)
class GenerateCell:
    row: int
    column: str


@dataclass(frozen=True)
class GenerateRow:
    row: int


@dataclass(frozen=True)
class GenerateRows:
    count: int


@dataclass(frozen=True)
class ApplyFieldRules:
    row: int
    column: str
    rules: FieldRules = field(default_factory=FieldRules)


@dataclass(frozen=True)
class ExportJson:
    pass


@dataclass(frozen=True)
class ExportCsv:
    pass


@dataclass(frozen=True)
class ExportApiTemplate:
    pass


Result = Tuple[TestCaseTable, List[Effect]]
Handler = Callable[[TestCaseTable, Any, DataGenerator], Result]


def _ingest(data: Any) -> Result:
    table = build_table(data)
    return table, [ShowMessage(f"Loaded {len(table.rows)} test case(s) with {len(table.columns) - 1} column(s).")]


def _ingest_text(table, command: IngestText, generator) -> Result:
    return _ingest(parse_json_text(command.text))


def _ingest_file(table, command: IngestFile, generator) -> Result:
    return _ingest(read_json_content(command.file, command.mime_type))


def _edit_cell(table, command: EditCell, generator) -> Result:
    return ledger.edit_cell(table, command.row, command.column, command.value), []


def _add_row(table, command: AddRow, generator) -> Result:
    table = ledger.add_row(table)
    return table, [ShowMessage(f"Added {table.rows[-1][RESERVED_COLUMN]}.")]


def _delete_row(table, command: DeleteRow, generator) -> Result:
    return ledger.delete_row(table, command.row), [ShowMessage("Row deleted.")]


def _copy_from_previous(table, command: CopyFromPrevious, generator) -> Result:
    return ledger.copy_from_previous(table, command.row), [ShowMessage("Copied values from the previous row.")]


def _add_manual_column(table, command: AddManualColumn, generator) -> Result:
    table = ledger.add_manual_column(table, command.name)
    return table, [ShowMessage(f'Custom column "{command.name}" added.')]


def _remove_field(table, command: RemoveField, generator) -> Result:
    return ledger.remove_field(table, command.row, command.column), [ShowMessage(f'Removed "{command.column}".')]


def _undo_remove_field(table, command: UndoRemoveField, generator) -> Result:
    updated = ledger.undo_remove_field(table, command.row, command.column)
    if updated is table:
        return table, [ShowMessage(f'Nothing to restore for "{command.column}".')]
    return updated, [ShowMessage(f'Restored "{command.column}".')]


def _toggle_required(table, command: ToggleRequired, generator) -> Result:
    return ledger.toggle_required(table, command.column), []


def _generate_cell(table, command: GenerateCell, generator) -> Result:
    return ledger.generate_cell(table, command.row, command.column, generator), []


def _generate_row(table, command: GenerateRow, generator) -> Result:
    return ledger.generate_row(table, command.row, generator), [ShowMessage("Row filled with generated data.")]


def _generate_rows(table, command: GenerateRows, generator) -> Result:
    if len(table.columns) <= 1:
        raise StateError("Cannot generate rows: no columns defined.")
    rows = ledger.generated_rows(table, command.count, generator)
    table = ledger.bulk_add_rows(table, rows)
    return table, [ShowMessage(f"Generated {len(rows)} test case(s).")]


def _apply_field_rules(table, command: ApplyFieldRules, generator) -> Result:
    table = apply_field_rules(table, command.row, command.column, command.rules, generator.faker)
    return table, [ShowMessage(f'Rules applied to "{command.column}".')]


def _download(payload) -> List[Effect]:
    filename, content, mime = payload
    return [Download(filename, content, mime), ShowMessage(f"Exported {filename}.")]


def _export_json(table, command: ExportJson, generator) -> Result:
    return table, _download(json_export_payload(table))


def _export_csv(table, command: ExportCsv, generator) -> Result:
    return table, _download(csv_export_payload(table))


def _export_api_template(table, command: ExportApiTemplate, generator) -> Result:
    return table, _download(api_template_payload(table))


HANDLERS: Dict[Type, Handler] = {
    IngestText: _ingest_text,
    IngestFile: _ingest_file,
    EditCell: _edit_cell,
    AddRow: _add_row,
    DeleteRow: _delete_row,
    CopyFromPrevious: _copy_from_previous,
    AddManualColumn: _add_manual_column,
    RemoveField: _remove_field,
    UndoRemoveField: _undo_remove_field,
    ToggleRequired: _toggle_required,
    GenerateCell: _generate_cell,
    GenerateRow: _generate_row,
    GenerateRows: _generate_rows,
    ApplyFieldRules: _apply_field_rules,
    ExportJson: _export_json,
    ExportCsv: _export_csv,
    ExportApiTemplate: _export_api_template,
}


def apply_command(
    table: Optional[TestCaseTable],
    command: Any,
    generator: Optional[DataGenerator] = None,
) -> Result:
    table = table if table is not None else TestCaseTable()
    handler = HANDLERS.get(type(command))
    if handler is None:
        raise TypeError(f"Unknown command: {type(command).__name__}")

    try:
        return handler(table, command, generator or DataGenerator())
    except CaseLabError as exc:
        logger.warning("%s failed: %s", type(command).__name__, exc)
        return table, [ShowMessage(str(exc), error=True)]
