from __future__ import annotations

import json
from enum import Enum
from typing import Any, Dict


class CellKind(Enum):
    TEXT = "text"
    NUMBER = "number"
    BOOL = "bool"
    NULL = "null"
    STRUCTURED = "structured"
    REMOVED = "removed"


def classify_cell(row: Dict[str, Any], column: str) -> CellKind:
    """Tag a row's cell. A key missing from the row is a removed cell."""
    if column not in row:
        return CellKind.REMOVED
    value = row[column]
    if value is None:
        return CellKind.NULL
    # bool before number: bool is an int subclass.
    if isinstance(value, bool):
        return CellKind.BOOL
    if isinstance(value, (int, float)):
        return CellKind.NUMBER
    if isinstance(value, (dict, list)):
        return CellKind.STRUCTURED
    if isinstance(value, str):
        return CellKind.TEXT
    raise TypeError(f"Unsupported cell value for '{column}': {type(value).__name__}")


def is_editable(kind: CellKind) -> bool:
    return kind in (CellKind.TEXT, CellKind.NUMBER, CellKind.BOOL, CellKind.NULL)


def _json_scalar(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False)


def display_value(row: Dict[str, Any], column: str) -> str:
    """Text shown in the grid for a cell."""
    kind = classify_cell(row, column)
    if kind is CellKind.REMOVED:
        return ''
    if kind is CellKind.NULL:
        return 'null'
    if kind is CellKind.BOOL:
        return 'true' if row[column] else 'false'
    if kind is CellKind.NUMBER:
        return _json_scalar(row[column])
    if kind is CellKind.STRUCTURED:
        return json.dumps(row[column], ensure_ascii=False, separators=(',', ':'))
    return row[column]


def safe_stringify(row: Dict[str, Any], column: str) -> str:
    """CSV text for a primitive column; missing and null cells become 'null'."""
    kind = classify_cell(row, column)
    if kind in (CellKind.REMOVED, CellKind.NULL):
        return 'null'
    return display_value(row, column)
