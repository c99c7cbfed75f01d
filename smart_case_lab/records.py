from __future__ import annotations

import re
from typing import Any, Dict, Iterable, List

from . import RESERVED_COLUMN
from .flattening import flatten
from .paths import format_path
from .schema_utils import Schema

CASE_NAME_PATTERN = re.compile(r'^TC_(\d+)$')


def resolve_records(data: Any) -> List[Any]:
    """A list document is a list of records; anything else is a single record."""
    if data is None:
        return []
    if isinstance(data, list):
        return data
    return [data]


def format_case_name(number: int) -> str:
    return f"TC_{number:02d}"


def default_case_name(row_index: int) -> str:
    """Name for a row by position, used when a name cell is cleared."""
    return format_case_name(row_index + 1)


def max_case_number(rows: Iterable[Dict[str, Any]]) -> int:
    highest = 0
    for row in rows:
        name = row.get(RESERVED_COLUMN)
        if not isinstance(name, str):
            continue
        match = CASE_NAME_PATTERN.match(name.strip())
        if match:
            highest = max(highest, int(match.group(1)))
    return highest


def next_case_name(rows: Iterable[Dict[str, Any]]) -> str:
    """Name for a new row: one past the highest TC_<n> already in use."""
    return format_case_name(max_case_number(rows) + 1)


def project_row(record: Any, schema: Schema, index: int) -> Dict[str, Any]:
    """Align one record to the schema; columns it lacks become ''."""
    flat = {format_path(path): value for path, value in flatten(record).items()}
    row: Dict[str, Any] = {RESERVED_COLUMN: default_case_name(index)}
    for column in schema.data_columns:
        row[column] = flat.get(column, '')
    return row


def blank_row(columns: Iterable[str], name: str) -> Dict[str, Any]:
    row: Dict[str, Any] = {RESERVED_COLUMN: name}
    for column in columns:
        if column != RESERVED_COLUMN:
            row[column] = ''
    return row
