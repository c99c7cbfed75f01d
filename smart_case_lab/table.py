from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

from . import RESERVED_COLUMN
from .records import blank_row, default_case_name, project_row, resolve_records
from .schema_utils import Schema, derive_schema, find_representative

logger = logging.getLogger(__name__)

Row = Dict[str, Any]
RemovalLedger = Dict[int, Dict[str, Any]]


@dataclass(frozen=True)
class TestCaseTable:
    """Live state of the grid.

    Operations in `ledger` never mutate a table; they return a new one with
    fresh row dicts, so a snapshot handed to rendering or export stays valid.
    """

    __test__ = False  # not a pytest class

    schema: Schema = field(default_factory=Schema)
    rows: Tuple[Row, ...] = ()
    manual_columns: Tuple[str, ...] = ()
    required_fields: FrozenSet[str] = frozenset()
    removed: RemovalLedger = field(default_factory=dict)
    source: Any = None
    source_is_object: bool = False

    @property
    def columns(self) -> Tuple[str, ...]:
        return self.schema.columns + self.manual_columns

    @property
    def has_source(self) -> bool:
        return self.source is not None

    @property
    def representative(self) -> Optional[Any]:
        return find_representative(resolve_records(self.source))

    def copy_rows(self) -> List[Row]:
        return [dict(row) for row in self.rows]

    def copy_removed(self) -> RemovalLedger:
        return {idx: dict(entries) for idx, entries in self.removed.items()}

    def evolve(self, **changes: Any) -> "TestCaseTable":
        if 'rows' in changes:
            changes['rows'] = tuple(changes['rows'])
        if 'manual_columns' in changes:
            changes['manual_columns'] = tuple(changes['manual_columns'])
        if 'required_fields' in changes:
            changes['required_fields'] = frozenset(changes['required_fields'])
        return replace(self, **changes)


def build_table(data: Any) -> TestCaseTable:
    """Project a parsed JSON document into a fresh table."""
    records = resolve_records(data)
    schema = derive_schema(records)

    if len(schema.columns) == 1:
        logger.info("No object or array records found; created an empty table")
        rows = [{RESERVED_COLUMN: default_case_name(0)}]
    else:
        rows = []
        for record in records:
            if not isinstance(record, (dict, list)):
                continue
            rows.append(project_row(record, schema, len(rows)))
        if not rows:
            rows.append(blank_row(schema.columns, default_case_name(0)))

    logger.info("Built table with %d columns and %d rows", len(schema.columns), len(rows))
    return TestCaseTable(
        schema=schema,
        rows=tuple(rows),
        source=data,
        source_is_object=not isinstance(data, list),
    )


def displayed_columns(table: TestCaseTable) -> List[str]:
    """Grid order: name column, manual columns, then derived columns."""
    ordered = [RESERVED_COLUMN, *table.manual_columns]
    ordered.extend(c for c in table.schema.data_columns if c not in table.manual_columns)
    return ordered
