from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from . import RESERVED_COLUMN
from .flattening import flatten
from .paths import Path, format_path


@dataclass(frozen=True)
class Schema:
    """Ordered table columns derived from one representative record.

    `columns` starts with the reserved name column. `paths` keeps the tagged
    path of every derived column so rebuilding never has to guess whether a
    digit-only segment was an array index.
    """

    columns: Tuple[str, ...] = (RESERVED_COLUMN,)
    paths: Dict[str, Path] = field(default_factory=dict)

    @property
    def data_columns(self) -> Tuple[str, ...]:
        return self.columns[1:]

    def path_for(self, column: str) -> Path:
        if column in self.paths:
            return self.paths[column]
        return (column,)


def find_representative(records: List[Any]) -> Optional[Any]:
    """Return the first record that is a non-empty object or array."""
    for record in records or []:
        if isinstance(record, (dict, list)) and len(record) > 0:
            return record
    return None


def derive_schema(records: List[Any]) -> Schema:
    representative = find_representative(records)
    if representative is None:
        return Schema()

    paths: Dict[str, Path] = {}
    for path in flatten(representative):
        paths.setdefault(format_path(path), path)
    return Schema(columns=(RESERVED_COLUMN, *paths.keys()), paths=paths)


def top_level_keys(record: Any) -> List[str]:
    if not isinstance(record, dict):
        return []
    return [str(k) for k in record.keys()]
