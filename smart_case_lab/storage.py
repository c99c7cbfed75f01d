"""Draft persistence.

A draft is one JSON snapshot of the table stored under a fixed key in a
key-value store. The store is passed in by the caller; `FileStore` keeps
drafts as files and `MemoryStore` is used in tests.
"""
from __future__ import annotations

import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Protocol, Union

from . import RESERVED_COLUMN
from .config import DRAFT_KEY
from .errors import PersistenceError
from .paths import parse_path
from .records import resolve_records
from .schema_utils import Schema, derive_schema
from .table import TestCaseTable

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[bytes]:
        ...

    def set(self, key: str, value: bytes) -> None:
        ...


class MemoryStore:
    def __init__(self):
        self._data: Dict[str, bytes] = {}

    def get(self, key: str) -> Optional[bytes]:
        return self._data.get(key)

    def set(self, key: str, value: bytes) -> None:
        self._data[key] = value


class FileStore:
    """One file per key inside `directory`."""

    def __init__(self, directory: Union[str, os.PathLike]):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get(self, key: str) -> Optional[bytes]:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_bytes()

    def set(self, key: str, value: bytes) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        tmp = path.with_suffix('.tmp')
        tmp.write_bytes(value)
        os.replace(tmp, path)


def snapshot(table: TestCaseTable) -> Dict[str, Any]:
    return {
        'tableData': {
            'headers': list(table.schema.columns),
            'rows': [dict(row) for row in table.rows],
        },
        'currentJson': table.source,
        'manualHeaders': list(table.manual_columns),
        'requiredFields': {column: True for column in sorted(table.required_fields)},
        'removedFieldsState': {str(idx): dict(entries) for idx, entries in table.removed.items()},
        'sourceIsObject': table.source_is_object,
        'timestamp': datetime.now(timezone.utc).isoformat(),
    }


def _restore_schema(headers: list, source: Any) -> Schema:
    derived = derive_schema(resolve_records(source))
    if list(derived.columns) == headers:
        return derived
    if not headers or headers[0] != RESERVED_COLUMN:
        raise PersistenceError("Draft headers do not start with the test case name column.")
    logger.warning("Draft headers differ from the stored JSON; falling back to parsed paths")
    return Schema(columns=tuple(headers), paths={h: parse_path(h) for h in headers[1:]})


def restore(payload: Dict[str, Any]) -> TestCaseTable:
    try:
        table_data = payload['tableData']
        headers = list(table_data['headers'])
        rows = tuple(dict(row) for row in table_data['rows'])
        source = payload.get('currentJson')
        required = frozenset(k for k, v in (payload.get('requiredFields') or {}).items() if v)
        manual = tuple(payload.get('manualHeaders') or ())
        removed = {
            int(idx): dict(entries)
            for idx, entries in (payload.get('removedFieldsState') or {}).items()
        }
        source_is_object = payload.get('sourceIsObject', not isinstance(source, list))
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise PersistenceError(f"Draft is malformed: {exc}") from exc

    return TestCaseTable(
        schema=_restore_schema(headers, source),
        rows=rows,
        manual_columns=manual,
        required_fields=required,
        removed=removed,
        source=source,
        source_is_object=bool(source_is_object),
    )


def save_draft(store: KeyValueStore, table: TestCaseTable, key: str = DRAFT_KEY) -> None:
    try:
        store.set(key, json.dumps(snapshot(table), ensure_ascii=False).encode('utf-8'))
    except (OSError, TypeError, ValueError) as exc:
        logger.error("Error saving draft %r: %s", key, exc)
        raise PersistenceError(f"Could not save draft: {exc}") from exc


def load_draft(store: KeyValueStore, key: str = DRAFT_KEY) -> Optional[TestCaseTable]:
    """Load the saved draft, or None when nothing is stored.

    A corrupted draft raises PersistenceError and is left in the store.
    """
    try:
        raw = store.get(key)
    except OSError as exc:
        logger.error("Error reading draft %r: %s", key, exc)
        raise PersistenceError(f"Could not read draft: {exc}") from exc
    if raw is None:
        return None

    try:
        payload = json.loads(raw.decode('utf-8'))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        logger.error("Error parsing draft %r: %s", key, exc)
        raise PersistenceError(f"Saved draft is corrupted: {exc}") from exc
    if not isinstance(payload, dict):
        raise PersistenceError("Saved draft is corrupted: expected an object.")
    return restore(payload)
