from __future__ import annotations

import csv
import io
import json
from typing import Any, Dict, List, Union

from . import RESERVED_COLUMN
from .cells import CellKind, classify_cell, safe_stringify
from .config import (
    API_TEMPLATE_EXPORT_NAME,
    CSV_EXPORT_NAME,
    CSV_MIME,
    JSON_EXPORT_NAME,
    JSON_MIME,
)
from .errors import InputTypeError, StateError
from .flattening import unflatten
from .paths import format_path
from .schema_utils import top_level_keys
from .table import Row, TestCaseTable

POSTMAN_SCHEMA = "https://schema.getpostman.com/json/collection/v2.1.0/collection.json"
RAW_TOKEN = "__SMART_CASE_LAB_RAW_{}__"


def row_to_json(table: TestCaseTable, row: Row) -> Any:
    """Rebuild one nested record from a row, leaving out the name and removed cells."""
    entries = []
    for column in table.columns:
        if column == RESERVED_COLUMN or classify_cell(row, column) is CellKind.REMOVED:
            continue
        entries.append((table.schema.path_for(column), row[column]))
    return unflatten(entries)


def to_json(table: TestCaseTable) -> Union[Any, List[Any]]:
    records = [row_to_json(table, row) for row in table.rows]
    if table.source_is_object and len(records) == 1:
        return records[0]
    return records


def _csv_cell(table: TestCaseTable, row: Row, key: str, original: Any) -> Union[str, None]:
    if not isinstance(original, (dict, list)):
        return safe_stringify(row, format_path((key,)))

    sub_entries = []
    for column in table.columns:
        if column == RESERVED_COLUMN or classify_cell(row, column) is CellKind.REMOVED:
            continue
        path = table.schema.path_for(column)
        if len(path) > 1 and path[0] == key:
            sub_entries.append((path[1:], row[column]))
        elif path == (key,):
            sub_entries.append(((), row[column]))

    if not sub_entries:
        return None
    if len(sub_entries) == 1 and sub_entries[0][0] == ():
        # The whole key is a single cell (e.g. an emptied object kept as a value).
        subtree = sub_entries[0][1]
    else:
        subtree = unflatten([(p, v) for p, v in sub_entries if p])
    return json.dumps(subtree, ensure_ascii=False, separators=(',', ':'))


def to_csv(table: TestCaseTable) -> str:
    """One CSV column per top-level key; nested keys hold their sub-tree as JSON."""
    if not table.rows:
        raise StateError("No data to export.")
    if not table.has_source:
        raise StateError("Original JSON structure is not available for CSV export.")
    representative = table.representative
    if not isinstance(representative, dict):
        raise InputTypeError("CSV export needs the JSON records to be objects.")

    keys = top_level_keys(representative)
    headers = [RESERVED_COLUMN, *keys]
    buf = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=headers, lineterminator='\r\n')
    writer.writeheader()
    for row in table.rows:
        out: Dict[str, Any] = {RESERVED_COLUMN: safe_stringify(row, RESERVED_COLUMN)}
        for key in keys:
            cell = _csv_cell(table, row, key, representative[key])
            if cell is not None:
                out[key] = cell
        writer.writerow(out)
    return buf.getvalue()


def _placeholder_body(representative: Dict[str, Any]) -> str:
    body: Dict[str, Any] = {}
    raw_tokens: Dict[str, str] = {}
    for key, value in representative.items():
        if isinstance(value, str):
            body[key] = f"{{{{{key}}}}}"
        else:
            token = RAW_TOKEN.format(len(raw_tokens))
            raw_tokens[token] = f"{{{{{key}}}}}"
            body[key] = token

    text = json.dumps(body, indent=2, ensure_ascii=False)
    for token, placeholder in raw_tokens.items():
        text = text.replace(f'"{token}"', placeholder)
    return text


def to_api_template(representative: Any) -> Dict[str, Any]:
    """Postman collection with one request whose body has a placeholder per top-level key.

    String fields appear as "{{key}}"; every other field as a bare {{key}}.
    """
    if not isinstance(representative, dict):
        raise InputTypeError("API template needs a JSON object to describe the request body.")

    return {
        "info": {
            "name": "SmartCaseLab Test Cases",
            "schema": POSTMAN_SCHEMA,
        },
        "item": [
            {
                "name": "Test Case Request",
                "request": {
                    "method": "POST",
                    "header": [{"key": "Content-Type", "value": "application/json"}],
                    "body": {
                        "mode": "raw",
                        "raw": _placeholder_body(representative),
                        "options": {"raw": {"language": "json"}},
                    },
                    "url": {
                        "raw": "{{baseUrl}}/your-endpoint",
                        "host": ["{{baseUrl}}"],
                        "path": ["your-endpoint"],
                    },
                },
            }
        ],
    }


def json_export_payload(table: TestCaseTable):
    if not table.rows:
        raise StateError("No data to export.")
    content = json.dumps(to_json(table), indent=2, ensure_ascii=False)
    return JSON_EXPORT_NAME, content.encode('utf-8'), JSON_MIME


def csv_export_payload(table: TestCaseTable):
    return CSV_EXPORT_NAME, to_csv(table).encode('utf-8'), CSV_MIME


def api_template_payload(table: TestCaseTable):
    if not table.has_source:
        raise StateError("Process JSON before generating an API template.")
    collection = to_api_template(table.representative)
    return API_TEMPLATE_EXPORT_NAME, json.dumps(collection, indent=2).encode('utf-8'), JSON_MIME
