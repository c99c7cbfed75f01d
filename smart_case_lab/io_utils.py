from __future__ import annotations

import json
import mimetypes
import os
from typing import Any, Optional

from .config import JSON_FILE_TYPES
from .errors import InputTypeError, ParseError


def parse_json_text(text: Optional[str], source: str = "pasted JSON") -> Any:
    if text is None or not text.strip():
        if source == "pasted JSON":
            raise ParseError("Textarea is empty. Paste some JSON data.")
        raise ParseError(f"Error parsing {source}: the content is empty.")
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise ParseError(f"Error parsing {source}: {exc}") from exc


def is_json_file(file_name: Optional[str], mime_type: Optional[str] = None) -> bool:
    if mime_type is None and file_name:
        mime_type, _ = mimetypes.guess_type(file_name)
    if mime_type and mime_type.split(';')[0].strip().lower() in JSON_FILE_TYPES:
        return True
    return bool(file_name) and file_name.lower().endswith('.json')


def read_json_content(file_obj, mime_type: Optional[str] = None):
    """Read JSON content from an uploaded file or file path."""
    if file_obj is None:
        raise ParseError("No file data to process. Please upload a file first.")

    name = getattr(file_obj, 'name', file_obj if isinstance(file_obj, (str, os.PathLike)) else None)
    name = os.fspath(name) if name is not None else None
    if not is_json_file(name, mime_type):
        raise InputTypeError("Invalid file type. Please upload a .json file.")

    if hasattr(file_obj, 'read'):
        if hasattr(file_obj, 'seek'):
            file_obj.seek(0)
        content = file_obj.read()
    else:
        with open(name, 'rb') as f:
            content = f.read()

    if isinstance(content, bytes):
        try:
            content = content.decode('utf-8-sig')
        except UnicodeDecodeError as exc:
            raise ParseError(f"Error parsing JSON file: {exc}") from exc
    return parse_json_text(content, source="JSON file")
