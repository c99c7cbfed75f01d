from __future__ import annotations

from typing import List, Tuple, Union

Segment = Union[str, int]
# A str segment is an object key, an int segment an array index.
Path = Tuple[Segment, ...]


def escape_path_segment(segment: str) -> str:
    """Escape a single key segment for dot-path representation.

    - Dots are escaped as '\\.' so keys like 'gpt-3.5-turbo' remain one segment.
    - Backslashes are escaped as '\\\\' to preserve round-tripping.
    """
    if not isinstance(segment, str):
        segment = str(segment)
    return segment.replace('\\', '\\\\').replace('.', '\\.')


def unescape_path_segment(segment: str) -> str:
    if segment is None:
        return ''
    out: List[str] = []
    i = 0
    while i < len(segment):
        ch = segment[i]
        if ch == '\\' and i + 1 < len(segment):
            out.append(segment[i + 1])
            i += 2
        else:
            out.append(ch)
            i += 1
    return ''.join(out)


def split_path(path: str) -> List[str]:
    """Split a dot path on unescaped '.' and unescape each segment."""
    if path is None:
        return []
    if not isinstance(path, str):
        path = str(path)

    parts: List[str] = []
    buf: List[str] = []
    escaping = False

    for ch in path:
        if escaping:
            # Keep the escape pair so unescape_path_segment can process it.
            buf.append('\\')
            buf.append(ch)
            escaping = False
            continue

        if ch == '\\':
            escaping = True
            continue
        if ch == '.':
            parts.append(unescape_path_segment(''.join(buf)))
            buf = []
            continue
        buf.append(ch)

    if escaping:
        # Trailing backslash; treat as literal.
        buf.append('\\')

    parts.append(unescape_path_segment(''.join(buf)))
    return [p for p in parts if p != '']


def format_path(path: Path) -> str:
    """Join a tagged path into its canonical dot string, e.g. ('tags', 0) -> 'tags.0'."""
    return '.'.join(str(seg) if isinstance(seg, int) else escape_path_segment(seg) for seg in path)


def parse_path(text: str) -> Path:
    """Parse a dot string into a path, reading digit-only segments as array indexes.

    This is lossy for object keys made only of digits; prefer the tagged path
    recorded in the schema when one is available.
    """
    return tuple(int(part) if part.isdigit() else part for part in split_path(text))

