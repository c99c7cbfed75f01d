from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Tuple, Union

from .errors import PathConflictError
from .paths import Path, Segment, format_path, parse_path

PathLike = Union[Path, str]


def flatten(value: Any, keep_empty: bool = False) -> Dict[Path, Any]:
    """Flatten a JSON value into an ordered mapping of tagged path -> scalar.

    Objects recurse in key order and arrays by index. Empty objects and arrays
    yield no paths unless `keep_empty` is set, in which case they are emitted
    as their (empty) value.
    """
    out: Dict[Path, Any] = {}

    def walk(node: Any, prefix: Path) -> None:
        if isinstance(node, dict):
            if not node:
                if keep_empty and prefix:
                    out[prefix] = {}
                return
            for key, child in node.items():
                walk(child, prefix + (str(key),))
        elif isinstance(node, list):
            if not node:
                if keep_empty and prefix:
                    out[prefix] = []
                return
            for idx, child in enumerate(node):
                walk(child, prefix + (idx,))
        else:
            out[prefix] = node

    walk(value, ())
    return out


def flatten_columns(value: Any, keep_empty: bool = False) -> Dict[str, Any]:
    """Same as `flatten`, keyed by canonical dot strings."""
    return {format_path(path): leaf for path, leaf in flatten(value, keep_empty).items()}


def _as_path(path: PathLike) -> Path:
    if isinstance(path, tuple):
        return path
    return parse_path(path)


def _new_container(segment: Segment) -> Union[Dict[str, Any], List[Any]]:
    return [] if isinstance(segment, int) else {}


def _check_kind(node: Any, segment: Segment, path: Path) -> None:
    if isinstance(segment, int) and not isinstance(node, list):
        raise PathConflictError(f"Path '{format_path(path)}' indexes into an object.")
    if isinstance(segment, str) and not isinstance(node, dict):
        raise PathConflictError(f"Path '{format_path(path)}' uses a key inside an array.")


def _slot(node: Any, segment: Segment) -> Any:
    if isinstance(node, list):
        # Pad sparse indexes with None.
        while len(node) <= segment:
            node.append(None)
        return node[segment]
    return node.get(segment)


def unflatten(entries: Union[Mapping[PathLike, Any], Iterable[Tuple[PathLike, Any]]]) -> Any:
    """Rebuild a nested JSON value from (path, value) pairs.

    Int segments create arrays and str segments create objects; string paths
    are parsed first. An empty input rebuilds an empty object.
    """
    items = entries.items() if isinstance(entries, Mapping) else entries
    pairs = [(_as_path(p), v) for p, v in items]
    pairs = [(p, v) for p, v in pairs if p]
    if not pairs:
        return {}

    root: Any = _new_container(pairs[0][0][0])
    for path, value in pairs:
        node = root
        for depth, segment in enumerate(path):
            _check_kind(node, segment, path)
            is_last = depth == len(path) - 1
            current = _slot(node, segment)
            if is_last:
                node[segment] = value
                break
            if not isinstance(current, (dict, list)):
                current = _new_container(path[depth + 1])
                node[segment] = current
            node = current
    return root
