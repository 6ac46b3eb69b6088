"""Path-based reads and copy-with-changes writes on immutable records.

Paths are dotted strings: model fields by name, tuple items by index and
mapping entries by key, e.g. ``income_declaration.declarations.0.employment.monthly_income.2024-0``.
"""

from typing import Any, Sequence, Union

from pydantic import BaseModel, ValidationError

from foerder_core.exceptions import RecordPathError

PathLike = Union[str, Sequence[Union[str, int]]]


def split_path(path: PathLike) -> tuple[Union[str, int], ...]:
    """Split a dotted path into segments; numeric segments become ints."""
    if isinstance(path, str):
        raw: Sequence[Union[str, int]] = [p for p in path.split(".") if p]
    else:
        raw = path
    return tuple(int(p) if isinstance(p, str) and p.isdigit() else p for p in raw)


def join_path(*parts: Union[str, int, None]) -> str:
    return ".".join(str(p) for p in parts if p is not None and p != "")


def is_prefix(prefix: str, path: str) -> bool:
    """True when ``prefix`` names ``path`` or one of its ancestors."""
    return path == prefix or path.startswith(prefix + ".")


def get_at(node: Any, path: PathLike) -> Any:
    """Read the value at ``path``.

    Missing mapping keys read as None; unknown model fields and out of
    range indices raise RecordPathError.
    """
    full = path if isinstance(path, str) else join_path(*path)
    for segment in split_path(path):
        if isinstance(node, BaseModel):
            if not isinstance(segment, str) or segment not in type(node).model_fields:
                raise RecordPathError(f"Unknown field {segment!r}", path=full, segment=str(segment))
            node = getattr(node, segment)
        elif isinstance(node, dict):
            node = node.get(str(segment))
        elif isinstance(node, (tuple, list)):
            if not isinstance(segment, int) or segment >= len(node):
                raise RecordPathError(f"No item {segment!r}", path=full, segment=str(segment))
            node = node[segment]
        elif node is None:
            return None
        else:
            raise RecordPathError(f"Cannot descend into {type(node).__name__}", path=full, segment=str(segment))
    return node


def set_at(node: Any, path: PathLike, value: Any) -> Any:
    """Return a copy of ``node`` with ``value`` written at ``path``.

    Only the containers along the path are rebuilt; everything else is
    shared with the original. The model that owns the written field is
    re-validated so enum and number coercion apply.

    Raises:
        RecordPathError: If the path does not exist or the value does not
            fit the field.
    """
    full = path if isinstance(path, str) else join_path(*path)
    segments = split_path(path)
    if not segments:
        raise RecordPathError("Empty path", path=full)
    return _set(node, segments, value, full)


def _set(node: Any, segments: tuple[Union[str, int], ...], value: Any, full: str) -> Any:
    head, rest = segments[0], segments[1:]

    if isinstance(node, BaseModel):
        if not isinstance(head, str) or head not in type(node).model_fields:
            raise RecordPathError(f"Unknown field {head!r}", path=full, segment=str(head))
        child = getattr(node, head)
        new_child = _set(child, rest, value, full) if rest else value
        try:
            return type(node).model_validate({**dict(node), head: new_child})
        except ValidationError as e:
            raise RecordPathError(
                f"Invalid value for {full}", path=full, segment=head, details={"errors": e.errors()}
            ) from e

    if isinstance(node, dict):
        key = str(head)
        new_child = _set(node.get(key), rest, value, full) if rest else value
        return {**node, key: new_child}

    if isinstance(node, tuple):
        if not isinstance(head, int) or head >= len(node):
            raise RecordPathError(f"No item {head!r}", path=full, segment=str(head))
        new_child = _set(node[head], rest, value, full) if rest else value
        return node[:head] + (new_child,) + node[head + 1:]

    raise RecordPathError(f"Cannot write into {type(node).__name__}", path=full, segment=str(head))


__all__ = ["PathLike", "split_path", "join_path", "is_prefix", "get_at", "set_at"]
