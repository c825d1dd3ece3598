"""JSON Pointer (RFC 6901) path helpers."""

from typing import List

from jsonpointer import JsonPointer, JsonPointerException

from ..utils.errors import ValidationError


def rooted(path: str) -> str:
    """Return ``path`` in absolute form.

    ``"a/b"`` becomes ``"/a/b"``. Already rooted paths and the whole-document
    pointer ``""`` are returned unchanged.
    """
    if path == "" or path.startswith("/"):
        return path
    return "/" + path


def split(path: str) -> List[str]:
    """Split a pointer into its unescaped reference tokens."""
    try:
        return list(JsonPointer(rooted(path)).parts)
    except JsonPointerException as e:
        raise ValidationError("path", path, str(e)) from e


def join(parts: List[str]) -> str:
    """Build an escaped pointer from reference tokens."""
    return JsonPointer.from_parts(parts).path


def is_prefix(prefix: List[str], parts: List[str]) -> bool:
    """True when ``prefix`` addresses ``parts`` or one of its ancestors."""
    return len(prefix) <= len(parts) and parts[:len(prefix)] == prefix


__all__ = ['rooted', 'split', 'join', 'is_prefix']
