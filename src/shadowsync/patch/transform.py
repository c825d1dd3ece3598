"""
Patch rebasing.

A remote peer answers each submitted patch with the patch it actually
committed. By the time that answer arrives the local shadow may already hold
newer local patches, so the remote patch must be rewritten to apply on top of
them. ``rebase`` does that for the structural effects that matter: array
insertions and removals shift the indices the incoming operations refer to,
and operations aimed at a location that a pending patch removed are dropped.

Value conflicts on the same location are not resolved here; whichever patch
is applied last wins.
"""

from typing import Any, Dict, Iterable, List, Optional

from .pointer import is_prefix, join, split

Operation = Dict[str, Any]
Patch = List[Operation]


def rebase(history: Iterable[Patch], patch: Patch) -> Patch:
    """
    Rewrite ``patch`` so it applies after every patch in ``history``.

    Args:
        history: Patches already applied locally, oldest first
        patch: Patch produced against the state before ``history``

    Returns:
        A new patch; neither input is modified
    """
    rebased = [dict(op) for op in patch]
    for pending in history:
        for applied in pending:
            rebased = _transform(applied, rebased)
    return rebased


def _transform(applied: Operation, ops: Patch) -> Patch:
    kind = applied.get("op")

    if kind == "add" or kind == "copy":
        return _after_insert(split(applied["path"]), ops)
    if kind == "remove":
        return _after_remove(split(applied["path"]), ops)
    if kind == "move":
        ops = _after_remove(split(applied["from"]), ops)
        return _after_insert(split(applied["path"]), ops)

    # replace and test leave the document structure alone
    return ops


def _after_insert(at: List[str], ops: Patch) -> Patch:
    if not at or _index(at[-1]) is None:
        return ops
    return [_rewrite(op, at, +1) for op in ops]


def _after_remove(at: List[str], ops: Patch) -> Patch:
    if not at:
        return ops

    result = []
    for op in ops:
        path = split(op["path"])
        if is_prefix(at, path) and not (op.get("op") == "add" and path == at):
            continue
        if "from" in op and is_prefix(at, split(op["from"])):
            continue
        result.append(_rewrite(op, at, -1) if _index(at[-1]) is not None else op)
    return result


def _rewrite(op: Operation, at: List[str], delta: int) -> Operation:
    op = dict(op)
    op["path"] = join(_shift(split(op["path"]), at, delta))
    if "from" in op:
        op["from"] = join(_shift(split(op["from"]), at, delta))
    return op


def _shift(parts: List[str], at: List[str], delta: int) -> List[str]:
    """Shift the array index in ``parts`` that sits beside ``at``."""
    parent, index = at[:-1], _index(at[-1])
    depth = len(parent)
    if len(parts) <= depth or parts[:depth] != parent:
        return parts

    current = _index(parts[depth])
    if current is None:
        return parts
    if (delta > 0 and current >= index) or (delta < 0 and current > index):
        parts = list(parts)
        parts[depth] = str(current + delta)
    return parts


def _index(token: str) -> Optional[int]:
    # "-" (append) has no fixed position
    return int(token) if token.isdigit() else None


__all__ = ['rebase']
