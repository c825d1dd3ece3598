"""
Document operations used by the patch synchronizer.

``JsonMetadata`` knows how to apply a patch to a JSON document, compute the
patch between two documents and clone documents. The synchronizer only talks
to this interface, so documents with a different representation can plug in
their own implementation.
"""

import copy
from typing import Any, Dict, List

import jsonpatch
from jsonpointer import JsonPointerException

from ..utils.errors import PatchApplicationError
from ..utils.logging import get_logger

logger = get_logger("shadowsync.patch.metadata")

Operation = Dict[str, Any]
Patch = List[Operation]


class JsonMetadata:
    """Apply and compute RFC 6902 patches on plain JSON documents."""

    def patch(self, document: Any, patch: Patch) -> Any:
        """Return a new document with ``patch`` applied. ``document`` is left untouched."""
        try:
            return jsonpatch.apply_patch(document, patch, in_place=False)
        except (jsonpatch.JsonPatchException, JsonPointerException) as e:
            logger.warning("patch_application_failed", error=str(e), operations=len(patch))
            raise PatchApplicationError(f"Could not apply patch: {e}", cause=e) from e

    def diff(self, source: Any, target: Any) -> Patch:
        """Return the patch that turns ``source`` into ``target``."""
        return jsonpatch.make_patch(source, target).patch

    def clone(self, document: Any) -> Any:
        return copy.deepcopy(document)


__all__ = ['JsonMetadata', 'Operation', 'Patch']
