"""
Optimistic JSON-Patch synchronization.

This package keeps a speculative shadow of a remote JSON document and
reconciles the peer's committed patches with local edits still in flight.
"""

from .metadata import JsonMetadata, Operation, Patch
from .pointer import rooted
from .synchronizer import JsonPatchSynchronizer
from .transform import rebase

__all__ = [
    'JsonMetadata',
    'JsonPatchSynchronizer',
    'Operation',
    'Patch',
    'rebase',
    'rooted',
]
