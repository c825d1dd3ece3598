"""
shadowsync - keep local copies of shared data in step with other copies.

This package provides:
- Optimistic JSON-Patch synchronization against a remote peer
- Bidirectional mediation between two live collections and their items
"""

__version__ = "0.1.0"

from .patch import JsonPatchSynchronizer, JsonMetadata, rebase
from .mediator import (
    AdapterRegistry,
    CollectionMediator,
    ListAdapter,
    ObjectAdapter,
    SortedListAdapter,
    default_registry,
    mediate,
    sync_collections,
)
from .transport import CallableTransport, HttpTransport, Transport

__all__ = [
    'AdapterRegistry',
    'CallableTransport',
    'CollectionMediator',
    'HttpTransport',
    'JsonMetadata',
    'JsonPatchSynchronizer',
    'ListAdapter',
    'ObjectAdapter',
    'SortedListAdapter',
    'Transport',
    'default_registry',
    'mediate',
    'rebase',
    'sync_collections',
]
