"""
Collection and item mediation.

This package keeps two live collections, and the items inside them, mirrored
in both directions.
"""

from .adapters import (
    CollectionAdapter,
    ItemAdapter,
    ListAdapter,
    ObjectAdapter,
    Observable,
    ObservableDict,
    SortedListAdapter,
)
from .collection_mediator import CollectionMediator, MediatorOptions, sync_collections
from .identity_map import IdentityMap
from .properties import mediate
from .registry import AdapterRegistry, create_adapter, default_registry

__all__ = [
    'AdapterRegistry',
    'CollectionAdapter',
    'CollectionMediator',
    'IdentityMap',
    'ItemAdapter',
    'ListAdapter',
    'MediatorOptions',
    'ObjectAdapter',
    'Observable',
    'ObservableDict',
    'SortedListAdapter',
    'create_adapter',
    'default_registry',
    'mediate',
    'sync_collections',
]
