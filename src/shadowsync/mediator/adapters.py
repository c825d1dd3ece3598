"""
Uniform adapters around items and collections.

Item adapters expose ``get``/``set``/``keys``/``watch_all`` over a dict or a
plain object. Collection adapters expose ``add``/``remove``/``for_each``/
``watch`` over a collection; the in-memory ``ListAdapter`` and
``SortedListAdapter`` are provided here, remote-backed adapters may return
awaitables from ``add`` and ``remove``.
"""

import bisect
import functools
from abc import ABC, abstractmethod
from collections.abc import MutableMapping
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from .identity_map import Comparator, Symbolizer
from ..utils.logging import get_logger

logger = get_logger("shadowsync.mediator.adapters")

Unwatch = Callable[[], None]
ChangeCallback = Callable[[str, Any], Any]

_MISSING = object()


class Observable:
    """Mixin for items that announce their own attribute changes.

    Adapters watching an observable item see changes no matter which code
    path made them.
    """

    def subscribe(self, callback: ChangeCallback) -> Unwatch:
        observers = self.__dict__.setdefault("_observers", [])
        observers.append(callback)

        def unsubscribe() -> None:
            if callback in observers:
                observers.remove(callback)

        return unsubscribe

    def _notify(self, prop: str, value: Any) -> None:
        for callback in list(self.__dict__.get("_observers", ())):
            callback(prop, value)

    def __setattr__(self, name: str, value: Any) -> None:
        changed = getattr(self, name, _MISSING) != value
        super().__setattr__(name, value)
        if changed and not name.startswith("_"):
            self._notify(name, value)


class ObservableDict(dict):
    """dict that announces key changes to subscribers."""

    def subscribe(self, callback: ChangeCallback) -> Unwatch:
        observers = self.__dict__.setdefault("_observers", [])
        observers.append(callback)

        def unsubscribe() -> None:
            if callback in observers:
                observers.remove(callback)

        return unsubscribe

    def _notify(self, prop: str, value: Any) -> None:
        for callback in list(self.__dict__.get("_observers", ())):
            callback(prop, value)

    def __setitem__(self, key: str, value: Any) -> None:
        changed = self.get(key, _MISSING) != value
        super().__setitem__(key, value)
        if changed:
            self._notify(key, value)

    def update(self, *args, **kwargs) -> None:
        for key, value in dict(*args, **kwargs).items():
            self[key] = value


class ItemAdapter(ABC):
    """Property-level view of a single item."""

    def __init__(self, obj: Any, options: Optional[Dict[str, Any]] = None):
        self.obj = obj
        self.options = dict(options or {})

    @abstractmethod
    def get(self, prop: str, default: Any = None) -> Any:
        ...

    @abstractmethod
    def set(self, prop: str, value: Any) -> None:
        ...

    @abstractmethod
    def keys(self) -> List[str]:
        ...

    @abstractmethod
    def watch_all(self, callback: ChangeCallback) -> Unwatch:
        """Call ``callback(prop, value)`` on every property change."""


class ObjectAdapter(ItemAdapter):
    """Adapter for dicts and attribute-bearing objects.

    Observable items report every change. For other items only changes made
    through this adapter are reported.
    """

    def __init__(self, obj: Any, options: Optional[Dict[str, Any]] = None):
        super().__init__(obj, options)
        self._is_mapping = isinstance(obj, MutableMapping)
        self._listeners: List[ChangeCallback] = []

    @property
    def observable(self) -> bool:
        return callable(getattr(self.obj, "subscribe", None))

    def get(self, prop: str, default: Any = None) -> Any:
        if self._is_mapping:
            return self.obj.get(prop, default)
        return getattr(self.obj, prop, default)

    def set(self, prop: str, value: Any) -> None:
        if self._is_mapping:
            self.obj[prop] = value
        else:
            setattr(self.obj, prop, value)

        if not self.observable:
            for callback in list(self._listeners):
                callback(prop, value)

    def update(self, changes: Dict[str, Any]) -> None:
        for prop, value in changes.items():
            self.set(prop, value)

    def keys(self) -> List[str]:
        if self._is_mapping:
            return list(self.obj.keys())
        return [k for k in vars(self.obj) if not k.startswith("_")]

    def watch_all(self, callback: ChangeCallback) -> Unwatch:
        if self.observable:
            return self.obj.subscribe(callback)

        self._listeners.append(callback)

        def unwatch() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unwatch


class CollectionAdapter(ABC):
    """Collection-level view used by the collection mediator.

    ``symbolizer`` maps an item to its identity key and ``identity_comparator``
    returns 0 for two representations of the same item; without either, items
    are the same only when they are the same object. ``comparator`` is the
    sort order and never decides identity. A mediator copies the other side's
    capabilities when they are left unset. Adapters whose order depends on
    item properties provide a ``check_position(item)`` method.
    """

    symbolizer: Optional[Symbolizer] = None
    comparator: Optional[Comparator] = None
    identity_comparator: Optional[Comparator] = None

    @abstractmethod
    def add(self, item: Any, index: Optional[int] = None) -> Any:
        """Add ``item``; return a distinct copy if one was stored, else None.

        May return an awaitable resolving to the same.
        """

    @abstractmethod
    def remove(self, item: Any) -> Any:
        ...

    @abstractmethod
    def for_each(self, callback: Callable[[Any], Any]) -> None:
        ...

    @abstractmethod
    def watch(self, on_add: Callable[..., Any], on_remove: Callable[..., Any]) -> Unwatch:
        ...

    @abstractmethod
    def get_options(self) -> Dict[str, Any]:
        ...


class ListAdapter(CollectionAdapter):
    """In-memory observable list.

    Adding an item that is already present, or removing one that is absent,
    does nothing and notifies nobody, which is what ends add/remove echoes
    between mirrored collections.
    """

    def __init__(
        self,
        items: Optional[Iterable[Any]] = None,
        symbolizer: Optional[Symbolizer] = None,
        transform: Optional[Callable[[Any], Any]] = None,
        options: Optional[Dict[str, Any]] = None,
    ):
        """
        Args:
            items: Initial contents
            symbolizer: Identity key function; identity comparison when None
            transform: Produces the stored copy of each added item
            options: Passed to item adapters created for this side
        """
        self.symbolizer = symbolizer
        self.transform = transform
        self.options = dict(options or {})
        self._items: List[Any] = []
        self._watchers: List[Tuple[Callable[..., Any], Callable[..., Any]]] = []

        for item in items or ():
            self._insert(item, None)

    @property
    def items(self) -> List[Any]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self):
        return iter(list(self._items))

    def index_of(self, item: Any) -> int:
        """Position of ``item`` (by identity rules), or -1."""
        if self.symbolizer is not None:
            key = self.symbolizer(item)
            for i, existing in enumerate(self._items):
                if self.symbolizer(existing) == key:
                    return i
            return -1

        if self.identity_comparator is not None:
            for i, existing in enumerate(self._items):
                if self.identity_comparator(existing, item) == 0:
                    return i
            return -1

        for i, existing in enumerate(self._items):
            if existing is item:
                return i
        return -1

    def add(self, item: Any, index: Optional[int] = None) -> Any:
        if self.index_of(item) >= 0:
            return None

        stored = self.transform(item) if self.transform else item
        position = self._insert(stored, index)

        logger.debug("list_item_added", position=position, size=len(self._items))
        for on_add, _ in list(self._watchers):
            on_add(stored, position)

        return stored if stored is not item else None

    def remove(self, item: Any) -> Any:
        position = self.index_of(item)
        if position < 0:
            return None

        removed = self._items.pop(position)

        logger.debug("list_item_removed", position=position, size=len(self._items))
        for _, on_remove in list(self._watchers):
            on_remove(removed, position)
        return None

    def for_each(self, callback: Callable[[Any], Any]) -> None:
        for item in list(self._items):
            callback(item)

    def watch(self, on_add: Callable[..., Any], on_remove: Callable[..., Any]) -> Unwatch:
        entry = (on_add, on_remove)
        self._watchers.append(entry)

        def unwatch() -> None:
            if entry in self._watchers:
                self._watchers.remove(entry)

        return unwatch

    def get_options(self) -> Dict[str, Any]:
        return dict(self.options)

    def _insert(self, item: Any, index: Optional[int]) -> int:
        if index is None or index >= len(self._items):
            self._items.append(item)
            return len(self._items) - 1
        index = max(index, 0)
        self._items.insert(index, item)
        return index


class SortedListAdapter(ListAdapter):
    """ListAdapter kept ordered by ``comparator``; requested indices are ignored."""

    def __init__(
        self,
        comparator: Comparator,
        items: Optional[Iterable[Any]] = None,
        symbolizer: Optional[Symbolizer] = None,
        transform: Optional[Callable[[Any], Any]] = None,
        options: Optional[Dict[str, Any]] = None,
    ):
        self.comparator = comparator
        self._sort_key = functools.cmp_to_key(comparator)
        super().__init__(items, symbolizer=symbolizer, transform=transform, options=options)

    def _insert(self, item: Any, index: Optional[int]) -> int:
        keys = [self._sort_key(existing) for existing in self._items]
        position = bisect.bisect_right(keys, self._sort_key(item))
        self._items.insert(position, item)
        return position

    def check_position(self, item: Any) -> int:
        """Move ``item`` to where its current properties sort it.

        Returns the new position, or -1 if the item is not in the list.
        """
        position = self.index_of(item)
        if position < 0:
            return -1

        stored = self._items.pop(position)
        new_position = self._insert(stored, None)
        if new_position != position:
            logger.debug("list_item_moved", old_position=position, new_position=new_position)
        return new_position


__all__ = [
    'Observable',
    'ObservableDict',
    'ItemAdapter',
    'ObjectAdapter',
    'CollectionAdapter',
    'ListAdapter',
    'SortedListAdapter',
    'Unwatch',
]
