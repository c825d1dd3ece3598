"""
Item-keyed mapping with pluggable identity.

Items are matched by ``symbolizer(item)`` when a symbolizer is given, by
``comparator(a, b) == 0`` when only a comparator is given, and by object
identity otherwise. The comparator must be an equality test; a sort order
would merge distinct items that happen to sort together. This lets mutable,
unhashable objects (plain dicts, for instance) serve as keys while still
honoring application-level identity.
"""

from typing import Any, Callable, Dict, Generic, Iterator, List, Optional, Tuple, TypeVar

V = TypeVar('V')

Symbolizer = Callable[[Any], Any]
Comparator = Callable[[Any, Any], int]


class IdentityMap(Generic[V]):
    """Map from items to values under a symbolizer/comparator identity."""

    def __init__(
        self,
        symbolizer: Optional[Symbolizer] = None,
        comparator: Optional[Comparator] = None,
    ):
        self.symbolizer = symbolizer
        self.comparator = comparator
        # symbol -> (item, value), used when a symbolizer is set
        self._by_symbol: Dict[Any, Tuple[Any, V]] = {}
        # [item, value] pairs, scanned otherwise
        self._entries: List[List[Any]] = []

    def _same(self, a: Any, b: Any) -> bool:
        if self.comparator is not None:
            return self.comparator(a, b) == 0
        return a is b

    def _find(self, item: Any) -> Optional[int]:
        for i, (key, _) in enumerate(self._entries):
            if self._same(key, item):
                return i
        return None

    def get(self, item: Any, default: Optional[V] = None) -> Optional[V]:
        if self.symbolizer is not None:
            entry = self._by_symbol.get(self.symbolizer(item))
            return entry[1] if entry is not None else default

        i = self._find(item)
        return self._entries[i][1] if i is not None else default

    def set(self, item: Any, value: V) -> V:
        """Store ``value`` for ``item`` and return it."""
        if self.symbolizer is not None:
            self._by_symbol[self.symbolizer(item)] = (item, value)
            return value

        i = self._find(item)
        if i is None:
            self._entries.append([item, value])
        else:
            self._entries[i][1] = value
        return value

    def remove(self, item: Any) -> Optional[V]:
        """Remove ``item`` and return its value, or None if it was absent."""
        if self.symbolizer is not None:
            entry = self._by_symbol.pop(self.symbolizer(item), None)
            return entry[1] if entry is not None else None

        i = self._find(item)
        if i is None:
            return None
        return self._entries.pop(i)[1]

    def has(self, item: Any) -> bool:
        if self.symbolizer is not None:
            return self.symbolizer(item) in self._by_symbol
        return self._find(item) is not None

    __contains__ = has

    def items(self) -> Iterator[Tuple[Any, V]]:
        if self.symbolizer is not None:
            return iter(list(self._by_symbol.values()))
        return iter([(key, value) for key, value in self._entries])

    def for_each(self, callback: Callable[[V, Any], Any]) -> None:
        """Call ``callback(value, item)`` for every entry."""
        for item, value in self.items():
            callback(value, item)

    def clear(self) -> None:
        self._by_symbol.clear()
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._by_symbol) if self.symbolizer is not None else len(self._entries)


__all__ = ['IdentityMap', 'Symbolizer', 'Comparator']
