"""
Bidirectional mediation between two collection adapters.

Items added to or removed from either collection are forwarded to the
other. When the receiving collection stores its own copy of an item, the
original and the copy are bound property-by-property so later edits to
either one show up in the other. Collections whose order depends on item
properties are asked to re-check an item's position whenever it changes.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Union

from .adapters import CollectionAdapter, Unwatch
from .identity_map import IdentityMap
from .properties import mediate
from .registry import OBJECT_ROLE, Resolver, create_adapter
from ..utils.config import MediatorConfig
from ..utils.deferred import when
from ..utils.logging import get_logger

logger = get_logger("shadowsync.mediator")

MediatorOptions = MediatorConfig


@dataclass
class ItemRecord:
    """Per-item bookkeeping for one side of a mediator."""
    adapter: Any
    unwatch: Optional[Unwatch] = None
    unmediate: Optional[Unwatch] = None
    # the other side's copy of the item, once one was discovered
    copy: Any = None

    def teardown(self) -> None:
        if self.unwatch:
            self.unwatch()
            self.unwatch = None
        if self.unmediate:
            self.unmediate()
            self.unmediate = None


class CollectionMediator:
    """
    Mirrors two collection adapters in both directions.

    Forwarding stops at the first echo: while an event is being forwarded,
    events the destination raises in response are not sent back. Deferred
    echoes are absorbed by the adapters, which ignore items they already
    hold.
    """

    def __init__(
        self,
        primary: CollectionAdapter,
        secondary: CollectionAdapter,
        resolver: Resolver,
        options: Union[MediatorOptions, Dict[str, Any], None] = None,
    ):
        """
        Initialize the mediator.

        Args:
            primary: Collection whose contents seed the secondary
            secondary: Mirrored collection
            resolver: ``resolver(obj, role)`` returning an item adapter factory
            options: ``MediatorOptions`` or a dict such as ``{"sync": False}``
        """
        self.primary = primary
        self.secondary = secondary
        self.resolver = resolver
        self.options = _coerce_options(options)

        # a side that declares a capability but left it unset borrows the primary's
        for capability in ("symbolizer", "comparator", "identity_comparator"):
            inherited = getattr(primary, capability, None)
            if hasattr(secondary, capability) and getattr(secondary, capability) is None and inherited:
                setattr(secondary, capability, inherited)

        # sort comparators order items, they do not identify them
        self._primary_items: IdentityMap[ItemRecord] = _identity_map(primary)
        self._secondary_items: IdentityMap[ItemRecord] = _identity_map(secondary)

        self._position_checks: List[Callable[[Any], Any]] = [
            adapter.check_position
            for adapter in (primary, secondary)
            if callable(getattr(adapter, "check_position", None))
        ]

        self._unwatchers: List[Unwatch] = []
        self._forwarding = False

    @property
    def orders_items(self) -> bool:
        """True when either side re-sorts items on property changes."""
        return bool(self._position_checks)

    def start(self) -> Callable[[], None]:
        """Seed the secondary (unless disabled) and begin forwarding.

        Returns:
            ``stop``
        """
        if self.options.sync:
            self.primary.for_each(self._seed)

        self._unwatchers = [
            self._init_forwarding(self.primary, self.secondary),
            self._init_forwarding(self.secondary, self.primary),
        ]

        logger.info(
            "collections_synced",
            seeded=self.options.sync,
            orders_items=self.orders_items,
        )
        return self.stop

    def stop(self) -> None:
        """Cancel every item watch and mediation, then stop forwarding."""
        self._primary_items.for_each(lambda record, item: record.teardown())
        self._secondary_items.for_each(lambda record, item: record.teardown())
        for unwatch in self._unwatchers:
            unwatch()
        self._unwatchers = []
        logger.info("collections_unsynced")

    def _items_of(self, side: CollectionAdapter) -> IdentityMap[ItemRecord]:
        return self._primary_items if side is self.primary else self._secondary_items

    def _seed(self, item: Any) -> Any:
        self._watch_item(item, self.primary)
        return when(
            self.secondary.add(item),
            lambda copy: self._on_copy(copy, item, self.primary, self.secondary),
        )

    def _init_forwarding(self, sender: CollectionAdapter, target: CollectionAdapter) -> Unwatch:
        def on_add(item: Any, index: Optional[int] = None) -> Any:
            if self._forwarding:
                return None
            self._watch_item(item, sender)
            return self._forward(target.add, sender, target, item, index)

        def on_remove(item: Any, index: Optional[int] = None) -> Any:
            if self._forwarding:
                return None
            counterpart = self._counterpart(item, sender, target)
            self._forget_item(item, sender, counterpart, target)
            return self._forward(target.remove, sender, target, counterpart)

        return sender.watch(on_add, on_remove)

    def _forward(self, method, sender, target, item, *args) -> Any:
        self._forwarding = True
        try:
            result = method(item, *args)
        finally:
            self._forwarding = False

        return when(result, lambda copy: self._on_copy(copy, item, sender, target))

    def _on_copy(self, copy, item, sender, target) -> Any:
        if copy is None or copy is item:
            return copy
        self._discover_item(copy, item, sender, target)
        return copy

    def _counterpart(self, item: Any, sender: CollectionAdapter, target: CollectionAdapter) -> Any:
        """The representation ``target`` holds of ``item``, which lives in ``sender``."""
        record = self._items_of(sender).get(item)
        if record is not None and record.copy is not None:
            return record.copy

        for original, record in self._items_of(target).items():
            if record.copy is item:
                return original
        return item

    def _discover_item(
        self,
        copy: Any,
        item: Any,
        sender: CollectionAdapter,
        target: CollectionAdapter,
    ) -> None:
        """Bind ``item`` (from ``sender``) to its ``copy`` held by ``target``."""
        item_map = self._items_of(sender)
        record = item_map.get(item)
        if record is not None:
            if record.unmediate:
                record.unmediate()
                record.unmediate = None
            if record.copy is not None and record.copy is not copy:
                stale = self._items_of(target).remove(record.copy)
                if stale is not None:
                    stale.teardown()
        else:
            record = item_map.set(item, ItemRecord(
                adapter=create_adapter(self.resolver, item, OBJECT_ROLE, sender.get_options())
            ))

        record.copy = copy
        # the copy is positioned by its own properties on the target side
        copy_record = self._watch_item(copy, target)
        if copy_record is not None:
            copy_adapter = copy_record.adapter
        else:
            copy_adapter = create_adapter(self.resolver, copy, OBJECT_ROLE, target.get_options())

        record.unmediate = mediate(record.adapter, copy_adapter)
        logger.debug("item_mediated", sender=type(sender).__name__, target=type(target).__name__)

    def _watch_item(self, item: Any, owner: CollectionAdapter) -> Optional[ItemRecord]:
        if not self._position_checks:
            return None

        item_map = self._items_of(owner)
        record = item_map.get(item)
        if record is not None:
            if record.unwatch:
                record.unwatch()
                record.unwatch = None
        else:
            record = item_map.set(item, ItemRecord(
                adapter=create_adapter(self.resolver, item, OBJECT_ROLE, owner.get_options())
            ))

        def on_change(prop: str, value: Any) -> None:
            for check_position in self._position_checks:
                check_position(item)

        record.unwatch = record.adapter.watch_all(on_change)
        return record

    def _forget_item(
        self,
        item: Any,
        sender: CollectionAdapter,
        counterpart: Any,
        target: CollectionAdapter,
    ) -> None:
        for item_map, key in ((self._items_of(sender), item), (self._items_of(target), counterpart)):
            record = item_map.remove(key)
            if record is not None:
                record.teardown()



def sync_collections(
    primary: CollectionAdapter,
    secondary: CollectionAdapter,
    resolver: Resolver,
    options: Union[MediatorOptions, Dict[str, Any], None] = None,
) -> Callable[[], None]:
    """
    Set up mediation between two collection adapters.

    Args:
        primary: Collection whose contents seed the secondary
        secondary: Mirrored collection
        resolver: ``resolver(obj, role)`` returning an item adapter factory
        options: ``{"sync": False}`` skips the initial seed

    Returns:
        A function that tears the mediation down; call it once
    """
    return CollectionMediator(primary, secondary, resolver, options).start()


def _coerce_options(options: Union[MediatorOptions, Dict[str, Any], None]) -> MediatorOptions:
    if options is None:
        return MediatorOptions()
    if isinstance(options, MediatorOptions):
        return options
    return MediatorOptions(**options)


def _identity_map(side: CollectionAdapter) -> IdentityMap[ItemRecord]:
    return IdentityMap(
        getattr(side, "symbolizer", None),
        getattr(side, "identity_comparator", None),
    )


__all__ = [
    'CollectionMediator',
    'ItemRecord',
    'MediatorOptions',
    'sync_collections',
]
