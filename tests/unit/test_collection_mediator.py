"""
Unit tests for collection mediation.
"""

import pytest

from shadowsync.mediator.adapters import ListAdapter, ObservableDict, SortedListAdapter
from shadowsync.mediator.collection_mediator import CollectionMediator, sync_collections
from shadowsync.mediator.registry import AdapterRegistry
from shadowsync.utils.errors import AdapterNotFoundError, ConfigurationError


def by_id(item):
    return item["id"]


def by_rank(a, b):
    return a["rank"] - b["rank"]


class TestSeeding:
    """Initial copy of the primary into the secondary."""

    def test_seed_adds_each_item_once(self, registry, manual_collection):
        x = ObservableDict(id=1, name="a")
        primary = ListAdapter([x])
        secondary = manual_collection(copy_factory=ObservableDict)

        sync_collections(primary, secondary, registry)

        assert secondary.added == [x]

    def test_seeded_copy_is_mediated_both_ways(self, registry):
        x = ObservableDict(id=1, name="a")
        primary = ListAdapter([x], symbolizer=by_id)
        secondary = ListAdapter(transform=ObservableDict)

        sync_collections(primary, secondary, registry)
        [y] = secondary.items
        assert y is not x
        assert y == {"id": 1, "name": "a"}

        x["name"] = "b"
        assert y["name"] == "b"

        y["name"] = "c"
        assert x["name"] == "c"

    def test_sync_disabled_skips_seed(self, registry, manual_collection):
        primary = ListAdapter([ObservableDict(id=1)])
        secondary = manual_collection()

        sync_collections(primary, secondary, registry, {"sync": False})
        assert secondary.added == []

        y = ObservableDict(id=2)
        primary.add(y)
        assert secondary.added == [y]

    def test_missing_adapter_raises_synchronously(self):
        primary = ListAdapter([{"id": 1}])
        secondary = ListAdapter(transform=dict)

        with pytest.raises(AdapterNotFoundError) as exc_info:
            sync_collections(primary, secondary, AdapterRegistry())

        assert isinstance(exc_info.value, ConfigurationError)
        assert exc_info.value.role == "object"

    def test_secondary_inherits_identity(self, registry):
        primary = ListAdapter(symbolizer=by_id)
        secondary = ListAdapter()

        CollectionMediator(primary, secondary, registry)

        assert secondary.symbolizer is by_id


class TestForwarding:
    """Adds and removes travel in both directions."""

    def test_remove_forwarded_once_with_the_copy(self, registry, manual_collection):
        copies = []

        def make_copy(item):
            copies.append(ObservableDict(item))
            return copies[-1]

        x = ObservableDict(id=1, name="a")
        primary = ListAdapter([x])
        secondary = manual_collection(copy_factory=make_copy)
        sync_collections(primary, secondary, registry)

        primary.remove(x)

        [y] = copies
        assert len(secondary.removed) == 1
        assert secondary.removed[0] is y

    def test_remove_reaches_copy_without_symbolizer(self, registry):
        x = ObservableDict(name="x")
        z = ObservableDict(name="z")
        primary = ListAdapter([x, z])
        secondary = ListAdapter(transform=ObservableDict)
        sync_collections(primary, secondary, registry)
        y, w = secondary.items

        primary.remove(x)
        assert secondary.items == [w]
        assert secondary.items[0] is w

        secondary.remove(w)
        assert primary.items == []

    def test_removal_cancels_item_mediation(self, registry):
        x = ObservableDict(id=1, name="a")
        primary = ListAdapter([x], symbolizer=by_id)
        secondary = ListAdapter(transform=ObservableDict)
        sync_collections(primary, secondary, registry)
        [y] = secondary.items

        primary.remove(x)
        x["name"] = "after"

        assert secondary.items == []
        assert y["name"] == "a"

    def test_secondary_changes_reach_primary(self, registry):
        primary = ListAdapter(symbolizer=by_id)
        secondary = ListAdapter()
        sync_collections(primary, secondary, registry)

        item = {"id": 7}
        secondary.add(item)
        assert primary.items == [item]

        secondary.remove(item)
        assert primary.items == []

    def test_echo_is_not_forwarded_back(self, registry):
        primary = ListAdapter(symbolizer=by_id)
        secondary = ListAdapter(transform=ObservableDict)
        sync_collections(primary, secondary, registry)

        x = ObservableDict(id=1, name="a")
        primary.add(x, 0)

        assert primary.items == [x]
        [y] = secondary.items
        assert y is not x

        y["name"] = "from secondary"
        assert x["name"] == "from secondary"

        secondary.remove(y)
        assert primary.items == []
        assert secondary.items == []

    def test_nothing_forwarded_after_unsync(self, registry):
        x = ObservableDict(id=1, name="a")
        primary = ListAdapter([x], symbolizer=by_id)
        secondary = ListAdapter(transform=ObservableDict)
        unsync = sync_collections(primary, secondary, registry)
        [y] = secondary.items

        unsync()

        primary.add(ObservableDict(id=2))
        primary.remove(x)
        x["name"] = "changed"

        assert secondary.items == [y]
        assert y["name"] == "a"


class TestItemWatching:
    """Position checks and rediscovery."""

    def test_no_item_adapters_without_position_checks(self, spy_registry, manual_collection):
        x = {"id": 1}
        primary = ListAdapter([x])
        secondary = manual_collection()

        mediator = CollectionMediator(primary, secondary, spy_registry)
        mediator.start()
        primary.add({"id": 2})

        assert not mediator.orders_items
        assert spy_registry.calls == []

    def test_property_change_repositions_item(self, spy_registry):
        a = ObservableDict(id=1, rank=1)
        b = ObservableDict(id=2, rank=2)
        primary = ListAdapter([a, b])
        secondary = SortedListAdapter(by_rank)

        sync_collections(primary, secondary, spy_registry)
        assert secondary.items == [a, b]

        a["rank"] = 3
        assert secondary.items == [b, a]
        assert (a, "object") in spy_registry.calls

    def test_items_sharing_a_sort_key_keep_separate_records(self, registry):
        x1 = ObservableDict(rank=1, name="one")
        x2 = ObservableDict(rank=1, name="two")
        primary = SortedListAdapter(by_rank, [x1, x2])
        secondary = ListAdapter(transform=ObservableDict)

        sync_collections(primary, secondary, registry)
        y1, y2 = secondary.items

        x1["name"] = "ONE"
        x2["name"] = "TWO"

        assert y1["name"] == "ONE"
        assert y2["name"] == "TWO"
        assert secondary.comparator is by_rank

    def test_identity_comparator_is_inherited(self, registry):
        def same_id(a, b):
            return 0 if a["id"] == b["id"] else 1

        primary = ListAdapter()
        primary.identity_comparator = same_id
        secondary = ListAdapter()

        CollectionMediator(primary, secondary, registry)

        assert secondary.identity_comparator is same_id
        secondary.add({"id": 1})
        assert secondary.add({"id": 1}) is None
        assert len(secondary) == 1

    def test_copies_are_repositioned_on_their_own_side(self, registry):
        a = ObservableDict(id=1, rank=1)
        b = ObservableDict(id=2, rank=2)
        primary = ListAdapter([a, b])
        secondary = SortedListAdapter(by_rank, transform=ObservableDict)

        sync_collections(primary, secondary, registry)
        ya, yb = secondary.items
        assert ya is not a

        a["rank"] = 3

        assert secondary.items == [yb, ya]
        assert secondary.items[1] is ya

    def test_rediscovery_cancels_previous_mediation(self, registry, manual_collection):
        primary = manual_collection()
        copies = []

        def make_copy(item):
            copies.append(ObservableDict(item))
            return copies[-1]

        secondary = manual_collection(copy_factory=make_copy)
        sync_collections(primary, secondary, registry)

        x = ObservableDict(id=1, name="a")
        primary.emit_add(x)
        primary.emit_add(x)
        first, second = copies

        x["name"] = "b"
        assert second["name"] == "b"
        assert first["name"] == "a"

        first["name"] = "stale"
        assert x["name"] == "b"


class AsyncCollection:
    """Mixin turning ``add`` into a coroutine, like a remote-backed store."""

    fail_with = None

    async def add(self, item, index=None):
        self.added.append(item)
        if self.fail_with is not None:
            raise self.fail_with
        return ObservableDict(item)


class TestAsyncAdapters:
    """Adapters whose add resolves later."""

    @pytest.fixture
    def async_collection(self, manual_collection):
        return type("RemoteCollection", (AsyncCollection, manual_collection), {})

    @pytest.mark.asyncio
    async def test_copy_mediated_once_add_resolves(self, registry, manual_collection, async_collection):
        primary = manual_collection()
        secondary = async_collection()
        sync_collections(primary, secondary, registry)

        x = ObservableDict(id=1, name="a")
        [task] = primary.emit_add(x)
        copy = await task

        assert secondary.added == [x]
        x["name"] = "b"
        assert copy["name"] == "b"

    @pytest.mark.asyncio
    async def test_add_failure_surfaces_on_task(self, registry, manual_collection, async_collection):
        primary = manual_collection()
        secondary = async_collection()
        secondary.fail_with = RuntimeError("store unavailable")
        sync_collections(primary, secondary, registry)

        [task] = primary.emit_add(ObservableDict(id=1))

        with pytest.raises(RuntimeError, match="store unavailable"):
            await task
