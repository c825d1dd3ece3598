"""
Pytest configuration and shared fixtures for shadowsync tests.
"""

import asyncio
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import pytest

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from shadowsync.mediator.adapters import CollectionAdapter, ObjectAdapter
from shadowsync.mediator.registry import AdapterRegistry, default_registry


class FakePeer:
    """Remote peer whose responses are released by the test, in any order."""

    def __init__(self):
        self.requests: List[Dict[str, Any]] = []
        self.futures: List[asyncio.Future] = []

    async def __call__(self, request: Dict[str, Any]) -> Any:
        future = asyncio.get_running_loop().create_future()
        self.requests.append(request)
        self.futures.append(future)
        return await future

    async def wait_for_requests(self, count: int) -> None:
        for _ in range(100):
            if len(self.requests) >= count:
                return
            await asyncio.sleep(0)
        raise AssertionError(f"expected {count} requests, saw {len(self.requests)}")

    def respond(self, index: int, entity: Any) -> None:
        self.futures[index].set_result(entity)

    def fail(self, index: int, error: BaseException) -> None:
        self.futures[index].set_exception(error)


class ManualCollection(CollectionAdapter):
    """Collection adapter driven by the test.

    ``emit_add``/``emit_remove`` play the part of changes made by the owning
    subsystem; ``add``/``remove`` record what the mediator forwarded and hand
    back whatever ``copy_factory`` produces.
    """

    def __init__(
        self,
        items: Optional[List[Any]] = None,
        copy_factory: Optional[Callable[[Any], Any]] = None,
        options: Optional[Dict[str, Any]] = None,
    ):
        self.items = list(items or [])
        self.copy_factory = copy_factory
        self.options = dict(options or {})
        self.added: List[Any] = []
        self.removed: List[Any] = []
        self.watchers: List[tuple] = []

    def add(self, item, index=None):
        self.added.append(item)
        return self.copy_factory(item) if self.copy_factory else None

    def remove(self, item):
        self.removed.append(item)
        return None

    def for_each(self, callback):
        for item in list(self.items):
            callback(item)

    def watch(self, on_add, on_remove):
        entry = (on_add, on_remove)
        self.watchers.append(entry)

        def unwatch():
            if entry in self.watchers:
                self.watchers.remove(entry)

        return unwatch

    def get_options(self):
        return dict(self.options)

    def emit_add(self, item, index=None):
        return [on_add(item, index) for on_add, _ in list(self.watchers)]

    def emit_remove(self, item, index=None):
        return [on_remove(item, index) for _, on_remove in list(self.watchers)]


class SpyRegistry(AdapterRegistry):
    """Registry recording every resolve call."""

    def __init__(self):
        super().__init__()
        self.calls: List[tuple] = []

    def resolve(self, obj, role="object"):
        self.calls.append((obj, role))
        return super().resolve(obj, role)

    __call__ = resolve


@pytest.fixture
def peer() -> FakePeer:
    """Remote peer with manually released responses."""
    return FakePeer()


@pytest.fixture
def registry() -> AdapterRegistry:
    """Default adapter registry."""
    return default_registry()


@pytest.fixture
def spy_registry() -> SpyRegistry:
    """Registry that adapts dicts and objects and records lookups."""
    spy = SpyRegistry()
    spy.register(lambda obj: isinstance(obj, dict) or hasattr(obj, "__dict__"), ObjectAdapter)
    return spy


@pytest.fixture
def manual_collection() -> Callable[..., ManualCollection]:
    """Factory for test-driven collection adapters."""
    return ManualCollection
