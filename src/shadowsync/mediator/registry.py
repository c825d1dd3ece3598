"""Adapter registry mapping objects and roles to adapter factories"""

from collections.abc import MutableMapping
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from .adapters import ObjectAdapter
from ..utils.errors import AdapterNotFoundError
from ..utils.logging import get_logger

logger = get_logger(__name__)

AdapterFactory = Callable[[Any, Optional[Dict[str, Any]]], Any]
Matcher = Union[type, Tuple[type, ...], Callable[[Any], bool]]
Resolver = Callable[[Any, str], Optional[AdapterFactory]]

OBJECT_ROLE = "object"


class AdapterRegistry:
    """Registry for adapter factories

    Entries are matched newest first, so later registrations override earlier
    ones. An instance is itself a resolver: ``registry(obj, role)``.
    """

    def __init__(self):
        self._entries: List[Tuple[str, Matcher, AdapterFactory]] = []

    def register(
        self,
        match: Matcher,
        factory: AdapterFactory,
        role: str = OBJECT_ROLE,
    ) -> None:
        """Register a factory

        Args:
            match: A type (or tuple of types) checked with isinstance, or a
                predicate taking the object
            factory: Called as ``factory(obj, options)``
            role: Role tag the factory serves
        """
        self._entries.append((role, match, factory))
        logger.debug("adapter_registered", role=role, factory=getattr(factory, "__name__", repr(factory)))

    def resolve(self, obj: Any, role: str = OBJECT_ROLE) -> Optional[AdapterFactory]:
        """Find the factory for ``obj`` in ``role``, or None"""
        for entry_role, match, factory in reversed(self._entries):
            if entry_role != role:
                continue
            if isinstance(match, (type, tuple)):
                if isinstance(obj, match):
                    return factory
            elif match(obj):
                return factory
        return None

    __call__ = resolve

    def create(self, obj: Any, role: str = OBJECT_ROLE, options: Optional[Dict[str, Any]] = None) -> Any:
        """Build an adapter for ``obj``

        Raises:
            AdapterNotFoundError: If nothing is registered for the object
        """
        return create_adapter(self, obj, role, options)


def create_adapter(
    resolver: Resolver,
    obj: Any,
    role: str = OBJECT_ROLE,
    options: Optional[Dict[str, Any]] = None,
) -> Any:
    """Resolve and instantiate an adapter, failing loudly when none matches"""
    factory = resolver(obj, role)
    if factory is None:
        raise AdapterNotFoundError(obj, role)
    return factory(obj, options)


def _is_plain_object(obj: Any) -> bool:
    return isinstance(obj, MutableMapping) or hasattr(obj, "__dict__")


def default_registry() -> AdapterRegistry:
    """Registry adapting dicts and attribute-bearing objects with ObjectAdapter"""
    registry = AdapterRegistry()
    registry.register(_is_plain_object, ObjectAdapter)
    return registry


__all__ = [
    'AdapterRegistry',
    'AdapterFactory',
    'Resolver',
    'OBJECT_ROLE',
    'create_adapter',
    'default_registry',
]
