"""Two-way property binding between item adapters."""

from typing import Any, Callable

from .adapters import ItemAdapter, Unwatch
from ..utils.logging import get_logger

logger = get_logger("shadowsync.mediator.properties")

_MISSING = object()


def mediate(a: ItemAdapter, b: ItemAdapter) -> Unwatch:
    """
    Keep the properties of two item adapters equal.

    A change reported by either side is written to the other unless the
    other already holds that value. Writes made while propagating are not
    propagated again, so a change never bounces back.

    Returns:
        A function that cancels the binding; calling it again does nothing
    """
    propagating = False

    def forward_to(target: ItemAdapter) -> Callable[[str, Any], None]:
        def on_change(prop: str, value: Any) -> None:
            nonlocal propagating
            if propagating or target.get(prop, _MISSING) == value:
                return
            propagating = True
            try:
                target.set(prop, value)
            finally:
                propagating = False
        return on_change

    unwatch_a = a.watch_all(forward_to(b))
    unwatch_b = b.watch_all(forward_to(a))
    active = True

    def unmediate() -> None:
        nonlocal active
        if not active:
            return
        active = False
        unwatch_a()
        unwatch_b()
        logger.debug("mediation_cancelled")

    return unmediate


__all__ = ['mediate']
