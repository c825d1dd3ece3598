"""
Optimistic JSON-Patch synchronization with a remote peer.

The synchronizer keeps a shadow copy of a remote document. Local patches are
applied to the shadow immediately and sent to the peer in the background.
Each peer response carries the patch the peer actually committed; it is
rebased over the local patches sent after it and then applied to the shadow.
"""

import asyncio
from typing import Any, Callable, List, Optional, Tuple

from .metadata import JsonMetadata, Operation, Patch
from .pointer import rooted
from .transform import rebase
from ..transport.base import Request
from ..utils.config import TransportConfig
from ..utils.deferred import resolve
from ..utils.errors import PatchApplicationError, PatchSubmissionError
from ..utils.logging import get_logger


logger = get_logger("shadowsync.patch")

Transform = Callable[[List[Patch], Patch], Patch]


class JsonPatchSynchronizer:
    """
    Speculative document shadow kept in step with a remote peer.

    Invariants:
    - ``pending`` holds every patch applied since the last time all
      round-trips settled, in ``apply`` order.
    - ``inflight`` counts unsettled round-trips and is never negative.
    - ``pending`` is empty whenever ``inflight`` is zero.
    """

    def __init__(
        self,
        transport: Callable[[Request], Any],
        metadata: Optional[JsonMetadata] = None,
        transform: Transform = rebase,
    ):
        """
        Initialize the synchronizer.

        Args:
            transport: Transport, or any callable taking a request dict and
                returning (an awaitable of) the committed patch
            metadata: Document operations; plain JSON by default
            transform: Patch rebase function
        """
        self.transport = transport
        self.metadata = metadata or JsonMetadata()
        self.transform = transform

        self._shadow: Any = None
        self._attached = False
        self._generation = 0
        self._buffer: List[Patch] = []
        self._inflight = 0

    @classmethod
    def from_config(cls, config: TransportConfig, **kwargs) -> "JsonPatchSynchronizer":
        """Create a synchronizer talking HTTP to ``config.base_url``."""
        from ..transport.http import HttpTransport

        return cls(HttpTransport.from_config(config), **kwargs)

    @property
    def attached(self) -> bool:
        return self._attached

    @property
    def shadow(self) -> Any:
        """Copy of the current shadow document."""
        return self.metadata.clone(self._shadow)

    @property
    def pending(self) -> Tuple[Patch, ...]:
        return tuple(self._buffer)

    @property
    def inflight(self) -> int:
        return self._inflight

    def attach(self, document: Any) -> None:
        """Establish the shadow from ``document``, discarding any previous state.

        Responses to patches sent before the call are ignored.
        """
        self._shadow = self.metadata.clone(document)
        self._attached = True
        self._reset()
        logger.debug("shadow_attached", generation=self._generation)

    def detach(self) -> None:
        """Drop the shadow; ``apply`` becomes a no-op until the next attach."""
        self._shadow = None
        self._attached = False
        self._reset()
        logger.debug("shadow_detached", generation=self._generation)

    async def fetch(self) -> Any:
        """Load the document from the peer and attach it."""
        document = await resolve(self.transport({"method": "GET"}))
        self.attach(document)
        return self.shadow

    def apply(self, patch: Patch) -> Optional["asyncio.Task[None]"]:
        """
        Apply ``patch`` locally and submit it to the peer.

        Must be called from a running event loop. The shadow reflects
        ``patch`` as soon as this returns. The returned task completes once
        the peer's response has been reconciled. It raises
        ``PatchSubmissionError`` if the round-trip failed and
        ``PatchApplicationError`` if the response could not be reconciled.

        Returns:
            The round-trip task, or None when no shadow is attached
        """
        if not self._attached:
            return None

        patch = [_normalize(op) for op in patch]
        shadow = self.metadata.patch(self._shadow, patch)
        # nothing is mutated unless the round-trip can be scheduled
        loop = asyncio.get_running_loop()

        self._shadow = shadow

        index = len(self._buffer)
        self._buffer.append(patch)
        self._inflight += 1

        logger.debug(
            "patch_applied",
            position=index,
            operations=len(patch),
            inflight=self._inflight,
        )

        request = {"method": "PATCH", "entity": patch}
        return loop.create_task(self._submit(request, index, self._generation))

    def update(self, document: Any) -> Optional["asyncio.Task[None]"]:
        """Apply whatever patch turns the shadow into ``document``.

        Returns None when nothing changed or no shadow is attached.
        """
        if not self._attached:
            return None

        patch = self.metadata.diff(self._shadow, document)
        if not patch:
            return None
        return self.apply(patch)

    async def _submit(self, request: Request, index: int, generation: int) -> None:
        try:
            remote_patch = await resolve(self.transport(request))
        except Exception as e:
            if generation != self._generation:
                raise PatchSubmissionError(cause=e) from e
            self._settle()
            logger.warning(
                "patch_submission_failed",
                position=index,
                inflight=self._inflight,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise PatchSubmissionError(f"Patch submission failed: {e}", cause=e) from e

        if generation != self._generation:
            logger.debug("stale_response_ignored", position=index)
            return

        later = self._buffer[index + 1:]
        self._settle()

        try:
            remote_patch = self.transform(later, [_normalize(op) for op in remote_patch or []])
        except Exception as e:
            logger.warning(
                "patch_rebase_failed",
                position=index,
                inflight=self._inflight,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise PatchApplicationError(f"Could not rebase peer response: {e}", cause=e) from e

        self._shadow = self.metadata.patch(self._shadow, remote_patch)

        logger.debug(
            "patch_rebased",
            position=index,
            rebased_over=len(later),
            operations=len(remote_patch),
            inflight=self._inflight,
        )

    def _settle(self) -> None:
        self._inflight -= 1
        if self._inflight == 0:
            self._buffer = []

    def _reset(self) -> None:
        self._generation += 1
        self._buffer = []
        self._inflight = 0


def _normalize(op: Operation) -> Operation:
    normalized = dict(op)
    normalized["path"] = rooted(op["path"])
    if "from" in op:
        normalized["from"] = rooted(op["from"])
    return normalized


__all__ = ['JsonPatchSynchronizer']
