# hub/sync/subscription.py
from __future__ import annotations

import asyncio
import inspect
import logging
from contextlib import aclosing
from typing import Any, AsyncIterator, Awaitable, Callable, Generic, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

# seconds before a failed stream is reopened
RESUBSCRIBE_DELAY = 1.0

Deliver = Callable[["Subscription[T]", T], Awaitable[None]]
OnFailure = Callable[["Subscription[T]"], None]


async def call_listener(listener: Callable[[Any], Any], value: Any) -> None:
    """Listeners may be plain functions or coroutines."""
    result = listener(value)
    if inspect.isawaitable(result):
        await result


class Subscription(Generic[T]):
    """
    One live push subscription: a task draining one async iterator.
    cancel() makes the handle inert at once; whatever the iterator
    produces afterwards is dropped. If the iterator itself fails, the handle
    goes inert and on_failure is told so its owner can recover.
    """

    def __init__(
        self,
        source: AsyncIterator[T],
        deliver: Deliver,
        *,
        name: str,
        on_failure: Optional[OnFailure] = None,
    ):
        self.name = name
        self._on_failure = on_failure
        self._active = True
        self._task = asyncio.create_task(self._run(source, deliver), name=name)

    @property
    def active(self) -> bool:
        return self._active

    def cancel(self) -> None:
        if not self._active:
            return
        self._active = False
        self._task.cancel()
        logger.debug("subscription %s canceled", self.name)

    async def _run(self, source: AsyncIterator[T], deliver: Deliver) -> None:
        try:
            async with aclosing(source) as items:
                async for item in items:
                    if not self._active:
                        logger.debug("stale delivery dropped on %s", self.name)
                        return
                    await deliver(self, item)
        except asyncio.CancelledError:
            raise
        except Exception:
            # store-side failure ends this subscription only
            logger.exception("subscription %s failed", self.name)
            if not self._active:
                return
            self._active = False
            if self._on_failure is not None:
                self._on_failure(self)


class SubscriptionSlot:
    """
    Holds at most one active Subscription of one kind.
    acquire() cancels the current handle before the next one exists.
    """

    def __init__(self, kind: str):
        self.kind = kind
        self._handle: Optional[Subscription] = None

    @property
    def current(self) -> Optional[Subscription]:
        return self._handle

    def owns(self, handle: Subscription) -> bool:
        return handle is self._handle and handle.active

    def discard(self, handle: Subscription) -> bool:
        """Forget a handle that already went inert. False if it was not ours."""
        if handle is not self._handle:
            return False
        self._handle = None
        return True

    def acquire(self, factory: Callable[[], Subscription]) -> Subscription:
        self.release()
        self._handle = factory()
        return self._handle

    def release(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
