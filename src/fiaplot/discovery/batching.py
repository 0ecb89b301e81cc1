"""Bounded, batch-at-a-time concurrent execution with cooperative cancellation."""

from __future__ import annotations

import asyncio
import contextlib
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Iterable, List, Optional, TypeVar

from fiaplot import logger
from fiaplot.exceptions import DiscoveryCancelled

T = TypeVar("T")
R = TypeVar("R")


class CancellationToken:
    """
    Signals that a discovery run should stop.

    The token is checked between batches and raced against the batch in
    flight, so an abandoned run stops issuing requests and cancels the ones
    it already started.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._reason: Optional[str] = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> Optional[str]:
        return self._reason

    def cancel(self, reason: str = "cancelled") -> None:
        if self._event.is_set():
            return
        self._reason = reason
        self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise DiscoveryCancelled(
                f"Discovery run cancelled: {self._reason}",
                context={"reason": self._reason},
            )

    async def wait(self) -> None:
        await self._event.wait()


@dataclass(frozen=True)
class BatchOutcome(Generic[T, R]):
    """Settled result for one input item: a value or the exception it raised."""

    item: T
    value: Optional[R] = None
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def _settle_batch(
    batch: List[T],
    processor: Callable[[T], Awaitable[R]],
    cancel_token: Optional[CancellationToken],
) -> List[Any]:
    gathered = asyncio.gather(*(processor(item) for item in batch), return_exceptions=True)

    if cancel_token is None:
        results = await gathered
    else:
        waiter = asyncio.ensure_future(cancel_token.wait())
        try:
            await asyncio.wait({gathered, waiter}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            gathered.cancel()
            raise
        finally:
            waiter.cancel()

        if not gathered.done():
            gathered.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await gathered
            cancel_token.raise_if_cancelled()
        results = gathered.result()

    for result in results:
        if isinstance(result, BaseException) and not isinstance(result, Exception):
            raise result
    return results


async def process_batches(
    items: Iterable[T],
    batch_size: int,
    processor: Callable[[T], Awaitable[R]],
    cancel_token: Optional[CancellationToken] = None,
) -> List[BatchOutcome[T, R]]:
    """
    Run ``processor`` over ``items`` in fixed-size concurrent batches.

    Every call in a batch settles before the next batch starts, so at most
    ``batch_size`` calls are in flight. A call that raises an ``Exception``
    only marks its own outcome as failed.

    Args:
        items: Inputs to process
        batch_size: Maximum number of concurrent calls
        processor: Coroutine function applied to each item
        cancel_token: Optional token stopping the run between or during batches

    Returns:
        One outcome per item, in input order

    Raises:
        ValueError: If ``batch_size`` is smaller than 1
        DiscoveryCancelled: If the token is cancelled before all batches finish
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be at least 1, got {batch_size}")

    items = list(items)
    outcomes: List[BatchOutcome[T, R]] = []

    for start in range(0, len(items), batch_size):
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()

        batch = items[start:start + batch_size]
        logger.trace(f"Processing batch {start // batch_size + 1} ({len(batch)} items)")
        results = await _settle_batch(batch, processor, cancel_token)

        for item, result in zip(batch, results):
            if isinstance(result, Exception):
                outcomes.append(BatchOutcome(item, error=result))
            else:
                outcomes.append(BatchOutcome(item, value=result))

    return outcomes


__all__ = ["CancellationToken", "BatchOutcome", "process_batches"]
