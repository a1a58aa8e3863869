"""Cancellable tracking sessions over an AnalysisPoller."""

import asyncio
import logging

from .models import PollOutcome, PollUpdate
from .poller import AnalysisPoller

logger = logging.getLogger(__name__)


class TrackingSession:
    """
    Owns one polling task and the queue its updates flow through.

    Iterate it with ``async for`` to receive every update; the last one
    carries the final outcome. ``cancel()`` stops the task, including any
    pending sleep, and ends the stream with a ``cancelled`` update.
    Must be created inside a running event loop.
    """

    def __init__(self, poller: AnalysisPoller, scan_id: str):
        self.scan_id = scan_id
        self._poller = poller
        self._queue: asyncio.Queue[PollUpdate | None] = asyncio.Queue()
        self._last: PollUpdate | None = None
        self._task = asyncio.create_task(self._run(), name=f"track-{scan_id}")
        self._task.add_done_callback(self._on_done)

    async def _run(self) -> None:
        async for update in self._poller.poll(self.scan_id):
            self._last = update
            self._queue.put_nowait(update)

    def _on_done(self, task: asyncio.Task) -> None:
        if task.cancelled() and (self._last is None or not self._last.is_final):
            last = self._last
            self._last = PollUpdate(
                self.scan_id,
                last.status if last else "unknown",
                last.progress if last else 0,
                "Tracking cancelled",
                last.attempt if last else 0,
                PollOutcome.CANCELLED,
            )
            self._queue.put_nowait(self._last)
            logger.info("Stopped tracking scan %s", self.scan_id)
        self._queue.put_nowait(None)

    def __aiter__(self) -> "TrackingSession":
        return self

    async def __anext__(self) -> PollUpdate:
        update = await self._queue.get()
        if update is None:
            # Keep the end marker for later iterators.
            self._queue.put_nowait(None)
            raise StopAsyncIteration
        return update

    def cancel(self) -> None:
        self._task.cancel()

    @property
    def done(self) -> bool:
        return self._task.done()

    @property
    def final(self) -> PollUpdate | None:
        """The final update, once the session has ended."""
        if self._last is not None and self._last.is_final:
            return self._last
        return None

    async def wait(self) -> PollUpdate | None:
        """Wait for the session to end and return its final update."""
        await asyncio.wait({self._task})
        if not self._task.cancelled() and self._task.exception() is not None:
            raise self._task.exception()
        return self.final


def start_tracking(
    scan_id: str,
    poller: AnalysisPoller,
) -> TrackingSession:
    """Start an independent tracking session for one scan."""
    return TrackingSession(poller, scan_id)
