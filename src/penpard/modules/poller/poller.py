"""Bounded status polling of a long-running analysis job."""

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable

from penpard.config import DEFAULT_POLL_INTERVAL, DEFAULT_POLL_MAX_ATTEMPTS
from penpard.db.models import ScanStatus
from penpard.errors import AnalysisFailed, PollTimeout

from .models import PROGRESS_BY_STATUS, PollOutcome, PollUpdate, StatusSnapshot
from .sources import StatusSource

logger = logging.getLogger(__name__)


class AnalysisPoller:
    """
    Repeatedly queries a status source and yields progress updates.

    Every non-terminal query, including one that errors, consumes one
    attempt. When ``max_attempts`` queries pass without a terminal status
    the poller gives up with a ``timed_out`` update; the external job is
    left running.
    """

    def __init__(
        self,
        source: StatusSource,
        interval: float = DEFAULT_POLL_INTERVAL,
        max_attempts: int = DEFAULT_POLL_MAX_ATTEMPTS,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.source = source
        self.interval = interval
        self.max_attempts = max_attempts
        self._sleep = sleep

    async def poll(self, scan_id: str) -> AsyncIterator[PollUpdate]:
        progress = 0
        status = ScanStatus.QUEUED.value
        attempt = 0

        while True:
            attempt += 1
            message: str | None = None
            try:
                snapshot: StatusSnapshot | None = await self.source.fetch(scan_id)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.warning("Status query %d for scan %s failed: %s", attempt, scan_id, e)
                snapshot = None
                message = f"Status check failed: {e}"

            if snapshot is not None:
                status = snapshot.status.lower()
                message = snapshot.message

                if status == ScanStatus.COMPLETED.value:
                    yield PollUpdate(
                        scan_id, status, 100, message or "Analysis completed",
                        attempt, PollOutcome.COMPLETED,
                    )
                    return
                if status == ScanStatus.FAILED.value:
                    error = AnalysisFailed(message or "Analysis failed")
                    yield PollUpdate(
                        scan_id, status, progress, error.message,
                        attempt, PollOutcome.FAILED, error,
                    )
                    return
                if status == ScanStatus.STOPPED.value:
                    yield PollUpdate(
                        scan_id, status, progress, message or "Analysis stopped",
                        attempt, PollOutcome.STOPPED,
                    )
                    return

                progress = max(progress, PROGRESS_BY_STATUS.get(status, progress))

            if attempt >= self.max_attempts:
                error = PollTimeout(attempts=attempt)
                logger.info("Scan %s: %s", scan_id, error.message)
                yield PollUpdate(
                    scan_id, status, progress, error.message,
                    attempt, PollOutcome.TIMED_OUT, error,
                )
                return

            yield PollUpdate(scan_id, status, progress, message, attempt)
            await self._sleep(self.interval)
