"""
Client-side state helpers for the sign-up form and the dashboard.

UsernameChecker: each update() supersedes the previous one. The pending
check is cancelled and, if an older request still completes, its result is
dropped, so `result` always describes the latest candidate.

AcceptToggle: the new value is applied locally before the server answers
and reverted if the request fails.
"""
import asyncio
import logging
from typing import Callable, Optional

from .api import ApiError, CheckResult, FeedbackClient

logger = logging.getLogger(__name__)


class UsernameChecker:
    def __init__(
        self,
        client: FeedbackClient,
        delay: float = 0.3,
        on_result: Optional[Callable[[CheckResult], None]] = None,
    ):
        self._client = client
        self.delay = delay
        self._on_result = on_result
        self._task: Optional[asyncio.Task] = None
        self._generation = 0
        self.result: Optional[CheckResult] = None

    @property
    def checking(self) -> bool:
        return self._task is not None and not self._task.done()

    def update(self, candidate: str) -> asyncio.Task:
        """Schedule a check for `candidate`, cancelling any earlier one."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._generation += 1
        self._task = asyncio.create_task(self._run(candidate, self._generation))
        return self._task

    async def _run(self, candidate: str, generation: int) -> Optional[CheckResult]:
        await asyncio.sleep(self.delay)
        if not candidate:
            return None
        try:
            result = await self._client.check_username(candidate)
        except ApiError as e:
            result = CheckResult(candidate, None, e.message or "Error checking username")
        if generation != self._generation:
            return None  # superseded while in flight
        self.result = result
        if self._on_result:
            self._on_result(result)
        return result

    async def wait(self) -> Optional[CheckResult]:
        """Wait for the latest scheduled check; returns its result (or None)."""
        if self._task is None:
            return self.result
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        return self.result

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._generation += 1


class AcceptToggle:
    def __init__(self, client: FeedbackClient, value: bool = True):
        self._client = client
        self.value = value
        self.pending = False

    async def refresh(self) -> bool:
        self.value = await self._client.get_accepting()
        return self.value

    async def set(self, value: bool) -> bool:
        """
        Flip locally, then confirm with the server.

        Raises:
            ApiError: the server rejected the change; `value` is back to the
                previous state
        """
        previous = self.value
        self.value = value
        self.pending = True
        try:
            confirmed = await self._client.set_accepting(value)
        except ApiError:
            logger.warning("accept toggle rejected, reverting to %s", previous)
            self.value = previous
            raise
        finally:
            self.pending = False
        self.value = confirmed
        return confirmed
