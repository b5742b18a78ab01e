from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Generic, Hashable, TypeVar

from providerdash.domain import RefreshStatus
from providerdash.notifier import FailureReporter, LoggingReporter

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class DerivedQuery(Generic[K, V]):
    """An async fetch that re-runs whenever its input key changes.

    The last good value is kept until a newer fetch succeeds. Each dispatch
    gets a sequence number and a completion is applied only if no newer
    dispatch happened meanwhile, so the value always reflects the most
    recently requested key. Failures never propagate: they are logged,
    handed to the reporter and leave the value untouched.
    """

    def __init__(
        self,
        name: str,
        fetch: Callable[[K], Awaitable[V]],
        initial: V,
        *,
        reporter: FailureReporter | None = None,
    ) -> None:
        self.name = name
        self._fetch = fetch
        self._value = initial
        self._reporter = reporter or LoggingReporter()

        self._status = RefreshStatus.IDLE
        self._key: K | None = None
        self._dispatched = 0
        self._error: BaseException | None = None
        self._pending: set[asyncio.Task[None]] = set()
        self._closed = False

    @property
    def value(self) -> V:
        return self._value

    @property
    def status(self) -> RefreshStatus:
        return self._status

    @property
    def key(self) -> K | None:
        return self._key

    @property
    def error(self) -> BaseException | None:
        return self._error

    def set_key(self, key: K) -> asyncio.Task[None] | None:
        """Declare a new input; refetch only when it differs from the current one."""
        if self._dispatched and key == self._key:
            return None
        return self.refresh(key)

    def refresh(self, key: K) -> asyncio.Task[None]:
        """Dispatch a fetch for `key` on the running loop and return its task."""
        if self._closed:
            raise RuntimeError(f"{self.name}: query is closed")
        self._key = key
        self._dispatched += 1
        seq = self._dispatched
        self._status = RefreshStatus.LOADING
        logger.debug("%s: dispatch #%d key=%s", self.name, seq, key)

        task = asyncio.get_running_loop().create_task(self._run(seq, key))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    def _is_current(self, seq: int) -> bool:
        return not self._closed and seq == self._dispatched

    async def _run(self, seq: int, key: K) -> None:
        try:
            value = await self._fetch(key)
        except Exception as e:
            if not self._is_current(seq):
                logger.debug("%s: dropping stale failure #%d (%s)", self.name, seq, type(e).__name__)
                return
            self._status = RefreshStatus.ERRORED
            self._error = e
            try:
                await self._reporter.report(self.name, e)
            except Exception:
                logger.warning("%s: failure reporter raised", self.name, exc_info=True)
            return

        if not self._is_current(seq):
            logger.debug("%s: dropping stale result #%d (latest is #%d)", self.name, seq, self._dispatched)
            return
        self._value = value
        self._error = None
        self._status = RefreshStatus.READY

    async def settle(self) -> None:
        """Wait until every in-flight fetch has finished."""
        while self._pending:
            await asyncio.gather(*list(self._pending))

    async def close(self) -> None:
        """Stop applying results, then wait for in-flight fetches to finish."""
        self._closed = True
        await self.settle()

    def reopen(self) -> None:
        """Accept dispatches again after `close()`; the last value is kept."""
        self._closed = False
