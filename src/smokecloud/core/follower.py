# smokecloud/core/follower.py
"""
Incremental tail of a run's error stream.

One iteration step:

1. stop if the run was seen closed on a previous step
2. sleep ``poll_interval``
3. re-fetch the run and pick the phase from ``not run.open``
4. ranged fetch ``bytes=<n_read>-`` of the ``err`` file; only once it
   succeeds is the run recorded as closed
5. yield the new bytes, if any, and advance ``n_read``

Each step opens and closes its own requests; stopping iteration is all
the cleanup there is. Request failures are not caught; pulling again
after one retries the same step.
"""
from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import TYPE_CHECKING, AsyncIterator, Awaitable, Callable

import httpx

from smokecloud.contracts.run import Phase

if TYPE_CHECKING:
    from smokecloud.core.client import ApiClient

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 2.0


class PhasePolicy(str, Enum):
    """Which ``closed`` value picks the phase of a poll cycle.

    ``post_refresh`` uses the value just read from the service, so the
    cycle that first sees the run closed reads the archived copy.
    ``pre_refresh`` uses the value from the start of the cycle, so that
    cycle still reads the running copy.
    """

    POST_REFRESH = "post_refresh"
    PRE_REFRESH = "pre_refresh"


def slice_new_bytes(response: httpx.Response, n_read: int) -> bytes | None:
    """Bytes past ``n_read`` in a ranged response; ``None`` when there is no body."""
    if response.status_code == 204:
        return None
    if response.status_code == 416:
        return b""
    if response.status_code == 206:
        return response.content
    return response.content[n_read:]


class Follower:
    def __init__(
        self,
        client: ApiClient,
        run_id: str,
        *,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        phase_policy: PhasePolicy = PhasePolicy.POST_REFRESH,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._client = client
        self.run_id = run_id
        self.n_read = 0
        self.closed = False
        self._poll_interval = poll_interval
        self._phase_policy = PhasePolicy(phase_policy)
        self._sleep = sleep

    def __aiter__(self) -> AsyncIterator[bytes]:
        return self

    async def __anext__(self) -> bytes:
        while not self.closed:
            await self._sleep(self._poll_interval)

            run = await self._client.run(self.run_id)
            closed = not run.open

            response = await self._client.file_response(
                self.run_id, self._phase(closed), "err", range=f"bytes={self.n_read}-"
            )
            # only a successful fetch commits the close
            self.closed = closed
            chunk = slice_new_bytes(response, self.n_read)
            if chunk is None:
                self.closed = True
                break
            if chunk:
                self.n_read += len(chunk)
                return chunk

        logger.debug("Follower for %s finished after %d bytes", self.run_id, self.n_read)
        raise StopAsyncIteration

    def _phase(self, closed: bool) -> Phase:
        # at the start of a cycle the run is always still open
        if closed and self._phase_policy is PhasePolicy.POST_REFRESH:
            return Phase.storage
        return Phase.running
