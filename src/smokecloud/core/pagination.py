# smokecloud/core/pagination.py
"""Lazy iteration over the cursor-linked run listing of an account."""
from __future__ import annotations

import logging
from collections import deque
from typing import AsyncIterator
from urllib.parse import urlencode

from smokecloud.contracts.run import RunEntry, RunFilter
from smokecloud.core.exceptions import MalformedResponse
from smokecloud.core.transport import Transport, ensure_success, json_body

logger = logging.getLogger(__name__)


def first_page_path(account_id: str, run_filter: RunFilter | None = None) -> str:
    base = f"/orgs/{account_id}/runs"
    if run_filter is None:
        return base

    params: list[tuple[str, str]] = []
    if run_filter.updated_since is not None:
        params.append(("from_time", str(run_filter.updated_since)))
    if run_filter.chid:
        params.append(("chid", run_filter.chid))
    if run_filter.limit is not None:
        params.append(("limit", str(run_filter.limit)))
    if not params:
        return base
    return f"{base}?{urlencode(params)}"


class RunEntryIter:
    """Async iterator over ``RunEntry`` records, one page request at a time.

    Records are yielded in the order the server returns them. The
    iterator follows ``links.next`` until a page has none, and cannot be
    restarted: iterate again by asking the client for a new one.
    """

    def __init__(self, transport: Transport, account_id: str, run_filter: RunFilter | None = None):
        self._transport = transport
        self._next_path: str | None = first_page_path(account_id, run_filter)
        self._buffer: deque[RunEntry] = deque()

    def __aiter__(self) -> AsyncIterator[RunEntry]:
        return self

    async def __anext__(self) -> RunEntry:
        while not self._buffer:
            if self._next_path is None:
                raise StopAsyncIteration
            await self._fetch_page()
        return self._buffer.popleft()

    async def _fetch_page(self) -> None:
        # a failed page ends the iteration
        path, self._next_path = self._next_path, None
        r = ensure_success(await self._transport.request("GET", path))
        page = json_body(r)
        if not isinstance(page, dict) or not isinstance(page.get("data"), list):
            raise MalformedResponse(
                f"{r.status_code}: {r.reason_phrase}: run listing has no data array",
                status=r.status_code,
                status_text=r.reason_phrase,
                body=r.text,
            )

        self._buffer.extend(RunEntry.model_validate(item) for item in page["data"])
        links = page.get("links") or {}
        self._next_path = links.get("next") or None
        logger.debug(
            "Fetched run page %s (%d records, next=%s)", path, len(page["data"]), self._next_path
        )


def is_later(candidate: RunEntry, latest: RunEntry | None) -> bool:
    """Whether ``candidate`` was opened after ``latest``.

    A record without ``open_time`` never wins over one that has it.
    """
    if latest is None:
        return True
    if candidate.open_time is None:
        return False
    if latest.open_time is None:
        return True
    return candidate.open_time > latest.open_time


async def latest_of(entries: AsyncIterator[RunEntry]) -> RunEntry | None:
    latest: RunEntry | None = None
    async for entry in entries:
        if is_later(entry, latest):
            latest = entry
    return latest
