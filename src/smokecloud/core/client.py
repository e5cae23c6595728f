# smokecloud/core/client.py
"""
Run-lifecycle client for the SmokeCloud service.

``ApiClient`` composes a ``TokenProvider`` and a ``Transport``. ``init()``
resolves the caller's account once; every account-scoped call reuses it.
"""
from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime
from typing import Any, AsyncIterable, AsyncIterator, Awaitable, Callable

import httpx

from smokecloud.contracts.credentials import UserOrgInfo
from smokecloud.contracts.data import (
    CurrentUsage,
    DataVector,
    MoneyTotal,
    PublicRunningStatus,
    RunBilling,
    RunData,
    Snapshot,
    User,
)
from smokecloud.contracts.run import Phase, ProgressInfo, RunEntry, RunFilter, SubmitStartParams
from smokecloud.core.auth.provider import TokenProvider
from smokecloud.core.config import Settings, settings as default_settings
from smokecloud.core.csv_data import csv_to_vector
from smokecloud.core.exceptions import InvalidArgument, MalformedResponse
from smokecloud.core.follower import Follower, PhasePolicy
from smokecloud.core.pagination import RunEntryIter, latest_of
from smokecloud.core.transport import Plane, Transport, ensure_success, unwrap

logger = logging.getLogger(__name__)

RunInput = bytes | str | AsyncIterable[bytes]


class ApiClient:
    def __init__(
        self,
        token_provider: TokenProvider,
        *,
        api_endpoint: str | None = None,
        storage_endpoint: str | None = None,
        cfg: Settings | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        cfg = cfg or default_settings
        self._token_provider = token_provider
        self.transport = Transport(
            token_provider=token_provider,
            api_endpoint=api_endpoint or cfg.api_endpoint,
            storage_endpoint=storage_endpoint or cfg.storage_endpoint,
            timeout=cfg.request_timeout,
        )
        self.poll_interval = cfg.poll_interval
        self.phase_policy = PhasePolicy(cfg.follower_phase_policy)
        self._sleep = sleep
        self.account_id: str | None = None

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    async def init(self) -> None:
        await self._token_provider.init()
        self.account_id = await self._resolve_account_id()
        logger.info("Client initialised for account %s", self.account_id)

    async def _account(self) -> str:
        if self.account_id is None:
            await self.init()
        return self.account_id

    async def _resolve_account_id(self) -> str:
        user = await self.me()
        account_id = user.resolved_account_id()
        if not account_id:
            raise MalformedResponse(
                "200: OK: /me did not report an account id", status=200, status_text="OK"
            )
        return account_id

    async def me(self) -> User:
        return User.model_validate(await self.transport.get_data("/me"))

    async def org(self) -> UserOrgInfo | None:
        return await self._token_provider.org()

    # ------------------------------------------------------------------
    # Runs
    # ------------------------------------------------------------------

    async def runs(self, run_filter: RunFilter | None = None) -> RunEntryIter:
        return RunEntryIter(self.transport, await self._account(), run_filter)

    async def latest_run(self, run_filter: RunFilter | None = None) -> RunEntry | None:
        """Most recently opened run matching ``run_filter``, scanning every page."""
        return await latest_of(await self.runs(run_filter))

    async def status(self) -> list[PublicRunningStatus]:
        data = await self.transport.get_data(f"/orgs/{await self._account()}/running_status")
        return [PublicRunningStatus.model_validate(item) for item in data]

    async def run(self, run_id: str) -> RunEntry:
        return RunEntry.model_validate(await self.transport.get_data(f"/runs/{run_id}"))

    async def progress(self, run_id: str) -> ProgressInfo:
        return ProgressInfo.model_validate(await self.transport.get_data(f"/runs/{run_id}/progress"))

    async def confirm_closed(self, run_id: str) -> bool:
        """Poll until the run reports ``open=False``. There is no timeout."""
        run = await self.run(run_id)
        while run.open:
            await self._sleep(self.poll_interval)
            run = await self.run(run_id)
        return not run.open

    async def new_run(
        self,
        params: SubmitStartParams,
        body: RunInput,
        *,
        idempotency_key: str | None = None,
    ) -> RunEntry:
        """Submit an input file and open a new run.

        Raises:
            InvalidArgument: If no CHID is given or the core count is unsupported.
            Conflict: On 409, either an idempotency replay or a model with
                the same CHID that is still open.
        """
        if not params.chid:
            raise InvalidArgument("no CHID provided")

        query: dict[str, str] = {
            "chid": params.chid,
            "fds_version": params.fds_version,
            "instance_type": params.resolved_instance_type().value,
        }
        if params.project:
            query["project"] = params.project
        query["apply_mpi_transform"] = "true"

        account_id = await self._account()
        # Not yet enforced by the service
        key = idempotency_key or str(uuid.uuid4())
        r = await self.transport.request(
            "POST",
            f"/orgs/{account_id}/runs",
            params=query,
            headers={"Idempotency-Key": key, "Content-Type": "application/octet-stream"},
            content=body,
        )
        run = RunEntry.model_validate(unwrap(r))
        logger.info("Opened run %s for %s", run.run_id, params.chid)
        return run

    async def stop(self, run_id: str) -> str:
        return await self.transport.text("PUT", f"/runs/{run_id}/stop")

    async def kill(self, run_id: str) -> str:
        return await self.transport.text("PUT", f"/runs/{run_id}/kill")

    def follow(self, run_id: str) -> Follower:
        return Follower(
            self,
            run_id,
            poll_interval=self.poll_interval,
            phase_policy=self.phase_policy,
            sleep=self._sleep,
        )

    # ------------------------------------------------------------------
    # Artifacts
    # ------------------------------------------------------------------

    async def file_response(
        self,
        run_id: str,
        phase: Phase,
        file: str,
        *,
        range: str | None = None,
    ) -> httpx.Response:
        """Raw response for a run file. 416 (nothing past the range start) is not an error."""
        headers = {"Range": range} if range else None
        r = await self.transport.request(
            "GET", f"/runs/{run_id}/{file}", params={"phase": Phase(phase).value}, headers=headers
        )
        return ensure_success(r, allow=(416,))

    async def err(self, run_id: str, phase: Phase, *, range: str | None = None) -> bytes:
        return (await self.file_response(run_id, phase, "err", range=range)).content

    async def err_text(self, run_id: str, phase: Phase, *, range: str | None = None) -> str:
        return (await self.file_response(run_id, phase, "err", range=range)).text

    async def input(self, run_id: str, phase: Phase, *, range: str | None = None) -> bytes:
        return (await self.file_response(run_id, phase, "input", range=range)).content

    async def input_text(self, run_id: str, phase: Phase, *, range: str | None = None) -> str:
        return (await self.file_response(run_id, phase, "input", range=range)).text

    def zip(self, run_id: str) -> AsyncIterator[bytes]:
        return self.transport.stream(f"/runs/{run_id}/zip", plane=Plane.STORAGE)

    async def _resource_log(self, run_id: str, kind: str) -> DataVector[datetime, float]:
        data = await self.transport.get_data(f"/runs/{run_id}/log/{kind}")
        return DataVector[datetime, float].model_validate(data)

    async def mem_log(self, run_id: str) -> DataVector[datetime, float]:
        return await self._resource_log(run_id, "mem")

    async def cpu_log(self, run_id: str) -> DataVector[datetime, float]:
        return await self._resource_log(run_id, "cpu")

    async def disk_log(self, run_id: str) -> DataVector[datetime, float]:
        return await self._resource_log(run_id, "disk")

    async def data(
        self, run_id: str, phase: Phase, csvtype: str, value: str
    ) -> DataVector[float, float]:
        params = {"phase": Phase(phase).value, "csvtype": csvtype, "value": value}
        data = await self.transport.get_data(f"/runs/{run_id}/data", params=params)
        return DataVector[float, float].model_validate(data)

    async def run_data(self, run_id: str, phase: Phase | None = None) -> RunData:
        params = {"phase": Phase(phase).value} if phase is not None else None
        return RunData.model_validate(
            await self.transport.get_data(f"/runs/{run_id}/data/run", params=params)
        )

    async def snapshots(self, run_id: str) -> list[Snapshot]:
        data = await self.transport.get_json(f"/runs/{run_id}/snapshots", plane=Plane.STORAGE)
        return [Snapshot.model_validate(item) for item in data]

    async def latest_snapshot(self, run_id: str) -> Snapshot | None:
        snapshots = await self.snapshots(run_id)
        return max(snapshots, key=lambda s: s.time, default=None)

    async def snapshot_contents(self, run_id: str, snapshot_id: str) -> list[str]:
        return await self.transport.get_json(
            f"/runs/{run_id}/snapshots/{snapshot_id}/contents", plane=Plane.STORAGE
        )

    def snapshot_file(self, run_id: str, snapshot_id: str, path: str) -> AsyncIterator[bytes]:
        return self.transport.stream(
            f"/runs/{run_id}/snapshots/{snapshot_id}/contents/{path.lstrip('/')}",
            plane=Plane.STORAGE,
        )

    async def snapshot_series(
        self, run_id: str, snapshot_id: str, path: str, value: str, x_name: str = "Time"
    ) -> DataVector[float, float] | None:
        """One column of an output CSV stored in a snapshot, against time."""
        chunks = [chunk async for chunk in self.snapshot_file(run_id, snapshot_id, path)]
        return csv_to_vector(b"".join(chunks).decode("utf-8"), value, x_name)

    # ------------------------------------------------------------------
    # Usage and billing
    # ------------------------------------------------------------------

    async def load(self) -> CurrentUsage:
        return CurrentUsage.model_validate(
            await self.transport.get_data(f"/orgs/{await self._account()}/load")
        )

    async def outstanding(self, account_id_override: str | None = None) -> list[RunBilling]:
        account_id = account_id_override or await self._account()
        data = await self.transport.get_data(f"/orgs/{account_id}/billing/outstanding")
        return [RunBilling.model_validate(item) for item in data]

    async def outstanding_total(self) -> MoneyTotal:
        return await self._total(f"/orgs/{await self._account()}/billing/outstanding/total")

    async def coupons_total(self) -> MoneyTotal:
        return await self._total(f"/orgs/{await self._account()}/billing/coupons")

    async def _total(self, path: str) -> MoneyTotal:
        data: Any = await self.transport.get_data(path)
        currency, total = data
        return MoneyTotal(currency=str(currency).upper(), total=total)
