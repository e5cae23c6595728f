# tests/conftest.py
from __future__ import annotations

from typing import Any, Callable

import httpx
import pytest

from smokecloud.contracts.credentials import OrgUser, UserOrgInfo
from smokecloud.core.auth.models import AccessToken
from smokecloud.core.auth.provider import TokenProvider
from smokecloud.core.client import ApiClient
from smokecloud.core.config import Settings

API = "http://api.test/v3"
STORAGE = "http://store.test/v3"


class FakeTokenProvider(TokenProvider):
    def __init__(self, token: str = "abc123"):
        super().__init__(cache_key="fake")
        self.token = token
        self.calls = 0

    async def get_token(self):
        self.calls += 1
        return AccessToken(self.token)

    async def _fetch_org(self):
        return UserOrgInfo(user=OrgUser(display_name="fake"))


def run_json(run_id: str = "r1", *, open: bool = True, open_time: str | None = None, chid: str = "room") -> dict[str, Any]:
    return {
        "run_id": run_id,
        "sim_id": {"account_id": "acc", "chid": chid},
        "open_time": open_time,
        "open": open,
        "version": 1,
        "manual_upload": False,
        "running": {"present": False},
        "stored": {"present": False},
        "no_archive": False,
    }


@pytest.fixture
def make_run():
    return run_json


@pytest.fixture
def mock_http(monkeypatch) -> Callable[[Callable[[httpx.Request], httpx.Response]], list[httpx.Request]]:
    """Route every ``httpx.AsyncClient`` through ``handler``; returns the request log."""

    def install(handler):
        seen: list[httpx.Request] = []

        def recording(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return handler(request)

        transport = httpx.MockTransport(recording)
        real_client = httpx.AsyncClient

        monkeypatch.setattr(
            httpx,
            "AsyncClient",
            lambda **kw: real_client(transport=transport, **kw),
        )
        return seen

    return install


@pytest.fixture
def cfg() -> Settings:
    return Settings(_env_file=None, api_endpoint=API, storage_endpoint=STORAGE, poll_interval=0)


@pytest.fixture
def sleeps() -> list[float]:
    return []


@pytest.fixture
def client(cfg, sleeps) -> ApiClient:
    async def fake_sleep(seconds: float) -> None:
        sleeps.append(seconds)

    c = ApiClient(FakeTokenProvider(), cfg=cfg, sleep=fake_sleep)
    c.account_id = "acc"
    return c
