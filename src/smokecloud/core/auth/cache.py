# smokecloud/core/auth/cache.py
"""Key/value cache stores used for org info and delegated identities."""
from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from smokecloud.contracts.credentials import UserOrgInfo

logger = logging.getLogger(__name__)


class CacheStore(ABC):

    @abstractmethod
    async def get(self, key: str) -> Any | None: ...

    @abstractmethod
    async def set(self, key: str, value: Any) -> None: ...

    @abstractmethod
    async def delete(self, key: str) -> None: ...


class MemoryCacheStore(CacheStore):
    def __init__(self):
        self._data: dict[str, Any] = {}

    async def get(self, key: str) -> Any | None:
        return self._data.get(key)

    async def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)


class FileCacheStore(CacheStore):
    """JSON document on disk, one top-level key per entry."""

    def __init__(self, path: str | Path):
        self._path = Path(path).expanduser()

    def _load(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        raw = self._path.read_text(encoding="utf-8")
        try:
            data = json.loads(raw) if raw.strip() else {}
        except json.JSONDecodeError:
            logger.warning("Ignoring unreadable cache file %s", self._path)
            return {}
        return data if isinstance(data, dict) else {}

    def _dump(self, data: dict[str, Any]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(data, indent=2), encoding="utf-8")

    async def get(self, key: str) -> Any | None:
        return self._load().get(key)

    async def set(self, key: str, value: Any) -> None:
        data = self._load()
        data[key] = value
        self._dump(data)

    async def delete(self, key: str) -> None:
        data = self._load()
        if data.pop(key, None) is not None:
            self._dump(data)


def get_cache_store(store_type: str = "memory", path: str | Path | None = None) -> CacheStore:
    if store_type == "memory":
        return MemoryCacheStore()
    if store_type == "file":
        if path is None:
            raise ValueError("file cache store requires a path")
        return FileCacheStore(path)
    raise ValueError(f"cache store {store_type} not supported")


class OrgInfoCache:
    """Org info per credential, stored under ``<credential_id>.userOrgInfo``."""

    def __init__(self, store: CacheStore):
        self._store = store

    @staticmethod
    def _key(credential_id: str) -> str:
        return f"{credential_id}.userOrgInfo"

    async def get(self, credential_id: str) -> UserOrgInfo | None:
        raw = await self._store.get(self._key(credential_id))
        if raw is None:
            return None
        try:
            return UserOrgInfo.model_validate(raw)
        except ValueError:
            logger.warning("Discarding malformed cached org info for %s", credential_id)
            return None

    async def set(self, credential_id: str, info: UserOrgInfo) -> None:
        await self._store.set(
            self._key(credential_id), info.model_dump(mode="json", exclude_none=True)
        )

    async def clear(self, credential_id: str) -> None:
        await self._store.delete(self._key(credential_id))
