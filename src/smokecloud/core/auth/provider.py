# smokecloud/core/auth/provider.py
from __future__ import annotations

from abc import ABC, abstractmethod

from smokecloud.contracts.credentials import UserOrgInfo
from smokecloud.core.auth.cache import OrgInfoCache
from smokecloud.core.auth.models import AccessToken


class TokenProvider(ABC):
    """Produces bearer tokens for one credential.

    Subclasses form a closed set (key, password, delegated); build them
    with ``create_token_provider``.
    """

    def __init__(self, *, cache_key: str, org_cache: OrgInfoCache | None = None) -> None:
        self.cache_key = cache_key
        self._org_cache = org_cache

    async def init(self) -> None:
        """Prepare the provider. Default: nothing to do."""

    @abstractmethod
    async def get_token(self) -> AccessToken:
        """
        Return a valid access token.
        Implementations must refresh or re-authenticate if needed.
        """
        ...

    async def acquire_token(self) -> str:
        return (await self.get_token()).bearer

    async def org(self) -> UserOrgInfo | None:
        """Best-effort account/organization metadata, served from cache when present."""
        if self._org_cache is not None:
            cached = await self._org_cache.get(self.cache_key)
            if cached is not None:
                return cached
        return await self.refresh_org()

    async def refresh_org(self) -> UserOrgInfo | None:
        info = await self._fetch_org()
        if info is not None and self._org_cache is not None:
            await self._org_cache.set(self.cache_key, info)
        return info

    @abstractmethod
    async def _fetch_org(self) -> UserOrgInfo | None: ...
