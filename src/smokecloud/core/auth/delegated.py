# smokecloud/core/auth/delegated.py
"""
Delegated identity scheme.

Token acquisition order:

1. cached token, if not expired (issue time + lifetime, minus leeway)
2. silent refresh with the cached refresh token (OIDC ``refresh_token`` grant)
3. interactive sign-in through the injected ``InteractiveLogin`` collaborator

The interactive consent flow itself lives outside this package.
"""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Protocol

import httpx

from smokecloud.contracts.credentials import TokenResponse, UserOrgInfo
from smokecloud.core.auth.cache import CacheStore, MemoryCacheStore, OrgInfoCache
from smokecloud.core.auth.models import AccessToken
from smokecloud.core.auth.discovery import IssuerDiscovery
from smokecloud.core.auth.provider import TokenProvider
from smokecloud.core.exceptions import AuthorizationError

logger = logging.getLogger(__name__)


class InteractiveLogin(Protocol):
    async def __call__(self, *, client_id: str, scopes: list[str]) -> TokenResponse: ...


class OrgDirectory(Protocol):
    async def lookup(self, access_token: str) -> UserOrgInfo: ...


def to_access_token(tokens: TokenResponse, received: float) -> AccessToken:
    return AccessToken(
        access_token=tokens.access_token,
        expires_at=received + tokens.expires_in,
        refresh_token=tokens.refresh_token,
        id_token=tokens.id_token,
    )


class DelegatedTokenProvider(TokenProvider):
    def __init__(
        self,
        *,
        client_id: str,
        authority: str,
        scopes: list[str],
        account_id: str | None = None,
        token_store: CacheStore | None = None,
        interactive: InteractiveLogin | None = None,
        directory: OrgDirectory | None = None,
        timeout: float | None = 10.0,
        org_cache: OrgInfoCache | None = None,
    ):
        super().__init__(
            cache_key=f"delegated.{client_id}.{account_id or 'default'}",
            org_cache=org_cache,
        )
        self._client_id = client_id
        self._scopes = list(scopes)
        self._discovery = IssuerDiscovery(authority, timeout)
        self._token_store = token_store or MemoryCacheStore()
        self._interactive = interactive
        self._directory = directory
        self._timeout = timeout

        self._token: AccessToken | None = None
        self._lock = asyncio.Lock()

    @property
    def _identity_key(self) -> str:
        return f"{self.cache_key}.tokens"

    async def remember(self, tokens: TokenResponse, received: float | None = None) -> AccessToken:
        """Store a token set obtained elsewhere (e.g. a previous CLI login)."""
        received = time.time() if received is None else received
        await self._token_store.set(
            self._identity_key,
            {"tokens": tokens.model_dump(mode="json"), "received": received},
        )
        self._token = to_access_token(tokens, received)
        return self._token

    async def init(self) -> None:
        if self._token is None:
            self._token = await self._load_cached()

    async def get_token(self) -> AccessToken:
        async with self._lock:
            if self._token is None:
                self._token = await self._load_cached()

            if self._token and self._token.is_valid():
                return self._token

            if self._token and self._token.refresh_token:
                try:
                    return await self._refresh(self._token.refresh_token)
                except (httpx.HTTPError, KeyError, ValueError) as exc:
                    logger.warning("Silent token refresh failed for %s: %s", self.cache_key, exc)

            return await self._sign_in()

    async def _load_cached(self) -> AccessToken | None:
        raw = await self._token_store.get(self._identity_key)
        if not raw:
            return None
        try:
            tokens = TokenResponse.model_validate(raw["tokens"])
            return to_access_token(tokens, float(raw["received"]))
        except (KeyError, TypeError, ValueError):
            logger.warning("Discarding malformed cached identity for %s", self.cache_key)
            return None

    async def _refresh(self, refresh_token: str) -> AccessToken:
        issuer = await self._discovery.metadata()

        data = {
            "grant_type": "refresh_token",
            "refresh_token": refresh_token,
            "client_id": self._client_id,
            "scope": " ".join(self._scopes),
        }

        async with httpx.AsyncClient(timeout=self._timeout) as client:
            r = await client.post(issuer.token_endpoint, data=data)
            r.raise_for_status()
            payload = r.json()

        tokens = TokenResponse.model_validate(payload)
        if tokens.refresh_token is None:
            tokens.refresh_token = refresh_token
        logger.info("Refreshed delegated token for %s", self.cache_key)
        return await self.remember(tokens)

    async def _sign_in(self) -> AccessToken:
        if self._interactive is None:
            raise AuthorizationError(
                f"No usable cached identity for {self.cache_key} and no interactive sign-in configured"
            )
        logger.info("Starting interactive sign-in for %s", self.cache_key)
        tokens = await self._interactive(client_id=self._client_id, scopes=self._scopes)
        return await self.remember(tokens)

    async def _fetch_org(self) -> UserOrgInfo | None:
        if self._directory is None:
            return None
        token = await self.get_token()
        return await self._directory.lookup(token.access_token)
