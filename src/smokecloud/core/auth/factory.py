# smokecloud/core/auth/factory.py
"""Token provider factory: one provider per credential scheme."""
from __future__ import annotations

import logging
from pathlib import Path

from smokecloud.contracts.credentials import (
    DelegatedCredential,
    KeyCredential,
    PasswordCredential,
    credential_id,
)
from smokecloud.core.auth.cache import CacheStore, OrgInfoCache, get_cache_store
from smokecloud.core.auth.delegated import DelegatedTokenProvider, InteractiveLogin
from smokecloud.core.auth.graph import GraphOrgDirectory
from smokecloud.core.auth.keys import KeyTokenProvider
from smokecloud.core.auth.password import PasswordTokenProvider
from smokecloud.core.auth.provider import TokenProvider
from smokecloud.core.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


def default_cache_store(cfg: Settings | None = None) -> CacheStore:
    cfg = cfg or default_settings
    return get_cache_store("file", Path(cfg.cache_dir).expanduser() / "cache.json")


async def create_token_provider(
    credential: KeyCredential | PasswordCredential | DelegatedCredential,
    *,
    cfg: Settings | None = None,
    cache_store: CacheStore | None = None,
    interactive: InteractiveLogin | None = None,
) -> TokenProvider:
    """Build the provider for ``credential``.

    Args:
        credential: One of the three supported credential schemes.
        cfg: Settings to read endpoints from; defaults to the module settings.
        cache_store: Backend for org info and delegated identities.
            Defaults to an in-memory store.
        interactive: Sign-in collaborator for the delegated scheme.

    Raises:
        TypeError: If ``credential`` is not one of the supported schemes.
        ConfigurationError: If key material is malformed.
    """
    cfg = cfg or default_settings
    store = cache_store or get_cache_store("memory")
    org_cache = OrgInfoCache(store)

    if isinstance(credential, KeyCredential):
        provider: TokenProvider = KeyTokenProvider(
            credential.id_key, credential.secret_key, org_cache=org_cache
        )
    elif isinstance(credential, PasswordCredential):
        provider = PasswordTokenProvider(
            account_id=credential.account_id,
            username=credential.username,
            password=credential.password,
            login_endpoint=cfg.login_endpoint,
            timeout=cfg.request_timeout,
            org_cache=org_cache,
        )
    elif isinstance(credential, DelegatedCredential):
        provider = DelegatedTokenProvider(
            client_id=credential.client_id,
            authority=cfg.delegated_authority,
            scopes=cfg.delegated_scopes,
            account_id=credential.account_id,
            token_store=store,
            interactive=interactive,
            directory=GraphOrgDirectory(cfg.graph_endpoint, cfg.request_timeout),
            timeout=cfg.request_timeout,
            org_cache=org_cache,
        )
        if credential.tokens is not None:
            await provider.remember(credential.tokens, credential.received)
    else:
        raise TypeError(f"Unrecognised credential type: {type(credential).__name__}")

    logger.info("Token provider created (%s)", credential_id(credential))
    return provider
