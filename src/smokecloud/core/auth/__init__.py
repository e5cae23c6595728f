"""Credential schemes and token providers."""
from smokecloud.core.auth.cache import (
    CacheStore,
    FileCacheStore,
    MemoryCacheStore,
    OrgInfoCache,
    get_cache_store,
)
from smokecloud.core.auth.delegated import DelegatedTokenProvider, InteractiveLogin
from smokecloud.core.auth.factory import create_token_provider
from smokecloud.core.auth.keys import KeyTokenProvider
from smokecloud.core.auth.models import AccessToken
from smokecloud.core.auth.password import PasswordTokenProvider
from smokecloud.core.auth.provider import TokenProvider

__all__ = [
    "AccessToken",
    "TokenProvider",
    "KeyTokenProvider",
    "PasswordTokenProvider",
    "DelegatedTokenProvider",
    "InteractiveLogin",
    "create_token_provider",
    "CacheStore",
    "MemoryCacheStore",
    "FileCacheStore",
    "OrgInfoCache",
    "get_cache_store",
]
