# smokecloud/core/auth/keys.py
"""API key scheme: the token is derived locally, no network involved."""
from __future__ import annotations

import base64
import binascii
import hashlib
import hmac

from smokecloud.contracts.credentials import OrgUser, UserOrgInfo
from smokecloud.core.auth.cache import OrgInfoCache
from smokecloud.core.auth.models import AccessToken
from smokecloud.core.auth.provider import TokenProvider
from smokecloud.core.exceptions import ConfigurationError


def _b64decode(value: str, name: str) -> bytes:
    # keys are often pasted without their trailing padding
    padded = value + "=" * (-len(value) % 4)
    try:
        return base64.b64decode(padded, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ConfigurationError(f"{name} is not valid base64") from exc


def derive_key_token(id_key: str, secret_key: str) -> str:
    """``id_key + ":" + base64(HMAC-SHA256(secret, id))`` over the decoded key bytes.

    The ``id_key`` prefix is sent exactly as configured.
    """
    id_bytes = _b64decode(id_key, "id_key")
    secret_bytes = _b64decode(secret_key, "secret_key")
    digest = hmac.new(secret_bytes, id_bytes, hashlib.sha256).digest()
    return f"{id_key}:{base64.b64encode(digest).decode('ascii')}"


class KeyTokenProvider(TokenProvider):
    def __init__(
        self,
        id_key: str,
        secret_key: str,
        *,
        org_cache: OrgInfoCache | None = None,
    ):
        super().__init__(cache_key=f"keys.{id_key}", org_cache=org_cache)
        self._id_key = id_key
        self._token = AccessToken(access_token=derive_key_token(id_key, secret_key))

    async def get_token(self) -> AccessToken:
        return self._token

    async def _fetch_org(self) -> UserOrgInfo | None:
        return UserOrgInfo(user=OrgUser(display_name=self._id_key))
