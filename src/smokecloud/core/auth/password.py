# smokecloud/core/auth/password.py
from __future__ import annotations

import logging

import httpx

from smokecloud.contracts.credentials import OrgUser, UserOrgInfo
from smokecloud.core.auth.cache import OrgInfoCache
from smokecloud.core.auth.models import AccessToken
from smokecloud.core.auth.provider import TokenProvider
from smokecloud.core.exceptions import AuthorizationError, MalformedResponse

logger = logging.getLogger(__name__)

LOGIN_PATH = "/v3/login3"


class PasswordTokenProvider(TokenProvider):
    """Exchanges account id, username and password for a signed token.

    The token is kept for the lifetime of the provider. There is no
    refresh: build a new provider once the service starts rejecting it.
    """

    def __init__(
        self,
        *,
        account_id: str,
        username: str,
        password: str,
        login_endpoint: str = "https://api.smokecloud.io",
        timeout: float | None = None,
        org_cache: OrgInfoCache | None = None,
    ):
        super().__init__(cache_key=f"password.{account_id}.{username}", org_cache=org_cache)
        self.account_id = account_id
        self.username = username
        self._password = password
        self._login_url = f"{login_endpoint.rstrip('/')}{LOGIN_PATH}"
        self._timeout = timeout

        self._token: AccessToken | None = None

    async def init(self) -> None:
        self._token = await self._login()

    async def get_token(self) -> AccessToken:
        if self._token is None:
            await self.init()
        return self._token

    async def _login(self) -> AccessToken:
        data = {
            "accountid": self.account_id,
            "username": self.username,
            "password": self._password,
        }

        async with httpx.AsyncClient(timeout=self._timeout) as client:
            r = await client.post(self._login_url, data=data)

        if r.status_code not in (200, 302):
            logger.error(
                "Password login rejected for %s/%s: status=%s body=%s",
                self.account_id,
                self.username,
                r.status_code,
                r.text,
            )
            raise AuthorizationError("Authorisation failed.")

        try:
            jwt = r.json()["jwt"]
        except (ValueError, KeyError, TypeError) as exc:
            raise MalformedResponse(
                f"{r.status_code}: {r.reason_phrase}: login response carries no token",
                status=r.status_code,
                status_text=r.reason_phrase,
                body=r.text,
            ) from exc

        logger.info("Password login succeeded for %s/%s", self.account_id, self.username)
        return AccessToken(access_token=f"pwd:{jwt}")

    async def _fetch_org(self) -> UserOrgInfo | None:
        return UserOrgInfo(user=OrgUser(display_name=self.username))
