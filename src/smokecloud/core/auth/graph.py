# smokecloud/core/auth/graph.py
"""Organization lookup against Microsoft Graph for delegated identities."""
from __future__ import annotations

import base64
import logging

import httpx

from smokecloud.contracts.credentials import Organization, OrgUser, UserOrgInfo

logger = logging.getLogger(__name__)


class GraphOrgDirectory:
    def __init__(self, base_url: str = "https://graph.microsoft.com/v1.0", timeout: float | None = 10.0):
        self._base = base_url.rstrip("/")
        self._timeout = timeout

    async def lookup(self, access_token: str) -> UserOrgInfo:
        headers = {"Authorization": f"Bearer {access_token}"}

        async with httpx.AsyncClient(timeout=self._timeout) as client:
            r = await client.get(f"{self._base}/me", headers=headers)
            r.raise_for_status()
            user = OrgUser.model_validate(r.json())

            r = await client.get(
                f"{self._base}/organization",
                params={"$select": "displayName,id"},
                headers=headers,
            )
            r.raise_for_status()
            orgs = r.json().get("value") or []
            org = Organization.model_validate(orgs[0]) if orgs else None

            logo = None
            if org is not None and org.id:
                logo = await self._square_logo(client, org, headers)

        return UserOrgInfo(user=user, org=org, logo_data_url=logo)

    async def _square_logo(
        self, client: httpx.AsyncClient, org: Organization, headers: dict[str, str]
    ) -> str | None:
        url = f"{self._base}/organization/{org.id}/branding/localizations/default/squareLogo"
        try:
            r = await client.get(url, headers=headers)
            r.raise_for_status()
        except httpx.HTTPError:
            logger.warning("no logo for organization %s (%s)", org.display_name, org.id)
            return None
        if not r.content:
            return None
        mime = r.headers.get("content-type", "image/png").split(";")[0].strip()
        return f"data:{mime};base64,{base64.b64encode(r.content).decode('ascii')}"
