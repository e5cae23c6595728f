# smokecloud/core/auth/discovery.py
"""Issuer metadata lookup for the delegated identity scheme."""
from __future__ import annotations

import httpx
from pydantic import BaseModel, ConfigDict

WELL_KNOWN = "/.well-known/openid-configuration"


class IssuerMetadata(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    issuer: str
    token_endpoint: str
    authorization_endpoint: str | None = None
    device_authorization_endpoint: str | None = None
    end_session_endpoint: str | None = None


class IssuerDiscovery:
    """Fetches the authority's metadata once and keeps it for the process."""

    def __init__(self, authority: str, timeout: float | None = 10.0):
        self.authority = authority.rstrip("/")
        self._timeout = timeout
        self._metadata: IssuerMetadata | None = None

    async def metadata(self) -> IssuerMetadata:
        if self._metadata is not None:
            return self._metadata

        async with httpx.AsyncClient(timeout=self._timeout) as client:
            r = await client.get(f"{self.authority}{WELL_KNOWN}")
            r.raise_for_status()
            self._metadata = IssuerMetadata.model_validate(r.json())

        return self._metadata
