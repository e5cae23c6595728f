# smokecloud/core/auth/models.py
from dataclasses import dataclass
import time


@dataclass
class AccessToken:
    access_token: str
    expires_at: float | None = None
    refresh_token: str | None = None
    id_token: str | None = None

    @property
    def bearer(self) -> str:
        """String sent as ``Authorization: Bearer <bearer>``."""
        return self.id_token or self.access_token

    def is_valid(self, leeway: int = 30) -> bool:
        """
        Returns True if token is still valid.
        Tokens without an expiry never go stale on the client side.
        `leeway` avoids edge-of-expiry races.
        """
        if self.expires_at is None:
            return True
        return time.time() < (self.expires_at - leeway)
