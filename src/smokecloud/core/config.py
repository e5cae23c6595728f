# smokecloud/core/config.py
"""
Central configuration for the SmokeCloud client.

Environment variables (prefix ``SMOKECLOUD_``) and an optional ``.env``
file override defaults.
"""
from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-driven settings with sensible defaults."""

    model_config = SettingsConfigDict(
        env_prefix="SMOKECLOUD_", env_file=".env", extra="ignore"
    )

    log_level: str = "INFO"

    # Service endpoints (version prefix included)
    api_endpoint: str = Field(default="https://api.smokecloud.io/v3")
    storage_endpoint: str = Field(default="https://store01.smokecloud.io/v3")
    login_endpoint: str = Field(
        default="https://api.smokecloud.io",
        description="Root of the password login endpoint (``/v3/login3`` is appended)",
    )

    poll_interval: float = Field(
        default=2.0, description="Seconds between polls when following or waiting on a run"
    )
    request_timeout: float | None = Field(
        default=None, description="Per-request timeout in seconds (None = wait forever)"
    )
    follower_phase_policy: str = Field(
        default="post_refresh",
        description="Which closed flag selects the follower phase: post_refresh | pre_refresh",
    )

    # Config file paths (glob patterns)
    profiles_config_paths: list[str] = Field(
        default_factory=lambda: ["config/profiles.yaml"]
    )
    cache_dir: str = Field(default="~/.smokecloud")

    # Delegated identity
    delegated_client_id: str = Field(default="e28c2818-dde5-4ba5-8bc4-482bfa57846b")
    delegated_authority: str = Field(
        default="https://login.microsoftonline.com/common/v2.0",
        description="OIDC issuer used for silent refresh",
    )
    delegated_scopes: list[str] = Field(
        default_factory=lambda: ["openid", "offline_access", "User.Read", "email"]
    )
    graph_endpoint: str = Field(default="https://graph.microsoft.com/v1.0")


settings = Settings()
