"""Async client for the SmokeCloud simulation run service."""
from smokecloud.core.auth import (
    AccessToken,
    DelegatedTokenProvider,
    KeyTokenProvider,
    PasswordTokenProvider,
    TokenProvider,
    create_token_provider,
)
from smokecloud.core.client import ApiClient
from smokecloud.core.exceptions import (
    ApiError,
    AuthorizationError,
    BadRequest,
    ConfigurationError,
    Conflict,
    InvalidArgument,
    MalformedResponse,
    NotFound,
    SmokeCloudError,
    Unauthorized,
)
from smokecloud.core.follower import Follower, PhasePolicy
from smokecloud.core.pagination import RunEntryIter

__all__ = [
    "ApiClient",
    "RunEntryIter",
    "Follower",
    "PhasePolicy",
    "AccessToken",
    "TokenProvider",
    "KeyTokenProvider",
    "PasswordTokenProvider",
    "DelegatedTokenProvider",
    "create_token_provider",
    "SmokeCloudError",
    "ConfigurationError",
    "AuthorizationError",
    "InvalidArgument",
    "ApiError",
    "BadRequest",
    "Unauthorized",
    "NotFound",
    "Conflict",
    "MalformedResponse",
]
