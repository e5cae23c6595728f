# smokecloud/contracts/credentials.py
"""
Credential contracts.

A credential is one of a closed set of schemes, discriminated by ``type``:

- ``keys``: an API key pair (base64 ``id_key`` / ``secret_key``)
- ``password``: account id, username and password
- ``delegated``: an identity held by an external identity provider

Each credential has a stable ``credential_id`` used as its cache key.
"""
from __future__ import annotations

from typing import Annotated, Any, Literal, Mapping, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter


class TokenResponse(BaseModel):
    """Token set as returned by an OIDC token endpoint."""

    model_config = ConfigDict(extra="ignore")

    access_token: str
    id_token: str | None = None
    refresh_token: str | None = None
    token_type: str = "Bearer"
    expires_in: int = 300
    scope: str | None = None


class KeyCredential(BaseModel):
    type: Literal["keys"] = "keys"
    id_key: str
    secret_key: str
    account_id: str | None = Field(default=None, alias="customerid")

    model_config = ConfigDict(populate_by_name=True)


class PasswordCredential(BaseModel):
    type: Literal["password"] = "password"
    account_id: str
    username: str
    password: str = Field(repr=False)


class DelegatedCredential(BaseModel):
    type: Literal["delegated"] = "delegated"
    client_id: str
    account_id: str | None = None
    tokens: TokenResponse | None = None
    # Unix seconds at which ``tokens`` were issued
    received: float | None = None


Credential = Annotated[
    Union[KeyCredential, PasswordCredential, DelegatedCredential],
    Field(discriminator="type"),
]

_credential_adapter: TypeAdapter = TypeAdapter(Credential)


def parse_credential(data: Mapping[str, Any]) -> KeyCredential | PasswordCredential | DelegatedCredential:
    return _credential_adapter.validate_python(dict(data))


def credential_id(credential: KeyCredential | PasswordCredential | DelegatedCredential) -> str:
    if isinstance(credential, KeyCredential):
        return f"{credential.type}.{credential.id_key}"
    if isinstance(credential, PasswordCredential):
        return f"{credential.type}.{credential.account_id}.{credential.username}"
    if isinstance(credential, DelegatedCredential):
        return f"{credential.type}.{credential.client_id}.{credential.account_id or 'default'}"
    raise TypeError(f"Unrecognised credential type: {type(credential).__name__}")


class OrgUser(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    display_name: str = Field(alias="displayName")
    mail: str | None = None


class Organization(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str | None = None
    display_name: str | None = Field(default=None, alias="displayName")


class UserOrgInfo(BaseModel):
    """Human-readable account metadata. Best effort: every field may be missing."""

    model_config = ConfigDict(populate_by_name=True)

    user: OrgUser | None = None
    org: Organization | None = None
    logo_data_url: str | None = Field(default=None, alias="logoDataUrl")
