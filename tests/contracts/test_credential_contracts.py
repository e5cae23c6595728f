from __future__ import annotations

import pytest
from pydantic import ValidationError

from smokecloud.contracts.credentials import (
    DelegatedCredential,
    KeyCredential,
    PasswordCredential,
    credential_id,
    parse_credential,
)


class TestParseCredential:
    def test_keys(self):
        cred = parse_credential({"type": "keys", "id_key": "aWQ=", "secret_key": "c2VjcmV0", "customerid": "acc"})

        assert isinstance(cred, KeyCredential)
        assert cred.account_id == "acc"

    def test_password(self):
        cred = parse_credential(
            {"type": "password", "account_id": "acc", "username": "bob", "password": "pw"}
        )

        assert isinstance(cred, PasswordCredential)
        assert "pw" not in repr(cred)

    def test_delegated_with_tokens(self):
        cred = parse_credential(
            {
                "type": "delegated",
                "client_id": "cid",
                "tokens": {"access_token": "at", "id_token": "it", "expires_in": 3600},
                "received": 1000,
            }
        )

        assert isinstance(cred, DelegatedCredential)
        assert cred.tokens.id_token == "it"

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            parse_credential({"type": "telepathy"})


class TestCredentialId:
    def test_ids_are_scheme_prefixed(self):
        assert credential_id(KeyCredential(id_key="aWQ=", secret_key="x")) == "keys.aWQ="
        assert (
            credential_id(PasswordCredential(account_id="acc", username="bob", password="pw"))
            == "password.acc.bob"
        )
        assert credential_id(DelegatedCredential(client_id="cid", account_id="acc")) == "delegated.cid.acc"

    def test_rejects_other_objects(self):
        with pytest.raises(TypeError):
            credential_id(object())
