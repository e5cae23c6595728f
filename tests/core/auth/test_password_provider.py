import httpx
import pytest

from smokecloud.core.auth.password import PasswordTokenProvider
from smokecloud.core.exceptions import AuthorizationError, MalformedResponse


def make_provider():
    return PasswordTokenProvider(
        account_id="acc",
        username="bob",
        password="hunter2",
        login_endpoint="http://login.test",
    )


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [200, 302])
async def test_password_login_success(mock_http, status):
    def handler(request: httpx.Request):
        assert request.url.path == "/v3/login3"
        body = request.content.decode()
        assert "accountid=acc" in body
        assert "username=bob" in body
        assert "password=hunter2" in body
        return httpx.Response(status, json={"jwt": "signed"})

    seen = mock_http(handler)
    provider = make_provider()

    assert await provider.acquire_token() == "pwd:signed"
    # cached for the provider's lifetime
    assert await provider.acquire_token() == "pwd:signed"
    assert len(seen) == 1


@pytest.mark.asyncio
async def test_password_login_rejected(mock_http):
    mock_http(lambda request: httpx.Response(401, text="bad credentials"))

    with pytest.raises(AuthorizationError, match="Authorisation failed."):
        await make_provider().acquire_token()


@pytest.mark.asyncio
async def test_password_login_without_jwt(mock_http):
    mock_http(lambda request: httpx.Response(200, text="<html>"))

    with pytest.raises(MalformedResponse):
        await make_provider().acquire_token()


@pytest.mark.asyncio
async def test_password_org_uses_username():
    info = await make_provider().org()

    assert info.user.display_name == "bob"
