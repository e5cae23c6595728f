import httpx
import pytest

from smokecloud.core.auth.discovery import IssuerDiscovery


@pytest.mark.asyncio
async def test_metadata_is_fetched_once(mock_http):
    seen = mock_http(
        lambda request: httpx.Response(
            200,
            json={
                "issuer": "http://issuer/v2.0",
                "token_endpoint": "http://issuer/oauth2/v2.0/token",
                "device_authorization_endpoint": "http://issuer/oauth2/v2.0/devicecode",
                "claims_supported": ["sub"],
            },
        )
    )
    discovery = IssuerDiscovery("http://issuer/v2.0/")

    first = await discovery.metadata()
    second = await discovery.metadata()

    assert first.token_endpoint == "http://issuer/oauth2/v2.0/token"
    assert first.device_authorization_endpoint == "http://issuer/oauth2/v2.0/devicecode"
    assert first.end_session_endpoint is None
    assert second is first
    assert [str(r.url) for r in seen] == ["http://issuer/v2.0/.well-known/openid-configuration"]


@pytest.mark.asyncio
async def test_unreachable_authority_raises(mock_http):
    mock_http(lambda request: httpx.Response(503, text="down"))

    with pytest.raises(httpx.HTTPStatusError):
        await IssuerDiscovery("http://issuer").metadata()
