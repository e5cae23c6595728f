import base64
import hashlib
import hmac

import pytest

from smokecloud.core.auth.cache import MemoryCacheStore, OrgInfoCache
from smokecloud.core.auth.keys import KeyTokenProvider, derive_key_token
from smokecloud.core.exceptions import ConfigurationError

ID_KEY = base64.b64encode(b"my-id").decode()
SECRET_KEY = base64.b64encode(b"my-secret").decode()


def test_derive_key_token_format():
    token = derive_key_token(ID_KEY, SECRET_KEY)
    digest = hmac.new(b"my-secret", b"my-id", hashlib.sha256).digest()

    assert token == f"{ID_KEY}:{base64.b64encode(digest).decode()}"


@pytest.mark.asyncio
async def test_key_token_is_deterministic():
    provider = KeyTokenProvider(ID_KEY, SECRET_KEY)
    other = KeyTokenProvider(ID_KEY, SECRET_KEY)

    t1 = await provider.acquire_token()
    t2 = await provider.acquire_token()

    assert t1 == t2
    assert t1 == await other.acquire_token()
    assert t1.startswith(f"{ID_KEY}:")


@pytest.mark.asyncio
async def test_key_token_never_expires():
    provider = KeyTokenProvider(ID_KEY, SECRET_KEY)

    token = await provider.get_token()

    assert token.expires_at is None
    assert token.is_valid()


@pytest.mark.asyncio
async def test_unpadded_keys_are_accepted_and_prefix_kept():
    provider = KeyTokenProvider("YWI", "c2VjcmV0")
    digest = hmac.new(b"secret", b"ab", hashlib.sha256).digest()

    token = await provider.acquire_token()

    assert token == f"YWI:{base64.b64encode(digest).decode()}"
    assert token == await KeyTokenProvider("YWI", "c2VjcmV0").acquire_token()


@pytest.mark.parametrize("id_key,secret_key", [("not base64!", SECRET_KEY), (ID_KEY, "@@@")])
def test_malformed_keys_fail_at_construction(id_key, secret_key):
    with pytest.raises(ConfigurationError, match="not valid base64"):
        KeyTokenProvider(id_key, secret_key)


@pytest.mark.asyncio
async def test_org_reports_id_key_and_is_cached():
    store = MemoryCacheStore()
    provider = KeyTokenProvider(ID_KEY, SECRET_KEY, org_cache=OrgInfoCache(store))

    info = await provider.org()

    assert info.user.display_name == ID_KEY
    assert await store.get(f"keys.{ID_KEY}.userOrgInfo") == {"user": {"display_name": ID_KEY}}


@pytest.mark.asyncio
async def test_refresh_org_overwrites_stale_cache():
    store = MemoryCacheStore()
    cache = OrgInfoCache(store)
    await store.set(f"keys.{ID_KEY}.userOrgInfo", {"user": {"display_name": "stale"}})
    provider = KeyTokenProvider(ID_KEY, SECRET_KEY, org_cache=cache)

    assert (await provider.org()).user.display_name == "stale"
    assert (await provider.refresh_org()).user.display_name == ID_KEY
    assert (await provider.org()).user.display_name == ID_KEY
