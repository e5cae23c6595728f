import httpx
import pytest

from conftest import API, run_json
from smokecloud.contracts.run import RunEntry, RunFilter
from smokecloud.core.exceptions import MalformedResponse, NotFound
from smokecloud.core.pagination import first_page_path, is_later


def paged(pages: dict[str, dict]):
    def handler(request: httpx.Request):
        key = request.url.raw_path.decode()
        assert key in pages, f"unexpected page {key}"
        page = pages[key]
        if isinstance(page, httpx.Response):
            return page
        return httpx.Response(200, json=page)

    return handler


def test_first_page_path():
    assert first_page_path("acc") == "/orgs/acc/runs"
    assert first_page_path("acc", RunFilter()) == "/orgs/acc/runs"
    assert (
        first_page_path("acc", RunFilter(updated_since=1700000000000, chid="my room", limit=5))
        == "/orgs/acc/runs?from_time=1700000000000&chid=my+room&limit=5"
    )


@pytest.mark.asyncio
async def test_pages_are_concatenated_in_order(client, mock_http):
    seen = mock_http(
        paged(
            {
                "/v3/orgs/acc/runs": {
                    "data": [run_json("a"), run_json("b")],
                    "links": {"next": "/orgs/acc/runs?cursor=2"},
                },
                "/v3/orgs/acc/runs?cursor=2": {
                    "data": [run_json("c")],
                    "links": {"next": f"{API}/orgs/acc/runs?cursor=3"},
                },
                "/v3/orgs/acc/runs?cursor=3": {"data": [], "links": {}},
            }
        )
    )

    ids = [run.run_id async for run in await client.runs()]

    assert ids == ["a", "b", "c"]
    assert len(seen) == 3


@pytest.mark.asyncio
async def test_empty_listing(client, mock_http):
    mock_http(paged({"/v3/orgs/acc/runs": {"data": []}}))

    assert [run async for run in await client.runs()] == []


@pytest.mark.asyncio
async def test_failed_page_ends_iteration(client, mock_http):
    seen = mock_http(
        paged(
            {
                "/v3/orgs/acc/runs": {
                    "data": [run_json("a")],
                    "links": {"next": "/orgs/acc/runs?cursor=2"},
                },
                "/v3/orgs/acc/runs?cursor=2": httpx.Response(404, json={"errors": []}),
            }
        )
    )
    it = await client.runs()

    assert (await it.__anext__()).run_id == "a"
    with pytest.raises(NotFound):
        await it.__anext__()
    with pytest.raises(StopAsyncIteration):
        await it.__anext__()
    assert len(seen) == 2


@pytest.mark.asyncio
async def test_page_without_data_array(client, mock_http):
    mock_http(paged({"/v3/orgs/acc/runs": {"data": {"run_id": "a"}}}))

    with pytest.raises(MalformedResponse):
        [run async for run in await client.runs()]


@pytest.mark.asyncio
async def test_filter_is_sent_as_query(client, mock_http):
    seen = mock_http(lambda request: httpx.Response(200, json={"data": []}))

    [run async for run in await client.runs(RunFilter(chid="room", limit=10))]

    assert seen[0].url.params["chid"] == "room"
    assert seen[0].url.params["limit"] == "10"
    assert "from_time" not in seen[0].url.params


def entry(run_id, open_time):
    return RunEntry.model_validate(run_json(run_id, open_time=open_time))


def test_is_later():
    early = entry("a", "2024-01-01T00:00:00Z")
    late = entry("b", "2024-02-01T00:00:00Z")
    undated = entry("c", None)

    assert is_later(early, None)
    assert is_later(late, early)
    assert not is_later(early, late)
    assert not is_later(undated, early)
    assert is_later(early, undated)


@pytest.mark.asyncio
async def test_latest_run_scans_every_page(client, mock_http):
    mock_http(
        paged(
            {
                "/v3/orgs/acc/runs": {
                    "data": [
                        run_json("a", open_time="2024-03-01T00:00:00Z"),
                        run_json("b", open_time=None),
                    ],
                    "links": {"next": "/orgs/acc/runs?cursor=2"},
                },
                "/v3/orgs/acc/runs?cursor=2": {
                    "data": [run_json("c", open_time="2024-05-01T00:00:00Z")],
                },
            }
        )
    )

    latest = await client.latest_run()

    assert latest.run_id == "c"


@pytest.mark.asyncio
async def test_latest_run_of_nothing(client, mock_http):
    mock_http(lambda request: httpx.Response(200, json={"data": []}))

    assert await client.latest_run() is None
