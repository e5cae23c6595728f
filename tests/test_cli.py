import json

import httpx
import pytest

from conftest import API, run_json
from smokecloud import cli
from smokecloud.contracts.credentials import KeyCredential
from smokecloud.core.loader import Profile


@pytest.fixture
def wired(monkeypatch, client):
    """Point the CLI at the test client and a fixed profile."""
    profile = Profile(
        name="default",
        credential=KeyCredential(id_key="aWQ=", secret_key="c2VjcmV0"),
        default_fds_version="6.9.1",
    )

    async def fake_client(profile, cfg):
        return client

    monkeypatch.setattr(cli, "_profile", lambda name, cfg: profile)
    monkeypatch.setattr(cli, "_client", fake_client)
    monkeypatch.setattr(cli, "configure_logging", lambda level: None)
    return client


def test_parse_submit_defaults():
    args = cli._parse_args(["submit", "room.fds"])

    assert args.command == "submit"
    assert args.input.name == "room.fds"
    assert args.cores == 1
    assert args.follow is False
    assert args.profile == "default"


def test_missing_command_exits():
    with pytest.raises(SystemExit):
        cli._parse_args([])


def test_stop(wired, mock_http, capsys):
    mock_http(lambda request: httpx.Response(200, text="stopping"))

    assert cli.main(["stop", "r1"]) == 0
    assert capsys.readouterr().out.strip() == "stopping"


def test_run_prints_json(wired, mock_http, capsys):
    mock_http(lambda request: httpx.Response(200, json={"data": run_json("r1", chid="office")}))

    assert cli.main(["run", "r1"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["run_id"] == "r1"
    assert out["sim_id"]["chid"] == "office"


def test_api_error_returns_one(wired, mock_http, capsys):
    mock_http(lambda request: httpx.Response(404, json={"errors": [{"code": "no_run"}]}))

    assert cli.main(["run", "missing"]) == 1
    assert "error: 404: Not Found" in capsys.readouterr().err


def test_latest_with_no_runs(wired, mock_http, capsys):
    mock_http(lambda request: httpx.Response(200, json={"data": []}))

    assert cli.main(["latest"]) == 1
    assert "no runs" in capsys.readouterr().err


def test_submit_uses_file_stem_and_profile_version(wired, mock_http, tmp_path, capsys):
    model = tmp_path / "warehouse.fds"
    model.write_text("&HEAD CHID='warehouse' /\n")
    seen = mock_http(lambda request: httpx.Response(200, json={"data": run_json("r7")}))

    assert cli.main(["submit", str(model), "--cores", "8"]) == 0

    request = seen[0]
    assert request.url.path == "/v3/orgs/acc/runs"
    assert request.url.params["chid"] == "warehouse"
    assert request.url.params["fds_version"] == "6.9.1"
    assert request.url.params["instance_type"] == "Cores8"
    assert request.content == model.read_bytes()
    assert capsys.readouterr().out.strip() == "r7"


def test_runs_lists_each_record(wired, mock_http, capsys):
    seen = mock_http(
        lambda request: httpx.Response(
            200, json={"data": [run_json("a"), run_json("b", open=False)]}
        )
    )

    assert cli.main(["runs", "--chid", "room"]) == 0

    lines = capsys.readouterr().out.splitlines()
    assert [line.split("\t")[:3] for line in lines] == [
        ["a", "room", "open"],
        ["b", "room", "closed"],
    ]
    assert str(seen[0].url) == f"{API}/orgs/acc/runs?chid=room"


def test_unsupported_core_count_is_reported(wired, mock_http, tmp_path, capsys):
    model = tmp_path / "room.fds"
    model.write_text("&HEAD CHID='room' /\n")
    seen = mock_http(lambda request: httpx.Response(500))

    assert cli.main(["submit", str(model), "--cores", "3"]) == 1
    assert "error: Unsupported core count 3" in capsys.readouterr().err
    assert seen == []
