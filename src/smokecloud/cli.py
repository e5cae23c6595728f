from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

from smokecloud.contracts.run import RunFilter, SubmitStartParams
from smokecloud.core.auth.factory import create_token_provider, default_cache_store
from smokecloud.core.client import ApiClient
from smokecloud.core.config import Settings, settings
from smokecloud.core.exceptions import SmokeCloudError
from smokecloud.core.loader import Profile, get_profile
from smokecloud.core.logging import configure_logging
from smokecloud.core.table import render, to_table


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="smokecloud", description="SmokeCloud run client.")
    parser.add_argument("--profile", default="default", help="Profile name from the profiles config.")
    parser.add_argument("--log-level", default=None, help="Override SMOKECLOUD_LOG_LEVEL.")
    sub = parser.add_subparsers(dest="command", required=True)

    runs = sub.add_parser("runs", help="List runs of the account.")
    runs.add_argument("--chid", default=None)
    runs.add_argument("--since", type=int, default=None, help="Updated since (epoch ms).")
    runs.add_argument("--limit", type=int, default=None, help="Page size hint.")

    latest = sub.add_parser("latest", help="Show the most recently opened run.")
    latest.add_argument("--chid", default=None)

    for name, help_text in (
        ("run", "Show one run."),
        ("follow", "Stream the error output of a run until it closes."),
        ("stop", "Ask a run to stop cleanly."),
        ("kill", "Kill a run."),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("run_id")

    sub.add_parser("status", help="Show running simulations.")

    submit = sub.add_parser("submit", help="Submit an input file.")
    submit.add_argument("input", type=Path)
    submit.add_argument("--chid", default=None, help="Defaults to the input file stem.")
    submit.add_argument("--fds-version", default=None)
    submit.add_argument("--cores", type=int, default=1)
    submit.add_argument("--project", default=None)
    submit.add_argument("--follow", action="store_true", help="Follow output until the run closes.")

    return parser.parse_args(argv)


def _profile(name: str, cfg: Settings) -> Profile:
    return get_profile(name, cfg.profiles_config_paths)


async def _client(profile: Profile, cfg: Settings) -> ApiClient:
    provider = await create_token_provider(
        profile.credential, cfg=cfg, cache_store=default_cache_store(cfg)
    )
    client = ApiClient(
        provider,
        api_endpoint=profile.api_endpoint,
        storage_endpoint=profile.storage_endpoint,
        cfg=cfg,
    )
    await client.init()
    return client


def _print_json(obj) -> None:
    print(json.dumps(obj, indent=2, default=str))


async def _follow(client: ApiClient, run_id: str) -> None:
    async for chunk in client.follow(run_id):
        sys.stdout.buffer.write(chunk)
        sys.stdout.buffer.flush()


async def _run(args: argparse.Namespace, cfg: Settings) -> int:
    profile = _profile(args.profile, cfg)
    client = await _client(profile, cfg)

    if args.command == "runs":
        run_filter = RunFilter(updated_since=args.since, chid=args.chid, limit=args.limit)
        async for run in await client.runs(run_filter):
            print(f"{run.run_id}\t{run.chid}\t{'open' if run.open else 'closed'}\t{run.open_time or '-'}")
    elif args.command == "latest":
        run = await client.latest_run(RunFilter(chid=args.chid))
        if run is None:
            print("no runs", file=sys.stderr)
            return 1
        _print_json(run.model_dump(mode="json"))
    elif args.command == "run":
        _print_json((await client.run(args.run_id)).model_dump(mode="json"))
    elif args.command == "status":
        print(render(to_table(await client.status())))
    elif args.command == "follow":
        await _follow(client, args.run_id)
    elif args.command == "stop":
        print(await client.stop(args.run_id))
    elif args.command == "kill":
        print(await client.kill(args.run_id))
    elif args.command == "submit":
        fds_version = args.fds_version or profile.default_fds_version
        if not fds_version:
            raise SystemExit("--fds-version is required (no default_fds_version in profile)")
        params = SubmitStartParams(
            chid=args.chid or args.input.stem,
            fds_version=fds_version,
            instance_type=args.cores,
            project=args.project,
        )
        run = await client.new_run(params, args.input.read_bytes())
        print(run.run_id)
        if args.follow:
            await _follow(client, run.run_id)
            await client.confirm_closed(run.run_id)
    return 0


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(sys.argv[1:] if argv is None else argv)
    configure_logging(args.log_level or settings.log_level)
    try:
        return asyncio.run(_run(args, settings))
    except SmokeCloudError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
