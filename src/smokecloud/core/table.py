# smokecloud/core/table.py
"""Display rows for the account's running-status listing."""
from __future__ import annotations

from smokecloud.contracts.data import PublicRunningStatus

GIB = 1024 * 1024 * 1024
SECONDS_PER_DAY = 60 * 60 * 24


def to_table_run(run: PublicRunningStatus) -> dict[str, str]:
    run_rate = f"{run.run_rate * SECONDS_PER_DAY:.2f} s/day" if run.run_rate is not None else "-"

    cpu = "-"
    if run.cpu and run.cpu_max and run.cpu.value is not None and run.cpu_max.value is not None:
        cpu = f"{run.cpu.value:.0f}/{run.cpu_max.value:.0f}%"

    memory = "-"
    if (
        run.memory
        and run.memory_max
        and run.memory.value is not None
        and run.memory_max.value is not None
    ):
        memory = f"{run.memory.value / GIB:.2f}/{run.memory_max.value / GIB:.2f} GiB"

    return {
        "run_id": run.run_id,
        "account_id": run.account_id,
        "chid": run.chid,
        "cpu": cpu,
        "memory": memory,
        "run_rate": run_rate,
    }


def to_table(runs: list[PublicRunningStatus]) -> list[dict[str, str]]:
    return [to_table_run(run) for run in runs]


def render(rows: list[dict[str, str]]) -> str:
    """Plain-text table with left-aligned columns."""
    if not rows:
        return ""
    headers = list(rows[0])
    widths = {h: max(len(h), *(len(row[h]) for row in rows)) for h in headers}
    lines = ["  ".join(h.ljust(widths[h]) for h in headers)]
    lines += ["  ".join(row[h].ljust(widths[h]) for h in headers) for row in rows]
    return "\n".join(lines)
