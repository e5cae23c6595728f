# smokecloud/contracts/run.py
"""Run contracts as reported by the control plane.

A run is one submitted simulation job, identified by ``run_id``. The
service owns its lifecycle; the client only observes it::

    submitted -> running (open=True) -> closed (open=False)

Closing is monotonic: a run never reopens under the same ``run_id``.
"""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Annotated, Any, Literal, Mapping, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag, TypeAdapter

from smokecloud.core.exceptions import InvalidArgument


class Phase(str, Enum):
    """Lifecycle location of a run's files."""

    staging = "staging"
    storage = "storage"
    running = "running"


class InstanceType(str, Enum):
    Cores1 = "Cores1"
    Cores2 = "Cores2"
    Cores4 = "Cores4"
    Cores8 = "Cores8"
    Cores16 = "Cores16"
    Cores32 = "Cores32"


_CORES_TO_INSTANCE: dict[int, InstanceType] = {
    1: InstanceType.Cores1,
    2: InstanceType.Cores2,
    4: InstanceType.Cores4,
    8: InstanceType.Cores8,
    16: InstanceType.Cores16,
    32: InstanceType.Cores32,
}


def cores_to_instance(n_cores: int) -> InstanceType:
    try:
        return _CORES_TO_INSTANCE[n_cores]
    except KeyError:
        raise InvalidArgument(
            f"Unsupported core count {n_cores}. Available: {sorted(_CORES_TO_INSTANCE)}"
        )


# ---------------------------------------------------------------------------
# Presence progress
# ---------------------------------------------------------------------------


class SimTimes(BaseModel):
    start_time: float
    end_time: float
    last_time: float


class WallTimes(BaseModel):
    start_time: str | None = None
    last_time: str | None = None


class RawProgress(BaseModel):
    sim: SimTimes
    wall: WallTimes


class PresenceAbsent(BaseModel):
    """Nothing recorded yet."""

    present: Literal[False] = False


class PresenceEmpty(BaseModel):
    """An entry exists but its timing data is missing or incomplete.

    A partial record (``sim`` without ``wall`` or the reverse) lands here
    too; whatever it carries is kept as received and never interpreted.
    """

    present: Literal[True] = True
    sim: Any = None
    wall: Any = None


class PresenceFull(RawProgress):
    present: Literal[True] = True


def _presence_tag(value: Any) -> str | None:
    if isinstance(value, BaseModel):
        if isinstance(value, PresenceFull):
            return "full"
        if isinstance(value, PresenceEmpty):
            return "empty"
        return "absent"
    if not isinstance(value, Mapping):
        return None
    if not value.get("present"):
        return "absent"
    if value.get("sim") is not None and value.get("wall") is not None:
        return "full"
    return "empty"


PresenceProgress = Annotated[
    Union[
        Annotated[PresenceFull, Tag("full")],
        Annotated[PresenceEmpty, Tag("empty")],
        Annotated[PresenceAbsent, Tag("absent")],
    ],
    Discriminator(_presence_tag),
]

_presence_adapter: TypeAdapter = TypeAdapter(PresenceProgress)


class SimpleProgress(BaseModel):
    current: float
    total: float


def to_simple_progress(
    progress: PresenceFull | PresenceEmpty | PresenceAbsent | Mapping[str, Any],
) -> SimpleProgress | None:
    """Normalise a presence record to ``current``/``total`` simulated time.

    Only a fully populated record yields a value. Absent and empty
    records mean "no progress available" and return ``None``.
    """
    if not isinstance(progress, BaseModel):
        progress = _presence_adapter.validate_python(progress)
    if isinstance(progress, PresenceFull):
        return SimpleProgress(current=progress.sim.last_time, total=progress.sim.end_time)
    return None


class ProgressInfo(BaseModel):
    running: PresenceProgress
    stored: PresenceProgress


# ---------------------------------------------------------------------------
# Run records
# ---------------------------------------------------------------------------


class SimId(BaseModel):
    account_id: str
    chid: str


class RunParams(BaseModel):
    instance_type: str
    fds_version: str
    core_count: int
    mem_gb: float
    n_processes: int | None = None
    n_threads: int | None = None


class RunEntry(BaseModel):
    model_config = ConfigDict(extra="ignore")

    run_id: str
    sim_id: SimId
    open_time: datetime | None = None
    update_time: datetime | None = None
    username: str | None = None
    project_number: str | None = None
    open: bool
    version: int = 0
    manual_upload: bool = False
    running: PresenceProgress = Field(default_factory=PresenceAbsent)
    stored: PresenceProgress = Field(default_factory=PresenceAbsent)
    no_archive: bool = False
    run_params: RunParams | None = None

    @property
    def chid(self) -> str:
        return self.sim_id.chid


class RunFilter(BaseModel):
    """Listing filter. ``updated_since`` is an inclusive bound in epoch milliseconds."""

    updated_since: int | None = None
    chid: str | None = None
    limit: int | None = None


class SubmitStartParams(BaseModel):
    chid: str
    fds_version: str
    instance_type: InstanceType | int
    project: str | None = None

    def resolved_instance_type(self) -> InstanceType:
        if isinstance(self.instance_type, InstanceType):
            return self.instance_type
        return cores_to_instance(self.instance_type)
