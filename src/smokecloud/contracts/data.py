# smokecloud/contracts/data.py
"""Artifact, usage and billing payloads returned by the service."""
from __future__ import annotations

from datetime import datetime
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from smokecloud.contracts.run import RawProgress

X = TypeVar("X")
Y = TypeVar("Y")


class DataPoint(BaseModel, Generic[X, Y]):
    x: X
    y: Y


class DataVector(BaseModel, Generic[X, Y]):
    """A named series of ``(x, y)`` points with units for both axes."""

    values: list[DataPoint[X, Y]] = Field(default_factory=list)
    x_units: str
    x_name: str
    y_units: str
    y_name: str


class RunData(BaseModel):
    start_time: float | None = None
    end_time: float | None = None
    time_steps: DataVector[float, str]


class Snapshot(BaseModel):
    id: str
    time: datetime
    size: int


class CurrentUsage(BaseModel):
    used_cores: int
    reserved_cores: int


class Duration(BaseModel):
    secs: int
    nanos: int = 0


class RunBilling(BaseModel):
    account_id: str
    run_id: str
    project: str | None = None
    user: str | None = None
    duration: Duration
    cost: tuple[str, float]


class MoneyTotal(BaseModel):
    currency: str
    total: float


class Measure(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    value: float | None = Field(default=None, alias="Value")


class PublicRunningStatus(BaseModel):
    model_config = ConfigDict(extra="ignore")

    run_id: str
    account_id: str
    chid: str
    progress: RawProgress | None = None
    cpu: Measure | None = None
    cpu_max: Measure | None = None
    memory: Measure | None = None
    memory_max: Measure | None = None
    # Seconds simulated per wall-clock second
    run_rate: float | None = None


class ScUser(BaseModel):
    account_id: str
    username: str


class IdUser(BaseModel):
    id: str


class User(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    sc: ScUser | None = Field(default=None, alias="Sc")
    identity: IdUser | None = Field(default=None, alias="Id")
    account_id: str | None = None
    username: str | None = None

    def resolved_account_id(self) -> str | None:
        if self.account_id:
            return self.account_id
        if self.sc is not None:
            return self.sc.account_id
        return None
