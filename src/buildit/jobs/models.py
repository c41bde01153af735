"""Wire models exchanged with build workers over the broker.

The JSON layout matches what the deployed workers produce and consume:
``source`` is externally tagged (``{"Telegram": 123}``) and ``elapsed`` is a
``{"secs": ..., "nanos": ...}`` pair.
"""

from __future__ import annotations

from datetime import timedelta
from functools import total_ordering
from typing import Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
    model_serializer,
    model_validator,
)

# follow https://github.com/AOSC-Dev/autobuild3/blob/master/sets/arch_groups/mainline
ALL_ARCH: tuple[str, ...] = (
    "amd64",
    "arm64",
    "loongarch64",
    "loongson3",
    "mips64r6el",
    "ppc64el",
    "riscv64",
)

MAINLINE = "mainline"

HEARTBEAT_TIMEOUT = 600  # seconds


class JobSource(BaseModel):
    """Where a build request came from, and where its results are reported."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["telegram", "github"]
    id: int

    @classmethod
    def telegram(cls, chat_id: int) -> JobSource:
        return cls(kind="telegram", id=chat_id)

    @classmethod
    def github(cls, pr_number: int) -> JobSource:
        return cls(kind="github", id=pr_number)

    @property
    def chat_id(self) -> int | None:
        return self.id if self.kind == "telegram" else None

    @model_validator(mode="before")
    @classmethod
    def _from_tagged(cls, data: Any) -> Any:
        if isinstance(data, dict) and len(data) == 1:
            ((tag, value),) = data.items()
            if tag in ("Telegram", "Github"):
                return {"kind": tag.lower(), "id": value}
        return data

    @model_serializer
    def _to_tagged(self) -> dict[str, int]:
        return {self.kind.capitalize(): self.id}


class Job(BaseModel):
    """A build of one or more packages on a single architecture."""

    model_config = ConfigDict(frozen=True)

    packages: list[str] = Field(min_length=1)
    git_ref: str = Field(min_length=1)
    arch: str
    source: JobSource
    github_pr: int | None = None

    @field_validator("arch")
    @classmethod
    def _supported_arch(cls, value: str) -> str:
        if value not in ALL_ARCH:
            raise ValueError(f"unsupported architecture: {value}")
        return value

    @property
    def queue_name(self) -> str:
        return job_queue_name(self.arch)


@total_ordering
class WorkerIdentifier(BaseModel):
    """Identifies a single worker process. Ordered by (hostname, arch, pid)."""

    model_config = ConfigDict(frozen=True)

    hostname: str
    arch: str
    pid: int

    def sort_key(self) -> tuple[str, str, int]:
        return (self.hostname, self.arch, self.pid)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, WorkerIdentifier):
            return NotImplemented
        return self.sort_key() < other.sort_key()


class WorkerHeartbeat(BaseModel):
    """Periodic liveness signal. Arrival time is taken on receipt."""

    identifier: WorkerIdentifier


class JobResult(BaseModel):
    """Final outcome of a Job, reported once by the worker that ran it."""

    job: Job
    successful_packages: list[str] = Field(default_factory=list)
    failed_package: str | None = None
    skipped_packages: list[str] = Field(default_factory=list)
    log: str | None = None
    worker: WorkerIdentifier
    elapsed: timedelta
    git_commit: str | None = None

    @field_validator("elapsed", mode="before")
    @classmethod
    def _parse_elapsed(cls, value: Any) -> Any:
        if isinstance(value, dict) and "secs" in value:
            return timedelta(
                seconds=value["secs"],
                microseconds=value.get("nanos", 0) / 1000,
            )
        return value

    @field_serializer("elapsed")
    def _serialize_elapsed(self, value: timedelta) -> dict[str, int]:
        secs = int(value.total_seconds())
        nanos = (value - timedelta(seconds=secs)).microseconds * 1000
        return {"secs": secs, "nanos": nanos}

    @model_validator(mode="after")
    def _successful_subset_of_requested(self) -> JobResult:
        extra = set(self.successful_packages) - set(self.job.packages)
        if extra:
            raise ValueError(f"successful packages not requested: {sorted(extra)}")
        return self

    @property
    def success(self) -> bool:
        """Whether every requested package was built."""
        return set(self.successful_packages) == set(self.job.packages)


def job_queue_name(arch: str) -> str:
    """Name of the queue feeding workers of one architecture."""
    return f"job-{arch}"
