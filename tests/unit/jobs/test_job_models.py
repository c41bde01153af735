"""Unit tests for the worker wire models."""

import json
from datetime import timedelta

import pytest
from conftest import make_job, make_result
from pydantic import ValidationError

from buildit.jobs import Job, JobResult, JobSource, WorkerHeartbeat, WorkerIdentifier


@pytest.mark.unit
class TestJobSource:
    """Tests for the externally tagged job source."""

    def test_telegram_serializes_tagged(self) -> None:
        """Telegram sources serialize as {"Telegram": chat_id}."""
        assert JobSource.telegram(-100123).model_dump() == {"Telegram": -100123}

    def test_github_serializes_tagged(self) -> None:
        """GitHub sources serialize as {"Github": pr}."""
        assert JobSource.github(42).model_dump() == {"Github": 42}

    def test_parses_tagged(self) -> None:
        """Tagged JSON from workers is accepted."""
        source = JobSource.model_validate({"Github": 7})

        assert source.kind == "github"
        assert source.id == 7
        assert source.chat_id is None

    def test_chat_id_only_for_telegram(self) -> None:
        """chat_id is set only for Telegram sources."""
        assert JobSource.telegram(5).chat_id == 5

    def test_unknown_tag_rejected(self) -> None:
        """Unknown source tags are invalid."""
        with pytest.raises(ValidationError):
            JobSource.model_validate({"Matrix": 1})


@pytest.mark.unit
class TestJob:
    """Tests for Job."""

    def test_wire_format(self) -> None:
        """Jobs serialize in the layout workers expect."""
        job = make_job(packages=["bash", "fish"], github_pr=42, source=JobSource.github(42))

        assert json.loads(job.model_dump_json()) == {
            "packages": ["bash", "fish"],
            "git_ref": "stable",
            "arch": "amd64",
            "source": {"Github": 42},
            "github_pr": 42,
        }

    def test_empty_packages_rejected(self) -> None:
        """A job always builds at least one package."""
        with pytest.raises(ValidationError):
            make_job(packages=[])

    def test_mainline_is_not_an_arch(self) -> None:
        """Aliases never appear as a job's architecture."""
        with pytest.raises(ValidationError):
            make_job(arch="mainline")

    def test_queue_name(self) -> None:
        """Each architecture has its own queue."""
        assert make_job(arch="riscv64").queue_name == "job-riscv64"

    def test_frozen(self) -> None:
        """Jobs are immutable once built."""
        job = make_job()
        with pytest.raises(ValidationError):
            job.arch = "arm64"  # type: ignore[misc]


@pytest.mark.unit
class TestWorkerIdentifier:
    """Tests for WorkerIdentifier ordering and hashing."""

    def test_ordered_by_hostname_arch_pid(self) -> None:
        """Identifiers sort lexicographically over (hostname, arch, pid)."""
        a = WorkerIdentifier(hostname="a", arch="arm64", pid=9)
        b = WorkerIdentifier(hostname="a", arch="arm64", pid=10)
        c = WorkerIdentifier(hostname="b", arch="amd64", pid=1)

        assert sorted([c, b, a]) == [a, b, c]

    def test_hashable(self) -> None:
        """Equal identifiers collapse in a set."""
        a1 = WorkerIdentifier(hostname="a", arch="amd64", pid=1)
        a2 = WorkerIdentifier(hostname="a", arch="amd64", pid=1)

        assert len({a1, a2}) == 1

    def test_heartbeat_parses(self) -> None:
        """Heartbeats carry the identifier with a pid field."""
        heartbeat = WorkerHeartbeat.model_validate_json(
            '{"identifier": {"hostname": "h", "arch": "amd64", "pid": 3}}'
        )

        assert heartbeat.identifier.pid == 3


@pytest.mark.unit
class TestJobResult:
    """Tests for JobResult."""

    def test_success_when_all_built(self) -> None:
        """Success is set equality of requested and built packages."""
        result = make_result(make_job(packages=["a", "b"]), successful_packages=["b", "a"])

        assert result.success is True

    def test_failure_when_some_missing(self) -> None:
        """A missing package makes the job a failure even without failed_package."""
        result = make_result(make_job(packages=["a", "b"]), successful_packages=["a"])

        assert result.success is False
        assert result.failed_package is None

    def test_successful_must_be_requested(self) -> None:
        """Built packages that were never requested make the payload malformed."""
        with pytest.raises(ValidationError, match="not requested"):
            make_result(make_job(packages=["a"]), successful_packages=["a", "z"])

    def test_parses_elapsed_pair(self) -> None:
        """Elapsed time arrives as seconds and nanoseconds."""
        payload = {
            "job": json.loads(make_job().model_dump_json()),
            "successful_packages": ["bash"],
            "failed_package": None,
            "skipped_packages": [],
            "log": None,
            "worker": {"hostname": "h", "arch": "amd64", "pid": 1},
            "elapsed": {"secs": 90, "nanos": 500000000},
            "git_commit": None,
        }

        result = JobResult.model_validate(payload)

        assert result.elapsed == timedelta(seconds=90, milliseconds=500)

    def test_serializes_elapsed_pair(self) -> None:
        """Elapsed time is written back as seconds and nanoseconds."""
        result = make_result(elapsed=timedelta(seconds=3, microseconds=250))

        assert json.loads(result.model_dump_json())["elapsed"] == {"secs": 3, "nanos": 250000}

    def test_job_must_be_valid(self) -> None:
        """The embedded job is validated too."""
        with pytest.raises(ValidationError):
            JobResult.model_validate(
                {
                    "job": {
                        "packages": [],
                        "git_ref": "x",
                        "arch": "amd64",
                        "source": {"Github": 1},
                    },
                    "worker": {"hostname": "h", "arch": "amd64", "pid": 1},
                    "elapsed": {"secs": 1, "nanos": 0},
                }
            )

    def test_job_type(self) -> None:
        """The embedded job is a Job."""
        assert isinstance(make_result().job, Job)
