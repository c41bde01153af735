"""Shared pytest fixtures and configuration."""

from datetime import timedelta
from typing import Any
from unittest.mock import MagicMock

import pytest

from buildit.config import RepositoryConfig
from buildit.jobs import Job, JobResult, JobSource, WorkerIdentifier


# Register custom markers
def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: fast tests with no external dependencies")
    config.addinivalue_line("markers", "integration: component interaction tests")


# Shared fixtures


@pytest.fixture
def repository() -> RepositoryConfig:
    """The default repository configuration."""
    return RepositoryConfig()


def make_job(
    packages: list[str] | None = None,
    arch: str = "amd64",
    git_ref: str = "stable",
    source: JobSource | None = None,
    github_pr: int | None = None,
) -> Job:
    """Build a Job with sensible defaults."""
    return Job(
        packages=packages if packages is not None else ["bash"],
        git_ref=git_ref,
        arch=arch,
        source=source if source is not None else JobSource.telegram(1234),
        github_pr=github_pr,
    )


def make_result(job: Job | None = None, **overrides: Any) -> JobResult:
    """Build a successful JobResult for ``job``."""
    job = job if job is not None else make_job()
    values: dict[str, Any] = {
        "job": job,
        "successful_packages": list(job.packages),
        "worker": WorkerIdentifier(hostname="buildbot", arch=job.arch, pid=42),
        "elapsed": timedelta(seconds=12, microseconds=345000),
        "log": "https://pastebin.example/abc",
        "git_commit": "0123456789abcdef0123456789abcdef01234567",
    }
    values.update(overrides)
    return JobResult(**values)


def make_message(body: str | bytes, headers: dict[str, Any] | None = None) -> MagicMock:
    """A broker delivery with the given body and headers."""
    message = MagicMock()
    message.body = body.encode() if isinstance(body, str) else body
    message.headers = headers if headers is not None else {}
    return message
