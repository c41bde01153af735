"""SQLAlchemy models for State Store."""

from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import JSON, Boolean, DateTime, Float, Integer, String, Text, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


def generate_uuid() -> str:
    """Generate a new UUID string."""
    return str(uuid.uuid4())


def utc_now() -> datetime:
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class Pipeline(Base):
    """Pipeline model - one accepted build request, fanned out to ``archs``."""

    __tablename__ = "pipelines"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    git_ref: Mapped[str] = mapped_column(String(255), nullable=False)
    packages: Mapped[list[str]] = mapped_column(JSON, nullable=False)
    archs: Mapped[list[str]] = mapped_column(JSON, nullable=False)
    source_kind: Mapped[str] = mapped_column(String(20), nullable=False)
    source_id: Mapped[int] = mapped_column(Integer, nullable=False)
    github_pr: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utc_now, server_default=func.now()
    )

    def __init__(
        self,
        git_ref: str,
        packages: list[str],
        archs: list[str],
        source_kind: str,
        source_id: int,
        id: str | None = None,
        github_pr: int | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.git_ref = git_ref
        self.packages = list(packages)
        self.archs = list(archs)
        self.source_kind = source_kind
        self.source_id = source_id
        self.github_pr = github_pr

    def __repr__(self) -> str:
        return f"<Pipeline(id={self.id!r}, git_ref={self.git_ref!r}, archs={self.archs!r})>"


class JobResultRecord(Base):
    """Job result model - the reported outcome of one job."""

    __tablename__ = "job_results"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    git_ref: Mapped[str] = mapped_column(String(255), nullable=False)
    arch: Mapped[str] = mapped_column(String(20), nullable=False)
    packages: Mapped[list[str]] = mapped_column(JSON, nullable=False)
    successful_packages: Mapped[list[str]] = mapped_column(JSON, nullable=False)
    failed_package: Mapped[str | None] = mapped_column(String(255), nullable=True)
    success: Mapped[bool] = mapped_column(Boolean, nullable=False)
    worker_hostname: Mapped[str] = mapped_column(String(255), nullable=False)
    worker_arch: Mapped[str] = mapped_column(String(20), nullable=False)
    elapsed_seconds: Mapped[float] = mapped_column(Float, nullable=False)
    log: Mapped[str | None] = mapped_column(Text, nullable=True)
    git_commit: Mapped[str | None] = mapped_column(String(64), nullable=True)
    github_pr: Mapped[int | None] = mapped_column(Integer, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utc_now, server_default=func.now()
    )

    def __init__(
        self,
        git_ref: str,
        arch: str,
        packages: list[str],
        successful_packages: list[str],
        success: bool,
        worker_hostname: str,
        worker_arch: str,
        elapsed_seconds: float,
        id: str | None = None,
        failed_package: str | None = None,
        log: str | None = None,
        git_commit: str | None = None,
        github_pr: int | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.id = id if id is not None else generate_uuid()
        self.git_ref = git_ref
        self.arch = arch
        self.packages = list(packages)
        self.successful_packages = list(successful_packages)
        self.failed_package = failed_package
        self.success = success
        self.worker_hostname = worker_hostname
        self.worker_arch = worker_arch
        self.elapsed_seconds = elapsed_seconds
        self.log = log
        self.git_commit = git_commit
        self.github_pr = github_pr

    def __repr__(self) -> str:
        return (
            f"<JobResultRecord(id={self.id!r}, arch={self.arch!r}, "
            f"success={self.success!r})>"
        )
