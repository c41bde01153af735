"""StateStore - Main API for State Store operations."""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from buildit.jobs import JobResult, JobSource
from buildit.state_store.database import Database
from buildit.state_store.exceptions import (
    PipelineNotFoundError,
    RecordWriteError,
    StateStoreError,
)
from buildit.state_store.models import JobResultRecord, Pipeline

DEFAULT_LIST_LIMIT = 50


class StateStore:
    """Main API for State Store operations.

    Records every accepted build request as a Pipeline and every reported
    job outcome as a JobResultRecord. Nothing here drives the build flow;
    the records serve auditing and the HTTP API.
    """

    def __init__(self, url: str = "buildit.db") -> None:
        """Initialize State Store.

        Creates tables if they don't exist.

        Args:
            url: SQLAlchemy URL or SQLite file path
        """
        self._db = Database(url)
        try:
            self._db.create_tables()
        except SQLAlchemyError as e:
            raise StateStoreError(f"Failed to initialize database: {e}") from e

    def close(self) -> None:
        """Close the database connection."""
        self._db.close()

    # --- Pipeline Operations ---

    def create_pipeline(
        self,
        git_ref: str,
        packages: Iterable[str],
        archs: Iterable[str],
        source: JobSource,
        github_pr: int | None = None,
    ) -> Pipeline:
        """Record an accepted build request.

        Args:
            git_ref: Branch, tag or commit that was built
            packages: Requested packages
            archs: Architectures the request was fanned out to
            source: Where results are reported
            github_pr: Pull request the build belongs to

        Returns:
            Created Pipeline with generated ID

        Raises:
            RecordWriteError: If the row cannot be written
        """
        session = self._db.get_session()
        try:
            pipeline = Pipeline(
                git_ref=git_ref,
                packages=list(packages),
                archs=list(archs),
                source_kind=source.kind,
                source_id=source.id,
                github_pr=github_pr,
            )
            session.add(pipeline)
            session.commit()
            session.refresh(pipeline)
            return pipeline
        except SQLAlchemyError as e:
            session.rollback()
            raise RecordWriteError(f"Failed to record pipeline for {git_ref}: {e}") from e
        finally:
            session.close()

    def get_pipeline(self, pipeline_id: str) -> Pipeline:
        """Get pipeline by ID.

        Raises:
            PipelineNotFoundError: If pipeline doesn't exist
        """
        session = self._db.get_session()
        try:
            pipeline = session.get(Pipeline, pipeline_id)
            if pipeline is None:
                raise PipelineNotFoundError(pipeline_id)
            return pipeline
        finally:
            session.close()

    def list_pipelines(
        self,
        limit: int = DEFAULT_LIST_LIMIT,
        github_pr: int | None = None,
    ) -> list[Pipeline]:
        """List pipelines, newest first.

        Args:
            limit: Maximum number of rows
            github_pr: Optional filter by pull request

        Returns:
            List of Pipeline objects
        """
        session = self._db.get_session()
        try:
            stmt = select(Pipeline)
            if github_pr is not None:
                stmt = stmt.where(Pipeline.github_pr == github_pr)
            stmt = stmt.order_by(Pipeline.created_at.desc()).limit(limit)
            return list(session.execute(stmt).scalars().all())
        finally:
            session.close()

    # --- Job Result Operations ---

    def record_job_result(self, result: JobResult) -> JobResultRecord:
        """Record the outcome of one job.

        Raises:
            RecordWriteError: If the row cannot be written
        """
        session = self._db.get_session()
        try:
            record = JobResultRecord(
                git_ref=result.job.git_ref,
                arch=result.job.arch,
                packages=result.job.packages,
                successful_packages=result.successful_packages,
                failed_package=result.failed_package,
                success=result.success,
                worker_hostname=result.worker.hostname,
                worker_arch=result.worker.arch,
                elapsed_seconds=result.elapsed.total_seconds(),
                log=result.log,
                git_commit=result.git_commit,
                github_pr=result.job.github_pr,
            )
            session.add(record)
            session.commit()
            session.refresh(record)
            return record
        except SQLAlchemyError as e:
            session.rollback()
            raise RecordWriteError(
                f"Failed to record job result for {result.job.git_ref} on {result.job.arch}: {e}"
            ) from e
        finally:
            session.close()

    def list_job_results(
        self,
        limit: int = DEFAULT_LIST_LIMIT,
        github_pr: int | None = None,
        arch: str | None = None,
    ) -> list[JobResultRecord]:
        """List job results, newest first.

        Args:
            limit: Maximum number of rows
            github_pr: Optional filter by pull request
            arch: Optional filter by architecture

        Returns:
            List of JobResultRecord objects
        """
        session = self._db.get_session()
        try:
            stmt = select(JobResultRecord)
            if github_pr is not None:
                stmt = stmt.where(JobResultRecord.github_pr == github_pr)
            if arch is not None:
                stmt = stmt.where(JobResultRecord.arch == arch)
            stmt = stmt.order_by(JobResultRecord.created_at.desc()).limit(limit)
            return list(session.execute(stmt).scalars().all())
        finally:
            session.close()
