"""Pydantic models for REST API."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator

from buildit.jobs import Job, JobSource

T = TypeVar("T")


class APIResponse(BaseModel, Generic[T]):
    """Standard API response wrapper."""

    data: T | None = None
    error: str | None = None


# Pipeline models


class PipelineCreate(BaseModel):
    """Request model for starting a build.

    Results go to the Telegram chat when ``chat_id`` is given, otherwise to
    the pull request.
    """

    git_ref: str = Field(..., min_length=1, max_length=255)
    packages: list[str] = Field(..., min_length=1)
    archs: list[str] = Field(..., min_length=1)
    github_pr: int | None = Field(default=None, gt=0)
    chat_id: int | None = None

    @model_validator(mode="after")
    def _has_result_target(self) -> PipelineCreate:
        if self.chat_id is None and self.github_pr is None:
            raise ValueError("either chat_id or github_pr is required")
        return self

    @property
    def source(self) -> JobSource:
        if self.chat_id is not None:
            return JobSource.telegram(self.chat_id)
        assert self.github_pr is not None
        return JobSource.github(self.github_pr)


class PipelineResponse(BaseModel):
    """Response model for a recorded pipeline."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    git_ref: str
    packages: list[str]
    archs: list[str]
    source_kind: str
    source_id: int
    github_pr: int | None
    created_at: datetime


def pipeline_to_response(pipeline: Any) -> PipelineResponse:
    """Convert a Pipeline model to PipelineResponse."""
    return PipelineResponse.model_validate(pipeline)


class PipelineCreatedResponse(BaseModel):
    """Response model for a dispatched build request."""

    pipeline_id: str | None
    jobs: list[Job]


# Job result models


class JobResultResponse(BaseModel):
    """Response model for a recorded job result."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    git_ref: str
    arch: str
    packages: list[str]
    successful_packages: list[str]
    failed_package: str | None
    success: bool
    worker_hostname: str
    worker_arch: str
    elapsed_seconds: float
    log: str | None
    git_commit: str | None
    github_pr: int | None
    created_at: datetime


def job_result_to_response(record: Any) -> JobResultResponse:
    """Convert a JobResultRecord model to JobResultResponse."""
    return JobResultResponse.model_validate(record)


# Webhook models


class WebhookAccepted(BaseModel):
    """Response model for a received webhook delivery."""

    queued: bool
    reason: str | None = None
