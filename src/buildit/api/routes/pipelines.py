"""Build request and history endpoints."""

import logging

from fastapi import APIRouter, Query, status

from buildit.api.dependencies import DispatcherDep, OptionalStateStoreDep, StateStoreDep
from buildit.api.models import (
    APIResponse,
    JobResultResponse,
    PipelineCreate,
    PipelineCreatedResponse,
    PipelineResponse,
    job_result_to_response,
    pipeline_to_response,
)
from buildit.state_store import StateStoreError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["pipelines"])


@router.post(
    "/pipeline/new",
    response_model=APIResponse[PipelineCreatedResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_pipeline(
    request: PipelineCreate,
    dispatcher: DispatcherDep,
    store: OptionalStateStoreDep,
) -> APIResponse[PipelineCreatedResponse]:
    """Dispatch one job per requested architecture."""
    jobs = dispatcher.dispatch(
        request.git_ref,
        request.packages,
        request.archs,
        request.source,
        github_pr=request.github_pr,
    )

    pipeline_id = None
    if store is not None:
        try:
            pipeline = store.create_pipeline(
                jobs[0].git_ref,
                jobs[0].packages,
                [job.arch for job in jobs],
                request.source,
                request.github_pr,
            )
            pipeline_id = pipeline.id
        except StateStoreError as e:
            logger.error("Failed to record pipeline: %s", e)

    return APIResponse(data=PipelineCreatedResponse(pipeline_id=pipeline_id, jobs=jobs))


@router.get("/pipelines", response_model=APIResponse[list[PipelineResponse]])
def list_pipelines(
    store: StateStoreDep,
    github_pr: int | None = Query(default=None, description="Filter by pull request"),
    limit: int = Query(default=50, ge=1, le=1000, description="Max results"),
) -> APIResponse[list[PipelineResponse]]:
    """List recorded build requests, newest first."""
    pipelines = store.list_pipelines(limit=limit, github_pr=github_pr)
    return APIResponse(data=[pipeline_to_response(p) for p in pipelines])


@router.get("/pipelines/{pipeline_id}", response_model=APIResponse[PipelineResponse])
def get_pipeline(pipeline_id: str, store: StateStoreDep) -> APIResponse[PipelineResponse]:
    """Get a recorded build request by ID."""
    pipeline = store.get_pipeline(pipeline_id)
    return APIResponse(data=pipeline_to_response(pipeline))


@router.get("/results", response_model=APIResponse[list[JobResultResponse]])
def list_results(
    store: StateStoreDep,
    github_pr: int | None = Query(default=None, description="Filter by pull request"),
    arch: str | None = Query(default=None, description="Filter by architecture"),
    limit: int = Query(default=50, ge=1, le=1000, description="Max results"),
) -> APIResponse[list[JobResultResponse]]:
    """List reported job results, newest first."""
    records = store.list_job_results(limit=limit, github_pr=github_pr, arch=arch)
    return APIResponse(data=[job_result_to_response(r) for r in records])
