"""Health and status endpoints."""

from fastapi import APIRouter

from buildit.api.dependencies import ReporterDep
from buildit.api.models import APIResponse
from buildit.status import StatusReport

router = APIRouter(tags=["system"])


@router.get("/ping", response_model=APIResponse[str])
def ping() -> APIResponse[str]:
    """Liveness probe."""
    return APIResponse(data="PONG")


@router.get("/status", response_model=APIResponse[StatusReport])
def get_status(reporter: ReporterDep) -> APIResponse[StatusReport]:
    """Queue depth per architecture and worker liveness."""
    return APIResponse(data=reporter.report())
