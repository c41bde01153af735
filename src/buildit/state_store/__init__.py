"""State Store - Persistent history of build requests and job results."""

from buildit.state_store.exceptions import (
    PipelineNotFoundError,
    RecordWriteError,
    StateStoreError,
)
from buildit.state_store.models import JobResultRecord, Pipeline
from buildit.state_store.store import StateStore

__all__ = [
    "JobResultRecord",
    "Pipeline",
    "PipelineNotFoundError",
    "RecordWriteError",
    "StateStore",
    "StateStoreError",
]
