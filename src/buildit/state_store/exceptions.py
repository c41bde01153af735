"""Exceptions raised by the build history store."""


class StateStoreError(Exception):
    """Base exception for build history errors."""


class RecordWriteError(StateStoreError):
    """A pipeline or job result could not be written."""


class PipelineNotFoundError(StateStoreError):
    """No build request was recorded under the given ID."""

    def __init__(self, pipeline_id: str) -> None:
        super().__init__(f"Pipeline with id '{pipeline_id}' not found")
        self.pipeline_id = pipeline_id
