"""FastAPI dependencies for dependency injection."""

from __future__ import annotations

from collections.abc import Generator  # noqa: TC003
from dataclasses import dataclass, field
from typing import Annotated

from fastapi import Depends, HTTPException, status

from buildit.broker import Broker
from buildit.config import RepositoryConfig
from buildit.dispatcher import JobDispatcher
from buildit.state_store import StateStore
from buildit.status import StatusReporter


@dataclass
class WebhookSettings:
    """Settings of the GitHub webhook endpoint.

    Attributes:
        secret: Shared secret for X-Hub-Signature-256. None disables the endpoint.
        repository: Repository whose events are accepted.
    """

    secret: str | None = None
    repository: RepositoryConfig = field(default_factory=RepositoryConfig)


# Global instances (initialized by the server before serving)
_state_store: StateStore | None = None
_dispatcher: JobDispatcher | None = None
_reporter: StatusReporter | None = None
_publisher: Broker | None = None
_webhook_settings: WebhookSettings = WebhookSettings()


def init_state_store(store: StateStore | None) -> None:
    """Set the global StateStore instance; None disables history endpoints."""
    global _state_store  # noqa: PLW0603
    _state_store = store


def init_dispatcher(dispatcher: JobDispatcher) -> None:
    """Set the global JobDispatcher instance."""
    global _dispatcher  # noqa: PLW0603
    _dispatcher = dispatcher


def init_reporter(reporter: StatusReporter) -> None:
    """Set the global StatusReporter instance."""
    global _reporter  # noqa: PLW0603
    _reporter = reporter


def init_publisher(publisher: Broker) -> None:
    """Set the broker used to enqueue webhook events."""
    global _publisher  # noqa: PLW0603
    _publisher = publisher


def init_webhook_settings(settings: WebhookSettings) -> None:
    """Set the webhook endpoint settings."""
    global _webhook_settings  # noqa: PLW0603
    _webhook_settings = settings


def close_services() -> None:
    """Forget all global instances. Closing them is up to their owner."""
    global _state_store, _dispatcher, _reporter, _publisher, _webhook_settings  # noqa: PLW0603
    _state_store = None
    _dispatcher = None
    _reporter = None
    _publisher = None
    _webhook_settings = WebhookSettings()


def get_state_store() -> Generator[StateStore, None, None]:
    """Dependency that provides the StateStore instance."""
    if _state_store is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Persistence is not configured",
        )
    yield _state_store


def get_optional_state_store() -> Generator[StateStore | None, None, None]:
    """Dependency that provides the StateStore instance, if any."""
    yield _state_store


def get_dispatcher() -> Generator[JobDispatcher, None, None]:
    """Dependency that provides the JobDispatcher instance."""
    if _dispatcher is None:
        raise RuntimeError("JobDispatcher not initialized. Call init_dispatcher() first.")
    yield _dispatcher


def get_reporter() -> Generator[StatusReporter, None, None]:
    """Dependency that provides the StatusReporter instance."""
    if _reporter is None:
        raise RuntimeError("StatusReporter not initialized. Call init_reporter() first.")
    yield _reporter


def get_publisher() -> Generator[Broker, None, None]:
    """Dependency that provides the publishing Broker."""
    if _publisher is None:
        raise RuntimeError("Broker not initialized. Call init_publisher() first.")
    yield _publisher


def get_webhook_settings() -> WebhookSettings:
    """Dependency that provides the webhook settings."""
    return _webhook_settings


# Type aliases for dependency injection
StateStoreDep = Annotated[StateStore, Depends(get_state_store)]
OptionalStateStoreDep = Annotated[StateStore | None, Depends(get_optional_state_store)]
DispatcherDep = Annotated[JobDispatcher, Depends(get_dispatcher)]
ReporterDep = Annotated[StatusReporter, Depends(get_reporter)]
PublisherDep = Annotated[Broker, Depends(get_publisher)]
WebhookSettingsDep = Annotated[WebhookSettings, Depends(get_webhook_settings)]
