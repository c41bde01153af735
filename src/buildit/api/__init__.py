"""REST API for BuildIt!."""

from buildit.api.app import create_app
from buildit.api.dependencies import (
    WebhookSettings,
    close_services,
    init_dispatcher,
    init_publisher,
    init_reporter,
    init_state_store,
    init_webhook_settings,
)
from buildit.api.models import APIResponse, PipelineCreate

__all__ = [
    "APIResponse",
    "PipelineCreate",
    "WebhookSettings",
    "close_services",
    "create_app",
    "init_dispatcher",
    "init_publisher",
    "init_reporter",
    "init_state_store",
    "init_webhook_settings",
]
