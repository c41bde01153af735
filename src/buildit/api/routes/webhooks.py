"""GitHub webhook ingress."""

import logging

from fastapi import APIRouter, Header, HTTPException, Request, status
from fastapi.concurrency import run_in_threadpool
from pydantic import ValidationError

from buildit.api.dependencies import PublisherDep, WebhookSettingsDep
from buildit.api.models import APIResponse, WebhookAccepted
from buildit.broker import WEBHOOK_QUEUE
from buildit.webhooks import WebhookEvent, verify_signature

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/github", tags=["webhooks"])


@router.post("/webhook", response_model=APIResponse[WebhookAccepted])
async def receive_webhook(
    request: Request,
    publisher: PublisherDep,
    settings: WebhookSettingsDep,
    x_github_event: str | None = Header(default=None),
    x_hub_signature_256: str | None = Header(default=None),
) -> APIResponse[WebhookAccepted]:
    """Verify a GitHub delivery and enqueue new comments for processing."""
    if not settings.secret:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Webhook secret is not configured",
        )

    body = await request.body()
    if not verify_signature(settings.secret, body, x_hub_signature_256):
        logger.warning("Rejecting webhook delivery with bad signature")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Bad signature")

    if x_github_event != "issue_comment":
        return APIResponse(data=WebhookAccepted(queued=False, reason=f"event {x_github_event}"))

    try:
        payload = await request.json()
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid JSON") from e
    action = payload.get("action") if isinstance(payload, dict) else None
    if action != "created":
        return APIResponse(data=WebhookAccepted(queued=False, reason=f"action {action}"))

    repo = (payload.get("repository") or {}).get("full_name")
    if repo is not None and repo.lower() != settings.repository.full_name.lower():
        return APIResponse(data=WebhookAccepted(queued=False, reason=f"repository {repo}"))

    try:
        event = WebhookEvent.model_validate(payload)
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Not a comment event"
        ) from e

    await run_in_threadpool(publisher.publish, WEBHOOK_QUEUE, event.model_dump_json())
    logger.info("Queued comment by %s on %s", event.comment.user.login, event.comment.issue_url)
    return APIResponse(data=WebhookAccepted(queued=True))
