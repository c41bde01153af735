"""WebhookProcessor - Turns bot mentions in PR comments into build jobs."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import ValidationError

from buildit.broker import WEBHOOK_QUEUE, Broker
from buildit.dispatcher import DispatchError, InvalidBuildRequestError, normalize_archs
from buildit.formatting import new_job_summary_github
from buildit.github import (
    GitHubError,
    PullRequestNotFoundError,
    get_archs,
    packages_from_pr_body,
    resolve_git_ref,
)
from buildit.jobs import JobSource
from buildit.state_store import StateStoreError
from buildit.webhooks.exceptions import CommentParseError
from buildit.webhooks.models import WebhookEvent, parse_comment_command
from buildit.webhooks.retry import (
    DoNotRetry,
    Drop,
    Ok,
    Outcome,
    Retry,
    read_attempt,
    read_dispatched,
    retry_headers,
    update_retry,
)

if TYPE_CHECKING:
    from kombu.message import Message

    from buildit.config import RepositoryConfig
    from buildit.dispatcher import JobDispatcher
    from buildit.github import GitHubClient
    from buildit.state_store import StateStore

logger = logging.getLogger(__name__)


class WebhookProcessor:
    """Processes ``@bot build`` comments from the github-webhooks queue.

    Each event goes through parsing, authorization of the commenter,
    resolution of the pull request's packages and architectures, dispatch,
    and finally a summary comment on the pull request. Transient failures
    are retried a bounded number of times by republishing the event.
    """

    def __init__(
        self,
        broker_factory: Callable[[], Broker],
        publisher: Broker,
        dispatcher: JobDispatcher,
        github: GitHubClient,
        repository: RepositoryConfig,
        abbs_path: Path | None = None,
        comments_enabled: bool = False,
        store: StateStore | None = None,
    ) -> None:
        """Initialize the processor.

        Args:
            broker_factory: Opens a dedicated broker connection for consuming.
            publisher: Shared broker used to republish events for retry.
            dispatcher: Publishes the jobs.
            github: GitHub client for membership checks and pull requests.
            repository: Repository, organization and bot identity.
            abbs_path: abbs tree used to derive architectures from packages.
            comments_enabled: Whether a summary comment is posted after dispatch.
            store: Optional store recording accepted requests.
        """
        self.broker_factory = broker_factory
        self.publisher = publisher
        self.dispatcher = dispatcher
        self.github = github
        self.repository = repository
        self.abbs_path = abbs_path
        self.comments_enabled = comments_enabled
        self.store = store

    def process(self, event: WebhookEvent, attempt: int = 0, dispatched: bool = False) -> Outcome:
        """Run one event through the pipeline.

        Args:
            event: The comment event.
            attempt: Number of earlier failed attempts.
            dispatched: Whether an earlier attempt already published the jobs.

        Returns:
            How to settle the delivery.
        """
        comment = event.comment
        try:
            command = parse_comment_command(comment.body, self.repository.bot_mention)
        except CommentParseError as e:
            logger.debug("Ignoring comment by %s: %s", comment.user.login, e)
            return DoNotRetry(str(e))

        login = comment.user.login
        try:
            is_member = self.github.is_org_member(self.repository.org, login)
        except GitHubError as e:
            logger.error("Failed to check membership of %s: %s", login, e)
            return update_retry(attempt, str(e), dispatched)
        if not is_member:
            logger.warning(
                "Rejecting build request from %s: not a member of %s", login, self.repository.org
            )
            return DoNotRetry(f"{login} is not a member of {self.repository.org}")

        try:
            number = event.pr_number
        except ValueError:
            logger.error("Failed to get pr number from %s", comment.issue_url)
            return DoNotRetry(f"invalid issue url: {comment.issue_url}")

        try:
            pr = self.github.get_pull_request(number)
        except PullRequestNotFoundError as e:
            logger.info("Ignoring comment on #%d: %s", number, e)
            return DoNotRetry(str(e))
        except GitHubError as e:
            logger.error("Failed to get PR #%d: %s", number, e)
            return update_retry(attempt, str(e), dispatched)

        packages = packages_from_pr_body(pr.body)
        if not packages:
            logger.info("PR #%d lists no packages to build", number)
            return DoNotRetry(f"PR #{number} lists no packages")

        requested = command.archs
        if requested is None:
            requested = get_archs(self.abbs_path, packages)
        git_ref = resolve_git_ref(pr)
        try:
            archs = normalize_archs(requested)
        except InvalidBuildRequestError as e:
            logger.info("Invalid build request on #%d: %s", number, e)
            return DoNotRetry(str(e))

        if not dispatched:
            source = JobSource.github(number)
            try:
                self.dispatcher.dispatch(git_ref, packages, archs, source, github_pr=number)
            except InvalidBuildRequestError as e:
                return DoNotRetry(str(e))
            except DispatchError as e:
                logger.error("Failed to dispatch jobs for #%d: %s", number, e)
                return update_retry(attempt, str(e))
            self._record(git_ref, packages, archs, source, number)
        else:
            logger.info("Jobs for #%d already dispatched, only reporting", number)

        if self.comments_enabled:
            summary = new_job_summary_github(git_ref, number, archs, packages, self.repository)
            try:
                self.github.create_comment(number, summary)
            except GitHubError as e:
                logger.error("Failed to post job summary on #%d: %s", number, e)
                return update_retry(attempt, str(e), dispatched=True)

        return Ok()

    def _record(
        self,
        git_ref: str,
        packages: list[str],
        archs: list[str],
        source: JobSource,
        number: int,
    ) -> None:
        if self.store is None:
            return
        try:
            self.store.create_pipeline(git_ref, packages, archs, source, number)
        except StateStoreError as e:
            logger.error("Failed to record pipeline: %s", e)

    def handle(self, message: Message) -> None:
        """Process one delivery and settle it.

        Raises:
            BrokerError: If a retry cannot be republished; the delivery then
                stays unacknowledged and is redelivered.
        """
        try:
            event = WebhookEvent.model_validate_json(message.body)
        except ValidationError as e:
            logger.warning("Discarding malformed webhook event: %s", e)
            message.ack()
            return

        headers = message.headers
        outcome = self.process(event, read_attempt(headers), read_dispatched(headers))
        self.settle(message, outcome)

    def settle(self, message: Message, outcome: Outcome) -> None:
        """Acknowledge a delivery, republishing it first when it should be retried."""
        if isinstance(outcome, Retry):
            logger.info("Retrying webhook event (attempt %d): %s", outcome.attempt, outcome.reason)
            self.publisher.publish(WEBHOOK_QUEUE, message.body, headers=retry_headers(outcome))
        elif isinstance(outcome, Drop):
            logger.error("Dropping webhook event: %s", outcome.reason)
        elif isinstance(outcome, Ok):
            logger.info("Webhook event processed")
        message.ack()

    def run(self, stop: threading.Event) -> None:
        """Consume until ``stop`` is set or the connection fails."""
        with self.broker_factory() as broker:
            broker.consume(WEBHOOK_QUEUE, self.handle, stop)
