"""CompletionAggregator - Consumes job results and reports them."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import TYPE_CHECKING

from pydantic import ValidationError

from buildit.broker import COMPLETION_QUEUE, Broker
from buildit.chat import ChatError
from buildit.formatting import job_result_github, job_result_telegram
from buildit.github import GitHubError
from buildit.jobs import JobResult
from buildit.state_store import StateStoreError

if TYPE_CHECKING:
    from kombu.message import Message

    from buildit.chat import Notifier
    from buildit.config import RepositoryConfig
    from buildit.github import GitHubClient
    from buildit.state_store import StateStore

logger = logging.getLogger(__name__)


class CompletionAggregator:
    """Reports each job result once, then acknowledges it.

    Results from Telegram requests are sent to the originating chat. Results
    of jobs belonging to a pull request are appended to the bot's latest
    comment on it, or posted as a new comment when there is none.

    Failures of the chat or GitHub calls are logged and the result is still
    acknowledged. Broker errors propagate and restart the consumer.
    """

    def __init__(
        self,
        broker_factory: Callable[[], Broker],
        repository: RepositoryConfig,
        github: GitHubClient | None = None,
        notifier: Notifier | None = None,
        store: StateStore | None = None,
    ) -> None:
        """Initialize the aggregator.

        Args:
            broker_factory: Opens a dedicated broker connection for consuming.
            repository: Repository the reports link to.
            github: GitHub client able to write comments. None disables PR comments.
            notifier: Chat client. None disables chat reports.
            store: Optional store recording every result.
        """
        self.broker_factory = broker_factory
        self.repository = repository
        self.github = github
        self.notifier = notifier
        self.store = store

    def handle(self, message: Message) -> None:
        """Report one job result and acknowledge it."""
        try:
            result = JobResult.model_validate_json(message.body)
        except ValidationError as e:
            logger.warning("Discarding malformed job result: %s", e)
            message.ack()
            return

        logger.info(
            "Processing job result for %s on %s (%s) ...",
            ", ".join(result.job.packages),
            result.job.arch,
            "success" if result.success else "failure",
        )
        self.notify(result)
        if result.job.github_pr is not None:
            self.annotate(result.job.github_pr, job_result_github(result, self.repository))
        self.record(result)

        message.ack()
        logger.info("Finished processing job result for %s", result.job.arch)

    def notify(self, result: JobResult) -> None:
        """Send the report to the originating chat, if any."""
        chat_id = result.job.source.chat_id
        if chat_id is None or self.notifier is None:
            return
        try:
            self.notifier.send_message(
                chat_id, job_result_telegram(result, self.repository), parse_mode="MarkdownV2"
            )
        except ChatError as e:
            logger.error("Failed to report job result to chat %d: %s", chat_id, e)

    def annotate(self, pr: int, text: str) -> None:
        """Append ``text`` to the bot's latest comment on a PR, or create one."""
        if self.github is None:
            return
        try:
            comments = self.github.list_comments(pr)
            bot_comments = [c for c in comments if self.repository.is_bot_author(c.author)]
            if bot_comments:
                latest = bot_comments[-1]
                logger.info("Found existing comment on #%d, updating", pr)
                self.github.update_comment(latest.id, latest.body + "\n" + text)
            else:
                logger.info("No existing comments on #%d, create one", pr)
                self.github.create_comment(pr, text)
        except GitHubError as e:
            logger.error("Failed to annotate #%d: %s", pr, e)

    def record(self, result: JobResult) -> None:
        if self.store is None:
            return
        try:
            self.store.record_job_result(result)
        except StateStoreError as e:
            logger.error("Failed to record job result: %s", e)

    def run(self, stop: threading.Event) -> None:
        """Consume until ``stop`` is set or the connection fails."""
        with self.broker_factory() as broker:
            broker.consume(COMPLETION_QUEUE, self.handle, stop)
