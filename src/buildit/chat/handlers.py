"""ChatHandler - Answers bot commands."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING, NamedTuple

from buildit.broker import BrokerError
from buildit.chat.commands import (
    BuildCommand,
    Command,
    HelpCommand,
    PullRequestCommand,
    StatusCommand,
    help_text,
    parse_command,
)
from buildit.chat.exceptions import ChatError, CommandParseError
from buildit.dispatcher import DispatchError
from buildit.formatting import new_job_summary_telegram
from buildit.github import GitHubError, get_archs, packages_from_pr_body, resolve_git_ref
from buildit.jobs import JobSource
from buildit.state_store import StateStoreError
from buildit.status import render_telegram

if TYPE_CHECKING:
    from buildit.chat.bot import Notifier, Update
    from buildit.config import RepositoryConfig
    from buildit.dispatcher import JobDispatcher
    from buildit.github import GitHubClient
    from buildit.state_store import StateStore
    from buildit.status import StatusReporter

logger = logging.getLogger(__name__)

MARKDOWN_V2 = "MarkdownV2"


class Reply(NamedTuple):
    text: str
    parse_mode: str | None = None


class ChatHandler:
    """Turns chat messages into build requests and status replies."""

    def __init__(
        self,
        bot: Notifier,
        dispatcher: JobDispatcher,
        github: GitHubClient,
        reporter: StatusReporter,
        repository: RepositoryConfig,
        abbs_path: Path | None = None,
        store: StateStore | None = None,
        bot_username: str | None = None,
    ) -> None:
        self.bot = bot
        self.dispatcher = dispatcher
        self.github = github
        self.reporter = reporter
        self.repository = repository
        self.abbs_path = abbs_path
        self.store = store
        self.bot_username = bot_username

    def handle_update(self, update: Update) -> None:
        """Answer one update. Never raises for a single bad message."""
        message = update.get("message") or {}
        text = message.get("text")
        chat_id = (message.get("chat") or {}).get("id")
        if not text or chat_id is None:
            return

        try:
            command = parse_command(text, self.bot_username)
        except CommandParseError as e:
            reply = Reply(str(e))
        else:
            if command is None:
                return
            logger.info("Chat %d: %s", chat_id, command)
            reply = self.answer(chat_id, command)

        try:
            self.bot.send_message(chat_id, reply.text, reply.parse_mode)
        except ChatError as e:
            logger.error("Failed to reply to chat %d: %s", chat_id, e)

    def answer(self, chat_id: int, command: Command) -> Reply:
        """Compute the reply to a command."""
        if isinstance(command, HelpCommand):
            return Reply(help_text())
        if isinstance(command, BuildCommand):
            return self.build(chat_id, command.git_ref, command.packages, command.archs)
        if isinstance(command, PullRequestCommand):
            return self.build_pull_request(chat_id, command.number)
        if isinstance(command, StatusCommand):
            try:
                return Reply(render_telegram(self.reporter.report()), MARKDOWN_V2)
            except BrokerError as e:
                logger.error("Failed to collect status: %s", e)
                return Reply(f"Failed to get status: {e}")
        raise TypeError(f"Unhandled command: {command!r}")

    def build_pull_request(self, chat_id: int, number: int) -> Reply:
        try:
            pr = self.github.get_pull_request(number)
        except GitHubError as e:
            return Reply(f"Failed to get pr info: {e}.")

        packages = packages_from_pr_body(pr.body)
        if not packages:
            return Reply("Please list packages to build in pr info starting with '#buildit'.")
        archs = get_archs(self.abbs_path, packages)
        return self.build(chat_id, resolve_git_ref(pr), packages, archs, github_pr=number)

    def build(
        self,
        chat_id: int,
        git_ref: str,
        packages: Sequence[str],
        archs: Sequence[str],
        github_pr: int | None = None,
    ) -> Reply:
        source = JobSource.telegram(chat_id)
        try:
            jobs = self.dispatcher.dispatch(git_ref, packages, archs, source, github_pr=github_pr)
        except DispatchError as e:
            return Reply(f"Failed to create job: {e}")

        dispatched_archs = [job.arch for job in jobs]
        dispatched_packages = jobs[0].packages
        if self.store is not None:
            try:
                self.store.create_pipeline(
                    git_ref, dispatched_packages, dispatched_archs, source, github_pr
                )
            except StateStoreError as e:
                logger.error("Failed to record pipeline: %s", e)

        return Reply(
            new_job_summary_telegram(
                git_ref, github_pr, dispatched_archs, dispatched_packages, self.repository
            ),
            MARKDOWN_V2,
        )
