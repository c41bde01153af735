"""BuildItServer - Wires the components together and runs them."""

from __future__ import annotations

import logging
import threading

import uvicorn
from fastapi import FastAPI

from buildit.api import (
    WebhookSettings,
    close_services,
    create_app,
    init_dispatcher,
    init_publisher,
    init_reporter,
    init_state_store,
    init_webhook_settings,
)
from buildit.broker import Broker, ManagementClient, start_supervised
from buildit.chat import ChatHandler, TelegramBot
from buildit.completion import CompletionAggregator
from buildit.config import ServerConfig
from buildit.dispatcher import JobDispatcher
from buildit.github import AppInstallationToken, GitHubClient, StaticToken, TokenProvider
from buildit.registry import HeartbeatConsumer, WorkerRegistry
from buildit.state_store import StateStore
from buildit.status import StatusReporter
from buildit.webhooks import WebhookProcessor

logger = logging.getLogger(__name__)


def make_token_provider(config: ServerConfig) -> TokenProvider:
    """GitHub App installation token if an app is configured, else the static token."""
    if (
        config.github_app_id is not None
        and config.github_app_key is not None
        and config.github_app_installation_id is not None
    ):
        logger.info("Authenticating to GitHub as app %d", config.github_app_id)
        return AppInstallationToken.from_pem_file(
            config.github_app_id, config.github_app_key, config.github_app_installation_id
        )
    if config.github_access_token is None:
        logger.warning("No GitHub credentials configured; PR comments are disabled")
    return StaticToken(config.github_access_token)


class BuildItServer:
    """Owns every long-lived component of the coordination server.

    One shared Broker publishes jobs and webhook retries; each consumer
    thread opens its own connection through ``broker_factory``.
    """

    def __init__(self, config: ServerConfig) -> None:
        self.config = config
        self.stop_event = threading.Event()
        self.threads: list[threading.Thread] = []

        repository = config.repository
        self.publisher = Broker(config.amqp_addr)
        self.registry = WorkerRegistry()
        self.dispatcher = JobDispatcher(self.publisher)
        self.github = GitHubClient(repository.full_name, make_token_provider(config))
        self.management = (
            ManagementClient(config.rabbitmq_queue_api) if config.rabbitmq_queue_api else None
        )
        self.reporter = StatusReporter(self.publisher, self.registry, self.management)
        self.store = StateStore(config.database_url) if config.database_url else None
        self.bot = TelegramBot(config.telegram_token) if config.telegram_token else None
        comment_client = self.github if config.github_write_enabled else None

        self.heartbeats = HeartbeatConsumer(self.broker_factory, self.registry)
        self.completion = CompletionAggregator(
            self.broker_factory,
            repository,
            github=comment_client,
            notifier=self.bot,
            store=self.store,
        )
        self.webhooks = WebhookProcessor(
            self.broker_factory,
            self.publisher,
            self.dispatcher,
            self.github,
            repository,
            abbs_path=config.abbs_path,
            comments_enabled=config.github_write_enabled,
            store=self.store,
        )
        self.chat = (
            ChatHandler(
                self.bot,
                self.dispatcher,
                self.github,
                self.reporter,
                repository,
                abbs_path=config.abbs_path,
                store=self.store,
            )
            if self.bot is not None
            else None
        )

    def broker_factory(self) -> Broker:
        return Broker(self.config.amqp_addr)

    def create_app(self) -> FastAPI:
        """Create the HTTP app bound to this server's components."""
        init_state_store(self.store)
        init_dispatcher(self.dispatcher)
        init_reporter(self.reporter)
        init_publisher(self.publisher)
        init_webhook_settings(
            WebhookSettings(secret=self.config.github_secret, repository=self.config.repository)
        )
        return create_app()

    def _run_chat(self) -> None:
        assert self.bot is not None and self.chat is not None
        if self.chat.bot_username is None:
            self.chat.bot_username = self.bot.get_me().get("username")
        self.bot.run_polling(self.chat.handle_update, self.stop_event)

    def start(self) -> None:
        """Start the supervised consumer threads."""
        stop = self.stop_event
        self.threads.append(
            start_supervised("heartbeat worker", lambda: self.heartbeats.run(stop), stop)
        )
        self.threads.append(
            start_supervised("job completion worker", lambda: self.completion.run(stop), stop)
        )
        self.threads.append(
            start_supervised("github webhook worker", lambda: self.webhooks.run(stop), stop)
        )
        if self.chat is not None:
            self.threads.append(start_supervised("telegram bot", self._run_chat, stop))
        else:
            logger.info("No Telegram token configured; chat front end disabled")

    def stop(self, timeout: float = 10.0) -> None:
        """Stop consumer threads and release connections."""
        self.stop_event.set()
        for thread in self.threads:
            thread.join(timeout)
        self.threads.clear()
        close_services()
        self.publisher.close()
        self.github.close()
        if isinstance(self.github.auth, AppInstallationToken):
            self.github.auth.close()
        if self.management is not None:
            self.management.close()
        if self.bot is not None:
            self.bot.close()
        if self.store is not None:
            self.store.close()

    def serve(self) -> None:
        """Run consumers and the HTTP server until interrupted."""
        app = self.create_app()
        self.start()
        try:
            uvicorn.run(app, host=self.config.listen_host, port=self.config.listen_port)
        finally:
            self.stop()
