"""Configuration loading for the BuildIt! server.

Settings come from an optional YAML file and are overridden by environment
variables, using the variable names the deployed workers and relays already use.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml


class ConfigError(Exception):
    """Raised when configuration is invalid or missing."""


# Field name -> environment variable
ENV_VARS = {
    "amqp_addr": "BUILDIT_AMQP_ADDR",
    "rabbitmq_queue_api": "BUILDIT_RABBITMQ_QUEUE_API",
    "github_access_token": "BUILDIT_GITHUB_ACCESS_TOKEN",
    "github_app_id": "BUILDIT_GITHUB_APP_ID",
    "github_app_key": "BUILDIT_GITHUB_APP_KEY_PEM_PATH",
    "github_app_installation_id": "BUILDIT_GITHUB_APP_INSTALLATION_ID",
    "github_secret": "BUILDIT_GITHUB_SECRET",
    "abbs_path": "BUILDIT_ABBS_PATH",
    "database_url": "BUILDIT_DATABASE_URL",
    "telegram_token": "TELOXIDE_TOKEN",
    "listen_host": "BUILDIT_LISTEN_HOST",
    "listen_port": "BUILDIT_LISTEN_PORT",
}

_INT_FIELDS = {"github_app_id", "github_app_installation_id", "listen_port"}
_PATH_FIELDS = {"github_app_key", "abbs_path"}


@dataclass
class RepositoryConfig:
    """The package repository the bot serves."""

    owner: str = "AOSC-Dev"
    name: str = "aosc-os-abbs"
    org: str = "aosc-dev"
    bot_login: str = "aosc-buildit-bot"

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    @property
    def bot_mention(self) -> str:
        return f"@{self.bot_login}"

    def is_bot_author(self, login: str) -> bool:
        """Whether a comment author is the bot.

        Comments posted with a GitHub App token are attributed to
        ``<login>[bot]``, those posted with a user token to ``<login>``.
        """
        return login in (self.bot_login, f"{self.bot_login}[bot]")

    def pull_url(self, number: int) -> str:
        return f"https://github.com/{self.full_name}/pull/{number}"

    def commit_url(self, sha: str) -> str:
        return f"https://github.com/{self.full_name}/commit/{sha}"


@dataclass
class ServerConfig:
    """BuildIt! server configuration.

    Only ``amqp_addr`` is required. Optional credentials switch features on:
    a GitHub token or app key enables PR comments, a bot token enables the
    Telegram front end, a database URL enables pipeline history.
    """

    amqp_addr: str
    rabbitmq_queue_api: str | None = None
    github_access_token: str | None = None
    github_app_id: int | None = None
    github_app_key: Path | None = None
    github_app_installation_id: int | None = None
    github_secret: str | None = None
    abbs_path: Path | None = None
    database_url: str | None = None
    telegram_token: str | None = None
    listen_host: str = "127.0.0.1"
    listen_port: int = 3000
    repository: RepositoryConfig = field(default_factory=RepositoryConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ServerConfig:
        """Create config from a mapping of field names to raw values.

        Args:
            data: Settings keyed by field name. Strings are coerced to the
                field's type; empty strings count as unset.

        Returns:
            Parsed and validated configuration.

        Raises:
            ConfigError: If required fields are missing or values are invalid.
        """
        known = {f.name for f in fields(cls)} - {"repository"}
        unknown = sorted(set(data) - known - {"repository"})
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")

        values: dict[str, Any] = {}
        for name in known:
            raw = data.get(name)
            if raw is None or raw == "":
                continue
            values[name] = _coerce(name, raw)

        if "amqp_addr" not in values:
            raise ConfigError(f"Missing required setting: amqp_addr ({ENV_VARS['amqp_addr']})")

        repo_data = data.get("repository") or {}
        if not isinstance(repo_data, Mapping):
            raise ConfigError("'repository' must be a mapping")
        config = cls(**values, repository=RepositoryConfig(**repo_data))
        config.validate()
        return config

    def validate(self) -> None:
        """Check combinations of settings.

        Raises:
            ConfigError: If the GitHub App settings are incomplete.
        """
        if (self.github_app_id is None) != (self.github_app_key is None):
            raise ConfigError(
                "GitHub App requires both "
                f"{ENV_VARS['github_app_id']} and {ENV_VARS['github_app_key']}"
            )
        if self.github_app_installation_id is not None and self.github_app_id is None:
            raise ConfigError(f"{ENV_VARS['github_app_installation_id']} requires a GitHub App")
        if self.github_app_id is not None and self.github_app_installation_id is None:
            raise ConfigError(
                f"GitHub App requires {ENV_VARS['github_app_installation_id']} "
                "to obtain installation tokens"
            )

    @property
    def github_write_enabled(self) -> bool:
        """Whether a credential able to write PR comments is configured."""
        return self.github_access_token is not None or self.github_app_id is not None


def _coerce(name: str, raw: Any) -> Any:
    if name in _INT_FIELDS:
        try:
            return int(raw)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Setting '{name}' must be an integer, got {raw!r}") from e
    if name in _PATH_FIELDS:
        return Path(raw)
    return str(raw)


def load_config(
    config_path: Path | str | None = None,
    environ: Mapping[str, str] | None = None,
) -> ServerConfig:
    """Load configuration from an optional YAML file and the environment.

    Args:
        config_path: Optional path to a YAML mapping of field names.
        environ: Environment to read; defaults to ``os.environ``.

    Returns:
        Parsed configuration object.

    Raises:
        ConfigError: If the file is missing or invalid, or settings are incomplete.
    """
    data: dict[str, Any] = {}

    if config_path is not None:
        config_path = Path(config_path)
        if not config_path.exists():
            raise ConfigError(f"Configuration file not found: {config_path}")
        try:
            with open(config_path) as f:
                loaded = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e
        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ConfigError(
                f"Configuration must be a YAML mapping, got {type(loaded).__name__}"
            )
        data.update(loaded)

    if environ is None:
        environ = os.environ
    for name, var in ENV_VARS.items():
        if environ.get(var):
            data[name] = environ[var]

    return ServerConfig.from_dict(data)
