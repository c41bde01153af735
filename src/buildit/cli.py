"""CLI entry point for the BuildIt! server."""

from __future__ import annotations

import sys
from pathlib import Path

import click

from buildit import __version__
from buildit.config import ConfigError, load_config
from buildit.logging import setup_logging
from buildit.state_store import StateStoreError


@click.command()
@click.version_option(__version__)
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Path to a YAML settings file; environment variables take precedence",
)
@click.option(
    "--host", default=None, help="Listen address (default: BUILDIT_LISTEN_HOST or 127.0.0.1)"
)
@click.option(
    "--port", type=int, default=None, help="Listen port (default: BUILDIT_LISTEN_PORT or 3000)"
)
@click.option(
    "--log-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory for rotating log files (default: BUILDIT_LOG_DIR or ./logs)",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def main(
    config_path: Path | None,
    host: str | None,
    port: int | None,
    log_dir: Path | None,
    verbose: bool,
) -> None:
    """BuildIt! server - dispatch package builds and report their results."""
    setup_logging(log_dir=log_dir, level="DEBUG" if verbose else None)

    try:
        config = load_config(config_path)
    except ConfigError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(2)
    if host is not None:
        config.listen_host = host
    if port is not None:
        config.listen_port = port

    from buildit.server import BuildItServer  # noqa: PLC0415

    try:
        server = BuildItServer(config)
    except (StateStoreError, OSError) as e:
        click.echo(f"Failed to start: {e}", err=True)
        sys.exit(1)

    click.echo(f"Listening on {config.listen_host}:{config.listen_port}")
    server.serve()


if __name__ == "__main__":
    main()
