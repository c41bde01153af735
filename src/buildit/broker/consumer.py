"""Supervised long-running consumers."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

logger = logging.getLogger(__name__)

RESTART_BACKOFF = 5.0  # seconds


def supervise(
    name: str,
    run: Callable[[], None],
    stop: threading.Event,
    backoff: float = RESTART_BACKOFF,
) -> None:
    """Run ``run`` forever, restarting it after ``backoff`` seconds whenever it exits.

    Errors escaping ``run`` are logged and never end the loop; only ``stop``
    does.

    Args:
        name: Consumer name for logging.
        run: The consumer body. Blocks while consuming.
        stop: Event that ends supervision.
        backoff: Delay between restarts.
    """
    while not stop.is_set():
        logger.info("Starting %s ...", name)
        try:
            run()
        except Exception as e:
            logger.error("Got error while running %s: %s", name, e)
        if stop.wait(backoff):
            break
    logger.info("%s stopped", name)


def start_supervised(
    name: str,
    run: Callable[[], None],
    stop: threading.Event,
    backoff: float = RESTART_BACKOFF,
) -> threading.Thread:
    """Start ``supervise`` in a daemon thread.

    Returns:
        The started thread.
    """
    thread = threading.Thread(
        target=supervise,
        args=(name, run, stop, backoff),
        name=name,
        daemon=True,
    )
    thread.start()
    logger.info("Started %s thread", name)
    return thread
