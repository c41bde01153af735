"""JobDispatcher - Publishes one job per requested architecture."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING

from buildit.broker import BrokerError
from buildit.dispatcher.exceptions import DispatchError, InvalidBuildRequestError
from buildit.jobs import ALL_ARCH, MAINLINE, Job, JobSource

if TYPE_CHECKING:
    from buildit.broker import Broker

logger = logging.getLogger(__name__)


def normalize_archs(archs: Iterable[str]) -> list[str]:
    """Expand the ``mainline`` alias, then sort and de-duplicate.

    Args:
        archs: Requested architecture tokens.

    Returns:
        Sorted, unique architecture list without ``mainline``.

    Raises:
        InvalidBuildRequestError: If a token is not a supported architecture,
            or nothing remains.
    """
    requested = {arch.strip() for arch in archs if arch.strip()}
    if MAINLINE in requested:
        requested.discard(MAINLINE)
        requested.update(ALL_ARCH)

    unknown = sorted(requested - set(ALL_ARCH))
    if unknown:
        raise InvalidBuildRequestError(
            f"Unsupported architecture(s): {', '.join(unknown)}. "
            f"Choose from: {', '.join(ALL_ARCH)}, {MAINLINE}"
        )
    if not requested:
        raise InvalidBuildRequestError("No architecture requested")
    return sorted(requested)


def normalize_packages(packages: Iterable[str]) -> list[str]:
    """Drop blanks and duplicates, keeping the order the user gave.

    Raises:
        InvalidBuildRequestError: If no package remains.
    """
    result = list(dict.fromkeys(p.strip() for p in packages if p.strip()))
    if not result:
        raise InvalidBuildRequestError("No package requested")
    return result


class JobDispatcher:
    """Expands a build request into jobs and publishes them to architecture queues.

    Each architecture has its own durable queue (``job-<arch>``) consumed by
    the workers of that architecture.
    """

    def __init__(self, broker: Broker) -> None:
        """Initialize the JobDispatcher.

        Args:
            broker: Broker used to declare queues and publish jobs.
        """
        self.broker = broker

    def dispatch(
        self,
        git_ref: str,
        packages: Iterable[str],
        archs: Iterable[str],
        source: JobSource,
        github_pr: int | None = None,
    ) -> list[Job]:
        """Publish one job per architecture.

        Returns only after every job has been confirmed by the broker. The
        request is all-or-nothing for the caller: if any publish fails the
        whole request fails, although jobs published before the failure stay
        queued.

        Args:
            git_ref: Branch, tag or commit to build.
            packages: Packages to build, in build order.
            archs: Architecture tokens; ``mainline`` expands to all of them.
            source: Where results are reported.
            github_pr: Pull request the build belongs to, if any.

        Returns:
            The published jobs, sorted by architecture.

        Raises:
            InvalidBuildRequestError: If the request is malformed. Nothing is published.
            DispatchError: If publishing fails.
        """
        git_ref = git_ref.strip()
        if not git_ref:
            raise InvalidBuildRequestError("No git reference given")
        package_list = normalize_packages(packages)
        arch_list = normalize_archs(archs)

        jobs = [
            Job(
                packages=package_list,
                git_ref=git_ref,
                arch=arch,
                source=source,
                github_pr=github_pr,
            )
            for arch in arch_list
        ]

        for job in jobs:
            logger.info("Adding job to message queue %s: %s", job.queue_name, job)
            try:
                self.broker.publish(job.queue_name, job.model_dump_json())
            except BrokerError as e:
                raise DispatchError(f"Failed to create job for {job.arch}: {e}") from e

        logger.info(
            "Dispatched %d job(s) for %s (%s) on %s",
            len(jobs),
            ", ".join(package_list),
            git_ref,
            ", ".join(arch_list),
        )
        return jobs
