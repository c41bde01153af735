"""Human-facing messages: Telegram MarkdownV2 and GitHub Markdown reports."""

from __future__ import annotations

import re
from collections.abc import Sequence
from datetime import timedelta

from buildit.config import RepositoryConfig
from buildit.jobs import JobResult

SUCCESS_GLYPH = "✅️"
FAILURE_GLYPH = "❌"

_MARKDOWN_V2_SPECIAL = re.compile(r"([_*\[\]()~`>#+\-=|{}.!\\])")


def escape_markdown(text: str) -> str:
    """Escape text for Telegram MarkdownV2."""
    return _MARKDOWN_V2_SPECIAL.sub(r"\\\1", text)


def format_elapsed(elapsed: timedelta) -> str:
    """Render a duration with two decimals in the largest fitting unit, e.g. ``12.35s``."""
    seconds = elapsed.total_seconds()
    if seconds >= 1:
        return f"{seconds:.2f}s"
    if seconds >= 1e-3:
        return f"{seconds * 1e3:.2f}ms"
    return f"{seconds * 1e6:.2f}µs"


def humanize_ago(delta: timedelta) -> str:
    """Relative time such as ``3 minutes ago``."""
    seconds = int(delta.total_seconds())
    if seconds < 1:
        return "now"
    for unit, size in (("day", 86400), ("hour", 3600), ("minute", 60), ("second", 1)):
        if seconds >= size:
            count = seconds // size
            return f"{count} {unit}{'' if count == 1 else 's'} ago"
    return "now"


def _glyph(result: JobResult) -> str:
    return SUCCESS_GLYPH if result.success else FAILURE_GLYPH


def job_result_telegram(result: JobResult, repository: RepositoryConfig) -> str:
    """Job completion report for a Telegram chat (MarkdownV2)."""
    lines = [
        f"{_glyph(result)} Job completed on {escape_markdown(result.worker.hostname)} "
        f"\\({escape_markdown(result.worker.arch)}\\)",
        "",
        f"*Time elapsed*: {escape_markdown(format_elapsed(result.elapsed))}",
    ]
    if result.git_commit:
        lines.append(
            f"*Git commit*: [{escape_markdown(result.git_commit[:8])}]"
            f"({repository.commit_url(result.git_commit)})"
        )
    if result.job.github_pr is not None:
        pr = result.job.github_pr
        lines.append(f"*GitHub PR*: [\\#{pr}]({repository.pull_url(pr)})")
    lines += [
        f"*Architecture*: {escape_markdown(result.job.arch)}",
        f"*Package\\(s\\) to build*: {escape_markdown(', '.join(result.job.packages))}",
        "*Package\\(s\\) successfully built*: "
        f"{escape_markdown(', '.join(result.successful_packages))}",
        f"*Package\\(s\\) failed to build*: {escape_markdown(result.failed_package or 'None')}",
        "*Package\\(s\\) not built due to previous build failure*: "
        f"{escape_markdown(', '.join(result.skipped_packages))}",
        "",
        f"[Build Log \\>\\>]({result.log or 'None'})",
    ]
    return "\n".join(lines) + "\n"


def job_result_github(result: JobResult, repository: RepositoryConfig) -> str:
    """Job completion report for a pull request comment (GitHub Markdown)."""
    lines = [
        f"{_glyph(result)} Job completed on {result.worker.hostname} ({result.worker.arch})",
        "",
        f"**Time elapsed**: {format_elapsed(result.elapsed)}",
    ]
    if result.git_commit:
        lines.append(
            f"**Git commit**: [{result.git_commit[:8]}]({repository.commit_url(result.git_commit)})"
        )
    lines += [
        f"**Architecture**: {result.job.arch}",
        f"**Package(s) to build**: {', '.join(result.job.packages)}",
        f"**Package(s) successfully built**: {', '.join(result.successful_packages)}",
        f"**Package(s) failed to build**: {result.failed_package or 'None'}",
        f"**Package(s) not built due to previous build failure**: "
        f"{', '.join(result.skipped_packages)}",
        "",
        f"[Build Log >>]({result.log or 'None'})",
    ]
    return "\n".join(lines) + "\n"


def new_job_summary_telegram(
    git_ref: str,
    github_pr: int | None,
    archs: Sequence[str],
    packages: Sequence[str],
    repository: RepositoryConfig,
) -> str:
    """Confirmation sent to a chat after a build request was dispatched (MarkdownV2)."""
    lines = ["", "__*New Job Summary*__", "", f"*Git reference*: {escape_markdown(git_ref)}"]
    if github_pr is not None:
        lines.append(f"*GitHub PR*: [\\#{github_pr}]({repository.pull_url(github_pr)})")
    lines += [
        f"*Architecture\\(s\\)*: {escape_markdown(', '.join(archs))}",
        f"*Package\\(s\\)*: {escape_markdown(', '.join(packages))}",
    ]
    return "\n".join(lines) + "\n"


def new_job_summary_github(
    git_ref: str,
    github_pr: int | None,
    archs: Sequence[str],
    packages: Sequence[str],
    repository: RepositoryConfig,
) -> str:
    """Confirmation posted on a pull request after a build request was dispatched."""
    lines = ["### New Job Summary", "", f"**Git reference**: {git_ref}"]
    if github_pr is not None:
        lines.append(f"**GitHub PR**: [#{github_pr}]({repository.pull_url(github_pr)})")
    lines += [
        f"**Architecture(s)**: {', '.join(archs)}",
        f"**Package(s)**: {', '.join(packages)}",
    ]
    return "\n".join(lines) + "\n"
