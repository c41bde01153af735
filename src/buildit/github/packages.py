"""Helpers mapping pull requests to packages and packages to architectures."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from pathlib import Path

from buildit.github.models import PullRequest
from buildit.jobs import ALL_ARCH

logger = logging.getLogger(__name__)

BUILDIT_MARKER = "#buildit"
STABLE_BRANCH = "stable"

# Packages with ABHOST=noarch are built once, on amd64.
NOARCH_BUILD_ARCH = "amd64"

_ASSIGNMENT = re.compile(r"^\s*(?P<key>[A-Z_]+)=(?P<value>.*)$")


def packages_from_pr_body(body: str | None) -> list[str]:
    """Packages listed on the first ``#buildit`` line of a PR description.

    Names may be separated by spaces or commas.
    """
    if not body:
        return []
    for line in body.splitlines():
        if line.startswith(BUILDIT_MARKER):
            rest = line[len(BUILDIT_MARKER) :]
            return [p for p in re.split(r"[\s,]+", rest) if p]
    return []


def _find_package_dir(tree: Path, package: str) -> Path | None:
    for candidate in sorted(tree.glob(f"*/{package}")):
        if candidate.is_dir() and (candidate / "spec").exists():
            return candidate
    return None


def _read_defines(path: Path) -> dict[str, str]:
    values: dict[str, str] = {}
    for line in path.read_text(errors="replace").splitlines():
        match = _ASSIGNMENT.match(line)
        if match:
            values[match["key"]] = match["value"].strip().strip("\"'")
    return values


def _fail_arch_filter(pattern: str) -> set[str]:
    """Architectures a FAIL_ARCH pattern leaves buildable.

    ``(a|b)`` fails on a and b; ``!(a|b)`` fails everywhere except a and b.
    """
    pattern = pattern.strip()
    negated = pattern.startswith("!")
    names = set(re.findall(r"[a-z0-9_]+", pattern))
    if negated:
        return {arch for arch in ALL_ARCH if arch in names}
    return {arch for arch in ALL_ARCH if arch not in names}


def archs_for_package(tree: Path, package: str) -> set[str]:
    """Architectures one package should be built on according to the abbs tree.

    Unknown packages are built on every architecture.
    """
    package_dir = _find_package_dir(tree, package)
    if package_dir is None:
        logger.info("Package %s not found in %s, building on all architectures", package, tree)
        return set(ALL_ARCH)

    archs: set[str] = set()
    defines_files = sorted(package_dir.glob("autobuild/defines")) + sorted(
        package_dir.glob("*/defines")
    )
    if not defines_files:
        return set(ALL_ARCH)
    for defines in defines_files:
        values = _read_defines(defines)
        if values.get("ABHOST") == "noarch":
            archs.add(NOARCH_BUILD_ARCH)
        elif "FAIL_ARCH" in values:
            archs |= _fail_arch_filter(values["FAIL_ARCH"])
        else:
            archs |= set(ALL_ARCH)
    return archs


def get_archs(tree: Path | None, packages: Iterable[str]) -> list[str]:
    """Union of the architectures of all packages, sorted.

    Without an abbs tree every architecture is returned.
    """
    if tree is None:
        return list(ALL_ARCH)
    archs: set[str] = set()
    for package in packages:
        archs |= archs_for_package(tree, package)
    return sorted(archs) if archs else list(ALL_ARCH)


def resolve_git_ref(pr: PullRequest) -> str:
    """Ref to build for a pull request: ``stable`` once merged, else its head branch."""
    return STABLE_BRANCH if pr.merged else pr.head_ref
