"""GitHub - Code host client and pull request helpers."""

from buildit.github.auth import (
    AppInstallationToken,
    StaticToken,
    TokenProvider,
    TokenState,
)
from buildit.github.client import GitHubClient
from buildit.github.exceptions import (
    CommentError,
    GitHubAuthError,
    GitHubError,
    GitHubUnavailableError,
    PullRequestNotFoundError,
)
from buildit.github.models import Comment, PullRequest
from buildit.github.packages import (
    archs_for_package,
    get_archs,
    packages_from_pr_body,
    resolve_git_ref,
)

__all__ = [
    "AppInstallationToken",
    "Comment",
    "CommentError",
    "GitHubAuthError",
    "GitHubClient",
    "GitHubError",
    "GitHubUnavailableError",
    "PullRequest",
    "PullRequestNotFoundError",
    "StaticToken",
    "TokenProvider",
    "TokenState",
    "archs_for_package",
    "get_archs",
    "packages_from_pr_body",
    "resolve_git_ref",
]
