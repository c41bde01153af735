"""Custom exceptions for the GitHub client."""


class GitHubError(Exception):
    """Base exception for GitHub client errors."""


class GitHubUnavailableError(GitHubError):
    """GitHub could not be reached or answered unexpectedly. Worth retrying."""


class GitHubAuthError(GitHubError):
    """Credentials were rejected even after a refresh."""


class PullRequestNotFoundError(GitHubError):
    """Pull request with given number does not exist."""


class CommentError(GitHubError):
    """Error creating or updating a comment."""
