"""GitHubClient - Pull requests, comments and organization membership."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

import httpx

from buildit.github.auth import StaticToken, TokenProvider
from buildit.github.exceptions import (
    CommentError,
    GitHubAuthError,
    GitHubUnavailableError,
    PullRequestNotFoundError,
)
from buildit.github.models import Comment, PullRequest

logger = logging.getLogger(__name__)


class GitHubClient:
    """GitHub REST client for one repository.

    Requests carry the provider's current token. A 401 invalidates it and
    the request is sent once more with a fresh token; a second 401 is final.
    """

    def __init__(
        self,
        repo: str,
        auth: TokenProvider | None = None,
        base_url: str = "https://api.github.com",
    ) -> None:
        """Initialize GitHub client.

        Args:
            repo: GitHub repo in "owner/repo" format
            auth: Token provider. Defaults to anonymous access.
            base_url: GitHub API base URL (for testing/enterprise)
        """
        self.repo = repo
        self.auth: TokenProvider = auth if auth is not None else StaticToken()
        self.base_url = base_url.rstrip("/")
        self._client: httpx.Client | None = None

    @property
    def client(self) -> httpx.Client:
        """Get or create HTTP client for GitHub API."""
        if self._client is None:
            self._client = httpx.Client(
                base_url=self.base_url,
                headers={
                    "Accept": "application/vnd.github+json",
                    "X-GitHub-Api-Version": "2022-11-28",
                    "User-Agent": "buildit",
                },
                timeout=30.0,
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Send a request, refreshing the token once on 401.

        Raises:
            GitHubUnavailableError: On network errors.
            GitHubAuthError: If credentials are rejected after the refresh.
        """
        response = self._send(method, url, **kwargs)
        if response.status_code == 401 and self.auth.refreshable:
            logger.warning("GitHub rejected credentials for %s %s, refreshing", method, url)
            self.auth.invalidate()
            response = self._send(method, url, **kwargs)
        if response.status_code == 401:
            raise GitHubAuthError(f"Bad credentials for {method} {url}: {response.text}")
        return response

    def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        headers = {}
        token = self.auth.token()
        if token:
            headers["Authorization"] = f"Bearer {token}"
        try:
            return self.client.request(method, url, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            raise GitHubUnavailableError(f"Network is not reachable: {e}") from e

    def get_pull_request(self, number: int) -> PullRequest:
        """Get a pull request.

        Args:
            number: The PR number

        Returns:
            PullRequest with head branch, body and merge time

        Raises:
            PullRequestNotFoundError: If the PR does not exist
            GitHubUnavailableError: On any other failure
        """
        response = self._request("GET", f"/repos/{self.repo}/pulls/{number}")
        if response.status_code == 404:
            raise PullRequestNotFoundError(f"Pull request #{number} not found in {self.repo}")
        if response.status_code != 200:
            raise GitHubUnavailableError(
                f"Failed to get PR {number}: {response.status_code} - {response.text}"
            )

        data = response.json()
        merged_at = data.get("merged_at")
        return PullRequest(
            number=data["number"],
            head_ref=data["head"]["ref"],
            author=data["user"]["login"],
            body=data.get("body"),
            merged_at=datetime.fromisoformat(merged_at) if merged_at else None,
        )

    def list_comments(self, number: int) -> list[Comment]:
        """List all comments on a pull request, oldest first.

        Follows pagination until the last page.

        Raises:
            GitHubUnavailableError: If any page cannot be fetched
        """
        comments: list[Comment] = []
        url: str | None = f"/repos/{self.repo}/issues/{number}/comments"
        params: dict[str, Any] | None = {"per_page": 100}
        while url is not None:
            response = self._request("GET", url, params=params)
            if response.status_code != 200:
                raise GitHubUnavailableError(
                    f"Failed to list comments of #{number}: "
                    f"{response.status_code} - {response.text}"
                )
            for item in response.json():
                comments.append(
                    Comment(
                        id=item["id"],
                        author=item["user"]["login"],
                        body=item.get("body") or "",
                    )
                )
            # The next link already carries the query string
            url = response.links.get("next", {}).get("url")
            params = None
        logger.debug("Found %d comments on #%d", len(comments), number)
        return comments

    def create_comment(self, number: int, body: str) -> Comment:
        """Create a comment on a pull request.

        Raises:
            CommentError: If GitHub refuses the comment
        """
        logger.info("Creating comment on #%d", number)
        response = self._request(
            "POST", f"/repos/{self.repo}/issues/{number}/comments", json={"body": body}
        )
        if response.status_code != 201:
            logger.error("Failed to create comment on #%d: %s", number, response.text)
            raise CommentError(
                f"Failed to create comment on #{number}: {response.status_code} - {response.text}"
            )
        data = response.json()
        return Comment(id=data["id"], author=data["user"]["login"], body=data.get("body") or "")

    def update_comment(self, comment_id: int, body: str) -> None:
        """Replace the body of an existing comment.

        Raises:
            CommentError: If GitHub refuses the update
        """
        logger.info("Updating comment %d", comment_id)
        response = self._request(
            "PATCH", f"/repos/{self.repo}/issues/comments/{comment_id}", json={"body": body}
        )
        if response.status_code != 200:
            logger.error("Failed to update comment %d: %s", comment_id, response.text)
            raise CommentError(
                f"Failed to update comment {comment_id}: {response.status_code} - {response.text}"
            )

    def is_org_member(self, org: str, login: str) -> bool:
        """Check whether a user is a public member of an organization.

        Returns:
            True for a member, False for a definitive "not a member".

        Raises:
            GitHubUnavailableError: If the answer is neither
        """
        response = self._request("GET", f"/orgs/{org}/public_members/{login}")
        if response.status_code == 204:
            return True
        if response.status_code == 404:
            return False
        raise GitHubUnavailableError(
            f"Failed to check membership of {login} in {org}: "
            f"{response.status_code} - {response.text}"
        )
