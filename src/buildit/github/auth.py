"""Token providers for the GitHub client.

A provider hands out the bearer token for the next request. When GitHub
answers 401 the client calls ``invalidate`` and retries once; a provider that
cannot refresh makes that retry pointless, so it reports ``refreshable=False``.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from datetime import datetime
from enum import StrEnum
from pathlib import Path
from typing import Protocol

import httpx
import jwt

from buildit.github.exceptions import GitHubAuthError, GitHubUnavailableError

logger = logging.getLogger(__name__)

# GitHub rejects app JWTs valid for more than 10 minutes.
JWT_LIFETIME = 9 * 60
JWT_CLOCK_DRIFT = 60
# Refresh installation tokens this many seconds before they expire.
TOKEN_EXPIRY_MARGIN = 120


class TokenProvider(Protocol):
    """Source of GitHub bearer tokens."""

    @property
    def refreshable(self) -> bool:
        """Whether ``invalidate`` can lead to a different token."""
        ...

    def token(self) -> str | None:
        """Token for the next request, or None for anonymous access."""
        ...

    def invalidate(self) -> None:
        """Mark the current token as rejected."""
        ...


class StaticToken:
    """A fixed personal access token, or anonymous access when None."""

    refreshable = False

    def __init__(self, token: str | None = None) -> None:
        self._token = token

    def token(self) -> str | None:
        return self._token

    def invalidate(self) -> None:
        logger.warning("Static GitHub token was rejected; it cannot be refreshed")


class TokenState(StrEnum):
    """State of an installation token."""

    VALID = "valid"
    NEEDS_REFRESH = "needs_refresh"


class AppInstallationToken:
    """Installation access token of a GitHub App.

    The app signs a short-lived RS256 JWT with its private key and exchanges
    it for an installation token, which is cached until it nears expiry or
    is invalidated.
    """

    refreshable = True

    def __init__(
        self,
        app_id: int,
        private_key: str,
        installation_id: int,
        base_url: str = "https://api.github.com",
        clock: Callable[[], float] = time.time,
    ) -> None:
        """Initialize the provider.

        Args:
            app_id: GitHub App ID.
            private_key: PEM-encoded RSA private key of the app.
            installation_id: Installation on the repository's organization.
            base_url: GitHub API base URL (for testing/enterprise).
            clock: Source of the current UNIX time.
        """
        self.app_id = app_id
        self.installation_id = installation_id
        self.base_url = base_url.rstrip("/")
        self._private_key = private_key
        self._clock = clock
        self._lock = threading.Lock()
        self._token: str | None = None
        self._expires_at = 0.0
        self.state = TokenState.NEEDS_REFRESH
        self._client: httpx.Client | None = None

    @classmethod
    def from_pem_file(
        cls,
        app_id: int,
        key_path: Path,
        installation_id: int,
        base_url: str = "https://api.github.com",
    ) -> AppInstallationToken:
        """Create a provider reading the private key from a PEM file."""
        return cls(
            app_id=app_id,
            private_key=Path(key_path).read_text(),
            installation_id=installation_id,
            base_url=base_url,
        )

    @property
    def client(self) -> httpx.Client:
        """Get or create HTTP client for the token exchange."""
        if self._client is None:
            self._client = httpx.Client(
                base_url=self.base_url,
                headers={
                    "Accept": "application/vnd.github+json",
                    "X-GitHub-Api-Version": "2022-11-28",
                },
                timeout=30.0,
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def app_jwt(self) -> str:
        """Sign a JWT identifying the app."""
        now = int(self._clock())
        payload = {
            "iat": now - JWT_CLOCK_DRIFT,
            "exp": now + JWT_LIFETIME,
            "iss": str(self.app_id),
        }
        return jwt.encode(payload, self._private_key, algorithm="RS256")

    def token(self) -> str | None:
        with self._lock:
            if (
                self.state == TokenState.NEEDS_REFRESH
                or self._clock() >= self._expires_at - TOKEN_EXPIRY_MARGIN
            ):
                self._refresh()
            return self._token

    def invalidate(self) -> None:
        with self._lock:
            self.state = TokenState.NEEDS_REFRESH

    def _refresh(self) -> None:
        logger.info("Requesting installation token for GitHub App %s", self.app_id)
        try:
            response = self.client.post(
                f"/app/installations/{self.installation_id}/access_tokens",
                headers={"Authorization": f"Bearer {self.app_jwt()}"},
            )
        except httpx.HTTPError as e:
            raise GitHubUnavailableError(f"Failed to request installation token: {e}") from e

        if response.status_code in (401, 403, 404):
            raise GitHubAuthError(
                f"GitHub App credentials rejected: {response.status_code} - {response.text}"
            )
        if response.status_code != 201:
            raise GitHubUnavailableError(
                f"Failed to request installation token: {response.status_code} - {response.text}"
            )

        data = response.json()
        self._token = data["token"]
        self._expires_at = datetime.fromisoformat(data["expires_at"]).timestamp()
        self.state = TokenState.VALID
