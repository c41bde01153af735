"""Data models for the GitHub client."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass
class PullRequest:
    """Pull request data."""

    number: int
    head_ref: str
    author: str
    body: str | None = None
    merged_at: datetime | None = None

    @property
    def merged(self) -> bool:
        return self.merged_at is not None


@dataclass
class Comment:
    """Issue or pull request comment."""

    id: int
    author: str
    body: str
