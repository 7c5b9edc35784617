"""The two remote operations the gate needs, behind a narrow interface."""

from __future__ import annotations

from typing import Optional, Protocol

import requests
from pydantic import BaseModel, ConfigDict

from shared.errors import CompareFailed
from shared.github_client import GitHubClient


class ChangedFile(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    filename: str
    status: str


class CommitComparison(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    status: str
    """``ahead``, ``behind``, ``identical`` or ``diverged``."""
    files: Optional[list[ChangedFile]] = None

    def modified_files(self) -> Optional[set[str]]:
        if self.files is None:
            return None
        return {f.filename for f in self.files if f.status == "modified"}


class PullRequestService(Protocol):
    def get_pull_request(self, owner: str, repo: str, number: int) -> dict:
        ...

    def compare_commits(self, owner: str, repo: str, base: str, head: str) -> CommitComparison:
        ...


class GitHubPullRequestService:
    def __init__(self, client: GitHubClient) -> None:
        self._client = client

    def get_pull_request(self, owner: str, repo: str, number: int) -> dict:
        return self._client.get_pull_request(owner, repo, number)

    def compare_commits(self, owner: str, repo: str, base: str, head: str) -> CommitComparison:
        try:
            data = self._client.compare_commits(owner, repo, base, head)
        except requests.HTTPError as exc:
            status_code = exc.response.status_code if exc.response is not None else 0
            raise CompareFailed(
                f"The GitHub API for comparing the base and head commits returned "
                f"{status_code}, expected 200.",
                status_code=status_code,
            ) from exc
        return CommitComparison.model_validate(data)
