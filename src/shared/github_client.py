from __future__ import annotations

from typing import Callable, Optional

import requests

from shared.constants import DEFAULT_API_BASE


class GitHubClient:
    def __init__(
        self,
        token_provider: Callable[[], str],
        api_base: str = DEFAULT_API_BASE,
        session: Optional[requests.Session] = None,
    ) -> None:
        self._token_provider = token_provider
        self._api_base = api_base.rstrip("/")
        self._session = session or requests.Session()

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        url = f"{self._api_base}{path}"
        headers = dict(kwargs.pop("headers", {}))
        headers.update(
            {
                "Authorization": f"token {self._token_provider()}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
            }
        )
        response = self._session.request(method, url, headers=headers, timeout=20, **kwargs)
        response.raise_for_status()
        return response

    def get_pull_request(self, owner: str, repo: str, pull_number: int) -> dict:
        response = self._request("GET", f"/repos/{owner}/{repo}/pulls/{pull_number}")
        return response.json()

    def compare_commits(
        self, owner: str, repo: str, base: str, head: str,
    ) -> dict:
        """Compare two commits. Returns ahead/behind status, commits & files between them."""
        response = self._request(
            "GET", f"/repos/{owner}/{repo}/compare/{base}...{head}",
        )
        return response.json()
