"""Tests for changelog_gate.app — orchestration against a canned pull request service."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import pytest

from changelog_gate import app
from changelog_gate.app import run
from changelog_gate.config import GateConfig
from changelog_gate.service import CommitComparison
from shared.errors import (
    ChangelogNotUpdated,
    CompareFailed,
    ConfigurationError,
    InvalidTitle,
    MissingCommits,
    NotAhead,
)


class FakeService:
    def __init__(
        self,
        title: str,
        status: str = "ahead",
        files: Optional[list[dict[str, str]]] = None,
        compare_error: Optional[Exception] = None,
    ) -> None:
        self.title = title
        self.status = status
        self.files = files
        self.compare_error = compare_error
        self.pull_requests: list[tuple[str, str, int]] = []
        self.comparisons: list[tuple[str, str, str, str]] = []

    def get_pull_request(self, owner: str, repo: str, number: int) -> dict:
        self.pull_requests.append((owner, repo, number))
        return {"number": number, "title": self.title}

    def compare_commits(self, owner: str, repo: str, base: str, head: str) -> CommitComparison:
        self.comparisons.append((owner, repo, base, head))
        if self.compare_error:
            raise self.compare_error
        payload: dict[str, Any] = {"status": self.status}
        if self.files is not None:
            payload["files"] = self.files
        return CommitComparison.model_validate(payload)


def _event(base_sha: Optional[str] = "base-sha", head_sha: Optional[str] = "head-sha") -> dict[str, Any]:
    return {
        "pull_request": {
            "number": 7,
            "title": "stale title",
            "base": {"sha": base_sha, "user": {"login": "acme"}, "repo": {"name": "widgets"}},
            "head": {"sha": head_sha},
        }
    }


def _modified(*paths: str) -> list[dict[str, str]]:
    return [{"filename": p, "status": "modified"} for p in paths]


SCOPED = GateConfig(
    types=("major",),
    scopes={"api": "services/api", "web": "apps/web", "root": "."},
    path="CHANGELOG.md",
    event_name="pull_request",
)


def test_non_breaking_title_skips_changelog() -> None:
    service = FakeService("feat(api): add endpoint")
    result = run(SCOPED, _event(), service)

    assert result.title == "feat(api): add endpoint"
    assert result.validated.breaking is False
    assert result.verdict is None
    assert result.skipped_reason == "not_breaking"
    assert service.pull_requests == [("acme", "widgets", 7)]
    assert service.comparisons == []


def test_current_title_is_used_instead_of_event_snapshot() -> None:
    service = FakeService("fix(web): handle nulls")
    result = run(SCOPED, _event(), service)
    assert result.title == "fix(web): handle nulls"


def test_invalid_title_propagates() -> None:
    with pytest.raises(InvalidTitle):
        run(SCOPED, _event(), FakeService("feat(cli): add x"))


def test_breaking_change_with_all_changelogs() -> None:
    service = FakeService(
        "major(api, web): rework auth",
        files=_modified("services/api/CHANGELOG.md", "apps/web/CHANGELOG.md"),
    )
    result = run(SCOPED, _event(), service)

    assert result.verdict is not None
    assert result.verdict.verified_scopes == ("api", "web")
    assert service.comparisons == [("acme", "widgets", "base-sha", "head-sha")]


def test_breaking_change_missing_scope_changelog() -> None:
    service = FakeService("feat(api,web)!: rework auth", files=_modified("services/api/CHANGELOG.md"))
    with pytest.raises(ChangelogNotUpdated) as exc_info:
        run(SCOPED, _event(), service)
    assert exc_info.value.scope == "web"
    assert exc_info.value.expected_path == "apps/web/CHANGELOG.md"


def test_added_changelog_does_not_count_as_modified() -> None:
    service = FakeService(
        "feat(root)!: drop v1",
        files=[{"filename": "CHANGELOG.md", "status": "added"}],
    )
    with pytest.raises(ChangelogNotUpdated):
        run(SCOPED, _event(), service)


def test_root_check_without_scope_map() -> None:
    cfg = GateConfig(types=(), scopes=None, path="CHANGELOG.md")
    service = FakeService("feat!: new config format", files=_modified("CHANGELOG.md"))
    result = run(cfg, _event(), service)
    assert result.verdict is not None
    assert result.verdict.verified_scopes == ("repo",)


def test_empty_types_without_marker_skips_check() -> None:
    cfg = GateConfig(types=(), scopes=None)
    service = FakeService("refactor: everything", files=[])
    result = run(cfg, _event(), service)
    assert result.skipped_reason == "not_breaking"


def test_missing_pull_request_context() -> None:
    with pytest.raises(ConfigurationError, match="pull_request"):
        run(SCOPED, {"push": {}}, FakeService("feat: x"))


def test_missing_base_coordinates() -> None:
    event = _event()
    del event["pull_request"]["base"]["user"]
    with pytest.raises(ConfigurationError):
        run(SCOPED, event, FakeService("feat: x"))


@pytest.mark.parametrize("base_sha,head_sha", [(None, "head"), ("base", None), ("", "")])
def test_missing_commits(base_sha: Optional[str], head_sha: Optional[str]) -> None:
    with pytest.raises(MissingCommits, match="pull_request event"):
        run(SCOPED, _event(base_sha, head_sha), FakeService("major(api): x"))


def test_head_not_ahead() -> None:
    service = FakeService("major(api): x", status="diverged", files=_modified("services/api/CHANGELOG.md"))
    with pytest.raises(NotAhead) as exc_info:
        run(SCOPED, _event(), service)
    assert exc_info.value.status == "diverged"


def test_compare_failure_propagates() -> None:
    service = FakeService("major(api): x", compare_error=CompareFailed("boom", status_code=500))
    with pytest.raises(CompareFailed):
        run(SCOPED, _event(), service)


def test_no_files_reported_skips_check() -> None:
    result = run(SCOPED, _event(), FakeService("major(api): x", files=None))
    assert result.verdict is None
    assert result.skipped_reason == "no_files_reported"


def test_compare_uses_workflow_repository() -> None:
    cfg = SCOPED.model_copy(update={"repository": "fork-owner/widgets-fork"})
    service = FakeService("major(api): x", files=_modified("services/api/CHANGELOG.md"))
    run(cfg, _event(), service)
    assert service.comparisons[0][:2] == ("fork-owner", "widgets-fork")


# -- main --------------------------------------------------------------------


def _prepare_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path, event: dict[str, Any]) -> Path:
    event_file = tmp_path / "event.json"
    event_file.write_text(json.dumps(event))
    output_file = tmp_path / "output.txt"
    monkeypatch.setenv("GITHUB_TOKEN", "tok")
    monkeypatch.setenv("GITHUB_EVENT_PATH", str(event_file))
    monkeypatch.setenv("GITHUB_EVENT_NAME", "pull_request")
    monkeypatch.setenv("GITHUB_OUTPUT", str(output_file))
    monkeypatch.setenv("INPUT_TYPES", "major")
    monkeypatch.setenv("INPUT_SCOPES", json.dumps({"api": "services/api"}))
    monkeypatch.setenv("INPUT_PATH", "CHANGELOG.md")
    monkeypatch.delenv("GITHUB_REPOSITORY", raising=False)
    return output_file


def test_main_success_writes_outputs(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    output_file = _prepare_env(monkeypatch, tmp_path, _event())
    service = FakeService("major(api): rework", files=_modified("services/api/CHANGELOG.md"))
    monkeypatch.setattr(app, "GitHubPullRequestService", lambda client: service)

    assert app.main() == 0

    out = capsys.readouterr().out
    assert 'Success: verified pull request "major(api): rework"' in out
    outputs = output_file.read_text().splitlines()
    assert "type=major" in outputs
    assert 'scopes=["api"]' in outputs
    assert "breaking=true" in outputs


def test_main_reports_gate_error(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    _prepare_env(monkeypatch, tmp_path, _event())
    service = FakeService("major(api): rework", files=_modified("README.md"))
    monkeypatch.setattr(app, "GitHubPullRequestService", lambda client: service)

    assert app.main() == 1
    out = capsys.readouterr().out
    assert '::error::File "services/api/CHANGELOG.md" not updated for the scope "api"' in out


def test_main_missing_token(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    _prepare_env(monkeypatch, tmp_path, _event())
    for name in ("GITHUB_TOKEN", "GITHUB_APP_IDS_SECRET_ARN", "GITHUB_APP_PRIVATE_KEY_SECRET_ARN"):
        monkeypatch.delenv(name, raising=False)

    assert app.main() == 1
    assert "::error::GITHUB_TOKEN is not set" in capsys.readouterr().out


def test_main_escapes_multiline_errors(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    _prepare_env(monkeypatch, tmp_path, _event())
    monkeypatch.setattr(app, "GitHubPullRequestService", lambda client: FakeService("Add things"))

    assert app.main() == 1
    error_lines = [line for line in capsys.readouterr().out.splitlines() if line.startswith("::error::")]
    assert len(error_lines) == 1
    assert "%0A - feat: A new feature" in error_lines[0]


def test_main_reports_unexpected_errors(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    _prepare_env(monkeypatch, tmp_path, _event())

    class ExplodingService(FakeService):
        def get_pull_request(self, owner: str, repo: str, number: int) -> dict:
            raise RuntimeError("HTTP 404")

    monkeypatch.setattr(app, "GitHubPullRequestService", lambda client: ExplodingService("x"))

    assert app.main() == 1
    assert "::error::HTTP 404" in capsys.readouterr().out
