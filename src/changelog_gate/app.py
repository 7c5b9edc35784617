"""Pull request changelog gate.

Run as a CI step on ``pull_request`` / ``pull_request_target`` events:

1. fetch the current pull request title (the event snapshot can be stale),
2. validate it as a conventional-commit header,
3. for breaking changes, compare base and head and require the changelog
   file to be modified in every mapped scope (or at the repository root).

Inputs come from ``INPUT_TYPES``, ``INPUT_SCOPES`` and ``INPUT_PATH``; see
``changelog_gate.config``. Exit status is non-zero on any failure.
"""

from __future__ import annotations

import json
import os
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict

from changelog_gate.config import GateConfig, load_config, load_event, resolve_token_provider
from changelog_gate.policy import ChangelogVerdict, verify_changelog
from changelog_gate.service import GitHubPullRequestService, PullRequestService
from pr_title.validator import ValidatedTitle, check_title
from shared.errors import ConfigurationError, GateError, MissingCommits, NotAhead
from shared.github_client import GitHubClient
from shared.logging import get_logger, workflow_command

logger = get_logger("changelog_gate")


class GateResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    validated: ValidatedTitle
    verdict: Optional[ChangelogVerdict] = None
    skipped_reason: Optional[str] = None


def _pull_request_context(event: dict[str, Any]) -> dict[str, Any]:
    pull_request = event.get("pull_request")
    if not pull_request:
        raise ConfigurationError(
            "This action can only be invoked in `pull_request_target` or `pull_request` events. "
            "Otherwise the pull request can't be inferred."
        )
    return pull_request


def _base_coordinates(pull_request: dict[str, Any]) -> tuple[str, str, int]:
    base = pull_request.get("base") or {}
    owner = (base.get("user") or {}).get("login")
    repo = (base.get("repo") or {}).get("name")
    number = pull_request.get("number")
    if not owner or not repo or number is None:
        raise ConfigurationError(
            "The pull request in the event payload is missing base.user.login, base.repo.name or number."
        )
    return owner, repo, int(number)


def _compare_repository(config: GateConfig, owner: str, repo: str) -> tuple[str, str]:
    if "/" in config.repository:
        compare_owner, compare_repo = config.repository.split("/", maxsplit=1)
        return compare_owner, compare_repo
    return owner, repo


def run(config: GateConfig, event: dict[str, Any], service: PullRequestService) -> GateResult:
    contextual = _pull_request_context(event)
    owner, repo, number = _base_coordinates(contextual)
    local_logger = logger.bind(
        event_name=config.event_name or None,
        repo=f"{owner}/{repo}",
        pr_number=number,
    )
    local_logger.info(
        "action_inputs",
        extra={"extra": {"types": list(config.types), "scopes": config.scopes, "path": config.path}},
    )

    pull_request = service.get_pull_request(owner, repo, number)
    title = pull_request.get("title") or ""

    validated = check_title(
        title,
        allowed_scopes=list(config.scopes) if config.scopes is not None else None,
        always_breaking_types=config.types,
    )
    local_logger.info(
        "pr_classified",
        extra={
            "extra": {
                "type": validated.type,
                "scopes": list(validated.scopes) if validated.scopes is not None else None,
                "breaking": validated.breaking,
            }
        },
    )

    if not validated.breaking:
        local_logger.info("changelog_check_skipped", extra={"extra": {"reason": "not_breaking"}})
        return GateResult(title=title, validated=validated, skipped_reason="not_breaking")

    event_label = config.event_name or "pull request"
    base_sha = (contextual.get("base") or {}).get("sha")
    head_sha = (contextual.get("head") or {}).get("sha")
    local_logger.info("commits_resolved", extra={"extra": {"base": base_sha, "head": head_sha}})
    if not base_sha or not head_sha:
        raise MissingCommits(
            f"The base and head commits are missing from the payload for this {event_label} event."
        )

    compare_owner, compare_repo = _compare_repository(config, owner, repo)
    comparison = service.compare_commits(compare_owner, compare_repo, base_sha, head_sha)
    if comparison.status != "ahead":
        raise NotAhead(
            f"The head commit for this {event_label} event is not ahead of the base commit "
            f"(status: {comparison.status}).",
            status=comparison.status,
        )

    modified_files = comparison.modified_files()
    if modified_files is None:
        local_logger.warning("changelog_check_skipped", extra={"extra": {"reason": "no_files_reported"}})
        return GateResult(title=title, validated=validated, skipped_reason="no_files_reported")

    verdict = verify_changelog(validated, config.scopes, config.path, modified_files)
    local_logger.info(
        "changelog_verified",
        extra={
            "extra": {
                "title": title,
                "path": config.path,
                "verified_scopes": list(verdict.verified_scopes),
            }
        },
    )
    return GateResult(title=title, validated=validated, verdict=verdict)


def main() -> int:
    try:
        config = load_config()
        token_provider = resolve_token_provider(api_base=config.api_base)
        event = load_event(config.event_path)
        service = GitHubPullRequestService(
            GitHubClient(token_provider=token_provider, api_base=config.api_base)
        )
        result = run(config, event, service)
    except GateError as exc:
        logger.error("gate_failed", extra={"extra": {"error": type(exc).__name__}})
        print(workflow_command("error", str(exc)))
        return 1
    except Exception as exc:  # noqa: BLE001
        logger.exception("gate_crashed")
        print(workflow_command("error", str(exc) or type(exc).__name__))
        return 1

    if result.verdict is not None:
        scopes = ", ".join(result.verdict.verified_scopes) or "none mapped"
        print(f'Success: verified pull request "{result.title}". Found "{config.path}" updated in: {scopes}')
    else:
        print(f'Success: verified pull request "{result.title}".')
    _write_step_outputs(result)
    return 0


def _write_step_outputs(result: GateResult) -> None:
    output_path = os.getenv("GITHUB_OUTPUT")
    if not output_path:
        return
    outputs = {
        "type": result.validated.type,
        "scopes": json.dumps(list(result.validated.scopes or ())),
        "breaking": str(result.validated.breaking).lower(),
    }
    with open(output_path, "a", encoding="utf-8") as handle:
        for key, value in outputs.items():
            handle.write(f"{key}={value}\n")


if __name__ == "__main__":
    raise SystemExit(main())
