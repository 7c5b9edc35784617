"""Changelog enforcement for breaking pull requests.

A breaking change must touch the changelog in every declared scope that has
a directory mapping, or at the repository root when no scopes apply. Scopes
without a mapping are not the changelog's concern and are skipped.
"""

from __future__ import annotations

from typing import Collection, Optional

from pydantic import BaseModel, ConfigDict

from pr_title.validator import ValidatedTitle
from shared.constants import ROOT_SCOPE
from shared.errors import ChangelogNotUpdated

ScopeMap = dict[str, str]

_ROOT_DIRS = {"", "."}


class ChangelogVerdict(BaseModel):
    model_config = ConfigDict(frozen=True)

    verified_scopes: tuple[str, ...]
    """Scopes whose changelog was found, or ``(ROOT_SCOPE,)`` for the root check."""
    checked_paths: tuple[str, ...]


def expected_changelog_path(scope_dir: str, file_name: str) -> str:
    if scope_dir in _ROOT_DIRS:
        return file_name
    return f"{scope_dir}/{file_name}"


def _require_modified(path: str, scope: str, modified_files: Collection[str]) -> None:
    if path not in modified_files:
        raise ChangelogNotUpdated(
            f'File "{path}" not updated for the scope "{scope}"',
            scope=scope,
            expected_path=path,
        )


def verify_changelog(
    validated: ValidatedTitle,
    scope_map: Optional[ScopeMap],
    file_name: str,
    modified_files: Collection[str],
) -> ChangelogVerdict:
    """Require ``file_name`` to be modified wherever ``validated`` demands it.

    Callers only invoke this for breaking titles. Fails fast with
    ``ChangelogNotUpdated`` on the first scope whose changelog is missing.
    """
    if scope_map is not None and validated.scopes is not None:
        verifiable = [scope for scope in validated.scopes if scope in scope_map]
        paths = []
        for scope in verifiable:
            path = expected_changelog_path(scope_map[scope], file_name)
            _require_modified(path, scope, modified_files)
            paths.append(path)
        return ChangelogVerdict(verified_scopes=tuple(verifiable), checked_paths=tuple(paths))

    _require_modified(file_name, ROOT_SCOPE, modified_files)
    return ChangelogVerdict(verified_scopes=(ROOT_SCOPE,), checked_paths=(file_name,))
