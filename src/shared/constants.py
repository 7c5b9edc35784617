"""Shared constants used by the title check and the changelog gate."""

from __future__ import annotations

DEFAULT_API_BASE = "https://api.github.com"

DEFAULT_CHANGELOG_PATH = "CHANGELOG.md"

# Scope name reported when the changelog is required at the repository root
ROOT_SCOPE = "repo"

# Release types accepted in pull request titles, in display order.
RELEASE_TYPES: dict[str, str] = {
    "feat": "A new feature",
    "fix": "A bug fix",
    "docs": "Documentation only changes",
    "style": "Changes that do not affect the meaning of the code (white-space, formatting, missing semi-colons, etc)",
    "refactor": "A code change that neither fixes a bug nor adds a feature",
    "perf": "A code change that improves performance",
    "test": "Adding missing tests or correcting existing tests",
    "build": "Changes that affect the build system or external dependencies (example scopes: gulp, broccoli, npm)",
    "ci": "Changes to our CI configuration files and scripts (example scopes: Travis, Circle, BrowserStack, SauceLabs)",
    "chore": "Other changes that don't modify src or test files",
    "revert": "Reverts a previous commit",
}

BREAKING_CHANGE_KEYWORDS = ("BREAKING CHANGE", "BREAKING-CHANGE")
