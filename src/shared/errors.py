"""Failures raised by the pull request gate.

Every error is terminal: nothing in the gate retries or recovers. The
entrypoint turns the first one raised into the pipeline's failure signal,
using ``str(error)`` as the user-visible text.
"""

from __future__ import annotations

from typing import Optional


class GateError(Exception):
    """Base class for every failure the gate reports to the pipeline."""


class ConfigurationError(GateError):
    """Missing credential, malformed input or missing pull request context."""


class InvalidTitle(GateError):
    def __init__(
        self,
        message: str,
        reason: str,
        title: str,
        unknown_scopes: Optional[list[str]] = None,
    ) -> None:
        super().__init__(message)
        self.reason = reason
        self.title = title
        self.unknown_scopes = unknown_scopes or []


class MissingCommits(GateError):
    """Base or head SHA absent from the triggering event."""


class CompareFailed(GateError):
    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


class NotAhead(GateError):
    def __init__(self, message: str, status: str) -> None:
        super().__init__(message)
        self.status = status


class ChangelogNotUpdated(GateError):
    def __init__(self, message: str, scope: str, expected_path: str) -> None:
        super().__init__(message)
        self.scope = scope
        self.expected_path = expected_path
