from __future__ import annotations

from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict

from pr_title.parser import ParsedTitle, parse_title
from shared.constants import RELEASE_TYPES
from shared.errors import InvalidTitle

NO_TYPE = "no release type found"
NO_SUBJECT = "no subject found"
UNKNOWN_TYPE = "unknown release type"
NO_SCOPE = "no scope found"
UNKNOWN_SCOPES = "unknown scope(s)"

_CONVENTIONAL_COMMITS_URL = "https://www.conventionalcommits.org/"


class ValidatedTitle(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: str
    scopes: Optional[tuple[str, ...]] = None
    subject: str
    breaking: bool

    def to_header(self) -> str:
        """Render back to a conventional-commit header."""
        scope = f"({','.join(self.scopes)})" if self.scopes else ""
        marker = "!" if self.breaking else ""
        return f"{self.type}{scope}{marker}: {self.subject}"


def _release_types(always_breaking_types: Iterable[str]) -> dict[str, str]:
    types = dict(RELEASE_TYPES)
    for extra in always_breaking_types:
        types.setdefault(extra, "Always treated as a breaking change")
    return types


def _available_types(types: dict[str, str]) -> str:
    bullets = "\n".join(f" - {name}: {description}" for name, description in types.items())
    return f"Available types:\n{bullets}"


def validate_title(
    parsed: ParsedTitle,
    allowed_scopes: Optional[Iterable[str]] = None,
    always_breaking_types: Iterable[str] = (),
) -> ValidatedTitle:
    """Check a parsed title against the release-type vocabulary and scope allowlist.

    Checks run in a fixed order and the first failure wins:
    missing type, missing subject, unknown type, missing scope, unknown scopes.
    Scope checks only apply when ``allowed_scopes`` is given.
    """
    breaking_types = list(always_breaking_types)
    types = _release_types(breaking_types)
    scopes_allowed = list(allowed_scopes) if allowed_scopes is not None else None
    title = parsed.header

    if not parsed.type:
        raise InvalidTitle(
            f'No release type found in pull request title "{title}". Add a prefix to indicate '
            f"what kind of release this pull request corresponds to. For reference, see "
            f"{_CONVENTIONAL_COMMITS_URL}\n\n{_available_types(types)}",
            reason=NO_TYPE,
            title=title,
        )

    if not parsed.subject:
        raise InvalidTitle(
            f'No subject found in pull request title "{title}".',
            reason=NO_SUBJECT,
            title=title,
        )

    if parsed.type not in types:
        raise InvalidTitle(
            f'Unknown release type "{parsed.type}" found in pull request title "{title}". '
            f"\n\n{_available_types(types)}",
            reason=UNKNOWN_TYPE,
            title=title,
        )

    if scopes_allowed is not None and not parsed.scope:
        raise InvalidTitle(
            f'No scope found in pull request title "{title}". '
            f"Use one of the available scopes: {', '.join(scopes_allowed)}.",
            reason=NO_SCOPE,
            title=title,
        )

    scopes: Optional[tuple[str, ...]] = None
    if parsed.scope:
        scopes = tuple(scope.strip() for scope in parsed.scope.split(","))

    if scopes_allowed is not None and scopes:
        unknown = [scope for scope in scopes if scope not in scopes_allowed]
        if unknown:
            noun = "scopes" if len(unknown) > 1 else "scope"
            raise InvalidTitle(
                f'Unknown {noun} "{",".join(unknown)}" found in pull request title "{title}". '
                f"Use one of the available scopes: {', '.join(scopes_allowed)}.",
                reason=UNKNOWN_SCOPES,
                title=title,
                unknown_scopes=unknown,
            )

    return ValidatedTitle(
        type=parsed.type,
        scopes=scopes,
        subject=parsed.subject,
        breaking=parsed.is_breaking or parsed.type in breaking_types,
    )


def check_title(
    title: str,
    allowed_scopes: Optional[Iterable[str]] = None,
    always_breaking_types: Iterable[str] = (),
) -> ValidatedTitle:
    return validate_title(parse_title(title), allowed_scopes, always_breaking_types)
