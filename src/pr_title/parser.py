"""Conventional-commit header parsing for pull request titles.

Only the header line is read. ``type(scope)!: subject`` is split into its
parts; anything the grammar does not produce is left as ``None`` instead of
raising, so callers decide which absences are errors.
"""

from __future__ import annotations

import re
from typing import Optional

from pydantic import BaseModel, ConfigDict

from shared.constants import BREAKING_CHANGE_KEYWORDS

_HEADER_RE = re.compile(r"^(\w*)(?:\((.*)\))?!?: (.*)$")
_BREAKING_HEADER_RE = re.compile(r"^(\w*)(?:\((.*)\))?!: (.*)$")
# A bare "type(scope):" prefix with nothing after it
_PREFIX_ONLY_RE = re.compile(r"^(\w+)(?:\((.*)\))?!?:?$")


class Note(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str
    text: str


class ParsedTitle(BaseModel):
    model_config = ConfigDict(frozen=True)

    header: str
    type: Optional[str] = None
    scope: Optional[str] = None
    """Raw parenthesised content, commas and whitespace untouched."""
    subject: Optional[str] = None
    notes: tuple[Note, ...] = ()

    @property
    def is_breaking(self) -> bool:
        return any(note.title in BREAKING_CHANGE_KEYWORDS for note in self.notes)


def _first_line(title: str) -> str:
    lines = title.strip().splitlines()
    return lines[0] if lines else ""


def parse_title(title: str) -> ParsedTitle:
    header = _first_line(title)
    match = _HEADER_RE.match(header)
    if not match:
        prefix = _PREFIX_ONLY_RE.match(header)
        if prefix:
            return ParsedTitle(header=header, type=prefix.group(1), scope=prefix.group(2) or None)
        return ParsedTitle(header=header)

    type_, scope, subject = match.groups()
    notes: list[Note] = []
    if _BREAKING_HEADER_RE.match(header):
        notes.append(Note(title="BREAKING CHANGE", text=subject))

    return ParsedTitle(
        header=header,
        type=type_ or None,
        scope=scope or None,
        subject=subject or None,
        notes=tuple(notes),
    )
