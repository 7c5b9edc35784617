#!/usr/bin/env python3
"""Validate a PR title locally with the same rules the changelog gate applies.

No network access: only the title is checked, not the changelog.
"""

from __future__ import annotations

import argparse
import json
import sys

from changelog_gate.config import parse_scope_map
from pr_title.validator import check_title
from shared.errors import GateError
from shared.logging import workflow_command


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("title", nargs="?", default="", help="Pull request title to validate")
    parser.add_argument("--scopes", default="", help="JSON object mapping scope name to directory")
    parser.add_argument(
        "--breaking-type",
        action="append",
        default=[],
        dest="breaking_types",
        help="Release type always treated as breaking (repeatable)",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(sys.argv[1:] if argv is None else argv)
    title = args.title.strip()
    if not title:
        print("::warning::No PR title provided; skipping convention check.")
        return 0

    try:
        scope_map = parse_scope_map(args.scopes)
        validated = check_title(
            title,
            allowed_scopes=list(scope_map) if scope_map is not None else None,
            always_breaking_types=args.breaking_types,
        )
    except GateError as exc:
        print(workflow_command("error", str(exc)))
        return 1

    print(f"PR title matches convention: {title}")
    print(json.dumps(validated.model_dump(), indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
