from __future__ import annotations

from pr_title.parser import Note, parse_title


def test_parse_type_scope_subject() -> None:
    parsed = parse_title("feat(api): add endpoint")
    assert parsed.type == "feat"
    assert parsed.scope == "api"
    assert parsed.subject == "add endpoint"
    assert parsed.notes == ()
    assert parsed.is_breaking is False


def test_parse_keeps_raw_scope_untrimmed() -> None:
    parsed = parse_title("fix(api, web ): handle nulls")
    assert parsed.scope == "api, web "


def test_parse_without_scope() -> None:
    parsed = parse_title("docs: fix typo")
    assert parsed.type == "docs"
    assert parsed.scope is None
    assert parsed.subject == "fix typo"


def test_bang_adds_breaking_note() -> None:
    parsed = parse_title("refactor(core)!: drop python 3.8")
    assert parsed.type == "refactor"
    assert parsed.scope == "core"
    assert parsed.notes == (Note(title="BREAKING CHANGE", text="drop python 3.8"),)
    assert parsed.is_breaking is True


def test_bang_without_scope() -> None:
    parsed = parse_title("feat!: new config format")
    assert parsed.scope is None
    assert parsed.is_breaking is True


def test_missing_colon_leaves_fields_absent() -> None:
    parsed = parse_title("Update the readme")
    assert parsed.type is None
    assert parsed.scope is None
    assert parsed.subject is None
    assert parsed.header == "Update the readme"


def test_empty_subject_is_absent() -> None:
    parsed = parse_title("feat(api): ")
    assert parsed.type == "feat"
    assert parsed.scope == "api"
    assert parsed.subject is None


def test_prefix_without_colon_keeps_type_and_scope() -> None:
    parsed = parse_title("fix(web)")
    assert parsed.type == "fix"
    assert parsed.scope == "web"
    assert parsed.subject is None
    assert parsed.notes == ()


def test_missing_type_is_absent() -> None:
    parsed = parse_title("(api): something")
    assert parsed.type is None
    assert parsed.scope == "api"
    assert parsed.subject == "something"


def test_only_first_line_is_parsed() -> None:
    parsed = parse_title("  fix: first line\nsecond line\n")
    assert parsed.header == "fix: first line"
    assert parsed.subject == "first line"


def test_empty_title() -> None:
    parsed = parse_title("")
    assert parsed.header == ""
    assert parsed.type is None
