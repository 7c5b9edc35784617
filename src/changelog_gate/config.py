"""Gate inputs, read from the GitHub Actions ``INPUT_*`` environment convention."""

from __future__ import annotations

import json
import os
from typing import Callable, Mapping, Optional

from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError

from changelog_gate.policy import ScopeMap
from shared.constants import DEFAULT_API_BASE, DEFAULT_CHANGELOG_PATH
from shared.errors import ConfigurationError
from shared.github_app_auth import GitHubAppAuth

_SCOPE_MAP_ADAPTER = TypeAdapter(dict[str, str])


class GateConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    types: tuple[str, ...] = ()
    scopes: Optional[ScopeMap] = None
    path: str = DEFAULT_CHANGELOG_PATH
    api_base: str = DEFAULT_API_BASE
    event_name: str = ""
    event_path: str = ""
    repository: str = ""


def _get_input(environ: Mapping[str, str], name: str) -> str:
    key = f"INPUT_{name.replace(' ', '_').upper()}"
    return environ.get(key, "").strip()


def get_multiline_input(environ: Mapping[str, str], name: str) -> list[str]:
    raw = _get_input(environ, name)
    return [line.strip() for line in raw.splitlines() if line.strip()]


def parse_scope_map(raw: str) -> Optional[ScopeMap]:
    """Parse the ``scopes`` input: a JSON object of scope name to directory.

    Blank input means scopes are unconstrained and returns ``None``.
    """
    if not raw.strip():
        return None
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Input scopes is not valid JSON: {exc}") from exc
    try:
        scope_map = _SCOPE_MAP_ADAPTER.validate_python(data, strict=True)
    except ValidationError as exc:
        raise ConfigurationError(
            f"Input scopes must be a JSON object mapping scope names to directories: {exc}"
        ) from exc
    if not scope_map:
        raise ConfigurationError("Input scopes must declare at least one scope")
    return {name: directory.strip().rstrip("/") for name, directory in scope_map.items()}


def load_config(environ: Optional[Mapping[str, str]] = None) -> GateConfig:
    env = os.environ if environ is None else environ
    return GateConfig(
        types=tuple(get_multiline_input(env, "types")),
        scopes=parse_scope_map(_get_input(env, "scopes")),
        path=_get_input(env, "path") or DEFAULT_CHANGELOG_PATH,
        api_base=env.get("GITHUB_API_URL") or DEFAULT_API_BASE,
        event_name=env.get("GITHUB_EVENT_NAME", ""),
        event_path=env.get("GITHUB_EVENT_PATH", ""),
        repository=env.get("GITHUB_REPOSITORY", ""),
    )


def resolve_token_provider(
    environ: Optional[Mapping[str, str]] = None,
    api_base: str = DEFAULT_API_BASE,
) -> Callable[[], str]:
    """Pick the API credential: ``GITHUB_TOKEN`` first, then a GitHub App."""
    env = os.environ if environ is None else environ
    token = env.get("GITHUB_TOKEN", "").strip()
    if token:
        return lambda: token

    ids_arn = env.get("GITHUB_APP_IDS_SECRET_ARN", "").strip()
    key_arn = env.get("GITHUB_APP_PRIVATE_KEY_SECRET_ARN", "").strip()
    if ids_arn and key_arn:
        auth = GitHubAppAuth(
            app_ids_secret_arn=ids_arn,
            private_key_secret_arn=key_arn,
            api_base=api_base,
        )
        return auth.get_installation_token

    raise ConfigurationError(
        "GITHUB_TOKEN is not set. Pass it to the step environment, or configure "
        "GITHUB_APP_IDS_SECRET_ARN and GITHUB_APP_PRIVATE_KEY_SECRET_ARN."
    )


def load_event(event_path: str) -> dict:
    if not event_path:
        raise ConfigurationError("GITHUB_EVENT_PATH is not set; the triggering event is unavailable.")
    try:
        with open(event_path, encoding="utf-8") as handle:
            payload = json.load(handle)
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigurationError(f"Could not read event payload {event_path}: {exc}") from exc
    if not isinstance(payload, dict):
        raise ConfigurationError(f"Event payload {event_path} is not a JSON object")
    return payload
