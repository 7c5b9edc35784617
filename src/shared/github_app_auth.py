import json
import time
from typing import Optional, Tuple

import boto3
import jwt
import requests
from botocore.client import BaseClient

from shared.constants import DEFAULT_API_BASE
from shared.errors import ConfigurationError


class GitHubAppAuth:
    """Mint GitHub App installation tokens from credentials kept in Secrets Manager.

    Used when the gate runs outside GitHub Actions and no ``GITHUB_TOKEN``
    is available.
    """

    def __init__(
        self,
        app_ids_secret_arn: str,
        private_key_secret_arn: str,
        api_base: str = DEFAULT_API_BASE,
        secrets_client: Optional[BaseClient] = None,
        http_session: Optional[requests.Session] = None,
    ) -> None:
        self._app_ids_secret_arn = app_ids_secret_arn
        self._private_key_secret_arn = private_key_secret_arn
        self._api_base = api_base.rstrip("/")
        self._secrets = secrets_client or boto3.client("secretsmanager")
        self._session = http_session or requests.Session()
        self._cached_token: Optional[str] = None

    def _read_secret_string(self, secret_arn: str) -> str:
        response = self._secrets.get_secret_value(SecretId=secret_arn)
        secret_string = response.get("SecretString")
        if not secret_string:
            raise ConfigurationError(f"Secret {secret_arn} has no SecretString")
        return secret_string

    def _load_app_ids(self) -> Tuple[str, str]:
        payload = json.loads(self._read_secret_string(self._app_ids_secret_arn))
        try:
            return str(payload["app_id"]), str(payload["installation_id"])
        except KeyError as exc:
            raise ConfigurationError(
                f"Secret {self._app_ids_secret_arn} is missing {exc.args[0]}"
            ) from exc

    def create_app_jwt(self, app_id: str) -> str:
        now = int(time.time())
        payload = {
            "iat": now - 60,
            "exp": now + 540,
            "iss": app_id,
        }
        private_key = self._read_secret_string(self._private_key_secret_arn)
        token = jwt.encode(payload, private_key, algorithm="RS256")
        return token if isinstance(token, str) else token.decode("utf-8")

    def get_installation_token(self) -> str:
        if self._cached_token:
            return self._cached_token

        app_id, installation_id = self._load_app_ids()
        jwt_token = self.create_app_jwt(app_id)
        response = self._session.post(
            f"{self._api_base}/app/installations/{installation_id}/access_tokens",
            headers={
                "Authorization": f"Bearer {jwt_token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
            },
            timeout=15,
        )
        response.raise_for_status()
        token = response.json().get("token")
        if not token:
            raise ConfigurationError("GitHub installation token missing from response")
        self._cached_token = token
        return token
