"""
Identity provider client for B2B session and access-token checks.

Thin wrapper over the provider's HTTP API using project credentials
(HTTP basic auth). Returns the provider's JSON payload untouched; turning
it into an identity context is the job of auth.identity.
"""

import json
import logging

import requests

logger = logging.getLogger(__name__)


class IdentityProviderError(Exception):
    """Identity provider unreachable or returned an unusable response."""


class IdentityRejectedError(Exception):
    """Identity provider refused the credential (4xx)."""

    def __init__(self, status_code: int, message: str):
        self.status_code = status_code
        super().__init__(message)


class IdentityClient:
    """HTTP client for the identity provider's B2B API."""

    def __init__(self, project_id: str, secret: str, base_url: str, timeout: int = 10):
        """
        Initialize with project credentials.

        Args:
            project_id: Provider project identifier (basic auth username)
            secret: Provider project secret (basic auth password)
            base_url: API base URL, e.g. https://api.stytch.com
            timeout: Per-request timeout in seconds

        Raises:
            ValueError: If any credential is empty
        """
        if not project_id:
            raise ValueError("project_id is required")
        if not secret:
            raise ValueError("secret is required")
        if not base_url:
            raise ValueError("base_url is required")

        self.project_id = project_id
        self._secret = secret
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def _post(self, path: str, *, json_body: dict | None = None, form: dict | None = None) -> dict:
        """
        POST to the provider and return the decoded JSON body.

        Raises:
            IdentityRejectedError: Provider answered 4xx
            IdentityProviderError: Connection failure, 5xx, or invalid JSON
        """
        url = f"{self.base_url}{path}"

        try:
            response = requests.post(
                url,
                json=json_body,
                data=form,
                auth=(self.project_id, self._secret),
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"Identity provider connection failed: {e}")
            raise IdentityProviderError(f"Connection failed: {e}")

        try:
            payload = response.json()
        except json.JSONDecodeError:
            logger.error(f"Identity provider returned invalid JSON (status {response.status_code})")
            raise IdentityProviderError("Invalid response from identity provider")

        if 400 <= response.status_code < 500:
            message = payload.get("error_message") or payload.get("error") or "Credential rejected"
            raise IdentityRejectedError(response.status_code, message)

        if response.status_code >= 500:
            logger.error(f"Identity provider error: status {response.status_code}")
            raise IdentityProviderError(f"Identity provider error: status {response.status_code}")

        return payload

    def authenticate_session(self, session_token: str) -> dict:
        """
        Authenticate a member session token.

        Returns:
            Provider response with 'member', 'organization' and 'member_session'
        """
        return self._post(
            "/v1/b2b/sessions/authenticate",
            json_body={"session_token": session_token},
        )

    def introspect_token(self, access_token: str) -> dict:
        """
        Introspect an OAuth access token (RFC 7662).

        Returns:
            Token claims; 'active' is False for expired or revoked tokens
        """
        return self._post(
            f"/v1/public/{self.project_id}/oauth2/introspect",
            form={"token": access_token, "token_type_hint": "access_token"},
        )
