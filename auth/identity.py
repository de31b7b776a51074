"""Resolve inbound credentials to an identity context via the identity provider."""

import logging
from typing import Any, Iterable

from auth.config import AuthConfig
from auth.exceptions import AuthenticationRequiredError, InvalidTokenError
from auth.types import IdentityContext, Role
from clients.identity_client import IdentityClient, IdentityRejectedError

logger = logging.getLogger(__name__)

# Claim used by the provider for the organization in access tokens
_ORGANIZATION_CLAIM = "https://stytch.com/organization"


class IdentityProvider:
    """
    Builds IdentityContext values from the identity provider's answers.

    Two entry points:
    - authenticate_session: cookie-based browser sessions
    - authenticate_access_token: bearer tokens from OAuth clients (tool surface)

    The notes core trusts the resulting context completely, so every
    structural check on the provider payload happens here.
    """

    def __init__(self, client: IdentityClient, config: AuthConfig):
        self._client = client
        self._config = config

    def map_roles(self, raw_roles: Iterable[Any]) -> frozenset[Role]:
        """Map provider role tags to Role values. Unknown tags are dropped."""
        roles = set()
        for raw in raw_roles:
            tag = raw.get("role_id") if isinstance(raw, dict) else raw
            if not isinstance(tag, str):
                continue
            if tag in self._config.admin_role_tags:
                roles.add(Role.ADMIN)
            elif tag in self._config.member_role_tags:
                roles.add(Role.MEMBER)
            else:
                logger.debug(f"Ignoring unrecognized role tag '{tag}'")
        return frozenset(roles)

    def _build(self, member_id: Any, organization_id: Any, raw_roles: Iterable[Any]) -> IdentityContext:
        if not member_id or not isinstance(member_id, str):
            raise AuthenticationRequiredError("Authentication failed - no member_id found")
        if not organization_id or not isinstance(organization_id, str):
            raise AuthenticationRequiredError("Authentication failed - no organization_id found")

        return IdentityContext(
            member_id=member_id,
            organization_id=organization_id,
            roles=self.map_roles(raw_roles),
        )

    def from_session_response(self, payload: dict) -> IdentityContext:
        """
        Build identity from a session authenticate response.

        Roles come from the session's role list (plain strings) when present,
        otherwise from the member's role assignments.
        """
        member = payload.get("member") or {}
        organization = payload.get("organization") or {}
        session = payload.get("member_session") or {}

        raw_roles = session.get("roles")
        if raw_roles is None:
            raw_roles = member.get("roles") or []

        return self._build(member.get("member_id"), organization.get("organization_id"), raw_roles)

    def from_token_claims(self, claims: dict) -> IdentityContext:
        """
        Build identity from introspected access-token claims.

        The subject carries the member id; the organization is nested.
        """
        if claims.get("active") is False:
            raise InvalidTokenError("Access token is not active")

        organization = claims.get("organization") or claims.get(_ORGANIZATION_CLAIM) or {}
        if isinstance(organization, dict):
            organization_id = organization.get("organization_id")
        else:
            organization_id = None

        raw_roles = claims.get("roles")
        if not isinstance(raw_roles, list):
            raw_roles = []

        return self._build(claims.get("sub") or claims.get("subject"), organization_id, raw_roles)

    def authenticate_session(self, session_token: str) -> IdentityContext:
        """
        Resolve a session token.

        Raises:
            InvalidTokenError: Provider rejected the session
            AuthenticationRequiredError: Session lacks member or organization
            IdentityProviderError: Provider unreachable
        """
        try:
            payload = self._client.authenticate_session(session_token)
        except IdentityRejectedError as e:
            raise InvalidTokenError(f"Session rejected: {e}")
        return self.from_session_response(payload)

    def authenticate_access_token(self, access_token: str) -> IdentityContext:
        """
        Resolve a bearer access token.

        Raises:
            InvalidTokenError: Token rejected or inactive
            AuthenticationRequiredError: Claims lack member or organization
            IdentityProviderError: Provider unreachable
        """
        try:
            claims = self._client.introspect_token(access_token)
        except IdentityRejectedError as e:
            raise InvalidTokenError(f"Access token rejected: {e}")
        return self.from_token_claims(claims)
