"""Typed exceptions for auth failures."""


class AuthError(Exception):
    """Base class for authentication/authorization errors."""


class AuthenticationRequiredError(AuthError):
    """
    No usable identity for this request.

    Raised when no credential was presented, or when the identity provider's
    answer lacks a member or organization.
    """


class InvalidTokenError(AuthError):
    """
    Session token or access token is invalid, expired, or revoked.

    The identity provider rejected the credential.
    """
