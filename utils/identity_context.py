"""Propagate the caller's identity context through the call stack using contextvars."""

from contextlib import contextmanager
from contextvars import ContextVar

from auth.types import IdentityContext
from auth.exceptions import AuthenticationRequiredError

_current_identity: ContextVar[IdentityContext | None] = ContextVar("current_identity", default=None)


def get_current_identity() -> IdentityContext:
    """
    Get current identity context.

    Raises AuthenticationRequiredError if no identity context is set.
    Code paths that act on behalf of a member must never run anonymously.
    """
    identity = _current_identity.get()
    if identity is None:
        raise AuthenticationRequiredError(
            "Authentication required - no session info available"
        )
    return identity


def get_current_identity_or_none() -> IdentityContext | None:
    """Get current identity context without raising."""
    return _current_identity.get()


def set_current_identity(identity: IdentityContext) -> None:
    """
    Set current identity context.

    Called by auth middleware after the identity provider resolves the request.
    """
    _current_identity.set(identity)


def clear_current_identity() -> None:
    """
    Clear identity context.

    Called by auth middleware after request completes.
    Must be called in finally block to prevent context leakage.
    """
    _current_identity.set(None)


@contextmanager
def identity_context(identity: IdentityContext):
    """
    Context manager for temporarily acting as a member.

    Useful for:
    - Tests
    - Scripts and background jobs acting on behalf of a member

    Example:
        with identity_context(IdentityContext(member_id="m1", organization_id="o1")):
            notes = note_service.list()
    """
    previous = _current_identity.get()
    set_current_identity(identity)
    try:
        yield identity
    finally:
        if previous is None:
            clear_current_identity()
        else:
            set_current_identity(previous)
