"""API test fixtures - app wired to the in-memory note store and a stub identity provider."""

from unittest.mock import Mock

import pytest
from starlette.testclient import TestClient

from auth.exceptions import InvalidTokenError
from auth.identity import IdentityProvider
from main import create_app
from tests.identities import ALICE, BOB, CAROL_ADMIN, DAVE_OTHER_ORG


# =============================================================================
# AUTH FIXTURES
# =============================================================================

SESSION_TOKENS = {
    "alice-session": ALICE,
    "bob-session": BOB,
    "carol-session": CAROL_ADMIN,
    "dave-session": DAVE_OTHER_ORG,
}


def _resolve(token):
    identity = SESSION_TOKENS.get(token)
    if identity is None:
        raise InvalidTokenError("Unknown session")
    return identity


@pytest.fixture
def mock_identity_provider():
    mock = Mock(spec=IdentityProvider)
    mock.authenticate_session.side_effect = _resolve
    mock.authenticate_access_token.side_effect = _resolve
    return mock


# =============================================================================
# APP & CLIENT FIXTURES
# =============================================================================


@pytest.fixture
def list_cache():
    """No list cache by default; cache tests override this fixture."""
    return None


@pytest.fixture
def app(note_service, mock_identity_provider, list_cache):
    """Full app: request IDs, auth middleware, error handlers, notes/actions/identity routes."""
    return create_app(
        note_service=note_service,
        identity_provider=mock_identity_provider,
        cache=list_cache,
    )


def _client(app, token=None):
    c = TestClient(app, raise_server_exceptions=False)
    if token:
        c.cookies.set("stytch_session", token)
    return c


@pytest.fixture
def client(app):
    """Client authenticated as Alice."""
    return _client(app, "alice-session")


@pytest.fixture
def bob_client(app):
    return _client(app, "bob-session")


@pytest.fixture
def admin_client(app):
    return _client(app, "carol-session")


@pytest.fixture
def other_org_client(app):
    return _client(app, "dave-session")


@pytest.fixture
def unauthed_client(app):
    """Unauthenticated test client (no session cookie)."""
    return _client(app)
