"""Tests for utils/identity_context.py - identity propagation via contextvars."""

import pytest

from auth.exceptions import AuthenticationRequiredError
from tests.identities import ALICE, BOB
from utils.identity_context import (
    clear_current_identity,
    get_current_identity,
    get_current_identity_or_none,
    identity_context,
    set_current_identity,
)


class TestGetCurrentIdentity:

    def test_raises_without_set(self):
        """Anonymous access raises rather than defaulting to someone."""
        with pytest.raises(AuthenticationRequiredError, match="no session info"):
            get_current_identity()

    def test_or_none_without_set(self):
        assert get_current_identity_or_none() is None


class TestSetAndClear:

    def test_set_then_get(self):
        set_current_identity(ALICE)
        assert get_current_identity() == ALICE
        clear_current_identity()

    def test_clear_then_get_raises(self):
        set_current_identity(ALICE)
        clear_current_identity()
        with pytest.raises(AuthenticationRequiredError):
            get_current_identity()


class TestIdentityContextManager:

    def test_sets_and_clears(self):
        with identity_context(ALICE) as identity:
            assert identity is ALICE
            assert get_current_identity() == ALICE

        assert get_current_identity_or_none() is None

    def test_restores_previous(self):
        """Nested context managers restore the outer identity."""
        with identity_context(ALICE):
            with identity_context(BOB):
                assert get_current_identity() == BOB
            assert get_current_identity() == ALICE

    def test_clears_on_exception(self):
        with pytest.raises(ValueError):
            with identity_context(ALICE):
                raise ValueError("boom")

        assert get_current_identity_or_none() is None
