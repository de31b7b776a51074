"""Tests for auth/types.py - Pydantic models for auth domain."""

import pytest
from pydantic import ValidationError

from auth.types import IdentityContext, Role


class TestIdentityContextValidation:
    """Tests that IdentityContext rejects incomplete identities."""

    def test_rejects_empty_member_id(self):
        with pytest.raises(ValidationError):
            IdentityContext(member_id="", organization_id="org-1")

    def test_rejects_empty_organization_id(self):
        with pytest.raises(ValidationError):
            IdentityContext(member_id="member-1", organization_id="")

    def test_rejects_missing_organization_id(self):
        with pytest.raises(ValidationError):
            IdentityContext(member_id="member-1")

    def test_rejects_unknown_role(self):
        with pytest.raises(ValidationError):
            IdentityContext(member_id="member-1", organization_id="org-1", roles=frozenset({"owner"}))


class TestIdentityContextBehavior:

    def test_roles_default_empty(self):
        identity = IdentityContext(member_id="member-1", organization_id="org-1")
        assert identity.roles == frozenset()
        assert identity.is_admin is False

    def test_role_values_coerced(self):
        identity = IdentityContext(member_id="m", organization_id="o", roles=["admin", "member"])
        assert identity.roles == frozenset({Role.ADMIN, Role.MEMBER})
        assert identity.is_admin is True

    def test_immutable(self):
        identity = IdentityContext(member_id="m", organization_id="o")
        with pytest.raises(ValidationError):
            identity.organization_id = "other"
