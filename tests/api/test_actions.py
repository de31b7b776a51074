"""Tests for POST /api/actions unified read and mutation endpoint."""

from uuid import uuid4

import pytest


def _action(client, action, data, domain="note"):
    return client.post("/api/actions", json={"domain": domain, "action": action, "data": data})


# =============================================================================
# AUTHENTICATION & VALIDATION
# =============================================================================


class TestActionsAuthentication:

    def test_unauthenticated_returns_401(self, unauthed_client):
        response = _action(unauthed_client, "create", {"title": "x"})

        assert response.status_code == 401


class TestActionsValidation:

    def test_unknown_domain_returns_400(self, client):
        response = _action(client, "create", {}, domain="customer")

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_REQUEST"
        assert "Unknown domain 'customer'" in response.json()["error"]["message"]

    def test_disallowed_action_returns_400(self, client):
        response = _action(client, "archive", {"id": str(uuid4())})

        assert response.status_code == 400
        assert "Allowed: by_tag, create, delete, get, list, search, update" in response.json()["error"]["message"]

    def test_missing_body_fields_returns_400(self, client):
        response = client.post("/api/actions", json={"domain": "note"})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_update_without_id_returns_400(self, client):
        response = _action(client, "update", {"title": "x"})

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "'id' is required"

    def test_create_empty_note_returns_400(self, client):
        response = _action(client, "create", {})

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"
        assert response.json()["error"]["message"] == "Title or content is required"


# =============================================================================
# NOTE ACTIONS
# =============================================================================


class TestNoteActions:

    def test_create(self, client):
        response = _action(client, "create", {"title": "From tool", "visibility": "shared"})

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["title"] == "From tool"
        assert data["visibility"] == "shared"
        assert data["owner_member_id"] == "member-alice"

    def test_update_accepts_note_id_alias(self, client):
        note = _action(client, "create", {"title": "Before"}).json()["data"]

        response = _action(client, "update", {"noteId": note["id"], "is_favorite": True})

        assert response.status_code == 200
        assert response.json()["data"]["is_favorite"] is True
        assert response.json()["data"]["title"] == "Before"

    def test_update_enforces_visibility_rules(self, client, bob_client):
        note = _action(client, "create", {"title": "Shared", "visibility": "shared"}).json()["data"]

        response = _action(bob_client, "update", {"id": note["id"], "visibility": "private"})

        assert response.status_code == 403

    def test_delete(self, client):
        note = _action(client, "create", {"title": "Doomed"}).json()["data"]

        response = _action(client, "delete", {"id": note["id"]})

        assert response.status_code == 200
        assert response.json()["data"] == {"deleted": True, "id": note["id"]}

    def test_delete_other_org_note_is_404(self, client, other_org_client):
        note = _action(client, "create", {"title": "Shared", "visibility": "shared"}).json()["data"]

        response = _action(other_org_client, "delete", {"id": note["id"]})

        assert response.status_code == 404


# =============================================================================
# READ ACTIONS
# =============================================================================


class TestNoteReadActions:

    @pytest.fixture
    def notes(self, client, other_org_client):
        """Alice's private and shared notes plus a shared note in another org."""
        return {
            "private": _action(client, "create", {
                "title": "Roadmap draft", "tags": ["plan"],
            }).json()["data"],
            "shared": _action(client, "create", {
                "title": "Team roadmap", "tags": ["plan"], "visibility": "shared",
            }).json()["data"],
            "other_org": _action(other_org_client, "create", {
                "title": "Roadmap elsewhere", "tags": ["plan"], "visibility": "shared",
            }).json()["data"],
        }

    def test_list(self, client, bob_client, notes):
        alice_ids = {n["id"] for n in _action(client, "list", {}).json()["data"]}
        bob_ids = {n["id"] for n in _action(bob_client, "list", {}).json()["data"]}

        assert alice_ids == {notes["private"]["id"], notes["shared"]["id"]}
        assert bob_ids == {notes["shared"]["id"]}

    def test_get(self, client, notes):
        response = _action(client, "get", {"noteId": notes["private"]["id"]})

        assert response.status_code == 200
        assert response.json()["data"]["title"] == "Roadmap draft"

    def test_get_other_members_private_note_is_404(self, bob_client, notes):
        response = _action(bob_client, "get", {"id": notes["private"]["id"]})

        assert response.status_code == 404
        assert response.json()["error"]["message"] == "Note not found or access denied"

    def test_by_tag(self, client, bob_client, notes):
        alice_ids = {n["id"] for n in _action(client, "by_tag", {"tag": "plan"}).json()["data"]}
        bob_ids = [n["id"] for n in _action(bob_client, "by_tag", {"tag": "plan"}).json()["data"]]

        assert alice_ids == {notes["private"]["id"], notes["shared"]["id"]}
        assert bob_ids == [notes["shared"]["id"]]

    def test_search(self, client, bob_client, notes):
        alice_ids = {n["id"] for n in _action(client, "search", {"searchTerm": "ROADMAP"}).json()["data"]}
        bob_ids = [n["id"] for n in _action(bob_client, "search", {"term": "roadmap"}).json()["data"]]

        assert alice_ids == {notes["private"]["id"], notes["shared"]["id"]}
        assert bob_ids == [notes["shared"]["id"]]

    def test_search_shared_only(self, client, notes):
        response = _action(client, "search", {"term": "roadmap", "includePrivate": False})

        assert [n["id"] for n in response.json()["data"]] == [notes["shared"]["id"]]

    def test_search_without_term_returns_400(self, client):
        response = _action(client, "search", {})

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "'term' is required"

    def test_by_tag_without_tag_returns_400(self, client):
        response = _action(client, "by_tag", {"tag": ""})

        assert response.status_code == 400
