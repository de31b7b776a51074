"""Shared test fixtures for the notes test suite."""

import copy
from pathlib import Path
from typing import Any, Dict, List
from uuid import UUID

import pytest
from dotenv import load_dotenv

# Load .env file BEFORE any other imports that might use env vars
load_dotenv(Path(__file__).parent.parent / ".env", override=True)

import clients.vault_client as vault_module
vault_module._vault_client_instance = None
vault_module._secret_cache.clear()

from tests.identities import ALICE, BOB
from utils.identity_context import identity_context, clear_current_identity


# =============================================================================
# IN-MEMORY NOTE STORE
# =============================================================================


class InMemoryNoteStore:
    """
    Test double for NoteStore.

    Implements the same statements over a dict, with the same predicates, so
    service rules can be exercised without a database.
    """

    _PATCHABLE = ("title", "content", "visibility", "is_favorite", "tags")

    def __init__(self, configured: bool = True):
        self.rows: Dict[UUID, Dict[str, Any]] = {}
        self.schema_initialized = False
        self._configured = configured

    @property
    def is_configured(self) -> bool:
        return self._configured

    def initialize_schema(self) -> None:
        self.schema_initialized = True

    @staticmethod
    def _visible(row: Dict[str, Any], organization_id: str, member_id: str) -> bool:
        if row["organization_id"] != organization_id:
            return False
        if row["visibility"] == "shared":
            return True
        return row["visibility"] == "private" and row["member_id"] == member_id

    @staticmethod
    def _plain(value: Any) -> Any:
        return getattr(value, "value", value)

    def select_visible(self, organization_id: str, member_id: str) -> List[Dict[str, Any]]:
        rows = [r for r in self.rows.values() if self._visible(r, organization_id, member_id)]
        rows.sort(key=lambda r: r["updated_at"], reverse=True)
        return copy.deepcopy(rows)

    def select_visible_by_id(self, note_id: UUID, organization_id: str, member_id: str):
        row = self.rows.get(note_id)
        if row is None or not self._visible(row, organization_id, member_id):
            return None
        return copy.deepcopy(row)

    def select_in_organization(self, note_id: UUID, organization_id: str):
        row = self.rows.get(note_id)
        if row is None or row["organization_id"] != organization_id:
            return None
        return copy.deepcopy(row)

    def insert(self, values: Dict[str, Any]) -> Dict[str, Any]:
        row = {k: self._plain(v) for k, v in values.items()}
        row["tags"] = list(row["tags"])
        self.rows[row["id"]] = row
        return copy.deepcopy(row)

    def update_visible(self, note_id, organization_id, member_id, changes, updated_at):
        unknown = set(changes) - set(self._PATCHABLE)
        if unknown:
            raise ValueError(f"Columns not patchable: {', '.join(sorted(unknown))}")
        row = self.rows.get(note_id)
        if row is None or not self._visible(row, organization_id, member_id):
            return None
        for column, value in changes.items():
            row[column] = copy.deepcopy(self._plain(value))
        row["updated_at"] = updated_at
        return copy.deepcopy(row)

    def delete_permitted(self, note_id, organization_id, member_id, allow_shared):
        row = self.rows.get(note_id)
        if row is None or row["organization_id"] != organization_id:
            return None
        if not (row["member_id"] == member_id or (row["visibility"] == "shared" and allow_shared)):
            return None
        return self.rows.pop(note_id)


# =============================================================================
# IDENTITY CONTEXT FIXTURES
# =============================================================================


@pytest.fixture(autouse=True)
def reset_identity_context():
    """Ensure clean identity context before and after each test."""
    clear_current_identity()
    yield
    clear_current_identity()


@pytest.fixture
def as_alice():
    with identity_context(ALICE):
        yield ALICE


@pytest.fixture
def as_bob():
    with identity_context(BOB):
        yield BOB


# =============================================================================
# STORE & SERVICE FIXTURES
# =============================================================================


@pytest.fixture
def note_store():
    """Empty in-memory note store."""
    return InMemoryNoteStore()


@pytest.fixture
def note_service(note_store):
    from core.services.note_service import NoteService

    return NoteService(note_store)


# =============================================================================
# LIVE BACKEND FIXTURES (skipped unless configured)
# =============================================================================


@pytest.fixture(scope="session")
def db():
    """Session-scoped PostgresClient against DATABASE_URL; skips when unset."""
    from clients.postgres_client import PostgresClient
    from clients.vault_client import get_database_url

    url = get_database_url()
    if not url:
        pytest.skip("DATABASE_URL not configured")

    client = PostgresClient(url)
    yield client
    client.close()


@pytest.fixture
def live_note_store(db):
    """NoteStore on a freshly truncated notes table."""
    from core.note_store import NoteStore

    store = NoteStore(db)
    store.initialize_schema()
    db.execute("TRUNCATE notes")
    yield store
    db.execute("TRUNCATE notes")


@pytest.fixture(scope="session")
def valkey():
    """Session-scoped ValkeyClient against VALKEY_URL; skips when unset."""
    from clients.valkey_client import ValkeyClient
    from clients.vault_client import get_valkey_url

    url = get_valkey_url()
    if not url:
        pytest.skip("VALKEY_URL not configured")

    client = ValkeyClient(url)
    yield client
    client.close()
