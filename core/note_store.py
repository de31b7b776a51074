"""
Relational store adapter for notes.

Every method is one parameterized statement. Write statements carry the
access predicate in their WHERE clause, so a check done earlier by the
service is re-applied atomically by the database at write time: if the note
changed underneath, zero rows match and the caller sees a failure rather
than a write past the access boundary.
"""

import logging
from enum import Enum
from typing import Any, Dict, List
from uuid import UUID

from clients.postgres_client import PostgresClient

logger = logging.getLogger(__name__)

# Columns a patch may touch. Owner, organization, id and created_at are immutable.
_PATCHABLE_COLUMNS = ("title", "content", "visibility", "is_favorite", "tags")

# Tenancy + visibility: shared notes of the organization, plus the caller's own private notes
_VISIBLE_PREDICATE = """
    organization_id = %s
    AND (
        (visibility = 'private' AND member_id = %s)
        OR visibility = 'shared'
    )
"""

_SCHEMA_STATEMENTS = (
    """
    CREATE TABLE IF NOT EXISTS notes (
        id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
        title TEXT NOT NULL DEFAULT 'Untitled',
        content TEXT NOT NULL DEFAULT '',
        member_id TEXT NOT NULL,
        organization_id TEXT NOT NULL,
        visibility TEXT NOT NULL DEFAULT 'private' CHECK (visibility IN ('private', 'shared')),
        is_favorite BOOLEAN NOT NULL DEFAULT false,
        tags TEXT[] DEFAULT '{}',
        created_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT NOW(),
        updated_at TIMESTAMP WITH TIME ZONE NOT NULL DEFAULT NOW()
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_notes_member_org ON notes(member_id, organization_id)",
    "CREATE INDEX IF NOT EXISTS idx_notes_org_visibility ON notes(organization_id, visibility)",
)


def _to_db(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return value


class NoteStore:
    """Parameterized statements over the notes table."""

    def __init__(self, postgres: PostgresClient):
        self.postgres = postgres

    @property
    def is_configured(self) -> bool:
        return self.postgres.is_configured

    def initialize_schema(self) -> None:
        """Create the notes table and its indexes if they don't exist."""
        for statement in _SCHEMA_STATEMENTS:
            self.postgres.execute(statement)
        logger.info("Notes schema initialized")

    def select_visible(self, organization_id: str, member_id: str) -> List[Dict[str, Any]]:
        """All notes the member can read, most recently updated first."""
        return self.postgres.execute(
            f"""
            SELECT * FROM notes
            WHERE {_VISIBLE_PREDICATE}
            ORDER BY updated_at DESC
            """,
            (organization_id, member_id)
        )

    def select_visible_by_id(
        self, note_id: UUID, organization_id: str, member_id: str
    ) -> Dict[str, Any] | None:
        """One note by id, if the member can read it."""
        return self.postgres.execute_single(
            f"""
            SELECT * FROM notes
            WHERE id = %s AND {_VISIBLE_PREDICATE}
            """,
            (note_id, organization_id, member_id)
        )

    def select_in_organization(self, note_id: UUID, organization_id: str) -> Dict[str, Any] | None:
        """One note by id within the organization, regardless of visibility."""
        return self.postgres.execute_single(
            "SELECT * FROM notes WHERE id = %s AND organization_id = %s",
            (note_id, organization_id)
        )

    def insert(self, values: Dict[str, Any]) -> Dict[str, Any]:
        """Insert a fully stamped note row and return it."""
        return self.postgres.execute_returning(
            """
            INSERT INTO notes (
                id, title, content, member_id, organization_id,
                visibility, is_favorite, tags, created_at, updated_at
            ) VALUES (
                %s, %s, %s, %s, %s,
                %s, %s, %s, %s, %s
            )
            RETURNING *
            """,
            (
                values["id"], values["title"], values["content"],
                values["member_id"], values["organization_id"],
                _to_db(values["visibility"]), values["is_favorite"], list(values["tags"]),
                values["created_at"], values["updated_at"],
            )
        )[0]

    def update_visible(
        self,
        note_id: UUID,
        organization_id: str,
        member_id: str,
        changes: Dict[str, Any],
        updated_at: Any,
    ) -> Dict[str, Any] | None:
        """
        Apply changes to a note the member can still read.

        Args:
            note_id: Note UUID
            organization_id: Caller's organization
            member_id: Caller's member id
            changes: Column -> new value, restricted to patchable columns
            updated_at: New updated_at timestamp (always written)

        Returns:
            Updated row, or None if the predicate no longer matches

        Raises:
            ValueError: If changes names a column outside the patchable set
        """
        unknown = set(changes) - set(_PATCHABLE_COLUMNS)
        if unknown:
            raise ValueError(f"Columns not patchable: {', '.join(sorted(unknown))}")

        set_parts = []
        params: List[Any] = []
        for column in _PATCHABLE_COLUMNS:
            if column in changes:
                set_parts.append(f"{column} = %s")
                params.append(_to_db(changes[column]))

        set_parts.append("updated_at = %s")
        params.append(updated_at)
        params.extend([note_id, organization_id, member_id])

        rows = self.postgres.execute_returning(
            f"""
            UPDATE notes
            SET {', '.join(set_parts)}
            WHERE id = %s AND {_VISIBLE_PREDICATE}
            RETURNING *
            """,
            tuple(params)
        )
        return rows[0] if rows else None

    def delete_permitted(
        self,
        note_id: UUID,
        organization_id: str,
        member_id: str,
        allow_shared: bool,
    ) -> Dict[str, Any] | None:
        """
        Permanently delete a note the caller may delete.

        The row must belong to the organization and either be owned by the
        member, or be shared when allow_shared is set (admin rights).

        Returns:
            Deleted row, or None if nothing matched
        """
        rows = self.postgres.execute_returning(
            """
            DELETE FROM notes
            WHERE id = %s
            AND organization_id = %s
            AND (member_id = %s OR (visibility = 'shared' AND %s))
            RETURNING *
            """,
            (note_id, organization_id, member_id, allow_shared)
        )
        return rows[0] if rows else None
