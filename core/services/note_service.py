"""
Note service: tenancy, visibility and mutation rules for notes.

Every operation acts on behalf of the identity in the current identity
context. Notes never leave their organization. Private notes are readable
and editable by their creator only; shared notes are readable and editable
by every member of the organization. Deletion is owner-only, except that
admins may delete shared notes. Only the creator may turn a shared note
private.
"""

import logging
from uuid import UUID, uuid4

from core.errors import (
    NoteForbiddenError,
    NoteNotFoundError,
    NoteNotFoundOrDeniedError,
    NoteUpdateFailedError,
)
from core.models import Note, NoteCreate, NotePatch, Visibility, DEFAULT_TITLE
from core.note_store import NoteStore
from utils.identity_context import get_current_identity
from utils.timezone import now_utc

logger = logging.getLogger(__name__)


def _parse_note_id(note_id: UUID | str) -> UUID | None:
    """Malformed ids can't match any note; treat them as absent."""
    if isinstance(note_id, UUID):
        return note_id
    try:
        return UUID(str(note_id))
    except ValueError:
        return None


class NoteService:
    """Service for access-controlled note operations."""

    def __init__(self, store: NoteStore):
        self.store = store

    def list_accessible(self) -> list[Note]:
        """
        List every note the caller can read.

        Returns:
            Shared notes of the caller's organization plus the caller's own
            private notes, most recently updated first. Empty list if none.
        """
        identity = get_current_identity()
        rows = self.store.select_visible(identity.organization_id, identity.member_id)
        return [Note.model_validate(row) for row in rows]

    def list_by_tag(self, tag: str) -> list[Note]:
        """Accessible notes carrying the exact tag."""
        return [note for note in self.list_accessible() if tag in note.tags]

    def search(self, term: str, include_private: bool = True) -> list[Note]:
        """
        Accessible notes whose title or content contains term, case-insensitive.

        Args:
            term: Substring to look for
            include_private: False restricts results to shared notes
        """
        needle = term.lower()
        return [
            note for note in self.list_accessible()
            if (include_private or note.is_shared)
            and (needle in note.title.lower() or needle in note.content.lower())
        ]

    def get_by_id(self, note_id: UUID | str) -> Note | None:
        """
        Get note by ID.

        Returns:
            Note if it exists and the caller can read it, None otherwise.
            "Doesn't exist", "other organization" and "someone else's private
            note" are deliberately indistinguishable.
        """
        identity = get_current_identity()
        parsed_id = _parse_note_id(note_id)
        if parsed_id is None:
            return None

        row = self.store.select_visible_by_id(
            parsed_id, identity.organization_id, identity.member_id
        )
        if row is None:
            return None

        return Note.model_validate(row)

    def create(self, data: NoteCreate) -> Note:
        """
        Create a new note owned by the caller.

        Args:
            data: Validated creation payload

        Returns:
            Created note
        """
        identity = get_current_identity()
        now = now_utc()

        row = self.store.insert({
            "id": uuid4(),
            "title": data.title or DEFAULT_TITLE,
            "content": data.content or "",
            "member_id": identity.member_id,
            "organization_id": identity.organization_id,
            "visibility": data.visibility,
            "is_favorite": data.is_favorite,
            "tags": data.tags,
            "created_at": now,
            "updated_at": now,
        })

        note = Note.model_validate(row)
        logger.info(f"Note {note.id} created ({note.visibility.value}) in organization {note.organization_id}")
        return note

    def update(self, note_id: UUID | str, patch: NotePatch) -> Note:
        """
        Apply a partial update to a note.

        Args:
            note_id: Note UUID
            patch: Fields to change; absent fields are left untouched

        Returns:
            Updated note

        Raises:
            NoteNotFoundOrDeniedError: Note absent or not readable by caller
            NoteForbiddenError: Private note of someone else, or a non-creator
                trying to make a shared note private
            NoteUpdateFailedError: Note changed concurrently so the conditional
                update matched nothing
        """
        identity = get_current_identity()
        parsed_id = _parse_note_id(note_id)

        existing = None
        if parsed_id is not None:
            existing = self.get_by_id(parsed_id)
        if existing is None:
            raise NoteNotFoundOrDeniedError("Note not found or access denied")

        is_owner = existing.is_owned_by(identity.member_id)

        if existing.visibility == Visibility.PRIVATE and not is_owner:
            logger.warning(f"Member {identity.member_id} denied edit of private note {existing.id}")
            raise NoteForbiddenError("Only the creator can edit private notes")

        if (
            patch.visibility == Visibility.PRIVATE
            and existing.visibility == Visibility.SHARED
            and not is_owner
        ):
            logger.warning(f"Member {identity.member_id} denied making shared note {existing.id} private")
            raise NoteForbiddenError("Only the creator can make a shared note private")

        row = self.store.update_visible(
            existing.id,
            identity.organization_id,
            identity.member_id,
            patch.changes(),
            now_utc(),
        )
        if row is None:
            logger.warning(f"Conditional update of note {existing.id} matched no row")
            raise NoteUpdateFailedError("Failed to update note")

        updated = Note.model_validate(row)
        logger.info(f"Note {updated.id} updated ({', '.join(patch.changes()) or 'touch'})")
        return updated

    def delete(self, note_id: UUID | str) -> bool:
        """
        Permanently delete a note.

        The creator may delete any of their notes. Admins may also delete
        shared notes. Private notes are never admin-deletable.

        Returns:
            True if the note was removed, False if it vanished concurrently

        Raises:
            NoteNotFoundError: No such note in the caller's organization
            NoteForbiddenError: Caller may not delete this note
        """
        identity = get_current_identity()
        parsed_id = _parse_note_id(note_id)

        row = None
        if parsed_id is not None:
            row = self.store.select_in_organization(parsed_id, identity.organization_id)
        if row is None:
            raise NoteNotFoundError("Note not found")

        note = Note.model_validate(row)
        is_owner = note.is_owned_by(identity.member_id)
        is_admin = identity.is_admin
        is_shared = note.is_shared

        if not (is_owner or (is_admin and is_shared)):
            logger.warning(f"Member {identity.member_id} denied delete of note {note.id}")
            if is_shared:
                raise NoteForbiddenError("Only the note owner or an admin can delete shared notes")
            raise NoteForbiddenError("You can only delete notes you created")

        deleted = self.store.delete_permitted(
            note.id,
            identity.organization_id,
            identity.member_id,
            allow_shared=is_admin,
        )
        if deleted is None:
            return False

        logger.info(f"Note {note.id} deleted by {'owner' if is_owner else 'admin'}")
        return True
