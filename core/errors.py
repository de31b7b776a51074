"""
Typed failures of note operations.

Read paths never distinguish "does not exist" from "exists but you may not
see it"; both surface as NoteNotFoundOrDeniedError (or None from get_by_id).
"""

from clients.postgres_client import DatabaseUnavailableError


class NoteError(Exception):
    """Base class for note operation failures."""


class NoteNotFoundError(NoteError):
    """No note with this id in the caller's organization."""


class NoteNotFoundOrDeniedError(NoteNotFoundError):
    """Note is absent or filtered out by tenancy/visibility rules."""


class NoteForbiddenError(NoteError):
    """Caller can see the note but may not perform this mutation."""


class NoteUpdateFailedError(NoteError):
    """Conditional update matched no row (note changed or vanished concurrently)."""


__all__ = [
    "DatabaseUnavailableError",
    "NoteError",
    "NoteNotFoundError",
    "NoteNotFoundOrDeniedError",
    "NoteForbiddenError",
    "NoteUpdateFailedError",
]
