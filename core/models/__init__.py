"""Core domain models."""

from core.models.note import Note, NoteCreate, NotePatch, Visibility, DEFAULT_TITLE

__all__ = [
    "Note", "NoteCreate", "NotePatch", "Visibility", "DEFAULT_TITLE",
]
