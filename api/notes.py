"""REST endpoints for notes: /api/notes."""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from api.base import success_response
from api.notes_cache import NotesListCache
from core.config import NotesConfig
from core.errors import DatabaseUnavailableError, NoteNotFoundOrDeniedError
from core.models import Note, NoteCreate, NotePatch, Visibility
from core.services.note_service import NoteService
from utils.identity_context import get_current_identity

logger = logging.getLogger(__name__)


def dump_notes(notes: list[Note]) -> list[dict]:
    return [n.model_dump(mode="json") for n in notes]


def create_notes_router(
    note_service: NoteService,
    cache: NotesListCache | None = None,
    config: NotesConfig | None = None,
) -> APIRouter:
    """Create notes router with injected service and optional list cache."""
    router = APIRouter(tags=["notes"])
    config = config or NotesConfig()

    def invalidate(organization_id: str) -> None:
        if cache is not None:
            cache.invalidate(organization_id)

    # -------------------------------------------------------------------------
    # Fixed paths (must be registered before /notes/{note_id})
    # -------------------------------------------------------------------------

    @router.get("/notes/status")
    async def notes_status():
        """Report whether notes are enabled. Public."""
        store = note_service.store
        if not store.is_configured:
            return JSONResponse(
                status_code=503,
                content={"enabled": False, "reason": "Database URL not configured."},
            )

        try:
            store.initialize_schema()
        except DatabaseUnavailableError as e:
            return JSONResponse(status_code=503, content={"enabled": False, "reason": str(e)})
        except Exception:
            logger.exception("Notes status check failed")
            return JSONResponse(
                status_code=503,
                content={"enabled": False, "reason": "Failed to verify database status."},
            )

        return {"enabled": True}

    @router.post("/notes/new", status_code=201)
    async def create_blank_note():
        """Create an empty private note with starter content."""
        note = note_service.create(NoteCreate(
            title=config.starter_title,
            content=config.starter_content,
            visibility=Visibility.PRIVATE,
        ))
        invalidate(note.organization_id)
        return success_response(note.model_dump(mode="json")).model_dump(mode="json")

    # -------------------------------------------------------------------------
    # Collection
    # -------------------------------------------------------------------------

    @router.get("/notes")
    async def list_notes():
        identity = get_current_identity()

        key = cache.key_for(identity) if cache is not None else None
        if key is not None:
            cached = cache.get(key)
            if cached is not None:
                return success_response(dump_notes(cached)).model_dump(mode="json")

        notes = note_service.list_accessible()
        if key is not None:
            cache.set(key, notes)

        return success_response(dump_notes(notes)).model_dump(mode="json")

    @router.post("/notes", status_code=201)
    async def create_note(body: NoteCreate):
        note = note_service.create(body)
        invalidate(note.organization_id)
        return success_response(note.model_dump(mode="json")).model_dump(mode="json")

    # -------------------------------------------------------------------------
    # Single note
    # -------------------------------------------------------------------------

    @router.get("/notes/{note_id}")
    async def get_note(note_id: str):
        note = note_service.get_by_id(note_id)
        if note is None:
            raise NoteNotFoundOrDeniedError("Note not found or access denied")
        return success_response(note.model_dump(mode="json")).model_dump(mode="json")

    @router.put("/notes/{note_id}")
    async def update_note(note_id: str, body: NotePatch):
        note = note_service.update(note_id, body)
        invalidate(note.organization_id)
        return success_response(note.model_dump(mode="json")).model_dump(mode="json")

    @router.delete("/notes/{note_id}")
    async def delete_note(note_id: str):
        deleted = note_service.delete(note_id)
        invalidate(get_current_identity().organization_id)
        return success_response({"deleted": deleted}).model_dump(mode="json")

    return router
