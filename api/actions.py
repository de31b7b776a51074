"""POST /api/actions - unified read and mutation endpoint for tool and RPC clients."""

from fastapi import APIRouter, Request
from pydantic import BaseModel

from api.base import success_response
from api.notes import dump_notes
from api.notes_cache import NotesListCache
from core.errors import NoteNotFoundOrDeniedError
from core.models import NoteCreate, NotePatch
from core.services.note_service import NoteService
from utils.identity_context import get_current_identity


class ActionRequest(BaseModel):
    domain: str
    action: str
    data: dict


def create_actions_router(services: dict, cache: NotesListCache | None = None) -> APIRouter:
    router = APIRouter()

    handlers = {
        "note": NoteHandler(services["note"], cache),
    }

    @router.post("/actions")
    async def perform_action(request: Request, body: ActionRequest):
        handler = handlers.get(body.domain)
        if handler is None:
            raise ValueError(
                f"Unknown domain '{body.domain}'. "
                f"Valid domains: {', '.join(sorted(handlers.keys()))}"
            )

        if body.action not in handler.ALLOWED_ACTIONS:
            raise ValueError(
                f"Action '{body.action}' not allowed on '{body.domain}'. "
                f"Allowed: {', '.join(sorted(handler.ALLOWED_ACTIONS))}"
            )

        method = getattr(handler, f"_handle_{body.action}")
        result = method(dict(body.data))
        return success_response(result).model_dump(mode="json")

    return router


# =============================================================================
# HANDLER CLASSES
# =============================================================================


class NoteHandler:
    ALLOWED_ACTIONS = {"list", "get", "by_tag", "search", "create", "update", "delete"}

    def __init__(self, service: NoteService, cache: NotesListCache | None = None):
        self.service = service
        self.cache = cache

    def _invalidate(self) -> None:
        if self.cache is not None:
            self.cache.invalidate(get_current_identity().organization_id)

    def _require_id(self, data: dict) -> str:
        note_id = data.pop("id", None) or data.pop("noteId", None)
        if not note_id:
            raise ValueError("'id' is required")
        return str(note_id)

    def _require_text(self, data: dict, *names: str) -> str:
        for name in names:
            value = data.get(name)
            if isinstance(value, str) and value:
                return value
        raise ValueError(f"'{names[0]}' is required")

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def _handle_list(self, data: dict):
        return dump_notes(self.service.list_accessible())

    def _handle_get(self, data: dict):
        note_id = self._require_id(data)
        note = self.service.get_by_id(note_id)
        if note is None:
            raise NoteNotFoundOrDeniedError("Note not found or access denied")
        return note.model_dump(mode="json")

    def _handle_by_tag(self, data: dict):
        tag = self._require_text(data, "tag")
        return dump_notes(self.service.list_by_tag(tag))

    def _handle_search(self, data: dict):
        term = self._require_text(data, "term", "searchTerm")
        include_private = data.get("include_private", data.get("includePrivate", True))
        if not isinstance(include_private, bool):
            raise ValueError("'include_private' must be a boolean")
        return dump_notes(self.service.search(term, include_private=include_private))

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def _handle_create(self, data: dict):
        note = self.service.create(NoteCreate(**data))
        self._invalidate()
        return note.model_dump(mode="json")

    def _handle_update(self, data: dict):
        note_id = self._require_id(data)
        note = self.service.update(note_id, NotePatch(**data))
        self._invalidate()
        return note.model_dump(mode="json")

    def _handle_delete(self, data: dict):
        note_id = self._require_id(data)
        deleted = self.service.delete(note_id)
        self._invalidate()
        return {"deleted": deleted, "id": note_id}
