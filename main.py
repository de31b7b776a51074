"""Application factory for the notes service."""

import logging
import os

from fastapi import FastAPI

from api.actions import create_actions_router
from api.errors import register_error_handlers
from api.middleware import RequestIDMiddleware
from api.notes import create_notes_router
from api.notes_cache import NotesListCache
from auth.api import create_identity_router
from auth.config import AuthConfig
from auth.identity import IdentityProvider
from auth.security_middleware import AuthMiddleware
from clients.identity_client import IdentityClient
from clients.postgres_client import PostgresClient
from clients.valkey_client import ValkeyClient
from clients.vault_client import get_database_url, get_identity_config, get_valkey_url
from core.config import NotesConfig
from core.note_store import NoteStore
from core.services.note_service import NoteService

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO") -> None:
    """Root logging for the service, with uvicorn's loggers at the same level."""
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(name).setLevel(log_level)


def build_list_cache(config: NotesConfig) -> NotesListCache | None:
    """List cache when enabled and Valkey is configured, else None."""
    if not config.list_cache_enabled:
        return None
    valkey_url = get_valkey_url()
    if not valkey_url:
        logger.info("No Valkey configured; notes list cache disabled")
        return None
    return NotesListCache(ValkeyClient(valkey_url), config.list_cache_ttl_seconds)


def create_app(
    note_service: NoteService | None = None,
    identity_provider: IdentityProvider | None = None,
    cache: NotesListCache | None = None,
    auth_config: AuthConfig | None = None,
    notes_config: NotesConfig | None = None,
) -> FastAPI:
    """
    Wire the notes service.

    Collaborators default to the ones built from environment/Vault config;
    tests pass their own.
    """
    auth_config = auth_config or AuthConfig()
    notes_config = notes_config or NotesConfig()

    if note_service is None:
        note_service = NoteService(NoteStore(PostgresClient(get_database_url())))
        cache = cache or build_list_cache(notes_config)

    if identity_provider is None:
        identity_config = get_identity_config()
        identity_provider = IdentityProvider(
            IdentityClient(
                project_id=identity_config["project_id"],
                secret=identity_config["secret"],
                base_url=identity_config["base_url"],
            ),
            auth_config,
        )

    app = FastAPI(title="Notes")
    # Last added runs first: request ids cover auth rejections too
    app.add_middleware(AuthMiddleware, identity_provider=identity_provider, config=auth_config)
    app.add_middleware(RequestIDMiddleware)
    register_error_handlers(app)

    app.include_router(create_notes_router(note_service, cache, notes_config), prefix="/api")
    app.include_router(create_actions_router({"note": note_service}, cache), prefix="/api")
    app.include_router(create_identity_router(), prefix="/api")

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app


if __name__ == "__main__":
    import uvicorn

    setup_logging(os.getenv("LOG_LEVEL", "INFO"))
    uvicorn.run(
        "main:create_app",
        factory=True,
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
    )
