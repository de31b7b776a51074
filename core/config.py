"""Notes service configuration."""

from pydantic import BaseModel, Field


class NotesConfig(BaseModel):
    """Configuration for the notes HTTP layer."""

    list_cache_enabled: bool = Field(
        default=True,
        description="Cache per-member note lists in Valkey when available",
    )
    list_cache_ttl_seconds: int = Field(
        default=30,
        description="How long a cached note list stays valid",
        ge=1,
        le=3600,
    )
    starter_title: str = Field(
        default="Untitled",
        description="Title of notes created through the blank-note endpoint",
    )
    starter_content: str = Field(
        default="# Untitled\n\nStart writing your note here...",
        description="Content of notes created through the blank-note endpoint",
    )
