"""Note domain models."""

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import AliasChoices, BaseModel, Field, field_validator, model_validator

from utils.timezone import to_utc

DEFAULT_TITLE = "Untitled"

_VISIBILITY_MESSAGE = 'Visibility must be either "private" or "shared"'


class Visibility(str, Enum):
    """Who besides the creator can read a note."""

    PRIVATE = "private"
    SHARED = "shared"


def _check_visibility(value: Any) -> Any:
    if isinstance(value, Visibility):
        return value
    if not isinstance(value, str) or value not in {v.value for v in Visibility}:
        raise ValueError(_VISIBILITY_MESSAGE)
    return value


class NoteCreate(BaseModel):
    """
    Data accepted when creating a note.

    Owner and organization are never part of this payload; they are stamped
    from the caller's identity context.
    """

    title: str | None = Field(None, max_length=500)
    content: str | None = Field(None, max_length=200000)
    visibility: Visibility = Visibility.PRIVATE
    is_favorite: bool = False
    tags: list[str] = Field(default_factory=list)

    @field_validator("visibility", mode="before")
    @classmethod
    def validate_visibility(cls, value: Any) -> Any:
        return _check_visibility(value)

    @model_validator(mode="after")
    def require_title_or_content(self) -> "NoteCreate":
        """Ensure the note is not completely empty."""
        if not self.title and not self.content:
            raise ValueError("Title or content is required")
        return self


class NotePatch(BaseModel):
    """
    Partial update of a note.

    Only fields explicitly present in the payload are applied; absent fields
    are left untouched. Explicit nulls are rejected since every column is
    non-nullable.
    """

    title: str | None = Field(None, max_length=500)
    content: str | None = Field(None, max_length=200000)
    visibility: Visibility | None = None
    is_favorite: bool | None = None
    tags: list[str] | None = None

    @field_validator("visibility", mode="before")
    @classmethod
    def validate_visibility(cls, value: Any) -> Any:
        if value is None:
            return value
        return _check_visibility(value)

    @model_validator(mode="after")
    def reject_explicit_nulls(self) -> "NotePatch":
        for name in sorted(self.model_fields_set):
            if getattr(self, name) is None:
                raise ValueError(f"'{name}' cannot be null")
        return self

    def changes(self) -> dict[str, Any]:
        """Supplied fields only, in declaration order."""
        return {
            name: getattr(self, name)
            for name in type(self).model_fields
            if name in self.model_fields_set
        }

    @property
    def is_empty(self) -> bool:
        return not self.model_fields_set


class Note(BaseModel):
    """Full note entity as stored."""

    id: UUID
    title: str
    content: str
    owner_member_id: str = Field(validation_alias=AliasChoices("owner_member_id", "member_id"))
    organization_id: str
    visibility: Visibility
    is_favorite: bool
    tags: list[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

    @field_validator("tags", mode="before")
    @classmethod
    def default_tags(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("created_at", "updated_at")
    @classmethod
    def normalize_timestamps(cls, value: datetime) -> datetime:
        return to_utc(value)

    @property
    def is_shared(self) -> bool:
        return self.visibility == Visibility.SHARED

    def is_owned_by(self, member_id: str) -> bool:
        return self.owner_member_id == member_id
