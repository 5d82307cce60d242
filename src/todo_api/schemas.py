from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from .models import TITLE_MAX_LENGTH


def _clean_title(v: str) -> str:
    s = v.strip()
    if not (1 <= len(s) <= TITLE_MAX_LENGTH):
        raise ValueError(f"title length must be between 1 and {TITLE_MAX_LENGTH} characters")
    return s


# PUBLIC_INTERFACE
class TodoCreate(BaseModel):
    """
    Schema for creating a new Todo item.
    """

    model_config = ConfigDict(
        json_schema_extra={"example": {"title": "Buy milk", "completed": False}}
    )

    title: str = Field(..., description="Short title for the todo item")
    completed: bool = Field(default=False, description="Completion status flag")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        """
        Strip whitespace and enforce 1..200 length.
        """
        return _clean_title(v)


# PUBLIC_INTERFACE
class TodoUpdate(BaseModel):
    """
    Schema for updating an existing Todo item.
    All fields are optional; only provided fields will be updated.
    """

    model_config = ConfigDict(
        json_schema_extra={"example": {"completed": True}}
    )

    title: Optional[str] = Field(default=None, description="Short title for the todo item")
    completed: Optional[bool] = Field(default=None, description="Completion status flag")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: Optional[str]) -> Optional[str]:
        """
        If title is provided, strip whitespace and enforce 1..200 length.
        """
        if v is None:
            raise ValueError("title cannot be null")
        return _clean_title(v)

    @field_validator("completed")
    @classmethod
    def validate_completed(cls, v: Optional[bool]) -> Optional[bool]:
        if v is None:
            raise ValueError("completed cannot be null")
        return v

    def changes(self) -> dict[str, Any]:
        """Fields explicitly sent in the request body."""
        return self.model_dump(include=self.model_fields_set)


# PUBLIC_INTERFACE
class TodoOut(BaseModel):
    """
    Schema returned by the API for a Todo item.
    """

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "id": 123,
                "title": "Buy milk",
                "completed": False,
                "createdAt": "2025-01-25T10:15:30.123456",
                "updatedAt": "2025-01-26T09:00:00.000001",
            }
        },
    )

    id: int = Field(..., description="Unique identifier of the todo item")
    title: str = Field(..., description="Short title for the todo item")
    completed: bool = Field(..., description="Completion status flag")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")


class TodoDeleted(BaseModel):
    """Acknowledgment returned after a Todo is deleted."""

    id: int = Field(..., description="Identifier of the deleted todo item")
    deleted: bool = Field(default=True, description="Always true")


class ErrorResponse(BaseModel):
    """Body of 400 and 500 responses produced by the global exception handlers."""

    error: str
    message: str
    detail: Optional[List[Any]] = None
