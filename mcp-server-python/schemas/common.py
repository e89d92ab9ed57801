"""Shared schema primitives for MCP tool request/response models."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def validate_optional_non_empty_str(value: Optional[str], field_name: str) -> Optional[str]:
    """Validate optional string fields that cannot be empty/whitespace."""
    if value is None:
        return None
    if not value.strip():
        raise ValueError(f"Invalid {field_name}: cannot be empty")
    return value


class StrictIgnoreRequest(BaseModel):
    """Request base with strict typing and ignored unknown fields."""

    model_config = ConfigDict(extra="ignore", strict=True)


class StrictResponse(BaseModel):
    """Response/result base with strict typing and forbidden unknown fields."""

    model_config = ConfigDict(extra="forbid")


class StorePathMixin(BaseModel):
    """Reusable store_path field validation."""

    store_path: Optional[str] = None

    @field_validator("store_path")
    @classmethod
    def validate_store_path(cls, value: Optional[str]) -> Optional[str]:
        return validate_optional_non_empty_str(value, "store_path")


class EntryNameMixin(BaseModel):
    """Reusable entry_name field validation."""

    entry_name: str

    @field_validator("entry_name")
    @classmethod
    def validate_entry_name(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Invalid entry_name: cannot be empty")
        return value


class MutationResponse(StrictResponse):
    """Result of one engine operation on an entry."""

    entry_name: str
    action: Literal["updated", "noop", "would_update"]
    success: bool = True
    stages: Optional[list[str]] = None
    warnings: list[str] = Field(default_factory=list)
