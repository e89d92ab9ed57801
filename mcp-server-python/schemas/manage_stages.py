"""Pydantic schemas for the stage tools (add/edit/delete)."""

from __future__ import annotations

from pydantic import Field

from schemas.common import EntryNameMixin, StorePathMixin, StrictIgnoreRequest


class AddStageRequest(EntryNameMixin, StorePathMixin, StrictIgnoreRequest):
    """Request schema for add_stage."""

    stage: str


class EditStageRequest(EntryNameMixin, StorePathMixin, StrictIgnoreRequest):
    """Request schema for edit_stage."""

    index: int = Field(ge=0)
    stage: str


class DeleteStageRequest(EntryNameMixin, StorePathMixin, StrictIgnoreRequest):
    """Request schema for delete_stage."""

    stage: str
