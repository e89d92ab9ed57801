"""Pydantic schemas for the entry tools (add/has/list/delete)."""

from __future__ import annotations

from schemas.common import (
    EntryNameMixin,
    StorePathMixin,
    StrictIgnoreRequest,
    StrictResponse,
)


class AddEntryRequest(EntryNameMixin, StorePathMixin, StrictIgnoreRequest):
    """Request schema for add_entry."""


class HasEntryRequest(EntryNameMixin, StorePathMixin, StrictIgnoreRequest):
    """Request schema for has_entry."""


class DeleteEntryRequest(EntryNameMixin, StorePathMixin, StrictIgnoreRequest):
    """Request schema for delete_entry."""

    dry_run: bool = False


class ListEntriesRequest(StorePathMixin, StrictIgnoreRequest):
    """Request schema for list_entries."""


class HasEntryResponse(StrictResponse):
    """Response schema for has_entry."""

    entry_name: str
    exists: bool
    warnings: list[str] = []


class EntryItem(StrictResponse):
    """One entry in list_entries output."""

    name: str
    stages: list[str]
    current_stage: str
    is_closed: bool


class ListEntriesResponse(StrictResponse):
    """Response schema for list_entries."""

    entries: list[EntryItem]
    count: int
    warnings: list[str] = []
