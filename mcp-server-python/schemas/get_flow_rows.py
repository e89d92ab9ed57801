"""Pydantic schemas for get_flow_rows tool."""

from __future__ import annotations

from typing import Any, Optional

from schemas.common import StorePathMixin, StrictIgnoreRequest, StrictResponse


class GetFlowRowsRequest(StorePathMixin, StrictIgnoreRequest):
    """Request schema for get_flow_rows."""

    include_chart_data: bool = False


class FlowRowItem(StrictResponse):
    """One (from, to, weight) flow row."""

    source: str
    destination: str
    weight: int


class GetFlowRowsResponse(StrictResponse):
    """Response schema for get_flow_rows."""

    rows: list[FlowRowItem]
    row_count: int
    has_data: bool
    chart_data: Optional[list[list[Any]]] = None
    warnings: list[str] = []
