"""
MCP tool handler for get_flow_rows.

Reads the stored graph and returns the ordered (from, to, weight) rows the
Sankey chart renders. Read-only: the store is never written.
"""

from typing import Any, Dict

from pydantic import ValidationError

from config import get_config
from models.errors import ToolError, create_internal_error, create_validation_error
from schemas.get_flow_rows import FlowRowItem, GetFlowRowsRequest, GetFlowRowsResponse
from utils.flow_traversal import FlowRowLimitExceeded, compute_flow_rows, to_chart_data
from utils.graph_session import read_graph
from utils.pydantic_error_mapper import map_pydantic_validation_error


def get_flow_rows(args: Dict[str, Any]) -> Dict[str, Any]:
    """
    Compute the flow rows for the stored graph.

    Args:
        args: Dictionary containing parameters:
            - include_chart_data (bool, optional): Also return the rows
              prefixed with the ["From", "To", "Weight"] header row
            - store_path (str, optional): Store path override

    Returns:
        Dictionary with structure:
        {
            "rows": [{"source": str, "destination": str, "weight": int}],
            "row_count": int,
            "has_data": bool,
            "chart_data": [[...]],      # Only with include_chart_data
            "warnings": [str]
        }

        On error:
        {
            "error": {"code": str, "message": str, "retryable": bool}
        }
    """
    try:
        request = GetFlowRowsRequest.model_validate(args)
        graph, warnings = read_graph(store_path=request.store_path)

        try:
            rows = compute_flow_rows(graph, max_rows=get_config().max_flow_rows)
        except FlowRowLimitExceeded as e:
            raise create_validation_error(str(e)) from e

        response = GetFlowRowsResponse(
            rows=[
                FlowRowItem(source=row.source, destination=row.destination, weight=row.weight)
                for row in rows
            ],
            row_count=len(rows),
            has_data=bool(rows),
            chart_data=to_chart_data(rows) if request.include_chart_data else None,
            warnings=warnings,
        )
        return response.model_dump(exclude_none=True)

    except ValidationError as e:
        return map_pydantic_validation_error(e).to_dict()

    except ToolError as e:
        return e.to_dict()

    except Exception as e:
        return create_internal_error(message=str(e), original_error=e).to_dict()
