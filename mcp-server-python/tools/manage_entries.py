"""
MCP tool handlers for tracked applications (entries).

Each handler validates its arguments, runs one engine operation against the
stored graph and returns a structured response. Guarded operations that
change nothing (duplicate name, unknown entry) are reported as
``action: "noop"`` rather than as errors.
"""

from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from models.errors import ToolError, create_internal_error
from models.graph import Entry
from models.stages import is_terminal_stage
from schemas.common import MutationResponse
from schemas.manage_entries import (
    AddEntryRequest,
    DeleteEntryRequest,
    EntryItem,
    HasEntryRequest,
    HasEntryResponse,
    ListEntriesRequest,
    ListEntriesResponse,
)
from utils.graph_engine import GraphEngine
from utils.graph_session import apply_mutation, read_graph
from utils.pydantic_error_mapper import map_pydantic_validation_error


def build_mutation_response(
    entry_name: str,
    changed: bool,
    stages: Optional[List[str]],
    warnings: List[str],
    dry_run: bool = False,
) -> Dict[str, Any]:
    """Build the response shared by every entry/stage mutation tool."""
    if not changed:
        action = "noop"
    elif dry_run:
        action = "would_update"
    else:
        action = "updated"

    return MutationResponse(
        entry_name=entry_name,
        action=action,
        stages=stages,
        warnings=warnings,
    ).model_dump(exclude_none=True)


def to_entry_item(entry: Entry) -> EntryItem:
    """Project an Entry for list output."""
    current_stage = entry.stages[-1] if entry.stages else ""
    return EntryItem(
        name=entry.name,
        stages=list(entry.stages),
        current_stage=current_stage,
        is_closed=is_terminal_stage(current_stage),
    )


def add_entry(args: Dict[str, Any]) -> Dict[str, Any]:
    """
    Start tracking a new application.

    Args:
        args: Dictionary containing parameters:
            - entry_name (str): Unique application name
            - store_path (str, optional): Store path override

    Returns:
        Mutation response; ``action`` is "noop" if the name already exists.
        On error, ``{"error": {"code", "message", "retryable"}}``.
    """
    try:
        request = AddEntryRequest.model_validate(args)
        outcome = apply_mutation(
            lambda engine: engine.add_entry(request.entry_name),
            store_path=request.store_path,
        )
        entry = outcome.engine.get_entry(request.entry_name)
        return build_mutation_response(
            request.entry_name,
            outcome.changed,
            list(entry.stages) if entry else None,
            outcome.warnings,
        )

    except ValidationError as e:
        return map_pydantic_validation_error(e).to_dict()

    except ToolError as e:
        return e.to_dict()

    except Exception as e:
        return create_internal_error(message=str(e), original_error=e).to_dict()


def has_entry(args: Dict[str, Any]) -> Dict[str, Any]:
    """Report whether an application with this name is tracked."""
    try:
        request = HasEntryRequest.model_validate(args)
        graph, warnings = read_graph(store_path=request.store_path)
        return HasEntryResponse(
            entry_name=request.entry_name,
            exists=GraphEngine(graph).has_entry(request.entry_name),
            warnings=warnings,
        ).model_dump()

    except ValidationError as e:
        return map_pydantic_validation_error(e).to_dict()

    except ToolError as e:
        return e.to_dict()

    except Exception as e:
        return create_internal_error(message=str(e), original_error=e).to_dict()


def list_entries(args: Dict[str, Any]) -> Dict[str, Any]:
    """
    List tracked applications in insertion order.

    Returns:
        Dictionary with structure:
        {
            "entries": [
                {"name": str, "stages": [str], "current_stage": str, "is_closed": bool}
            ],
            "count": int,
            "warnings": [str]
        }
    """
    try:
        request = ListEntriesRequest.model_validate(args)
        graph, warnings = read_graph(store_path=request.store_path)
        items = [to_entry_item(entry) for entry in GraphEngine(graph).list_entries()]
        return ListEntriesResponse(entries=items, count=len(items), warnings=warnings).model_dump()

    except ValidationError as e:
        return map_pydantic_validation_error(e).to_dict()

    except ToolError as e:
        return e.to_dict()

    except Exception as e:
        return create_internal_error(message=str(e), original_error=e).to_dict()


def delete_entry(args: Dict[str, Any]) -> Dict[str, Any]:
    """
    Stop tracking an application and remove its transitions from the graph.

    Stage nodes are kept even if no transition references them anymore.

    Args:
        args: Dictionary containing parameters:
            - entry_name (str): Application to delete
            - dry_run (bool, optional): Report the outcome without writing
            - store_path (str, optional): Store path override

    Returns:
        Mutation response. ``stages`` lists the stages the entry had;
        ``action`` is "would_update" in dry-run mode and "noop" for an
        unknown entry.
    """
    try:
        request = DeleteEntryRequest.model_validate(args)
        removed_stages: List[str] = []

        def _delete(engine) -> bool:
            entry = engine.get_entry(request.entry_name)
            if entry is not None:
                removed_stages.extend(entry.stages)
            return engine.delete_entry(request.entry_name)

        outcome = apply_mutation(_delete, store_path=request.store_path, dry_run=request.dry_run)
        return build_mutation_response(
            request.entry_name,
            outcome.changed,
            removed_stages if outcome.changed else None,
            outcome.warnings,
            dry_run=request.dry_run,
        )

    except ValidationError as e:
        return map_pydantic_validation_error(e).to_dict()

    except ToolError as e:
        return e.to_dict()

    except Exception as e:
        return create_internal_error(message=str(e), original_error=e).to_dict()
