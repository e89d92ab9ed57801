"""
MCP tool handlers for the stages of one tracked application.

Stage names go through ``normalize_stage_name`` first, so "accepted" and
"rejected" typed in lowercase land on the terminal stages.
"""

from typing import Any, Dict

from pydantic import ValidationError

from models.errors import ToolError, create_internal_error
from models.stages import normalize_stage_name
from schemas.manage_stages import AddStageRequest, DeleteStageRequest, EditStageRequest
from tools.manage_entries import build_mutation_response
from utils.graph_session import MutationOutcome, apply_mutation
from utils.pydantic_error_mapper import map_pydantic_validation_error


def _respond(entry_name: str, outcome: MutationOutcome) -> Dict[str, Any]:
    entry = outcome.engine.get_entry(entry_name)
    return build_mutation_response(
        entry_name,
        outcome.changed,
        list(entry.stages) if entry else None,
        outcome.warnings,
    )


def add_stage(args: Dict[str, Any]) -> Dict[str, Any]:
    """
    Advance an application to a new stage.

    Refused (``action: "noop"``) when the entry is unknown, the stage is
    blank, the stage equals the current stage, or the application already
    ended in Accepted/Rejected.

    Args:
        args: Dictionary containing parameters:
            - entry_name (str): Application to advance
            - stage (str): Stage name to append
            - store_path (str, optional): Store path override
    """
    try:
        request = AddStageRequest.model_validate(args)
        stage = normalize_stage_name(request.stage)
        outcome = apply_mutation(
            lambda engine: engine.add_stage_in_entry(stage, request.entry_name),
            store_path=request.store_path,
        )
        return _respond(request.entry_name, outcome)

    except ValidationError as e:
        return map_pydantic_validation_error(e).to_dict()

    except ToolError as e:
        return e.to_dict()

    except Exception as e:
        return create_internal_error(message=str(e), original_error=e).to_dict()


def edit_stage(args: Dict[str, Any]) -> Dict[str, Any]:
    """
    Relabel the stage at ``index`` of an application.

    Only the label changes; transition counts in the flow graph are not
    adjusted. Use delete_stage and add_stage to move an application between
    stages.

    Args:
        args: Dictionary containing parameters:
            - entry_name (str): Application to correct
            - index (int): Zero-based stage position
            - stage (str): New label
            - store_path (str, optional): Store path override
    """
    try:
        request = EditStageRequest.model_validate(args)
        stage = normalize_stage_name(request.stage)
        outcome = apply_mutation(
            lambda engine: engine.edit_stage_in_entry(request.index, stage, request.entry_name),
            store_path=request.store_path,
        )
        return _respond(request.entry_name, outcome)

    except ValidationError as e:
        return map_pydantic_validation_error(e).to_dict()

    except ToolError as e:
        return e.to_dict()

    except Exception as e:
        return create_internal_error(message=str(e), original_error=e).to_dict()


def delete_stage(args: Dict[str, Any]) -> Dict[str, Any]:
    """
    Remove a stage from an application, joining its neighbours.

    The initial "Application submitted" stage cannot be deleted.

    Args:
        args: Dictionary containing parameters:
            - entry_name (str): Application to correct
            - stage (str): Stage name to remove
            - store_path (str, optional): Store path override
    """
    try:
        request = DeleteStageRequest.model_validate(args)
        outcome = apply_mutation(
            lambda engine: engine.delete_stage_in_entry(request.stage, request.entry_name),
            store_path=request.store_path,
        )
        return _respond(request.entry_name, outcome)

    except ValidationError as e:
        return map_pydantic_validation_error(e).to_dict()

    except ToolError as e:
        return e.to_dict()

    except Exception as e:
        return create_internal_error(message=str(e), original_error=e).to_dict()
