#!/usr/bin/env python3
"""
MCP Server entry point for the TrackMyApp application log.

Exposes the stage-flow graph engine as MCP tools: track applications,
advance them through stages, correct their history, and read the weighted
flow rows that drive the Sankey chart. State lives in a single-key SQLite
store and every tool call is one load -> mutate -> save cycle.

Usage:
    python server.py

The server runs in stdio mode, the standard transport for MCP servers that
are invoked by LLM agents.
"""

import logging
from mcp.server.fastmcp import FastMCP
from tools.manage_entries import add_entry, has_entry, list_entries, delete_entry
from tools.manage_stages import add_stage, edit_stage, delete_stage
from tools.get_flow_rows import get_flow_rows
from config import get_config

# Create FastMCP server instance
config = get_config()
mcp = FastMCP(
    name=config.server_name,
    instructions=(
        "This server keeps a personal log of job applications. "
        "Every application (entry) starts at 'Application submitted' and moves through "
        "named stages; 'Accepted' and 'Rejected' end an application. "
        "\n\n"
        "Use add_entry to start tracking an application and has_entry to check a name. "
        "Use add_stage to advance an application, delete_stage to remove a stage (its "
        "neighbours are joined), and edit_stage only to fix a typo in a stage label. "
        "Use list_entries to show applications and delete_entry to stop tracking one "
        "(confirm with the user first, or call it with dry_run=true). "
        "Use get_flow_rows to read the (from, to, weight) rows of the application flow chart."
        "\n\n"
        "Refused operations are not errors: they return action='noop'."
    ),
)


def _with_store_path(args: dict, store_path: str | None) -> dict:
    if store_path is not None:
        args["store_path"] = store_path
    return args


@mcp.tool(
    name="add_entry",
    description=(
        "Start tracking a job application under a unique name. "
        "The application starts at 'Application submitted'. Adding an existing name is a noop."
    ),
)
def add_entry_tool(entry_name: str, store_path: str | None = None) -> dict:
    """
    Start tracking a job application.

    Args:
        entry_name: Unique application name (e.g. "Acme - Backend Engineer").
        store_path: Optional store path override (default: data/trackmyapp.db).

    Returns:
        {"entry_name": str, "action": "updated" | "noop", "success": true,
         "stages": [str], "warnings": [str]}
        or {"error": {"code", "message", "retryable"}}
    """
    return add_entry(_with_store_path({"entry_name": entry_name}, store_path))


@mcp.tool(
    name="has_entry",
    description="Check whether an application with the given name is already tracked.",
)
def has_entry_tool(entry_name: str, store_path: str | None = None) -> dict:
    """
    Check whether an application name is taken.

    Returns:
        {"entry_name": str, "exists": bool, "warnings": [str]}
    """
    return has_entry(_with_store_path({"entry_name": entry_name}, store_path))


@mcp.tool(
    name="list_entries",
    description=(
        "List tracked applications with their stage history, current stage, "
        "and whether they ended in Accepted/Rejected."
    ),
)
def list_entries_tool(store_path: str | None = None) -> dict:
    """
    List tracked applications in the order they were added.

    Returns:
        {"entries": [{"name", "stages", "current_stage", "is_closed"}],
         "count": int, "warnings": [str]}
    """
    return list_entries(_with_store_path({}, store_path))


@mcp.tool(
    name="delete_entry",
    description=(
        "Stop tracking an application and remove its transitions from the flow chart. "
        "Supports dry_run to preview. Deleting an unknown name is a noop."
    ),
)
def delete_entry_tool(entry_name: str, dry_run: bool = False, store_path: str | None = None) -> dict:
    """
    Delete an application.

    Args:
        entry_name: Application to delete.
        dry_run: Preview without writing (default: false).
        store_path: Optional store path override.

    Returns:
        {"entry_name": str, "action": "updated" | "would_update" | "noop",
         "success": true, "stages": [str], "warnings": [str]}
    """
    args = {"entry_name": entry_name, "dry_run": dry_run}
    return delete_entry(_with_store_path(args, store_path))


@mcp.tool(
    name="add_stage",
    description=(
        "Advance an application to a new stage (e.g. 'Phone screen', 'Onsite', 'Accepted'). "
        "Refused as noop for unknown applications, blank or repeated stages, "
        "and applications that already ended in Accepted/Rejected."
    ),
)
def add_stage_tool(entry_name: str, stage: str, store_path: str | None = None) -> dict:
    """
    Append a stage to an application.

    Args:
        entry_name: Application to advance.
        stage: Stage name; "accepted"/"rejected" map to the terminal stages.
        store_path: Optional store path override.
    """
    args = {"entry_name": entry_name, "stage": stage}
    return add_stage(_with_store_path(args, store_path))


@mcp.tool(
    name="edit_stage",
    description=(
        "Relabel the stage at a zero-based index of an application. "
        "Only fixes the label; flow chart counts are not adjusted."
    ),
)
def edit_stage_tool(entry_name: str, index: int, stage: str, store_path: str | None = None) -> dict:
    """
    Correct a stage label in place.

    Args:
        entry_name: Application to correct.
        index: Zero-based position of the stage to relabel.
        stage: New label.
        store_path: Optional store path override.
    """
    args = {"entry_name": entry_name, "index": index, "stage": stage}
    return edit_stage(_with_store_path(args, store_path))


@mcp.tool(
    name="delete_stage",
    description=(
        "Remove a stage from an application; the stages before and after it are joined "
        "in the flow chart. 'Application submitted' cannot be removed."
    ),
)
def delete_stage_tool(entry_name: str, stage: str, store_path: str | None = None) -> dict:
    """
    Remove a stage from an application.

    Args:
        entry_name: Application to correct.
        stage: Stage name to remove.
        store_path: Optional store path override.
    """
    args = {"entry_name": entry_name, "stage": stage}
    return delete_stage(_with_store_path(args, store_path))


@mcp.tool(
    name="get_flow_rows",
    description=(
        "Read the application flow chart as ordered (from, to, weight) rows, "
        "breadth-first from 'Application submitted'. "
        "Set include_chart_data to also get the rows with a From/To/Weight header."
    ),
)
def get_flow_rows_tool(include_chart_data: bool = False, store_path: str | None = None) -> dict:
    """
    Read the flow chart rows.

    Returns:
        {"rows": [{"source", "destination", "weight"}], "row_count": int,
         "has_data": bool, "chart_data": [[...]], "warnings": [str]}
    """
    args = {"include_chart_data": include_chart_data}
    return get_flow_rows(_with_store_path(args, store_path))


def main():
    """
    Main entry point for the MCP server.

    Runs the server in stdio mode, which is the standard transport
    for MCP servers that are invoked by LLM agents.
    """
    config.setup_logging()

    logger = logging.getLogger(__name__)
    logger.info("Starting TrackMyApp MCP Server")
    logger.info(f"Server name: {config.server_name}")
    logger.info(f"Store path: {config.store_path}")

    warnings = config.validate()
    for warning in warnings:
        logger.warning(warning)

    logger.info("Server starting in stdio mode")
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
