#!/usr/bin/env python3
import argparse
import csv
import json
import sys
from pathlib import Path

# Make the server modules importable when run from a checkout
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "mcp-server-python"))

from config import get_config  # noqa: E402
from models.errors import ToolError  # noqa: E402
from utils.flow_traversal import FlowRowLimitExceeded, compute_flow_rows, to_chart_data  # noqa: E402
from utils.graph_session import read_graph  # noqa: E402


def log(message: str) -> None:
    print(message, file=sys.stderr, flush=True)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Print the application flow chart rows (From, To, Weight) from the store."
    )
    parser.add_argument(
        "--store",
        default=None,
        help="Store path (default: TRACKMYAPP_STORE or data/trackmyapp.db).",
    )
    parser.add_argument(
        "--key",
        default=None,
        help="Store key holding the graph (default: TRACKMYAPP_STORE_KEY or trackmyapp-graph).",
    )
    parser.add_argument(
        "--format",
        choices=("csv", "json"),
        default="csv",
        help="Output format (default: csv).",
    )
    parser.add_argument(
        "--no-header",
        action="store_true",
        help="Omit the From/To/Weight header row.",
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)

    try:
        graph, warnings = read_graph(store_path=args.store, key=args.key)
    except ToolError as e:
        log(f"error: {e.message}")
        return 1

    for warning in warnings:
        log(f"warning: {warning}")

    try:
        rows = compute_flow_rows(graph, max_rows=get_config().max_flow_rows)
    except FlowRowLimitExceeded as e:
        log(f"error: {e}")
        return 1

    data = [list(row) for row in rows] if args.no_header else to_chart_data(rows)

    if args.format == "json":
        json.dump(data, sys.stdout, ensure_ascii=False)
        sys.stdout.write("\n")
    else:
        writer = csv.writer(sys.stdout)
        writer.writerows(data)

    if not rows:
        log("No transitions yet. Add stages to an application to see the flow.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
