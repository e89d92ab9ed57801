"""
Flow traversal for the stage-flow chart.

Linearizes the graph into ``(from, to, weight)`` rows by walking outward
from the start nodes breadth-first. The walk keeps no visited set: a node
reached along several paths is expanded once per path and its outgoing
edges are emitted each time. Per-entry paths only merge on shared prefixes,
so this does not happen in normal use, but a cyclic graph would never
terminate. ``max_rows`` bounds the walk for callers that cannot afford that.

Also provides the reachability sweep used to drop orphan nodes before
saving, which is opt-in.
"""

import itertools
import logging
from typing import Iterable, List, NamedTuple, Optional, Set

from models.graph import Graph, Node
from utils.queue import Queue

logger = logging.getLogger(__name__)

CHART_HEADER = ["From", "To", "Weight"]


class FlowRow(NamedTuple):
    """One weighted transition as fed to the chart."""

    source: str
    destination: str
    weight: int


class FlowRowLimitExceeded(Exception):
    """Raised when the traversal emits more rows than allowed."""

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(
            f"Flow traversal exceeded {limit} rows; the stage graph probably contains a cycle"
        )


def compute_flow_rows(graph: Graph, max_rows: Optional[int] = None) -> List[FlowRow]:
    """
    Walk the graph breadth-first from ``graph.starts`` and emit flow rows.

    Rows come out in stable breadth-first order: start nodes in ``starts``
    order, outgoing edges in insertion order. Start keys and destinations
    missing from ``graph.nodes`` are skipped.

    Args:
        graph: Graph to read (not modified)
        max_rows: Optional upper bound on emitted rows; None means unbounded

    Returns:
        Ordered list of FlowRow

    Raises:
        FlowRowLimitExceeded: If more than ``max_rows`` rows would be emitted

    Examples:
        >>> graph = Graph.default()
        >>> compute_flow_rows(graph)
        []
    """
    rows: List[FlowRow] = []
    queue: Queue[Node] = Queue()
    for key in graph.starts:
        node = graph.nodes.get(key)
        if node is not None:
            queue.enqueue(node)

    while not queue.is_empty:
        current = queue.dequeue()
        for connection in current.outs.values():
            rows.append(FlowRow(current.key, connection.node_key, connection.weight))
            if max_rows is not None and len(rows) > max_rows:
                raise FlowRowLimitExceeded(max_rows)
            destination = graph.nodes.get(connection.node_key)
            if destination is not None:
                queue.enqueue(destination)

    return rows


def to_chart_data(rows: List[FlowRow]) -> list:
    """Prefix rows with the header row the Sankey renderer expects."""
    return [list(CHART_HEADER)] + [list(row) for row in rows]


def find_reachable_keys(graph: Graph, extra_roots: Iterable[str] = ()) -> Set[str]:
    """Keys of every node reachable from ``graph.starts`` and ``extra_roots``, roots included."""
    reachable: Set[str] = set()
    queue: Queue[str] = Queue()
    for key in itertools.chain(graph.starts, extra_roots):
        if key in graph.nodes and key not in reachable:
            reachable.add(key)
            queue.enqueue(key)

    while not queue.is_empty:
        key = queue.dequeue()
        for destination in graph.nodes[key].outs:
            if destination in graph.nodes and destination not in reachable:
                reachable.add(destination)
                queue.enqueue(destination)

    return reachable


def prune_unreachable_nodes(graph: Graph) -> List[str]:
    """
    Remove nodes unreachable from the starts and not used by any entry.

    Stage names still listed in some entry, and anything they lead to, are
    kept even when unreachable from the starts, since ``edit_stage_in_entry``
    can leave such names cut off from the rest of the graph.

    Returns:
        Sorted keys of the removed nodes
    """
    entry_stages = [key for entry in graph.entries.values() for key in entry.stages]
    keep = find_reachable_keys(graph, extra_roots=entry_stages)

    removed = sorted(key for key in graph.nodes if key not in keep)
    for key in removed:
        del graph.nodes[key]

    if removed:
        logger.info(f"Pruned {len(removed)} unreachable node(s): {', '.join(removed)}")
    return removed
