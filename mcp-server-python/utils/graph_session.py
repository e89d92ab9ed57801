"""
Load -> mutate -> save cycle shared by the mutation tools.

Each tool call runs one engine operation inside one store transaction. The
graph is written back only when the operation changed it, so a stored
document that failed validation stays untouched until a real change
replaces it with the default-based graph.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from config import get_config
from db.graph_store import GraphStore, graph_from_load_result, resolve_store_path
from models.graph import Graph
from utils.flow_traversal import prune_unreachable_nodes
from utils.graph_engine import GraphEngine

logger = logging.getLogger(__name__)


@dataclass
class MutationOutcome:
    """What one mutation did and the engine it ran on."""

    changed: bool
    engine: GraphEngine
    warnings: List[str] = field(default_factory=list)


def apply_mutation(
    mutate: Callable[[GraphEngine], bool],
    store_path: Optional[str] = None,
    key: Optional[str] = None,
    dry_run: bool = False,
) -> MutationOutcome:
    """
    Run ``mutate`` against the stored graph and persist the result.

    Args:
        mutate: Engine operation returning True when it changed the graph
        store_path: Optional store path override
        key: Store key; defaults to the configured key
        dry_run: Run the operation but never write

    Returns:
        MutationOutcome with the change flag, engine and load warnings

    Raises:
        ToolError: If the store cannot be opened, read or written
    """
    config = get_config()
    key = key or config.store_key

    with GraphStore(store_path, key) as store:
        graph, warnings = graph_from_load_result(store.load())
        engine = GraphEngine(graph)
        changed = mutate(engine)

        if changed and not dry_run:
            if config.prune_orphans:
                prune_unreachable_nodes(engine.graph)
            store.save(engine.graph)
            store.commit()
            logger.info(f"Saved graph under key {key!r}")

    return MutationOutcome(changed=changed, engine=engine, warnings=warnings)


def read_graph(store_path: Optional[str] = None, key: Optional[str] = None) -> tuple[Graph, List[str]]:
    """
    Load the stored graph read-only, falling back to the default graph.

    A store file that does not exist yet reads as the default graph and is
    not created.
    """
    key = key or get_config().store_key
    if not resolve_store_path(store_path).exists():
        return Graph.default(), []
    with GraphStore(store_path, key) as store:
        result = store.load()
    return graph_from_load_result(result)
