"""
Mutation engine for the stage-flow graph.

Every state change to a ``Graph`` goes through ``GraphEngine``. The engine
keeps edge weights equal to the number of entries currently making each
consecutive stage transition:

- add_stage_in_entry connects the entry's last stage to the new one
- delete_stage_in_entry removes the edges around the stage and bridges its
  neighbours so the entry's path stays connected
- delete_entry removes every edge the entry contributed to

Guard violations (unknown entry, blank stage, self transition, advancing
past a terminal stage, deleting the initial stage) are silent no-ops. Each
mutator returns True when the graph changed and False otherwise.

Nodes are never removed here, even when no edge references them anymore.
"""

import logging
from typing import List, Optional

from models.graph import Connection, Entry, Graph, Node
from models.stages import INITIAL_STAGE, is_terminal_stage

logger = logging.getLogger(__name__)


def connect(graph: Graph, src: str, dst: str) -> None:
    """Increment the weight of edge ``src -> dst``, creating it at 1."""
    node = graph.nodes.get(src)
    if node is None:
        return
    conn = node.outs.get(dst)
    if conn is not None:
        conn.weight += 1
    else:
        node.outs[dst] = Connection(node_key=dst, weight=1)


def disconnect(graph: Graph, src: str, dst: str) -> None:
    """Decrement the weight of edge ``src -> dst``; drop the edge at zero."""
    node = graph.nodes.get(src)
    if node is None:
        return
    conn = node.outs.get(dst)
    if conn is None:
        return
    if conn.weight <= 1:
        del node.outs[dst]
    else:
        conn.weight -= 1


def _is_blank(stage: str) -> bool:
    return not stage or not stage.strip()


class GraphEngine:
    """
    Owner of one mutable ``Graph``.

    Usage:
        engine = GraphEngine(Graph.default())
        engine.add_entry("Acme")
        engine.add_stage_in_entry("Phone screen", "Acme")
        engine.graph  # updated in place
    """

    def __init__(self, graph: Optional[Graph] = None):
        self.graph = graph if graph is not None else Graph.default()

    @property
    def start_key(self) -> str:
        if self.graph.starts:
            return self.graph.starts[0]
        return INITIAL_STAGE

    def has_entry(self, name: str) -> bool:
        return name in self.graph.entries

    def get_entry(self, name: str) -> Optional[Entry]:
        return self.graph.entries.get(name)

    def list_entries(self) -> List[Entry]:
        return list(self.graph.entries.values())

    def add_entry(self, name: str) -> bool:
        if name in self.graph.entries:
            logger.debug(f"Entry already exists: {name}")
            return False
        self.graph.entries[name] = Entry(name=name, stages=[INITIAL_STAGE])
        logger.debug(f"Added entry: {name}")
        return True

    def add_stage_in_entry(self, stage: str, entry_name: str) -> bool:
        """
        Append ``stage`` to an entry and count the transition into it.

        The stage's node is created even when the transition itself is then
        refused, so a refused stage name still becomes a known node.
        """
        entry = self.graph.entries.get(entry_name)
        if entry is None or _is_blank(stage):
            return False

        if stage not in self.graph.nodes:
            self.graph.nodes[stage] = Node(key=stage)

        last_key = entry.stages[-1] if entry.stages else self.start_key
        if last_key == stage or is_terminal_stage(last_key):
            logger.debug(f"Refused transition {last_key!r} -> {stage!r} for entry {entry_name}")
            return False

        if last_key not in self.graph.nodes:
            self.graph.nodes[last_key] = Node(key=last_key)

        connect(self.graph, last_key, stage)
        entry.stages.append(stage)
        logger.debug(f"Entry {entry_name}: {last_key!r} -> {stage!r}")
        return True

    def edit_stage_in_entry(self, index: int, stage: str, entry_name: str) -> bool:
        """
        Overwrite the stage label at ``index`` without touching edges.

        This is a narrow correction primitive: edge weights are left as they
        were, so the edited entry no longer matches the edge counts until its
        stages are deleted and re-added.
        """
        entry = self.graph.entries.get(entry_name)
        if entry is None or _is_blank(stage):
            return False
        if index < 0 or index >= len(entry.stages):
            return False
        entry.stages[index] = stage
        logger.debug(f"Entry {entry_name}: stage {index} relabelled to {stage!r}")
        return True

    def delete_stage_in_entry(self, stage: str, entry_name: str) -> bool:
        """
        Remove ``stage`` from an entry and bridge its neighbours.

        With stages ``[S, A, B, C]``, deleting ``B`` disconnects ``A -> B``
        and ``B -> C`` and connects ``A -> C``. The initial stage is
        protected.
        """
        if stage == INITIAL_STAGE:
            return False

        entry = self.graph.entries.get(entry_name)
        if entry is None or stage not in self.graph.nodes:
            return False

        try:
            i = entry.stages.index(stage)
        except ValueError:
            return False

        prev_key = entry.stages[i - 1] if i > 0 else None
        next_key = entry.stages[i + 1] if i + 1 < len(entry.stages) else None

        if prev_key is not None:
            disconnect(self.graph, prev_key, stage)
        if next_key is not None:
            disconnect(self.graph, stage, next_key)
        if prev_key is not None and next_key is not None:
            connect(self.graph, prev_key, next_key)

        entry.stages = [key for key in entry.stages if key != stage]
        logger.debug(f"Entry {entry_name}: removed stage {stage!r}")
        return True

    def delete_entry(self, entry_name: str) -> bool:
        entry = self.graph.entries.get(entry_name)
        if entry is None:
            return False
        for prev_key, key in zip(entry.stages, entry.stages[1:]):
            disconnect(self.graph, prev_key, key)
        del self.graph.entries[entry_name]
        logger.debug(f"Deleted entry: {entry_name}")
        return True
