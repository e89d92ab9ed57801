"""
Stage-flow graph data model.

The same pydantic models serve as the in-memory graph and as the schema the
persisted JSON document is validated against. Field names are snake_case in
Python; the persisted layout uses the camelCase aliases (``nodeKey``), so
always dump with ``by_alias=True``.

Validation is strict and rejects unknown fields: a stored document with a
negative or non-integer weight, a non-string key, or an unexpected shape is
refused as a whole. Zero-weight edges are accepted but dropped.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, model_validator

from models.stages import INITIAL_STAGE


class GraphModel(BaseModel):
    """Base for graph entities: no unknown fields."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)


class Connection(GraphModel):
    """Weighted directed edge to ``node_key``.

    Stored weights only need to be non-negative; the mutation engine keeps
    every live edge at weight >= 1 and removes edges that would reach 0.
    """

    node_key: StrictStr = Field(alias="nodeKey")
    weight: StrictInt = Field(ge=0)


class Node(GraphModel):
    """A stage name and its outgoing edges keyed by destination.

    Zero-weight edges in a stored document are dropped on validation, so a
    loaded graph only holds live edges.
    """

    key: StrictStr
    outs: dict[StrictStr, Connection] = Field(default_factory=dict)

    @model_validator(mode="after")
    def drop_spent_edges(self) -> "Node":
        self.outs = {dst: conn for dst, conn in self.outs.items() if conn.weight > 0}
        return self


class Entry(GraphModel):
    """One tracked application and the stages it has passed through."""

    name: StrictStr
    stages: list[StrictStr]


class Graph(GraphModel):
    """Aggregate of all nodes, traversal roots and entries."""

    nodes: dict[StrictStr, Node]
    starts: list[StrictStr]
    entries: dict[StrictStr, Entry]

    @classmethod
    def default(cls) -> "Graph":
        """Graph with only the initial stage node and no entries."""
        return cls(
            nodes={INITIAL_STAGE: Node(key=INITIAL_STAGE)},
            starts=[INITIAL_STAGE],
            entries={},
        )

    def to_document(self) -> dict:
        """Plain dict in the persisted layout."""
        return self.model_dump(by_alias=True)

    def to_json(self) -> str:
        """JSON string in the persisted layout."""
        return self.model_dump_json(by_alias=True)
