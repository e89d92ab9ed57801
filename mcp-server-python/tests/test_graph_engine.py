"""
Unit tests for the graph mutation engine.

Covers each operation's guards and the edge-weight bookkeeping:
terminal lock, protected initial stage, rewiring around a deleted stage,
and cleanup when an entry is deleted.
"""

from collections import Counter

import pytest
from models.graph import Graph
from utils.graph_engine import GraphEngine, connect, disconnect

S = "Application submitted"


def edge_weights(graph: Graph) -> dict:
    """All edges as {(src, dst): weight}."""
    return {
        (key, dst): conn.weight
        for key, node in graph.nodes.items()
        for dst, conn in node.outs.items()
    }


def transition_counts(graph: Graph) -> Counter:
    """Adjacent stage pairs across all entries."""
    counts = Counter()
    for entry in graph.entries.values():
        counts.update(zip(entry.stages, entry.stages[1:]))
    return counts


@pytest.fixture
def engine():
    return GraphEngine(Graph.default())


def advance(engine: GraphEngine, entry_name: str, *stages: str) -> None:
    engine.add_entry(entry_name)
    for stage in stages:
        engine.add_stage_in_entry(stage, entry_name)


class TestConnectPrimitives:
    """Tests for connect/disconnect."""

    def test_connect_creates_edge_at_one(self, engine):
        connect(engine.graph, S, "A")
        conn = engine.graph.nodes[S].outs["A"]
        assert conn.node_key == "A"
        assert conn.weight == 1

    def test_connect_increments_existing_edge(self, engine):
        connect(engine.graph, S, "A")
        connect(engine.graph, S, "A")
        assert engine.graph.nodes[S].outs["A"].weight == 2

    def test_disconnect_decrements(self, engine):
        connect(engine.graph, S, "A")
        connect(engine.graph, S, "A")
        disconnect(engine.graph, S, "A")
        assert engine.graph.nodes[S].outs["A"].weight == 1

    def test_disconnect_removes_edge_at_zero(self, engine):
        connect(engine.graph, S, "A")
        disconnect(engine.graph, S, "A")
        assert "A" not in engine.graph.nodes[S].outs

    def test_disconnect_missing_edge_is_noop(self, engine):
        disconnect(engine.graph, S, "Nowhere")
        assert engine.graph.nodes[S].outs == {}

    def test_primitives_ignore_unknown_source(self, engine):
        connect(engine.graph, "Unknown", "A")
        disconnect(engine.graph, "Unknown", "A")
        assert "Unknown" not in engine.graph.nodes


class TestAddEntry:
    """Tests for add_entry and has_entry."""

    def test_add_entry_starts_at_initial_stage(self, engine):
        assert engine.add_entry("Acme") is True
        assert engine.graph.entries["Acme"].stages == [S]
        assert engine.has_entry("Acme") is True

    def test_add_entry_is_idempotent(self, engine):
        engine.add_entry("Acme")
        engine.add_stage_in_entry("Phone screen", "Acme")

        assert engine.add_entry("Acme") is False
        assert engine.graph.entries["Acme"].stages == [S, "Phone screen"]

    def test_has_entry_unknown(self, engine):
        assert engine.has_entry("Nobody") is False

    def test_list_entries_in_insertion_order(self, engine):
        for name in ["Beta", "Alpha", "Gamma"]:
            engine.add_entry(name)
        assert [entry.name for entry in engine.list_entries()] == ["Beta", "Alpha", "Gamma"]

    def test_default_engine_graph(self):
        engine = GraphEngine()
        assert engine.graph == Graph.default()


class TestAddStageInEntry:
    """Tests for add_stage_in_entry."""

    def test_appends_and_counts_transition(self, engine):
        engine.add_entry("Acme")
        assert engine.add_stage_in_entry("Phone screen", "Acme") is True

        assert engine.graph.entries["Acme"].stages == [S, "Phone screen"]
        assert engine.graph.nodes["Phone screen"].outs == {}
        assert edge_weights(engine.graph) == {(S, "Phone screen"): 1}

    def test_shared_transition_accumulates_weight(self, engine):
        advance(engine, "Acme", "Phone screen")
        advance(engine, "Globex", "Phone screen")
        assert edge_weights(engine.graph) == {(S, "Phone screen"): 2}

    def test_unknown_entry_is_noop(self, engine):
        assert engine.add_stage_in_entry("Phone screen", "Nobody") is False
        assert "Phone screen" not in engine.graph.nodes

    @pytest.mark.parametrize("stage", ["", "   "])
    def test_blank_stage_is_noop(self, engine, stage):
        engine.add_entry("Acme")
        assert engine.add_stage_in_entry(stage, "Acme") is False
        assert engine.graph.entries["Acme"].stages == [S]
        assert stage not in engine.graph.nodes

    def test_self_transition_is_noop(self, engine):
        advance(engine, "Acme", "Phone screen")
        assert engine.add_stage_in_entry("Phone screen", "Acme") is False
        assert engine.graph.entries["Acme"].stages == [S, "Phone screen"]
        assert edge_weights(engine.graph) == {(S, "Phone screen"): 1}

    def test_initial_stage_cannot_follow_itself(self, engine):
        engine.add_entry("Acme")
        assert engine.add_stage_in_entry(S, "Acme") is False
        assert engine.graph.entries["Acme"].stages == [S]

    @pytest.mark.parametrize("terminal", ["Accepted", "Rejected"])
    def test_terminal_lock(self, engine, terminal):
        """Test that nothing can follow Accepted or Rejected."""
        advance(engine, "Acme", "Onsite", terminal)
        stages_before = list(engine.graph.entries["Acme"].stages)
        weights_before = edge_weights(engine.graph)

        for stage in ["Offer", "Rejected", "Accepted", "Onsite"]:
            assert engine.add_stage_in_entry(stage, "Acme") is False

        assert engine.graph.entries["Acme"].stages == stages_before
        assert edge_weights(engine.graph) == weights_before

    def test_refused_stage_still_creates_node(self, engine):
        """Test that the node is created before the terminal guard runs."""
        advance(engine, "Acme", "Rejected")
        engine.add_stage_in_entry("Ghosted", "Acme")
        assert "Ghosted" in engine.graph.nodes
        assert engine.graph.nodes["Ghosted"].outs == {}

    def test_stage_names_are_case_sensitive(self, engine):
        advance(engine, "Acme", "accepted", "Onsite")
        assert engine.graph.entries["Acme"].stages == [S, "accepted", "Onsite"]

    def test_empty_stage_list_falls_back_to_start(self, engine):
        engine.add_entry("Acme")
        engine.graph.entries["Acme"].stages = []
        assert engine.add_stage_in_entry("Phone screen", "Acme") is True
        assert engine.graph.entries["Acme"].stages == ["Phone screen"]
        assert edge_weights(engine.graph) == {(S, "Phone screen"): 1}


class TestEditStageInEntry:
    """Tests for edit_stage_in_entry."""

    def test_relabels_without_touching_edges(self, engine):
        advance(engine, "Acme", "Phone screen")
        weights_before = edge_weights(engine.graph)

        assert engine.edit_stage_in_entry(1, "Phone interview", "Acme") is True

        assert engine.graph.entries["Acme"].stages == [S, "Phone interview"]
        assert edge_weights(engine.graph) == weights_before
        assert "Phone interview" not in engine.graph.nodes

    def test_index_out_of_range_is_noop(self, engine):
        advance(engine, "Acme", "Phone screen")
        assert engine.edit_stage_in_entry(2, "Onsite", "Acme") is False
        assert engine.graph.entries["Acme"].stages == [S, "Phone screen"]

    def test_negative_index_is_noop(self, engine):
        advance(engine, "Acme", "Phone screen")
        assert engine.edit_stage_in_entry(-1, "Onsite", "Acme") is False
        assert engine.graph.entries["Acme"].stages == [S, "Phone screen"]

    def test_blank_stage_is_noop(self, engine):
        advance(engine, "Acme", "Phone screen")
        assert engine.edit_stage_in_entry(1, "", "Acme") is False

    def test_unknown_entry_is_noop(self, engine):
        assert engine.edit_stage_in_entry(0, "Onsite", "Nobody") is False


class TestDeleteStageInEntry:
    """Tests for delete_stage_in_entry."""

    def test_rewires_around_middle_stage(self, engine):
        """Test [S, A, B, C] minus B gives [S, A, C] with A -> C."""
        advance(engine, "Acme", "A", "B", "C")

        assert engine.delete_stage_in_entry("B", "Acme") is True

        assert engine.graph.entries["Acme"].stages == [S, "A", "C"]
        assert edge_weights(engine.graph) == {(S, "A"): 1, ("A", "C"): 1}

    def test_rewire_decrements_shared_edges(self, engine):
        advance(engine, "Acme", "A", "B", "C")
        advance(engine, "Globex", "A", "B", "C")
        advance(engine, "Initech", "A", "C")

        engine.delete_stage_in_entry("B", "Acme")

        assert edge_weights(engine.graph) == {
            (S, "A"): 3,
            ("A", "B"): 1,
            ("B", "C"): 1,
            ("A", "C"): 2,
        }

    def test_delete_last_stage(self, engine):
        advance(engine, "Acme", "A", "B")

        assert engine.delete_stage_in_entry("B", "Acme") is True

        assert engine.graph.entries["Acme"].stages == [S, "A"]
        assert edge_weights(engine.graph) == {(S, "A"): 1}
        assert "B" in engine.graph.nodes

    def test_delete_terminal_stage_unlocks_entry(self, engine):
        advance(engine, "Acme", "Onsite", "Rejected")
        engine.delete_stage_in_entry("Rejected", "Acme")

        assert engine.add_stage_in_entry("Offer", "Acme") is True
        assert engine.graph.entries["Acme"].stages == [S, "Onsite", "Offer"]

    def test_initial_stage_is_protected(self, engine):
        advance(engine, "Acme", "A")
        assert engine.delete_stage_in_entry(S, "Acme") is False
        assert engine.graph.entries["Acme"].stages == [S, "A"]
        assert edge_weights(engine.graph) == {(S, "A"): 1}

    def test_unknown_entry_is_noop(self, engine):
        advance(engine, "Acme", "A")
        assert engine.delete_stage_in_entry("A", "Nobody") is False

    def test_unknown_node_is_noop(self, engine):
        advance(engine, "Acme", "A")
        assert engine.delete_stage_in_entry("Never seen", "Acme") is False

    def test_stage_not_in_entry_is_noop(self, engine):
        advance(engine, "Acme", "A")
        advance(engine, "Globex", "B")
        weights_before = edge_weights(engine.graph)

        assert engine.delete_stage_in_entry("B", "Acme") is False
        assert edge_weights(engine.graph) == weights_before

    def test_only_touches_the_given_entry(self, engine):
        advance(engine, "Acme", "A", "B")
        advance(engine, "Globex", "A", "B")

        engine.delete_stage_in_entry("B", "Acme")

        assert engine.graph.entries["Globex"].stages == [S, "A", "B"]
        assert edge_weights(engine.graph) == {(S, "A"): 2, ("A", "B"): 1}

    def test_weights_match_transitions_after_rewire(self, engine):
        advance(engine, "Acme", "A", "B", "C", "Accepted")
        advance(engine, "Globex", "A", "C")
        engine.delete_stage_in_entry("B", "Acme")
        engine.delete_stage_in_entry("C", "Acme")

        assert edge_weights(engine.graph) == dict(transition_counts(engine.graph))


class TestDeleteEntry:
    """Tests for delete_entry."""

    def test_removes_entry_and_its_edges(self, engine):
        advance(engine, "Acme", "A", "B")

        assert engine.delete_entry("Acme") is True

        assert "Acme" not in engine.graph.entries
        assert edge_weights(engine.graph) == {}

    def test_keeps_nodes(self, engine):
        """Test that orphan nodes stay after their edges are gone."""
        advance(engine, "Acme", "A", "B")
        engine.delete_entry("Acme")
        assert set(engine.graph.nodes) == {S, "A", "B"}

    def test_decrements_shared_edges(self, engine):
        advance(engine, "Acme", "A", "B")
        advance(engine, "Globex", "A")

        engine.delete_entry("Acme")

        assert edge_weights(engine.graph) == {(S, "A"): 1}

    def test_unknown_entry_is_noop(self, engine):
        advance(engine, "Acme", "A")
        assert engine.delete_entry("Nobody") is False
        assert edge_weights(engine.graph) == {(S, "A"): 1}

    def test_entry_with_only_initial_stage(self, engine):
        engine.add_entry("Acme")
        assert engine.delete_entry("Acme") is True
        assert engine.graph.entries == {}

    def test_name_can_be_reused(self, engine):
        advance(engine, "Acme", "A")
        engine.delete_entry("Acme")
        assert engine.add_entry("Acme") is True
        assert engine.graph.entries["Acme"].stages == [S]
