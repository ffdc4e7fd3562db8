from __future__ import annotations

import json
from pathlib import Path

import pytest

from domain.errors import ConfigurationError, UnknownNodeError
from domain.graph import FillerGraph, GraphCursor, advance, shift_ids
from domain.models import ActionKind
from test.fixtures import sample_graph_path


def _branching_graph() -> FillerGraph:
    graph = FillerGraph()
    graph.add_node(name="Start", is_entrance=True)
    graph.add_node(name="Province", action="branch", data="province")
    graph.add_node(name="Ontario")
    graph.add_node(name="Quebec")
    graph.add_node(name="Elsewhere")
    graph.add_transition(0, 1)
    graph.add_transition(1, 2, "ON")
    graph.add_transition(1, 4, "*")
    graph.add_transition(1, 3, "QC")
    return graph


def test_add_node_assigns_sequential_ids_and_coerces_action() -> None:
    graph = FillerGraph()
    first = graph.add_node(name="A", action="fill")
    second = graph.add_node(name="B", action="navigate")

    assert (first.id, second.id) == (0, 1)
    assert first.action is ActionKind.FILL
    assert second.action is ActionKind.GOTO
    assert graph.next_id == 2


def test_unknown_action_kind_is_a_configuration_error() -> None:
    with pytest.raises(ConfigurationError, match="Unknown action kind"):
        FillerGraph().add_node(name="A", action="teleport")


def test_add_transition_rejects_unknown_nodes() -> None:
    graph = FillerGraph()
    graph.add_node(name="A")

    with pytest.raises(UnknownNodeError):
        graph.add_transition(0, 7)


def test_advance_single_transition_is_unconditional() -> None:
    graph = _branching_graph()
    assert advance(graph, 0, "anything") == 1
    assert advance(graph, 0) == 1


def test_advance_exact_label_wins_over_wildcard() -> None:
    graph = _branching_graph()

    assert advance(graph, 1, "QC") == 3
    assert advance(graph, 1, "ON") == 2
    assert advance(graph, 1, "BC") == 4


def test_advance_without_match_or_wildcard_is_a_dead_end() -> None:
    graph = FillerGraph()
    graph.add_node(name="Q", action="branch", is_entrance=True)
    graph.add_node(name="Yes")
    graph.add_node(name="No")
    graph.add_transition(0, 1, "True")
    graph.add_transition(0, 2, "False")

    assert advance(graph, 0, True) == 1
    assert advance(graph, 0, False) == 2
    assert advance(graph, 0, "maybe") is None
    assert advance(graph, 2) is None


def test_advance_is_deterministic_for_the_same_inputs() -> None:
    graph = _branching_graph()
    assert {advance(graph, 1, "QC") for _ in range(10)} == {3}


def test_cursor_is_held_by_the_caller() -> None:
    graph = _branching_graph()
    one = GraphCursor(graph, graph.entrance().id)
    two = GraphCursor(graph, graph.entrance().id)

    one.advance()
    one.advance("QC")
    two.advance()

    assert one.node.name == "Quebec"
    assert two.node.name == "Province"
    assert one.advance() is None
    assert one.current is None


def test_find_by_name_and_get_raise_for_unknown_references() -> None:
    graph = _branching_graph()

    assert graph.find_by_name("Quebec").id == 3
    with pytest.raises(UnknownNodeError):
        graph.find_by_name("Yukon")
    with pytest.raises(UnknownNodeError):
        graph.get(42)


def test_entrance_is_required() -> None:
    graph = FillerGraph()
    graph.add_node(name="Lonely")

    with pytest.raises(ConfigurationError, match="no entrance"):
        graph.entrance()


def test_document_round_trip_keeps_fields_order_and_labels(tmp_path: Path) -> None:
    graph = _branching_graph()
    graph.nodes[2].fallback = "Elsewhere"
    target = tmp_path / "graph.json"

    graph.dump_to_json(target)
    restored = FillerGraph.restore_from_json(target)

    assert list(restored.nodes) == list(graph.nodes)
    assert [t.as_triple() for t in restored.get(1).transitions] == [
        [1, 2, "ON"],
        [1, 4, "*"],
        [1, 3, "QC"],
    ]
    assert restored.get(1).action is ActionKind.BRANCH
    assert restored.get(1).data == "province"
    assert restored.get(2).fallback == "Elsewhere"
    assert restored.entrance().name == "Start"
    assert restored.next_id == graph.next_id


def test_saved_document_uses_string_ids_and_triples(tmp_path: Path) -> None:
    target = tmp_path / "graph.json"
    _branching_graph().dump_to_json(target)

    document = json.loads(target.read_text())

    assert list(document["nodes"]) == ["0", "1", "2", "3", "4"]
    assert document["nodes"]["1"]["transitions"][0] == [1, 2, "ON"]
    assert document["nodes"]["1"]["action"] == "branch"
    assert "fallback" not in document["nodes"]["1"]


def test_patch_object_replaces_nodes_with_the_same_id() -> None:
    graph = FillerGraph.restore_from_json(sample_graph_path(), patch="quebec")
    plain = FillerGraph.restore_from_json(sample_graph_path())

    assert graph.get(2).selector == "#nom"
    assert plain.get(2).selector == "#name"
    assert len(graph) == len(plain)


def test_unknown_patch_name_is_ignored() -> None:
    graph = FillerGraph.restore_from_json(sample_graph_path(), patch="alberta")
    assert graph.get(2).selector == "#name"


def test_dangling_transition_rejects_the_document() -> None:
    document = {
        "nodes": {
            "0": {"name": "A", "is_entrance": True, "transitions": [[0, 9, None]]},
        }
    }
    with pytest.raises(ConfigurationError, match="unknown node 9"):
        FillerGraph.from_document(document)


def test_document_without_nodes_is_rejected() -> None:
    with pytest.raises(ConfigurationError):
        FillerGraph.from_document({"quebec": {}})


def test_shift_ids_opens_a_gap_and_rewrites_transitions() -> None:
    graph = _branching_graph()

    shifted = shift_ids(graph, from_id=2, by=3)

    assert sorted(shifted.nodes) == [0, 1, 5, 6, 7]
    assert [t.as_triple() for t in shifted.get(1).transitions] == [
        [1, 5, "ON"],
        [1, 7, "*"],
        [1, 6, "QC"],
    ]
    assert shifted.get(5).name == "Ontario"
    assert shifted.next_id == 8
    # the input graph is untouched
    assert sorted(graph.nodes) == [0, 1, 2, 3, 4]
