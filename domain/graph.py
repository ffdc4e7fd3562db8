"""Workflow graph: nodes, labeled transitions and the JSON document codec.

The graph is plain data. Traversal state is never stored on it; callers hold
a :class:`GraphCursor` (or call :func:`advance` directly) so one graph can be
linearized by several runs at once.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterator, Mapping

from domain.errors import ConfigurationError, UnknownNodeError
from domain.models import ActionKind, Node, Transition

WILDCARD = "*"


class FillerGraph:
    def __init__(self) -> None:
        self.nodes: dict[int, Node] = {}
        self._id_counter = 0

    def __iter__(self) -> Iterator[Node]:
        return iter(self.nodes.values())

    def __len__(self) -> int:
        return len(self.nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.nodes

    @property
    def next_id(self) -> int:
        return self._id_counter

    def add_node(self, **fields: Any) -> Node:
        action = fields.pop("action", None)
        node = Node(id=self._id_counter, action=_coerce_action(action), **fields)
        self._insert(node)
        return node

    def add_transition(self, source_id: int, target_id: int, label: Any = None) -> Transition:
        if source_id not in self.nodes:
            raise UnknownNodeError(source_id)
        if target_id not in self.nodes:
            raise UnknownNodeError(target_id)
        transition = Transition(source_id, target_id, _label(label))
        self.nodes[source_id].transitions.append(transition)
        return transition

    def get(self, node_id: int) -> Node:
        try:
            return self.nodes[node_id]
        except KeyError:
            raise UnknownNodeError(node_id) from None

    def entrance(self) -> Node:
        for node in self.nodes.values():
            if node.is_entrance:
                return node
        raise ConfigurationError("Graph has no entrance node")

    def find_by_name(self, name: str) -> Node:
        for node in self.nodes.values():
            if node.name == name:
                return node
        raise UnknownNodeError(name)

    def validate(self) -> list[str]:
        """Return one message per transition pointing outside the graph."""
        errors: list[str] = []
        for node in self.nodes.values():
            for transition in node.transitions:
                if transition.target not in self.nodes:
                    errors.append(
                        f"Node {node.id} ({node.name}) has a transition to unknown node "
                        f"{transition.target}"
                    )
        return errors

    # -- serialization ------------------------------------------------------

    def to_document(self) -> dict[str, Any]:
        nodes: dict[str, Any] = {}
        for node in self.nodes.values():
            entry = {
                "name": node.name,
                "description": node.description,
                "data": node.data,
                "selector": node.selector,
                "option": node.option,
                "action": node.action.value if node.action else None,
                "is_entrance": node.is_entrance,
                "is_optional": node.is_optional,
                "skip": node.skip,
                "transitions": [t.as_triple() for t in node.transitions],
            }
            if node.fallback is not None:
                entry["fallback"] = node.fallback
            nodes[str(node.id)] = entry
        return {"nodes": nodes}

    @classmethod
    def from_document(
        cls,
        document: Mapping[str, Any],
        patch: str | None = None,
    ) -> "FillerGraph":
        if "nodes" not in document:
            raise ConfigurationError("Graph document has no 'nodes' object")
        nodes: dict[str, Any] = dict(document["nodes"])
        if patch and patch in document:
            nodes.update(document[patch])

        graph = cls()
        for raw_id, data in nodes.items():
            node_id = int(raw_id)
            node = Node(
                id=node_id,
                name=data.get("name"),
                description=data.get("description"),
                data=data.get("data"),
                selector=data.get("selector"),
                option=data.get("option"),
                action=_coerce_action(data.get("action")),
                is_entrance=bool(data.get("is_entrance", False)),
                is_optional=bool(data.get("is_optional", False)),
                skip=bool(data.get("skip", False)),
                fallback=data.get("fallback"),
                transitions=[
                    Transition(int(t[0]), int(t[1]), _label(t[2]) if len(t) > 2 else None)
                    for t in data.get("transitions") or []
                ],
            )
            graph._insert(node)

        dangling = graph.validate()
        if dangling:
            raise ConfigurationError("; ".join(dangling))
        return graph

    def dump_to_json(self, filename: str | Path) -> None:
        Path(filename).write_text(json.dumps(self.to_document(), indent=4), encoding="utf-8")

    @classmethod
    def restore_from_json(
        cls,
        filename: str | Path,
        patch: str | None = None,
    ) -> "FillerGraph":
        document = json.loads(Path(filename).read_text(encoding="utf-8"))
        return cls.from_document(document, patch=patch)

    def __str__(self) -> str:
        return "\n".join(
            f"{node.id}: {node.name} ({node.data}): "
            + ", ".join(str(t) for t in node.transitions)
            for node in self.nodes.values()
        )

    def _insert(self, node: Node) -> None:
        self.nodes[node.id] = node
        if node.id >= self._id_counter:
            self._id_counter = node.id + 1


def advance(graph: FillerGraph, current_id: int, label: Any = None) -> int | None:
    """Resolve the next node id from ``current_id`` for an observed ``label``.

    No transitions: terminal. One transition: followed unconditionally.
    Otherwise an exact label match wins over a wildcard; no match is a dead end.
    """
    node = graph.nodes.get(current_id)
    if node is None or not node.transitions:
        return None
    if len(node.transitions) == 1:
        return node.transitions[0].target

    wanted = _label(label)
    wildcard: int | None = None
    for transition in node.transitions:
        if transition.label == wanted:
            return transition.target
        if transition.label == WILDCARD and wildcard is None:
            wildcard = transition.target
    return wildcard


class GraphCursor:
    """Caller-held position inside a graph."""

    def __init__(self, graph: FillerGraph, start: int | None = None) -> None:
        self._graph = graph
        self.current: int | None = start

    @property
    def node(self) -> Node | None:
        if self.current is None:
            return None
        return self._graph.nodes.get(self.current)

    def set_current(self, node_id: int) -> Node:
        node = self._graph.get(node_id)
        self.current = node_id
        return node

    def advance(self, value: Any = None) -> Node | None:
        if self.current is None:
            return None
        self.current = advance(self._graph, self.current, value)
        return self.node


def shift_ids(graph: FillerGraph, from_id: int, by: int = 1) -> FillerGraph:
    """Return a copy with every id >= ``from_id`` moved up by ``by``.

    Used to open a gap for nodes inserted into an existing form graph.
    """
    id_map = {node_id: node_id + by for node_id in graph.nodes if node_id >= from_id}

    def remap(node_id: int) -> int:
        return id_map.get(node_id, node_id)

    shifted = FillerGraph()
    for node in graph.nodes.values():
        shifted._insert(
            Node(
                id=remap(node.id),
                name=node.name,
                description=node.description,
                data=node.data,
                selector=node.selector,
                option=node.option,
                action=node.action,
                is_entrance=node.is_entrance,
                is_optional=node.is_optional,
                skip=node.skip,
                fallback=node.fallback,
                transitions=[
                    Transition(remap(t.source), remap(t.target), t.label)
                    for t in node.transitions
                ],
            )
        )
    return shifted


def _coerce_action(action: Any) -> ActionKind | None:
    if action is None or action == "":
        return None
    if isinstance(action, ActionKind):
        return action
    try:
        return ActionKind(action)
    except ValueError:
        raise ConfigurationError(f"Unknown action kind: {action!r}") from None


def _label(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    return str(value)


__all__ = ["FillerGraph", "GraphCursor", "WILDCARD", "advance", "shift_ids"]
