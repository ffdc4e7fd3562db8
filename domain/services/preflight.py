"""Linearizer: turns a workflow graph plus live data into a flat action list.

Walks from the entrance node, resolving branch discriminators, expanding
group nodes once per collection item and dropping optional steps without
data. Missing required data never produces a partial list: every invalid
field is collected and the result carries zero actions.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from domain.errors import ConfigurationError
from domain.graph import FillerGraph, GraphCursor
from domain.models import (
    VALUE_FREE_KINDS,
    Action,
    ActionKind,
    InvalidField,
    LinearizationResult,
    Node,
)
from domain.ports import DataFetch, LoggerPort
from domain.selectors import PLACEHOLDER, substitute

DEFAULT_MAX_STEPS = 100_000

_TOP_LEVEL = object()


@dataclass(frozen=True)
class _Scope:
    """Where node values come from: the data source, or the current group item."""

    item: Any = _TOP_LEVEL
    index: int | None = None
    is_last: bool = False

    @property
    def in_group(self) -> bool:
        return self.item is not _TOP_LEVEL


class Preflight:
    def __init__(
        self,
        graph: FillerGraph,
        fetch: DataFetch,
        *,
        pause_at: str | None = None,
        logger: LoggerPort | None = None,
        max_steps: int = DEFAULT_MAX_STEPS,
    ) -> None:
        self._graph = graph
        self._fetch = fetch
        self._pause_at = pause_at
        self._logger = logger
        self._max_steps = max_steps
        self._actions: list[Action] = []
        self._invalid: list[InvalidField] = []
        self._halted = False
        self._steps = 0

    def run(self) -> LinearizationResult:
        entrance = self._graph.entrance()
        self._walk(entrance.id, _Scope(), stop_at=None)

        if self._invalid:
            if self._logger is not None:
                self._logger.warning(
                    "preflight_failed",
                    invalid_fields=[list(item) for item in self._invalid],
                )
            return LinearizationResult(actions=[], invalid_fields=list(self._invalid))

        if self._logger is not None:
            self._logger.info("preflight_completed", actions=len(self._actions))
        return LinearizationResult(actions=list(self._actions))

    # -- walking ------------------------------------------------------------

    def _walk(self, start_id: int, scope: _Scope, stop_at: str | None) -> None:
        cursor = GraphCursor(self._graph, start_id)
        while not self._halted:
            node = cursor.node
            if node is None:
                return
            if stop_at is not None and node.name == stop_at:
                return
            self._count_step()

            if self._pause_at is not None and node.name == self._pause_at:
                self._actions.append(Action(node.name, ActionKind.PAUSE, None, None, None))
                self._halted = True
                return

            if node.action is ActionKind.BRANCH:
                self._branch(node, scope, cursor)
            elif node.action is ActionKind.GROUP:
                self._group(node, scope, cursor)
            else:
                self._ordinary(node, scope, cursor)

    def _branch(self, node: Node, scope: _Scope, cursor: GraphCursor) -> None:
        value, ok = self._resolve(node, scope)
        if not ok:
            self._halted = True
            return
        if _is_missing(value):
            if node.is_optional and node.fallback:
                cursor.set_current(self._graph.find_by_name(node.fallback).id)
                return
            if not node.is_optional:
                self._record(node)
                self._halted = True
                return
            self._advance(cursor, node, None, missing_ok=True)
            return
        self._advance(cursor, node, value, abort_on_dead_end=True)

    def _group(self, node: Node, scope: _Scope, cursor: GraphCursor) -> None:
        if not node.option:
            raise ConfigurationError(f"Group node {node.name!r} does not name its exit node")
        exit_node = self._graph.find_by_name(node.option)

        items, ok = self._resolve(node, scope)
        if not ok:
            cursor.set_current(exit_node.id)
            return
        if _is_missing(items):
            cursor.set_current(exit_node.id)
            return
        if isinstance(items, (str, bytes, Mapping)) or not isinstance(items, Sequence):
            self._record(node)
            cursor.set_current(exit_node.id)
            return
        if not node.transitions:
            raise ConfigurationError(f"Group node {node.name!r} has no loop body")

        body_start = node.transitions[0].target
        last = len(items) - 1
        for index, item in enumerate(items):
            self._walk(
                body_start,
                _Scope(item=item, index=index, is_last=index == last),
                stop_at=exit_node.name,
            )
            if self._halted:
                return
        cursor.set_current(exit_node.id)

    def _ordinary(self, node: Node, scope: _Scope, cursor: GraphCursor) -> None:
        if node.action is None:
            self._advance(cursor, node, None)
            return

        value, ok = self._resolve(node, scope)
        if not ok:
            self._advance(cursor, node, None)
            return

        if node.skip:
            # never emitted, but its value still picks the exit
            self._advance(cursor, node, value, missing_ok=_is_missing(value))
            return

        if _is_missing(value) and node.action not in VALUE_FREE_KINDS:
            if not node.is_optional:
                self._record(node)
            self._advance(cursor, node, None, missing_ok=node.is_optional)
            return

        if scope.in_group and scope.is_last and "skip_last" in node.option_tags():
            self._advance(cursor, node, value)
            return

        value = _normalize(value)
        selector = self._selector(node, value, scope)
        self._actions.append(Action(node.name, node.action, selector, node.option, value))
        self._advance(cursor, node, value)

    # -- helpers ------------------------------------------------------------

    def _resolve(self, node: Node, scope: _Scope) -> tuple[Any, bool]:
        key = node.data
        if node.action is ActionKind.GET or not isinstance(key, str):
            return key, True
        if scope.in_group:
            return _item_field(scope.item, key), True
        try:
            return self._fetch(key), True
        except Exception as exc:
            if self._logger is not None:
                self._logger.warning("preflight_fetch_failed", node=node.name, key=key, error=str(exc))
            self._record(node)
            return None, False

    def _selector(self, node: Node, value: Any, scope: _Scope) -> str | None:
        selector = node.selector
        if selector is None or PLACEHOLDER not in selector:
            return selector
        tags = node.option_tags()
        if scope.index is not None:
            if "index" in tags:
                return substitute(selector, scope.index)
            if "index1" in tags:
                return substitute(selector, scope.index + 1)
        if "yesno" in tags:
            return substitute(selector, _yes_no(value))
        if "value" in tags:
            return substitute(selector, value)
        return selector

    def _advance(
        self,
        cursor: GraphCursor,
        node: Node,
        value: Any,
        *,
        abort_on_dead_end: bool = False,
        missing_ok: bool = False,
    ) -> None:
        had_exits = bool(node.transitions)
        if cursor.advance(_label(value)) is not None or not had_exits:
            return
        if missing_ok:
            # nothing to route on: the fallback node, else the first exit
            if node.fallback:
                cursor.set_current(self._graph.find_by_name(node.fallback).id)
            else:
                cursor.set_current(node.transitions[0].target)
            return
        # dead branch: several exits and none matches the value
        self._record(node)
        if abort_on_dead_end or not node.is_optional:
            self._halted = True

    def _record(self, node: Node) -> None:
        entry = (node.name, node.data)
        if entry not in self._invalid:
            self._invalid.append(entry)

    def _count_step(self) -> None:
        self._steps += 1
        if self._steps > self._max_steps:
            raise ConfigurationError(
                f"Graph walk exceeded {self._max_steps} steps; check for a cycle without exit"
            )


def preflight(
    graph: FillerGraph,
    fetch: DataFetch,
    *,
    pause_at: str | None = None,
    logger: LoggerPort | None = None,
) -> LinearizationResult:
    return Preflight(graph, fetch, pause_at=pause_at, logger=logger).run()


def _item_field(item: Any, key: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(key)
    return getattr(item, key, None)


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (str, list, tuple, dict)):
        return len(value) == 0
    return False


def _normalize(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return value


def _label(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, (date, datetime)):
        return _normalize(value)
    return str(value)


def _yes_no(value: Any) -> str:
    if isinstance(value, bool):
        return "yes" if value else "no"
    return str(value).lower()


__all__ = ["Preflight", "preflight", "DEFAULT_MAX_STEPS"]
