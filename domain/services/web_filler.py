from __future__ import annotations

from typing import Any, Sequence

from domain.errors import ConfigurationError, LinearizationError
from domain.graph import FillerGraph
from domain.models import Action, ExecutionContext, Jump, ProgressEvent
from domain.ports import ActionExecutorPort, DataFetch, LoggerPort, ProgressSink
from domain.services.preflight import preflight

RESULT_KEY = "summary_url"


class WebFiller:
    """Replays a linearized action list against one executor, in order."""

    def __init__(
        self,
        *,
        progress: ProgressSink | None = None,
        logger: LoggerPort | None = None,
    ) -> None:
        self._progress = progress
        self._logger = logger

    def prepare(
        self,
        graph: FillerGraph,
        fetch: DataFetch,
        *,
        pause_at: str | None = None,
    ) -> list[Action]:
        result = preflight(graph, fetch, pause_at=pause_at, logger=self._logger)
        if not result.ok:
            raise LinearizationError(result.invalid_fields)
        return result.actions

    async def run(
        self,
        actions: Sequence[Action],
        executor: ActionExecutorPort,
        context: ExecutionContext | None = None,
    ) -> Any:
        context = context if context is not None else ExecutionContext()
        total = len(actions)
        index = 0

        while index < total:
            action = actions[index]
            self._emit(index * 100 // total, _describe(action))
            if self._logger is not None:
                self._logger.info(
                    "action_started",
                    index=index,
                    name=action.name,
                    kind=action.kind.value,
                )
            try:
                jump = await executor.perform(action, context)
            except Exception as exc:
                if self._logger is not None:
                    self._logger.error(
                        "action_failed",
                        index=index,
                        name=action.name,
                        kind=action.kind.value,
                        error=str(exc),
                    )
                self._emit(
                    index * 100 // total,
                    {"action": action.kind.value, "name": action.name, "error": str(exc)},
                )
                raise

            if isinstance(jump, Jump):
                index = _find_action(actions, jump.target)
                if self._logger is not None:
                    self._logger.info("action_jump", target=jump.target, index=index)
            else:
                index += 1

        self._emit(100, {"action": "complete", "success": True})
        if self._logger is not None:
            self._logger.info("run_completed", actions=total)
        return context.get(RESULT_KEY)

    def _emit(self, progress: int, message: dict[str, Any]) -> None:
        if self._progress is not None:
            self._progress(ProgressEvent(progress=progress, message=message))


def _describe(action: Action) -> dict[str, Any]:
    return {
        "action": action.kind.value,
        "name": action.name,
        "selector": action.selector,
        "option": action.option,
        "value": action.value,
    }


def _find_action(actions: Sequence[Action], target: str) -> int:
    wanted = target.lower()
    for position, action in enumerate(actions):
        if action.name is not None and action.name.lower() == wanted:
            return position
    raise ConfigurationError(f"Jump target not found among actions: {target!r}")


__all__ = ["WebFiller", "RESULT_KEY"]
