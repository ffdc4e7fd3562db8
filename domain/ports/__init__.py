from __future__ import annotations

from abc import abstractmethod
from datetime import datetime
from typing import Any, Callable, Protocol, Sequence, runtime_checkable

from domain.models import (
    Action,
    AppConfig,
    CampaignConfig,
    CandidateRow,
    ExecutionContext,
    Jump,
    PortalCredentials,
    ProgressEvent,
    RunContext,
)

DataFetch = Callable[[str], Any]
"""Caller-supplied data source: ``fetch(key) -> value | None``."""

ProgressSink = Callable[[ProgressEvent], None]
"""Receives one event per executed action; UI layers render it."""

OptionResolver = Callable[[Sequence[str]], str]
"""Picks a select option when no label matches the wanted value."""


@runtime_checkable
class ActionExecutorPort(Protocol):
    """
    Performs one concrete action against a live browser page.

    Returns a :class:`Jump` when a read action asks the run loop to move to
    another action, ``None`` otherwise. Failures raise ``ActionFailedError``.
    """

    async def perform(self, action: Action, context: ExecutionContext) -> Jump | None:
        ...


@runtime_checkable
class JobPortalPort(Protocol):
    """Employer portal primitives used by the invitation campaign."""

    async def login(self, credentials: PortalCredentials) -> None:
        ...

    async def logout(self) -> None:
        ...

    async def open_job(self, job_id: str, items_per_page: int) -> None:
        ...

    async def sort_by_score(self) -> None:
        ...

    async def list_rows(self) -> Sequence[CandidateRow]:
        ...

    async def has_next_page(self) -> bool:
        ...

    async def next_page(self) -> None:
        ...

    async def invite(self, row: CandidateRow) -> None:
        ...


@runtime_checkable
class CampaignListenerPort(Protocol):
    """Progress callbacks at candidate, job and invite granularity."""

    def on_candidate(self, row_number: int, total_rows: int) -> None:
        ...

    def on_job_started(self, job_index: int, total_jobs: int, job_id: str) -> None:
        ...

    def on_job_completed(self, job_id: str, invited: int) -> None:
        ...


@runtime_checkable
class RemoteFileFetcherPort(Protocol):
    """Downloads a remote document (e.g. ``s3://bucket/key``) to a local path."""

    def fetch(self, uri: str) -> str:
        ...


@runtime_checkable
class ConfigProviderPort(Protocol):
    @abstractmethod
    def get_config(self) -> AppConfig:
        ...

    @abstractmethod
    def get_campaign(self) -> CampaignConfig:
        ...

    @abstractmethod
    def validate(self) -> list[str]:
        ...


@runtime_checkable
class DebugArtifactStorePort(Protocol):
    """Where screenshots of failed or debugged steps end up."""

    def ensure_run_directory(self, run_context: RunContext) -> str:
        ...

    def save_screenshot(
        self,
        run_context: RunContext,
        step_name: str,
        image_bytes: bytes,
    ) -> str:
        ...


@runtime_checkable
class ClockPort(Protocol):
    """Time source for deterministic and easily testable code."""

    def now(self) -> datetime:
        ...


@runtime_checkable
class IdGeneratorPort(Protocol):
    """Generation of identifiers for form runs and campaigns."""

    def new_run_id(self) -> str:
        ...


@runtime_checkable
class LoggerPort(Protocol):
    """Structured, testable logging abstraction."""

    def info(self, message: str, **fields: Any) -> None:
        ...

    def warning(self, message: str, **fields: Any) -> None:
        ...

    def error(self, message: str, **fields: Any) -> None:
        ...


__all__ = [
    "DataFetch",
    "ProgressSink",
    "OptionResolver",
    "ActionExecutorPort",
    "JobPortalPort",
    "CampaignListenerPort",
    "RemoteFileFetcherPort",
    "ConfigProviderPort",
    "DebugArtifactStorePort",
    "ClockPort",
    "IdGeneratorPort",
    "LoggerPort",
]
