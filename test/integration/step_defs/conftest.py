"""Shared fixtures and context for BDD step definitions."""
from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

import pytest

from app import ApplicationFacade
from domain.graph import FillerGraph
from domain.models import (
    Action,
    AppConfig,
    CampaignConfig,
    CampaignSummary,
    FormRunResult,
    JobTarget,
    PortalCredentials,
)
from domain.services import RetryPolicy
from infra.data import JsonDataSource
from test.mocks import (
    FakeCandidate,
    FakeJobPortal,
    FakeSessionFactory,
    FixedClock,
    InMemoryConfigProvider,
    InMemoryDebugArtifactStore,
    InMemoryLogger,
    ScriptedActionExecutor,
    SequentialIdGenerator,
)


@dataclass
class FormContext:
    """Holds mutable state shared across form filling steps."""

    graph: FillerGraph | None = None
    data: dict[str, Any] = field(default_factory=dict)
    executor: ScriptedActionExecutor = field(default_factory=ScriptedActionExecutor)
    sessions: FakeSessionFactory = field(default_factory=FakeSessionFactory)
    result: FormRunResult | None = None
    preview: list[Action] = field(default_factory=list)


@dataclass
class CampaignContext:
    """Holds mutable state shared across invitation campaign steps."""

    credentials: PortalCredentials | None = None
    portal: FakeJobPortal = field(default_factory=FakeJobPortal)
    jobs: list[JobTarget] = field(default_factory=list)
    sessions: FakeSessionFactory = field(default_factory=FakeSessionFactory)
    summary: CampaignSummary | None = None

    def add_job(self, job_id: str, scores: list[float], minimum_score: float) -> None:
        self.portal.jobs[job_id] = [[FakeCandidate(score) for score in scores]]
        self.jobs.append(JobTarget(job_id, minimum_score=minimum_score))


@pytest.fixture()
def form_ctx() -> FormContext:
    return FormContext()


@pytest.fixture()
def campaign_ctx() -> CampaignContext:
    return CampaignContext()


def build_facade(
    *,
    executor: ScriptedActionExecutor | None = None,
    sessions: FakeSessionFactory | None = None,
    portal: FakeJobPortal | None = None,
) -> ApplicationFacade:
    scripted = executor or ScriptedActionExecutor()
    return ApplicationFacade(
        config_provider=InMemoryConfigProvider(config=AppConfig()),
        logger=InMemoryLogger(),
        clock=FixedClock(datetime(2025, 6, 1, tzinfo=timezone.utc)),
        id_generator=SequentialIdGenerator(),
        artifact_store=InMemoryDebugArtifactStore(),
        session_factory=sessions or FakeSessionFactory(),
        executor_factory=lambda page, run_context, config: scripted,
        portal_factory=lambda page, config: portal or FakeJobPortal(),
        retry_policy=RetryPolicy(min_delay=0, max_delay=0),
    )


def run_fill(ctx: FormContext, pause_at: str | None = None) -> None:
    """Execute a form fill synchronously for tests."""
    facade = build_facade(executor=ctx.executor, sessions=ctx.sessions)
    ctx.result = asyncio.run(
        facade.fill_form(ctx.graph, JsonDataSource(ctx.data), pause_at=pause_at)  # type: ignore[arg-type]
    )


def run_campaign(ctx: CampaignContext, jobs: list[JobTarget] | None = None) -> None:
    facade = build_facade(sessions=ctx.sessions, portal=ctx.portal)
    campaign = CampaignConfig(
        credentials=ctx.credentials or PortalCredentials(username=None, password=None),
        jobs=tuple(jobs if jobs is not None else ctx.jobs),
    )
    ctx.summary = asyncio.run(facade.invite_candidates(campaign))
