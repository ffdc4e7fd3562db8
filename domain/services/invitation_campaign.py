"""Invitation campaign: log in once, invite qualifying candidates for N jobs.

The portal port supplies page-level primitives; everything that decides
*who* gets invited and *when to give up* lives here so it can be tested
without a browser.
"""

from __future__ import annotations

import asyncio
import random
import re
from dataclasses import dataclass
from typing import Awaitable, Callable, Sequence, TypeVar

from domain.errors import CampaignError, ConfigurationError, JobNotFoundError
from domain.models import (
    CampaignState,
    CampaignSummary,
    CandidateRow,
    JobOutcome,
    JobOutcomeStatus,
    JobTarget,
    PortalCredentials,
)
from domain.ports import CampaignListenerPort, JobPortalPort, LoggerPort

T = TypeVar("T")

NOT_INVITED_STATUS = "Not invited to apply"

_SCORE = re.compile(r"(\d+(?:\.\d+)?) out of 5")

_PERMANENT_MARKERS = (
    "password or username is incorrect",
    "missing",
    "credential",
    "configuration",
    "404",
    "not found",
    "pending",
    "security question",
)


def classify_failure(message: str) -> bool:
    """Return True when a failure message describes a permanent condition."""
    lowered = message.lower()
    return any(marker in lowered for marker in _PERMANENT_MARKERS)


def parse_score(score_text: str) -> float:
    match = _SCORE.search(score_text or "")
    return float(match.group(1)) if match else 0.0


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry with a random pause between attempts."""

    max_attempts: int = 2
    min_delay: float = 1.0
    max_delay: float = 5.0

    async def wait(self) -> None:
        await asyncio.sleep(random.uniform(self.min_delay, self.max_delay))


class NullCampaignListener:
    def on_candidate(self, row_number: int, total_rows: int) -> None:
        return None

    def on_job_started(self, job_index: int, total_jobs: int, job_id: str) -> None:
        return None

    def on_job_completed(self, job_id: str, invited: int) -> None:
        return None


class InvitationCampaignRunner:
    def __init__(
        self,
        *,
        portal: JobPortalPort,
        logger: LoggerPort,
        listener: CampaignListenerPort | None = None,
        retry_policy: RetryPolicy | None = None,
        items_per_page: int = 100,
    ) -> None:
        self._portal = portal
        self._logger = logger
        self._listener = listener or NullCampaignListener()
        self._retry = retry_policy or RetryPolicy()
        self._items_per_page = items_per_page
        self.state = CampaignState.LOGGED_OUT
        self._errors: list[str] = []
        self._log: list[str] = []

    async def run(
        self,
        credentials: PortalCredentials,
        jobs: Sequence[JobTarget],
    ) -> CampaignSummary:
        require_credentials(credentials)
        self._errors = []
        self._log = []

        self._set_state(CampaignState.LOGGING_IN)
        try:
            await self._with_retry("login", lambda: self._portal.login(credentials))
        except CampaignError as exc:
            self._record_error(str(exc))
            self._set_state(CampaignState.DONE)
            outcomes = [
                JobOutcome(job.job_id, JobOutcomeStatus.FAILED, error="Login failed")
                for job in jobs
            ]
            return self._summary(outcomes)
        self._note("Logged in to the employer portal", "campaign_logged_in")

        outcomes: list[JobOutcome] = []
        for position, job in enumerate(jobs):
            self._listener.on_job_started(position, len(jobs), job.job_id)
            self._note(
                f"Processing job post {job.job_id} ({position + 1}/{len(jobs)})",
                "campaign_job_started",
                job_id=job.job_id,
            )
            outcome = await self._process_job(job)
            outcomes.append(outcome)
            self._listener.on_job_completed(job.job_id, outcome.invited)
            self._note(
                f"Completed job {job.job_id}: {outcome.invited} invitations sent",
                "campaign_job_completed",
                job_id=job.job_id,
                status=outcome.status.value,
                invited=outcome.invited,
            )

        self._set_state(CampaignState.LOGGING_OUT)
        try:
            await self._portal.logout()
        except Exception as exc:
            self._logger.warning("campaign_logout_failed", error=str(exc))
            self._errors.append(f"Logout failed: {exc}")
        self._set_state(CampaignState.DONE)
        return self._summary(outcomes)

    async def _process_job(self, job: JobTarget) -> JobOutcome:
        self._set_state(CampaignState.NAVIGATING)
        try:
            await self._with_retry("open_job", lambda: self._open_job(job))
        except JobNotFoundError as exc:
            self._record_error(str(exc))
            return JobOutcome(job.job_id, JobOutcomeStatus.NOT_FOUND, error=str(exc))
        except CampaignError as exc:
            self._record_error(str(exc))
            return JobOutcome(job.job_id, JobOutcomeStatus.FAILED, error=str(exc))

        invited = 0
        error: str | None = None
        while True:
            self._set_state(CampaignState.SCANNING)
            try:
                row = await self._with_retry("scan", lambda: self._find_candidate(job))
            except CampaignError as exc:
                error = f"Error scanning candidates: {exc}"
                self._record_error(error)
                break
            if row is None:
                break

            self._set_state(CampaignState.INVITING)
            try:
                await self._with_retry("invite", lambda: self._portal.invite(row))
            except CampaignError as exc:
                error = f"Error inviting candidate: {exc}"
                self._record_error(error)
                break
            invited += 1
            self._note(f"Invitation sent for job {job.job_id}", "campaign_invited", job_id=job.job_id)

        if invited:
            return JobOutcome(job.job_id, JobOutcomeStatus.INVITED, invited=invited, error=error)
        if error is not None:
            return JobOutcome(job.job_id, JobOutcomeStatus.FAILED, error=error)
        return JobOutcome(job.job_id, JobOutcomeStatus.NO_CANDIDATES)

    async def _open_job(self, job: JobTarget) -> None:
        await self._portal.open_job(job.job_id, self._items_per_page)
        await self._portal.sort_by_score()

    async def _find_candidate(self, job: JobTarget) -> CandidateRow | None:
        """First not-yet-invited row at or above the threshold, across pages."""
        while True:
            rows = await self._portal.list_rows()
            for number, row in enumerate(rows, start=1):
                self._listener.on_candidate(number, len(rows))
                score = parse_score(row.score_text)
                if score < job.minimum_score:
                    # rows are sorted by score; nothing further can qualify
                    self._logger.info(
                        "campaign_threshold_reached",
                        job_id=job.job_id,
                        score=score,
                        minimum_score=job.minimum_score,
                    )
                    return None
                if row.status_text.strip() == NOT_INVITED_STATUS:
                    return row
            if not await self._portal.has_next_page():
                return None
            await self._portal.next_page()

    async def _with_retry(self, operation: str, call: Callable[[], Awaitable[T]]) -> T:
        attempt = 1
        while True:
            try:
                return await call()
            except Exception as exc:
                permanent = classify_failure(str(exc))
                if isinstance(exc, CampaignError):
                    permanent = permanent or exc.permanent
                if permanent or attempt >= self._retry.max_attempts:
                    self._logger.error(
                        "campaign_operation_failed",
                        operation=operation,
                        attempt=attempt,
                        permanent=permanent,
                        error=str(exc),
                    )
                    if isinstance(exc, CampaignError):
                        raise
                    raise CampaignError(str(exc), permanent=permanent) from exc
                self._logger.warning(
                    "campaign_operation_retry",
                    operation=operation,
                    attempt=attempt,
                    error=str(exc),
                )
                await self._retry.wait()
                attempt += 1

    def _set_state(self, state: CampaignState) -> None:
        self.state = state
        self._logger.info("campaign_state", state=state.value)

    def _note(self, line: str, event: str, **fields: object) -> None:
        self._log.append(line)
        self._logger.info(event, **fields)

    def _record_error(self, message: str) -> None:
        self._errors.append(message)
        self._log.append(message)

    def _summary(self, outcomes: Sequence[JobOutcome]) -> CampaignSummary:
        summary = CampaignSummary(
            outcomes=tuple(outcomes),
            errors=tuple(self._errors),
            log=tuple(self._log),
        )
        self._logger.info(
            "campaign_completed",
            status=summary.status,
            total_invited=summary.total_invited,
            errors=len(summary.errors),
        )
        return summary


def require_credentials(credentials: PortalCredentials) -> None:
    if not credentials.username or not credentials.password:
        raise ConfigurationError("Missing jobbank portal credentials")


__all__ = [
    "InvitationCampaignRunner",
    "NullCampaignListener",
    "RetryPolicy",
    "classify_failure",
    "parse_score",
    "require_credentials",
    "NOT_INVITED_STATUS",
]
