from __future__ import annotations

from dataclasses import dataclass, field

from domain.errors import JobNotFoundError
from domain.models import CandidateRow, PortalCredentials
from domain.ports import JobPortalPort
from domain.services.invitation_campaign import NOT_INVITED_STATUS


@dataclass
class FakeCandidate:
    score: float
    invited: bool = False

    @property
    def score_text(self) -> str:
        return f"{self.score} out of 5"

    @property
    def status_text(self) -> str:
        return "Invited to apply" if self.invited else NOT_INVITED_STATUS


@dataclass
class FakeJobPortal:
    """In-memory employer portal.

    ``jobs`` maps a job id to its pages of candidates. Each ``*_failures``
    list is consumed one exception per call before calls start succeeding.
    """

    jobs: dict[str, list[list[FakeCandidate]]] = field(default_factory=dict)
    login_failures: list[Exception] = field(default_factory=list)
    invite_failures: list[Exception] = field(default_factory=list)
    logout_failures: list[Exception] = field(default_factory=list)

    calls: list[str] = field(default_factory=list)
    login_attempts: int = 0
    invite_attempts: int = 0
    _job_id: str | None = None
    _page_index: int = 0

    async def login(self, credentials: PortalCredentials) -> None:
        self.calls.append("login")
        self.login_attempts += 1
        if self.login_failures:
            raise self.login_failures.pop(0)

    async def logout(self) -> None:
        self.calls.append("logout")
        if self.logout_failures:
            raise self.logout_failures.pop(0)

    async def open_job(self, job_id: str, items_per_page: int) -> None:
        self.calls.append(f"open_job:{job_id}")
        if job_id not in self.jobs:
            raise JobNotFoundError(job_id)
        self._job_id = job_id
        self._page_index = 0

    async def sort_by_score(self) -> None:
        self.calls.append("sort_by_score")

    async def list_rows(self) -> list[CandidateRow]:
        page = self._pages()[self._page_index] if self._pages() else []
        return [
            CandidateRow(
                index=index,
                score_text=candidate.score_text,
                status_text=candidate.status_text,
                handle=candidate,
            )
            for index, candidate in enumerate(page)
        ]

    async def has_next_page(self) -> bool:
        return self._page_index + 1 < len(self._pages())

    async def next_page(self) -> None:
        self.calls.append("next_page")
        self._page_index += 1

    async def invite(self, row: CandidateRow) -> None:
        self.invite_attempts += 1
        if self.invite_failures:
            raise self.invite_failures.pop(0)
        row.handle.invited = True
        self.calls.append("invite")

    def _pages(self) -> list[list[FakeCandidate]]:
        return self.jobs.get(self._job_id or "", [])


_portal_check: JobPortalPort = FakeJobPortal()
