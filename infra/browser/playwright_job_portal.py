"""Playwright-backed implementation of JobPortalPort for the Job Bank employer site."""

from __future__ import annotations

import asyncio
import random
from typing import Any
from urllib.parse import urlsplit

from domain.errors import CampaignError, JobNotFoundError, PermanentCampaignError
from domain.models import CandidateRow, PortalCredentials
from domain.ports import LoggerPort

PORTAL_URL = "https://employer.jobbank.gc.ca/employer/"
DASHBOARD_URL = "https://employer.jobbank.gc.ca/employer/match/dashboard/{job_id}"

_TABLE = "#matchlistpanel"
_ROWS = f"{_TABLE} tbody tr"
_NEXT_PAGE = "#matchlistpanel_next"
_SCORE_CELL = "td:nth-child(3)"
_STATUS_CELL = "td:nth-child(9)"
_PROFILE_CELL = "td:nth-child(1)"


class PlaywrightJobPortal:
    """Page-level primitives; the campaign runner decides who gets invited."""

    def __init__(
        self,
        *,
        page: Any,
        logger: LoggerPort,
        timeout_seconds: float = 100,
        min_delay: float = 1.0,
        max_delay: float = 5.0,
    ) -> None:
        self._page = page
        self._logger = logger
        self._timeout_ms = timeout_seconds * 1000
        self._min_delay = min_delay
        self._max_delay = max_delay

    async def login(self, credentials: PortalCredentials) -> None:
        self._logger.info("portal_login_started")
        await self._page.goto(PORTAL_URL)

        await self._page.fill('input[name="loginForm:input-email"]', credentials.username or "")
        await self._pace("after fill username")
        await self._page.fill('input[name="loginForm:input-password"]', credentials.password or "")
        await self._pace("after fill password")
        await self._page.click('button:has-text("Sign in")')
        await self._pace("after click sign in")

        if not await self._check_success("span.field-name", "span.error"):
            raise PermanentCampaignError("Password or username is incorrect")

        question = await self._page.locator("span.field-name").inner_text()
        answer = credentials.answer_for(question)
        if not answer:
            raise PermanentCampaignError(f"No answer found for security question: {question}")

        await self._page.fill('input[name="securityForm:input-security-answer"]', answer)
        await self._pace("after fill security answer")
        await self._page.click('button:has-text("Continue")')

        if not await self._check_success('h2.wb-inv:has-text("Account menu")', "span.error"):
            raise PermanentCampaignError(
                "Security question answer is incorrect. Please check your RCIC account in settings."
            )

        if await self._page.query_selector('h1:text("Session expired")'):
            await self._pace("session expired")
            raise CampaignError("Session expired")

        await self._page.wait_for_selector('//span[text()="View advertised jobs"]', timeout=self._timeout_ms)
        await self._page.locator('span.h3:text("Loading, please wait...")').wait_for(state="hidden")
        if await self._page.query_selector('input[value="Close"]'):
            await self._pace("close modal")
            await self._page.click('input[value="Close"]')
        self._logger.info("portal_login_completed")

    async def logout(self) -> None:
        await self._page.locator('(//button[@class="btn dropdown-toggle"])[1]').click()
        await self._page.get_by_role("link", name="Sign out").click()
        await self._page.wait_for_load_state("networkidle", timeout=self._timeout_ms)
        self._logger.info("portal_logout_completed")

    async def open_job(self, job_id: str, items_per_page: int) -> None:
        await self._pace("before go to job post")
        await self._page.goto(DASHBOARD_URL.format(job_id=job_id))
        await self._pace("after go to job post")
        await self._page.wait_for_load_state("networkidle", timeout=self._timeout_ms)

        found = await self._check_success(
            'a.app-name:text("Job Bank")',
            'h1:text("HTTP Error 404 - Not Found")',
            'span.objectStatus.stateNeutral:text("Job posting pending review")',
        )
        if not found:
            raise JobNotFoundError(job_id)
        # a missing job silently lands on the generic dashboard
        path = urlsplit(self._page.url or "").path.rstrip("/")
        on_job_page = path.endswith(f"/match/dashboard/{job_id}")
        if not on_job_page or not await self._page.query_selector(_TABLE):
            self._logger.warning("portal_job_redirected", job_id=job_id, url=self._page.url)
            raise JobNotFoundError(job_id)

        await self._page.select_option('select[name="matchlistpanel_length"]', str(items_per_page))
        await self._page.wait_for_load_state("networkidle", timeout=self._timeout_ms)
        self._logger.info("portal_job_opened", job_id=job_id)

    async def sort_by_score(self) -> None:
        header = self._page.locator('//span[text()="Score"]')
        # first click sorts ascending, second descending
        await header.click()
        await header.click()

    async def list_rows(self) -> list[CandidateRow]:
        await self._page.wait_for_selector(_ROWS, timeout=self._timeout_ms)
        rows = await self._page.locator(_ROWS).all()
        result: list[CandidateRow] = []
        for index, row in enumerate(rows):
            result.append(
                CandidateRow(
                    index=index,
                    score_text=await row.locator(_SCORE_CELL).inner_text(),
                    status_text=await row.locator(_STATUS_CELL).inner_text(),
                    handle=row,
                )
            )
        return result

    async def has_next_page(self) -> bool:
        return await self._page.locator(_NEXT_PAGE).is_visible()

    async def next_page(self) -> None:
        await self._page.click(_NEXT_PAGE)
        await self._page.wait_for_load_state("networkidle", timeout=self._timeout_ms)

    async def invite(self, row: CandidateRow) -> None:
        await row.handle.locator(_PROFILE_CELL).click()
        invite_button = self._page.locator('input:has-text("Invite to apply")')
        await invite_button.scroll_into_view_if_needed()
        await invite_button.click()
        await self._page.go_back()
        await self._page.wait_for_load_state("networkidle", timeout=self._timeout_ms)

    # -- internal helpers ---------------------------------------------------

    async def _check_success(
        self,
        success_selector: str,
        error_selector: str,
        other_issue_selector: str | None = None,
    ) -> bool:
        selectors = [error_selector, success_selector]
        if other_issue_selector:
            selectors.append(other_issue_selector)
        await self._page.wait_for_selector(", ".join(selectors), timeout=self._timeout_ms)

        if await self._page.query_selector(error_selector):
            return False
        if other_issue_selector and await self._page.query_selector(other_issue_selector):
            return False
        if await self._page.query_selector(success_selector):
            return True
        raise CampaignError("Unexpected element matched")

    async def _pace(self, reason: str) -> None:
        delay = random.uniform(self._min_delay, self._max_delay)
        self._logger.info("portal_delay", reason=reason, seconds=round(delay, 2))
        await asyncio.sleep(delay)


__all__ = ["PlaywrightJobPortal", "PORTAL_URL", "DASHBOARD_URL"]
