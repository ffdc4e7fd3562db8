"""Step definitions for invitation campaign BDD scenarios."""
from __future__ import annotations

from pytest_bdd import given, when, then, scenarios, parsers

from domain.errors import CampaignError, PermanentCampaignError
from domain.models import JobTarget, PortalCredentials

from .conftest import CampaignContext, run_campaign

scenarios("../features/invitation_campaign.feature")


@given(parsers.parse('portal credentials for "{username}"'))
def given_credentials(campaign_ctx: CampaignContext, username: str) -> None:
    campaign_ctx.credentials = PortalCredentials(username=username, password="secret")


@given("no portal credentials")
def given_no_credentials(campaign_ctx: CampaignContext) -> None:
    campaign_ctx.credentials = PortalCredentials(username=None, password=None)


@given(parsers.parse('job "{job_id}" has candidates scored "{scores}" with minimum score {minimum:g}'))
def given_job(campaign_ctx: CampaignContext, job_id: str, scores: str, minimum: float) -> None:
    campaign_ctx.add_job(job_id, [float(s) for s in scores.split(",")], minimum)


@given(parsers.parse('job "{job_id}" is also configured'))
def given_unknown_job(campaign_ctx: CampaignContext, job_id: str) -> None:
    campaign_ctx.jobs.insert(0, JobTarget(job_id))


@given(parsers.parse('the candidate scored {score:g} on job "{job_id}" was already invited'))
def given_already_invited(campaign_ctx: CampaignContext, score: float, job_id: str) -> None:
    for page in campaign_ctx.portal.jobs[job_id]:
        for candidate in page:
            if candidate.score == score:
                candidate.invited = True


@given("the portal rejects the password")
def given_wrong_password(campaign_ctx: CampaignContext) -> None:
    campaign_ctx.portal.login_failures.append(
        PermanentCampaignError("Password or username is incorrect")
    )


@given("the first login times out")
def given_flaky_login(campaign_ctx: CampaignContext) -> None:
    campaign_ctx.portal.login_failures.append(CampaignError("Timeout 100000ms exceeded"))


@when("the campaign runs")
def when_campaign_runs(campaign_ctx: CampaignContext) -> None:
    run_campaign(campaign_ctx)


@then(parsers.parse("the total invited is {count:d}"))
def then_total_invited(campaign_ctx: CampaignContext, count: int) -> None:
    assert campaign_ctx.summary is not None
    assert campaign_ctx.summary.total_invited == count


@then(parsers.parse('the campaign status is "{status}"'))
def then_status(campaign_ctx: CampaignContext, status: str) -> None:
    assert campaign_ctx.summary is not None
    assert campaign_ctx.summary.status == status


@then(parsers.parse("the login was attempted {count:d} time"))
@then(parsers.parse("the login was attempted {count:d} times"))
def then_login_attempts(campaign_ctx: CampaignContext, count: int) -> None:
    assert campaign_ctx.portal.login_attempts == count


@then(parsers.parse('the errors include "{text}"'))
def then_errors_include(campaign_ctx: CampaignContext, text: str) -> None:
    assert campaign_ctx.summary is not None
    assert text in campaign_ctx.summary.errors


@then("no errors are recorded")
def then_no_errors(campaign_ctx: CampaignContext) -> None:
    assert campaign_ctx.summary is not None
    assert campaign_ctx.summary.errors == ()


@then(parsers.parse('job "{job_id}" is reported as "{status}"'))
def then_job_status(campaign_ctx: CampaignContext, job_id: str, status: str) -> None:
    assert campaign_ctx.summary is not None
    outcome = next(o for o in campaign_ctx.summary.outcomes if o.job_id == job_id)
    assert outcome.status.value == status


@then("no campaign browser session was opened")
def then_no_session(campaign_ctx: CampaignContext) -> None:
    assert campaign_ctx.sessions.sessions == []
