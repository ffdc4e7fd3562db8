from __future__ import annotations

from typing import Any, Callable

from domain.errors import ConfigurationError, FillerError, LinearizationError
from domain.graph import FillerGraph
from domain.models import (
    AppConfig,
    CampaignConfig,
    CampaignSummary,
    FormRunResult,
    RunContext,
)
from domain.ports import (
    ActionExecutorPort,
    CampaignListenerPort,
    ClockPort,
    ConfigProviderPort,
    DataFetch,
    DebugArtifactStorePort,
    IdGeneratorPort,
    JobPortalPort,
    LoggerPort,
    ProgressSink,
)
from domain.services import (
    InvitationCampaignRunner,
    RetryPolicy,
    WebFiller,
    preflight,
    require_credentials,
)

SessionFactory = Callable[..., Any]
"""Builds an async-context-managed browser session exposing ``.page``."""

ExecutorFactory = Callable[[Any, RunContext, AppConfig], ActionExecutorPort]
PortalFactory = Callable[[Any, AppConfig], JobPortalPort]

CAMPAIGN_TIMEOUT_SECONDS = 100


class ApplicationFacade:
    """
    UI-facing facade: form preflight, form fill and invitation campaigns.

    Every method returns a structured result; engine errors never escape.
    """

    def __init__(
        self,
        *,
        config_provider: ConfigProviderPort,
        logger: LoggerPort,
        clock: ClockPort,
        id_generator: IdGeneratorPort,
        artifact_store: DebugArtifactStorePort,
        session_factory: SessionFactory,
        executor_factory: ExecutorFactory,
        portal_factory: PortalFactory,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self._config_provider = config_provider
        self._logger = logger
        self._clock = clock
        self._id_generator = id_generator
        self._artifact_store = artifact_store
        self._session_factory = session_factory
        self._executor_factory = executor_factory
        self._portal_factory = portal_factory
        self._retry_policy = retry_policy

    def preflight_form(
        self,
        graph: FillerGraph,
        fetch: DataFetch,
        *,
        pause_at: str | None = None,
    ) -> FormRunResult:
        try:
            result = preflight(graph, fetch, pause_at=pause_at, logger=self._logger)
        except ConfigurationError as exc:
            return self._failure(str(exc))
        if not result.ok:
            return self._failure(
                str(LinearizationError(result.invalid_fields)),
                invalid_fields=result.invalid_fields,
            )
        return FormRunResult(
            success=True,
            message=f"{len(result.actions)} actions ready",
            timestamp=self._clock.now(),
        )

    async def fill_form(
        self,
        graph: FillerGraph,
        fetch: DataFetch,
        *,
        progress: ProgressSink | None = None,
        pause_at: str | None = None,
    ) -> FormRunResult:
        filler = WebFiller(progress=progress, logger=self._logger)
        try:
            config = self._config_provider.get_config()
            actions = filler.prepare(graph, fetch, pause_at=pause_at)
        except LinearizationError as exc:
            return self._failure(str(exc), invalid_fields=exc.invalid_fields)
        except ConfigurationError as exc:
            return self._failure(str(exc))

        run_context = RunContext(
            run_id=self._id_generator.new_run_id(),
            is_debug=config.debug_mode,
        )
        self._artifact_store.ensure_run_directory(run_context)
        self._logger.info("form_fill_started", run_id=run_context.run_id, actions=len(actions))

        try:
            async with self._session_factory(
                headless=config.headless,
                timeout_seconds=config.timeout_seconds,
                logger=self._logger,
            ) as session:
                executor = self._executor_factory(session.page, run_context, config)
                summary_url = await filler.run(actions, executor)
        except FillerError as exc:
            self._logger.error("form_fill_failed", run_id=run_context.run_id, error=str(exc))
            return self._failure(str(exc))

        self._logger.info("form_fill_completed", run_id=run_context.run_id, summary_url=summary_url)
        return FormRunResult(
            success=True,
            message="Form filled successfully",
            timestamp=self._clock.now(),
            summary_url=summary_url,
        )

    async def invite_candidates(
        self,
        campaign: CampaignConfig | None = None,
        *,
        listener: CampaignListenerPort | None = None,
    ) -> CampaignSummary:
        try:
            config = self._config_provider.get_config()
            campaign = campaign or self._config_provider.get_campaign()
            require_credentials(campaign.credentials)
            async with self._session_factory(
                headless=config.headless,
                timeout_seconds=CAMPAIGN_TIMEOUT_SECONDS,
                dismiss_dialogs=True,
                logger=self._logger,
            ) as session:
                runner = InvitationCampaignRunner(
                    portal=self._portal_factory(session.page, config),
                    logger=self._logger,
                    listener=listener,
                    retry_policy=self._retry_policy,
                    items_per_page=campaign.items_per_page,
                )
                return await runner.run(campaign.credentials, campaign.jobs)
        except FillerError as exc:
            self._logger.error("campaign_failed", error=str(exc))
            return CampaignSummary(errors=(str(exc),), log=(str(exc),))

    def _failure(self, message: str, *, invalid_fields: Any = ()) -> FormRunResult:
        return FormRunResult(
            success=False,
            message=message,
            timestamp=self._clock.now(),
            invalid_fields=tuple(invalid_fields),
            error=message,
        )
