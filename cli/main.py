from __future__ import annotations

import argparse
import asyncio
import json
from typing import Any, Sequence

from app import ApplicationFacade
from domain.errors import ConfigurationError
from domain.graph import FillerGraph, shift_ids
from domain.models import AppConfig, ProgressEvent, RunContext
from domain.services import preflight
from infra.browser import PlaywrightActionExecutor, PlaywrightBrowserSession, PlaywrightJobPortal
from infra.config import FileSystemConfigProvider
from infra.data import JsonDataSource
from infra.logs import FileSystemDebugArtifactStore
from infra.runtime import StructuredLogger, SystemClock, UuidIdGenerator
from infra.storage import S3FileFetcher


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="form-filler")
    sub = parser.add_subparsers(dest="command", required=True)

    preflight_p = sub.add_parser("preflight", help="Linearize a form graph against a data file")
    _add_form_arguments(preflight_p)

    fill_p = sub.add_parser("fill", help="Fill a web form in a browser")
    _add_form_arguments(fill_p)
    fill_p.add_argument("--config-dir", default="./config", help="Path to config folder")
    fill_p.add_argument("--headless", action="store_true", default=None)
    fill_p.add_argument("--no-headless", dest="headless", action="store_false")

    invite_p = sub.add_parser("invite", help="Invite qualifying candidates on the employer portal")
    invite_p.add_argument("--config-dir", default="./config", help="Path to config folder")
    invite_p.add_argument("--headless", action="store_true", default=None)
    invite_p.add_argument("--no-headless", dest="headless", action="store_false")

    shift_p = sub.add_parser("shift-ids", help="Renumber graph nodes to open a gap")
    shift_p.add_argument("graph")
    shift_p.add_argument("--from", dest="from_id", type=int, required=True)
    shift_p.add_argument("--by", type=int, default=1)
    shift_p.add_argument("--output", help="Write here instead of overwriting the graph")
    return parser


def _add_form_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("graph", help="Graph JSON document")
    parser.add_argument("data", help="Per-user data JSON document")
    parser.add_argument("--patch", help="Name of a patch object merged over the nodes")
    parser.add_argument("--pause-at", help="Stop at this node with a pause action")


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logger = StructuredLogger(component="cli")

    try:
        if args.command == "preflight":
            return _handle_preflight(args, logger)
        if args.command == "fill":
            return _handle_fill(args, logger)
        if args.command == "invite":
            return _handle_invite(args, logger)
        if args.command == "shift-ids":
            return _handle_shift_ids(args)
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}")
        return 1

    raise SystemExit(f"Unsupported command: {args.command}")


def _handle_preflight(args: argparse.Namespace, logger: StructuredLogger) -> int:
    graph = FillerGraph.restore_from_json(args.graph, patch=args.patch)
    data = JsonDataSource.from_file(args.data)
    result = preflight(graph, data, pause_at=args.pause_at, logger=logger.bind("preflight"))
    if not result.ok:
        print("Missing or invalid data:")
        for name, key in result.invalid_fields:
            print(f"  - {name} ({key})")
        return 1
    for action in result.actions:
        print(f"{action.name} | {action.kind.value} | {action.selector} | {action.option} | {action.value}")
    return 0


def _handle_fill(args: argparse.Namespace, logger: StructuredLogger) -> int:
    config_provider = FileSystemConfigProvider(args.config_dir)
    if not _config_ok(config_provider):
        return 1

    graph = FillerGraph.restore_from_json(args.graph, patch=args.patch)
    data = JsonDataSource.from_file(args.data)
    facade = _build_facade(config_provider, logger, args.headless)

    def _print_progress(event: ProgressEvent) -> None:
        print(json.dumps(event.to_dict(), default=str))

    result = asyncio.run(
        facade.fill_form(graph, data, progress=_print_progress, pause_at=args.pause_at)
    )
    status = "success" if result.success else "failure"
    print(f"result={status} message={result.message} summary_url={result.summary_url or '-'}")
    return 0 if result.success else 1


def _handle_invite(args: argparse.Namespace, logger: StructuredLogger) -> int:
    config_provider = FileSystemConfigProvider(args.config_dir)
    if not _config_ok(config_provider):
        return 1

    facade = _build_facade(config_provider, logger, args.headless)
    summary = asyncio.run(facade.invite_candidates(listener=_ConsoleCampaignListener()))
    for line in summary.log:
        print(line)
    print(
        f"status={summary.status} invited={summary.total_invited} "
        f"successful={len(summary.successful)} no_candidates={len(summary.no_candidates)} "
        f"failed={len(summary.failed)}"
    )
    return 0 if summary.status != "failure" else 1


def _handle_shift_ids(args: argparse.Namespace) -> int:
    graph = FillerGraph.restore_from_json(args.graph)
    shifted = shift_ids(graph, args.from_id, args.by)
    shifted.dump_to_json(args.output or args.graph)
    print(f"shifted ids >= {args.from_id} by {args.by}; next id is {shifted.next_id}")
    return 0


def _config_ok(config_provider: FileSystemConfigProvider) -> bool:
    errors = config_provider.validate()
    if errors:
        print("Config validation failed:")
        for err in errors:
            print(f"  - {err}")
        return False
    return True


def _build_facade(
    config_provider: FileSystemConfigProvider,
    logger: StructuredLogger,
    headless_override: bool | None,
) -> ApplicationFacade:
    cfg = config_provider.get_config()
    clock = SystemClock()
    artifact_store = FileSystemDebugArtifactStore(base_dir=cfg.screenshot_dir)
    file_fetcher = S3FileFetcher(
        logger=logger.bind("s3"),
        bucket=cfg.s3_bucket,
        profile=cfg.s3_profile,
    )

    def _session(**kwargs: Any) -> PlaywrightBrowserSession:
        if headless_override is not None:
            kwargs["headless"] = headless_override
        return PlaywrightBrowserSession(**kwargs)

    def _executor(page: Any, run_context: RunContext, config: AppConfig) -> PlaywrightActionExecutor:
        return PlaywrightActionExecutor(
            page=page,
            logger=logger.bind("executor"),
            clock=clock,
            artifact_store=artifact_store,
            run_context=run_context,
            file_fetcher=file_fetcher,
            timeout_seconds=config.timeout_seconds,
            debug_mode=config.debug_mode,
            finalize_base_url=config.finalize_base_url,
        )

    def _portal(page: Any, config: AppConfig) -> PlaywrightJobPortal:
        return PlaywrightJobPortal(page=page, logger=logger.bind("portal"))

    return ApplicationFacade(
        config_provider=config_provider,
        logger=logger,
        clock=clock,
        id_generator=UuidIdGenerator(),
        artifact_store=artifact_store,
        session_factory=_session,
        executor_factory=_executor,
        portal_factory=_portal,
    )


class _ConsoleCampaignListener:
    def on_candidate(self, row_number: int, total_rows: int) -> None:
        print(f"  row {row_number}/{total_rows}")

    def on_job_started(self, job_index: int, total_jobs: int, job_id: str) -> None:
        print(f"Job {job_index + 1}/{total_jobs}: {job_id}")

    def on_job_completed(self, job_id: str, invited: int) -> None:
        print(f"Job {job_id} done: {invited} invited")


if __name__ == "__main__":
    raise SystemExit(main())
