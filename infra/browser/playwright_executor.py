"""Playwright-backed implementation of ActionExecutorPort.

Each action kind maps to an ``_act_<kind>`` coroutine that drives a
Playwright ``Page``. Option tags (``skip_disabled``, ``skip_nonexist``,
``post_pause``) wrap every handler; failures are captured as a full-page
screenshot and re-raised as ``ActionFailedError``.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from domain.errors import ActionFailedError, ConfigurationError, OptionNotFoundError
from domain.models import Action, ExecutionContext, Jump, RunContext, option_tags
from domain.ports import (
    ClockPort,
    DebugArtifactStorePort,
    LoggerPort,
    OptionResolver,
    RemoteFileFetcherPort,
)
from domain.selectors import substitute
from infra.browser.locators import locate

DEFAULT_FINALIZE_BASE_URL = "https://tfwp.lmia.esdc.gc.ca"


@dataclass(frozen=True)
class ExecutorTimings:
    """Fixed pauses, in seconds, used around page interactions."""

    grace: float = 5.0
    post_pause: float = 2.0
    batch_click_settle: float = 3.0
    finalize_settle: float = 2.0
    either_wait: float = 5.0
    either_grace: float = 1.0
    type_delay_ms: float = 100


class PlaywrightActionExecutor:
    def __init__(
        self,
        *,
        page: Any,
        logger: LoggerPort,
        clock: ClockPort,
        artifact_store: DebugArtifactStorePort | None = None,
        run_context: RunContext | None = None,
        file_fetcher: RemoteFileFetcherPort | None = None,
        option_resolver: OptionResolver | None = None,
        timings: ExecutorTimings = ExecutorTimings(),
        timeout_seconds: float = 30,
        debug_mode: bool = False,
        finalize_base_url: str = DEFAULT_FINALIZE_BASE_URL,
    ) -> None:
        self._page = page
        self._logger = logger
        self._clock = clock
        self._artifact_store = artifact_store
        self._run_context = run_context
        self._file_fetcher = file_fetcher
        self._option_resolver = option_resolver
        self._timings = timings
        self._timeout_ms = timeout_seconds * 1000
        self._debug_mode = debug_mode
        self._finalize_base_url = finalize_base_url.rstrip("/")

    async def perform(self, action: Action, context: ExecutionContext) -> Jump | None:
        handler = getattr(self, f"_act_{action.kind.value}", None)
        if handler is None:
            raise ConfigurationError(f"Action kind cannot be executed: {action.kind.value}")

        tags = option_tags(action.option)
        try:
            if action.selector and "skip_disabled" in tags:
                locator = await self._element(action.selector)
                if await locator.is_disabled():
                    self._logger.info("action_skipped_disabled", name=action.name, selector=action.selector)
                    return None
            if action.selector and "skip_nonexist" in tags:
                await asyncio.sleep(self._timings.grace)
                locator = await self._element(action.selector)
                if await locator.count() == 0:
                    self._logger.info("action_skipped_missing", name=action.name, selector=action.selector)
                    return None
            jump = await handler(action.selector, action.option, action.value, context)
        except Exception as exc:
            screenshot_path = await self._error_screenshot(action.kind.value)
            raise ActionFailedError(
                kind=action.kind.value,
                selector=action.selector,
                option=action.option,
                value=action.value,
                cause=exc,
                screenshot_path=screenshot_path,
            ) from exc

        if "post_pause" in tags:
            await asyncio.sleep(self._timings.post_pause)
        return jump

    # -- handlers -----------------------------------------------------------

    async def _act_fill(self, selector: str, option: str | None, value: Any, context: ExecutionContext) -> None:
        element = await self._element(selector)
        text = str(value)
        if "type" in option_tags(option):
            await element.press_sequentially(text, delay=self._timings.type_delay_ms)
        else:
            await element.fill(text)

    async def _act_fill_date(self, selector: str, option: str | None, value: Any, context: ExecutionContext) -> None:
        element = await self._element(selector)
        if option_tags(option) & {"us", "direct"}:
            await element.fill(str(value))
            return
        await element.click()
        await self._page.keyboard.type(str(value))
        await self._page.keyboard.press("Enter")

    async def _act_select(self, selector: str, option: str | None, value: Any, context: ExecutionContext) -> None:
        value = _yes_no(value)
        element = await self._element(selector)
        if "label" in option_tags(option):
            await element.select_option(label=str(value))
        else:
            await element.select_option(str(value))

    async def _act_match_select(self, selector: str, option: str | None, value: Any, context: ExecutionContext) -> None:
        element = await self._element(selector)
        options = element.locator("option")
        labels = await options.all_inner_texts()
        wanted = str(value).lower()
        for position, label in enumerate(labels):
            if wanted in label.lower():
                option_value = await options.nth(position).get_attribute("value")
                await element.select_option(option_value)
                return
        if self._option_resolver is None:
            raise OptionNotFoundError(str(value), labels)
        await element.select_option(self._option_resolver(labels))

    async def _act_check(self, selector: str, option: str | None, value: Any, context: ExecutionContext) -> None:
        value = _yes_no(value)
        if not value:
            await (await self._element(selector)).check()
            return
        tags = option_tags(option)
        if "name" in tags:
            await self._page.locator(f'input[name="{selector}"] + label:has-text("{value}")').check()
        elif "iname" in tags:
            await self._page.locator(substitute(selector, str(value).lower())).check()
        else:
            await (await self._element(selector, value)).check()

    async def _act_fieldset_check(self, selector: str, option: str | None, value: Any, context: ExecutionContext) -> None:
        value = _yes_no(value)
        fieldset = self._page.locator(
            f'xpath=//fieldset[legend/span[@class="field-name" and contains(text(), "{selector}")]]'
        )
        input_type = "checkbox" if "multiple" in option_tags(option) else "radio"
        await fieldset.locator(f'input[type="{input_type}"][value="{value}"]').check()

    async def _act_click(self, selector: str, option: str | None, value: Any, context: ExecutionContext) -> None:
        element = await self._element(selector, value)
        if "force" in option_tags(option):
            await element.click(force=True)
        else:
            await element.click()

    async def _act_goto(self, selector: str, option: str | None, value: Any, context: ExecutionContext) -> None:
        url = substitute(selector, value) if value else selector
        await self._page.goto(url)

    async def _act_get(self, selector: str, option: str | None, value: Any, context: ExecutionContext) -> Jump | None:
        if selector == "url":
            current = self._page.url
            context["url"] = current
            if option and "=" in option:
                name, template = option.split("=", 1)
                context[name.strip()] = _extract(template.strip(), current)
            return None

        content = await (await self._element(selector)).inner_text()
        if isinstance(value, str):
            if option and content.strip().lower() == value.strip().lower():
                return Jump(option)
            return None
        if option and value is None:
            context[option] = content
        return None

    async def _act_qa(self, selector: str, option: str | None, value: Any, context: ExecutionContext) -> None:
        question = await (await self._element(option or "")).inner_text()
        for pair in value or []:
            asked = _field(pair, "question")
            if asked and asked in question:
                await (await self._element(selector)).fill(str(_field(pair, "answer") or ""))

    async def _act_pause(self, selector: str, option: str | None, value: Any, context: ExecutionContext) -> None:
        if value:
            await asyncio.sleep(float(value))
        elif self._debug_mode:
            await self._page.pause()
        else:
            self._logger.info("pause_skipped")

    async def _act_upload(self, selector: str, option: str | None, value: Any, context: ExecutionContext) -> None:
        if isinstance(value, Mapping):
            path = value.get("path")
        else:
            path = str(value)
        if not path:
            raise ConfigurationError("Upload action has no file path")
        if path.startswith("s3://"):
            if self._file_fetcher is None:
                raise ConfigurationError(f"No remote file fetcher configured for {path}")
            path = await asyncio.to_thread(self._file_fetcher.fetch, path)
        element = await self._element(selector)
        await element.set_input_files(path, timeout=self._timeout_ms)

    async def _act_finalize(self, selector: str, option: str | None, value: Any, context: ExecutionContext) -> None:
        await asyncio.sleep(self._timings.finalize_settle)
        edit_url = await self._page.locator('a:has-text("Edit")').last.get_attribute("href")
        parts = (edit_url or "").split("/")
        if len(parts) < 6:
            raise ValueError(f"Unexpected edit link: {edit_url!r}")
        employer_id, application_id = parts[2], parts[5]
        await self._page.goto(f"{self._finalize_base_url}{edit_url}")

        while True:
            await asyncio.sleep(self._timings.finalize_settle)
            next_button = self._page.locator("#next")
            if await next_button.is_disabled():
                break
            await next_button.click()

        context["summary_url"] = (
            f"{self._finalize_base_url}/Employer/{employer_id}/Application/{application_id}/Summary"
        )

    async def _act_keyboard(self, selector: str, option: str | None, value: Any, context: ExecutionContext) -> None:
        await self._page.keyboard.press(str(value))

    async def _act_wait(self, selector: str, option: str | None, value: Any, context: ExecutionContext) -> None:
        element = await self._element(selector)
        await element.wait_for(state="visible", timeout=self._timeout_ms)

    async def _act_batch_click(self, selector: str, option: str | None, value: Any, context: ExecutionContext) -> None:
        elements = await (await self._element(selector)).all()
        while elements:
            await elements[-1].click()
            await asyncio.sleep(self._timings.batch_click_settle)
            if option:
                await (await self._element(option)).click()
                await asyncio.sleep(self._timings.batch_click_settle)
            elements = await (await self._element(selector)).all()

    # -- internal helpers ---------------------------------------------------

    async def _element(self, selector: str, value: Any = None) -> Any:
        return await locate(
            self._page,
            selector,
            value,
            either_timeout_ms=self._timings.either_wait * 1000,
            either_grace_ms=self._timings.either_grace * 1000,
        )

    async def _error_screenshot(self, kind: str) -> str | None:
        if self._artifact_store is None or self._run_context is None:
            return None
        step_name = f"error_{kind}_{self._clock.now().strftime('%H%M')}"
        try:
            image = await self._page.screenshot(full_page=True)
            path = self._artifact_store.save_screenshot(self._run_context, step_name, image)
        except Exception as exc:
            self._logger.warning("error_screenshot_failed", step=step_name, error=str(exc))
            return None
        self._logger.info("error_screenshot_saved", path=path)
        return path


def _yes_no(value: Any) -> Any:
    if isinstance(value, bool):
        return "Yes" if value else "No"
    return value


def _field(item: Any, key: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(key)
    return getattr(item, key, None)


def _extract(template: str, url: str) -> str | None:
    """Return the part of ``url`` that fills the ``{}`` slot of ``template``."""
    if "{}" not in template:
        return None
    prefix, suffix = template.split("{}", 1)
    if len(url) < len(prefix) + len(suffix):
        return None
    if url.startswith(prefix) and url.endswith(suffix):
        return url[len(prefix):len(url) - len(suffix)]
    return None


__all__ = ["PlaywrightActionExecutor", "ExecutorTimings", "DEFAULT_FINALIZE_BASE_URL"]
