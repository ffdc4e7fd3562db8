from __future__ import annotations

import random
from typing import Any

from domain.ports import LoggerPort

_USER_AGENTS = [
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/58.0.3029.110 Safari/537.3",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_4) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/58.0.3029.110 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; rv:89.0) Gecko/20100101 Firefox/89.0",
]

_LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-infobars",
]


class PlaywrightBrowserSession:
    """
    Owns one Chromium browser and the single page a run drives.

    Requires ``playwright`` to be installed and browsers set up via
    ``playwright install chromium``.

    Headless mode and timeouts are explicit constructor arguments. Closing
    the session is how a run in progress gets cancelled.
    """

    def __init__(
        self,
        *,
        headless: bool = True,
        timeout_seconds: float = 30,
        viewport: tuple[int, int] = (1920, 1440),
        user_agent: str | None = None,
        dismiss_dialogs: bool = False,
        logger: LoggerPort | None = None,
    ) -> None:
        self._headless = headless
        self._timeout_ms = timeout_seconds * 1000
        self._viewport = viewport
        self._user_agent = user_agent
        self._dismiss_dialogs = dismiss_dialogs
        self._logger = logger
        self._playwright: Any = None
        self._browser: Any = None
        self._page: Any = None

    async def __aenter__(self) -> "PlaywrightBrowserSession":
        await self.launch()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def launch(self) -> None:
        try:
            await self._start()
        except Exception:
            # release whatever started before the failure
            await self.close()
            raise

    async def _start(self) -> None:
        from playwright.async_api import async_playwright

        user_agent = self._user_agent or random.choice(_USER_AGENTS)
        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(
            headless=self._headless,
            args=[*_LAUNCH_ARGS, f"--user-agent={user_agent}"],
        )
        self._page = await self._browser.new_page()
        self._page.set_default_timeout(self._timeout_ms)
        self._page.set_default_navigation_timeout(self._timeout_ms)
        width, height = self._viewport
        await self._page.set_viewport_size({"width": width, "height": height})
        if self._dismiss_dialogs:
            self._page.on("dialog", self._on_dialog)

    async def close(self) -> None:
        if self._page:
            await self._page.close()
        if self._browser:
            await self._browser.close()
        if self._playwright:
            await self._playwright.stop()
        self._page = None
        self._browser = None
        self._playwright = None

    @property
    def page(self) -> Any:
        if self._page is None:
            raise RuntimeError("Browser not launched. Call launch() first.")
        return self._page

    async def _on_dialog(self, dialog: Any) -> None:
        if self._logger is not None:
            self._logger.info("dialog_dismissed", message=dialog.message)
        await dialog.dismiss()
