from .locators import build_locator, locate, resolve_locator
from .playwright_executor import ExecutorTimings, PlaywrightActionExecutor
from .playwright_job_portal import PlaywrightJobPortal
from .playwright_session import PlaywrightBrowserSession

__all__ = [
    "PlaywrightBrowserSession",
    "PlaywrightActionExecutor",
    "ExecutorTimings",
    "PlaywrightJobPortal",
    "build_locator",
    "resolve_locator",
    "locate",
]
