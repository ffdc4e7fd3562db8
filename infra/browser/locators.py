"""Maps typed selector descriptors onto Playwright locators."""

from __future__ import annotations

from typing import Any

from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from domain.selectors import (
    CssSelector,
    EitherSelector,
    LabelSelector,
    RoleSelector,
    Selector,
    TextSelector,
    parse_selector,
)


def build_locator(page: Any, selector: Selector) -> Any:
    """Locator for a single (non-either) descriptor."""
    if isinstance(selector, RoleSelector):
        kwargs: dict[str, Any] = {}
        if selector.name is not None:
            kwargs["name"] = selector.name
        if selector.exact is not None:
            kwargs["exact"] = selector.exact
        locator = page.get_by_role(selector.role, **kwargs)
    elif isinstance(selector, TextSelector):
        locator = (
            page.get_by_text(selector.text)
            if selector.exact is None
            else page.get_by_text(selector.text, exact=selector.exact)
        )
    elif isinstance(selector, LabelSelector):
        locator = (
            page.get_by_label(selector.label)
            if selector.exact is None
            else page.get_by_label(selector.label, exact=selector.exact)
        )
    elif isinstance(selector, CssSelector):
        locator = page.locator(selector.query)
    else:
        raise TypeError(f"Unsupported selector descriptor: {selector!r}")

    if selector.nth is not None:
        locator = locator.nth(selector.nth)
    return locator


async def resolve_locator(
    page: Any,
    selector: Selector,
    *,
    either_timeout_ms: float = 5_000,
    either_grace_ms: float = 1_000,
) -> Any:
    if not isinstance(selector, EitherSelector):
        return build_locator(page, selector)

    options = {"either_timeout_ms": either_timeout_ms, "either_grace_ms": either_grace_ms}
    first = await resolve_locator(page, selector.first, **options)
    second = await resolve_locator(page, selector.second, **options)
    try:
        await first.or_(second).first.wait_for(state="visible", timeout=either_timeout_ms)
    except PlaywrightTimeoutError:
        # neither showed up; let the action itself time out on the first one
        return _pick(first, selector.nth)
    if not await second.first.is_visible():
        # the first may only have won the race by a moment
        try:
            await second.first.wait_for(state="visible", timeout=either_grace_ms)
        except PlaywrightTimeoutError:
            return _pick(first, selector.nth)
    chosen = second if await second.first.is_visible() else first
    return _pick(chosen, selector.nth)


def _pick(locator: Any, nth: int | None) -> Any:
    return locator if nth is None else locator.nth(nth)


async def locate(
    page: Any,
    template: str,
    value: Any = None,
    *,
    either_timeout_ms: float = 5_000,
    either_grace_ms: float = 1_000,
) -> Any:
    """Parse a selector template (``{}`` filled with ``value``) and resolve it."""
    return await resolve_locator(
        page,
        parse_selector(template, value),
        either_timeout_ms=either_timeout_ms,
        either_grace_ms=either_grace_ms,
    )


__all__ = ["build_locator", "resolve_locator", "locate"]
