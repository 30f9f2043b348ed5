"""
Bounded wait primitives.

Each helper waits for one page signal and reports whether it arrived within
its timeout instead of raising. The login flow composes them and decides
which typed error a missed signal becomes.
"""

import asyncio
import logging
import time
from typing import Awaitable, Callable

from playwright.async_api import Locator, Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

logger = logging.getLogger(__name__)

POLL_INTERVAL_MS = 100


async def wait_for_network_idle(page: Page, timeout: int) -> bool:
    """Wait until the page has had no network traffic for 500ms."""
    try:
        await page.wait_for_load_state("networkidle", timeout=timeout)
    except PlaywrightTimeoutError:
        logger.debug(f"Network idle not reached within {timeout}ms on {page.url}")
        return False
    return True


async def wait_for_url_match(
    page: Page, predicate: Callable[[str], bool], timeout: int
) -> bool:
    """Wait until the page URL satisfies ``predicate``."""
    try:
        await page.wait_for_url(predicate, timeout=timeout)
    except PlaywrightTimeoutError:
        logger.debug(f"URL condition not met within {timeout}ms (at {page.url})")
        return False
    return True


async def wait_visible(locator: Locator, timeout: int) -> bool:
    """Wait until ``locator`` resolves to a visible element."""
    try:
        await locator.wait_for(state="visible", timeout=timeout)
    except PlaywrightTimeoutError:
        return False
    return True


async def wait_until(
    condition: Callable[[], Awaitable[bool]],
    timeout: int,
    interval: int = POLL_INTERVAL_MS,
) -> bool:
    """
    Poll an async condition until it holds or ``timeout`` ms elapse.

    The condition is always evaluated at least once.
    """
    deadline = time.monotonic() + timeout / 1000
    while True:
        if await condition():
            return True
        if time.monotonic() >= deadline:
            return False
        await asyncio.sleep(interval / 1000)
