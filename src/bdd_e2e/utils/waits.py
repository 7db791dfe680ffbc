import asyncio
import inspect
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Sequence, Union

from playwright.async_api import Page, Response

from ..core.config import Settings
from ..core.exceptions import WaitTimeoutError

logger = logging.getLogger(__name__)

DEFAULT_SPINNER_SELECTORS = ('.spinner', '[data-testid="loading"]', '.loader')

Action = Callable[[], Union[Any, Awaitable[Any]]]


async def _resolve(value: Any) -> Any:
    """Await value if it is awaitable (lets callers pass sync or async callables)"""
    if inspect.isawaitable(value):
        return await value
    return value


@dataclass(frozen=True)
class RetryPolicy:
    """Fixed-delay retry policy: constant wait between attempts, no backoff"""
    max_attempts: int = 3
    delay: int = 500  # milliseconds

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {self.max_attempts}")
        if self.delay < 0:
            raise ValueError(f"delay must not be negative, got {self.delay}")

    async def run(self, action: Action, label: str = "Retry") -> Any:
        """Run action until it succeeds or attempts are exhausted, re-raising the last failure"""
        for attempt in range(1, self.max_attempts + 1):
            try:
                logger.info(f"[{label}] Attempt {attempt}/{self.max_attempts}")
                return await _resolve(action())
            except Exception:
                if attempt == self.max_attempts:
                    logger.error(f"[{label}] Failed after {self.max_attempts} attempts")
                    raise
                logger.warning(f"[{label}] Failed, waiting {self.delay}ms before retry")
                await asyncio.sleep(self.delay / 1000)


class Waits:
    """
    Polling and timeout helpers around Playwright's wait primitives.
    All timeouts and intervals are in milliseconds.
    """

    def __init__(self, settings: Settings):
        self.settings = settings

    async def wait_for_element(self, page: Page, selector: str,
                               timeout: Optional[int] = None, visible: bool = True) -> bool:
        """Wait until selector is attached (or visible); re-raises Playwright's timeout"""
        timeout = timeout or self.settings.timeout
        state = 'visible' if visible else 'attached'

        try:
            await page.wait_for_selector(selector, state=state, timeout=timeout)
            logger.info(f"[Wait] Element found: {selector}")
            return True
        except Exception:
            logger.error(f"[Wait] Element not found: {selector} ({timeout}ms)")
            raise

    async def wait_for_navigation(self, page: Page, action: Action, timeout: Optional[int] = None) -> None:
        """Trigger action and wait for the resulting load; a timeout is logged and ignored"""
        timeout = timeout or self.settings.navigation_timeout

        try:
            async with page.expect_navigation(wait_until='networkidle', timeout=timeout):
                await _resolve(action())
            logger.info("[Wait] Navigation completed")
        except Exception as e:
            logger.warning(f"[Wait] Navigation timeout, continuing anyway: {e}")

    async def wait_for_response(self, page: Page, url_part: str, action: Action,
                                timeout: Optional[int] = None) -> Response:
        """
        Wait for the first response whose URL contains url_part.

        The matcher is registered before action runs so a fast response is not missed.
        """
        timeout = timeout or self.settings.timeout

        async with page.expect_response(lambda response: url_part in response.url, timeout=timeout) as info:
            await _resolve(action())
        response = await info.value

        logger.info(f"[Wait] Response received: {response.status} {response.url}")
        return response

    async def wait_for(self, predicate: Action, timeout: Optional[int] = None, interval: int = 100) -> bool:
        """
        Poll predicate every interval ms until it returns truthy.

        Raises:
            WaitTimeoutError: predicate still falsy once timeout ms have elapsed
        """
        timeout = timeout or self.settings.timeout
        deadline = time.monotonic() + timeout / 1000

        while True:
            if await _resolve(predicate()):
                return True

            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break
            await asyncio.sleep(min(interval / 1000, remaining))

        message = f"[Wait] Condition not met within {timeout}ms"
        logger.error(message)
        raise WaitTimeoutError(message)

    async def retry(self, action: Action, max_attempts: int = 3, delay: int = 500) -> Any:
        """Run action with a fixed delay between failed attempts"""
        return await RetryPolicy(max_attempts=max_attempts, delay=delay).run(action)

    async def wait_for_loading_complete(self, page: Page, selectors: Optional[Sequence[str]] = None,
                                        timeout: int = 5000) -> None:
        """Wait for the first loading indicator to disappear; missing spinners are not an error"""
        for selector in selectors or DEFAULT_SPINNER_SELECTORS:
            try:
                await page.wait_for_selector(selector, state='hidden', timeout=timeout)
                logger.info(f"[Wait] Loading indicator disappeared: {selector}")
                break
            except Exception:
                logger.debug(f"[Wait] Loading indicator not found: {selector}")
                continue

    async def pause(self, milliseconds: int = 500) -> None:
        """Fixed pause for animations to settle"""
        await asyncio.sleep(milliseconds / 1000)
