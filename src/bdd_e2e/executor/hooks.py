"""
Scenario lifecycle hooks.

before_all / after_all bracket a run (one browser per BrowserSession);
before_scenario / after_scenario bracket each scenario (one browsing
context and page per World). The runner calls them in that order and
never concurrently for the same World.
"""
import logging
from enum import Enum
from pathlib import Path
from typing import Any, Optional

from playwright.async_api import Browser, BrowserContext, Playwright, async_playwright

from ..core.config import Settings
from ..core.exceptions import ExecutionError
from .world import ScenarioPhase, World

logger = logging.getLogger(__name__)


class SessionState(Enum):
    NO_BROWSER = "no_browser"
    BROWSER_LAUNCHED = "browser_launched"
    BROWSER_CLOSED = "browser_closed"


class BrowserSession:
    """
    Owns one Playwright browser for the lifetime of a run (or of one worker).

    Passed explicitly to every World instead of living in a module global,
    so parallel workers each get an independent browser.
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self.playwright: Optional[Playwright] = None
        self.browser: Optional[Browser] = None
        self.state = SessionState.NO_BROWSER
        self.contexts_opened = 0
        self.contexts_closed = 0

    @property
    def open_contexts(self) -> int:
        return self.contexts_opened - self.contexts_closed

    async def new_context(self) -> BrowserContext:
        if self.state is not SessionState.BROWSER_LAUNCHED or self.browser is None:
            raise ExecutionError("Browser is not launched; before_all must run first")

        options = {
            'viewport': self.settings.viewport,
            'ignore_https_errors': True,
            'locale': 'en-US',
        }
        if self.settings.record_video:
            options['record_video_dir'] = str(Path(self.settings.reports_dir) / "videos")

        context = await self.browser.new_context(**options)
        self.contexts_opened += 1
        return context

    async def close_context(self, context: BrowserContext) -> None:
        try:
            await context.close()
        finally:
            self.contexts_closed += 1


async def before_all(session: BrowserSession) -> BrowserSession:
    """Start Playwright and launch the configured browser; failure aborts the run"""
    settings = session.settings
    try:
        session.playwright = await async_playwright().start()
        browser_type = getattr(session.playwright, settings.browser)

        session.browser = await browser_type.launch(
            headless=settings.headless,
            slow_mo=settings.slow_mo,
            args=['--disable-notifications'] if settings.browser == 'chromium' else [],
        )
        session.state = SessionState.BROWSER_LAUNCHED
        logger.info(f"[Browser] Launched: {settings.browser} (headless: {settings.headless})")
        return session
    except Exception as e:
        logger.error(f"[Browser] Failed to launch: {e}", exc_info=True)
        if session.playwright is not None:
            await session.playwright.stop()
            session.playwright = None
        raise


async def before_scenario(world: World, scenario: Any) -> None:
    """Give the World a fresh context and page with configured timeouts"""
    try:
        world.start_timer()

        world.context = await world.session.new_context()
        world.phase = ScenarioPhase.CONTEXT_READY

        page = await world.context.new_page()
        page.set_default_navigation_timeout(world.settings.navigation_timeout)
        page.set_default_timeout(world.settings.action_timeout)
        world.attach_page(page)

        logger.info(f"[Scenario] START: {scenario.name}")
        logger.info(f"[Scenario] Tags: {', '.join('@' + tag for tag in _tags(scenario))}")

        (Path(world.settings.reports_dir) / "screenshots").mkdir(parents=True, exist_ok=True)
    except Exception as e:
        logger.error(f"[Before Hook] Error: {e}", exc_info=True)
        raise


async def after_scenario(world: World, scenario: Any, failed: bool) -> Optional[str]:
    """
    Record the outcome, then release the context and scenario data.

    Errors here are logged, not raised, so one broken teardown cannot stop the run.

    Returns:
        Path of the failure screenshot, if one was taken
    """
    elapsed = world.elapsed_ms()
    screenshot = None

    try:
        if failed:
            logger.error(f"[Scenario] FAILED: {scenario.name}")
            screenshot = await world.take_screenshot(f"failed-{scenario.name}")

        status = "[Scenario] FAILED" if failed else "[Scenario] PASSED"
        logger.info(f"{status}: {scenario.name} ({elapsed}ms)")
        world.phase = ScenarioPhase.RESULT_RECORDED
    except Exception as e:
        logger.error(f"[After Hook] Error: {e}")

    try:
        if world.context is not None:
            await world.session.close_context(world.context)
    except Exception as e:
        logger.error(f"[After Hook] Error closing context: {e}")
    finally:
        world.context = None
        world.page = None

    try:
        await world.clear_data()
    except Exception as e:
        logger.error(f"[After Hook] Error clearing data: {e}")

    world.phase = ScenarioPhase.TORN_DOWN
    return screenshot


async def after_all(session: BrowserSession) -> None:
    """Close the browser and stop Playwright"""
    try:
        if session.browser is not None:
            await session.browser.close()
            logger.info("[Browser] Closed successfully")
    except Exception as e:
        logger.error(f"[Browser] Error during close: {e}")
    finally:
        session.browser = None
        session.state = SessionState.BROWSER_CLOSED
        if session.playwright is not None:
            await session.playwright.stop()
            session.playwright = None


def _tags(scenario: Any):
    return list(getattr(scenario, 'effective_tags', None) or getattr(scenario, 'tags', None) or [])
