import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, TYPE_CHECKING

from playwright.async_api import BrowserContext, ConsoleMessage, Page

from ..core.config import Settings
from ..pages import DashboardPage, LoginPage, PageActions
from ..utils import ApiClient, TestDataBuilder, Waits

if TYPE_CHECKING:
    from .hooks import BrowserSession

logger = logging.getLogger(__name__)


class ScenarioPhase(Enum):
    """Where a World is in its scenario lifecycle"""
    UNINITIALIZED = "uninitialized"
    CONTEXT_READY = "context_ready"
    PAGE_READY = "page_ready"
    RESULT_RECORDED = "result_recorded"
    TORN_DOWN = "torn_down"


@dataclass
class ScenarioState:
    """
    Typed per-scenario values shared between steps.

    login_page / dashboard_page: page objects created by earlier steps
    login_url: URL the login page was opened at
    username: last username typed into the login form
    console_errors: text of every console error since the page opened
    """
    login_page: Optional[LoginPage] = None
    dashboard_page: Optional[DashboardPage] = None
    login_url: Optional[str] = None
    username: Optional[str] = None
    console_errors: List[str] = field(default_factory=list)


class World:
    """
    Per-scenario context that step definitions run against.

    A World owns exactly one browsing context and page, created by the
    before-scenario hook and released by the after-scenario hook. It is never
    reused across scenarios.
    """

    def __init__(self, settings: Settings, session: "BrowserSession", scenario_name: str = "unknown scenario"):
        self.settings = settings
        self.session = session
        self.scenario_name = scenario_name

        self.context: Optional[BrowserContext] = None
        self.page: Optional[Page] = None
        self.phase = ScenarioPhase.UNINITIALIZED

        self.waits = Waits(settings)
        self.data_builder = TestDataBuilder()
        self._api_client: Optional[ApiClient] = None

        # Free-form inter-step storage
        self.test_data: Dict[str, Any] = {}
        self.scenario_data: Dict[str, Any] = {}
        self.state = ScenarioState()

        self.start_time: Optional[float] = None
        self.current_step: Optional[Any] = None

        logger.info(f"[World] Initializing scenario: {scenario_name}")

    @property
    def api_client(self) -> ApiClient:
        """HTTP client for API steps, created on first use"""
        if self._api_client is None:
            self._api_client = ApiClient(self.settings)
        return self._api_client

    @property
    def login_page(self) -> LoginPage:
        if self.state.login_page is None:
            self.state.login_page = LoginPage(self.page, self.settings, self.waits)
        return self.state.login_page

    @login_page.setter
    def login_page(self, value: LoginPage) -> None:
        self.state.login_page = value

    @property
    def dashboard_page(self) -> DashboardPage:
        if self.state.dashboard_page is None:
            self.state.dashboard_page = DashboardPage(self.page, self.settings, self.waits)
        return self.state.dashboard_page

    @dashboard_page.setter
    def dashboard_page(self, value: DashboardPage) -> None:
        self.state.dashboard_page = value

    def attach_page(self, page: Page) -> None:
        """Bind the scenario's page and start recording console errors"""
        self.page = page
        page.on("console", self._on_console)
        self.phase = ScenarioPhase.PAGE_READY

    def _on_console(self, message: ConsoleMessage) -> None:
        if message.type == "error":
            self.state.console_errors.append(message.text)
            logger.warning(f"[Console] Error: {message.text}")

    def set_test_data(self, key: str, value: Any) -> None:
        self.test_data[key] = value
        logger.info(f"[TestData] Stored: {key} = {value!r}")

    def get_test_data(self, key: str, default: Any = None) -> Any:
        return self.test_data.get(key, default)

    def set_scenario_data(self, key: str, value: Any) -> None:
        self.scenario_data[key] = value

    def get_scenario_data(self, key: str, default: Any = None) -> Any:
        return self.scenario_data.get(key, default)

    async def take_screenshot(self, name: Optional[str] = None) -> Optional[str]:
        """Full-page screenshot of the scenario's page; None without a page"""
        if self.page is None:
            return None
        return await PageActions(self.page, self.settings, self.waits).take_screenshot(name)

    @property
    def current_url(self) -> Optional[str]:
        return self.page.url if self.page is not None else None

    async def navigate_to(self, url: str) -> None:
        try:
            await self.page.goto(url, wait_until='networkidle', timeout=self.settings.navigation_timeout)
            logger.info(f"[Navigation] Navigated to: {url}")
        except Exception as e:
            logger.error(f"[Navigation] Failed to navigate: {e}")
            raise

    def url_for(self, path: str = "") -> str:
        """Absolute URL for a path relative to BASE_URL"""
        if path.startswith(('http://', 'https://')):
            return path
        base = self.settings.base_url.rstrip('/')
        return base + '/' + path.lstrip('/') if path else base

    def start_timer(self) -> None:
        self.start_time = time.monotonic()

    def elapsed_ms(self) -> int:
        if self.start_time is None:
            return 0
        return int((time.monotonic() - self.start_time) * 1000)

    async def clear_data(self) -> None:
        """Drop all scenario-local data and close the API client if one was opened"""
        self.test_data.clear()
        self.scenario_data.clear()
        self.state = ScenarioState()

        if self._api_client is not None:
            await self._api_client.aclose()
            self._api_client = None
