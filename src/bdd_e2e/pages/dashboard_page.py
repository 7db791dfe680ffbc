from types import MappingProxyType
from typing import Optional

from playwright.async_api import Page

from ..core.config import Settings
from ..utils.waits import Waits
from .actions import PageActions


class DashboardPage:
    """Landing page after login"""

    path = "/dashboard"

    selectors = MappingProxyType({
        'dashboard_title': '[data-testid="dashboard-title"]',
        'user_greeting': '[data-testid="user-greeting"]',
        'profile_button': '[data-testid="profile-button"]',
        'logout_button': '[data-testid="logout-button"]',
        'settings_button': '[data-testid="settings-button"]',
        'main_content': '[data-testid="main-content"]',
        'user_menu': '[data-testid="user-menu"]',
    })

    def __init__(self, page: Page, settings: Settings, waits: Optional[Waits] = None):
        self.page = page
        self.settings = settings
        self.actions = PageActions(page, settings, waits)

    @property
    def url(self) -> str:
        return self.settings.base_url.rstrip('/') + self.path

    async def open(self) -> None:
        """Navigate to the dashboard and wait for its title"""
        await self.actions.navigate_to(self.url)
        await self.wait_until_loaded()

    async def wait_until_loaded(self, timeout: Optional[int] = None) -> None:
        await self.actions.wait_for_visible(self.selectors['dashboard_title'], timeout=timeout)

    async def get_dashboard_title(self) -> Optional[str]:
        return await self.actions.get_text(self.selectors['dashboard_title'])

    async def get_user_greeting(self) -> Optional[str]:
        return await self.actions.get_text(self.selectors['user_greeting'])

    async def click_profile_button(self) -> None:
        await self.actions.click(self.selectors['profile_button'])

    async def click_logout(self) -> None:
        await self.actions.click(self.selectors['logout_button'])

    async def click_settings(self) -> None:
        await self.actions.click(self.selectors['settings_button'])

    async def open_user_menu(self) -> None:
        await self.actions.click(self.selectors['user_menu'])

    async def is_loaded(self) -> bool:
        return await self.actions.is_visible(self.selectors['dashboard_title'])

    async def is_main_content_visible(self) -> bool:
        return await self.actions.is_visible(self.selectors['main_content'])
