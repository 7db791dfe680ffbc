from types import MappingProxyType
from typing import Optional

from playwright.async_api import Page

from ..core.config import Settings
from ..utils.waits import Waits
from .actions import PageActions


class LoginPage:
    """Login screen: credentials form, remember-me, recovery and signup links"""

    path = "/login"

    selectors = MappingProxyType({
        'username_input': 'input[name="username"]',
        'email_input': 'input[name="email"]',
        'password_input': 'input[name="password"]',
        'login_button': 'button[type="submit"]',
        'remember_me_checkbox': 'input[name="rememberMe"]',
        'forgot_password_link': 'a[href*="forgot"]',
        'error_message': '[data-testid="error-message"]',
        'success_message': '[data-testid="success-message"]',
        'signup_link': 'a[href*="signup"]',
    })

    def __init__(self, page: Page, settings: Settings, waits: Optional[Waits] = None):
        self.page = page
        self.settings = settings
        self.actions = PageActions(page, settings, waits)

    @property
    def url(self) -> str:
        return self.settings.base_url.rstrip('/') + self.path

    async def open(self) -> None:
        """Navigate to the login page and wait until the username field is visible"""
        await self.actions.navigate_to(self.url)
        await self.actions.wait_for_visible(self.selectors['username_input'])

    async def enter_username(self, username: str) -> None:
        await self.actions.fill(self.selectors['username_input'], username)

    async def enter_email(self, email: str) -> None:
        await self.actions.fill(self.selectors['email_input'], email)

    async def enter_password(self, password: str) -> None:
        await self.actions.fill(self.selectors['password_input'], password)

    async def clear_username(self) -> None:
        await self.actions.clear(self.selectors['username_input'])

    async def clear_password(self) -> None:
        await self.actions.clear(self.selectors['password_input'])

    async def click_login_button(self) -> None:
        await self.actions.click(self.selectors['login_button'])

    async def login(self, username: str, password: str) -> None:
        await self.enter_username(username)
        await self.enter_password(password)
        await self.click_login_button()

    async def login_with_email(self, email: str, password: str) -> None:
        await self.enter_email(email)
        await self.enter_password(password)
        await self.click_login_button()

    async def check_remember_me(self) -> None:
        await self.actions.check_checkbox(self.selectors['remember_me_checkbox'])

    async def click_forgot_password(self) -> None:
        await self.actions.click(self.selectors['forgot_password_link'])

    async def click_signup_link(self) -> None:
        await self.actions.click(self.selectors['signup_link'])

    async def get_error_message(self) -> Optional[str]:
        return await self.actions.get_text(self.selectors['error_message'])

    async def get_success_message(self) -> Optional[str]:
        return await self.actions.get_text(self.selectors['success_message'])

    async def is_error_message_visible(self) -> bool:
        return await self.actions.is_visible(self.selectors['error_message'])

    async def is_loaded(self) -> bool:
        return await self.actions.is_visible(self.selectors['username_input'])
