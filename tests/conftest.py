import pytest
from unittest.mock import Mock, AsyncMock
from bdd_e2e.core import Settings
from bdd_e2e.executor import BrowserSession, SessionState


def make_page(url='https://example.com'):
    """AsyncMock Playwright page; sync Playwright methods are plain Mocks"""
    page = AsyncMock()
    page.url = url
    page.on = Mock()
    page.set_default_timeout = Mock()
    page.set_default_navigation_timeout = Mock()
    page.locator = Mock(return_value=AsyncMock())
    return page


@pytest.fixture
def settings(tmp_path):
    return Settings(
        base_url='https://example.com',
        timeout=1000,
        navigation_timeout=2000,
        action_timeout=1500,
        workers=1,
        retries=0,
        tags='',
        reports_dir=str(tmp_path / 'reports'),
    )


@pytest.fixture
def page():
    return make_page()


@pytest.fixture
def session(settings, page):
    """BrowserSession with a launched mock browser handing out mock contexts"""
    session = BrowserSession(settings)

    context = AsyncMock()
    context.new_page.return_value = page
    context.cookies.return_value = []

    session.browser = AsyncMock()
    session.browser.new_context.return_value = context
    session.state = SessionState.BROWSER_LAUNCHED
    return session
