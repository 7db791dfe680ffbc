import pytest
from unittest.mock import Mock, AsyncMock, patch
from bdd_e2e.core import ExecutionError
from bdd_e2e.executor import World, ScenarioPhase, BrowserSession, SessionState
from bdd_e2e.executor import hooks


def make_scenario(name='Login works', tags=('smoke',)):
    item = Mock(spec=['name', 'effective_tags'])
    item.name = name
    item.effective_tags = list(tags)
    return item


class TestBrowserLifecycle:
    """Test before_all / after_all"""

    @pytest.mark.asyncio
    async def test_before_all_launches_configured_browser(self, settings):
        playwright = Mock()
        playwright.chromium.launch = AsyncMock(return_value=AsyncMock())
        playwright.stop = AsyncMock()

        starter = Mock()
        starter.start = AsyncMock(return_value=playwright)

        with patch('bdd_e2e.executor.hooks.async_playwright', return_value=starter):
            session = await hooks.before_all(BrowserSession(settings))

        assert session.state == SessionState.BROWSER_LAUNCHED
        playwright.chromium.launch.assert_awaited_once_with(
            headless=True, slow_mo=0, args=['--disable-notifications']
        )

    @pytest.mark.asyncio
    async def test_before_all_failure_is_fatal(self, settings):
        playwright = Mock()
        playwright.chromium.launch = AsyncMock(side_effect=RuntimeError('executable missing'))
        playwright.stop = AsyncMock()

        starter = Mock()
        starter.start = AsyncMock(return_value=playwright)

        session = BrowserSession(settings)
        with patch('bdd_e2e.executor.hooks.async_playwright', return_value=starter):
            with pytest.raises(RuntimeError, match='executable missing'):
                await hooks.before_all(session)

        playwright.stop.assert_awaited_once()
        assert session.state == SessionState.NO_BROWSER

    @pytest.mark.asyncio
    async def test_after_all_closes_browser(self, session):
        browser = session.browser
        session.playwright = Mock(stop=AsyncMock())
        playwright = session.playwright

        await hooks.after_all(session)

        browser.close.assert_awaited_once()
        playwright.stop.assert_awaited_once()
        assert session.state == SessionState.BROWSER_CLOSED
        assert session.browser is None

    @pytest.mark.asyncio
    async def test_new_context_requires_browser(self, settings):
        with pytest.raises(ExecutionError):
            await BrowserSession(settings).new_context()

    @pytest.mark.asyncio
    async def test_new_context_options(self, session, settings):
        await session.new_context()

        session.browser.new_context.assert_awaited_once_with(
            viewport={'width': 1280, 'height': 720}, ignore_https_errors=True, locale='en-US'
        )


class TestScenarioHooks:
    """Test before_scenario / after_scenario"""

    @pytest.mark.asyncio
    async def test_before_scenario_prepares_page(self, settings, session, page, tmp_path):
        world = World(settings, session)

        await hooks.before_scenario(world, make_scenario())

        assert world.page is page
        assert world.phase == ScenarioPhase.PAGE_READY
        page.set_default_navigation_timeout.assert_called_once_with(2000)
        page.set_default_timeout.assert_called_once_with(1500)
        page.on.assert_called_once_with('console', world._on_console)
        assert (tmp_path / 'reports' / 'screenshots').is_dir()

    @pytest.mark.asyncio
    async def test_passed_scenario_releases_context(self, settings, session, page):
        world = World(settings, session)
        await hooks.before_scenario(world, make_scenario())
        context = world.context

        screenshot = await hooks.after_scenario(world, make_scenario(), failed=False)

        assert screenshot is None
        page.screenshot.assert_not_awaited()
        context.close.assert_awaited_once()
        assert session.open_contexts == 0
        assert world.phase == ScenarioPhase.TORN_DOWN
        assert world.page is None

    @pytest.mark.asyncio
    async def test_failed_scenario_takes_screenshot(self, settings, session, page):
        world = World(settings, session)
        await hooks.before_scenario(world, make_scenario('Bad login'))

        screenshot = await hooks.after_scenario(world, make_scenario('Bad login'), failed=True)

        assert screenshot.endswith('failed-Bad login.png')
        page.screenshot.assert_awaited_once()
        assert page.screenshot.await_args.kwargs['full_page'] == True
        assert session.open_contexts == 0

    @pytest.mark.asyncio
    async def test_teardown_errors_are_logged_not_raised(self, settings, session, page):
        world = World(settings, session)
        await hooks.before_scenario(world, make_scenario())
        world.context.close.side_effect = RuntimeError('already closed')
        page.screenshot.side_effect = RuntimeError('target closed')

        screenshot = await hooks.after_scenario(world, make_scenario(), failed=True)

        assert screenshot is None
        assert session.open_contexts == 0
        assert world.phase == ScenarioPhase.TORN_DOWN

    @pytest.mark.asyncio
    async def test_contexts_balance_over_many_scenarios(self, settings, session):
        for index in range(5):
            world = World(settings, session, f'scenario {index}')
            await hooks.before_scenario(world, make_scenario(f'scenario {index}'))
            await hooks.after_scenario(world, make_scenario(f'scenario {index}'), failed=index % 2 == 0)

        assert session.contexts_opened == 5
        assert session.open_contexts == 0
